from pydantic import BaseModel, model_validator
from typing import Optional, Literal
from datetime import datetime

DeploymentStatus = Literal["pending", "in-progress", "completed", "failed"]


class DeploymentCreate(BaseModel):
    wordpress_site_id: str
    theme_id: Optional[str] = None
    template_id: Optional[str] = None

    @model_validator(mode="after")
    def require_theme_or_template(self):
        if not self.theme_id and not self.template_id:
            raise ValueError("Either theme_id or template_id must be set")
        if self.theme_id and self.template_id:
            raise ValueError("Cannot deploy a theme and a template at once")
        return self

    @property
    def deployment_type(self) -> str:
        return "theme" if self.theme_id else "template"


class DeploymentUpdate(BaseModel):
    status: Optional[DeploymentStatus] = None
    logs: Optional[str] = None  # appended to the existing logs


class DeploymentResponse(BaseModel):
    id: str
    wordpress_site_id: str
    deployment_type: str
    theme_id: Optional[str] = None
    template_id: Optional[str] = None
    status: str
    logs: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeploymentLogsResponse(BaseModel):
    deployment_id: str
    logs: str
    status: str
    has_more: bool = False


class DeploymentFileResponse(BaseModel):
    id: Optional[str] = None
    deployment_id: str
    path: str
    type: str
    content: str
    created_at: Optional[datetime] = None


class DeploymentCallbackRequest(BaseModel):
    """Completion report sent back by the n8n workflow"""
    status: Literal["completed", "failed"]
    logs: Optional[str] = None
