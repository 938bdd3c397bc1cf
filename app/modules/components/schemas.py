from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime


class ComponentCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    type: str = "custom"  # header | footer | sidebar | anything else
    selector: Optional[str] = None
    php_code: Optional[str] = None
    theme_id: Optional[str] = None
    template_id: Optional[str] = None

    @model_validator(mode="after")
    def require_theme_or_template(self):
        if not self.theme_id and not self.template_id:
            raise ValueError("Either theme_id or template_id must be set")
        if self.theme_id and self.template_id:
            raise ValueError("Cannot set both theme_id and template_id")
        return self


class ComponentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    type: Optional[str] = None
    selector: Optional[str] = None
    php_code: Optional[str] = None


class ComponentResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    type: str = "custom"
    selector: Optional[str] = None
    php_code: Optional[str] = None
    theme_id: Optional[str] = None
    template_id: Optional[str] = None
    user_id: Optional[str] = None
    validation_issues: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
