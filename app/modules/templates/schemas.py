from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime
from app.modules.components.schemas import ComponentResponse

TemplateType = Literal["page", "single", "archive", "home", "search", "404", "custom"]
RecordStatus = Literal["draft", "published"]


class TemplateCreate(BaseModel):
    name: str = Field(min_length=3)
    description: Optional[str] = None
    type: TemplateType = "page"
    custom_type: Optional[str] = None  # only meaningful when type == "custom"
    theme_id: str
    php_code: Optional[str] = None
    html_content: Optional[str] = None
    css_styles: Optional[str] = None
    js_scripts: Optional[str] = None
    status: RecordStatus = "draft"


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = None
    type: Optional[TemplateType] = None
    custom_type: Optional[str] = None
    theme_id: Optional[str] = None
    php_code: Optional[str] = None
    html_content: Optional[str] = None
    css_styles: Optional[str] = None
    js_scripts: Optional[str] = None
    status: Optional[RecordStatus] = None


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    # Stored rows may predate the enum; the generator maps unknown types to template-parts/
    type: str = "page"
    custom_type: Optional[str] = None
    theme_id: Optional[str] = None
    user_id: Optional[str] = None
    php_code: Optional[str] = None
    html_content: Optional[str] = None
    css_styles: Optional[str] = None
    js_scripts: Optional[str] = None
    status: str = "draft"
    validation_issues: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TemplateDetail(TemplateResponse):
    components: List[ComponentResponse] = Field(default_factory=list)


class GeneratedFile(BaseModel):
    """One rendered WordPress file: a path relative to the theme root and its text."""
    filename: str
    content: str
