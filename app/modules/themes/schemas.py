from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.modules.components.schemas import ComponentResponse
from app.modules.templates.schemas import TemplateResponse, RecordStatus

# Stored slugs must stay PHP-identifier safe once hyphens become underscores
SLUG_PATTERN = r"^[a-z][a-z0-9-]*$"


class ThemeCreate(BaseModel):
    name: str = Field(min_length=3)
    slug: Optional[str] = Field(default=None, pattern=SLUG_PATTERN, max_length=64)
    description: Optional[str] = None
    version: str = "1.0.0"
    author: Optional[str] = None
    author_uri: Optional[str] = None
    theme_uri: Optional[str] = None
    tags: Optional[str] = None  # comma-separated
    thumbnail: Optional[str] = None
    css_styles: Optional[str] = None
    js_scripts: Optional[str] = None
    php_code: Optional[str] = None
    status: RecordStatus = "draft"


class ThemeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    author_uri: Optional[str] = None
    theme_uri: Optional[str] = None
    tags: Optional[str] = None
    thumbnail: Optional[str] = None
    css_styles: Optional[str] = None
    js_scripts: Optional[str] = None
    php_code: Optional[str] = None
    status: Optional[RecordStatus] = None


class ThemeResponse(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = "1.0.0"
    author: Optional[str] = None
    author_uri: Optional[str] = None
    theme_uri: Optional[str] = None
    tags: Optional[str] = None
    thumbnail: Optional[str] = None
    css_styles: Optional[str] = None
    js_scripts: Optional[str] = None
    php_code: Optional[str] = None
    status: str = "draft"
    user_id: Optional[str] = None
    validation_issues: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def tag_list(self) -> List[str]:
        return [t.strip() for t in (self.tags or "").split(",") if t.strip()]


class ThemeDetail(ThemeResponse):
    templates: List[TemplateResponse] = Field(default_factory=list)
    components: List[ComponentResponse] = Field(default_factory=list)


class ThemeValidationResponse(BaseModel):
    theme_id: str
    validation_passed: bool
    validation_issues: List[str]
