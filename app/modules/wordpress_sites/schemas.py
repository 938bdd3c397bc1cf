from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


def _strip_trailing_slash(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return value.rstrip("/")


class WordPressSiteCreate(BaseModel):
    name: str = Field(min_length=1)
    url: str
    api_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None

    _normalize_urls = field_validator("url", "api_url")(_strip_trailing_slash)


class WordPressSiteUpdate(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    api_url: Optional[str] = None
    username: Optional[str] = None
    # Empty or missing credentials keep the stored values
    password: Optional[str] = None
    api_key: Optional[str] = None

    _normalize_urls = field_validator("url", "api_url")(_strip_trailing_slash)


class WordPressSiteResponse(BaseModel):
    """Site as returned to clients; password and api_key are never included."""
    id: str
    name: str
    url: str
    api_url: Optional[str] = None
    username: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WordPressSiteConnectionResponse(BaseModel):
    site_id: str
    url: str
    reachable: bool
