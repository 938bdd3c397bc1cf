from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.templates.schemas import (
    TemplateCreate, TemplateUpdate, TemplateResponse, TemplateDetail, GeneratedFile
)
from app.modules.templates.service import TemplateService
from app.core.dependencies import get_current_user_id, check_template_access, check_theme_access
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/templates", tags=["templates"])


def get_template_service(supabase: Client = Depends(get_supabase)) -> TemplateService:
    return TemplateService(supabase)


@router.get("", response_model=List[TemplateResponse])
async def list_templates(
    theme_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    """List the current user's templates, optionally filtered by theme."""
    return service.list_templates(user_data["id"], theme_id=theme_id, limit=limit, offset=offset)


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(
    template_data: TemplateCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
    supabase: Client = Depends(get_supabase)
):
    """Create a WordPress template inside one of the user's themes"""
    check_theme_access(template_data.theme_id, user_data, supabase)
    return service.create_template(template_data, user_data["id"])


@router.get("/{template_id}", response_model=TemplateDetail)
async def get_template(
    template_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
    supabase: Client = Depends(get_supabase)
):
    """Get template with its components."""
    check_template_access(template_id, user_data, supabase)
    return service.get_template_detail(template_id)


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    template_data: TemplateUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
    supabase: Client = Depends(get_supabase)
):
    """Update template; moving it to another theme requires owning that theme too"""
    check_template_access(template_id, user_data, supabase)
    if template_data.theme_id:
        check_theme_access(template_data.theme_id, user_data, supabase)
    return service.update_template(template_id, template_data)


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
    supabase: Client = Depends(get_supabase)
):
    check_template_access(template_id, user_data, supabase)
    service.delete_template(template_id)
    return None


@router.get("/{template_id}/export", response_model=List[GeneratedFile])
async def export_template(
    template_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
    supabase: Client = Depends(get_supabase)
):
    """Export the template file and its component files as a JSON array of {filename, content}"""
    check_template_access(template_id, user_data, supabase)
    return service.export_template(template_id)
