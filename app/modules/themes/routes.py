from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.themes.schemas import (
    ThemeCreate, ThemeUpdate, ThemeResponse, ThemeDetail, ThemeValidationResponse
)
from app.modules.themes.service import ThemeService
from app.modules.templates.schemas import GeneratedFile
from app.core.dependencies import get_current_user_id, check_theme_access
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/themes", tags=["themes"])


def get_theme_service(supabase: Client = Depends(get_supabase)) -> ThemeService:
    return ThemeService(supabase)


@router.get("", response_model=List[ThemeResponse])
async def list_themes(
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(get_current_user_id),
    service: ThemeService = Depends(get_theme_service),
):
    """List the current user's themes"""
    return service.list_themes(user_data["id"], status=status, limit=limit, offset=offset)


@router.post("", response_model=ThemeResponse, status_code=201)
async def create_theme(
    theme_data: ThemeCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ThemeService = Depends(get_theme_service)
):
    """Create a new WordPress theme"""
    return service.create_theme(theme_data, user_data["id"])


@router.get("/{theme_id}", response_model=ThemeDetail)
async def get_theme(
    theme_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ThemeService = Depends(get_theme_service),
    supabase: Client = Depends(get_supabase)
):
    """Get theme with its templates and components"""
    check_theme_access(theme_id, user_data, supabase)
    return service.get_theme_detail(theme_id)


@router.put("/{theme_id}", response_model=ThemeResponse)
async def update_theme(
    theme_id: str,
    theme_data: ThemeUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ThemeService = Depends(get_theme_service),
    supabase: Client = Depends(get_supabase)
):
    check_theme_access(theme_id, user_data, supabase)
    return service.update_theme(theme_id, theme_data)


@router.delete("/{theme_id}", status_code=204)
async def delete_theme(
    theme_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ThemeService = Depends(get_theme_service),
    supabase: Client = Depends(get_supabase)
):
    check_theme_access(theme_id, user_data, supabase)
    service.delete_theme(theme_id)
    return None


@router.get("/{theme_id}/export", response_model=List[GeneratedFile])
async def export_theme(
    theme_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ThemeService = Depends(get_theme_service),
    supabase: Client = Depends(get_supabase)
):
    """
    Export the theme as WordPress files.
    Returns a JSON array of {filename, content}; packaging into an archive is left to the caller.
    """
    check_theme_access(theme_id, user_data, supabase)
    return service.export_theme(theme_id)


@router.post("/{theme_id}/validate", response_model=ThemeValidationResponse)
async def validate_theme(
    theme_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ThemeService = Depends(get_theme_service),
    supabase: Client = Depends(get_supabase)
):
    """Lint the theme's functions.php code and its components with php -l"""
    check_theme_access(theme_id, user_data, supabase)
    return service.validate_theme(theme_id)
