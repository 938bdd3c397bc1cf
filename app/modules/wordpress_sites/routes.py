from fastapi import APIRouter, Depends
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.wordpress_sites.schemas import (
    WordPressSiteCreate, WordPressSiteUpdate, WordPressSiteResponse, WordPressSiteConnectionResponse
)
from app.modules.wordpress_sites.service import WordPressSiteService, check_wordpress_connection
from app.core.dependencies import get_current_user_id, check_wordpress_site_access
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/wordpress-sites", tags=["wordpress-sites"])


def get_wordpress_site_service(supabase: Client = Depends(get_supabase)) -> WordPressSiteService:
    return WordPressSiteService(supabase)


@router.get("", response_model=List[WordPressSiteResponse])
async def list_wordpress_sites(
    user_data: Dict = Depends(get_current_user_id),
    service: WordPressSiteService = Depends(get_wordpress_site_service),
):
    return service.list_sites(user_data["id"])


@router.post("", response_model=WordPressSiteResponse, status_code=201)
async def create_wordpress_site(
    site_data: WordPressSiteCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: WordPressSiteService = Depends(get_wordpress_site_service)
):
    """Register a WordPress site; credentials are stored but never returned"""
    return service.create_site(site_data, user_data["id"])


@router.get("/{site_id}", response_model=WordPressSiteResponse)
async def get_wordpress_site(
    site_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: WordPressSiteService = Depends(get_wordpress_site_service),
    supabase: Client = Depends(get_supabase)
):
    check_wordpress_site_access(site_id, user_data, supabase)
    return service.get_site_by_id(site_id)


@router.put("/{site_id}", response_model=WordPressSiteResponse)
async def update_wordpress_site(
    site_id: str,
    site_data: WordPressSiteUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: WordPressSiteService = Depends(get_wordpress_site_service),
    supabase: Client = Depends(get_supabase)
):
    check_wordpress_site_access(site_id, user_data, supabase)
    return service.update_site(site_id, site_data)


@router.delete("/{site_id}", status_code=204)
async def delete_wordpress_site(
    site_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: WordPressSiteService = Depends(get_wordpress_site_service),
    supabase: Client = Depends(get_supabase)
):
    check_wordpress_site_access(site_id, user_data, supabase)
    service.delete_site(site_id)
    return None


@router.get("/{site_id}/check", response_model=WordPressSiteConnectionResponse)
def check_wordpress_site(
    site_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: WordPressSiteService = Depends(get_wordpress_site_service),
    supabase: Client = Depends(get_supabase)
):
    """Check that the site is reachable and exposes the REST API. Sync route: runs in the threadpool."""
    check_wordpress_site_access(site_id, user_data, supabase)
    site = service.get_site_by_id(site_id)
    reachable = check_wordpress_connection(site.url, timeout=settings.wordpress_request_timeout_seconds)
    return WordPressSiteConnectionResponse(site_id=site.id, url=site.url, reachable=reachable)
