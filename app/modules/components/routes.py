from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.components.schemas import ComponentCreate, ComponentUpdate, ComponentResponse
from app.modules.components.service import ComponentService
from app.core.dependencies import (
    get_current_user_id, check_component_access, check_theme_access, check_template_access
)
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/components", tags=["components"])


def get_component_service(supabase: Client = Depends(get_supabase)) -> ComponentService:
    return ComponentService(supabase)


@router.get("", response_model=List[ComponentResponse])
async def list_components(
    theme_id: Optional[str] = None,
    template_id: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: ComponentService = Depends(get_component_service),
):
    return service.list_components(user_data["id"], theme_id=theme_id, template_id=template_id)


@router.post("", response_model=ComponentResponse, status_code=201)
async def create_component(
    component_data: ComponentCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ComponentService = Depends(get_component_service),
    supabase: Client = Depends(get_supabase)
):
    """Create a component under one of the user's themes or templates"""
    if component_data.theme_id:
        check_theme_access(component_data.theme_id, user_data, supabase)
    else:
        check_template_access(component_data.template_id, user_data, supabase)
    return service.create_component(component_data, user_data["id"])


@router.get("/{component_id}", response_model=ComponentResponse)
async def get_component(
    component_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ComponentService = Depends(get_component_service),
    supabase: Client = Depends(get_supabase)
):
    check_component_access(component_id, user_data, supabase)
    return service.get_component_by_id(component_id)


@router.put("/{component_id}", response_model=ComponentResponse)
async def update_component(
    component_id: str,
    component_data: ComponentUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ComponentService = Depends(get_component_service),
    supabase: Client = Depends(get_supabase)
):
    check_component_access(component_id, user_data, supabase)
    return service.update_component(component_id, component_data)


@router.delete("/{component_id}", status_code=204)
async def delete_component(
    component_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ComponentService = Depends(get_component_service),
    supabase: Client = Depends(get_supabase)
):
    check_component_access(component_id, user_data, supabase)
    service.delete_component(component_id)
    return None
