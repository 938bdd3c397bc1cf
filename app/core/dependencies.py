"""
Core dependencies for route protection and ownership checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def _fetch_owned_row(
    supabase: Client,
    table: str,
    row_id: str,
    user_id: str,
    columns: str,
    label: str,
) -> Dict[str, Any]:
    """Return the row if it exists and belongs to user_id; 404 if missing, 403 if owned by someone else."""
    result = supabase.table(table)\
        .select(columns)\
        .eq("id", row_id)\
        .maybe_single()\
        .execute()
    if not result or not result.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found"
        )
    if result.data.get("user_id") != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{label} is not owned by the current user"
        )
    return result.data


def check_theme_access(theme_id: str, user_data: dict, supabase: Client) -> dict:
    """Allow if the theme belongs to the user"""
    _fetch_owned_row(supabase, "themes", theme_id, user_data["id"], "id, user_id", "Theme")
    return user_data


def check_template_access(template_id: str, user_data: dict, supabase: Client) -> dict:
    """Allow if the template belongs to the user"""
    _fetch_owned_row(supabase, "templates", template_id, user_data["id"], "id, user_id", "Template")
    return user_data


def check_component_access(component_id: str, user_data: dict, supabase: Client) -> dict:
    """Allow if the component belongs to the user"""
    _fetch_owned_row(supabase, "components", component_id, user_data["id"], "id, user_id", "Component")
    return user_data


def check_wordpress_site_access(site_id: str, user_data: dict, supabase: Client) -> dict:
    """Allow if the WordPress site belongs to the user"""
    _fetch_owned_row(supabase, "wordpress_sites", site_id, user_data["id"], "id, user_id", "WordPress site")
    return user_data


def check_deployment_access(
    deployment_id: str,
    user_data: dict,
    supabase: Client,
    deployment: Optional[Dict[str, Any]] = None
) -> dict:
    """Allow if the user owns the WordPress site the deployment targets. Optional deployment dict avoids duplicate fetch."""
    if deployment is None:
        result = supabase.table("deployments")\
            .select("id, wordpress_site_id")\
            .eq("id", deployment_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Deployment not found"
            )
        deployment = result.data
    site_result = supabase.table("wordpress_sites")\
        .select("id, user_id")\
        .eq("id", deployment["wordpress_site_id"])\
        .maybe_single()\
        .execute()
    if not site_result or not site_result.data or site_result.data.get("user_id") != user_data["id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must own the deployment's WordPress site to access it"
        )
    return user_data
