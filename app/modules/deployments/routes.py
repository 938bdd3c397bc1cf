from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Header, Response
from fastapi.concurrency import run_in_threadpool
from app.config import settings
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.deployments.schemas import (
    DeploymentCreate, DeploymentUpdate, DeploymentResponse, DeploymentLogsResponse,
    DeploymentFileResponse, DeploymentCallbackRequest
)
from app.modules.deployments.service import DeploymentService
from app.modules.deployments.status import PENDING, IN_PROGRESS, is_terminal
from app.modules.deployments.deployment_worker import run_deployment
from app.modules.deployments.workflow_trigger import WebhookConfig, webhook_config_from_settings
from app.core.dependencies import (
    get_current_user_id, check_deployment_access, check_wordpress_site_access,
    check_theme_access, check_template_access
)
from supabase import Client
from typing import List, Optional, Dict
import hmac
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deployments", tags=["deployments"])


def get_deployment_service(supabase: Client = Depends(get_supabase)) -> DeploymentService:
    return DeploymentService(supabase)


def get_webhook_config() -> WebhookConfig:
    return webhook_config_from_settings(settings)


@router.get("", response_model=List[DeploymentResponse])
async def list_deployments(
    wordpress_site_id: Optional[str] = None,
    theme_id: Optional[str] = None,
    template_id: Optional[str] = None,
    status: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
):
    return service.list_deployments(
        user_data["id"],
        wordpress_site_id=wordpress_site_id,
        theme_id=theme_id,
        template_id=template_id,
        status=status,
    )


@router.post("", response_model=DeploymentResponse, status_code=201)
async def create_deployment(
    deployment_data: DeploymentCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
    supabase: Client = Depends(get_supabase)
):
    """Create a pending deployment of one of the user's themes or templates to one of the user's sites"""
    check_wordpress_site_access(deployment_data.wordpress_site_id, user_data, supabase)
    if deployment_data.theme_id:
        check_theme_access(deployment_data.theme_id, user_data, supabase)
    else:
        check_template_access(deployment_data.template_id, user_data, supabase)
    return service.create_deployment(deployment_data, user_data["id"])


@router.get("/{deployment_id}", response_model=DeploymentResponse)
async def get_deployment(
    deployment_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
    supabase: Client = Depends(get_supabase)
):
    check_deployment_access(deployment_id, user_data, supabase)
    return service.get_deployment_by_id(deployment_id)


@router.put("/{deployment_id}", response_model=DeploymentResponse)
async def update_deployment(
    deployment_id: str,
    deployment_data: DeploymentUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
    supabase: Client = Depends(get_supabase)
):
    """Change status (only along allowed transitions) and/or append logs"""
    check_deployment_access(deployment_id, user_data, supabase)
    return service.update_deployment(deployment_id, deployment_data)


@router.delete("/{deployment_id}", status_code=204)
async def delete_deployment(
    deployment_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
    supabase: Client = Depends(get_supabase)
):
    check_deployment_access(deployment_id, user_data, supabase)
    service.delete_deployment(deployment_id)
    return None


@router.post("/{deployment_id}/deploy", response_model=DeploymentResponse, status_code=202)
async def start_deployment(
    deployment_id: str,
    background_tasks: BackgroundTasks,
    response: Response,
    wait: bool = False,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
    webhook_config: WebhookConfig = Depends(get_webhook_config),
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
):
    """
    Start a pending deployment.
    Rendering and the n8n trigger run in the background; poll /logs for progress.
    With wait=true they run before responding (200), and a rejected trigger answers 502.
    """
    check_deployment_access(deployment_id, user_data, supabase)
    deployment = service.get_deployment_by_id(deployment_id)
    if deployment.status != PENDING:
        raise HTTPException(
            status_code=409,
            detail=f"Only pending deployments can be started (current status '{deployment.status}')"
        )
    if not webhook_config.is_configured:
        raise HTTPException(status_code=503, detail="n8n webhook is not configured")

    if wait:
        result = await run_in_threadpool(
            run_deployment,
            deployment_id,
            webhook_config,
            supabase=service_supabase,
            raise_trigger_errors=True,
        )
        response.status_code = 200
        return result or service.get_deployment_by_id(deployment_id)

    background_tasks.add_task(
        run_deployment,
        deployment_id,
        webhook_config,
        supabase=service_supabase,
    )
    return deployment


@router.get("/{deployment_id}/logs", response_model=DeploymentLogsResponse)
async def get_deployment_logs(
    deployment_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
    supabase: Client = Depends(get_supabase)
):
    """
    Poll for deployment logs.
    has_more stays true until the deployment reaches a terminal status.
    """
    check_deployment_access(deployment_id, user_data, supabase)
    deployment = service.get_deployment_by_id(deployment_id)
    return DeploymentLogsResponse(
        deployment_id=deployment.id,
        logs=deployment.logs or "",
        status=deployment.status,
        has_more=not is_terminal(deployment.status)
    )


@router.get("/{deployment_id}/files", response_model=List[DeploymentFileResponse])
async def list_deployment_files(
    deployment_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: DeploymentService = Depends(get_deployment_service),
    supabase: Client = Depends(get_supabase)
):
    """Files rendered by the deployment's last run"""
    check_deployment_access(deployment_id, user_data, supabase)
    return service.list_files(deployment_id)


@router.post("/{deployment_id}/callback", response_model=DeploymentResponse)
async def deployment_callback(
    deployment_id: str,
    callback: DeploymentCallbackRequest,
    x_callback_secret: Optional[str] = Header(default=None),
    supabase: Client = Depends(get_service_supabase)
):
    """
    Completion report from the n8n workflow. No bearer token: when
    n8n_callback_secret is set the X-Callback-Secret header must match it.
    """
    expected_secret = settings.n8n_callback_secret
    if expected_secret:
        if not x_callback_secret or not hmac.compare_digest(x_callback_secret, expected_secret):
            raise HTTPException(status_code=401, detail="Invalid callback secret")
    else:
        logger.warning("n8n_callback_secret is not set; accepting unauthenticated deployment callback")

    service = DeploymentService(supabase)
    return service.update_deployment_status(
        deployment_id,
        callback.status,
        logs=callback.logs,
        expected_status=IN_PROGRESS
    )
