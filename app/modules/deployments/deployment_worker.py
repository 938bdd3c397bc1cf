import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from app.modules.deployments.service import DeploymentService
from app.modules.deployments.status import PENDING, IN_PROGRESS, FAILED
from app.modules.deployments.schemas import DeploymentResponse
from app.modules.deployments.workflow_trigger import (
    WebhookConfig, WorkflowTrigger, WorkflowTriggerError, build_theme_payload, build_template_payload
)
from app.modules.themes.service import ThemeService
from app.modules.themes.theme_generator import generate_theme
from app.modules.templates.service import TemplateService
from app.modules.templates.template_generator import generate_template
from app.modules.templates.schemas import GeneratedFile
from app.modules.wordpress_sites.service import WordPressSiteService

logger = logging.getLogger(__name__)

TRIGGER_ACCEPTED_LOG = "Workflow trigger accepted; waiting for confirmation"


def _render(deployment: DeploymentResponse, client: Client) -> Tuple[str, List[GeneratedFile], dict]:
    """Render the deployed theme or template. Returns (name, files, webhook payload)."""
    site = WordPressSiteService(client).get_site_by_id(deployment.wordpress_site_id)
    if deployment.deployment_type == "theme":
        theme = ThemeService(client).get_theme_detail(deployment.theme_id)
        return theme.name, generate_theme(theme), build_theme_payload(deployment, site, theme)
    template = TemplateService(client).get_template_detail(deployment.template_id)
    return template.name, generate_template(template), build_template_payload(deployment, site, template)


def _files_log(kind: str, name: str, files: List[GeneratedFile]) -> str:
    lines = [f"Generated {len(files)} files for {kind} {name}:"]
    lines.extend(f"- {f.filename}" for f in files)
    return "\n".join(lines)


def run_deployment(
    deployment_id: str,
    webhook_config: WebhookConfig,
    supabase: Optional[Client] = None,
    trigger: Optional[WorkflowTrigger] = None,
    raise_trigger_errors: bool = False
) -> Optional[DeploymentResponse]:
    """
    Deployment worker: render files, store them, trigger the n8n workflow.

    Runs after the HTTP response (BackgroundTasks) or from the pending
    deployments script. Uses the service-role client when none is given so
    status writes are not blocked by RLS. On success the deployment stays
    in-progress until the workflow reports back through the callback.
    With raise_trigger_errors a rejected trigger is re-raised after the
    deployment is marked failed, for callers that answer synchronously.
    """
    if supabase is None:
        from app.database.supabase_client import get_service_supabase
        supabase = get_service_supabase()
    deployment_service = DeploymentService(supabase)
    trigger = trigger or WorkflowTrigger(webhook_config)

    deployment = deployment_service.get_deployment_by_id(deployment_id)
    if deployment.status != PENDING:
        logger.info(f"Deployment {deployment_id} is '{deployment.status}', skipping")
        return deployment

    kind = deployment.deployment_type
    try:
        deployment_service.update_deployment_status(
            deployment_id,
            IN_PROGRESS,
            logs=f"Starting {kind} deployment...",
            expected_status=PENDING
        )
    except HTTPException as e:
        if e.status_code == 409:
            # Another worker picked it up first
            logger.info(f"Deployment {deployment_id} already claimed: {e.detail}")
            return None
        raise

    try:
        name, files, payload = _render(deployment, supabase)
        deployment_service.record_files(deployment_id, files)
        deployment_service.append_logs(deployment_id, _files_log(kind, name, files), expected_status=IN_PROGRESS)
        trigger.trigger(payload)
    except Exception as e:
        message = e.detail if isinstance(e, HTTPException) else str(e)
        logger.error(f"Deployment {deployment_id} failed: {message}")
        failed = None
        try:
            failed = deployment_service.update_deployment_status(
                deployment_id,
                FAILED,
                logs=f"Deployment failed: {message}",
                expected_status=IN_PROGRESS
            )
        except HTTPException as update_error:
            logger.error(f"Failed to mark deployment {deployment_id} as failed: {update_error.detail}")
        if raise_trigger_errors and isinstance(e, WorkflowTriggerError):
            raise
        return failed

    logger.info(f"Deployment {deployment_id}: workflow triggered with {len(files)} files")
    try:
        return deployment_service.append_logs(deployment_id, TRIGGER_ACCEPTED_LOG, expected_status=IN_PROGRESS)
    except HTTPException as e:
        if e.status_code != 409:
            raise
        # The workflow already reported back through the callback
        current = deployment_service.get_deployment_by_id(deployment_id)
        logger.info(f"Deployment {deployment_id} was moved to '{current.status}' while the trigger was running")
        return current


def process_pending_deployments(
    webhook_config: WebhookConfig,
    supabase: Optional[Client] = None,
    limit: int = 10
) -> int:
    """Run up to `limit` pending deployments, oldest first. Returns how many were picked up."""
    if supabase is None:
        from app.database.supabase_client import get_service_supabase
        supabase = get_service_supabase()
    pending = DeploymentService(supabase).list_pending(limit)
    logger.info(f"Found {len(pending)} pending deployments")

    trigger = WorkflowTrigger(webhook_config)
    processed = 0
    for deployment in pending:
        try:
            result = run_deployment(deployment.id, webhook_config, supabase=supabase, trigger=trigger)
        except Exception as e:
            logger.error(f"Error processing deployment {deployment.id}: {str(e)}")
            continue
        if result is not None:
            processed += 1
    return processed
