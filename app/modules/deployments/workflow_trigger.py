"""
Client for the n8n workflow that pushes generated files to a WordPress site.

The webhook location and credentials come in through WebhookConfig; the
trigger never reads the environment itself.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx
import logging

from app.config import Settings
from app.modules.deployments.schemas import DeploymentResponse
from app.modules.themes.schemas import ThemeResponse
from app.modules.templates.schemas import TemplateResponse
from app.modules.wordpress_sites.schemas import WordPressSiteResponse

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-N8N-API-KEY"


class WorkflowTriggerError(Exception):
    """The workflow could not be triggered (not configured, network error or non-2xx answer)."""


@dataclass(frozen=True)
class WebhookConfig:
    url: Optional[str]
    api_key: Optional[str] = None
    timeout_seconds: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


def webhook_config_from_settings(settings: Settings) -> WebhookConfig:
    return WebhookConfig(
        url=settings.n8n_webhook_url,
        api_key=settings.n8n_api_key,
        timeout_seconds=settings.n8n_timeout_seconds,
    )


def _base_payload(deployment: DeploymentResponse, site: WordPressSiteResponse) -> Dict[str, Any]:
    return {
        "deploymentId": deployment.id,
        "wordpressSiteId": site.id,
        "wordpressSiteUrl": site.url,
        "wordpressSiteApiUrl": site.api_url,
        "deploymentType": deployment.deployment_type,
    }


def build_theme_payload(
    deployment: DeploymentResponse,
    site: WordPressSiteResponse,
    theme: ThemeResponse
) -> Dict[str, Any]:
    payload = _base_payload(deployment, site)
    payload.update({"themeId": theme.id, "themeName": theme.name})
    return payload


def build_template_payload(
    deployment: DeploymentResponse,
    site: WordPressSiteResponse,
    template: TemplateResponse
) -> Dict[str, Any]:
    payload = _base_payload(deployment, site)
    payload.update({
        "templateId": template.id,
        "templateName": template.name,
        "templateType": template.type,
    })
    return payload


class WorkflowTrigger:
    def __init__(self, config: WebhookConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers[API_KEY_HEADER] = self.config.api_key
        return headers

    def trigger(self, payload: Dict[str, Any]) -> Optional[Any]:
        """
        POST the payload to the webhook.

        Returns the decoded JSON answer, or None when the body is not JSON.
        Raises WorkflowTriggerError on anything but a 2xx answer.
        """
        if not self.config.is_configured:
            raise WorkflowTriggerError("n8n webhook URL is not configured")

        deployment_id = payload.get("deploymentId")
        try:
            with httpx.Client(timeout=self.config.timeout_seconds, transport=self._transport) as client:
                response = client.post(self.config.url, json=payload, headers=self._headers())
                response.raise_for_status()
        except httpx.TimeoutException:
            raise WorkflowTriggerError(
                f"n8n webhook timed out after {self.config.timeout_seconds}s"
            )
        except httpx.HTTPStatusError as e:
            raise WorkflowTriggerError(
                f"n8n webhook returned HTTP {e.response.status_code}: {e.response.text[:500]}"
            )
        except httpx.HTTPError as e:
            raise WorkflowTriggerError(f"Could not reach n8n webhook: {e}")

        logger.info(f"Triggered n8n workflow for deployment {deployment_id}")
        try:
            return response.json()
        except ValueError:
            return None
