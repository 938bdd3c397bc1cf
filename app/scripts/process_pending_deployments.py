"""
Process Pending Deployments Script
Picks up the oldest pending deployments and runs them through the n8n workflow.
Can be run manually or from cron.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config import settings
from app.database.supabase_client import get_service_supabase
from app.modules.deployments.deployment_worker import process_pending_deployments
from app.modules.deployments.workflow_trigger import webhook_config_from_settings
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Run one batch of pending deployments"""
    webhook_config = webhook_config_from_settings(settings)
    if not webhook_config.is_configured:
        logger.error("n8n_webhook_url is not set; nothing to trigger")
        sys.exit(1)

    try:
        processed = process_pending_deployments(
            webhook_config,
            supabase=get_service_supabase(),
            limit=settings.pending_deployments_batch_size,
        )
        logger.info(f"Processed {processed} pending deployments")
    except Exception as e:
        logger.error(f"Error processing pending deployments: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
