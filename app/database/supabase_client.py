from supabase import create_client, Client
from app.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None
    _warned_no_service_key = False

    @staticmethod
    def _create(key: Optional[str]) -> Client:
        if not settings.supabase_url or not key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be configured")
        return create_client(settings.supabase_url, key)

    @classmethod
    def get_client(cls) -> Client:
        """Anon-key client; row level security applies to every request."""
        if cls._client is None:
            cls._client = cls._create(settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """
        Service-role client for the deployment worker and the n8n callback,
        which act without a user session. Falls back to the anon client.
        """
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = cls._create(settings.supabase_service_role_key)
        if cls._service_client is None and not cls._warned_no_service_key:
            logger.warning("supabase_service_role_key is not set; deployment status writes run under RLS")
            cls._warned_no_service_key = True
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None
        cls._warned_no_service_key = False


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
