from supabase import Client
from app.modules.wordpress_sites.schemas import (
    WordPressSiteCreate, WordPressSiteUpdate, WordPressSiteResponse
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import httpx
import logging

logger = logging.getLogger(__name__)

# Columns safe to send back to clients
PUBLIC_COLUMNS = "id, name, url, api_url, username, user_id, created_at, updated_at"


def _public(row: Dict[str, Any]) -> WordPressSiteResponse:
    return WordPressSiteResponse(**{k: v for k, v in row.items() if k not in ("password", "api_key")})


def check_wordpress_connection(url: str, timeout: float = 10.0, transport: Optional[httpx.BaseTransport] = None) -> bool:
    """True when <url>/wp-json/ answers 200. Network errors count as unreachable."""
    try:
        with httpx.Client(timeout=timeout, transport=transport, follow_redirects=True) as client:
            response = client.get(f"{url.rstrip('/')}/wp-json/")
        return response.status_code == 200
    except httpx.HTTPError as e:
        logger.info(f"WordPress site {url} not reachable: {e}")
        return False


class WordPressSiteService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_site(self, site_data: WordPressSiteCreate, user_id: str) -> WordPressSiteResponse:
        try:
            insert_data = site_data.model_dump()
            insert_data["user_id"] = user_id
            result = self.supabase.table("wordpress_sites").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create WordPress site")
            return _public(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating WordPress site: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_site_by_id(self, site_id: str) -> WordPressSiteResponse:
        try:
            result = self.supabase.table("wordpress_sites")\
                .select(PUBLIC_COLUMNS)\
                .eq("id", site_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="WordPress site not found")
            return _public(result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting WordPress site: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_site(self, site_id: str, site_data: WordPressSiteUpdate) -> WordPressSiteResponse:
        try:
            update_data = site_data.model_dump(exclude_unset=True)
            for secret in ("password", "api_key"):
                if not update_data.get(secret):
                    update_data.pop(secret, None)
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("wordpress_sites")\
                .update(update_data)\
                .eq("id", site_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="WordPress site not found")
            return _public(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating WordPress site: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_sites(self, user_id: str) -> List[WordPressSiteResponse]:
        try:
            result = self.supabase.table("wordpress_sites")\
                .select(PUBLIC_COLUMNS)\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [_public(s) for s in result.data]
        except Exception as e:
            logger.error(f"Error listing WordPress sites: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_site(self, site_id: str) -> bool:
        """Delete site; its deployments go with it through ON DELETE CASCADE"""
        try:
            result = self.supabase.table("wordpress_sites").delete().eq("id", site_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="WordPress site not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting WordPress site: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
