from supabase import Client
from app.modules.deployments.schemas import (
    DeploymentCreate, DeploymentUpdate, DeploymentResponse, DeploymentFileResponse
)
from app.modules.deployments.status import PENDING, can_transition, is_terminal
from app.modules.templates.schemas import GeneratedFile
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import posixpath
import logging

logger = logging.getLogger(__name__)

WRITE_ATTEMPTS = 3


def _join_logs(existing: Optional[str], new: Optional[str]) -> Optional[str]:
    if not new:
        return existing
    if not existing:
        return new
    return f"{existing}\n{new}"


def file_type(path: str) -> str:
    """Extension without the dot: style.css -> css"""
    return posixpath.splitext(path)[1].lstrip(".") or "txt"


class DeploymentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_deployment(self, deployment_data: DeploymentCreate, user_id: str) -> DeploymentResponse:
        """Create a new pending deployment"""
        try:
            result = self.supabase.table("deployments").insert({
                "wordpress_site_id": deployment_data.wordpress_site_id,
                "deployment_type": deployment_data.deployment_type,
                "theme_id": deployment_data.theme_id,
                "template_id": deployment_data.template_id,
                "user_id": user_id,
                "status": PENDING,
                "logs": None,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create deployment")

            return DeploymentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating deployment: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def _get_row(self, deployment_id: str) -> dict:
        result = self.supabase.table("deployments")\
            .select("*")\
            .eq("id", deployment_id)\
            .maybe_single()\
            .execute()

        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Deployment not found")
        return result.data

    def get_deployment_by_id(self, deployment_id: str) -> DeploymentResponse:
        """Get deployment by ID"""
        try:
            return DeploymentResponse(**self._get_row(deployment_id))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting deployment: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def _write_if_unchanged(self, deployment_id: str, row: dict, expected_status: str, update_data: dict) -> Optional[dict]:
        """
        Conditional write: applies only while the row still has expected_status
        and the updated_at that was read. Returns the new row, or None when
        another writer got there first.
        """
        query = self.supabase.table("deployments")\
            .update(update_data)\
            .eq("id", deployment_id)\
            .eq("status", expected_status)
        if row.get("updated_at"):
            query = query.eq("updated_at", row["updated_at"])
        else:
            query = query.is_("updated_at", "null")
        result = query.execute()
        return result.data[0] if result.data else None

    def _guarded_update(self, deployment_id: str, expected_status: Optional[str], build_update) -> dict:
        """
        Read, build the update from the current row, write conditionally.

        A write lost only to a concurrent log append (status unchanged) is
        retried against the fresh row so no log text is dropped. A changed
        status raises 409.
        """
        for _ in range(WRITE_ATTEMPTS):
            row = self._get_row(deployment_id)
            current = DeploymentResponse(**row)
            expected = expected_status or current.status
            if current.status != expected:
                raise HTTPException(
                    status_code=409,
                    detail=f"Deployment is '{current.status}', expected '{expected}'"
                )
            written = self._write_if_unchanged(deployment_id, row, expected, build_update(current, expected))
            if written is not None:
                return written
        raise HTTPException(
            status_code=409,
            detail="Deployment status was changed by another request"
        )

    def update_deployment_status(
        self,
        deployment_id: str,
        status: str,
        logs: Optional[str] = None,
        expected_status: Optional[str] = None
    ) -> DeploymentResponse:
        """
        Move a deployment to a new status, appending logs.

        The write only applies while the row still has expected_status (the
        current status when omitted). If another writer changed it first, or
        the transition is not allowed, raises 409.
        """
        def build_update(current: DeploymentResponse, expected: str) -> dict:
            if not can_transition(expected, status):
                raise HTTPException(
                    status_code=409,
                    detail=f"Cannot move deployment from '{expected}' to '{status}'"
                )
            now = datetime.utcnow().isoformat()
            update_data = {"status": status, "updated_at": now}
            new_logs = _join_logs(current.logs, logs)
            if new_logs != current.logs:
                update_data["logs"] = new_logs
            if is_terminal(status):
                update_data["completed_at"] = now
            return update_data

        try:
            row = self._guarded_update(deployment_id, expected_status, build_update)
            logger.info(f"Deployment {deployment_id}: -> {status}")
            return DeploymentResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating deployment status: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def append_logs(self, deployment_id: str, logs: str, expected_status: Optional[str] = None) -> DeploymentResponse:
        """Append log text without changing status; guarded like update_deployment_status"""
        def build_update(current: DeploymentResponse, expected: str) -> dict:
            return {
                "logs": _join_logs(current.logs, logs),
                "updated_at": datetime.utcnow().isoformat(),
            }

        try:
            return DeploymentResponse(**self._guarded_update(deployment_id, expected_status, build_update))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error appending deployment logs: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_deployment(self, deployment_id: str, deployment_data: DeploymentUpdate) -> DeploymentResponse:
        """Manual update by the owner: status change (with logs) or log append"""
        if deployment_data.status:
            return self.update_deployment_status(deployment_id, deployment_data.status, logs=deployment_data.logs)
        if deployment_data.logs:
            return self.append_logs(deployment_id, deployment_data.logs)
        return self.get_deployment_by_id(deployment_id)

    def list_deployments(
        self,
        user_id: str,
        wordpress_site_id: Optional[str] = None,
        theme_id: Optional[str] = None,
        template_id: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[DeploymentResponse]:
        """List the user's deployments, newest first"""
        try:
            query = self.supabase.table("deployments").select("*").eq("user_id", user_id)
            if wordpress_site_id:
                query = query.eq("wordpress_site_id", wordpress_site_id)
            if theme_id:
                query = query.eq("theme_id", theme_id)
            if template_id:
                query = query.eq("template_id", template_id)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            return [DeploymentResponse(**d) for d in result.data]
        except Exception as e:
            logger.error(f"Error listing deployments: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_pending(self, limit: int = 10) -> List[DeploymentResponse]:
        """Oldest pending deployments first"""
        try:
            result = self.supabase.table("deployments")\
                .select("*")\
                .eq("status", PENDING)\
                .order("created_at")\
                .limit(limit)\
                .execute()
            return [DeploymentResponse(**d) for d in result.data]
        except Exception as e:
            logger.error(f"Error listing pending deployments: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_deployment(self, deployment_id: str) -> bool:
        try:
            result = self.supabase.table("deployments").delete().eq("id", deployment_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Deployment not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting deployment: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def record_files(self, deployment_id: str, files: List[GeneratedFile]) -> int:
        """Store the rendered files of a deployment run"""
        if not files:
            return 0
        try:
            rows = [
                {
                    "deployment_id": deployment_id,
                    "path": f.filename,
                    "type": file_type(f.filename),
                    "content": f.content,
                }
                for f in files
            ]
            result = self.supabase.table("deployment_files").insert(rows).execute()
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error recording deployment files: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_files(self, deployment_id: str) -> List[DeploymentFileResponse]:
        try:
            result = self.supabase.table("deployment_files")\
                .select("*")\
                .eq("deployment_id", deployment_id)\
                .order("created_at")\
                .execute()
            return [DeploymentFileResponse(**f) for f in result.data]
        except Exception as e:
            logger.error(f"Error listing deployment files: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
