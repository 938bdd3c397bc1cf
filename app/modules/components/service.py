from supabase import Client
from app.config import settings
from app.modules.components.schemas import ComponentCreate, ComponentUpdate, ComponentResponse
from app.modules.templates.php_validator import PhpValidator, shared_php_validator
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class ComponentService:
    def __init__(self, supabase: Client, validator: Optional[PhpValidator] = None):
        self.supabase = supabase
        self.validator = validator or shared_php_validator(settings.php_binary, settings.php_lint_on_save)

    def _lint(self, php_code: Optional[str], name: str) -> Optional[List[str]]:
        if not self.validator:
            return None
        _, issues = self.validator.validate(php_code, f"component '{name}'")
        return issues or None

    def create_component(self, component_data: ComponentCreate, user_id: str) -> ComponentResponse:
        try:
            insert_data = component_data.model_dump()
            insert_data["user_id"] = user_id
            if self.validator:
                insert_data["validation_issues"] = self._lint(component_data.php_code, component_data.name)

            result = self.supabase.table("components").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create component")

            return ComponentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating component: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_component_by_id(self, component_id: str) -> ComponentResponse:
        try:
            result = self.supabase.table("components")\
                .select("*")\
                .eq("id", component_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Component not found")
            return ComponentResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting component: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_component(self, component_id: str, component_data: ComponentUpdate) -> ComponentResponse:
        try:
            update_data: Dict[str, Any] = component_data.model_dump(exclude_unset=True)
            if "php_code" in update_data and self.validator:
                name = update_data.get("name") or self.get_component_by_id(component_id).name
                update_data["validation_issues"] = self._lint(update_data["php_code"], name)
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("components")\
                .update(update_data)\
                .eq("id", component_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Component not found")

            return ComponentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating component: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_components(
        self,
        user_id: str,
        theme_id: Optional[str] = None,
        template_id: Optional[str] = None,
    ) -> List[ComponentResponse]:
        """List the user's components, optionally scoped to one theme or one template"""
        try:
            query = self.supabase.table("components").select("*").eq("user_id", user_id)
            if theme_id:
                query = query.eq("theme_id", theme_id)
            if template_id:
                query = query.eq("template_id", template_id)
            result = query.order("created_at").execute()
            return [ComponentResponse(**c) for c in result.data]
        except Exception as e:
            logger.error(f"Error listing components: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_component(self, component_id: str) -> bool:
        try:
            result = self.supabase.table("components").delete().eq("id", component_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Component not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting component: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
