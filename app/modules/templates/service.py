from supabase import Client
from app.config import settings
from app.modules.templates.schemas import (
    TemplateCreate, TemplateUpdate, TemplateResponse, TemplateDetail, GeneratedFile
)
from app.modules.components.schemas import ComponentResponse
from app.modules.templates.php_validator import PhpValidator, shared_php_validator
from app.modules.templates.template_generator import generate_template, template_filename
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class TemplateService:
    def __init__(self, supabase: Client, validator: Optional[PhpValidator] = None):
        self.supabase = supabase
        self.validator = validator or shared_php_validator(settings.php_binary, settings.php_lint_on_save)

    def _lint(self, php_code: Optional[str], name: str) -> Optional[List[str]]:
        if not self.validator:
            return None
        _, issues = self.validator.validate(php_code, f"template '{name}'")
        return issues or None

    def create_template(self, template_data: TemplateCreate, user_id: str) -> TemplateResponse:
        """Create a new template under a theme"""
        try:
            insert_data = template_data.model_dump()
            insert_data["user_id"] = user_id
            if template_data.type != "custom":
                insert_data["custom_type"] = None
            if self.validator:
                insert_data["validation_issues"] = self._lint(template_data.php_code, template_data.name)

            result = self.supabase.table("templates").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create template")

            return TemplateResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating template: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_template_by_id(self, template_id: str) -> TemplateResponse:
        """Get template by ID."""
        try:
            result = self.supabase.table("templates").select("*").eq("id", template_id).maybe_single().execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Template not found")
            return TemplateResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_template_detail(self, template_id: str) -> TemplateDetail:
        """Template with its direct components"""
        template = self.get_template_by_id(template_id)
        try:
            components_result = self.supabase.table("components")\
                .select("*")\
                .eq("template_id", template_id)\
                .order("created_at")\
                .execute()
        except Exception as e:
            logger.error(f"Error loading template components: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
        return TemplateDetail(
            **template.model_dump(),
            components=[ComponentResponse(**c) for c in (components_result.data or [])],
        )

    def update_template(self, template_id: str, template_data: TemplateUpdate) -> TemplateResponse:
        """Update template"""
        try:
            update_data: Dict[str, Any] = template_data.model_dump(exclude_unset=True)
            if "name" in update_data and not update_data["name"]:
                del update_data["name"]
            if update_data.get("type") and update_data["type"] != "custom":
                update_data["custom_type"] = None
            if "php_code" in update_data and self.validator:
                name = update_data.get("name") or self.get_template_by_id(template_id).name
                update_data["validation_issues"] = self._lint(update_data["php_code"], name)
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("templates")\
                .update(update_data)\
                .eq("id", template_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Template not found")

            return TemplateResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_templates(
        self,
        user_id: str,
        theme_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[TemplateResponse]:
        """List the user's templates, optionally only those of one theme."""
        try:
            query = self.supabase.table("templates").select("*").eq("user_id", user_id)
            if theme_id:
                query = query.eq("theme_id", theme_id)
            result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
            return [TemplateResponse(**t) for t in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_template(self, template_id: str) -> bool:
        """Delete template; its components go with it through ON DELETE CASCADE."""
        try:
            result = self.supabase.table("templates").delete().eq("id", template_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Template not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def export_template(self, template_id: str) -> List[GeneratedFile]:
        """Render the template and its components into WordPress files"""
        template = self.get_template_detail(template_id)
        files = generate_template(template)
        logger.info(f"Exported template {template_id} as {template_filename(template)} (+{len(files) - 1} components)")
        return files
