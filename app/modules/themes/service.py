from supabase import Client
from app.config import settings
from app.modules.themes.schemas import (
    ThemeCreate, ThemeUpdate, ThemeResponse, ThemeDetail, ThemeValidationResponse
)
from app.modules.templates.schemas import TemplateResponse, GeneratedFile
from app.modules.components.schemas import ComponentResponse
from app.modules.templates.php_snippets import slugify
from app.modules.templates.php_validator import PhpValidator, shared_php_validator
from app.modules.themes.theme_generator import generate_theme, generated_function_names
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import hashlib
import re
import logging

logger = logging.getLogger(__name__)

_UNSAFE_SLUG_CHARS = re.compile(r"[^a-z0-9-]")
SLUG_MAX_LENGTH = 64
# Room left for the "theme-" prefix and a "-<hash>" suffix
_SLUG_STEM_LENGTH = SLUG_MAX_LENGTH - len("theme-") - 9


def derive_slug(name: str) -> str:
    """
    Slug stored at creation when none is supplied: the name slug, reduced to [a-z0-9-].

    When characters had to be dropped or the slug cut short, a short hash of
    the name is appended so names that differ only in punctuation or
    non-ASCII letters keep distinct slugs (and distinct PHP function prefixes).
    """
    base = slugify(name)
    slug = _UNSAFE_SLUG_CHARS.sub("", base).strip("-")
    if slug != base or len(slug) > _SLUG_STEM_LENGTH:
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
        slug = "-".join(part for part in (slug[:_SLUG_STEM_LENGTH].strip("-"), digest) if part)
    if not slug[0].isalpha():
        slug = f"theme-{slug}"
    return slug


class ThemeService:
    def __init__(self, supabase: Client, validator: Optional[PhpValidator] = None):
        self.supabase = supabase
        self.validator = validator or shared_php_validator(settings.php_binary, settings.php_lint_on_save)

    def _lint_theme(self, theme: ThemeResponse) -> List[str]:
        if not self.validator:
            return []
        _, issues = self.validator.validate(
            theme.php_code,
            "functions.php",
            php_mode=True,
            reserved_functions=generated_function_names(theme),
        )
        return issues

    def create_theme(self, theme_data: ThemeCreate, user_id: str) -> ThemeResponse:
        """Create a new theme; the slug is fixed at creation so generated PHP names never drift on rename"""
        try:
            insert_data = theme_data.model_dump()
            insert_data["slug"] = theme_data.slug or derive_slug(theme_data.name)
            insert_data["user_id"] = user_id

            existing = self.supabase.table("themes")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("slug", insert_data["slug"])\
                .execute()
            if existing.data:
                raise HTTPException(
                    status_code=409,
                    detail=f"A theme with slug '{insert_data['slug']}' already exists"
                )

            if self.validator:
                draft = ThemeResponse(id="", **insert_data)
                insert_data["validation_issues"] = self._lint_theme(draft) or None

            result = self.supabase.table("themes").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create theme")

            logger.info(f"Created theme {result.data[0]['id']} ({insert_data['slug']})")
            return ThemeResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating theme: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_theme_by_id(self, theme_id: str) -> ThemeResponse:
        """Get theme by ID"""
        try:
            result = self.supabase.table("themes")\
                .select("*")\
                .eq("id", theme_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Theme not found")

            return ThemeResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting theme: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_theme_detail(self, theme_id: str) -> ThemeDetail:
        """Theme with its templates and its theme-level components (template components excluded)"""
        theme = self.get_theme_by_id(theme_id)
        try:
            templates_result = self.supabase.table("templates")\
                .select("*")\
                .eq("theme_id", theme_id)\
                .order("created_at")\
                .execute()
            components_result = self.supabase.table("components")\
                .select("*")\
                .eq("theme_id", theme_id)\
                .order("created_at")\
                .execute()
        except Exception as e:
            logger.error(f"Error loading theme relations: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

        return ThemeDetail(
            **theme.model_dump(),
            templates=[TemplateResponse(**t) for t in (templates_result.data or [])],
            components=[ComponentResponse(**c) for c in (components_result.data or [])],
        )

    def update_theme(self, theme_id: str, theme_data: ThemeUpdate) -> ThemeResponse:
        """Update theme; PHP is re-linted whenever it changes"""
        try:
            update_data: Dict[str, Any] = theme_data.model_dump(exclude_unset=True)
            if "name" in update_data and not update_data["name"]:
                del update_data["name"]
            if "php_code" in update_data and self.validator:
                current = self.get_theme_by_id(theme_id)
                merged = current.model_copy(update=update_data)
                update_data["validation_issues"] = self._lint_theme(merged) or None
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("themes")\
                .update(update_data)\
                .eq("id", theme_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Theme not found")

            return ThemeResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating theme: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_themes(
        self,
        user_id: str,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ThemeResponse]:
        """List the user's themes, newest first"""
        try:
            query = self.supabase.table("themes").select("*").eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
            return [ThemeResponse(**t) for t in result.data]
        except Exception as e:
            logger.error(f"Error listing themes: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_theme(self, theme_id: str) -> bool:
        """Delete theme; templates and components go with it through ON DELETE CASCADE"""
        try:
            result = self.supabase.table("themes").delete().eq("id", theme_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Theme not found")
            logger.info(f"Deleted theme {theme_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting theme: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def export_theme(self, theme_id: str) -> List[GeneratedFile]:
        """Render the theme into WordPress files"""
        theme = self.get_theme_detail(theme_id)
        files = generate_theme(theme)
        logger.info(f"Exported theme {theme_id}: {len(files)} files")
        return files

    def validate_theme(self, theme_id: str) -> ThemeValidationResponse:
        """Re-lint the stored PHP of the theme and its components and store the issues"""
        if not self.validator:
            raise HTTPException(status_code=503, detail="PHP validation is not available on this server")
        theme = self.get_theme_detail(theme_id)
        issues = self._lint_theme(theme)
        for component in theme.components:
            _, component_issues = self.validator.validate(
                component.php_code, f"component '{component.name}'"
            )
            issues.extend(component_issues)
        try:
            self.supabase.table("themes")\
                .update({"validation_issues": issues or None})\
                .eq("id", theme_id)\
                .execute()
        except Exception as e:
            logger.warning(f"Failed to store validation issues for theme {theme_id}: {e}")
        return ThemeValidationResponse(
            theme_id=theme_id,
            validation_passed=len(issues) == 0,
            validation_issues=issues,
        )
