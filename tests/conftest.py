"""Shared pytest fixtures for the theme builder test suite.

Provides reusable fixtures for:
- An in-memory stand-in for the Supabase query builder
- Sample themes, templates, components, sites and deployments
- A FastAPI TestClient with auth and database dependencies overridden
"""

from __future__ import annotations

import copy
import itertools
import uuid
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.modules.components.schemas import ComponentResponse
from app.modules.templates.schemas import TemplateDetail, TemplateResponse
from app.modules.themes.schemas import ThemeDetail


# ---------------------------------------------------------------------------
# In-memory Supabase
# ---------------------------------------------------------------------------


class FakeResult:
    def __init__(self, data: Any) -> None:
        self.data = data


class FakeQuery:
    """Mimics the chained postgrest builder: table().select().eq()...execute()."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self._op = "select"
        self._payload: Any = None
        self._columns = "*"
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None
        self._offset = 0
        self._single = False

    # -- operations ---------------------------------------------------------

    def select(self, columns: str = "*", **kwargs: Any) -> "FakeQuery":
        self._columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self._op = "update"
        self._payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    # -- filters and modifiers ----------------------------------------------

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def is_(self, column: str, value: str) -> "FakeQuery":
        assert value == "null", "only IS NULL is supported"
        self._filters.append(lambda row: row.get(column) is None)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    def offset(self, size: int) -> "FakeQuery":
        self._offset = size
        return self

    def maybe_single(self) -> "FakeQuery":
        self._single = True
        return self

    # -- execution ----------------------------------------------------------

    def _matching(self) -> List[Dict[str, Any]]:
        rows = self.db.tables.setdefault(self.table, [])
        return [row for row in rows if all(f(row) for f in self._filters)]

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self._columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in self._columns.split(",")]
        return {c: copy.deepcopy(row.get(c)) for c in wanted}

    def execute(self) -> FakeResult:
        self.db.calls.append((self.table, self._op))
        if self._op == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = [self.db.add(self.table, row) for row in payload]
            return FakeResult(copy.deepcopy(inserted))

        if self._op == "update":
            matched = self._matching()
            for row in matched:
                row.update(copy.deepcopy(self._payload))
            return FakeResult(copy.deepcopy(matched))

        if self._op == "delete":
            matched = self._matching()
            self.db.tables[self.table] = [
                row for row in self.db.tables[self.table] if row not in matched
            ]
            return FakeResult(copy.deepcopy(matched))

        rows = self._matching()
        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        rows = rows[self._offset:]
        if self._limit is not None:
            rows = rows[: self._limit]
        rows = [self._project(r) for r in rows]
        if self._single:
            return FakeResult(rows[0] if rows else None)
        return FakeResult(rows)


class FakeSupabase:
    """Tables are plain lists of dicts; ids and created_at are filled on insert."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self._clock = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", f"2024-01-01T00:00:{next(self._clock):02d}")
        self.tables.setdefault(table, []).append(stored)
        return stored

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])

    def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        for row in self.rows(table):
            if row.get("id") == row_id:
                return row
        return None


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


# ---------------------------------------------------------------------------
# Users and seeded records
# ---------------------------------------------------------------------------

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def user() -> Dict[str, Any]:
    return {"id": USER_ID, "email": "owner@example.com", "user_metadata": {}}


@pytest.fixture
def seeded(fake_supabase: FakeSupabase) -> Dict[str, Dict[str, Any]]:
    """One theme with a template and components, one site, all owned by USER_ID."""
    theme = fake_supabase.add("themes", {
        "id": "theme-1",
        "name": "Ocean Breeze",
        "slug": "ocean-breeze",
        "description": "A calm theme",
        "version": "1.0.0",
        "status": "draft",
        "user_id": USER_ID,
    })
    template = fake_supabase.add("templates", {
        "id": "template-1",
        "name": "Landing Page",
        "type": "page",
        "theme_id": "theme-1",
        "php_code": "<?php echo 'landing'; ?>",
        "status": "draft",
        "user_id": USER_ID,
    })
    footer = fake_supabase.add("components", {
        "id": "component-1",
        "name": "Site Footer",
        "type": "footer",
        "php_code": "<p>footer text</p>",
        "theme_id": "theme-1",
        "user_id": USER_ID,
    })
    hero = fake_supabase.add("components", {
        "id": "component-2",
        "name": "Hero Banner",
        "type": "hero",
        "php_code": "<section>hero</section>",
        "template_id": "template-1",
        "user_id": USER_ID,
    })
    site = fake_supabase.add("wordpress_sites", {
        "id": "site-1",
        "name": "Blog",
        "url": "https://blog.example.com",
        "api_url": "https://blog.example.com/wp-json",
        "username": "admin",
        "password": "s3cret",
        "api_key": "key-123",
        "user_id": USER_ID,
    })
    foreign_site = fake_supabase.add("wordpress_sites", {
        "id": "site-2",
        "name": "Not mine",
        "url": "https://other.example.com",
        "user_id": OTHER_USER_ID,
    })
    return {
        "theme": theme,
        "template": template,
        "footer": footer,
        "hero": hero,
        "site": site,
        "foreign_site": foreign_site,
    }


@pytest.fixture
def add_deployment(fake_supabase: FakeSupabase) -> Callable[..., Dict[str, Any]]:
    def _add(**overrides: Any) -> Dict[str, Any]:
        row = {
            "wordpress_site_id": "site-1",
            "deployment_type": "theme",
            "theme_id": "theme-1",
            "template_id": None,
            "status": "pending",
            "logs": None,
            "user_id": USER_ID,
        }
        row.update(overrides)
        return fake_supabase.add("deployments", row)

    return _add


# ---------------------------------------------------------------------------
# Generator inputs
# ---------------------------------------------------------------------------


@pytest.fixture
def make_component() -> Callable[..., ComponentResponse]:
    def _make(**overrides: Any) -> ComponentResponse:
        data = {"id": "c-1", "name": "Widget", "type": "custom", "php_code": None}
        data.update(overrides)
        return ComponentResponse(**data)

    return _make


@pytest.fixture
def make_template() -> Callable[..., TemplateDetail]:
    def _make(**overrides: Any) -> TemplateDetail:
        data = {"id": "t-1", "name": "Main Page", "type": "page", "theme_id": "theme-1"}
        data.update(overrides)
        return TemplateDetail(**data)

    return _make


@pytest.fixture
def make_theme() -> Callable[..., ThemeDetail]:
    def _make(**overrides: Any) -> ThemeDetail:
        data = {"id": "theme-1", "name": "My Theme", "description": "Test theme"}
        data.update(overrides)
        return ThemeDetail(**data)

    return _make


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def no_php_lint(monkeypatch: pytest.MonkeyPatch) -> None:
    """Services never shell out to php during tests unless a test injects a validator."""
    monkeypatch.setattr(settings, "php_lint_on_save", False)


@pytest.fixture
def client(fake_supabase: FakeSupabase, user: Dict[str, Any]):
    from app.core.dependencies import get_current_user_id
    from app.database.supabase_client import get_service_supabase, get_supabase
    from app.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_service_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_current_user_id] = lambda: user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
