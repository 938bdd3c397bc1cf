"""API tests for /api/v1/deployments (TestClient over the in-memory Supabase)."""

from __future__ import annotations

import pytest

from app.config import settings
from app.modules.deployments.routes import get_webhook_config
from app.modules.deployments.workflow_trigger import WebhookConfig, WorkflowTrigger, WorkflowTriggerError

BASE = "/api/v1/deployments"


@pytest.fixture
def webhook(client):
    from app.main import app

    app.dependency_overrides[get_webhook_config] = lambda: WebhookConfig(url="https://n8n.example.com/hook")
    return app


class TestCreateAndList:
    @pytest.mark.unit
    def test_create_theme_deployment(self, client, seeded):
        response = client.post(BASE, json={"wordpress_site_id": "site-1", "theme_id": "theme-1"})
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["deployment_type"] == "theme"
        assert body["template_id"] is None

    @pytest.mark.unit
    def test_create_template_deployment(self, client, seeded):
        response = client.post(BASE, json={"wordpress_site_id": "site-1", "template_id": "template-1"})
        assert response.status_code == 201
        assert response.json()["deployment_type"] == "template"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "payload",
        [
            {"wordpress_site_id": "site-1"},
            {"wordpress_site_id": "site-1", "theme_id": "theme-1", "template_id": "template-1"},
        ],
    )
    def test_theme_xor_template(self, client, seeded, payload):
        assert client.post(BASE, json=payload).status_code == 422

    @pytest.mark.unit
    def test_foreign_site_is_forbidden(self, client, seeded):
        response = client.post(BASE, json={"wordpress_site_id": "site-2", "theme_id": "theme-1"})
        assert response.status_code == 403

    @pytest.mark.unit
    def test_list_filters(self, client, seeded, add_deployment):
        add_deployment()
        add_deployment(deployment_type="template", theme_id=None, template_id="template-1")
        add_deployment(user_id="user-2", wordpress_site_id="site-2")

        assert len(client.get(BASE).json()) == 2
        only_templates = client.get(BASE, params={"template_id": "template-1"}).json()
        assert [d["deployment_type"] for d in only_templates] == ["template"]


class TestSingleDeployment:
    @pytest.mark.unit
    def test_get_logs_and_files(self, client, seeded, add_deployment, fake_supabase):
        row = add_deployment(status="in-progress", logs="Starting theme deployment...")
        fake_supabase.add("deployment_files", {"deployment_id": row["id"], "path": "style.css", "type": "css", "content": "/**/"})

        assert client.get(f"{BASE}/{row['id']}").json()["id"] == row["id"]
        logs = client.get(f"{BASE}/{row['id']}/logs").json()
        assert logs == {
            "deployment_id": row["id"],
            "logs": "Starting theme deployment...",
            "status": "in-progress",
            "has_more": True,
        }
        files = client.get(f"{BASE}/{row['id']}/files").json()
        assert [(f["path"], f["type"]) for f in files] == [("style.css", "css")]

    @pytest.mark.unit
    def test_deployment_on_foreign_site_is_forbidden(self, client, seeded, add_deployment):
        row = add_deployment(user_id="user-2", wordpress_site_id="site-2")
        assert client.get(f"{BASE}/{row['id']}").status_code == 403

    @pytest.mark.unit
    def test_missing_deployment(self, client, seeded):
        assert client.get(f"{BASE}/nope").status_code == 404

    @pytest.mark.unit
    def test_manual_update_respects_transitions(self, client, seeded, add_deployment):
        row = add_deployment()
        assert client.put(f"{BASE}/{row['id']}", json={"status": "completed"}).status_code == 409

        response = client.put(f"{BASE}/{row['id']}", json={"status": "failed", "logs": "Cancelled by owner"})
        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert response.json()["logs"] == "Cancelled by owner"

    @pytest.mark.unit
    def test_delete(self, client, seeded, add_deployment, fake_supabase):
        row = add_deployment()
        assert client.delete(f"{BASE}/{row['id']}").status_code == 204
        assert fake_supabase.get("deployments", row["id"]) is None


class TestDeploy:
    @pytest.mark.unit
    def test_deploy_runs_worker_in_background(self, client, seeded, add_deployment, webhook, monkeypatch, fake_supabase):
        payloads = []
        monkeypatch.setattr(WorkflowTrigger, "trigger", lambda self, payload: payloads.append(payload))
        row = add_deployment()

        response = client.post(f"{BASE}/{row['id']}/deploy")

        assert response.status_code == 202
        assert response.json()["status"] == "pending"
        assert payloads[0]["deploymentId"] == row["id"]
        stored = fake_supabase.get("deployments", row["id"])
        assert stored["status"] == "in-progress"
        assert stored["logs"].endswith("Workflow trigger accepted; waiting for confirmation")

    @pytest.mark.unit
    def test_deploy_requires_pending(self, client, seeded, add_deployment, webhook):
        row = add_deployment(status="in-progress")
        assert client.post(f"{BASE}/{row['id']}/deploy").status_code == 409

    @pytest.mark.unit
    def test_deploy_requires_webhook(self, client, seeded, add_deployment):
        from app.main import app

        app.dependency_overrides[get_webhook_config] = lambda: WebhookConfig(url=None)
        row = add_deployment()
        assert client.post(f"{BASE}/{row['id']}/deploy").status_code == 503


class TestCallback:
    @pytest.mark.unit
    def test_callback_completes_deployment(self, client, seeded, add_deployment, monkeypatch):
        monkeypatch.setattr(settings, "n8n_callback_secret", "hook-secret")
        row = add_deployment(status="in-progress", logs="Workflow trigger accepted; waiting for confirmation")

        response = client.post(
            f"{BASE}/{row['id']}/callback",
            json={"status": "completed", "logs": "Theme deployed successfully!"},
            headers={"X-Callback-Secret": "hook-secret"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["completed_at"] is not None
        assert body["logs"].endswith("\nTheme deployed successfully!")

    @pytest.mark.unit
    def test_wrong_secret_is_rejected(self, client, seeded, add_deployment, monkeypatch, fake_supabase):
        monkeypatch.setattr(settings, "n8n_callback_secret", "hook-secret")
        row = add_deployment(status="in-progress")

        response = client.post(
            f"{BASE}/{row['id']}/callback",
            json={"status": "completed"},
            headers={"X-Callback-Secret": "guess"},
        )

        assert response.status_code == 401
        assert fake_supabase.get("deployments", row["id"])["status"] == "in-progress"

    @pytest.mark.unit
    def test_callback_on_pending_is_conflict(self, client, seeded, add_deployment, monkeypatch):
        monkeypatch.setattr(settings, "n8n_callback_secret", None)
        row = add_deployment()
        response = client.post(f"{BASE}/{row['id']}/callback", json={"status": "failed"})
        assert response.status_code == 409

    @pytest.mark.unit
    def test_callback_status_is_validated(self, client, seeded, add_deployment, monkeypatch):
        monkeypatch.setattr(settings, "n8n_callback_secret", None)
        row = add_deployment(status="in-progress")
        assert client.post(f"{BASE}/{row['id']}/callback", json={"status": "pending"}).status_code == 422


class TestDeployAndWait:
    @pytest.mark.unit
    def test_wait_returns_in_progress(self, client, seeded, add_deployment, webhook, monkeypatch):
        monkeypatch.setattr(WorkflowTrigger, "trigger", lambda self, payload: None)
        row = add_deployment()

        response = client.post(f"{BASE}/{row['id']}/deploy", params={"wait": "true"})

        assert response.status_code == 200
        assert response.json()["status"] == "in-progress"

    @pytest.mark.unit
    def test_rejected_trigger_is_bad_gateway(self, client, seeded, add_deployment, webhook, monkeypatch, fake_supabase):
        def reject(self, payload):
            raise WorkflowTriggerError("n8n webhook returned HTTP 503: maintenance")

        monkeypatch.setattr(WorkflowTrigger, "trigger", reject)
        row = add_deployment()

        response = client.post(f"{BASE}/{row['id']}/deploy", params={"wait": "true"})

        assert response.status_code == 502
        assert response.json()["detail"] == "n8n webhook returned HTTP 503: maintenance"
        assert fake_supabase.get("deployments", row["id"])["status"] == "failed"
