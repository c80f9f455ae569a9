"""Tests for the HTTP API."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from app.main import app
from app.core.intelligence.assistant import ClinicalAssistant
from app.infra.claude import ClaudeClientError
from app.core.scheduling.response import NO_SLOTS_MESSAGE


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def offline_assistant():
    """Assistant whose model calls always fail, so answers come from rules."""
    claude = AsyncMock()
    claude.generate_json.side_effect = ClaudeClientError("offline")
    claude.generate.side_effect = ClaudeClientError("offline")
    assistant = ClinicalAssistant(claude_client=claude)
    with patch("app.api.routes.notes.get_clinical_assistant", return_value=assistant), \
         patch("app.api.routes.forms.get_clinical_assistant", return_value=assistant), \
         patch("app.api.routes.summaries.get_clinical_assistant", return_value=assistant):
        yield assistant


class TestHealthRoutes:
    """Test health probes."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_live(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["scheduling"] == "ok"
        assert data["checks"]["assistant"] in ("model", "rules")

    def test_ready_with_broken_config(self, client):
        with patch("app.api.routes.health.check_scheduling_config", return_value=False):
            response = client.get("/health/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


class TestSchedulingRoutes:
    """Test appointment search endpoint."""

    def test_search(self, client):
        response = client.post("/scheduling/search", json={
            "text": "for John Smith next Tuesday afternoon with Dr. Johnson for a follow-up",
            "booked_slots": [
                {"date": "2026-10-20", "startTime": "12:00", "doctorId": "dr-johnson"},
            ],
            "patients": [{"id": "p-1", "firstName": "John", "lastName": "Smith"}],
            "today": "2026-10-19",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["search_criteria"] == {
            "date_range": "Starting Oct 20, 2026",
            "time_range": "Between 12:00 PM and 5:00 PM",
            "doctor_preference": "Dr. Johnson",
            "patient_name": "John Smith",
            "appointment_type": "Follow Up",
        }
        best = data["perfect"][0]
        assert best["date"] == "2026-10-20"
        assert best["start_time"] == "12:30:00"
        assert best["doctor_name"] == "Dr. Johnson"
        assert best["patient_id"] == "p-1"
        assert best["appointment_type"] == "follow-up"
        assert data["message"].startswith("Perfect matches:")

    def test_search_no_results(self, client):
        response = client.post("/scheduling/search", json={
            "text": "tomorrow with Dr. Patel",
            "today": "2026-10-19",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["perfect"] == []
        assert data["close"] == []
        assert data["message"].startswith(NO_SLOTS_MESSAGE)

    def test_search_validation_error(self, client):
        response = client.post("/scheduling/search", json={
            "text": "tomorrow",
            "booked_slots": [{"date": "not-a-date", "start_time": "09:00"}],
        })

        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"

    def test_search_empty_text_starts_tomorrow(self, client):
        response = client.post("/scheduling/search", json={"text": "", "today": "2026-10-19"})

        assert response.status_code == 200
        data = response.json()
        assert data["search_criteria"] == {"date_range": "Starting Oct 20, 2026"}
        assert data["perfect"]
        assert data["close"]
        best = data["perfect"][0]
        assert best["date"] == "2026-10-20"
        assert best["start_time"] == "08:00:00"

    def test_search_text_too_long(self, client):
        response = client.post("/scheduling/search", json={"text": "x" * 1001})
        assert response.status_code == 422

    def test_booked_slot_with_utc_suffix_is_not_offered(self, client):
        response = client.post("/scheduling/search", json={
            "text": "tomorrow at 8am with dr johnson",
            "booked_slots": [{"date": "2026-10-20", "start_time": "08:00:00Z"}],
            "today": "2026-10-19",
        })

        assert response.status_code == 200
        data = response.json()
        offered = [(s["date"], s["start_time"]) for s in data["perfect"] + data["close"]]
        assert offered
        assert ("2026-10-20", "08:00:00") not in offered


class TestNotesRoutes:
    """Test notes keyword endpoint."""

    def test_keywords_from_rules(self, client, offline_assistant):
        response = client.post("/notes/keywords", json={
            "notes": "Pt with dry eye, using artificial tears. Insurance pending.",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "rules"
        assert {"text": "artificial tears", "category": "medication"} in data["keywords"]
        assert {"text": "dry eye", "category": "condition"} in data["keywords"]
        assert {"text": "insurance", "category": "other"} in data["keywords"]

    def test_keywords_from_model(self, client):
        claude = AsyncMock()
        claude.generate_json.return_value = {
            "keywords": [{"text": "keratoconus", "category": "condition"}],
        }
        assistant = ClinicalAssistant(claude_client=claude)

        with patch("app.api.routes.notes.get_clinical_assistant", return_value=assistant):
            response = client.post("/notes/keywords", json={
                "notes": "Referred for keratoconus evaluation",
            })

        assert response.json() == {
            "keywords": [{"text": "keratoconus", "category": "condition"}],
            "source": "model",
        }


class TestFormsRoutes:
    """Test form filling endpoint."""

    def test_fill(self, client, offline_assistant):
        response = client.post("/forms/fill", json={
            "text": "VA OD 20/40 sc. IOP 16 OD, 18 OS.",
            "fields": [
                {"id": "1", "name": "vision.rightEye.uncorrected", "type": "text", "label": "VA OD sc"},
                {"id": "2", "name": "intraocularPressure.rightEye", "type": "number", "label": "IOP OD"},
                {"id": "3", "name": "intraocularPressure.leftEye", "type": "number", "label": "IOP OS"},
                {"id": "4", "name": "plan", "type": "textarea", "label": "Plan", "value": "observe"},
            ],
            "context_hint": "pre-testing",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "rules"
        assert [f["value"] for f in data["fields"]] == ["20/40", 16, 18, "observe"]

    def test_fill_requires_fields(self, client):
        response = client.post("/forms/fill", json={"text": "IOP 16"})
        assert response.status_code == 422


class TestSummaryRoutes:
    """Test record summary endpoint."""

    def test_summary_from_templates(self, client, offline_assistant):
        response = client.post("/summaries", json={
            "entityType": "patient",
            "entityData": {
                "firstName": "Maria",
                "lastName": "Garcia",
                "dateOfBirth": "1985-03-07",
                "gender": "female",
                "phone": "(555) 123-4567",
            },
            "today": "2026-10-19",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "rules"
        assert data["entity_type"] == "patient"
        assert data["summary"].startswith("Maria Garcia is a 41-year-old female.")
        assert "- Phone: (555) 123-4567" in data["summary"]

    def test_summary_from_model(self, client):
        claude = AsyncMock()
        claude.generate.return_value = MagicMock(content="Follow-up visit, checked in at 9:00 AM.")
        assistant = ClinicalAssistant(claude_client=claude)

        with patch("app.api.routes.summaries.get_clinical_assistant", return_value=assistant):
            response = client.post("/summaries", json={
                "entity_type": "appointment",
                "data": {"startTime": "09:00", "status": "checked-in", "type": "follow-up"},
            })

        assert response.json() == {
            "summary": "Follow-up visit, checked in at 9:00 AM.",
            "entity_type": "appointment",
            "source": "model",
        }

    def test_unknown_entity_type(self, client):
        response = client.post("/summaries", json={"entity_type": "invoice", "data": {"total": 1}})
        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"

    def test_requires_data(self, client):
        response = client.post("/summaries", json={"entity_type": "soap"})
        assert response.status_code == 422
