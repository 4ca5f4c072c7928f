"""Tests for the FastAPI endpoints."""
import json

import pytest
from fastapi.testclient import TestClient

from quote_tool.api.main import app
from quote_tool.api.state import get_submission_service
from quote_tool.config.settings import get_settings
from quote_tool.services.submission_service import SubmissionService


class RecordingMailer:
    def __init__(self):
        self.sent = []

    async def send(self, message):
        self.sent.append(message)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(mailer):
    app.dependency_overrides[get_submission_service] = lambda: SubmissionService(
        mailer=mailer, settings=get_settings()
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


REFERENCE_SELECTION = {
    "base": "professional-website",
    "addons": ["ai-integration"],
    "details": {"company-size": "medium"},
    "contract": "annual",
}


def test_root(client):
    assert client.get("/").json()["status"] == "online"


def test_catalog_enumeration(client):
    data = client.get("/catalog").json()
    assert [p["id"] for p in data["packages"]] == ["basic-website", "professional-website", "premium-website"]
    assert "company-size" in data["details"]


def test_calculate_prices_selection(client):
    response = client.post("/quote/calculate", json=REFERENCE_SELECTION)
    assert response.status_code == 200

    data = response.json()
    assert data["prices"]["subtotal"] == 988
    assert data["prices"]["total"] == 889
    assert data["steps"] == {"1": True, "2": True, "3": True, "4": True}
    assert data["items"][0] == {"label": "Professional Website", "price": 599, "kind": "base"}
    assert data["trace"][-1]["step"] == "Setup"


def test_calculate_partial_selection(client):
    data = client.post("/quote/calculate", json={}).json()
    assert data["prices"]["total"] == 0
    assert data["steps"]["1"] is False


def test_unknown_entry_is_bad_request(client):
    response = client.post("/quote/calculate", json={"base": "platinum-website"})
    assert response.status_code == 400
    assert response.json()["error"] == "UnknownCatalogEntry"


def test_generate_quote(client):
    response = client.post("/quote", json=REFERENCE_SELECTION)
    assert response.status_code == 200

    data = response.json()
    assert data["base"] == {"id": "professional-website", "name": "Professional Website", "price": 599}
    assert data["total"] == 889
    assert data["setup"] == 2750
    assert "timestamp" in data


def test_generate_quote_incomplete(client):
    response = client.post("/quote", json={"base": "basic-website"})
    assert response.status_code == 400
    assert response.json()["error"] == "IncompleteSelection"


def test_contact_with_calculator_data(client, mailer):
    quote = client.post("/quote", json=REFERENCE_SELECTION).json()
    response = client.post("/api/contact", json={
        "name": "Max Mustermann",
        "company": "Mustermann Haustechnik",
        "email": "max@mustermann.de",
        "industry": "heizung",
        "calculator-data": json.dumps(quote),
    })

    assert response.status_code == 200
    assert response.json()["success"] is True
    body = mailer.sent[0].get_content()
    assert "• Monatlicher Gesamtpreis: 889€" in body
    assert "• Branche: Heizungsbau / Heizungstechnik" in body


def test_contact_validation_error(client, mailer):
    response = client.post("/api/contact", json={"name": "Max", "email": "max@mustermann.de"})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Required fields missing: name, email, company, and industry are required",
    }
    assert mailer.sent == []


def test_contact_validates_once(client, mailer, monkeypatch):
    calls = []
    original = SubmissionService.validate

    def counting_validate(self, contact):
        calls.append(contact.email)
        return original(self, contact)

    monkeypatch.setattr(SubmissionService, "validate", counting_validate)
    response = client.post("/api/contact", json={
        "name": "Max", "company": "MM GmbH", "email": "max@mustermann.de", "industry": "klima",
    })

    assert response.status_code == 200
    assert calls == ["max@mustermann.de"]
    assert len(mailer.sent) == 1


def test_contact_mail_failure():
    class BrokenMailer:
        async def send(self, message):
            raise ConnectionRefusedError("smtp down")

    app.dependency_overrides[get_submission_service] = lambda: SubmissionService(
        mailer=BrokenMailer(), settings=get_settings()
    )
    try:
        response = TestClient(app).post("/api/contact", json={
            "name": "Max", "company": "MM GmbH", "email": "max@mustermann.de", "industry": "klima",
        })
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["success"] is False


def test_analytics_always_acknowledges(client):
    response = client.post("/api/analytics", json={"event": "calculator_step", "parameters": {"step": 2}})
    assert response.json() == {"success": True}


def test_system_status(client):
    data = client.get("/system/status").json()
    assert data["catalog"]["packages"] == 3
    assert data["pricing"]["rounding"] in ("half_up", "half_even")
