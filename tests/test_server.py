"""HTTP surface tests — drive a full quiz through the REST API.

The app is built with ``create_app()`` and a pre-set in-memory lead sink,
so no database is needed.  Admin routes get a stub repository.
"""

import inspect
import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from compass_db.models.lead import LeadRecord
from compass_db.sink import DatabaseLeadSink
from compass_quiz.constants import INVALID_CONTACT_MESSAGE
from compass_server.app import create_app
from compass_server.config import ServerSettings
from compass_server.dependencies import get_db
from compass_server import app as app_module
from compass_server.routes import admin as admin_routes
from compass_server.routes import quiz as quiz_routes

from conftest import RecordingSink

API = "/api/v1"
ADMIN_KEY = "test-admin-key"


@pytest.fixture
def lead_sink():
    return RecordingSink()


@pytest.fixture
def client(lead_sink):
    app = create_app(ServerSettings(admin_api_key=ADMIN_KEY, log_level="WARNING"))
    app.state.lead_sink = lead_sink
    with TestClient(app) as c:
        yield c


def _new_session(client):
    resp = client.post(f"{API}/quiz/sessions", headers={"User-Agent": "pytest-browser"})
    assert resp.status_code == 201, resp.text
    return resp.json()["session_id"]


def _answer_value(question, tag="water"):
    if question["type"] == "phq":
        return 0
    if question["type"] == "planet":
        return tag
    if question["type"] == "input_year":
        # always 20 years old, whatever year the suite runs in
        return str(datetime.now(timezone.utc).year - 20)
    return "sg"


def _complete_quiz(client, sid, tag="water"):
    questions = client.get(f"{API}/quiz/sessions/{sid}/questions").json()
    for q in questions:
        resp = client.put(
            f"{API}/quiz/sessions/{sid}/answers/{q['id']}",
            json={"value": _answer_value(q, tag)},
        )
        assert resp.status_code == 200, resp.text
        resp = client.post(f"{API}/quiz/sessions/{sid}/next")
        assert resp.status_code == 200, resp.text
    return resp.json()


# =====================================================================
# Health & reference data
# =====================================================================


class TestHealthAndReference:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "catalog": "v1"}

    def test_health_hides_database_error(self, monkeypatch):
        """Driver error text stays in the log, not in the response."""

        async def _unreachable():
            raise OSError("could not connect to db-internal.example:5432")

        monkeypatch.setattr(app_module, "ping", _unreachable)
        app = create_app(ServerSettings(log_level="WARNING"))
        app.state.lead_sink = DatabaseLeadSink(session_factory=None)
        with TestClient(app) as c:
            resp = c.get("/health")

        assert resp.json() == {"status": "error", "detail": "Database unavailable"}
        assert "db-internal" not in resp.text

    def test_bands(self, client):
        bands = client.get(f"{API}/reference/bands").json()
        assert [b["id"] for b in bands] == ["normal", "mild", "moderate", "severe"]

    def test_referrals(self, client):
        routes = client.get(f"{API}/reference/referrals").json()
        assert {r["id"] for r in routes} == {"samh", "comit", "limitless"}

    def test_outcomes_are_unique_planets(self, client):
        planets = client.get(f"{API}/reference/outcomes").json()
        ids = [p["id"] for p in planets]
        assert len(ids) == len(set(ids)), f"duplicate planets: {ids}"
        assert len(ids) == 9
        assert all(p["description"] for p in planets)


# =====================================================================
# Session lifecycle & navigation
# =====================================================================


class TestQuizFlow:
    def test_create_session_snapshot(self, client):
        resp = client.post(f"{API}/quiz/sessions")
        body = resp.json()
        assert resp.status_code == 201
        assert body["position"] == 0
        assert body["total"] == 14
        assert body["can_proceed"] is False
        assert body["current_question"]["type"] == "planet"
        assert len(body["current_question"]["options"]) == 4

    def test_next_is_refused_when_unanswered(self, client):
        sid = _new_session(client)
        body = client.post(f"{API}/quiz/sessions/{sid}/next").json()
        assert body["position"] == 0

    def test_answer_then_next_then_back(self, client):
        sid = _new_session(client)
        first = client.get(f"{API}/quiz/sessions/{sid}").json()["current_question"]
        body = client.put(
            f"{API}/quiz/sessions/{sid}/answers/{first['id']}", json={"value": "fire"}
        ).json()
        assert body["can_proceed"] is True
        assert client.post(f"{API}/quiz/sessions/{sid}/next").json()["position"] == 1
        assert client.post(f"{API}/quiz/sessions/{sid}/back").json()["position"] == 0

    def test_tagged_answer_body(self, client):
        sid = _new_session(client)
        body = client.put(
            f"{API}/quiz/sessions/{sid}/answers/phq1",
            json={"value": {"kind": "score", "score": 2}},
        ).json()
        assert "phq1" in body["answered"]

    def test_full_walk_completes(self, client):
        sid = _new_session(client)
        body = _complete_quiz(client, sid)
        assert body["completed"] is True
        assert body["progress"] == 100.0
        assert body["current_question"] is None

    def test_finish_and_reset(self, client):
        sid = _new_session(client)
        assert client.post(f"{API}/quiz/sessions/{sid}/finish").json()["completed"] is True
        body = client.post(f"{API}/quiz/sessions/{sid}/reset").json()
        assert body["completed"] is False
        assert body["position"] == 0

    def test_delete_session(self, client):
        sid = _new_session(client)
        assert client.delete(f"{API}/quiz/sessions/{sid}").status_code == 204
        assert client.get(f"{API}/quiz/sessions/{sid}").status_code == 404

    def test_session_routes_run_on_the_event_loop(self):
        """Session state is only touched from the event loop thread."""
        for route in quiz_routes.router.routes:
            assert inspect.iscoroutinefunction(route.endpoint), (
                f"{route.path} is not async"
            )


# =====================================================================
# Errors
# =====================================================================


class TestErrors:
    def test_unknown_session_is_404(self, client):
        resp = client.get(f"{API}/quiz/sessions/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Resource not found"}

    def test_unknown_question_is_404(self, client):
        sid = _new_session(client)
        resp = client.put(
            f"{API}/quiz/sessions/{sid}/answers/pq99", json={"value": "fire"}
        )
        assert resp.status_code == 404

    def test_malformed_tagged_answer_is_400(self, client):
        sid = _new_session(client)
        resp = client.put(
            f"{API}/quiz/sessions/{sid}/answers/phq1",
            json={"value": {"kind": "mood", "mood": "sunny"}},
        )
        assert resp.status_code == 400

    def test_answer_kind_must_fit_question_type(self, client):
        sid = _new_session(client)
        resp = client.put(
            f"{API}/quiz/sessions/{sid}/answers/phq1",
            json={"value": {"kind": "tag", "tag": "fire"}},
        )
        assert resp.status_code == 400
        body = client.get(f"{API}/quiz/sessions/{sid}").json()
        assert "phq1" not in body["answered"]

    def test_result_before_completion_is_409(self, client):
        sid = _new_session(client)
        assert client.get(f"{API}/quiz/sessions/{sid}/result").status_code == 409

    def test_submit_before_completion_is_409(self, client):
        sid = _new_session(client)
        assert client.post(f"{API}/quiz/sessions/{sid}/submit").status_code == 409


# =====================================================================
# Lead-gated reveal
# =====================================================================


class TestReveal:
    def test_result_locked_until_submitted(self, client, lead_sink):
        sid = _new_session(client)
        _complete_quiz(client, sid)

        locked = client.get(f"{API}/quiz/sessions/{sid}/result")
        assert locked.status_code == 403

        refused = client.post(f"{API}/quiz/sessions/{sid}/submit").json()
        assert refused["revealed"] is False
        assert refused["error"] == INVALID_CONTACT_MESSAGE
        assert refused["result"] is None
        assert lead_sink.payloads == []

        client.put(
            f"{API}/quiz/sessions/{sid}/contact",
            json={"email": "star@gazer.io", "phone": ""},
        )
        revealed = client.post(f"{API}/quiz/sessions/{sid}/submit").json()
        assert revealed["revealed"] is True
        assert revealed["state"] == "revealed"
        assert revealed["result"]["outcome"]["id"] == "earth"
        assert revealed["result"]["referral"] == "samh"
        assert revealed["result"]["band_label"] == "Normal (0–2)"

        result = client.get(f"{API}/quiz/sessions/{sid}/result")
        assert result.status_code == 200
        assert result.json()["outcome"]["name"] == "Earth"

        assert len(lead_sink.payloads) == 1
        assert lead_sink.payloads[0].meta.client_info == "pytest-browser"

    def test_seven_digit_phone_never_reaches_sink(self, client, lead_sink):
        sid = _new_session(client)
        _complete_quiz(client, sid)
        client.put(f"{API}/quiz/sessions/{sid}/contact", json={"phone": "1234567"})
        body = client.post(f"{API}/quiz/sessions/{sid}/submit").json()
        assert body["revealed"] is False
        assert lead_sink.payloads == []


# =====================================================================
# Admin
# =====================================================================


class StubLeadRepository:
    def __init__(self, rows):
        self.rows = rows

    async def list_recent(self, db, *, limit=20, offset=0):
        return self.rows[offset:offset + limit]

    async def get_by_id(self, db, lead_id):
        return next((r for r in self.rows if r.id == lead_id), None)

    async def count_by_outcome(self, db):
        counts = {}
        for row in self.rows:
            counts[row.outcome_id] = counts.get(row.outcome_id, 0) + 1
        return counts


def _lead(outcome_id, email="a@b.co"):
    return LeadRecord(
        id=uuid.uuid4(),
        email=email,
        phone=None,
        answers={},
        screening_total=0,
        severity_band="normal",
        item_scores=[0, 0, 0, 0],
        dominant_tag="fire",
        outcome_id=outcome_id,
        outcome_name=outcome_id.capitalize(),
        age=20,
        category="sg",
        referral="samh",
        client_info="",
        source="test",
        created_at=datetime(2026, 10, 19, tzinfo=timezone.utc),
    )


class TestAdmin:
    @pytest.fixture
    def admin_client(self, client, monkeypatch):
        rows = [_lead("mars"), _lead("mars"), _lead("earth", email="e@x.io")]
        monkeypatch.setattr(admin_routes, "_repo", StubLeadRepository(rows))

        async def _no_db():
            yield None

        client.app.dependency_overrides[get_db] = _no_db
        yield client
        client.app.dependency_overrides.clear()

    def test_missing_key_is_401(self, admin_client):
        assert admin_client.get(f"{API}/admin/leads").status_code == 401

    def test_wrong_key_is_403(self, admin_client):
        resp = admin_client.get(f"{API}/admin/leads", headers={"X-Admin-Key": "nope"})
        assert resp.status_code == 403

    def test_list_leads(self, admin_client):
        resp = admin_client.get(
            f"{API}/admin/leads", params={"limit": 2}, headers={"X-Admin-Key": ADMIN_KEY}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 2
        assert body[0]["outcome_id"] == "mars"

    def test_stats(self, admin_client):
        resp = admin_client.get(
            f"{API}/admin/leads/stats", headers={"X-Admin-Key": ADMIN_KEY}
        )
        assert resp.json() == {"total": 3, "by_outcome": {"mars": 2, "earth": 1}}

    def test_get_lead_by_id(self, admin_client):
        lead_id = admin_routes._repo.rows[2].id
        resp = admin_client.get(
            f"{API}/admin/leads/{lead_id}", headers={"X-Admin-Key": ADMIN_KEY}
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["id"] == str(lead_id)
        assert body["email"] == "e@x.io"
        assert body["outcome_name"] == "Earth"
        assert body["item_scores"] == [0, 0, 0, 0]

    def test_unknown_lead_is_404(self, admin_client):
        resp = admin_client.get(
            f"{API}/admin/leads/{uuid.uuid4()}", headers={"X-Admin-Key": ADMIN_KEY}
        )
        assert resp.status_code == 404

    def test_get_lead_requires_key(self, admin_client):
        lead_id = admin_routes._repo.rows[0].id
        assert admin_client.get(f"{API}/admin/leads/{lead_id}").status_code == 401

    def test_admin_disabled_without_key(self, lead_sink):
        app = create_app(ServerSettings(admin_api_key=None, log_level="WARNING"))
        app.state.lead_sink = lead_sink

        async def _no_db():
            yield None

        app.dependency_overrides[get_db] = _no_db
        with TestClient(app) as c:
            resp = c.get(f"{API}/admin/leads", headers={"X-Admin-Key": "anything"})
        assert resp.status_code == 403
