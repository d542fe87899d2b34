"""End-to-end matching flow: HTTP API -> orchestrator -> SQLite -> events.

Collaborator services are simulated at the requests.Session level so the
real clients, matchers and repositories all run.
"""

from unittest.mock import MagicMock, Mock

import pytest
from fastapi.testclient import TestClient

from sos_matching.api import create_app_from_config
from sos_matching.clients import (
    CollaboratorClients,
    DisasterRegistryClient,
    RegistryClient,
    SOSRequestClient,
)
from sos_matching.config.environment import EnvironmentConfig
from sos_matching.config.models import AppConfig
from sos_matching.events import SOS_REQUEST_CREATED, InMemoryEventBus, SOSRequestConsumer
from sos_matching.lifecycle import MatchLifecycleService
from sos_matching.pipeline import MatchOrchestrator
from tests.helpers.factories import request_payload, resource, skill

SKILLS = [
    skill("sk-boat", "vol-1", "boat_operator", km=1.0, trust_score=9.0),
    skill("sk-medic", "vol-2", "medic", km=2.0, trust_score=None),
    skill("sk-swim", "vol-3", "swimmer", km=0.5, verified=False),
    skill("sk-busy", "vol-4", "rescue_diver", km=0.5, availability="busy"),
]
RESOURCES = [
    resource("res-far", "owner-1", "boat", km=12.0),
    resource("res-near", "owner-2", "boat", km=3.0),
    resource("res-truck", "owner-3", "truck", km=1.0),
]


def json_response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.content = b"{}"
    response.json = Mock(return_value=payload)
    return response


class FakeCollaborators:
    """Routes collaborator HTTP calls to canned bodies and records them."""

    def __init__(self, disaster_type="flood", disaster_status=200):
        self.disaster_type = disaster_type
        self.disaster_status = disaster_status
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append((method, url, params, json))
        if "/api/disasters/" in url:
            return json_response({"disasterType": self.disaster_type}, self.disaster_status)
        if url.endswith("/api/skills"):
            return json_response({"skills": [s.model_dump(by_alias=True, mode="json") for s in SKILLS]})
        if url.endswith("/api/resources"):
            return json_response(
                {"resources": [r.model_dump(by_alias=True, mode="json") for r in RESOURCES]}
            )
        if url.endswith("/status"):
            return json_response({})
        return json_response({}, 404)

    def session(self):
        session = MagicMock()
        session.headers = {}
        session.request.side_effect = self.request
        return session

    def clients(self):
        return CollaboratorClients(
            disaster_registry=DisasterRegistryClient("http://disasters", session=self.session()),
            sos_requests=SOSRequestClient("http://sos", session=self.session()),
            registry=RegistryClient("http://registry", session=self.session()),
        )


@pytest.fixture
def collaborators():
    return FakeCollaborators()


@pytest.fixture
def bus():
    return InMemoryEventBus()


@pytest.fixture
def api(tmp_path, collaborators, bus):
    env_config = EnvironmentConfig(database_url=f"sqlite:///{tmp_path / 'matches.db'}")
    app = create_app_from_config(AppConfig(), env_config, bus=bus, clients=collaborators.clients())
    with TestClient(app) as client:
        yield client


def test_manual_match_then_accept(api, collaborators, bus):
    response = api.post(
        "/api/matching/match",
        json=request_payload(requiredResources=["boat"], urgency="high"),
    )

    assert response.status_code == 200
    body = response.json()
    assert [m["volunteerId"] for m in body["matches"]] == ["vol-1", "vol-2"]
    assert body["matches"][1]["trustScore"] == 5.0
    assert [m["resourceId"] for m in body["resourceMatches"]] == ["res-near", "res-far"]
    assert all(m["matchScore"] == 8.0 for m in body["resourceMatches"])
    assert all("trustScore" not in m or m["trustScore"] is None for m in body["resourceMatches"])

    skill_calls = [c for c in collaborators.calls if c[1].endswith("/api/skills")]
    assert len(skill_calls) == 4
    assert skill_calls[0][2]["disasterType"] == "flood"
    assert skill_calls[0][2]["radius"] == 50.0

    status_calls = [c for c in collaborators.calls if c[0] == "PUT"]
    assert status_calls == [
        ("PUT", "http://sos/api/sos/requests/sos-1/status", None, {"status": "matched"})
    ]
    assert len(bus.messages("notifications.send")) == 4

    match_id = body["matches"][0]["matchId"]
    accepted = api.post(
        f"/api/matching/matches/{match_id}/accept", json={"volunteerId": "vol-1"}
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert bus.messages("sos.requests")[0]["data"]["matchId"] == match_id

    listed = api.get("/api/matching/matches", params={"requestId": "sos-1"}).json()["matches"]
    assert len(listed) == 4
    assert listed[0]["resourceId"] in ("res-near", "res-far")

    stats = api.get("/api/matching/stats").json()
    assert stats["totalMatches"] == 4
    assert stats["acceptedMatches"] == 1


def test_disaster_registry_down_falls_back_to_default(tmp_path, bus):
    collaborators = FakeCollaborators(disaster_status=503)
    env_config = EnvironmentConfig(database_url=f"sqlite:///{tmp_path / 'matches.db'}")
    app = create_app_from_config(AppConfig(), env_config, bus=bus, clients=collaborators.clients())

    with TestClient(app) as client:
        response = client.post("/api/matching/match", json=request_payload())

    assert response.status_code == 200
    assert len(response.json()["matches"]) == 2
    skill_calls = [c for c in collaborators.calls if c[1].endswith("/api/skills")]
    assert skill_calls[0][2]["disasterType"] == "flood"


def test_queue_message_drives_matching(api, collaborators, bus):
    orchestrator: MatchOrchestrator = api.app.state.orchestrator
    consumer = SOSRequestConsumer(orchestrator)

    result = consumer.handle_message(
        {"event": SOS_REQUEST_CREATED, "data": request_payload(requestId="sos-9", disasterType="fire")}
    )

    assert result.disaster_type == "fire"
    assert result.matches == []
    assert not any("/api/disasters/" in c[1] for c in collaborators.calls)

    lifecycle: MatchLifecycleService = api.app.state.lifecycle
    assert lifecycle.list_matches("sos-9") == []
