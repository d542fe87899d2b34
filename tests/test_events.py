"""Tests for event publishing and the SOS request consumer."""

import json
import logging
from unittest.mock import Mock

import pytest

from sos_matching.config.models import QueueConfig
from sos_matching.events import (
    MATCH_ACCEPTED,
    MATCH_CREATED,
    SOS_REQUEST_CREATED,
    EventBus,
    EventPublisher,
    EventPublishError,
    InMemoryEventBus,
    LoggingEventBus,
    MatchEvent,
    SOSRequestConsumer,
)
from sos_matching.persistence.exceptions import DatabaseConnectionError
from tests.helpers.factories import request_payload, resource_match, skill_match


class TestMatchEvent:
    def test_none_values_dropped(self):
        message = MatchEvent(event=MATCH_CREATED, data={"matchId": "m", "resourceType": None}).to_message()
        assert message == {"event": MATCH_CREATED, "data": {"matchId": "m"}}


class TestInMemoryEventBus:
    def test_records_per_queue(self):
        bus = InMemoryEventBus()
        bus.publish("a", {"event": "x"})
        bus.publish("b", {"event": "y"})
        bus.publish("a", {"event": "z"})

        assert [m["event"] for m in bus.messages("a")] == ["x", "z"]
        assert bus.messages("missing") == []
        assert len(bus.all_messages()) == 3

        bus.clear()
        assert bus.all_messages() == []

    def test_messages_returns_copy(self):
        bus = InMemoryEventBus()
        bus.publish("a", {"event": "x"})
        bus.messages("a").clear()
        assert len(bus.messages("a")) == 1


class TestLoggingEventBus:
    def test_publish_logs_and_keeps_nothing(self, caplog):
        bus = LoggingEventBus()

        with caplog.at_level(logging.INFO):
            for i in range(50):
                bus.publish("notifications.send", {"event": MATCH_CREATED, "data": {"matchId": f"m-{i}"}})

        assert "dropped match.created for notifications.send" in caplog.text
        assert vars(bus) == {}


class TestEventPublisher:
    def test_match_created_for_skill(self):
        bus = InMemoryEventBus()
        result = EventPublisher(bus).publish_match_created(skill_match())

        assert result.is_success()
        assert result.queue == "notifications.send"
        assert bus.messages("notifications.send") == [
            {
                "event": MATCH_CREATED,
                "data": {
                    "matchId": "match-1",
                    "requestId": "sos-1",
                    "volunteerId": "vol-1",
                    "skillType": "medic",
                },
            }
        ]

    def test_match_created_for_resource(self):
        bus = InMemoryEventBus()
        EventPublisher(bus).publish_match_created(resource_match())

        data = bus.messages("notifications.send")[0]["data"]
        assert data["resourceType"] == "boat"
        assert "skillType" not in data

    def test_match_accepted_goes_to_sos_queue(self):
        bus = InMemoryEventBus()
        queues = QueueConfig(notifications="notify", sos_requests="sos")
        result = EventPublisher(bus, queues).publish_match_accepted(skill_match())

        assert result.event == MATCH_ACCEPTED
        assert bus.messages("sos") == [
            {
                "event": MATCH_ACCEPTED,
                "data": {"matchId": "match-1", "requestId": "sos-1", "volunteerId": "vol-1"},
            }
        ]
        assert bus.messages("notify") == []

    def test_transport_failure_is_reported(self):
        bus = Mock(spec=EventBus)
        bus.publish.side_effect = EventPublishError("broker down", queue="notifications.send")

        result = EventPublisher(bus).publish_match_created(skill_match())

        assert not result.is_success()
        assert result.status == "failed"
        assert result.error == "broker down"
        assert result.match_id == "match-1"


class TestSOSRequestConsumer:
    @pytest.fixture
    def orchestrator(self):
        orchestrator = Mock()
        orchestrator.process_sos_request.return_value = "result"
        return orchestrator

    def test_valid_message_runs_orchestrator(self, orchestrator):
        body = json.dumps({"event": SOS_REQUEST_CREATED, "data": request_payload()}).encode()

        assert SOSRequestConsumer(orchestrator).handle_message(body) == "result"

        request = orchestrator.process_sos_request.call_args.args[0]
        assert request.request_id == "sos-1"
        assert request.required_skills == []

    def test_accepts_decoded_dict(self, orchestrator):
        message = {"event": SOS_REQUEST_CREATED, "data": request_payload(requiredSkills=None)}
        assert SOSRequestConsumer(orchestrator).handle_message(message) == "result"

    @pytest.mark.parametrize("body", [b"\xff\xfe", "not json", "[1, 2]"])
    def test_undecodable_dropped(self, orchestrator, body):
        assert SOSRequestConsumer(orchestrator).handle_message(body) is None
        orchestrator.process_sos_request.assert_not_called()

    def test_other_events_ignored(self, orchestrator):
        message = {"event": MATCH_CREATED, "data": {}}
        assert SOSRequestConsumer(orchestrator).handle_message(message) is None
        orchestrator.process_sos_request.assert_not_called()

    def test_invalid_payload_dropped(self, orchestrator):
        payload = request_payload()
        del payload["location"]
        message = {"event": SOS_REQUEST_CREATED, "data": payload}

        assert SOSRequestConsumer(orchestrator).handle_message(message) is None
        orchestrator.process_sos_request.assert_not_called()

    def test_storage_failure_propagates(self, orchestrator):
        orchestrator.process_sos_request.side_effect = DatabaseConnectionError("db gone")
        message = {"event": SOS_REQUEST_CREATED, "data": request_payload()}

        with pytest.raises(DatabaseConnectionError):
            SOSRequestConsumer(orchestrator).handle_message(message)
