"""Inbound consumer for ``sos.request.created`` messages."""

import json
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from pydantic import ValidationError

from sos_matching.domain.models import MatchRequest
from sos_matching.logging import get_logger

from .models import SOS_REQUEST_CREATED

if TYPE_CHECKING:
    from sos_matching.pipeline.models import OrchestrationResult
    from sos_matching.pipeline.runner import MatchOrchestrator

logger = get_logger(__name__, component="consumer")


class SOSRequestConsumer:
    """Turns queue messages into orchestrator runs.

    Undecodable or invalid messages are logged and dropped; redelivering them
    would fail the same way. PersistenceError propagates so the transport can
    redeliver once storage recovers.
    """

    def __init__(self, orchestrator: "MatchOrchestrator"):
        self.orchestrator = orchestrator

    def handle_message(
        self, body: Union[bytes, str, Dict[str, Any]]
    ) -> Optional["OrchestrationResult"]:
        """Process one message.

        Returns:
            The orchestration result, or None when the message was ignored
        """
        message = self._decode(body)
        if message is None:
            return None

        event = message.get("event")
        if event != SOS_REQUEST_CREATED:
            logger.debug(
                f"Ignoring event {event!r}",
                extra={"event": "consumer.message.ignored", "event_name": event},
            )
            return None

        try:
            request = MatchRequest.model_validate(message.get("data") or {})
        except ValidationError as e:
            logger.warning(
                f"Dropping invalid {SOS_REQUEST_CREATED} payload: {e.error_count()} error(s)",
                extra={
                    "event": "consumer.message.invalid",
                    "errors": [
                        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
                    ],
                },
            )
            return None

        return self.orchestrator.process_sos_request(request)

    @staticmethod
    def _decode(body: Union[bytes, str, Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if isinstance(body, dict):
            return body
        try:
            if isinstance(body, bytes):
                body = body.decode("utf-8")
            message = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError, TypeError) as e:
            logger.warning(
                f"Dropping undecodable message: {e}",
                extra={"event": "consumer.message.undecodable", "error_type": type(e).__name__},
            )
            return None

        if not isinstance(message, dict):
            logger.warning(
                "Dropping message that is not a JSON object",
                extra={"event": "consumer.message.undecodable", "error_type": type(message).__name__},
            )
            return None
        return message
