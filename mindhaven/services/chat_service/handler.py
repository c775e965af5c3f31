"""Chat session handler - classifies, logs and escalates chat messages.

Flow for each message:
1. Classify risk (RiskClassifier strategy)
2. Append a chat log entry to chat_log:<user>:<day>
3. Increment today's risk analytics bucket
4. Crisis: run the intervention workflow and return its result;
   otherwise record an ai_chat_interaction activity
"""
import logging
from typing import Any, Callable, Dict, Optional

from mindhaven.shared.database import KVStore, append_to_index, keys
from mindhaven.shared.errors import ValidationError
from mindhaven.shared.models import ChatLogEntry, RiskLevel
from mindhaven.shared.utils import day_key, hash_user_id, isoformat_z, timestamp_ms, utc_now
from mindhaven.services.account_service import AccountManager
from mindhaven.services.analytics_service import RiskAnalyticsAggregator
from mindhaven.services.crisis_engine import CrisisInterventionWorkflow
from mindhaven.services.safety_service import RiskClassifier

logger = logging.getLogger(__name__)

MOCK_ASSISTANT_RESPONSE = (
    "This is a mock AI response. In production, this would integrate with an AI service."
)

Responder = Callable[[str, RiskLevel], str]


def mock_responder(message: str, risk_level: RiskLevel) -> str:
    return MOCK_ASSISTANT_RESPONSE


def default_session_id(now=None) -> str:
    """Timestamp-derived session id.

    Only groups messages for display; it is not unique across users.
    """
    return f"session_{timestamp_ms(now)}"


class ChatSessionHandler:
    """Handles one user chat message per call."""

    def __init__(
        self,
        store: KVStore,
        classifier: RiskClassifier,
        risk_analytics: RiskAnalyticsAggregator,
        crisis_workflow: CrisisInterventionWorkflow,
        accounts: AccountManager,
        responder: Responder = mock_responder,
        now: Callable = utc_now,
    ):
        self.store = store
        self.classifier = classifier
        self.risk_analytics = risk_analytics
        self.crisis_workflow = crisis_workflow
        self.accounts = accounts
        self.responder = responder
        self._now = now

    def handle_message(
        self,
        user_id: Optional[str],
        message: Optional[str],
        session_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Process a chat message.

        Returns:
            {response, sessionId, riskLevel} and, for crisis messages,
            crisis=True plus the intervention result

        Raises:
            ValidationError: Missing user id or message
        """
        if not user_id or not message:
            raise ValidationError("Missing required fields")

        now = self._now()
        session_id = session_id or default_session_id(now)
        risk_level = self.classifier.classify(message)
        response_text = self.responder(message, risk_level)
        user_id_hash = hash_user_id(user_id)

        entry = ChatLogEntry(
            user_id=user_id,
            session_id=session_id,
            message=message,
            response=response_text,
            risk_level=risk_level,
            timestamp=isoformat_z(now),
        )
        append_to_index(self.store, keys.chat_log(user_id, day_key(now)), entry.to_dict())

        logger.info(
            "CHAT_MESSAGE_CLASSIFIED",
            extra={
                "user_id_hash": user_id_hash,
                "session_id": session_id,
                "risk_level": risk_level.value,
                "message_length": len(message),
            }
        )

        self.risk_analytics.record(user_id, risk_level)

        result: Dict[str, Any] = {
            "response": response_text,
            "sessionId": session_id,
            "riskLevel": risk_level.value,
        }

        if risk_level == RiskLevel.CRISIS:
            intervention = self.crisis_workflow.respond(
                user_id,
                source="ai_chat",
                metadata={"sessionId": session_id},
            )
            result["crisis"] = True
            result["intervention"] = intervention.to_dict()
            return result

        self.accounts.record_user_activity(
            user_id,
            "ai_chat_interaction",
            {"sessionId": session_id, "riskLevel": risk_level.value},
        )
        return result
