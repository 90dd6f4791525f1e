"""
Response Assembler - Envelope building and conversation history writes.

assemble() wraps a capability response and phase timings into the JSON
envelope returned to the caller. The persist_* methods append the user and
assistant messages; a write failure is logged and never fails the request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from errors import format_error_for_user, handle_async_errors
from services.conversation_store import ConversationStore

from .classifier import ClassificationResult
from .payloads import CapabilityResponse

logger = logging.getLogger(__name__)


@dataclass
class PipelineTimings:
    """Per-phase durations in integer milliseconds."""

    context_ms: int = 0
    classify_ms: int = 0
    route_ms: int = 0

    @property
    def total_ms(self) -> int:
        return self.context_ms + self.classify_ms + self.route_ms

    def to_metadata(self) -> Dict[str, int]:
        return {
            "contextLoadTime": self.context_ms,
            "intentRecognitionTime": self.classify_ms,
            "moduleExecutionTime": self.route_ms,
            "totalTime": self.total_ms,
        }


class ResponseAssembler:
    """Builds response envelopes and appends messages to the conversation."""

    def __init__(self, store: Optional[ConversationStore] = None):
        self.store = store

    def assemble(
        self,
        classification: ClassificationResult,
        response: CapabilityResponse,
        timings: PipelineTimings,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        metadata: Dict[str, Any] = timings.to_metadata()
        metadata["userId"] = user_id
        metadata["conversationId"] = conversation_id

        return {
            "success": True,
            "intent": classification.primary_intent,
            "subIntent": classification.sub_intent,
            "module": response.module_name,
            "data": response.payload.to_dict(),
            "metadata": metadata,
        }

    # === History writes ===

    def _can_persist(self, conversation_id: Optional[str], role: str) -> bool:
        if not conversation_id:
            logger.info(f"No conversation id, {role} message not stored")
            return False
        if self.store is None:
            logger.warning(f"No conversation store configured, {role} message not stored")
            return False
        return True

    async def persist_user_message(self, conversation_id: Optional[str], content: str) -> bool:
        """Store the user's message verbatim. Returns True if a row was written."""
        if not self._can_persist(conversation_id, "user"):
            return False
        return await _insert(self.store, conversation_id, "user", content)

    async def persist_assistant_message(
        self,
        conversation_id: Optional[str],
        response: Optional[CapabilityResponse] = None,
        error: Optional[BaseException] = None,
        classification: Optional[ClassificationResult] = None,
        timings: Optional[PipelineTimings] = None,
    ) -> bool:
        """
        Store the assistant's reply: the payload's primary text on success,
        a failure message when routing raised.
        """
        if not self._can_persist(conversation_id, "assistant"):
            return False

        metadata: Dict[str, Any] = {}
        if classification is not None:
            metadata["intent"] = classification.primary_intent
            metadata["subIntent"] = classification.sub_intent
            metadata["confidence"] = classification.confidence
        if timings is not None:
            metadata["timings"] = timings.to_metadata()

        generated_code = None
        if response is not None:
            content = response.payload.text
            generated_code = response.payload.generated_code
            metadata["module"] = response.module_name
            if not content:
                logger.critical(
                    f"Capability {response.module_name} produced no text for the assistant message "
                    f"(conversation {conversation_id})"
                )
        elif error is not None:
            content = format_error_for_user(error)
            metadata["error"] = str(error)
        else:
            logger.critical(f"Assistant message for conversation {conversation_id} has neither response nor error")
            content = ""

        return await _insert(self.store, conversation_id, "assistant", content, generated_code, metadata)


@handle_async_errors("persist.message", default=False, logger=logger)
async def _insert(
    store: ConversationStore,
    conversation_id: str,
    role: str,
    content: str,
    generated_code: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> bool:
    await store.insert_message(conversation_id, role, content, generated_code=generated_code, metadata=metadata)
    return True
