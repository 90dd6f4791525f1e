"""
Chat Handler - Default conversational capability.

System prompt carries a live status snapshot from the injected provider
(fetched once per request), then the full history, then the message.
"""

import logging
from typing import Optional

from config import RuntimeConfig
from routers.conversation_prompts import build_chat_system_prompt
from services.llm_client import LLMClient
from services.status_snapshot import StatusSnapshot, StatusSnapshotProvider

from ..payloads import CapabilityResponse, ChatPayload
from .base import CapabilityHandler

logger = logging.getLogger(__name__)


class ChatHandler(CapabilityHandler):
    intent = "chat"
    module = ChatPayload.module

    def __init__(
        self,
        llm: LLMClient,
        status_provider: Optional[StatusSnapshotProvider] = None,
        config: Optional[RuntimeConfig] = None,
    ):
        super().__init__(llm, config)
        self.status_provider = status_provider

    async def _snapshot(self, user_id: Optional[str]) -> StatusSnapshot:
        if self.status_provider is None:
            return StatusSnapshot(available=False)
        try:
            return await self.status_provider.snapshot(user_id)
        except Exception as e:
            logger.warning(f"Status snapshot provider failed: {e}")
            return StatusSnapshot(available=False)

    async def run(self, classification, message, context) -> CapabilityResponse:
        snapshot = await self._snapshot(context.user_id)

        messages = [
            {"role": "system", "content": build_chat_system_prompt(snapshot.describe(), context.user_preferences)}
        ]
        for turn in context.conversation_history:
            messages.append({"role": turn.get("role", "user"), "content": turn.get("content", "")})
        messages.append(self.user_message(message))

        reply = await self.llm.chat(messages, model=self.config.model_chat, operation="Chat")
        return CapabilityResponse.of(ChatPayload(message=reply))
