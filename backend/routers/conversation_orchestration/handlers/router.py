"""
Capability Router - Dispatches a classification to exactly one handler.

Handlers are registered by primary intent. An intent without a handler
is served by the chat handler.
"""

import logging
from typing import Dict, List, Optional

from config import RuntimeConfig
from services.llm_client import LLMClient
from services.status_snapshot import StatusSnapshotProvider

from ..classifier import ClassificationResult
from ..context import ConversationContext
from ..payloads import CapabilityResponse
from .base import CapabilityHandler

logger = logging.getLogger(__name__)

DEFAULT_INTENT = "chat"


class CapabilityRouter:
    """
    Routes classified messages to capability handlers.

    Usage:
        router = CapabilityRouter()
        router.register(ConsultationHandler(llm))
        router.register(ChatHandler(llm, status_provider))

        response = await router.route(classification, message, context)
    """

    def __init__(self):
        self._handlers: Dict[str, CapabilityHandler] = {}

    def register(self, handler: CapabilityHandler) -> None:
        """Register a handler for its intent (replaces an existing one)."""
        self._handlers[handler.intent] = handler
        logger.debug(f"Registered capability: {handler.intent} -> {handler.module}")

    def handler_for(self, intent: str) -> CapabilityHandler:
        handler = self._handlers.get(intent)
        if handler is None:
            handler = self._handlers.get(DEFAULT_INTENT)
            if handler is None:
                raise LookupError(f"No handler for intent {intent!r} and no default handler registered")
            logger.warning(f"No handler for intent {intent!r}, using {DEFAULT_INTENT}")
        return handler

    async def route(
        self,
        classification: ClassificationResult,
        message: str,
        context: ConversationContext,
    ) -> CapabilityResponse:
        """Run the one handler for this classification and return its response."""
        handler = self.handler_for(classification.primary_intent)
        logger.info(f"Routing {classification.label} to {handler.module}")
        return await handler.run(classification, message, context)

    def get_intents(self) -> List[str]:
        return sorted(self._handlers)


def build_default_router(
    llm: LLMClient,
    status_provider: Optional[StatusSnapshotProvider] = None,
    config: Optional[RuntimeConfig] = None,
) -> CapabilityRouter:
    """Router with every capability registered."""
    from .chat import ChatHandler
    from .code_analysis import CodeAnalysisHandler
    from .code_change import CodeChangeHandler
    from .consultation import ConsultationHandler
    from .image import ImageHandler
    from .infrastructure import InfrastructureHandler
    from .python_project import PythonProjectHandler

    router = CapabilityRouter()
    router.register(ConsultationHandler(llm, config))
    router.register(PythonProjectHandler(llm, config))
    router.register(CodeChangeHandler(llm, config))
    router.register(InfrastructureHandler(llm, config))
    router.register(ImageHandler(llm, config))
    router.register(CodeAnalysisHandler(llm, config))
    router.register(ChatHandler(llm, status_provider, config))

    logger.info(f"CapabilityRouter initialized with {len(router._handlers)} capabilities")
    return router
