"""
Conversation Pipeline - Context -> classify -> route -> assemble.

Stages run strictly in sequence and each is timed. The user message is
stored right after the context load, before any capability runs; exactly
one assistant message follows, whether routing succeeded or raised.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from errors import log_error
from logging_config import log_message_in, log_message_out, log_stage

from .assembler import PipelineTimings, ResponseAssembler
from .classifier import IntentClassifier
from .context import ContextLoader
from .handlers.router import CapabilityRouter

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


class ConversationPipeline:
    """Runs one conversation turn."""

    def __init__(
        self,
        loader: ContextLoader,
        classifier: IntentClassifier,
        router: CapabilityRouter,
        assembler: ResponseAssembler,
    ):
        self.loader = loader
        self.classifier = classifier
        self.router = router
        self.assembler = assembler

    async def handle(
        self,
        message: str,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
        current_code: Optional[str] = None,
        project_id: Optional[str] = None,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Process one message and return the success envelope.

        Raises:
            Whatever the capability raised; the assistant failure message has
            already been stored by then.
        """
        timings = PipelineTimings()
        log_message_in(
            logger,
            message,
            user=user_id or "anonymous",
            conversation=conversation_id or "none",
            has_code=bool(current_code),
        )

        # Stage 1: context
        log_stage(logger, "context", "start")
        start = time.perf_counter()
        context = await self.loader.load(user_id, conversation_id)
        context.merge_request(
            current_code=current_code,
            conversation_id=conversation_id,
            project_id=project_id,
            history=history,
        )
        timings.context_ms = _elapsed_ms(start)
        log_stage(logger, "context", "end", duration_ms=timings.context_ms)

        await self.assembler.persist_user_message(conversation_id, message)

        # Stage 2: classify
        start = time.perf_counter()
        classification = self.classifier.classify(message, context)
        timings.classify_ms = _elapsed_ms(start)
        log_stage(
            logger,
            "classify",
            "end",
            intent=classification.label,
            confidence=classification.confidence,
            duration_ms=timings.classify_ms,
        )

        # Stage 3: route
        log_stage(logger, "route", "start", intent=classification.label)
        start = time.perf_counter()
        try:
            response = await self.router.route(classification, message, context)
        except Exception as e:
            timings.route_ms = _elapsed_ms(start)
            log_stage(logger, "route", "fail", intent=classification.label, error=type(e).__name__)
            log_error(logger, e, context="Routing", include_traceback=False)
            await self.assembler.persist_assistant_message(
                conversation_id, error=e, classification=classification, timings=timings
            )
            log_message_out(logger, total_ms=timings.total_ms, success=False)
            raise
        timings.route_ms = _elapsed_ms(start)
        log_stage(logger, "route", "end", module=response.module_name, duration_ms=timings.route_ms)

        # Stage 4: assemble
        await self.assembler.persist_assistant_message(
            conversation_id, response=response, classification=classification, timings=timings
        )
        envelope = self.assembler.assemble(
            classification, response, timings, user_id=user_id, conversation_id=conversation_id
        )
        log_message_out(logger, module=response.module_name, total_ms=timings.total_ms)
        return envelope
