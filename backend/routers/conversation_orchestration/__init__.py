"""
Sitewright Conversation Orchestration - Components of one conversation turn

Components:
- ConversationContext / ContextLoader: Best-effort context read per caller
- IntentClassifier: Ordered first-match-wins rule table
- CapabilityRouter: One handler per primary intent
- ResponseAssembler: Envelope building and history writes
- ConversationPipeline: Runs the stages in order with timings

Flow:
    message -> ContextLoader -> (store user message) -> IntentClassifier
            -> CapabilityRouter -> (store assistant message) -> envelope
"""

from .context import ConversationContext, ContextLoader
from .classifier import ClassificationResult, IntentClassifier, IntentRule, get_classifier
from .payloads import CapabilityResponse
from .handlers import CapabilityRouter, build_default_router
from .assembler import PipelineTimings, ResponseAssembler
from .pipeline import ConversationPipeline

__all__ = [
    "ConversationContext",
    "ContextLoader",
    "ClassificationResult",
    "IntentClassifier",
    "IntentRule",
    "get_classifier",
    "CapabilityResponse",
    "CapabilityRouter",
    "build_default_router",
    "PipelineTimings",
    "ResponseAssembler",
    "ConversationPipeline",
]
