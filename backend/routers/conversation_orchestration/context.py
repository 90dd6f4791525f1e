"""
Conversation Context - What the pipeline knows before classifying a message.

ContextLoader reads the caller's preferences, ranked knowledge, Docker
knowledge, learnings, cross-project patterns and recent history. Every
slice is best-effort: a failed query degrades that slice to its default and
the loader never raises.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from errors import handle_async_errors
from services.conversation_store import ConversationStore

logger = logging.getLogger(__name__)

# Knowledge domain fed to the Dockerfile prompt
DOCKER_DOMAIN = "docker"


@dataclass
class ConversationContext:
    """Per-request context handed to the classifier and capability handlers.

    Attributes:
        user_preferences: Single preferences row for the caller, if any
        professional_knowledge: Top-ranked knowledge entries (shared across users)
        docker_knowledge: Top-ranked entries of the "docker" domain (Dockerfile prompt)
        conversation_learnings: Caller's learnings, highest confidence first
        cross_project_patterns: Caller's proven patterns, best success rate first
        conversation_history: Prior turns as {"role", "content"}, oldest first

        Request fields merged in by the pipeline:
        current_code: Code the user is editing
        conversation_id: Conversation the turn belongs to
        project_id: Project the conversation belongs to
        user_id: Resolved caller id (None when anonymous)
    """

    user_preferences: Optional[Dict[str, Any]] = None
    professional_knowledge: List[Dict[str, Any]] = field(default_factory=list)
    docker_knowledge: List[Dict[str, Any]] = field(default_factory=list)
    conversation_learnings: List[Dict[str, Any]] = field(default_factory=list)
    cross_project_patterns: List[Dict[str, Any]] = field(default_factory=list)
    conversation_history: List[Dict[str, Any]] = field(default_factory=list)

    current_code: Optional[str] = None
    conversation_id: Optional[str] = None
    project_id: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def has_code(self) -> bool:
        return bool(self.current_code)

    def merge_request(
        self,
        current_code: Optional[str] = None,
        conversation_id: Optional[str] = None,
        project_id: Optional[str] = None,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        """Overlay request fields. A non-empty request history replaces loaded history.

        Turns with null content are kept with empty text.
        """
        self.current_code = current_code
        self.conversation_id = conversation_id
        self.project_id = project_id
        if history:
            self.conversation_history = [
                {"role": turn.get("role") or "user", "content": turn.get("content") or ""} for turn in history
            ]

    def recent_history(self, turns: int) -> List[Dict[str, Any]]:
        if turns <= 0:
            return []
        return self.conversation_history[-turns:]

    def summary(self) -> Dict[str, Any]:
        """Slice sizes for logging."""
        return {
            "preferences": self.user_preferences is not None,
            "knowledge": len(self.professional_knowledge),
            "docker_knowledge": len(self.docker_knowledge),
            "learnings": len(self.conversation_learnings),
            "patterns": len(self.cross_project_patterns),
            "history": len(self.conversation_history),
        }


# === Best-effort slice reads ===


@handle_async_errors("context.preferences", default=None, logger=logger)
async def _load_preferences(store: ConversationStore, user_id: str):
    return await store.fetch_user_preferences(user_id)


@handle_async_errors("context.knowledge", default=list, logger=logger)
async def _load_knowledge(store: ConversationStore, limit: int):
    return await store.fetch_professional_knowledge(limit) or []


@handle_async_errors("context.domain_knowledge", default=list, logger=logger)
async def _load_domain_knowledge(store: ConversationStore, domain: str, limit: int):
    return await store.fetch_domain_knowledge(domain, limit) or []


@handle_async_errors("context.learnings", default=list, logger=logger)
async def _load_learnings(store: ConversationStore, user_id: str, limit: int):
    return await store.fetch_conversation_learnings(user_id, limit) or []


@handle_async_errors("context.patterns", default=list, logger=logger)
async def _load_patterns(store: ConversationStore, user_id: str, min_confidence: int, limit: int):
    return await store.fetch_cross_project_patterns(user_id, min_confidence, limit) or []


@handle_async_errors("context.history", default=list, logger=logger)
async def _load_history(store: ConversationStore, conversation_id: str, limit: int):
    return await store.fetch_recent_messages(conversation_id, limit) or []


class ContextLoader:
    """Loads a ConversationContext from the conversation store."""

    def __init__(
        self,
        store: ConversationStore,
        knowledge_limit: int = 5,
        learnings_limit: int = 10,
        patterns_limit: int = 5,
        pattern_min_confidence: int = 60,
        history_limit: int = 20,
    ):
        self.store = store
        self.knowledge_limit = knowledge_limit
        self.learnings_limit = learnings_limit
        self.patterns_limit = patterns_limit
        self.pattern_min_confidence = pattern_min_confidence
        self.history_limit = history_limit

    @classmethod
    def from_config(cls, store: ConversationStore) -> "ContextLoader":
        from config import runtime_config

        return cls(
            store,
            knowledge_limit=runtime_config.knowledge_limit,
            learnings_limit=runtime_config.learnings_limit,
            patterns_limit=runtime_config.patterns_limit,
            pattern_min_confidence=runtime_config.pattern_min_confidence,
            history_limit=runtime_config.history_limit,
        )

    async def load(self, user_id: Optional[str], conversation_id: Optional[str] = None) -> ConversationContext:
        """
        Load context for a caller.

        Anonymous callers get the default context without touching the store.
        Reads run one after another; each failure only empties its own slice.
        """
        context = ConversationContext(user_id=user_id)
        if not user_id:
            return context

        if not self.store.available:
            logger.warning("Conversation store unavailable, continuing with default context")
            return context

        context.user_preferences = await _load_preferences(self.store, user_id)
        context.professional_knowledge = await _load_knowledge(self.store, self.knowledge_limit)
        context.docker_knowledge = await _load_domain_knowledge(self.store, DOCKER_DOMAIN, self.knowledge_limit)
        context.conversation_learnings = await _load_learnings(self.store, user_id, self.learnings_limit)
        context.cross_project_patterns = await _load_patterns(
            self.store, user_id, self.pattern_min_confidence, self.patterns_limit
        )
        if conversation_id:
            context.conversation_history = await _load_history(self.store, conversation_id, self.history_limit)

        logger.debug(f"Context loaded: {context.summary()}")
        return context
