"""
Platform status snapshot for the general-chat prompt.

The chat capability embeds a few live counters in its system prompt. The
router receives a StatusSnapshotProvider and calls it once per chat
request, so prompt building never issues queries itself.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from services.conversation_store import ConversationStore

logger = logging.getLogger(__name__)


@dataclass
class StatusSnapshot:
    """Point-in-time platform counters."""

    counters: Dict[str, int] = field(default_factory=dict)
    taken_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    available: bool = True

    def describe(self) -> str:
        """Render as prompt lines."""
        if not self.available or not self.counters:
            return "Platform status: unavailable right now."
        lines = [f"Platform status (as of {self.taken_at}):"]
        for name, value in self.counters.items():
            lines.append(f"- {name.replace('_', ' ')}: {value}")
        return "\n".join(lines)


class StatusSnapshotProvider(ABC):
    """Supplies the live counters for one request."""

    @abstractmethod
    async def snapshot(self, user_id: Optional[str] = None) -> StatusSnapshot:
        pass


class DatabaseStatusProvider(StatusSnapshotProvider):
    """Counts rows in the data store; degrades to an unavailable snapshot."""

    def __init__(self, store: ConversationStore):
        self.store = store

    async def snapshot(self, user_id: Optional[str] = None) -> StatusSnapshot:
        if not self.store.available:
            return StatusSnapshot(available=False)

        counters = {}
        try:
            counters["total_projects"] = await self.store.count_rows("projects")
            counters["total_conversations"] = await self.store.count_rows("conversations")
            if user_id:
                counters["your_projects"] = await self.store.count_rows("projects", user_id=user_id)
                counters["your_messages"] = await self.store.count_rows("messages", user_id=user_id)
        except Exception as e:
            logger.warning(f"Status snapshot failed: {e}")
            return StatusSnapshot(available=False)

        return StatusSnapshot(counters=counters)
