"""
Conversation Store - SQL for every table the conversation router touches.

Reads:  user_preferences, professional_knowledge (ranked overall and per
        domain), conversation_learnings, cross_project_patterns, messages,
        plus row counts for the status snapshot.
Writes: messages (append-only).

The store raises on failure; callers decide whether a failure degrades
(context reads, history writes) or propagates.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from errors import PersistenceError
from services.database import DatabaseManager

logger = logging.getLogger(__name__)

# Tables counted for the live status snapshot
_COUNTED_TABLES = ("projects", "conversations", "messages")


class ConversationStore:
    """Thin query layer over DatabaseManager."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    @property
    def available(self) -> bool:
        return self.db.available

    # === Context reads ===

    async def fetch_user_preferences(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.db.fetchrow(
            "SELECT * FROM user_preferences WHERE user_id = $1 LIMIT 1",
            user_id,
        )

    async def fetch_professional_knowledge(self, limit: int) -> List[Dict[str, Any]]:
        return await self.db.fetch(
            "SELECT * FROM professional_knowledge ORDER BY applicability_score DESC LIMIT $1",
            limit,
        )

    async def fetch_domain_knowledge(self, domain: str, limit: int) -> List[Dict[str, Any]]:
        """Top entries for one knowledge domain (e.g. "docker")."""
        return await self.db.fetch(
            "SELECT * FROM professional_knowledge WHERE domain = $1 ORDER BY applicability_score DESC LIMIT $2",
            domain,
            limit,
        )

    async def fetch_conversation_learnings(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        return await self.db.fetch(
            "SELECT * FROM conversation_learnings WHERE user_id = $1 ORDER BY confidence DESC LIMIT $2",
            user_id,
            limit,
        )

    async def fetch_cross_project_patterns(
        self, user_id: str, min_confidence: int, limit: int
    ) -> List[Dict[str, Any]]:
        return await self.db.fetch(
            "SELECT * FROM cross_project_patterns "
            "WHERE user_id = $1 AND confidence_score >= $2 "
            "ORDER BY success_rate DESC LIMIT $3",
            user_id,
            min_confidence,
            limit,
        )

    async def fetch_recent_messages(self, conversation_id: str, limit: int) -> List[Dict[str, Any]]:
        """Most recent ``limit`` messages, returned oldest first."""
        rows = await self.db.fetch(
            "SELECT role, content FROM ("
            "  SELECT role, content, created_at FROM messages"
            "  WHERE conversation_id = $1 ORDER BY created_at DESC LIMIT $2"
            ") recent ORDER BY created_at ASC",
            conversation_id,
            limit,
        )
        return [{"role": r["role"], "content": r["content"]} for r in rows]

    # === Status snapshot ===

    async def count_rows(self, table: str, user_id: Optional[str] = None) -> int:
        if table not in _COUNTED_TABLES:
            raise ValueError(f"Table not countable: {table}")
        if user_id and table == "messages":
            value = await self.db.fetchval(
                "SELECT COUNT(*) FROM messages m JOIN conversations c ON c.id = m.conversation_id "
                "WHERE c.user_id = $1",
                user_id,
            )
        elif user_id:
            value = await self.db.fetchval(f"SELECT COUNT(*) FROM {table} WHERE user_id = $1", user_id)
        else:
            value = await self.db.fetchval(f"SELECT COUNT(*) FROM {table}")
        return int(value or 0)

    # === Writes ===

    async def insert_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        generated_code: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Append one message row and return its id and timestamp."""
        if not self.available:
            raise PersistenceError("Message not stored: database unavailable", table="messages", unavailable=True)

        return await self.db.fetchrow(
            "INSERT INTO messages (conversation_id, role, content, generated_code, metadata) "
            "VALUES ($1, $2, $3, $4, $5::jsonb) RETURNING id, created_at",
            conversation_id,
            role,
            content,
            generated_code,
            json.dumps(metadata or {}, default=str),
        )
