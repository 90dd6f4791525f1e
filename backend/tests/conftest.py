"""
Shared pytest fixtures and fakes for conversation pipeline tests.

FakeConversationStore and FakeLLM record into a shared event log so tests
can assert ordering (e.g. the user message is stored before any
generation call).
"""

from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from errors import PersistenceError


class EventLog(list):
    """Ordered (kind, detail) tuples shared between fakes."""

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self]


class FakeConversationStore:
    """In-memory stand-in for ConversationStore."""

    def __init__(
        self,
        events: Optional[EventLog] = None,
        available: bool = True,
        preferences: Optional[Dict[str, Any]] = None,
        knowledge: Optional[List[Dict[str, Any]]] = None,
        learnings: Optional[List[Dict[str, Any]]] = None,
        patterns: Optional[List[Dict[str, Any]]] = None,
        history: Optional[List[Dict[str, Any]]] = None,
        fail: Optional[set] = None,
    ):
        self.events = events if events is not None else EventLog()
        self._available = available
        self.preferences = preferences
        self.knowledge = knowledge or []
        self.learnings = learnings or []
        self.patterns = patterns or []
        self.history = history or []
        self.fail = fail or set()
        self.messages: List[Dict[str, Any]] = []
        self.queries: List[str] = []

    @property
    def available(self) -> bool:
        return self._available

    def _record(self, name: str):
        self.queries.append(name)
        if name in self.fail:
            raise PersistenceError(f"{name} failed", table=name)

    async def fetch_user_preferences(self, user_id):
        self._record("preferences")
        return self.preferences

    async def fetch_professional_knowledge(self, limit):
        self._record("knowledge")
        ranked = sorted(self.knowledge, key=lambda k: k.get("applicability_score", 0), reverse=True)
        return ranked[:limit]

    async def fetch_domain_knowledge(self, domain, limit):
        self._record("domain_knowledge")
        rows = [k for k in self.knowledge if k.get("domain") == domain]
        return sorted(rows, key=lambda k: k.get("applicability_score", 0), reverse=True)[:limit]

    async def fetch_conversation_learnings(self, user_id, limit):
        self._record("learnings")
        return self.learnings[:limit]

    async def fetch_cross_project_patterns(self, user_id, min_confidence, limit):
        self._record("patterns")
        return [p for p in self.patterns if p.get("confidence_score", 100) >= min_confidence][:limit]

    async def fetch_recent_messages(self, conversation_id, limit):
        self._record("history")
        return self.history[-limit:]

    async def count_rows(self, table, user_id=None):
        self._record("count")
        return 3 if user_id is None else 1

    async def insert_message(self, conversation_id, role, content, generated_code=None, metadata=None):
        self._record("insert")
        row = {
            "conversation_id": conversation_id,
            "role": role,
            "content": content,
            "generated_code": generated_code,
            "metadata": metadata or {},
        }
        self.messages.append(row)
        self.events.append(("persist", role))
        return {"id": len(self.messages)}


Reply = Union[str, Exception, Callable[[List[Dict[str, Any]]], str]]


class FakeLLM:
    """Scripted gateway client. Each chat() call consumes the next reply."""

    def __init__(self, replies: Optional[List[Reply]] = None, events: Optional[EventLog] = None):
        self.replies = list(replies or [])
        self.events = events if events is not None else EventLog()
        self.calls: List[Dict[str, Any]] = []
        self.image_calls: List[Dict[str, Any]] = []
        self.image_result: Dict[str, Any] = {
            "success": True,
            "imageUrl": "https://cdn.example.com/img.png",
            "prompt": "",
            "model": "image-model",
        }

    async def chat(self, messages, model, temperature=None, operation="Generation"):
        self.calls.append(
            {"messages": messages, "model": model, "temperature": temperature, "operation": operation}
        )
        self.events.append(("llm", operation))
        if not self.replies:
            return "ok"
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(messages)
        return reply

    async def generate_image(self, prompt, model):
        self.image_calls.append({"prompt": prompt, "model": model})
        self.events.append(("image", prompt))
        return {**self.image_result, "prompt": prompt, "model": model}

    async def close(self):
        pass


@pytest.fixture
def events():
    return EventLog()


@pytest.fixture
def fake_store(events):
    return FakeConversationStore(events=events)


@pytest.fixture
def fake_llm(events):
    return FakeLLM(events=events)


@pytest.fixture
def test_config():
    """Fresh RuntimeConfig so tests never mutate the shared singleton."""
    from config import RuntimeConfig

    return RuntimeConfig()
