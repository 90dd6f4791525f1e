"""
End-to-end tests for the intelligent-conversation endpoint.

Tests the full flow: POST -> context -> classify -> route -> envelope, with
the gateway and data store replaced by in-memory fakes.

Strategy:
    - Build a lightweight FastAPI app that includes ONLY the conversation router
    - Override the pipeline and token-resolver dependencies
    - Use Starlette TestClient for synchronous requests
    - Scenario D drives the real LLMClient through an httpx MockTransport
"""

import json
from contextlib import asynccontextmanager

import httpx
import jwt
import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from config import RuntimeConfig
from routers import conversation
from routers.conversation_orchestration import (
    ContextLoader,
    ConversationPipeline,
    IntentClassifier,
    ResponseAssembler,
    build_default_router,
)
from services.auth import TokenResolver
from services.llm_client import LLMClient
from services.status_snapshot import DatabaseStatusProvider

from conftest import EventLog, FakeConversationStore, FakeLLM

JWT_SECRET = "test-secret-with-at-least-32-bytes-of-key"

ANALYSIS_JSON = json.dumps(
    {
        "changeType": "style",
        "targetElement": "button",
        "targetSelector": "button",
        "modification": "red background",
        "reasoning": "explicit request",
    }
)

FULL_HTML = "<!DOCTYPE html>\n<html>\n<body>\n<button style=\"background:red\">Hi</button>\n</body>\n</html>"

FLASK_PROJECT = json.dumps(
    {
        "projectName": "expense-tracker",
        "description": "Track expenses with Flask",
        "framework": "flask",
        "dependencies": ["flask>=3.0"],
        "files": [{"path": "app.py", "content": "from flask import Flask\napp = Flask(__name__)\n"}],
        "setupInstructions": ["pip install -r requirements.txt"],
        "runCommand": "flask run",
    }
)


def _build_test_app(pipeline: ConversationPipeline, resolver: TokenResolver) -> FastAPI:
    """Build a minimal FastAPI app with the conversation router and no lifespan."""

    @asynccontextmanager
    async def noop_lifespan(app):
        yield

    app = FastAPI(lifespan=noop_lifespan)
    app.include_router(conversation.router)
    app.include_router(conversation.router, prefix="/api")
    app.dependency_overrides[conversation.get_pipeline] = lambda: pipeline
    app.dependency_overrides[conversation.get_resolver] = lambda: resolver
    return app


def _pipeline(store, llm, config=None) -> ConversationPipeline:
    config = config or RuntimeConfig()
    return ConversationPipeline(
        loader=ContextLoader(store),
        classifier=IntentClassifier(),
        router=build_default_router(llm, DatabaseStatusProvider(store), config),
        assembler=ResponseAssembler(store),
    )


def _token(sub="user-1"):
    return jwt.encode({"sub": sub, "aud": "authenticated"}, JWT_SECRET, algorithm="HS256")


@pytest.fixture()
def harness():
    """Fresh store, gateway fake and client per test."""
    events = EventLog()
    store = FakeConversationStore(events=events)
    llm = FakeLLM(events=events)
    app = _build_test_app(_pipeline(store, llm), TokenResolver(JWT_SECRET))
    with TestClient(app) as client:
        yield client, store, llm, events


# ===========================================================================
# TEST CASES
# ===========================================================================


class TestValidation:
    """Requests without a message are rejected before anything runs."""

    @pytest.mark.parametrize("body", [{}, {"message": ""}, {"conversationId": "c1"}, {"message": None}])
    def test_missing_message_is_400(self, harness, body):
        client, store, llm, _ = harness
        resp = client.post("/intelligent-conversation", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Message is required"}
        assert store.messages == []
        assert llm.calls == []

    def test_non_json_body_is_400(self, harness):
        client, store, _, _ = harness
        resp = client.post(
            "/intelligent-conversation", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert store.messages == []

    def test_wrong_history_type_is_400(self, harness):
        client, store, _, _ = harness
        resp = client.post("/intelligent-conversation", json={"message": "hi", "history": "nope", "conversationId": "c1"})
        assert resp.status_code == 400
        assert store.messages == []

    def test_preflight(self, harness):
        client, _, _, _ = harness
        resp = client.options("/intelligent-conversation")
        assert resp.status_code == 204
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "x-client-info" in resp.headers["Access-Control-Allow-Headers"]


class TestScenarios:
    """The four reference scenarios."""

    def test_a_question_goes_to_consultation(self, harness):
        client, _, llm, _ = harness
        llm.replies = ["Use a managed auth provider."]

        resp = client.post("/intelligent-conversation", json={"message": "How can I add authentication?"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["intent"] == "consultation"
        assert body["subIntent"] == "question"
        assert body["module"] == "consultation-agent"
        assert body["data"]["message"] == "Use a managed auth provider."
        assert len(llm.calls) == 1

    def test_b_style_change_returns_full_document(self, harness):
        client, _, llm, _ = harness
        llm.replies = [ANALYSIS_JSON, "```html\n" + FULL_HTML + "\n```"]

        resp = client.post(
            "/intelligent-conversation",
            json={"message": "Change the button color to red", "currentCode": "<button>Hi</button>"},
        )

        body = resp.json()
        assert resp.status_code == 200
        assert body["intent"] == "code-generation"
        assert body["subIntent"] == "modification"
        assert [c["operation"] for c in llm.calls] == ["Analysis", "Modification"]
        assert body["data"]["code"].startswith("<!DOCTYPE html>")
        assert body["data"]["code"].rstrip().endswith("</html>")

    def test_c_flask_project_has_requirements(self, harness):
        client, _, llm, _ = harness
        llm.replies = [FLASK_PROJECT]

        resp = client.post("/intelligent-conversation", json={"message": "Build a Flask app for tracking expenses"})

        body = resp.json()
        assert body["intent"] == "python-generation"
        assert body["subIntent"] == "full-project"
        paths = [f["path"] for f in body["data"]["projectData"]["files"]]
        assert "requirements.txt" in paths

    def test_d_rate_limit_surfaces_as_500(self):
        def gateway(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "Rate limit exceeded"}})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(gateway))
        llm = LLMClient("https://gateway.test/v1", "test-key", http_client=http_client)
        store = FakeConversationStore()
        app = _build_test_app(_pipeline(store, llm), TokenResolver(JWT_SECRET))

        with TestClient(app) as client:
            resp = client.post(
                "/intelligent-conversation",
                json={"message": "How can I add authentication?", "conversationId": "c1"},
            )

        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert "429" in body["error"]
        assert "stack" not in body
        # Exactly one user and one assistant message, in order
        assert [m["role"] for m in store.messages] == ["user", "assistant"]
        assert store.messages[1]["content"].startswith("Sorry, I couldn't complete that request")


class TestPersistence:
    """History writes around the capability call."""

    def test_user_message_stored_verbatim_before_capability(self, harness):
        client, store, llm, events = harness
        message = "  Hello there, what's new?\n\ttabs & émojis 🚀 "
        llm.replies = ["Not much!"]

        resp = client.post("/intelligent-conversation", json={"message": message, "conversationId": "c1"})

        assert resp.status_code == 200
        assert store.messages[0] == {
            "conversation_id": "c1",
            "role": "user",
            "content": message,
            "generated_code": None,
            "metadata": {},
        }
        assert events.kinds() == ["persist", "llm", "persist"]
        assert store.messages[1]["role"] == "assistant"
        assert store.messages[1]["content"] == "Not much!"

    def test_generated_code_stored_with_assistant(self, harness):
        client, store, llm, _ = harness
        llm.replies = [ANALYSIS_JSON, FULL_HTML]

        client.post(
            "/intelligent-conversation",
            json={"message": "Change the button color to red", "currentCode": "<button>Hi</button>", "conversationId": "c1"},
        )

        assert store.messages[1]["generated_code"] == FULL_HTML
        assert store.messages[1]["metadata"]["module"] == "smart-code-agent"

    def test_no_conversation_id_stores_nothing(self, harness):
        client, store, llm, _ = harness
        llm.replies = ["hey"]
        resp = client.post("/intelligent-conversation", json={"message": "hello"})

        assert resp.status_code == 200
        assert store.messages == []

    def test_persistence_failure_still_succeeds(self):
        store = FakeConversationStore(fail={"insert"})
        llm = FakeLLM(["hey"])
        app = _build_test_app(_pipeline(store, llm), TokenResolver(JWT_SECRET))

        with TestClient(app) as client:
            resp = client.post("/intelligent-conversation", json={"message": "hello", "conversationId": "c1"})

        assert resp.status_code == 200
        assert resp.json()["data"]["message"] == "hey"


class TestAuthAndContext:
    """Bearer tokens, context and the /api mount."""

    def test_valid_token_sets_user(self, harness):
        client, store, llm, _ = harness
        llm.replies = ["hi"]
        resp = client.post(
            "/intelligent-conversation",
            json={"message": "hello"},
            headers={"Authorization": f"Bearer {_token('user-42')}"},
        )

        assert resp.json()["metadata"]["userId"] == "user-42"
        assert "preferences" in store.queries

    def test_bad_token_is_anonymous(self, harness):
        client, store, llm, _ = harness
        llm.replies = ["hi"]
        resp = client.post(
            "/intelligent-conversation",
            json={"message": "hello"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert resp.status_code == 200
        assert resp.json()["metadata"]["userId"] is None
        assert "preferences" not in store.queries

    def test_request_history_reaches_chat(self, harness):
        client, _, llm, _ = harness
        llm.replies = ["sure"]
        client.post(
            "/intelligent-conversation",
            json={"message": "thanks", "history": [{"role": "user", "content": "earlier turn"}]},
        )

        contents = [m["content"] for m in llm.calls[0]["messages"]]
        assert contents[1:] == ["earlier turn", "thanks"]

    def test_api_prefix_mount(self, harness):
        client, _, llm, _ = harness
        llm.replies = ["hi"]
        resp = client.post("/api/intelligent-conversation", json={"message": "hello"})

        body = resp.json()
        assert resp.status_code == 200
        assert body["module"] == "intelligent-chat"
        assert set(body["metadata"]) == {
            "contextLoadTime",
            "intentRecognitionTime",
            "moduleExecutionTime",
            "totalTime",
            "userId",
            "conversationId",
        }
        meta = body["metadata"]
        assert meta["totalTime"] == meta["contextLoadTime"] + meta["intentRecognitionTime"] + meta["moduleExecutionTime"]

    def test_docker_knowledge_outside_overall_top_five(self, harness):
        client, store, llm, _ = harness
        store.knowledge = [{"domain": "react", "title": f"hooks-{i}", "applicability_score": 99} for i in range(5)]
        store.knowledge.append(
            {"domain": "docker", "title": "Use non-root", "content": "USER app", "applicability_score": 90}
        )
        llm.replies = [json.dumps({"detectedLanguage": "node", "baseImage": "node:18-alpine"}), "FROM node:18-alpine"]

        resp = client.post(
            "/intelligent-conversation",
            json={"message": "Generate a dockerfile for my node service"},
            headers={"Authorization": f"Bearer {_token()}"},
        )

        assert resp.status_code == 200
        assert resp.json()["module"] == "dockerfile-agent"
        assert "Use non-root" in llm.calls[1]["messages"][0]["content"]

    def test_history_turn_with_null_content_accepted(self, harness):
        client, _, llm, _ = harness
        llm.replies = ["sure"]
        resp = client.post(
            "/intelligent-conversation",
            json={"message": "thanks", "history": [{"role": "assistant", "content": None}]},
        )

        assert resp.status_code == 200
        assert llm.calls[0]["messages"][1] == {"role": "assistant", "content": ""}
