"""
Tests for the ordered intent classifier.

Covers the rule table order, priority overlaps, confidence values and
idempotence.
"""

import pytest

from routers.conversation_orchestration import ConversationContext
from routers.conversation_orchestration.classifier import (
    DEFAULT_RULES,
    ClassificationResult,
    IntentClassifier,
    IntentRule,
    always,
    get_classifier,
)


def _ctx(code=None):
    return ConversationContext(current_code=code)


class TestIntentClassification:
    """Each rule fires for its own phrasing."""

    def setup_method(self):
        self.classifier = IntentClassifier()

    @pytest.mark.parametrize(
        "message,code,expected",
        [
            ("How can I add authentication?", None, "consultation/question"),
            ("what is the best hosting for this", None, "consultation/question"),
            ("Build a Flask app for tracking expenses", None, "python-generation/full-project"),
            ("generate a streamlit dashboard", None, "python-generation/full-project"),
            ("I'd like a recommendation on layout", None, "consultation/advice"),
            ("Please improve the current landing page", None, "code-generation/enhancement"),
            ("optimize this", "<div></div>", "code-generation/enhancement"),
            ("Change the header color to blue", None, "code-generation/modification"),
            ("Add a pricing section", None, "code-generation/new-feature"),
            ("containerize my node service", None, "infrastructure-generation/dockerfile"),
            ("a picture of a sunset over mountains", None, "image-generation"),
            ("review my markup", None, "code-analysis"),
            ("make it pop", "<h1>Hi</h1>", "code-generation/general"),
            ("hello there", None, "chat"),
        ],
    )
    def test_rule_matches(self, message, code, expected):
        result = self.classifier.classify(message, _ctx(code))
        assert result.label == expected

    def test_question_mark_beats_everything(self):
        """A literal ? wins even when other keyword sets match."""
        for message in (
            "Can you write me a Dockerfile?",
            "Build a Flask app for me?",
            "Change the button color to red?",
            "Generate an image of a cat?",
        ):
            result = self.classifier.classify(message, _ctx("<p>x</p>"))
            assert result.primary_intent == "consultation"
            assert result.sub_intent == "question"

    def test_python_before_generic_code(self):
        """Python projects are not absorbed by the new-feature rule."""
        result = self.classifier.classify("Create a new Django page component", _ctx())
        assert result.label == "python-generation/full-project"
        assert result.confidence == 0.98

    def test_style_modification_is_high_confidence(self):
        result = self.classifier.classify("update the font size of the footer text", _ctx())
        assert result.label == "code-generation/modification"
        assert result.confidence >= 0.9

    def test_enhancement_requires_existing_code(self):
        """Without code or an 'existing' marker enhancement falls through."""
        result = self.classifier.classify("improve seo", _ctx())
        assert result.primary_intent != "code-generation" or result.sub_intent != "enhancement"

    def test_case_insensitive(self):
        assert self.classifier.classify("DOCKERFILE for my app", _ctx()).label == "infrastructure-generation/dockerfile"

    def test_known_overlap_advice_swallows_docker(self):
        """'what' + 'do' substring (in 'docker') routes to advice; order is preserved as-is."""
        result = self.classifier.classify("tell me what docker base image to use", _ctx())
        assert result.label == "consultation/advice"

    def test_empty_message_is_chat(self):
        result = self.classifier.classify("", None)
        assert result == ClassificationResult("chat", None, 0.5, rule="chat")


class TestClassifierProperties:
    """Purity, confidence range and table shape."""

    def test_idempotent(self):
        classifier = IntentClassifier()
        ctx = _ctx("<button>Hi</button>")
        for message in ("Change the button color to red", "hello", "why?", "analyze this"):
            assert classifier.classify(message, ctx) == classifier.classify(message, ctx)

    def test_confidence_in_range(self):
        for rule in DEFAULT_RULES:
            assert 0 < rule.confidence <= 1

    def test_rules_sorted_by_priority(self):
        names = [r.name for r in IntentClassifier().get_rules()]
        assert names[0] == "question"
        assert names[1] == "python-project"
        assert names[-1] == "chat"

    def test_register_rejects_bad_confidence(self):
        classifier = IntentClassifier(rules=[])
        with pytest.raises(ValueError):
            classifier.register(IntentRule("bad", 1, always, "chat", None, 1.5))

    def test_failing_predicate_is_skipped(self):
        def explode(text, ctx):
            raise RuntimeError("bad predicate")

        classifier = IntentClassifier(
            rules=[
                IntentRule("explode", 1, explode, "code-analysis", None, 0.9),
                IntentRule("chat", 1000, always, "chat", None, 0.5),
            ]
        )
        assert classifier.classify("anything", _ctx()).primary_intent == "chat"

    def test_empty_table_falls_back_to_chat(self):
        result = IntentClassifier(rules=[]).classify("anything", _ctx())
        assert result.primary_intent == "chat"
        assert result.confidence == 0.5

    def test_global_classifier_singleton(self):
        assert get_classifier() is get_classifier()
