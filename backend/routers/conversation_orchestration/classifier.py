"""
Intent Classifier - Maps a message to the capability that should answer it.

Rules are an ordered table evaluated top to bottom; the first predicate
that matches wins. Matching is case-insensitive substring containment.

Rule order (lower priority value = checked first):
    10  question            ? or interrogative prefix  -> consultation/question
    20  python-project      python keyword + action     -> python-generation/full-project
    30  advice              advice phrases              -> consultation/advice
    40  enhancement         improve + existing code     -> code-generation/enhancement
    50  modification        change + style target       -> code-generation/modification
    60  new-feature         add + feature noun          -> code-generation/new-feature
    70  dockerfile          docker / container          -> infrastructure-generation/dockerfile
    80  image               image / picture / photo     -> image-generation
    90  review              analyze / review / check    -> code-analysis
    900 has-code            context carries code        -> code-generation/general
    1000 chat               always                      -> chat

Overlaps resolve purely by order: "How do I write a Dockerfile?" is a
question, not infrastructure generation.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .context import ConversationContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    """Classifier output: primary intent, optional sub-intent, confidence in (0, 1]."""

    primary_intent: str
    sub_intent: Optional[str] = None
    confidence: float = 0.5
    rule: str = ""

    @property
    def label(self) -> str:
        if self.sub_intent:
            return f"{self.primary_intent}/{self.sub_intent}"
        return self.primary_intent


Predicate = Callable[[str, ConversationContext], bool]


@dataclass(frozen=True)
class IntentRule:
    """One row of the rule table."""

    name: str
    priority: int
    predicate: Predicate
    primary_intent: str
    sub_intent: Optional[str]
    confidence: float

    def result(self) -> ClassificationResult:
        return ClassificationResult(
            primary_intent=self.primary_intent,
            sub_intent=self.sub_intent,
            confidence=self.confidence,
            rule=self.name,
        )


# =============================================================================
# KEYWORD SETS
# =============================================================================

INTERROGATIVE_PREFIXES: Tuple[str, ...] = (
    "how can",
    "how do",
    "how to",
    "how should",
    "how would",
    "what should",
    "what is",
    "what are",
    "what would",
    "why",
    "when should",
    "which",
    "can you explain",
    "could you explain",
    "should i",
    "is it",
    "is there",
    "do i",
)

PYTHON_KEYWORDS: Tuple[str, ...] = (
    "python",
    "flask",
    "django",
    "fastapi",
    "streamlit",
    "pandas",
    "numpy",
    "jupyter",
    "pytorch",
    "tensorflow",
    "scikit",
)

ACTION_VERBS: Tuple[str, ...] = ("create", "build", "generate", "make")

ADVICE_PHRASES: Tuple[str, ...] = (
    "advice",
    "suggest",
    "recommend",
    "what should",
    "best way",
    "help me decide",
    "which is better",
    "ideas for",
    "tips for",
)

ENHANCEMENT_VERBS: Tuple[str, ...] = ("enhance", "improve", "make better", "upgrade", "optimize")
EXISTING_MARKERS: Tuple[str, ...] = ("existing", "current")

MODIFICATION_VERBS: Tuple[str, ...] = ("change", "update", "modify")
STYLE_TARGETS: Tuple[str, ...] = ("color", "size", "text", "style", "font", "background")

FEATURE_VERBS: Tuple[str, ...] = ("add", "create", "build", "implement", "new")
FEATURE_NOUNS: Tuple[str, ...] = ("feature", "section", "page", "component", "function", "button")

INFRASTRUCTURE_KEYWORDS: Tuple[str, ...] = ("dockerfile", "docker", "containerize", "container")
MEDIA_KEYWORDS: Tuple[str, ...] = ("image", "picture", "photo")
REVIEW_KEYWORDS: Tuple[str, ...] = ("analyze", "review", "check")


def _contains_any(text: str, words: Tuple[str, ...]) -> bool:
    return any(w in text for w in words)


# =============================================================================
# PREDICATES (text is already lower-cased)
# =============================================================================


def is_question(text: str, ctx: ConversationContext) -> bool:
    if "?" in text:
        return True
    stripped = text.lstrip()
    return any(stripped.startswith(prefix) for prefix in INTERROGATIVE_PREFIXES)


def is_python_project(text: str, ctx: ConversationContext) -> bool:
    return _contains_any(text, PYTHON_KEYWORDS) and _contains_any(text, ACTION_VERBS)


def is_advice(text: str, ctx: ConversationContext) -> bool:
    if _contains_any(text, ADVICE_PHRASES):
        return True
    return "what" in text and ("do" in text or "add" in text)


def is_enhancement(text: str, ctx: ConversationContext) -> bool:
    return _contains_any(text, ENHANCEMENT_VERBS) and (_contains_any(text, EXISTING_MARKERS) or ctx.has_code)


def is_style_modification(text: str, ctx: ConversationContext) -> bool:
    return _contains_any(text, MODIFICATION_VERBS) and _contains_any(text, STYLE_TARGETS)


def is_new_feature(text: str, ctx: ConversationContext) -> bool:
    return _contains_any(text, FEATURE_VERBS) and _contains_any(text, FEATURE_NOUNS)


def is_infrastructure(text: str, ctx: ConversationContext) -> bool:
    return _contains_any(text, INFRASTRUCTURE_KEYWORDS)


def is_media(text: str, ctx: ConversationContext) -> bool:
    return _contains_any(text, MEDIA_KEYWORDS)


def is_review(text: str, ctx: ConversationContext) -> bool:
    return _contains_any(text, REVIEW_KEYWORDS)


def has_existing_code(text: str, ctx: ConversationContext) -> bool:
    return ctx.has_code


def always(text: str, ctx: ConversationContext) -> bool:
    return True


DEFAULT_RULES: List[IntentRule] = [
    IntentRule("question", 10, is_question, "consultation", "question", 0.95),
    IntentRule("python-project", 20, is_python_project, "python-generation", "full-project", 0.98),
    IntentRule("advice", 30, is_advice, "consultation", "advice", 0.92),
    IntentRule("enhancement", 40, is_enhancement, "code-generation", "enhancement", 0.90),
    IntentRule("modification", 50, is_style_modification, "code-generation", "modification", 0.95),
    IntentRule("new-feature", 60, is_new_feature, "code-generation", "new-feature", 0.88),
    IntentRule("dockerfile", 70, is_infrastructure, "infrastructure-generation", "dockerfile", 0.95),
    IntentRule("image", 80, is_media, "image-generation", None, 0.90),
    IntentRule("review", 90, is_review, "code-analysis", None, 0.85),
    IntentRule("has-code", 900, has_existing_code, "code-generation", "general", 0.70),
    IntentRule("chat", 1000, always, "chat", None, 0.50),
]

# Terminal result if a custom table has no catch-all rule
FALLBACK_RESULT = ClassificationResult(primary_intent="chat", confidence=0.5, rule="fallback")


class IntentClassifier:
    """
    Ordered, first-match-wins intent classifier.

    Usage:
        classifier = IntentClassifier()
        result = classifier.classify("Change the header color to blue", context)
        # result.label == "code-generation/modification"
    """

    def __init__(self, rules: Optional[List[IntentRule]] = None):
        self._rules: List[IntentRule] = []
        self._sorted = False
        for rule in rules if rules is not None else DEFAULT_RULES:
            self.register(rule)

    def register(self, rule: IntentRule) -> None:
        """Register a rule."""
        if not 0 < rule.confidence <= 1:
            raise ValueError(f"Rule {rule.name} confidence must be in (0, 1], got {rule.confidence}")
        self._rules.append(rule)
        self._sorted = False

    def _ensure_sorted(self) -> None:
        if not self._sorted:
            # Stable sort keeps registration order for equal priorities
            self._rules.sort(key=lambda r: r.priority)
            self._sorted = True

    def classify(self, message: str, context: Optional[ConversationContext] = None) -> ClassificationResult:
        """
        Classify a message.

        Never raises: a predicate that errors is logged and treated as a miss,
        and an exhausted table falls back to chat.
        """
        self._ensure_sorted()
        ctx = context if context is not None else ConversationContext()
        text = (message or "").lower()

        for rule in self._rules:
            try:
                matched = rule.predicate(text, ctx)
            except Exception as e:
                logger.warning(f"Intent rule {rule.name} failed: {e}")
                continue
            if matched:
                result = rule.result()
                logger.info(f"Intent classified as: {result.label} (confidence {result.confidence}, rule {rule.name})")
                return result

        logger.warning("No intent rule matched, falling back to chat")
        return FALLBACK_RESULT

    def get_rules(self) -> List[IntentRule]:
        """Get all registered rules (sorted by priority)."""
        self._ensure_sorted()
        return self._rules.copy()


# Global classifier instance with the default rule table
_classifier: Optional[IntentClassifier] = None


def get_classifier() -> IntentClassifier:
    """Get or create the global classifier."""
    global _classifier

    if _classifier is None:
        _classifier = IntentClassifier()
        logger.info(f"IntentClassifier initialized with {len(_classifier._rules)} rules")

    return _classifier
