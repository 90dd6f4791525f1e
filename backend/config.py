"""
Runtime Configuration for Sitewright.

Provides a singleton RuntimeConfig class that allows dynamic adjustment of
gateway, model and context parameters at runtime, without requiring
service restart.

Usage:
    from config import runtime_config
    model = runtime_config.model_chat
    runtime_config.update(consultation_temperature=0.5)
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from threading import Lock
from urllib.parse import quote_plus

logger = logging.getLogger(__name__)

# Fields never exported in plain text
_SECRET_FIELDS = {"gateway_api_key", "auth_jwt_secret", "database_url"}


def _first_env(*keys: str, default: str) -> str:
    """Return the first non-empty environment value from keys, else default."""
    for key in keys:
        value = os.environ.get(key, "").strip()
        if value:
            return value
    return default


def _env_bool(key: str, default: str) -> bool:
    return os.environ.get(key, default).lower() == "true"


def _build_database_url_default() -> str:
    """
    Build a PostgreSQL URL from env vars when DATABASE_URL is not explicitly set.

    Password is URL-encoded to avoid auth breakage with special characters.
    """
    explicit = os.environ.get("DATABASE_URL", "").strip()
    if explicit:
        return explicit

    user = os.environ.get("POSTGRES_USER", "sitewright").strip() or "sitewright"
    password = os.environ.get("POSTGRES_PASSWORD", "sitewright-local-dev")
    host = os.environ.get("POSTGRES_HOST", "localhost").strip() or "localhost"
    port = os.environ.get("POSTGRES_PORT", "5432").strip() or "5432"
    db = os.environ.get("POSTGRES_DB", "sitewright").strip() or "sitewright"

    safe_password = quote_plus(password)
    return f"postgresql://{user}:{safe_password}@{host}:{port}/{db}"


def _optional_float(key: str) -> Optional[float]:
    value = os.environ.get(key, "").strip()
    return float(value) if value else None


@dataclass
class RuntimeConfig:
    """
    Singleton configuration for runtime-adjustable parameters.

    All values have defaults from environment variables, but can be
    changed at runtime via the update() method.
    """

    # Generation gateway (OpenAI-compatible)
    gateway_url: str = field(
        default_factory=lambda: _first_env("LLM_GATEWAY_URL", default="https://ai.gateway.lovable.dev/v1")
    )
    gateway_api_key: str = field(
        default_factory=lambda: _first_env("LLM_GATEWAY_API_KEY", "LOVABLE_API_KEY", default="")
    )
    # Transport timeout for the SDK; None keeps the SDK default. There is no
    # application-level timeout or retry around generation calls.
    gateway_timeout: Optional[float] = field(default_factory=lambda: _optional_float("LLM_GATEWAY_TIMEOUT"))

    # Model names (can be hot-swapped)
    model_chat: str = field(default_factory=lambda: _first_env("LLM_CHAT_MODEL", default="google/gemini-2.5-pro"))
    model_code: str = field(
        default_factory=lambda: _first_env("LLM_CODE_MODEL", "LLM_CHAT_MODEL", default="google/gemini-2.5-pro")
    )
    model_fast: str = field(
        default_factory=lambda: _first_env("LLM_FAST_MODEL", default="google/gemini-2.5-flash")
    )  # Dockerfile analysis/generation
    model_image: str = field(
        default_factory=lambda: _first_env("LLM_IMAGE_MODEL", default="google/gemini-2.5-flash-image-preview")
    )

    # Model parameters per capability
    consultation_temperature: float = field(
        default_factory=lambda: float(os.environ.get("LLM_CONSULTATION_TEMPERATURE", "0.7"))
    )
    code_temperature: float = field(default_factory=lambda: float(os.environ.get("LLM_CODE_TEMPERATURE", "0.1")))
    project_temperature: float = field(
        default_factory=lambda: float(os.environ.get("LLM_PROJECT_TEMPERATURE", "0.3"))
    )
    infrastructure_temperature: float = field(
        default_factory=lambda: float(os.environ.get("LLM_INFRA_TEMPERATURE", "0.2"))
    )

    # Prompt context limits
    consultation_code_chars: int = field(
        default_factory=lambda: int(os.environ.get("CONSULTATION_CODE_CHARS", "2000"))
    )
    consultation_history_turns: int = field(
        default_factory=lambda: int(os.environ.get("CONSULTATION_HISTORY_TURNS", "3"))
    )
    analysis_code_chars: int = field(default_factory=lambda: int(os.environ.get("ANALYSIS_CODE_CHARS", "3000")))

    # Context loader limits
    knowledge_limit: int = field(default_factory=lambda: int(os.environ.get("CONTEXT_KNOWLEDGE_LIMIT", "5")))
    learnings_limit: int = field(default_factory=lambda: int(os.environ.get("CONTEXT_LEARNINGS_LIMIT", "10")))
    patterns_limit: int = field(default_factory=lambda: int(os.environ.get("CONTEXT_PATTERNS_LIMIT", "5")))
    pattern_min_confidence: int = field(
        default_factory=lambda: int(os.environ.get("CONTEXT_PATTERN_MIN_CONFIDENCE", "60"))
    )
    history_limit: int = field(default_factory=lambda: int(os.environ.get("CONTEXT_HISTORY_LIMIT", "20")))

    # PostgreSQL
    database_url: str = field(default_factory=_build_database_url_default)
    database_enabled: bool = field(default_factory=lambda: _env_bool("DATABASE_ENABLED", "true"))
    database_pool_size: int = field(default_factory=lambda: int(os.environ.get("DATABASE_POOL_SIZE", "10")))

    # Bearer token resolution
    auth_jwt_secret: str = field(default_factory=lambda: _first_env("AUTH_JWT_SECRET", "SUPABASE_JWT_SECRET", default=""))
    auth_jwt_audience: str = field(default_factory=lambda: os.environ.get("AUTH_JWT_AUDIENCE", "authenticated"))

    # HTTP surface
    expose_error_stack: bool = field(default_factory=lambda: _env_bool("EXPOSE_ERROR_STACK", "false"))
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper())

    # Internal state
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)
    _update_count: int = field(default=0, repr=False)

    # Validation ranges for numeric config values
    _VALIDATION_RANGES: Dict[str, tuple] = field(default_factory=lambda: {
        "consultation_temperature": (0.0, 2.0),
        "code_temperature": (0.0, 2.0),
        "project_temperature": (0.0, 2.0),
        "infrastructure_temperature": (0.0, 2.0),
        "consultation_code_chars": (0, 100000),
        "consultation_history_turns": (0, 100),
        "analysis_code_chars": (0, 100000),
        "knowledge_limit": (0, 100),
        "learnings_limit": (0, 100),
        "patterns_limit": (0, 100),
        "pattern_min_confidence": (0, 100),
        "history_limit": (0, 500),
    }, repr=False, compare=False)

    def update(self, **kwargs) -> Dict[str, Any]:
        """
        Update configuration values at runtime.

        Args:
            **kwargs: Key-value pairs to update (e.g., history_limit=40)

        Returns:
            Dict with 'updated' (changed keys), 'ignored' (unknown keys)
            and 'rejected' (values outside their validation range)
        """
        updated = {}
        ignored = []
        rejected = {}

        with self._lock:
            for key, value in kwargs.items():
                if key.startswith("_") or not hasattr(self, key):
                    ignored.append(key)
                    continue

                bounds = self._VALIDATION_RANGES.get(key)
                if bounds is not None:
                    low, high = bounds
                    if not (low <= value <= high):
                        rejected[key] = f"must be between {low} and {high}"
                        continue

                old = getattr(self, key)
                if old != value:
                    setattr(self, key, value)
                    updated[key] = {"old": old, "new": value}

            if updated:
                self._update_count += 1
                logger.info(f"Runtime config updated: {sorted(updated)}")

        return {"updated": updated, "ignored": ignored, "rejected": rejected}

    def to_dict(self) -> Dict[str, Any]:
        """Export current config as dict (excludes internal fields, masks secrets)."""
        from dataclasses import fields as dataclass_fields

        result = {}
        for field_info in dataclass_fields(self):
            if field_info.name.startswith("_"):
                continue
            value = getattr(self, field_info.name)
            if field_info.name in _SECRET_FIELDS:
                value = "***" if value else ""
            result[field_info.name] = value
        return result


# Singleton instance
runtime_config = RuntimeConfig()
