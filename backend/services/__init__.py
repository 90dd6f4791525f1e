"""
Sitewright Services - Shared infrastructure services.

- database: PostgreSQL pool manager with health checks and degradation
- conversation_store: SQL for context reads and message writes
- llm_client: OpenAI-compatible generation gateway client
- auth: Bearer token to user id resolution
- status_snapshot: Live platform counters for the chat prompt
- json_repair: Structured-output extraction and repair
"""

from .database import DatabaseManager, get_database
from .llm_client import LLMClient, get_llm_client

__all__ = ["DatabaseManager", "get_database", "LLMClient", "get_llm_client"]
