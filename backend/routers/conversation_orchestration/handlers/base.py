"""
Base Handler - Abstract base class for capability handlers.

Each handler serves one primary intent:
1. Build the capability's prompt(s) from the message and context
2. Call the generation gateway once or twice, in sequence
3. Return a typed payload wrapped in a CapabilityResponse

Handlers never write to storage and never retry. Gateway and parse errors
propagate to the pipeline.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from config import RuntimeConfig
from errors import LLMError
from services.json_repair import parse_json_response
from services.llm_client import LLMClient

from ..classifier import ClassificationResult
from ..context import ConversationContext
from ..payloads import CapabilityResponse

logger = logging.getLogger(__name__)


class CapabilityHandler(ABC):
    """
    Abstract base class for capability handlers.

    Attributes:
        intent: Primary intent this handler serves
        module: Module name reported in the response envelope
    """

    intent: str = ""
    module: str = ""

    def __init__(self, llm: LLMClient, config: Optional[RuntimeConfig] = None):
        if config is None:
            from config import runtime_config

            config = runtime_config
        self.llm = llm
        self.config = config

    @abstractmethod
    async def run(
        self,
        classification: ClassificationResult,
        message: str,
        context: ConversationContext,
    ) -> CapabilityResponse:
        """
        Produce the capability's response.

        Raises:
            ExternalServiceError: Gateway call failed
            LLMError: Structured output could not be parsed
        """
        pass

    def parse_structured(self, text: str, operation: str, model: str) -> Dict[str, Any]:
        """Parse a JSON object out of a reply; anything else is a hard failure."""
        parsed = parse_json_response(text)
        if not isinstance(parsed, dict):
            logger.warning(f"{operation}: no JSON object in {len(text or '')} chars of output")
            raise LLMError(
                f"{operation} returned unparseable output",
                error_type="parse",
                model=model,
            )
        return parsed

    @staticmethod
    def user_message(content: str) -> Dict[str, Any]:
        return {"role": "user", "content": content}
