"""
Code Analysis Handler - Single review call over the current code.

Falls back to reviewing the message itself when no code is attached. The
quality and performance scores are fixed placeholders.
"""

from routers.conversation_prompts import CODE_REVIEW_SYSTEM_PROMPT, build_code_review_request

from ..payloads import CapabilityResponse, CodeAnalysisPayload
from .base import CapabilityHandler


class CodeAnalysisHandler(CapabilityHandler):
    intent = "code-analysis"
    module = CodeAnalysisPayload.module

    async def run(self, classification, message, context) -> CapabilityResponse:
        review = await self.llm.chat(
            [
                {"role": "system", "content": CODE_REVIEW_SYSTEM_PROMPT},
                self.user_message(build_code_review_request(message, context.current_code)),
            ],
            model=self.config.model_code,
            operation="Code analysis",
        )
        return CapabilityResponse.of(CodeAnalysisPayload(analysis=review))
