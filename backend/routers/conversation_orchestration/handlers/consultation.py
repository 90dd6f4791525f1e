"""
Consultation Handler - Advice and question answering.

One gateway call. The prompt embeds the platform capability description,
the current code (truncated) and the last few history turns.
"""

from routers.conversation_prompts import build_consultation_prompt

from ..payloads import CapabilityResponse, ConsultationPayload
from .base import CapabilityHandler


class ConsultationHandler(CapabilityHandler):
    intent = "consultation"
    module = ConsultationPayload.module

    async def run(self, classification, message, context) -> CapabilityResponse:
        prompt = build_consultation_prompt(
            message,
            context.current_code,
            context.recent_history(self.config.consultation_history_turns),
            code_chars=self.config.consultation_code_chars,
        )
        advice = await self.llm.chat(
            [self.user_message(prompt)],
            model=self.config.model_chat,
            temperature=self.config.consultation_temperature,
            operation="Consultation",
        )
        return CapabilityResponse.of(ConsultationPayload(message=advice, type=classification.sub_intent or "advice"))
