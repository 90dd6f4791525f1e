"""
Code Change Handler - Two-step analyze-then-modify code generation.

Step 1 asks for a small JSON analysis of what to change. Step 2 sends the
full current code plus that analysis and expects the complete replacement
document back. The calls run strictly in sequence.
"""

import logging

from routers.conversation_prompts import build_change_analysis_prompt, build_modification_prompt
from services.json_repair import extract_code_block

from ..payloads import CapabilityResponse, CodeChangePayload
from .base import CapabilityHandler

logger = logging.getLogger(__name__)

CODE_LANGUAGES = ("html", "tsx", "typescript", "jsx")

WORK_TYPES = {
    "modification": "Simple Modification",
    "enhancement": "Feature Enhancement",
    "new-feature": "New Feature",
}


class CodeChangeHandler(CapabilityHandler):
    intent = "code-generation"
    module = CodeChangePayload.module

    async def run(self, classification, message, context) -> CapabilityResponse:
        model = self.config.model_code
        temperature = self.config.code_temperature

        analysis_reply = await self.llm.chat(
            [
                self.user_message(
                    build_change_analysis_prompt(message, context.current_code, self.config.analysis_code_chars)
                )
            ],
            model=model,
            temperature=temperature,
            operation="Analysis",
        )
        analysis = self.parse_structured(analysis_reply, "Analysis", model)
        logger.info(f"Change analysis: {analysis.get('changeType')} on {analysis.get('targetElement')}")

        modification_reply = await self.llm.chat(
            [self.user_message(build_modification_prompt(message, context.current_code, analysis))],
            model=model,
            temperature=temperature,
            operation="Modification",
        )
        code = extract_code_block(modification_reply, CODE_LANGUAGES)

        payload = CodeChangePayload(
            code=code,
            analysis=analysis,
            explanation=f"Updated {analysis.get('targetElement', 'code')}: {analysis.get('modification', message)}",
            work_type=WORK_TYPES.get(classification.sub_intent or "", "General Code Work"),
        )
        return CapabilityResponse.of(payload)
