"""
Infrastructure Handler - Dockerfile generation.

Analysis call (JSON project analysis) followed by the Dockerfile call.
The context's docker_knowledge slice (top "docker" domain entries) is
passed to the second prompt as best practices.
"""

from routers.conversation_prompts import build_docker_analysis_prompt, build_dockerfile_prompt
from services.json_repair import extract_code_block

from ..payloads import CapabilityResponse, InfrastructurePayload
from .base import CapabilityHandler


class InfrastructureHandler(CapabilityHandler):
    intent = "infrastructure-generation"
    module = InfrastructurePayload.module

    async def run(self, classification, message, context) -> CapabilityResponse:
        model = self.config.model_fast

        analysis_reply = await self.llm.chat(
            [self.user_message(build_docker_analysis_prompt(message))],
            model=model,
            temperature=self.config.infrastructure_temperature,
            operation="Dockerfile analysis",
        )
        analysis = self.parse_structured(analysis_reply, "Dockerfile analysis", model)

        dockerfile_reply = await self.llm.chat(
            [self.user_message(build_dockerfile_prompt(analysis, context.docker_knowledge))],
            model=model,
            temperature=self.config.code_temperature,
            operation="Dockerfile generation",
        )
        dockerfile = extract_code_block(dockerfile_reply, ("dockerfile", "docker"))

        return CapabilityResponse.of(InfrastructurePayload(dockerfile=dockerfile, analysis=analysis))
