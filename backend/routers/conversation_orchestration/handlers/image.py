"""
Image Handler - Delegates to the gateway's image capability.
"""

from ..payloads import CapabilityResponse, ImagePayload
from .base import CapabilityHandler


class ImageHandler(CapabilityHandler):
    intent = "image-generation"
    module = ImagePayload.module

    async def run(self, classification, message, context) -> CapabilityResponse:
        result = await self.llm.generate_image(message, model=self.config.model_image)
        return CapabilityResponse.of(ImagePayload(result=result))
