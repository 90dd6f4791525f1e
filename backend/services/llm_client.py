"""
LLM Client - wraps the OpenAI SDK to talk to the generation gateway.

The gateway speaks the OpenAI chat-completions protocol. Every capability
handler goes through this client so error translation lives in one place:

- Non-2xx status      → ExternalServiceError(service="llm", status_code=...)
- Connection failure  → ExternalServiceError(service="llm")
- Empty choices       → LLMError(error_type="invalid")

SDK retries are disabled; a failed call is raised to the caller as-is.
"""

import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from errors import ExternalServiceError, LLMError
from logging_config import log_llm

logger = logging.getLogger(__name__)


def _extract_thinking(content: str) -> tuple:
    """Extract <think>...</think> tags from content.

    Some gateway models return reasoning inline as <think> tags.

    Returns:
        (clean_content, thinking_text)
    """
    if not content:
        return "", ""

    # Find all think blocks
    think_pattern = re.compile(r"<think>(.*?)</think>", re.DOTALL)
    thinking_parts = think_pattern.findall(content)
    thinking = "\n".join(thinking_parts).strip()

    # Remove think tags from content
    clean = think_pattern.sub("", content).strip()
    return clean, thinking


def _translate_status_error(error: APIStatusError, operation: str, service: str = "llm") -> ExternalServiceError:
    body = ""
    try:
        body = error.response.text[:500]
    except Exception:
        pass
    return ExternalServiceError(
        message=f"{operation} failed: {error.status_code}",
        details=body or None,
        service=service,
        status_code=error.status_code,
    )


class LLMClient:
    """Async client for the OpenAI-compatible generation gateway."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: Gateway URL including the API version (e.g. ".../v1")
            api_key: Bearer key for the gateway
            timeout: Transport timeout in seconds (None keeps the SDK default)
            http_client: Optional pre-built httpx client (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        kwargs: Dict[str, Any] = {
            "base_url": self.base_url,
            "api_key": api_key or "not-configured",
            "max_retries": 0,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout
        if http_client is not None:
            kwargs["http_client"] = http_client
        self._openai = AsyncOpenAI(**kwargs)

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        temperature: Optional[float] = None,
        operation: str = "Generation",
    ) -> str:
        """Call the chat-completions endpoint once and return the reply text.

        Args:
            messages: List of {"role", "content"} dicts
            model: Gateway model name
            temperature: Optional sampling temperature
            operation: Label used in error messages (e.g. "Consultation")

        Returns:
            Assistant message content with any <think> blocks removed

        Raises:
            ExternalServiceError: Gateway returned a non-2xx status or was unreachable
            LLMError: Gateway returned no choices
        """
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": m.get("role", "user"), "content": m.get("content", "")} for m in messages],
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        log_llm(logger, "start", model=model, operation=operation)
        start_time = time.time()

        try:
            response = await self._openai.chat.completions.create(**kwargs)
        except APIStatusError as e:
            logger.warning(f"{operation} call to {model} returned HTTP {e.status_code}")
            raise _translate_status_error(e, operation) from e
        except APIConnectionError as e:
            raise ExternalServiceError(
                message=f"{operation} failed: gateway unreachable",
                details=str(e),
                service="llm",
            ) from e

        log_llm(logger, "end", model=model, duration=time.time() - start_time, operation=operation)

        if not response.choices:
            raise LLMError(f"{operation} returned no choices", error_type="invalid", model=model)

        raw_content = response.choices[0].message.content or ""
        content, thinking = _extract_thinking(raw_content)
        if thinking:
            logger.debug(f"Dropped {len(thinking)} chars of inline reasoning from {model}")
        return content

    async def generate_image(self, prompt: str, model: str) -> Dict[str, Any]:
        """Generate one image for a prompt.

        Returns:
            Dict with "imageUrl" (URL or data URI), "prompt" and "model"

        Raises:
            ExternalServiceError: Image endpoint failed
        """
        log_llm(logger, "start", model=model, operation="Image generation")
        start_time = time.time()

        try:
            response = await self._openai.images.generate(model=model, prompt=prompt, n=1)
        except APIStatusError as e:
            raise _translate_status_error(e, "Image generation", service="image") from e
        except APIConnectionError as e:
            raise ExternalServiceError(
                message="Image generation failed: gateway unreachable",
                details=str(e),
                service="image",
            ) from e

        log_llm(logger, "end", model=model, duration=time.time() - start_time, operation="Image generation")

        if not response.data:
            raise ExternalServiceError("Image generation returned no images", service="image")

        image = response.data[0]
        if image.url:
            image_url = image.url
        elif image.b64_json:
            image_url = f"data:image/png;base64,{image.b64_json}"
        else:
            raise ExternalServiceError("Image generation returned an empty image", service="image")

        return {
            "success": True,
            "imageUrl": image_url,
            "prompt": prompt,
            "model": model,
            "revisedPrompt": getattr(image, "revised_prompt", None),
        }

    async def close(self) -> None:
        await self._openai.close()


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the gateway client configured from runtime config."""
    global _llm_client
    if _llm_client is None:
        from config import runtime_config

        if not runtime_config.gateway_api_key:
            logger.warning("LLM_GATEWAY_API_KEY is not set; gateway calls will be rejected")
        _llm_client = LLMClient(
            base_url=runtime_config.gateway_url,
            api_key=runtime_config.gateway_api_key,
            timeout=runtime_config.gateway_timeout,
        )
    return _llm_client


async def close_llm_client() -> None:
    global _llm_client
    if _llm_client is not None:
        await _llm_client.close()
        _llm_client = None
