"""LLM backend abstraction for multi-provider support.

Provides a single text-generation interface over the provider SDKs:
- Google Gemini (google-genai)
- OpenAI-compatible chat completions (openai), used for OpenAI and DeepSeek

Each backend handles provider-specific concerns:
- Client creation from the caller's credential
- Request shape (single content string vs one user-role chat message)
- Response parsing into plain text

The dispatcher handles provider-agnostic concerns:
- Provider routing and default model selection
- Credential resolution
- Wrapping failures into BackendError
"""

import logging
import time
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"


@runtime_checkable
class TextBackend(Protocol):
    """Protocol for LLM backend implementations.

    generate() returns the generated text, or "" when the response carries
    no content. Any failure propagates as an exception.
    """

    async def generate(self, model: str, prompt: str, credential: str) -> str: ...


class GeminiBackend:
    """Google Gemini backend.

    The whole prompt is passed as the request content in a single
    generate-content call. Requires the google-genai package.
    """

    def _get_client(self, credential: str):
        """Get a Gemini client. Lazy import keeps the SDK out of module import."""
        from google import genai

        return genai.Client(api_key=credential)

    async def generate(self, model: str, prompt: str, credential: str) -> str:
        client = self._get_client(credential)
        start_time = time.time()

        logger.info(f"Gemini generate: model={model}, ~{len(prompt) // 4:,} input tokens")

        response = await client.aio.models.generate_content(
            model=model,
            contents=prompt,
        )

        text = response.text or ""
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Gemini completed: model={model}, {duration_ms}ms, {len(text):,} chars")
        return text


class OpenAIChatBackend:
    """OpenAI-compatible chat completion backend.

    Sends the prompt as a single user-role message. base_url routes the
    same request shape to other OpenAI-compatible APIs (DeepSeek).
    """

    def __init__(self, base_url: Optional[str] = None, label: str = "OpenAI"):
        self._base_url = base_url
        self._label = label

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    async def generate(self, model: str, prompt: str, credential: str) -> str:
        from openai import AsyncOpenAI

        start_time = time.time()
        logger.info(f"{self._label} chat completion: model={model}, ~{len(prompt) // 4:,} input tokens")

        async with AsyncOpenAI(api_key=credential, base_url=self._base_url) as client:
            completion = await client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
            )

        text = ""
        if completion.choices:
            text = completion.choices[0].message.content or ""

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"{self._label} completed: model={model}, {duration_ms}ms, {len(text):,} chars")
        return text
