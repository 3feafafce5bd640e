"""Generative model client.

The pipeline only depends on the ``ModelInvoker`` protocol: an async
``invoke(prompt, attachment=None) -> str`` callable. ``GeminiClient`` is the
production implementation on top of ``google-genai``; tests substitute stubs.

The synchronous SDK call runs in a worker thread via ``asyncio.to_thread`` and
is bounded by MODEL_TIMEOUT_SECONDS. Transient failures (timeouts, connection
errors, 429/5xx) are retried with exponential backoff up to MODEL_MAX_ATTEMPTS
total attempts; permanent errors propagate immediately.
"""

import asyncio
import time
from typing import Optional, Protocol

from google import genai
from google.genai import types

from pantry_ai.models.models import ImageAttachment
from pantry_ai.utils.config import Config, config as default_config
from pantry_ai.utils.logger import logger

TRANSIENT_ERROR_KEYWORDS = ("timeout", "timed out", "connection", "429", "500", "502", "503", "retryable")


class ModelInvoker(Protocol):
    """Anything that turns a prompt (plus optional image) into model text."""

    async def invoke(self, prompt: str, attachment: Optional[ImageAttachment] = None) -> str: ...


def is_transient_error(error: Exception) -> bool:
    """Whether an error is worth retrying (network, timeout, rate limit, 5xx)."""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True
    error_str = str(error).lower()
    return any(keyword in error_str for keyword in TRANSIENT_ERROR_KEYWORDS)


class GeminiClient:
    """ModelInvoker backed by the Google Gemini API.

    One instance is created per caller and passed into the services; there is
    no process-wide client handle.
    """

    def __init__(self, settings: Optional[Config] = None, client: Optional[genai.Client] = None) -> None:
        self.config = settings or default_config
        self.config.validate()
        self._client = client or genai.Client(api_key=self.config.GEMINI_API_KEY)
        self._generation_config = types.GenerateContentConfig(
            temperature=self.config.TEMPERATURE,
            max_output_tokens=self.config.MAX_OUTPUT_TOKENS,
        )

    def _model_for(self, attachment: Optional[ImageAttachment]) -> str:
        return self.config.IMAGE_DETECTION_MODEL if attachment else self.config.GEMINI_MODEL

    async def _generate(self, prompt: str, attachment: Optional[ImageAttachment]) -> str:
        """Single model call (no retries)."""
        contents = [prompt]
        if attachment is not None:
            contents.append(types.Part.from_bytes(data=attachment.data, mime_type=attachment.mime_type))

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self._client.models.generate_content,
                    model=self._model_for(attachment),
                    contents=contents,
                    config=self._generation_config,
                ),
                timeout=self.config.MODEL_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(f"Model call timed out after {self.config.MODEL_TIMEOUT_SECONDS}s") from None

        return response.text or ""

    async def invoke(self, prompt: str, attachment: Optional[ImageAttachment] = None) -> str:
        """Send a prompt (and optional image) to Gemini and return the reply text.

        Args:
            prompt: Complete prompt text.
            attachment: Optional image sent alongside the prompt.

        Returns:
            str: Raw model output, possibly empty.

        Raises:
            Exception: The last SDK error once attempts are exhausted, or
                immediately for non-transient errors.
        """
        max_attempts = self.config.MODEL_MAX_ATTEMPTS
        delay_seconds = self.config.DELAY_BETWEEN_RETRIES
        attempt = 1

        while True:
            started = time.perf_counter()
            try:
                text = await self._generate(prompt, attachment)
                logger.debug(
                    f"Model {self._model_for(attachment)} answered in "
                    f"{(time.perf_counter() - started) * 1000:.0f}ms ({len(text)} chars)"
                )
                return text
            except Exception as e:
                if not is_transient_error(e) or attempt >= max_attempts:
                    raise
                logger.debug(
                    f"Transient error detected, retrying (attempt {attempt + 1}/{max_attempts}) "
                    f"after {delay_seconds}s: {e}"
                )
                await asyncio.sleep(delay_seconds)
                delay_seconds *= 2
                attempt += 1
