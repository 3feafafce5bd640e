"""Unit tests for the Gemini model client (SDK mocked)."""

import time
from unittest.mock import MagicMock, patch

import pytest

from pantry_ai.llm.gemini import GeminiClient, is_transient_error
from pantry_ai.models.models import ImageAttachment
from pantry_ai.utils.config import Config


@pytest.fixture
def settings():
    """Valid configuration with fast retries."""
    config = Config()
    config.GEMINI_API_KEY = "test_key"
    config.GEMINI_MODEL = "text-model"
    config.IMAGE_DETECTION_MODEL = "vision-model"
    config.MODEL_MAX_ATTEMPTS = 1
    config.DELAY_BETWEEN_RETRIES = 0
    config.MODEL_TIMEOUT_SECONDS = 5
    return config


def make_client(settings, side_effect=None, text="{}"):
    sdk_client = MagicMock()
    if side_effect is not None:
        sdk_client.models.generate_content.side_effect = side_effect
    else:
        sdk_client.models.generate_content.return_value = MagicMock(text=text)
    return GeminiClient(settings=settings, client=sdk_client), sdk_client


class TestIsTransientError:
    @pytest.mark.parametrize(
        "error",
        [
            TimeoutError(),
            ConnectionError("reset"),
            Exception("429 RESOURCE_EXHAUSTED"),
            Exception("503 Service Unavailable"),
            Exception("Connection aborted"),
        ],
    )
    def test_transient(self, error):
        assert is_transient_error(error)

    def test_permanent(self):
        assert not is_transient_error(Exception("400 API key not valid"))


class TestGeminiClient:
    """Test invocation, model selection, timeout and retries."""

    def test_requires_api_key(self, settings):
        settings.GEMINI_API_KEY = ""

        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiClient(settings=settings, client=MagicMock())

    def test_creates_sdk_client_with_key(self, settings):
        with patch("pantry_ai.llm.gemini.genai.Client") as mock_client_cls:
            GeminiClient(settings=settings)

        mock_client_cls.assert_called_once_with(api_key="test_key")

    @pytest.mark.asyncio
    async def test_text_prompt_uses_text_model(self, settings):
        client, sdk_client = make_client(settings, text='{"location": "fridge"}')

        result = await client.invoke("prompt text")

        assert result == '{"location": "fridge"}'
        kwargs = sdk_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "text-model"
        assert kwargs["contents"] == ["prompt text"]
        assert kwargs["config"].temperature == settings.TEMPERATURE
        assert kwargs["config"].max_output_tokens == settings.MAX_OUTPUT_TOKENS

    @pytest.mark.asyncio
    async def test_image_prompt_uses_vision_model(self, settings):
        client, sdk_client = make_client(settings, text="[]")

        await client.invoke("detect", ImageAttachment(data=b"\xff\xd8\xff\xe0", mime_type="image/jpeg"))

        kwargs = sdk_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "vision-model"
        assert len(kwargs["contents"]) == 2

    @pytest.mark.asyncio
    async def test_empty_response_text(self, settings):
        client, _ = make_client(settings, text=None)

        assert await client.invoke("prompt") == ""

    @pytest.mark.asyncio
    async def test_timeout(self, settings):
        settings.MODEL_TIMEOUT_SECONDS = 0.05
        client, _ = make_client(settings, side_effect=lambda **kwargs: time.sleep(0.5))

        with pytest.raises(TimeoutError, match="timed out"):
            await client.invoke("prompt")

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self, settings):
        settings.MODEL_MAX_ATTEMPTS = 3
        client, sdk_client = make_client(
            settings,
            side_effect=[Exception("503 Service Unavailable"), Exception("429 quota"), MagicMock(text="ok")],
        )

        assert await client.invoke("prompt") == "ok"
        assert sdk_client.models.generate_content.call_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, settings):
        settings.MODEL_MAX_ATTEMPTS = 2
        client, sdk_client = make_client(settings, side_effect=Exception("503 Service Unavailable"))

        with pytest.raises(Exception, match="503"):
            await client.invoke("prompt")
        assert sdk_client.models.generate_content.call_count == 2

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self, settings):
        settings.MODEL_MAX_ATTEMPTS = 3
        client, sdk_client = make_client(settings, side_effect=Exception("400 API key not valid"))

        with pytest.raises(Exception, match="400"):
            await client.invoke("prompt")
        assert sdk_client.models.generate_content.call_count == 1

    @pytest.mark.asyncio
    async def test_no_retry_by_default(self, settings):
        client, sdk_client = make_client(settings, side_effect=Exception("503 Service Unavailable"))

        with pytest.raises(Exception):
            await client.invoke("prompt")
        assert sdk_client.models.generate_content.call_count == 1
