"""Tests for the provider clients and client factory."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from content_engine.config import Config
from content_engine.llm.claude_client import ClaudeClient
from content_engine.llm.deepseek_client import DeepSeekClient
from content_engine.llm.dispatcher import DualProviderDispatcher
from content_engine.llm.errors import ProviderConfigurationError
from content_engine.llm.factory import ClientFactory
from content_engine.llm.gemini_client import GeminiClient


class Answer(BaseModel):
    a: int


@pytest.mark.unit
class TestClaudeClient:
    """Test the Anthropic backend."""

    async def test_sums_input_and_output_tokens(self, config: Config) -> None:
        """Usage is input + output tokens and the first text block is parsed."""
        sdk = MagicMock()
        sdk.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[SimpleNamespace(text='{"a": 1}')],
                usage=SimpleNamespace(input_tokens=10, output_tokens=5),
            )
        )
        client = ClaudeClient(config=config, client=sdk)

        response = await client.invoke("Question", Answer, system_prompt="sys", max_tokens=321)

        assert response.value == Answer(a=1)
        assert response.tokens_used == 15
        assert response.provider == "claude"
        kwargs = sdk.messages.create.call_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["max_tokens"] == 321
        assert kwargs["model"] == config.model.claude.model

    def test_missing_key(self, config: Config, monkeypatch: pytest.MonkeyPatch) -> None:
        """No API key is a configuration error."""
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ProviderConfigurationError):
            ClaudeClient(config=config)


@pytest.mark.unit
class TestDeepSeekClient:
    """Test the DeepSeek backend."""

    async def test_json_mode_and_usage(self, config: Config) -> None:
        """Requests JSON mode and sums prompt + completion tokens."""
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content='{"a": 2}'))],
                usage=SimpleNamespace(prompt_tokens=3, completion_tokens=4),
            )
        )
        client = DeepSeekClient(config=config, client=sdk)

        response = await client.invoke("Question", Answer, system_prompt="sys")

        assert response.value == Answer(a=2)
        assert response.tokens_used == 7
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}


@pytest.mark.unit
class TestGeminiClient:
    """Test the Gemini backend."""

    async def test_total_token_count(self, config: Config) -> None:
        """Usage comes from usage_metadata.total_token_count."""
        model = MagicMock()
        model.generate_content_async = AsyncMock(
            return_value=SimpleNamespace(
                text='{"a": 3}', usage_metadata=SimpleNamespace(total_token_count=42)
            )
        )
        factory = MagicMock(return_value=model)
        client = GeminiClient(config=config, model_factory=factory)

        response = await client.invoke("Question", Answer, system_prompt="sys")

        assert response.value == Answer(a=3)
        assert response.tokens_used == 42
        factory.assert_called_once_with(config.model.gemini.model, "sys")


@pytest.mark.unit
class TestClientFactory:
    """Test provider construction."""

    def test_unknown_provider(self, config: Config) -> None:
        """Unsupported names raise a configuration error."""
        with pytest.raises(ProviderConfigurationError):
            ClientFactory.create("mistral", config)

    def test_dispatcher_uses_configured_pair(self, config: Config) -> None:
        """Primary and fallback come from config, along with secondary_only."""
        config.model.secondary_only = True
        with (
            patch("content_engine.llm.factory.ClaudeClient") as MockClaude,
            patch("content_engine.llm.factory.GeminiClient") as MockGemini,
        ):
            MockClaude.return_value.provider_name = "claude"
            MockGemini.return_value.provider_name = "gemini"

            dispatcher = ClientFactory.create_dispatcher(config)

        assert isinstance(dispatcher, DualProviderDispatcher)
        assert dispatcher.primary is MockClaude.return_value
        assert dispatcher.fallback is MockGemini.return_value
        assert dispatcher.secondary_only is True
