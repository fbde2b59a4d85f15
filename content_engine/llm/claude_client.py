"""Claude client implementation"""

import logging
from typing import Optional, Tuple

from anthropic import AsyncAnthropic

from ..config import Config, get_config
from .base import ProgressCallback, StructuredOutputClient
from .errors import ProviderConfigurationError

logger = logging.getLogger(__name__)


class ClaudeClient(StructuredOutputClient):
    """Structured-output client backed by the Anthropic Messages API"""

    provider_name = "claude"

    def __init__(
        self,
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
        client: Optional[AsyncAnthropic] = None,
    ):
        """
        Initialize Claude client.

        Args:
            config: Optional configuration object
            progress_callback: Optional progress hook
            client: Pre-built SDK client (skips API key lookup)
        """
        if config is None:
            config = get_config()

        super().__init__(config.get_provider("claude"), progress_callback)

        if client is None:
            api_key = config.get_api_key("claude")
            if not api_key:
                raise ProviderConfigurationError(
                    "ANTHROPIC_API_KEY not found in environment variables"
                )
            client = AsyncAnthropic(api_key=api_key)

        self.client = client
        logger.info(f"Initialized ClaudeClient with model: {self.model}")

    async def _call_model(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Tuple[str, int]:
        """Call Claude API"""
        api_params = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system_prompt:
            api_params["system"] = system_prompt

        response = await self.client.messages.create(**api_params)

        text = ""
        for block in response.content:
            if hasattr(block, "text"):
                text = block.text
                break

        usage = response.usage
        tokens = (usage.input_tokens or 0) + (usage.output_tokens or 0) if usage else 0
        return text, tokens
