"""DeepSeek client implementation"""

import logging
from typing import Optional, Tuple

from openai import AsyncOpenAI

from ..config import Config, get_config
from .base import ProgressCallback, StructuredOutputClient
from .errors import ProviderConfigurationError

logger = logging.getLogger(__name__)


class DeepSeekClient(StructuredOutputClient):
    """Structured-output client backed by DeepSeek's OpenAI-compatible API"""

    provider_name = "deepseek"

    def __init__(
        self,
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize DeepSeek client.

        Args:
            config: Optional configuration object
            progress_callback: Optional progress hook
            client: Pre-built SDK client (skips API key lookup)
        """
        if config is None:
            config = get_config()

        provider_config = config.get_provider("deepseek")
        super().__init__(provider_config, progress_callback)

        if client is None:
            api_key = config.get_api_key("deepseek")
            if not api_key:
                raise ProviderConfigurationError(
                    "DEEPSEEK_API_KEY not found in environment variables"
                )
            client = AsyncOpenAI(api_key=api_key, base_url=provider_config.base_url)

        self.client = client
        logger.info(f"Initialized DeepSeekClient with model: {self.model}")

    async def _call_model(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Tuple[str, int]:
        """Call DeepSeek API"""
        # System message goes first (OpenAI-style)
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            response_format={"type": "json_object"},
        )

        usage = response.usage
        tokens = (usage.prompt_tokens or 0) + (usage.completion_tokens or 0) if usage else 0
        return response.choices[0].message.content or "", tokens
