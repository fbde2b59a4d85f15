"""Gemini client implementation"""

import logging
from typing import Any, Optional, Tuple

import google.generativeai as genai

from ..config import Config, get_config
from .base import ProgressCallback, StructuredOutputClient
from .errors import ProviderConfigurationError

logger = logging.getLogger(__name__)


class GeminiClient(StructuredOutputClient):
    """Structured-output client backed by Google Gemini (JSON response mode)"""

    provider_name = "gemini"

    def __init__(
        self,
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
        model_factory: Optional[Any] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            config: Optional configuration object
            progress_callback: Optional progress hook
            model_factory: Callable (model_name, system_instruction) -> model;
                defaults to genai.GenerativeModel
        """
        if config is None:
            config = get_config()

        super().__init__(config.get_provider("gemini"), progress_callback)

        if model_factory is None:
            api_key = config.get_api_key("gemini")
            if not api_key:
                raise ProviderConfigurationError(
                    "GEMINI_API_KEY not found in environment variables"
                )
            genai.configure(api_key=api_key)
            model_factory = self._default_model

        self.model_factory = model_factory
        logger.info(f"Initialized GeminiClient with model: {self.model}")

    @staticmethod
    def _default_model(model_name: str, system_instruction: Optional[str]) -> Any:
        return genai.GenerativeModel(model_name, system_instruction=system_instruction)

    async def _call_model(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Tuple[str, int]:
        """Call Gemini API"""
        model = self.model_factory(self.model, system_prompt or None)
        response = await model.generate_content_async(
            prompt,
            generation_config=genai.types.GenerationConfig(
                max_output_tokens=max_tokens,
                temperature=temperature,
                response_mime_type="application/json",
            ),
        )

        usage = getattr(response, "usage_metadata", None)
        tokens = getattr(usage, "total_token_count", 0) or 0 if usage else 0
        return response.text, tokens
