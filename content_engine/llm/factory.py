"""Client factory for creating provider-specific structured-output clients"""

import logging
from typing import Optional

from ..config import Config, get_config
from .base import ProgressCallback, StructuredOutputClient
from .claude_client import ClaudeClient
from .deepseek_client import DeepSeekClient
from .dispatcher import DualProviderDispatcher
from .errors import ProviderConfigurationError
from .gemini_client import GeminiClient

logger = logging.getLogger(__name__)


class ClientFactory:
    """Factory for creating the appropriate client based on provider name"""

    @staticmethod
    def create(
        provider: str,
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> StructuredOutputClient:
        """
        Create a client instance for the specified provider.

        Args:
            provider: Provider name ("claude", "gemini", "deepseek")
            config: Optional configuration object
            progress_callback: Optional progress hook

        Returns:
            Client instance

        Raises:
            ProviderConfigurationError: If provider is not supported or has no key
        """
        if config is None:
            config = get_config()

        provider_lower = provider.lower()

        if "claude" in provider_lower or "anthropic" in provider_lower:
            logger.info("Creating ClaudeClient")
            return ClaudeClient(config=config, progress_callback=progress_callback)

        elif "gemini" in provider_lower or "google" in provider_lower:
            logger.info("Creating GeminiClient")
            return GeminiClient(config=config, progress_callback=progress_callback)

        elif "deepseek" in provider_lower:
            logger.info("Creating DeepSeekClient")
            return DeepSeekClient(config=config, progress_callback=progress_callback)

        else:
            raise ProviderConfigurationError(
                f"Unsupported provider: {provider}. Supported: claude, gemini, deepseek"
            )

    @staticmethod
    def create_primary(
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> StructuredOutputClient:
        """Create client using the primary provider from config"""
        if config is None:
            config = get_config()

        logger.info(f"Creating primary client: {config.model.primary}")
        return ClientFactory.create(config.model.primary, config, progress_callback)

    @staticmethod
    def create_fallback(
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> StructuredOutputClient:
        """Create client using the fallback provider from config"""
        if config is None:
            config = get_config()

        logger.info(f"Creating fallback client: {config.model.fallback}")
        return ClientFactory.create(config.model.fallback, config, progress_callback)

    @staticmethod
    def create_dispatcher(
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> DualProviderDispatcher:
        """
        Create the primary/fallback dispatcher.

        In secondary-only mode the primary is built when its credentials are
        available, so the switch can be flipped back at runtime; a primary
        that cannot be configured is left out.
        """
        if config is None:
            config = get_config()

        if config.model.secondary_only:
            try:
                primary = ClientFactory.create_primary(config, progress_callback)
            except ProviderConfigurationError as e:
                logger.warning(f"Secondary-only mode without a primary client: {e}")
                primary = None
        else:
            primary = ClientFactory.create_primary(config, progress_callback)

        return DualProviderDispatcher(
            primary=primary,
            fallback=ClientFactory.create_fallback(config, progress_callback),
            secondary_only=config.model.secondary_only,
        )
