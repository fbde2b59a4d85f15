"""Primary/fallback dispatch between two structured-output clients"""

import logging
from typing import Any, Optional, Type

from pydantic import BaseModel

from .base import StructuredOutputClient, StructuredResponse
from .errors import ProviderConfigurationError, classify_provider_error

logger = logging.getLogger(__name__)


class DualProviderDispatcher:
    """
    Calls the primary client and fails over to the fallback on rate limits,
    exhausted credits or timeouts. Any other error propagates unchanged.

    secondary_only can be flipped at runtime to bypass the primary entirely.
    The primary may be None when it was never configured; turning
    secondary_only off then raises ProviderConfigurationError on the next call.
    """

    def __init__(
        self,
        primary: Optional[StructuredOutputClient],
        fallback: StructuredOutputClient,
        secondary_only: bool = False,
    ):
        self.primary = primary
        self.fallback = fallback
        self.secondary_only = secondary_only
        primary_name = primary.provider_name if primary is not None else "none"
        self.provider_name = f"{primary_name}|{fallback.provider_name}"

        logger.info(
            f"Initialized dispatcher: primary={primary_name}, "
            f"fallback={fallback.provider_name}, secondary_only={secondary_only}"
        )

    async def invoke(
        self, prompt: str, response_model: Type[BaseModel], **kwargs: Any
    ) -> StructuredResponse:
        """Same contract as StructuredOutputClient.invoke; response.provider names the server"""
        if self.secondary_only:
            logger.debug(f"Secondary-only mode, using {self.fallback.provider_name}")
            return await self.fallback.invoke(prompt, response_model, **kwargs)

        if self.primary is None:
            raise ProviderConfigurationError(
                "No primary provider configured; enable secondary_only or set the primary API key"
            )

        try:
            return await self.primary.invoke(prompt, response_model, **kwargs)
        except Exception as e:
            reason = classify_provider_error(e)
            if reason is None:
                raise
            logger.warning(
                f"{self.primary.provider_name} unavailable ({reason}), "
                f"falling back to {self.fallback.provider_name}"
            )

        return await self.fallback.invoke(prompt, response_model, **kwargs)
