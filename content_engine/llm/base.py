"""Base client for structured-output model calls"""

import asyncio
import inspect
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..config import ProviderConfig
from .errors import ResponseParseError, ResponseValidationError, TransientProviderError
from .json_repair import parse_json_response

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Called as (agent_name, status); may be sync or async
ProgressCallback = Callable[[str, str], Union[None, Awaitable[None]]]


class StructuredResponse(BaseModel):
    """Validated value plus usage accounting for one call"""
    value: Any
    tokens_used: int = 0
    provider: str
    model: Optional[str] = None


def schema_instruction(json_schema: Dict[str, Any]) -> str:
    """Instruction block appended to every prompt describing the expected JSON"""
    return (
        "Respond with a single JSON object and nothing else. It must match this "
        "JSON schema (all required keys present, correct types):\n"
        f"{json.dumps(json_schema, indent=2)}\n"
        "Escape any double quotes inside string values as \\\" and write line "
        "breaks inside strings as \\n."
    )


class StructuredOutputClient(ABC):
    """Abstract base class for all structured-output providers"""

    provider_name = "base"

    def __init__(
        self,
        provider_config: ProviderConfig,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize base client.

        Args:
            provider_config: Provider block from the configuration
            progress_callback: Optional (agent_name, status) hook, sync or async
        """
        self.model = provider_config.model
        self.max_tokens = provider_config.max_tokens
        self.temperature = provider_config.temperature
        self.request_timeout = provider_config.request_timeout
        self.progress_callback = progress_callback

    @abstractmethod
    async def _call_model(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Tuple[str, int]:
        """
        Call the underlying model API.

        Args:
            prompt: User prompt, schema instruction included
            system_prompt: System instruction
            max_tokens: Output token budget
            temperature: Sampling temperature

        Returns:
            Tuple of (raw response text, input + output tokens)
        """
        pass

    async def _notify(self, agent_name: str, status: str) -> None:
        """Report progress; callback failures never reach the caller"""
        if self.progress_callback is None:
            return
        try:
            result = self.progress_callback(agent_name, status)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.debug(f"Progress callback failed for {agent_name}: {e}")

    async def invoke(
        self,
        prompt: str,
        response_model: Type[M],
        system_prompt: str = "",
        json_schema: Optional[Dict[str, Any]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        agent_name: Optional[str] = None,
    ) -> StructuredResponse:
        """
        Invoke the model and return a validated value.

        Args:
            prompt: User prompt (must be non-empty)
            response_model: Pydantic model the parsed JSON must satisfy
            system_prompt: System instruction
            json_schema: Schema shown to the model; defaults to the model's schema
            max_tokens: Output budget override
            temperature: Temperature override
            agent_name: Label for progress reporting

        Returns:
            StructuredResponse with the validated value and token usage

        Raises:
            ValueError: If the prompt is empty
            TransientProviderError: On timeout
            ResponseParseError: If no JSON could be recovered
            ResponseValidationError: If the JSON does not match response_model
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must not be empty")

        schema = json_schema or response_model.model_json_schema()
        full_prompt = f"{prompt}\n\n{schema_instruction(schema)}"
        label = agent_name or self.provider_name

        await self._notify(label, f"Calling {self.provider_name} ({self.model})")

        try:
            value, tokens = await self._generate(
                full_prompt,
                system_prompt,
                max_tokens or self.max_tokens,
                self.temperature if temperature is None else temperature,
                response_model,
            )
        except Exception as e:
            await self._notify(label, f"Failed: {type(e).__name__}")
            raise

        await self._notify(label, f"Completed ({tokens} tokens)")
        return StructuredResponse(
            value=value, tokens_used=tokens, provider=self.provider_name, model=self.model
        )

    async def _generate(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        temperature: float,
        response_model: Type[M],
    ) -> Tuple[M, int]:
        """Call the model once, then parse and validate its output"""
        call = self._call_model(prompt, system_prompt, max_tokens, temperature)
        try:
            if self.request_timeout:
                text, tokens = await asyncio.wait_for(call, timeout=self.request_timeout)
            else:
                text, tokens = await call
        except asyncio.TimeoutError as e:
            raise TransientProviderError(
                self.provider_name,
                "timeout",
                f"{self.provider_name} timed out after {self.request_timeout}s",
            ) from e

        logger.debug(f"{self.provider_name} response ({tokens} tokens): {text[:200]}...")

        try:
            data = parse_json_response(text)
        except ResponseParseError as e:
            e.tokens_used = tokens
            raise

        try:
            value = response_model.model_validate(data)
        except ValidationError as e:
            raise ResponseValidationError(
                f"Response did not match {response_model.__name__}", text, e, tokens
            ) from e

        return value, tokens
