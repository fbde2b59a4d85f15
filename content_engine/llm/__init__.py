"""Structured-output model clients

Each provider backend turns (prompt, system prompt, schema) into a validated
pydantic value plus token usage:

1. ClaudeClient: Anthropic, primary provider
2. GeminiClient: Google Gemini, fallback provider
3. DeepSeekClient: alternate provider for pluggable writer personas

DualProviderDispatcher wraps the primary and fallback and fails over on
rate limits, exhausted credits and timeouts.
"""

from .base import StructuredOutputClient, StructuredResponse
from .claude_client import ClaudeClient
from .deepseek_client import DeepSeekClient
from .dispatcher import DualProviderDispatcher
from .errors import (
    LLMError,
    ProviderConfigurationError,
    ResponseParseError,
    ResponseValidationError,
    TransientProviderError,
    classify_provider_error,
)
from .factory import ClientFactory
from .gemini_client import GeminiClient
from .json_repair import parse_json_response, repair_json

__all__ = [
    "StructuredOutputClient",
    "StructuredResponse",
    "ClaudeClient",
    "GeminiClient",
    "DeepSeekClient",
    "DualProviderDispatcher",
    "ClientFactory",
    "LLMError",
    "ProviderConfigurationError",
    "ResponseParseError",
    "ResponseValidationError",
    "TransientProviderError",
    "classify_provider_error",
    "parse_json_response",
    "repair_json",
]
