"""Error taxonomy for structured-output calls"""

from typing import Optional

PREVIEW_CHARS = 500

RATE_LIMIT_MARKERS = ("429", "rate limit", "rate_limit", "resource_exhausted")
CREDIT_MARKERS = ("credit balance is too low", "insufficient_quota")


class LLMError(Exception):
    """Base class for model invocation errors"""


class ProviderConfigurationError(LLMError):
    """Provider is unknown or missing credentials"""


class TransientProviderError(LLMError):
    """Provider refused the call for a reason that another provider may not share"""

    def __init__(self, provider: str, reason: str, message: str = ""):
        self.provider = provider
        self.reason = reason
        super().__init__(message or f"{provider} unavailable ({reason})")


class ResponseParseError(LLMError):
    """Model output could not be turned into JSON"""

    def __init__(
        self,
        message: str,
        raw_text: str = "",
        original_error: Optional[Exception] = None,
        tokens_used: int = 0,
    ):
        self.preview = raw_text[:PREVIEW_CHARS]
        self.original_error = original_error
        self.tokens_used = tokens_used
        detail = f"{message}. Original error: {original_error}" if original_error else message
        super().__init__(f"{detail}. Text preview: {self.preview}...")


class ResponseValidationError(ResponseParseError):
    """JSON parsed but did not match the expected shape"""


def classify_provider_error(error: Exception) -> Optional[str]:
    """
    Classify a provider exception as transient.

    Args:
        error: Exception raised by a provider SDK

    Returns:
        "rate_limit", "credits", "timeout" or None when the error is not transient
    """
    if isinstance(error, TransientProviderError):
        return error.reason
    if isinstance(error, LLMError):
        # Parse failures quote model output, which may contain any marker text
        return None

    status = getattr(error, "status_code", None)
    if status == 429:
        return "rate_limit"

    text = str(error).lower()
    if any(marker in text for marker in CREDIT_MARKERS):
        return "credits"
    if any(marker in text for marker in RATE_LIMIT_MARKERS):
        return "rate_limit"
    return None
