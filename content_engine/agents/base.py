"""Base class for pipeline agents"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol, Type

from pydantic import BaseModel

from ..config import Config, get_config
from ..llm.base import StructuredResponse
from ..models import AgentResult

logger = logging.getLogger(__name__)


class StructuredInvoker(Protocol):
    """Anything with the structured-output invoke contract (client or dispatcher)"""

    async def invoke(
        self, prompt: str, response_model: Type[BaseModel], **kwargs: Any
    ) -> StructuredResponse:
        ...


class Agent(ABC):
    """
    One single-purpose model call returning a typed result-or-error.

    Subclasses set the system prompt and response model and build the user
    prompt. run() never raises; every failure becomes AgentResult.fail,
    keeping whatever token usage the provider reported.
    """

    name = "agent"
    system_prompt = ""
    response_model: Type[BaseModel] = BaseModel
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None

    def __init__(self, client: StructuredInvoker, config: Optional[Config] = None):
        """
        Initialize agent.

        Args:
            client: Structured-output client or dispatcher
            config: Optional configuration object
        """
        if config is None:
            config = get_config()

        self.client = client
        self.config = config

    @abstractmethod
    def build_prompt(self, *args: Any, **kwargs: Any) -> str:
        """Build the user prompt from the run() arguments"""
        pass

    def json_schema(self) -> Optional[Dict[str, Any]]:
        """Schema shown to the model; None uses the response model's schema"""
        return None

    def postprocess(self, value: Any, *args: Any, **kwargs: Any) -> Any:
        """Adjust a validated value before returning it"""
        return value

    async def run(self, *args: Any, **kwargs: Any) -> AgentResult:
        try:
            prompt = self.build_prompt(*args, **kwargs)
        except Exception as e:
            logger.error(f"[{self.name}] Failed to build prompt: {e}")
            return AgentResult.fail(f"{self.name}: {e}")

        result = await self.call(prompt)
        if not result.success:
            return result

        try:
            data = self.postprocess(result.data, *args, **kwargs)
        except Exception as e:
            logger.error(f"[{self.name}] Failed to post-process response: {e}")
            return AgentResult.fail(f"{self.name}: {e}", tokens_used=result.tokens_used)

        return AgentResult.ok(data, result.tokens_used, result.provider)

    async def call(
        self,
        prompt: str,
        response_model: Optional[Type[BaseModel]] = None,
        json_schema: Optional[Dict[str, Any]] = None,
        max_tokens: Optional[int] = None,
        label: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> AgentResult:
        """
        Invoke the model once and convert the outcome into an AgentResult.

        Args:
            prompt: User prompt
            response_model: Override for the class-level response model
            json_schema: Override for the schema shown to the model
            max_tokens: Override for the class-level output budget
            label: Name used in logs and progress reports
            system_prompt: Override for the class-level system prompt

        Returns:
            AgentResult with the validated value or the error message
        """
        label = label or self.name
        logger.info(f"[{label}] Calling model...")

        try:
            response = await self.client.invoke(
                prompt,
                response_model or self.response_model,
                system_prompt=system_prompt or self.system_prompt,
                json_schema=json_schema or self.json_schema(),
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature,
                agent_name=label,
            )
        except Exception as e:
            tokens = getattr(e, "tokens_used", 0) or 0
            logger.error(f"[{label}] FAILED: {e}")
            return AgentResult.fail(f"{label}: {e}", tokens_used=tokens)

        logger.info(
            f"[{label}] Completed ({response.tokens_used} tokens via {response.provider})"
        )
        return AgentResult.ok(response.value, response.tokens_used, response.provider)
