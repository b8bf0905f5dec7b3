import logging
from typing import Optional

from casual_llm import LLMProvider, SystemMessage, UserMessage

from casual_coach.errors import TransientProviderError

logger = logging.getLogger(__name__)


class LLMCompletion:
    """Completion provider backed by a casual-llm provider (OpenAI, Ollama, ...)."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        model_name: str = "unknown",
        default_temperature: float = 0.3,
        default_max_tokens: int = 300,
    ):
        """
        Args:
            llm_provider: casual-llm provider instance
            model_name: Name of the model (for logging)
            default_temperature: Temperature used when a call doesn't set one
            default_max_tokens: Token cap used when a call doesn't set one
        """
        self.llm_provider = llm_provider
        self.model_name = model_name
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.call_count = 0
        self.failure_count = 0

        logger.info(f"LLMCompletion initialized: model={model_name}")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        self.call_count += 1
        messages = [
            SystemMessage(content=system_prompt),
            UserMessage(content=user_prompt),
        ]

        try:
            response = await self.llm_provider.chat(
                messages,
                response_format="text",
                temperature=self.default_temperature if temperature is None else temperature,
                max_tokens=self.default_max_tokens if max_tokens is None else max_tokens,
            )
        except Exception as e:
            self.failure_count += 1
            # Log structure only, never prompt content
            logger.error(f"Completion failed (model={self.model_name}): {type(e).__name__}")
            raise TransientProviderError(f"Completion failed: {e}", self.model_name) from e

        text = (response.content or "").strip()
        if not text:
            self.failure_count += 1
            logger.warning(f"Completion returned empty content (model={self.model_name})")
            raise TransientProviderError("Completion returned empty content", self.model_name)

        logger.debug(f"Completion succeeded (model={self.model_name}, chars={len(text)})")
        return text
