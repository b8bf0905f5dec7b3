import logging
from typing import Optional

from casual_coach.completion.protocol import CompletionProvider
from casual_coach.errors import TransientProviderError

logger = logging.getLogger(__name__)


async def complete_with_retry(
    provider: CompletionProvider,
    system_prompt: str,
    user_prompt: str,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    attempts: int = 2,
) -> str:
    """
    Call a completion provider, retrying transient failures.

    Args:
        provider: Completion provider
        system_prompt: Instructions for the model
        user_prompt: The prompt to complete
        temperature: Sampling temperature
        max_tokens: Reply length cap
        attempts: Total attempts, including the first (default: 2, i.e. one retry)

    Returns:
        The reply text

    Raises:
        TransientProviderError: If every attempt failed
    """
    last_error: Optional[TransientProviderError] = None

    for attempt in range(1, attempts + 1):
        try:
            return await provider.complete(
                system_prompt, user_prompt, temperature=temperature, max_tokens=max_tokens
            )
        except TransientProviderError as e:
            last_error = e
            logger.warning(f"Completion attempt {attempt}/{attempts} failed: {e}")

    raise last_error or TransientProviderError("No completion attempts were made")
