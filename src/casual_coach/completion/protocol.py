"""
Completion provider protocol.

Any text-generation backend that can turn a system prompt plus a user
prompt into a reply can be plugged into the chat service and summarizer.
"""

from typing import Optional, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class CompletionProvider(Protocol):
    """
    Protocol for completion providers.

    Implementations must raise TransientProviderError when the backend is
    unreachable, rate limited, or returns an empty reply. Timeouts are the
    backend client's responsibility.
    """

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate a reply.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The user-facing prompt (possibly context enriched)
            temperature: Sampling temperature (None = provider default)
            max_tokens: Reply length cap (None = provider default)

        Returns:
            The reply text, stripped

        Raises:
            TransientProviderError: If the provider call fails
        """
        ...
