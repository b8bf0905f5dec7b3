"""
Completion providers for reply and summary generation.
"""

from casual_coach.completion.llm_completion import LLMCompletion
from casual_coach.completion.protocol import CompletionProvider
from casual_coach.completion.retry import complete_with_retry

__all__ = [
    "CompletionProvider",
    "LLMCompletion",
    "complete_with_retry",
]
