"""
Session summarization.

Provides the summarizer service and the model-free heuristics it uses for
topics, skill deltas and learning-style inference.
"""

from casual_coach.summarizer.analysis import (
    analyze_learning_style,
    analyze_skill_progress,
    extract_topics,
    render_transcript,
)
from casual_coach.summarizer.summarizer import SessionSummarizer, log_summary_error

__all__ = [
    "SessionSummarizer",
    "log_summary_error",
    # Heuristics
    "extract_topics",
    "analyze_skill_progress",
    "analyze_learning_style",
    "render_transcript",
]
