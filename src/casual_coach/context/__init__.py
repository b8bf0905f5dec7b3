"""
Context assembly for retrieval-augmented replies.
"""

from casual_coach.context.assembler import (
    ENRICHMENT_TRIGGERS,
    ContextAssembler,
    format_for_prompt,
    needs_enrichment,
)

__all__ = [
    "ContextAssembler",
    "ENRICHMENT_TRIGGERS",
    "format_for_prompt",
    "needs_enrichment",
]
