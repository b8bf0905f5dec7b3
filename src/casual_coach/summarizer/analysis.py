"""
Model-free conversation analysis.

Keyword heuristics that derive topics, skill deltas and learning-style
preferences from a session's messages.
"""

from typing import Dict, List, Sequence

from casual_coach.models import LearningStyle, Message, SkillSignal

MAX_TOPICS = 5
SKILL_DELTA_BOUND = 100

TOPIC_KEYWORDS: Dict[str, List[str]] = {
    "html": ["html", "element", "tag", "attribute", "semantic"],
    "css": ["css", "style", "selector", "property", "flexbox", "grid", "layout"],
    "javascript": ["javascript", "js", "function", "variable", "array", "object", "dom"],
    "responsive": ["responsive", "mobile", "breakpoint", "media query"],
    "accessibility": ["accessibility", "a11y", "screen reader", "semantic"],
    "performance": ["performance", "optimization", "speed", "loading"],
    "testing": ["test", "debug", "console", "error", "validation"],
}

# skill -> (positive phrases, negative phrases)
SKILL_INDICATORS: Dict[str, tuple[List[str], List[str]]] = {
    "html-basics": (
        ["created", "understood", "successful", "working"],
        ["confused", "error", "broken", "not working"],
    ),
    "css-selectors": (
        ["styled", "centered", "layout", "responsive"],
        ["not styling", "not centered", "layout broken"],
    ),
    "javascript-fundamentals": (
        ["function", "variable", "working", "console.log"],
        ["syntax error", "undefined", "not working"],
    ),
}

POSITIVE_POINTS = 10
NEGATIVE_POINTS = 5


def _contents(messages: Sequence[Message]) -> List[str]:
    return [message.content.lower() for message in messages]


def extract_topics(messages: Sequence[Message]) -> List[str]:
    """Return up to five topic groups mentioned in the conversation, in group order."""
    contents = _contents(messages)
    topics = [
        topic
        for topic, keywords in TOPIC_KEYWORDS.items()
        if any(keyword in content for content in contents for keyword in keywords)
    ]
    return topics[:MAX_TOPICS]


def analyze_skill_progress(messages: Sequence[Message]) -> List[SkillSignal]:
    """
    Accumulate signed skill deltas from indicator phrases.

    Each message scores +10 per positive phrase and -5 per negative phrase it
    contains. Totals are clamped to [-100, 100]; skills with no net change
    are left out.
    """
    contents = _contents(messages)
    signals: List[SkillSignal] = []

    for skill, (positive, negative) in SKILL_INDICATORS.items():
        change = 0
        evidence: List[str] = []

        for content in contents:
            for phrase in positive:
                if phrase in content:
                    change += POSITIVE_POINTS
                    evidence.append(f"Used {phrase}")
            for phrase in negative:
                if phrase in content:
                    change -= NEGATIVE_POINTS
                    evidence.append(f"Struggled with {phrase}")

        if change != 0:
            signals.append(
                SkillSignal(
                    skill=skill,
                    score_delta=max(-SKILL_DELTA_BOUND, min(SKILL_DELTA_BOUND, change)),
                    evidence=", ".join(evidence),
                )
            )

    return signals


def analyze_learning_style(messages: Sequence[Message]) -> LearningStyle:
    """Infer format, pace and feedback preferences, defaulting to mixed/medium/mixed."""
    content = " ".join(_contents(messages))
    style = LearningStyle()

    if "step by step" in content or "tiny step" in content:
        style.preferred_format = "step-by-step"
        style.notes.append("Prefers step-by-step instructions")
    elif "example" in content or "show me" in content:
        style.preferred_format = "examples"
        style.notes.append("Learns well from examples")
    elif "concept" in content or "explain" in content:
        style.preferred_format = "concepts"
        style.notes.append("Wants conceptual understanding")

    if "slow" in content or "take time" in content:
        style.pace = "slow"
        style.notes.append("Prefers slower pace")
    elif "fast" in content or "quick" in content:
        style.pace = "fast"
        style.notes.append("Prefers faster pace")

    if "detailed" in content or "explain more" in content:
        style.feedback = "detailed"
        style.notes.append("Wants detailed explanations")
    elif "brief" in content or "short" in content:
        style.feedback = "brief"
        style.notes.append("Prefers brief explanations")

    return style


def render_transcript(messages: Sequence[Message]) -> str:
    """Flatten messages into a "role: content" transcript."""
    return "\n".join(f"{message.role}: {message.content}" for message in messages)
