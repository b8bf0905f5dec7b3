"""
Example: Summarizing a coaching session with a local model

This example demonstrates how to run the SessionSummarizer against an
Ollama model through casual-llm, and what the structured signals look like.
"""

import asyncio

from casual_llm import ModelConfig, Provider, create_provider

from casual_coach.completion import LLMCompletion
from casual_coach.models import Message
from casual_coach.storage import InMemoryConversationStore
from casual_coach.summarizer import SessionSummarizer


async def main():
    # Setup LLM provider (using Ollama for this example)
    model = ModelConfig(
        name="qwen2.5:7b-instruct",
        provider=Provider.OLLAMA,
    )
    completion = LLMCompletion(create_provider(model), model_name=model.name)

    store = InMemoryConversationStore()
    conversation = [
        ("user", "How do I center a div? Explain step by step please."),
        ("assistant", "Tiny step: give the parent display: flex. Tell me when it's done."),
        ("user", "Done. It's centered horizontally but not vertically."),
        ("assistant", "Add align-items: center and a height on the parent."),
        ("user", "It's centered now and working!"),
        ("assistant", "Nice. Next, try justify-content: space-between."),
    ]
    for role, content in conversation:
        store.append("demo", Message(role=role, content=content))

    summarizer = SessionSummarizer(store, completion)
    summary = await summarizer.summarize("demo")

    print("=" * 80)
    print("Summary")
    print("=" * 80)
    print(summary.summary)

    print(f"\nTopics: {', '.join(summary.topics)}")
    for signal in summary.skill_progress:
        print(f"Skill {signal.skill}: {signal.score_delta:+d} ({signal.evidence})")
    print(f"Learning style: {summary.learning_style.model_dump()}")

    print("\n" + "=" * 80)
    print("As injected into prompts")
    print("=" * 80)
    print(await summarizer.get_latest("demo"))


if __name__ == "__main__":
    asyncio.run(main())
