"""
Basic Chat Example

Wires an in-memory coach, ingests a few notes and runs a short
conversation from the terminal.

Requires an OpenAI API key (OPENAI_API_KEY) or a local Ollama server
(COACH_COMPLETION_PROVIDER=ollama, COACH_COMPLETION_BASE_URL=...).
"""

import asyncio

from dotenv import load_dotenv

from casual_coach.config import CoachSettings, configure_logging
from casual_coach.factory import build_app
from casual_coach.models import ChatRequest, IngestRecord

load_dotenv()

NOTES = [
    IngestRecord(
        source="internal",
        source_id="html-basics.md",
        text="HTML is for structure. Every page starts with an html element. "
        "Headings use h1 to h6 tags.",
    ),
    IngestRecord(
        source="internal",
        source_id="flexbox.md",
        text="CSS is for style. To center a div, set display flex on the parent. "
        "Then use justify-content center and align-items center.",
    ),
]


async def main():
    settings = CoachSettings()
    configure_logging("WARNING")

    app = build_app(settings)
    written = await app.chunk_index.ingest(NOTES)
    print(f"Indexed {written} chunks\n")

    session_id = None
    print("Type a question (empty line to quit).")

    while True:
        message = input("you> ").strip()
        if not message:
            break

        response = await app.chat_service.handle_message(
            ChatRequest(message=message, session_id=session_id)
        )
        session_id = response.session_id

        print(f"coach> {response.assistant_reply}")
        if response.used_fallback:
            print("(model unavailable, fallback reply)")

    await app.summarizer.drain()

    if session_id:
        summary = await app.summarizer.get_latest(session_id)
        print(f"\n{summary or 'Session too short to summarize.'}")


if __name__ == "__main__":
    asyncio.run(main())
