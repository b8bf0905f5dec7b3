import asyncio
import logging
from typing import List

from casual_coach.completion import CompletionProvider, complete_with_retry
from casual_coach.context import ContextAssembler
from casual_coach.errors import TransientProviderError
from casual_coach.models import ChatRequest, ChatResponse, Message, SessionInfo
from casual_coach.prompts import COACH_SYSTEM_PROMPT, EMPTY_MESSAGE_PROMPT, FALLBACK_REPLY
from casual_coach.storage import ConversationStore
from casual_coach.summarizer import SessionSummarizer

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(
        self,
        conversations: ConversationStore,
        assembler: ContextAssembler,
        completion: CompletionProvider,
        summarizer: SessionSummarizer,
        summary_trigger_count: int = 6,
        response_history_limit: int = 20,
        temperature: float = 0.3,
        max_tokens: int = 300,
        system_prompt: str = COACH_SYSTEM_PROMPT,
    ):
        self.conversations = conversations
        self.assembler = assembler
        self.completion = completion
        self.summarizer = summarizer
        self.summary_trigger_count = summary_trigger_count
        self.response_history_limit = response_history_limit
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt

    async def _build_prompt(self, user_message: str, session_id: str) -> str:
        if not user_message.strip():
            return EMPTY_MESSAGE_PROMPT

        if not self.assembler.needs_enrichment(user_message):
            return user_message

        context = await self.assembler.build_context(user_message, session_id)
        return self.assembler.format_for_prompt(context, user_message)

    async def _reply(self, prompt: str) -> tuple[str, bool]:
        try:
            reply = await complete_with_retry(
                self.completion,
                self.system_prompt,
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            return reply, False
        except TransientProviderError as e:
            logger.error(f"Assistant fallback used: {e}")
            return FALLBACK_REPLY, True

    async def handle_message(self, request: ChatRequest) -> ChatResponse:
        """
        Run one chat turn.

        Stores the user message, generates a context-aware reply, stores the
        reply and, once the session is long enough, schedules a background
        summary.

        Raises:
            DataIntegrityError: If either message could not be stored
        """
        session = await asyncio.to_thread(self.conversations.create_session, request.session_id)
        session_id = session.id

        await asyncio.to_thread(
            self.conversations.append,
            session_id,
            Message(role="user", content=request.message),
        )

        prompt = await self._build_prompt(request.message, session_id)
        reply, used_fallback = await self._reply(prompt)

        await asyncio.to_thread(
            self.conversations.append,
            session_id,
            Message(role="assistant", content=reply),
        )

        message_count = await asyncio.to_thread(self.conversations.count, session_id)
        if message_count >= self.summary_trigger_count:
            self.summarizer.schedule(session_id)

        recent = await asyncio.to_thread(
            self.conversations.recent, session_id, self.response_history_limit
        )

        logger.info(
            f"Chat turn complete: session={session_id}, messages={message_count}, "
            f"fallback={used_fallback}"
        )

        return ChatResponse(
            session_id=session_id,
            assistant_reply=reply,
            recent_messages=recent,
            session_info=SessionInfo(created_at=session.created_at, message_count=message_count),
            used_fallback=used_fallback,
        )

    async def get_history(self, session_id: str, limit: int = 20) -> List[Message]:
        return await asyncio.to_thread(self.conversations.recent, session_id, limit)

    async def end_session(self, session_id: str) -> bool:
        """Delete a session. Returns False if it did not exist."""
        return await asyncio.to_thread(self.conversations.delete_session, session_id)
