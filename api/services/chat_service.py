"""
Tutor chat: a stateless reply to the learner's message plus client-held history.
"""

from __future__ import annotations

from api.prompt_builders.tutor import build_tutor_system_prompt
from api.schemas.chat_schemas import ChatRequest
from api.utils.logger import configure_logging
from infra.llm.base import LLM

logger = configure_logging()

MAX_HISTORY_MESSAGES = 20

# Some clients send Gemini-style "model" turns.
_ROLE_MAP = {"user": "user", "assistant": "assistant", "model": "assistant"}


class ChatService:
    def __init__(self, llm: LLM, *, timeout: float | None = None):
        self.llm = llm
        self.timeout = timeout

    def build_messages(self, req: ChatRequest) -> list[tuple[str, str]]:
        messages = [("system", build_tutor_system_prompt())]
        for item in req.history[-MAX_HISTORY_MESSAGES:]:
            if item.content.strip():
                messages.append((_ROLE_MAP[item.role], item.content))
        messages.append(("user", req.message))
        return messages

    async def reply(self, req: ChatRequest) -> str:
        messages = self.build_messages(req)
        reply = await self.llm.chat(messages, timeout=self.timeout)
        logger.info("tutor reply history=%s chars=%s", len(messages) - 2, len(reply))
        return reply
