"""
Tutor chat schemas.
"""

from typing import Literal

from pydantic import Field

from api.models.documents import CamelModel


class ChatHistoryItem(CamelModel):
    role: Literal["user", "assistant", "model"]
    content: str


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
    history: list[ChatHistoryItem] = Field(default_factory=list)


class ChatResponse(CamelModel):
    reply: str
