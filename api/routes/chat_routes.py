"""
Tutor chat endpoint.
"""

from fastapi import APIRouter, Depends

from api.bootstrap import get_llm
from api.config import get_settings
from api.schemas.chat_schemas import ChatRequest, ChatResponse
from api.services.chat_service import ChatService
from infra.llm.base import LLM

chat_routes = APIRouter()


@chat_routes.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, llm: LLM = Depends(get_llm)) -> ChatResponse:
    service = ChatService(llm, timeout=get_settings().llm_timeout_seconds)
    return ChatResponse(reply=await service.reply(req))
