import asyncio
import time
from typing import Sequence, Type

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_ollama import ChatOllama
from pydantic import BaseModel

from api.utils.errors import UpstreamProviderError
from api.utils.logger import configure_logging
from infra.llm.base import LLM

logger = configure_logging()

DEFAULT_TIMEOUT = 120.0

_ROLE_MESSAGES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def _content_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    # Some providers return a list of content blocks.
    return "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)


class OllamaLLM(LLM):
    def __init__(
        self,
        model: str,
        temperature: float = 0.7,
        base_url: str = "http://localhost:11434",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.model = model
        self.temperature = temperature
        self.base_url = base_url
        self.timeout = timeout
        self._chat_llm = ChatOllama(model=model, temperature=temperature, base_url=base_url)

    async def _invoke(self, llm: ChatOllama, payload, *, timeout: float | None, what: str) -> str:
        timeout_seconds = float(timeout or self.timeout)
        start_time = time.time()
        try:
            result = await asyncio.wait_for(llm.ainvoke(payload), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("llm %s timed out after %.2fs model=%s", what, time.time() - start_time, self.model)
            raise UpstreamProviderError("The AI provider timed out.", {"timeout_seconds": timeout_seconds}) from None
        except Exception as e:
            logger.error("llm %s failed after %.2fs model=%s error=%s", what, time.time() - start_time, self.model, e)
            raise UpstreamProviderError("The AI provider request failed.") from e

        elapsed = time.time() - start_time
        text = _content_text(result)
        logger.info("llm %s completed in %.2fs model=%s chars=%s", what, elapsed, self.model, len(text))
        if elapsed > 60:
            logger.warning("llm %s took %.2fs; consider a smaller model", what, elapsed)
        return text

    async def generate_json(self, prompt: str, schema: Type[BaseModel], *, timeout: float | None = None) -> str:
        # Ollama's `format` accepts a JSON Schema and constrains decoding to it.
        constrained = ChatOllama(
            model=self.model,
            temperature=self.temperature,
            base_url=self.base_url,
            format=schema.model_json_schema(),
        )
        return await self._invoke(constrained, prompt, timeout=timeout, what=f"generate_json[{schema.__name__}]")

    async def chat(self, messages: Sequence[tuple[str, str]], *, timeout: float | None = None) -> str:
        payload = [_ROLE_MESSAGES[role](content=content) for role, content in messages]
        return await self._invoke(self._chat_llm, payload, timeout=timeout, what="chat")
