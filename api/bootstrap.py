from functools import lru_cache

from api.config import get_settings
from infra.llm.base import LLM
from infra.llm.ollama import OllamaLLM


@lru_cache
def build_llm() -> LLM:
    settings = get_settings()
    return OllamaLLM(
        model=settings.ollama_model,
        base_url=settings.ollama_base_url,
        timeout=settings.llm_timeout_seconds,
    )


def get_llm() -> LLM:
    """FastAPI dependency; tests override it with a fake provider."""
    return build_llm()
