from abc import ABC, abstractmethod
from typing import Sequence, Type

from pydantic import BaseModel


class LLM(ABC):
    """
    Defines the contract for content providers used by the services.
    """

    @abstractmethod
    async def generate_json(self, prompt: str, schema: Type[BaseModel], *, timeout: float | None = None) -> str:
        """Raw text of a JSON answer constrained by `schema`. Callers still validate it."""
        raise NotImplementedError

    @abstractmethod
    async def chat(self, messages: Sequence[tuple[str, str]], *, timeout: float | None = None) -> str:
        """Reply to (role, content) messages; role is system|user|assistant."""
        raise NotImplementedError
