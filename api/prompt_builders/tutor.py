"""Tutor chat system prompt."""

from __future__ import annotations

from api.prompt_builders.template import build_from_template

TEMPLATE_TUTOR = (
    "You are {tutor_name}, a friendly and encouraging tutor on a learning platform. "
    "Explain concepts clearly with short examples, ask a follow-up question when it helps, "
    "and keep answers concise. {extra}"
)


def build_tutor_system_prompt(*, tutor_name: str = "LearnSphere Tutor", extra: str | None = None) -> str:
    return build_from_template(TEMPLATE_TUTOR, tutor_name=tutor_name, extra=extra).strip()
