"""
App prompt builders. All prompt templates live here; services receive built prompts.
"""

from api.prompt_builders.course import build_course_prompt, build_quiz_prompt
from api.prompt_builders.tutor import build_tutor_system_prompt

__all__ = [
    "build_course_prompt",
    "build_quiz_prompt",
    "build_tutor_system_prompt",
]
