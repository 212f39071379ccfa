"""
Shapes expected from the LLM for course and quiz generation.

The JSON Schema of these models is sent to the provider to constrain output,
and the returned text is validated against them again (see
api.utils.llm_output). Small, common deviations are normalized here; anything
else fails validation.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, model_validator

from api.models.documents import CamelModel, QuizQuestion


class GeneratedQuizQuestion(CamelModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=2)
    correct_answer: str

    @model_validator(mode="before")
    @classmethod
    def _accept_answer_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "answer" in data and not (
            data.get("correctAnswer") or data.get("correct_answer")
        ):
            data = {**data, "correctAnswer": data["answer"]}
        return data

    @model_validator(mode="after")
    def _resolve_answer(self) -> "GeneratedQuizQuestion":
        self.options = [o.strip() for o in self.options if isinstance(o, str) and o.strip()]
        answer = self.correct_answer.strip()
        if answer in self.options:
            self.correct_answer = answer
            return self
        by_text = {o.lower(): o for o in self.options}
        if answer.lower() in by_text:
            self.correct_answer = by_text[answer.lower()]
            return self
        # "B" or "b)" style answers refer to the option position.
        letter = answer.rstrip(").").upper()
        if len(letter) == 1 and "A" <= letter <= "Z":
            idx = ord(letter) - ord("A")
            if idx < len(self.options):
                self.correct_answer = self.options[idx]
                return self
        raise ValueError(f"correct answer {answer!r} is not one of the options")

    def to_question(self) -> QuizQuestion:
        return QuizQuestion(question=self.question.strip(), options=self.options, correct_answer=self.correct_answer)


class GeneratedQuiz(CamelModel):
    title: Optional[str] = None
    questions: list[GeneratedQuizQuestion] = Field(min_length=1)


class GeneratedLesson(CamelModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    xp: int = Field(default=10, ge=0)
    quiz: Optional[GeneratedQuiz] = None


class GeneratedChapter(CamelModel):
    title: str = Field(min_length=1)
    lessons: list[GeneratedLesson] = Field(min_length=1)


class GeneratedCourse(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    level: Optional[str] = None
    image_url: Optional[str] = None
    project_description: Optional[str] = None
    chapters: list[GeneratedChapter] = Field(min_length=1)


class GeneratedQuizQuestions(CamelModel):
    questions: list[GeneratedQuizQuestion] = Field(min_length=1)
