"""
Course schemas.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from api.models.documents import CamelModel, Course, CourseLevel, Quiz


class GenerateCourseRequest(CamelModel):
    topic: str = Field(min_length=1)
    level: CourseLevel
    user_id: str = Field(min_length=1)

    @field_validator("level", mode="before")
    @classmethod
    def _title_case_level(cls, value: Any) -> Any:
        return value.strip().title() if isinstance(value, str) else value


class LessonPointer(CamelModel):
    chapter_index: int
    lesson_index: int


class CourseDetailResponse(CamelModel):
    course: Course
    next_lesson: Optional[LessonPointer] = None  # None once every lesson is completed


class DeleteCourseResponse(CamelModel):
    message: str
    course_id: str


class QuizRegenerateRequest(CamelModel):
    user_id: str = Field(min_length=1)
    course_id: str = Field(min_length=1)
    chapter_index: int = Field(ge=0)
    lesson_index: int = Field(ge=0)


class QuizRegenerateResponse(CamelModel):
    message: str
    quiz: Quiz
