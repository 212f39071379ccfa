"""
Quiz completion schemas.
"""

from typing import Optional

from pydantic import Field

from api.models.documents import CamelModel


class QuizCompleteRequest(CamelModel):
    user_id: str = Field(min_length=1)
    course_id: str = Field(min_length=1)
    chapter_index: int = Field(ge=0)
    lesson_index: int = Field(ge=0)
    score: int = Field(ge=0)
    total_questions: int = Field(gt=0)
    xp_reward: Optional[int] = Field(default=None, ge=0)  # base reward, defaults to settings


class QuizCompleteResponse(CamelModel):
    message: str
    passed: bool
    score: int
    total_questions: int
    percentage: int
    xp_earned: int
    attempts: int
    # failed attempts only
    required_percentage: Optional[int] = None
    # passed attempts only
    leveled_up: Optional[bool] = None
    new_level: Optional[int] = None
    total_xp: Optional[int] = Field(default=None, alias="totalXP")
    current_level: Optional[int] = None
    chapter_completed: Optional[bool] = None
    is_last_lesson_in_chapter: Optional[bool] = None
