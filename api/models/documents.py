"""
Domain documents: the nested course and XP profile structures the engines work on.

These are pydantic models. The ORM rows in api.models.models store them as JSON
columns; api.services.repositories converts between the two. Field names are
snake_case in Python and in storage, camelCase on the wire.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CourseLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class XPSource(str, Enum):
    LESSON_COMPLETION = "lesson_completion"
    QUIZ_COMPLETION = "quiz_completion"
    COURSE_COMPLETION = "course_completion"
    STREAK_BONUS = "streak_bonus"
    ACHIEVEMENT = "achievement"
    DAILY_BONUS = "daily_bonus"


class QuizQuestion(CamelModel):
    question: str
    options: list[str] = Field(min_length=1)
    correct_answer: str

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> "QuizQuestion":
        if self.correct_answer not in self.options:
            raise ValueError("correct_answer must be one of options")
        return self


class Quiz(CamelModel):
    title: str
    questions: list[QuizQuestion] = Field(default_factory=list)


class Lesson(CamelModel):
    title: str
    content: str
    xp: int = Field(default=10, ge=0)
    quiz: Optional[Quiz] = None
    completed: bool = False
    quiz_score: int = Field(default=0, ge=0, le=100)
    quiz_passed: bool = False
    attempts: int = Field(default=0, ge=0)
    # Cache, recomputed by progression.refresh_unlocks.
    unlocked: bool = False


class Chapter(CamelModel):
    title: str
    lessons: list[Lesson] = Field(default_factory=list)
    completed: bool = False
    # Cache, recomputed by progression.refresh_unlocks.
    unlocked: bool = False


class Course(CamelModel):
    id: str
    owner_id: str
    title: str
    description: str
    level: CourseLevel
    image_url: str
    project_description: Optional[str] = None
    chapters: list[Chapter] = Field(default_factory=list)
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class Streak(CamelModel):
    current: int = Field(default=0, ge=0)
    longest: int = Field(default=0, ge=0)
    last_activity: Optional[dt.datetime] = None


class Achievement(CamelModel):
    name: str
    description: Optional[str] = None
    xp_reward: int = Field(default=0, ge=0)
    earned_at: dt.datetime


class DailyXP(CamelModel):
    date: dt.date
    earned: int = 0


class WeeklyXP(CamelModel):
    week_start: dt.date
    earned: int = 0


class XPHistoryEntry(CamelModel):
    amount: int
    source: XPSource
    source_id: Optional[str] = None
    earned_at: dt.datetime


class XPProfile(CamelModel):
    user_id: str
    total_xp: int = Field(default=0, ge=0, alias="totalXP")
    current_level: int = Field(default=1, ge=1)
    xp_to_next_level: int = 100
    streak: Streak = Field(default_factory=Streak)
    achievements: list[Achievement] = Field(default_factory=list)
    daily_xp: DailyXP = Field(alias="dailyXP")
    weekly_xp: WeeklyXP = Field(alias="weeklyXP")
    xp_history: list[XPHistoryEntry] = Field(default_factory=list, alias="xpHistory")
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
