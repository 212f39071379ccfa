"""
API data models. Single import surface for DB rows and domain documents.

DB rows (api.models.models):
- Course, XPProfile (aliased here as CourseRow, XPProfileRow)

Domain documents (api.models.documents):
- Course, Chapter, Lesson, Quiz, QuizQuestion, CourseLevel
- XPProfile, Streak, Achievement, DailyXP, WeeklyXP, XPHistoryEntry, XPSource
"""

from api.models.models import Course as CourseRow, XPProfile as XPProfileRow
from api.models.documents import (
    CamelModel,
    Course,
    Chapter,
    Lesson,
    Quiz,
    QuizQuestion,
    CourseLevel,
    XPProfile,
    Streak,
    Achievement,
    DailyXP,
    WeeklyXP,
    XPHistoryEntry,
    XPSource,
)

__all__ = [
    "CourseRow",
    "XPProfileRow",
    "CamelModel",
    "Course",
    "Chapter",
    "Lesson",
    "Quiz",
    "QuizQuestion",
    "CourseLevel",
    "XPProfile",
    "Streak",
    "Achievement",
    "DailyXP",
    "WeeklyXP",
    "XPHistoryEntry",
    "XPSource",
]
