"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import QuizCompleteRequest, AddXPResponse
    from api.schemas.course_schemas import CourseDetailResponse
"""

from api.schemas.chat_schemas import ChatHistoryItem, ChatRequest, ChatResponse
from api.schemas.course_schemas import (
    GenerateCourseRequest,
    LessonPointer,
    CourseDetailResponse,
    DeleteCourseResponse,
    QuizRegenerateRequest,
    QuizRegenerateResponse,
)
from api.schemas.generation_schemas import (
    GeneratedQuizQuestion,
    GeneratedQuiz,
    GeneratedLesson,
    GeneratedChapter,
    GeneratedCourse,
    GeneratedQuizQuestions,
)
from api.schemas.quiz_schemas import QuizCompleteRequest, QuizCompleteResponse
from api.schemas.xp_schemas import (
    AddXPRequest,
    AddXPResponse,
    AchievementRequest,
    AchievementSummary,
    AchievementResponse,
    LeaderboardEntry,
    RankResponse,
    LessonCompleteRequest,
    LessonCompleteResponse,
    StreakResponse,
)

__all__ = [
    # chat
    "ChatHistoryItem",
    "ChatRequest",
    "ChatResponse",
    # course
    "GenerateCourseRequest",
    "LessonPointer",
    "CourseDetailResponse",
    "DeleteCourseResponse",
    "QuizRegenerateRequest",
    "QuizRegenerateResponse",
    # generation
    "GeneratedQuizQuestion",
    "GeneratedQuiz",
    "GeneratedLesson",
    "GeneratedChapter",
    "GeneratedCourse",
    "GeneratedQuizQuestions",
    # quiz
    "QuizCompleteRequest",
    "QuizCompleteResponse",
    # xp
    "AddXPRequest",
    "AddXPResponse",
    "AchievementRequest",
    "AchievementSummary",
    "AchievementResponse",
    "LeaderboardEntry",
    "RankResponse",
    "LessonCompleteRequest",
    "LessonCompleteResponse",
    "StreakResponse",
]
