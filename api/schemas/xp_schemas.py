"""
XP, achievement, streak and leaderboard schemas.
"""

from typing import Optional

from pydantic import Field, StrictInt

from api.models.documents import CamelModel


class AddXPRequest(CamelModel):
    user_id: str = Field(min_length=1)
    amount: StrictInt
    source: str
    source_id: Optional[str] = None


class AddXPResponse(CamelModel):
    message: str
    leveled_up: bool
    new_level: int
    total_xp: int = Field(alias="totalXP")
    current_level: int
    xp_to_next_level: int


class AchievementRequest(CamelModel):
    user_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    xp_reward: int = Field(default=0, ge=0)


class AchievementSummary(CamelModel):
    name: str
    description: str
    xp_reward: int


class AchievementResponse(CamelModel):
    message: str
    achievement: AchievementSummary
    total_xp: int = Field(alias="totalXP")
    current_level: int


class LeaderboardEntry(CamelModel):
    user_id: str
    total_xp: int = Field(alias="totalXP")
    current_level: int
    current_streak: int
    longest_streak: int


class RankResponse(CamelModel):
    user_id: str
    rank: int


class LessonCompleteRequest(CamelModel):
    user_id: str = Field(min_length=1)
    lesson_id: str = Field(min_length=1)
    course_id: Optional[str] = None
    xp_reward: Optional[int] = Field(default=None, gt=0)


class LessonCompleteResponse(CamelModel):
    message: str
    xp_earned: int
    streak_bonus: int
    leveled_up: bool
    new_level: int
    total_xp: int = Field(alias="totalXP")
    current_level: int
    streak: int


class StreakResponse(CamelModel):
    message: str
    streak_continued: bool
    streak_status: str
    streak_bonus: int
    current_streak: int
    longest_streak: int
