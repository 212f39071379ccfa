"""
XP endpoints: profile, grants, achievements, streaks, lesson completion, ranking.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config import get_db
from api.models.documents import XPProfile
from api.schemas.xp_schemas import (
    AchievementRequest,
    AchievementResponse,
    AddXPRequest,
    AddXPResponse,
    LeaderboardEntry,
    LessonCompleteRequest,
    LessonCompleteResponse,
    RankResponse,
    StreakResponse,
)
from api.services.activity_service import ActivityService

xp_routes = APIRouter()


@xp_routes.get("/xp/rank/{user_id}", response_model=RankResponse)
async def get_rank(user_id: str, db: Session = Depends(get_db)) -> RankResponse:
    """1 + number of users with strictly more XP."""
    return ActivityService(db).rank(user_id)


@xp_routes.get("/xp/{user_id}", response_model=XPProfile)
async def get_profile(user_id: str, db: Session = Depends(get_db)) -> XPProfile:
    """XP profile; created with zero state on first read."""
    return ActivityService(db).get_profile(user_id)


@xp_routes.post("/xp/add", response_model=AddXPResponse)
async def add_xp(req: AddXPRequest, db: Session = Depends(get_db)) -> AddXPResponse:
    return ActivityService(db).add_xp(req)


@xp_routes.post("/xp/achievement", response_model=AchievementResponse)
async def add_achievement(req: AchievementRequest, db: Session = Depends(get_db)) -> AchievementResponse:
    """Award an achievement once; a repeat is rejected with 400."""
    return ActivityService(db).add_achievement(req)


@xp_routes.post("/xp/streak/{user_id}", response_model=StreakResponse)
async def tick_streak(user_id: str, db: Session = Depends(get_db)) -> StreakResponse:
    return ActivityService(db).tick_streak(user_id)


@xp_routes.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[LeaderboardEntry]:
    return ActivityService(db).leaderboard(limit)


@xp_routes.post("/lesson/complete", response_model=LessonCompleteResponse)
async def complete_lesson(req: LessonCompleteRequest, db: Session = Depends(get_db)) -> LessonCompleteResponse:
    """Lesson XP plus a daily streak tick with its bonus."""
    return ActivityService(db).complete_lesson(req)
