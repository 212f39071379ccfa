"""
XP activity workflows: profile reads, direct XP grants, achievements, lesson
completion with streak bonus, the manual streak tick, and ranking.

Each write loads the profile (creating it on first use), applies the leveling
engine and saves it inside run_atomic.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session as DBSession

from api.config import Settings, get_settings
from api.models.documents import XPProfile, XPSource
from api.schemas.xp_schemas import (
    AchievementRequest,
    AchievementResponse,
    AchievementSummary,
    AddXPRequest,
    AddXPResponse,
    LeaderboardEntry,
    LessonCompleteRequest,
    LessonCompleteResponse,
    RankResponse,
    StreakResponse,
)
from api.services import leveling
from api.services.repositories import XPRepository
from api.utils.errors import NotFoundError, ValidationError
from api.utils.logger import configure_logging
from api.utils.transactions import run_atomic, run_read

logger = configure_logging()


class ActivityService:
    def __init__(
        self,
        db: DBSession,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.clock = clock or datetime.now
        self.profiles = XPRepository(db, week_start_day=self.settings.week_start_day)

    def _grant(self, profile: XPProfile, amount: int, source: XPSource | str, source_id: Optional[str], now: datetime):
        return leveling.add_xp(
            profile, amount, source, source_id, now=now, week_start_day=self.settings.week_start_day
        )

    def get_profile(self, user_id: str) -> XPProfile:
        """Profile for user_id; created and persisted on first read."""

        def apply() -> XPProfile:
            found = self.profiles.get(user_id)
            if found is not None:
                return found[1]
            row, profile = self.profiles.get_or_create(user_id, now=self.clock())
            logger.info("xp profile created user=%s", user_id)
            return profile

        return run_atomic(self.db, apply, name="xp.get_profile", retries=self.settings.write_retries)

    def add_xp(self, req: AddXPRequest) -> AddXPResponse:
        def apply() -> AddXPResponse:
            now = self.clock()
            row, profile = self.profiles.get_or_create(req.user_id, now=now)
            result = self._grant(profile, req.amount, req.source, req.source_id, now)
            self.profiles.save(row, profile)
            return AddXPResponse(
                message="XP added successfully",
                leveled_up=result.leveled_up,
                new_level=result.new_level,
                total_xp=profile.total_xp,
                current_level=profile.current_level,
                xp_to_next_level=profile.xp_to_next_level,
            )

        response = run_atomic(self.db, apply, name="xp.add", retries=self.settings.write_retries)
        logger.info("xp added user=%s amount=%s source=%s level=%s", req.user_id, req.amount, req.source, response.current_level)
        return response

    def add_achievement(self, req: AchievementRequest) -> AchievementResponse:
        def apply() -> AchievementResponse:
            now = self.clock()
            row, profile = self.profiles.get_or_create(req.user_id, now=now)
            added = leveling.add_achievement(
                profile,
                req.name,
                req.description,
                req.xp_reward,
                now=now,
                week_start_day=self.settings.week_start_day,
            )
            if not added:
                raise ValidationError("Achievement already earned.", {"name": req.name})
            self.profiles.save(row, profile)
            return AchievementResponse(
                message="Achievement added successfully",
                achievement=AchievementSummary(name=req.name, description=req.description, xp_reward=req.xp_reward),
                total_xp=profile.total_xp,
                current_level=profile.current_level,
            )

        return run_atomic(self.db, apply, name="xp.achievement", retries=self.settings.write_retries)

    def complete_lesson(self, req: LessonCompleteRequest) -> LessonCompleteResponse:
        xp_reward = req.xp_reward or self.settings.default_lesson_xp

        def apply() -> LessonCompleteResponse:
            now = self.clock()
            row, profile = self.profiles.get_or_create(req.user_id, now=now)
            result = self._grant(profile, xp_reward, XPSource.LESSON_COMPLETION, req.lesson_id, now)
            status = leveling.update_streak(profile, now=now)
            bonus = leveling.streak_bonus(status, profile.streak.current, *leveling.LESSON_STREAK_BONUS)
            if bonus:
                self._grant(profile, bonus, XPSource.STREAK_BONUS, None, now)
            self.profiles.save(row, profile)
            return LessonCompleteResponse(
                message="Lesson completed successfully",
                xp_earned=xp_reward,
                streak_bonus=bonus,
                leveled_up=result.leveled_up,
                new_level=result.new_level,
                total_xp=profile.total_xp,
                current_level=profile.current_level,
                streak=profile.streak.current,
            )

        response = run_atomic(self.db, apply, name="lesson.complete", retries=self.settings.write_retries)
        logger.info(
            "lesson complete user=%s lesson=%s course=%s xp=%s streak=%s",
            req.user_id,
            req.lesson_id,
            req.course_id,
            response.xp_earned,
            response.streak,
        )
        return response

    def tick_streak(self, user_id: str) -> StreakResponse:
        def apply() -> StreakResponse:
            now = self.clock()
            row, profile = self.profiles.get_or_create(user_id, now=now)
            status = leveling.update_streak(profile, now=now)
            bonus = leveling.streak_bonus(status, profile.streak.current, *leveling.MANUAL_STREAK_BONUS)
            if bonus:
                self._grant(profile, bonus, XPSource.STREAK_BONUS, None, now)
            self.profiles.save(row, profile)
            return StreakResponse(
                message="Streak updated successfully",
                streak_continued=leveling.streak_continued(status),
                streak_status=status.value,
                streak_bonus=bonus,
                current_streak=profile.streak.current,
                longest_streak=profile.streak.longest,
            )

        return run_atomic(self.db, apply, name="xp.streak", retries=self.settings.write_retries)

    def rank(self, user_id: str) -> RankResponse:
        rank = run_read(self.db, lambda: self.profiles.rank(user_id), name="xp.rank")
        if rank is None:
            raise NotFoundError("User not found.", {"user_id": user_id})
        return RankResponse(user_id=user_id, rank=rank)

    def leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        rows = run_read(self.db, lambda: self.profiles.leaderboard(limit), name="xp.leaderboard")
        entries = []
        for r in rows:
            streak = r.streak or {}
            entries.append(
                LeaderboardEntry(
                    user_id=r.user_id,
                    total_xp=r.total_xp,
                    current_level=r.current_level,
                    current_streak=int(streak.get("current", 0)),
                    longest_streak=int(streak.get("longest", 0)),
                )
            )
        return entries
