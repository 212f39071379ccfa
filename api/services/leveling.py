"""
XP / leveling engine.

Pure functions over an XPProfile document: XP grants with level-up, daily and
weekly XP buckets, streak ticks, achievements. Nothing here touches the
database; callers load the profile, apply these, and persist it.

Level curve: reaching level 2 costs 100 XP and each further level costs 1.5x
the previous step, cumulatively:

    level_threshold(1) = 0
    level_threshold(2) = 100
    level_threshold(3) = 150
    level_threshold(4) = 225
    level_threshold(5) = 337

All calendar comparisons use the local calendar day of `now`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from api.models.documents import Achievement, DailyXP, WeeklyXP, XPHistoryEntry, XPProfile, XPSource
from api.utils.errors import ValidationError

LEVEL_BASE_XP = 100
LEVEL_GROWTH = 1.5
DEFAULT_WEEK_START_DAY = 6  # Sunday

LESSON_STREAK_BONUS = (2, 20)  # (xp per streak day, cap)
MANUAL_STREAK_BONUS = (5, 50)


class StreakStatus(str, Enum):
    STARTED = "started"
    UNCHANGED = "unchanged"
    CONTINUED = "continued"
    BROKEN = "broken"


@dataclass(frozen=True)
class LevelUpResult:
    leveled_up: bool
    new_level: int


def level_threshold(level: int) -> int:
    """Cumulative XP required to reach `level`."""
    if level < 1:
        raise ValidationError("level must be >= 1", {"level": level})
    if level == 1:
        return 0
    return math.floor(LEVEL_BASE_XP * LEVEL_GROWTH ** (level - 2))


def level_for_xp(total_xp: int) -> int:
    level = 1
    while total_xp >= level_threshold(level + 1):
        level += 1
    return level


def week_start(day: date, start_day: int = DEFAULT_WEEK_START_DAY) -> date:
    """Most recent day (today included) whose weekday() equals start_day."""
    return day - timedelta(days=(day.weekday() - start_day) % 7)


def new_profile(
    user_id: str,
    *,
    now: Optional[datetime] = None,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> XPProfile:
    now = now or datetime.now()
    today = now.date()
    return XPProfile(
        user_id=user_id,
        total_xp=0,
        current_level=1,
        xp_to_next_level=level_threshold(2),
        daily_xp=DailyXP(date=today, earned=0),
        weekly_xp=WeeklyXP(week_start=week_start(today, week_start_day), earned=0),
        created_at=now,
        updated_at=now,
    )


def _validate_grant(amount: object, source: object) -> XPSource:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("XP amount must be a positive integer", {"amount": amount})
    try:
        return XPSource(source)
    except ValueError:
        raise ValidationError(
            "Unknown XP source",
            {"source": source, "allowed": [s.value for s in XPSource]},
        ) from None


def add_xp(
    profile: XPProfile,
    amount: int,
    source: XPSource | str,
    source_id: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> LevelUpResult:
    """
    Grant XP: history entry, total, daily/weekly buckets, then level-ups.
    A single grant may cross several levels.
    """
    kind = _validate_grant(amount, source)
    now = now or datetime.now()
    today = now.date()

    profile.xp_history.append(XPHistoryEntry(amount=amount, source=kind, source_id=source_id, earned_at=now))
    profile.total_xp += amount

    if profile.daily_xp.date != today:
        profile.daily_xp = DailyXP(date=today, earned=0)
    profile.daily_xp.earned += amount

    current_week = week_start(today, week_start_day)
    if profile.weekly_xp.week_start != current_week:
        profile.weekly_xp = WeeklyXP(week_start=current_week, earned=0)
    profile.weekly_xp.earned += amount

    leveled_up = False
    while profile.total_xp >= level_threshold(profile.current_level + 1):
        profile.current_level += 1
        leveled_up = True

    profile.xp_to_next_level = level_threshold(profile.current_level + 1) - profile.total_xp
    profile.updated_at = now
    return LevelUpResult(leveled_up=leveled_up, new_level=profile.current_level)


def update_streak(profile: XPProfile, *, now: Optional[datetime] = None) -> StreakStatus:
    """Tick the daily streak. Only counters change; bonuses are the caller's call."""
    now = now or datetime.now()
    streak = profile.streak
    if streak.last_activity is None:
        streak.current = 1
        streak.longest = max(streak.longest, 1)
        streak.last_activity = now
        return StreakStatus.STARTED

    days = (now.date() - streak.last_activity.date()).days
    if days <= 0:
        return StreakStatus.UNCHANGED
    if days == 1:
        streak.current += 1
        streak.longest = max(streak.longest, streak.current)
        streak.last_activity = now
        return StreakStatus.CONTINUED
    streak.current = 1
    streak.last_activity = now
    return StreakStatus.BROKEN


def streak_continued(status: StreakStatus) -> bool:
    return status in (StreakStatus.STARTED, StreakStatus.CONTINUED)


def streak_bonus(status: StreakStatus, current: int, per_day: int, cap: int) -> int:
    if not streak_continued(status) or current <= 1:
        return 0
    return min(current * per_day, cap)


def add_achievement(
    profile: XPProfile,
    name: str,
    description: Optional[str] = None,
    xp_reward: int = 0,
    *,
    now: Optional[datetime] = None,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> bool:
    """Returns False when an achievement with this name was already earned."""
    if not (name or "").strip():
        raise ValidationError("Achievement name is required")
    if xp_reward < 0:
        raise ValidationError("xp_reward must be >= 0", {"xp_reward": xp_reward})
    if any(a.name == name for a in profile.achievements):
        return False
    now = now or datetime.now()
    profile.achievements.append(Achievement(name=name, description=description, xp_reward=xp_reward, earned_at=now))
    if xp_reward > 0:
        add_xp(profile, xp_reward, XPSource.ACHIEVEMENT, now=now, week_start_day=week_start_day)
    return True
