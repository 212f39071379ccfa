"""
Document storage for courses and XP profiles.

Rows keep nested parts in JSON columns. Loading returns a (row, document) pair;
saving writes the document back onto the same row so the version check
applies at flush. Repositories never commit; api.utils.transactions does.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from api.models.documents import Course, DailyXP, Streak, WeeklyXP, XPProfile
from api.models.models import Course as CourseRow, XPProfile as XPProfileRow
from api.services import leveling


class CourseRepository:
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def to_document(row: CourseRow) -> Course:
        return Course(
            id=row.id,
            owner_id=row.owner_id,
            title=row.title,
            description=row.description,
            level=row.level,
            image_url=row.image_url,
            project_description=row.project_description,
            chapters=row.chapters or [],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _write(row: CourseRow, course: Course) -> None:
        row.owner_id = course.owner_id
        row.title = course.title
        row.description = course.description
        row.level = course.level.value
        row.image_url = course.image_url
        row.project_description = course.project_description
        # Fresh list object so the JSON column is flagged dirty.
        row.chapters = [c.model_dump(mode="json") for c in course.chapters]
        row.updated_at = course.updated_at = datetime.utcnow()

    def get(self, course_id: str, owner_id: str) -> Optional[tuple[CourseRow, Course]]:
        row = (
            self.db.query(CourseRow)
            .filter(CourseRow.id == course_id, CourseRow.owner_id == owner_id)
            .first()
        )
        if row is None:
            return None
        return row, self.to_document(row)

    def list_for_owner(self, owner_id: str) -> list[Course]:
        rows = (
            self.db.query(CourseRow)
            .filter(CourseRow.owner_id == owner_id)
            .order_by(CourseRow.created_at.desc())
            .all()
        )
        return [self.to_document(r) for r in rows]

    def add(self, course: Course) -> CourseRow:
        course.created_at = course.created_at or datetime.utcnow()
        row = CourseRow(id=course.id, created_at=course.created_at)
        self._write(row, course)
        self.db.add(row)
        return row

    def save(self, row: CourseRow, course: Course) -> None:
        self._write(row, course)
        self.db.add(row)

    def delete(self, course_id: str, owner_id: str) -> bool:
        found = self.get(course_id, owner_id)
        if found is None:
            return False
        self.db.delete(found[0])
        return True


class XPRepository:
    def __init__(self, db: Session, *, week_start_day: int = leveling.DEFAULT_WEEK_START_DAY):
        self.db = db
        self.week_start_day = week_start_day

    @staticmethod
    def to_document(row: XPProfileRow) -> XPProfile:
        return XPProfile(
            user_id=row.user_id,
            total_xp=row.total_xp,
            current_level=row.current_level,
            xp_to_next_level=row.xp_to_next_level,
            streak=Streak.model_validate(row.streak or {}),
            achievements=row.achievements or [],
            daily_xp=DailyXP.model_validate(row.daily_xp),
            weekly_xp=WeeklyXP.model_validate(row.weekly_xp),
            xp_history=row.xp_history or [],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _write(row: XPProfileRow, profile: XPProfile) -> None:
        row.total_xp = profile.total_xp
        row.current_level = profile.current_level
        row.xp_to_next_level = profile.xp_to_next_level
        row.streak = profile.streak.model_dump(mode="json")
        row.achievements = [a.model_dump(mode="json") for a in profile.achievements]
        row.daily_xp = profile.daily_xp.model_dump(mode="json")
        row.weekly_xp = profile.weekly_xp.model_dump(mode="json")
        row.xp_history = [h.model_dump(mode="json") for h in profile.xp_history]
        row.updated_at = profile.updated_at = datetime.utcnow()

    def get(self, user_id: str) -> Optional[tuple[XPProfileRow, XPProfile]]:
        row = self.db.get(XPProfileRow, user_id)
        if row is None:
            return None
        return row, self.to_document(row)

    def get_or_create(self, user_id: str, *, now: Optional[datetime] = None) -> tuple[XPProfileRow, XPProfile]:
        """Existing profile, or a zero-state one staged for insert."""
        found = self.get(user_id)
        if found is not None:
            return found
        profile = leveling.new_profile(user_id, now=now, week_start_day=self.week_start_day)
        profile.created_at = datetime.utcnow()
        row = XPProfileRow(user_id=user_id, created_at=profile.created_at)
        self._write(row, profile)
        self.db.add(row)
        return row, profile

    def save(self, row: XPProfileRow, profile: XPProfile) -> None:
        self._write(row, profile)
        self.db.add(row)

    def rank(self, user_id: str) -> Optional[int]:
        row = self.db.get(XPProfileRow, user_id)
        if row is None:
            return None
        ahead = self.db.query(XPProfileRow).filter(XPProfileRow.total_xp > row.total_xp).count()
        return ahead + 1

    def leaderboard(self, limit: int = 10) -> list[XPProfileRow]:
        """Top profiles by total XP. Ties keep creation order, which carries no meaning."""
        return (
            self.db.query(XPProfileRow)
            .order_by(XPProfileRow.total_xp.desc(), XPProfileRow.created_at.asc(), XPProfileRow.user_id.asc())
            .limit(limit)
            .all()
        )
