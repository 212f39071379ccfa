"""
Storage round-trips and optimistic-concurrency retries against SQLite.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from api.models.documents import XPSource
from api.services import leveling, progression
from api.schemas.xp_schemas import LessonCompleteRequest
from api.services.activity_service import ActivityService
from api.services.repositories import CourseRepository, XPRepository
from api.utils.errors import NotFoundError, PersistenceError
from api.utils.transactions import run_atomic, run_read

NOW = datetime(2024, 1, 10, 12, 0, 0)


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory over a file database so separate sessions see separate transactions."""
    from api.config import Base
    import api.models.models  # noqa: F401

    engine = create_engine(f"sqlite:///{tmp_path / 'learnsphere.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.mark.integration
class TestRoundTrip:
    def test_course_round_trip(self, db_session, test_course):
        repo = CourseRepository(db_session)
        progression.record_quiz_result(test_course, 0, 0, 2, 2, 50)
        progression.update_chapter_completion(test_course, 0)
        row, _ = repo.get(test_course.id, test_course.owner_id)
        repo.save(row, test_course)
        db_session.commit()
        db_session.expire_all()

        _, loaded = repo.get(test_course.id, test_course.owner_id)
        assert loaded.model_dump() == test_course.model_dump()
        # Recomputing the cache on a reloaded course changes nothing.
        assert progression.refresh_unlocks(loaded.model_copy(deep=True)).model_dump() == loaded.model_dump()

    def test_course_version_increments(self, db_session, test_course):
        repo = CourseRepository(db_session)
        row, course = repo.get(test_course.id, test_course.owner_id)
        assert row.version == 1
        repo.save(row, course)
        db_session.commit()
        assert row.version == 2

    def test_profile_round_trip(self, db_session):
        repo = XPRepository(db_session)
        row, profile = repo.get_or_create("u1", now=NOW)
        leveling.add_xp(profile, 120, XPSource.QUIZ_COMPLETION, "c_0_0", now=NOW)
        leveling.update_streak(profile, now=NOW)
        leveling.add_achievement(profile, "Starter", "first steps", 5, now=NOW)
        repo.save(row, profile)
        db_session.commit()
        db_session.expire_all()

        _, loaded = repo.get("u1")
        assert loaded.model_dump() == profile.model_dump()
        assert loaded.total_xp == sum(h.amount for h in loaded.xp_history) == 125

    def test_owner_scoping(self, db_session, test_course):
        repo = CourseRepository(db_session)
        assert repo.get(test_course.id, "someone-else") is None
        assert repo.delete(test_course.id, "someone-else") is False
        assert [c.id for c in repo.list_for_owner(test_course.owner_id)] == [test_course.id]


@pytest.mark.integration
class TestOptimisticConcurrency:
    def test_stale_write_is_retried_against_fresh_state(self, file_sessions):
        setup = file_sessions()
        XPRepository(setup).get_or_create("u1", now=NOW)
        setup.commit()
        setup.close()

        db, other = file_sessions(), file_sessions()
        attempts = []

        def apply():
            row, profile = XPRepository(db).get_or_create("u1", now=NOW)
            if not attempts:
                # Another request commits between our read and our write.
                orow, oprofile = XPRepository(other).get("u1")
                leveling.add_xp(oprofile, 5, XPSource.DAILY_BONUS, now=NOW)
                XPRepository(other).save(orow, oprofile)
                other.commit()
            attempts.append(profile.total_xp)
            leveling.add_xp(profile, 10, XPSource.DAILY_BONUS, now=NOW)
            XPRepository(db).save(row, profile)
            return profile.total_xp

        try:
            total = run_atomic(db, apply, name="test.add", retries=3)
        finally:
            db.close()
            other.close()

        assert attempts == [0, 5]
        assert total == 15

        check = file_sessions()
        _, stored = XPRepository(check).get("u1")
        check.close()
        assert stored.total_xp == 15
        assert len(stored.xp_history) == 2

    def test_exhausted_retries_raise_persistence_error(self, db_session):
        calls = []

        def apply():
            calls.append(1)
            raise StaleDataError("row changed underneath us")

        with pytest.raises(PersistenceError) as exc_info:
            run_atomic(db_session, apply, name="test.conflict", retries=3)
        assert len(calls) == 3
        assert exc_info.value.to_response() == {"message": "A storage error occurred. Please try again later."}

    def test_domain_errors_are_not_retried(self, db_session):
        calls = []

        def apply():
            calls.append(1)
            raise NotFoundError("Course not found.")

        with pytest.raises(NotFoundError):
            run_atomic(db_session, apply, name="test.missing", retries=3)
        assert calls == [1]

    def test_storage_failure_maps_to_persistence_error(self, db_session):
        def apply():
            raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

        with pytest.raises(PersistenceError):
            run_atomic(db_session, apply, name="test.io")
        with pytest.raises(PersistenceError):
            run_read(db_session, apply, name="test.io")


@pytest.mark.integration
class TestActivityServiceClock:
    """Streak bonuses across days, driven by an injected clock."""

    def test_lesson_streak_bonus(self, file_sessions):
        db = file_sessions()
        clock = {"now": NOW}
        bonuses = []
        try:
            service = ActivityService(db, clock=lambda: clock["now"])
            for day in range(3):
                clock["now"] = NOW + timedelta(days=day)
                req = LessonCompleteRequest(user_id="u1", lesson_id="l")
                bonuses.append(service.complete_lesson(req).streak_bonus)
            profile = service.get_profile("u1")
        finally:
            db.close()

        assert bonuses == [0, 4, 6]
        assert profile.total_xp == 3 * 10 + 4 + 6
        assert profile.streak.current == 3

    def test_manual_tick_bonus_and_break(self, file_sessions):
        db = file_sessions()
        clock = {"now": NOW}
        try:
            service = ActivityService(db, clock=lambda: clock["now"])
            service.tick_streak("u1")
            clock["now"] = NOW + timedelta(days=1)
            continued = service.tick_streak("u1")
            clock["now"] = NOW + timedelta(days=4)
            broken = service.tick_streak("u1")
        finally:
            db.close()

        assert continued.streak_bonus == 10 and continued.current_streak == 2
        assert broken.streak_status == "broken"
        assert broken.streak_bonus == 0
        assert broken.current_streak == 1 and broken.longest_streak == 2
