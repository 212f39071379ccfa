"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path, points settings at throwaway storage, and provides
common fixtures for unit and integration tests.
"""
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Settings are read once; set them before anything imports api.config.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="learnsphere-test-logs-"))
os.environ.setdefault("LOG_CONSOLE", "false")

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """Create an in-memory SQLite engine for tests."""
    return create_engine("sqlite:///:memory:", echo=False)


@pytest.fixture
def db_session(in_memory_engine):
    """Create an in-memory database session. Uses api.config.Base for schema."""
    from api.config import Base
    import api.models.models  # noqa: F401

    Base.metadata.create_all(in_memory_engine)
    SessionLocal = sessionmaker(bind=in_memory_engine)
    session = SessionLocal()
    yield session
    session.close()


def make_course(
    chapters=((2, 2), (1,)),
    *,
    course_id="test-course-123",
    owner_id="user-1",
    title="Machine Learning Fundamentals",
):
    """
    Build a course document. `chapters` gives, per chapter, one entry per lesson:
    the number of quiz questions for that lesson.
    """
    from api.models.documents import Chapter, Course, CourseLevel, Lesson, Quiz, QuizQuestion
    from api.services.progression import initialize_progress

    built = []
    for ci, lesson_specs in enumerate(chapters):
        lessons = []
        for li, question_count in enumerate(lesson_specs):
            questions = [
                QuizQuestion(question=f"Q{q + 1}?", options=["A", "B", "C", "D"], correct_answer="A")
                for q in range(question_count)
            ]
            lessons.append(
                Lesson(
                    title=f"Lesson {ci + 1}.{li + 1}",
                    content=f"<p>Content {ci + 1}.{li + 1}</p>",
                    quiz=Quiz(title=f"Quiz {ci + 1}.{li + 1}", questions=questions),
                )
            )
        built.append(Chapter(title=f"Chapter {ci + 1}", lessons=lessons))

    now = datetime(2024, 1, 10, 12, 0, 0)
    course = Course(
        id=course_id,
        owner_id=owner_id,
        title=title,
        description="Learn core ML concepts and practical applications",
        level=CourseLevel.BEGINNER,
        image_url="https://example.com/ml.png",
        chapters=built,
        created_at=now,
        updated_at=now,
    )
    return initialize_progress(course)


@pytest.fixture
def course_factory():
    return make_course


@pytest.fixture
def sample_course():
    """Two chapters: chapter 1 has two lessons, chapter 2 has one."""
    return make_course()


@pytest.fixture
def test_course(db_session, sample_course):
    """Persist the sample course in the DB."""
    from api.services.repositories import CourseRepository

    CourseRepository(db_session).add(sample_course)
    db_session.commit()
    return sample_course
