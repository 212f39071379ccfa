"""
Course workflows: listing with computed unlock state, AI generation, deletion
and quiz regeneration.

LLM calls happen before any transaction is opened; only the resulting
document write runs inside run_atomic.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from urllib.parse import quote
from uuid import uuid4

from sqlalchemy.orm import Session as DBSession

from api.config import Settings, get_settings
from api.models.documents import Chapter, Course, CourseLevel, Lesson, Quiz
from api.prompt_builders.course import build_course_prompt, build_quiz_prompt
from api.schemas.course_schemas import CourseDetailResponse, LessonPointer
from api.schemas.generation_schemas import GeneratedCourse, GeneratedQuizQuestions
from api.services import progression
from api.services.repositories import CourseRepository
from api.utils.errors import NotFoundError
from api.utils.llm_output import parse_llm_json
from api.utils.logger import configure_logging, log_request
from api.utils.transactions import run_atomic, run_read
from infra.llm.base import LLM

logger = configure_logging()

UNSPLASH_FALLBACK = "https://source.unsplash.com/800x600/?{query}"


def _resolve_level(generated: Optional[str], requested: CourseLevel) -> CourseLevel:
    if generated:
        try:
            return CourseLevel(generated.strip().title())
        except ValueError:
            logger.warning("generated course has unknown level=%r, using %s", generated, requested.value)
    return requested


def course_from_generated(
    generated: GeneratedCourse,
    *,
    topic: str,
    level: CourseLevel,
    owner_id: str,
    now: Optional[datetime] = None,
) -> Course:
    """Normalize validated LLM output into a fresh course document with chapter 0 unlocked."""
    chapters = []
    for gen_chapter in generated.chapters:
        lessons = []
        for gen_lesson in gen_chapter.lessons:
            quiz = None
            if gen_lesson.quiz is not None:
                quiz = Quiz(
                    title=(gen_lesson.quiz.title or "").strip() or f"Quiz for {gen_lesson.title}",
                    questions=[q.to_question() for q in gen_lesson.quiz.questions],
                )
            lessons.append(Lesson(title=gen_lesson.title, content=gen_lesson.content, xp=gen_lesson.xp, quiz=quiz))
        chapters.append(Chapter(title=gen_chapter.title, lessons=lessons))

    title = generated.title.strip()
    image_url = (generated.image_url or "").strip() or UNSPLASH_FALLBACK.format(query=quote(title or topic))
    now = now or datetime.utcnow()
    course = Course(
        id=str(uuid4()),
        owner_id=owner_id,
        title=title,
        description=generated.description.strip(),
        level=_resolve_level(generated.level, level),
        image_url=image_url,
        project_description=generated.project_description,
        chapters=chapters,
        created_at=now,
        updated_at=now,
    )
    return progression.initialize_progress(course)


class CourseService:
    def __init__(self, db: DBSession, llm: Optional[LLM] = None, settings: Optional[Settings] = None):
        self.db = db
        self.llm = llm
        self.settings = settings or get_settings()
        self.courses = CourseRepository(db)

    def _require_llm(self) -> LLM:
        if self.llm is None:
            raise RuntimeError("CourseService was built without an LLM provider")
        return self.llm

    def list_courses(self, owner_id: str) -> list[Course]:
        courses = run_read(self.db, lambda: self.courses.list_for_owner(owner_id), name="course.list")
        return [progression.refresh_unlocks(c) for c in courses]

    def get_course(self, course_id: str, owner_id: str) -> CourseDetailResponse:
        found = run_read(self.db, lambda: self.courses.get(course_id, owner_id), name="course.get")
        if found is None:
            raise NotFoundError("Course not found.", {"course_id": course_id})
        course = progression.refresh_unlocks(found[1])
        pointer = progression.next_unlocked_lesson(course)
        return CourseDetailResponse(
            course=course,
            next_lesson=LessonPointer(chapter_index=pointer[0], lesson_index=pointer[1]) if pointer else None,
        )

    async def generate_course(self, topic: str, level: CourseLevel, owner_id: str) -> Course:
        llm = self._require_llm()
        prompt = build_course_prompt(topic=topic, level=level.value)
        with log_request(logger, f"generate_course topic={topic!r} level={level.value}"):
            raw = await llm.generate_json(prompt, GeneratedCourse, timeout=self.settings.llm_timeout_seconds)
            generated = parse_llm_json(raw, GeneratedCourse)
        course = course_from_generated(generated, topic=topic, level=level, owner_id=owner_id)

        def apply() -> Course:
            self.courses.add(course)
            return course

        saved = run_atomic(self.db, apply, name="course.generate", retries=self.settings.write_retries)
        logger.info(
            "course saved id=%s owner=%s title=%r chapters=%s",
            saved.id,
            owner_id,
            saved.title,
            len(saved.chapters),
        )
        return saved

    def delete_course(self, course_id: str, owner_id: str) -> None:
        def apply() -> None:
            if not self.courses.delete(course_id, owner_id):
                raise NotFoundError("Course not found or not authorized to delete.", {"course_id": course_id})

        run_atomic(self.db, apply, name="course.delete", retries=self.settings.write_retries)
        logger.info("course deleted id=%s owner=%s", course_id, owner_id)

    async def regenerate_quiz(self, course_id: str, owner_id: str, chapter_index: int, lesson_index: int) -> Quiz:
        llm = self._require_llm()
        found = run_read(self.db, lambda: self.courses.get(course_id, owner_id), name="course.get")
        if found is None:
            raise NotFoundError("Course not found.", {"course_id": course_id})
        lesson = progression.get_lesson(found[1], chapter_index, lesson_index)
        # Release the read transaction while waiting on the provider.
        self.db.rollback()

        prompt = build_quiz_prompt(lesson_title=lesson.title, lesson_content=lesson.content)
        with log_request(logger, f"regenerate_quiz course={course_id} lesson={chapter_index}.{lesson_index}"):
            raw = await llm.generate_json(prompt, GeneratedQuizQuestions, timeout=self.settings.llm_timeout_seconds)
            generated = parse_llm_json(raw, GeneratedQuizQuestions)
        questions = [q.to_question() for q in generated.questions]

        def apply() -> Quiz:
            again = self.courses.get(course_id, owner_id)
            if again is None:
                raise NotFoundError("Course not found.", {"course_id": course_id})
            row, course = again
            quiz = progression.regenerate_quiz(course, chapter_index, lesson_index, questions)
            self.courses.save(row, course)
            return quiz

        return run_atomic(self.db, apply, name="quiz.regenerate", retries=self.settings.write_retries)
