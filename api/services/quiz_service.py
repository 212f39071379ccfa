"""
Quiz completion workflow.

Ties one quiz attempt to both the course progression state and the learner's
XP profile. Everything between loading the course and writing both documents
runs in a single transaction (api.utils.transactions.run_atomic); a conflicting
concurrent write re-runs the whole workflow against fresh rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session as DBSession

from api.config import Settings, get_settings
from api.models.documents import XPSource
from api.schemas.quiz_schemas import QuizCompleteRequest, QuizCompleteResponse
from api.services import leveling, progression
from api.services.repositories import CourseRepository, XPRepository
from api.utils.errors import NotFoundError
from api.utils.logger import configure_logging
from api.utils.transactions import run_atomic

logger = configure_logging()

PERFECT_SCORE_BONUS = 10
EXCELLENT_SCORE_BONUS = 5
EXCELLENT_SCORE_PERCENTAGE = 90


def quiz_reward(base: int, percentage: int, chapter_completed: bool, chapter_bonus: int) -> int:
    """Base reward + score bonus (100% -> +10, >= 90% -> +5) + chapter completion bonus."""
    reward = base
    if percentage == 100:
        reward += PERFECT_SCORE_BONUS
    elif percentage >= EXCELLENT_SCORE_PERCENTAGE:
        reward += EXCELLENT_SCORE_BONUS
    if chapter_completed:
        reward += chapter_bonus
    return reward


def quiz_source_id(course_id: str, chapter_index: int, lesson_index: int) -> str:
    return f"{course_id}_{chapter_index}_{lesson_index}"


class QuizService:
    def __init__(
        self,
        db: DBSession,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.clock = clock or datetime.now
        self.courses = CourseRepository(db)
        self.profiles = XPRepository(db, week_start_day=self.settings.week_start_day)

    def complete_quiz(self, req: QuizCompleteRequest) -> QuizCompleteResponse:
        threshold = self.settings.quiz_pass_threshold
        base_reward = req.xp_reward if req.xp_reward is not None else self.settings.default_quiz_xp
        ci, li = req.chapter_index, req.lesson_index

        def apply() -> QuizCompleteResponse:
            found = self.courses.get(req.course_id, req.user_id)
            if found is None:
                raise NotFoundError("Course not found.", {"course_id": req.course_id})
            row, course = found

            result = progression.record_quiz_result(course, ci, li, req.score, req.total_questions, threshold)
            if not result.passed:
                # Attempt only; progression stays as it was.
                self.courses.save(row, course)
                return QuizCompleteResponse(
                    message=f"You need {threshold}% to unlock the next lesson. "
                    f"You scored {result.percentage}%. Try again!",
                    passed=False,
                    score=req.score,
                    total_questions=req.total_questions,
                    percentage=result.percentage,
                    xp_earned=0,
                    attempts=result.attempts,
                    required_percentage=threshold,
                )

            was_completed = course.chapters[ci].completed
            chapter_completed = progression.update_chapter_completion(course, ci) and not was_completed
            xp_earned = quiz_reward(base_reward, result.percentage, chapter_completed, self.settings.chapter_completion_bonus)

            now = self.clock()
            xp_row, profile = self.profiles.get_or_create(req.user_id, now=now)
            level = leveling.LevelUpResult(leveled_up=False, new_level=profile.current_level)
            if xp_earned > 0:
                level = leveling.add_xp(
                    profile,
                    xp_earned,
                    XPSource.QUIZ_COMPLETION,
                    quiz_source_id(req.course_id, ci, li),
                    now=now,
                    week_start_day=self.settings.week_start_day,
                )

            self.courses.save(row, course)
            self.profiles.save(xp_row, profile)

            has_next_chapter = ci + 1 < len(course.chapters)
            if chapter_completed and has_next_chapter:
                message = "Chapter completed! Next chapter unlocked."
            elif chapter_completed:
                message = "Chapter completed! You finished the last chapter."
            else:
                message = "Quiz passed! Next lesson unlocked."
            return QuizCompleteResponse(
                message=message,
                passed=True,
                score=req.score,
                total_questions=req.total_questions,
                percentage=result.percentage,
                xp_earned=xp_earned,
                attempts=result.attempts,
                leveled_up=level.leveled_up,
                new_level=level.new_level,
                total_xp=profile.total_xp,
                current_level=profile.current_level,
                chapter_completed=chapter_completed,
                is_last_lesson_in_chapter=progression.is_last_lesson(course, ci, li),
            )

        response = run_atomic(self.db, apply, name="quiz.complete", retries=self.settings.write_retries)
        logger.info(
            "quiz complete user=%s course=%s lesson=%s.%s percentage=%s passed=%s xp=%s chapter_completed=%s",
            req.user_id,
            req.course_id,
            ci,
            li,
            response.percentage,
            response.passed,
            response.xp_earned,
            bool(response.chapter_completed),
        )
        return response
