"""
Course progression engine.

Unlock and completion rules over a Course document:

- chapter 0 is always unlocked; chapter i > 0 is unlocked iff chapter i-1 is completed
- lesson 0 of an unlocked chapter is unlocked; lesson j > 0 needs lesson j-1
  completed and quiz-passed
- a chapter is completed iff all its lessons are completed and quiz-passed

`unlocked` flags on chapters and lessons are a stored cache. Every mutation here
ends with refresh_unlocks(), and readers call it before returning a course.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from api.models.documents import Chapter, Course, Lesson, Quiz, QuizQuestion
from api.utils.errors import NotFoundError, ValidationError


@dataclass(frozen=True)
class QuizResult:
    percentage: int
    passed: bool
    attempts: int


def _chapter(course: Course, chapter_index: int) -> Chapter:
    if not 0 <= chapter_index < len(course.chapters):
        raise NotFoundError("Chapter not found", {"chapter_index": chapter_index})
    return course.chapters[chapter_index]


def get_lesson(course: Course, chapter_index: int, lesson_index: int) -> Lesson:
    chapter = _chapter(course, chapter_index)
    if not 0 <= lesson_index < len(chapter.lessons):
        raise NotFoundError(
            "Lesson not found",
            {"chapter_index": chapter_index, "lesson_index": lesson_index},
        )
    return chapter.lessons[lesson_index]


def _lesson_cleared(lesson: Lesson) -> bool:
    return lesson.completed and lesson.quiz_passed


def is_chapter_unlocked(course: Course, chapter_index: int) -> bool:
    _chapter(course, chapter_index)
    if chapter_index == 0:
        return True
    return course.chapters[chapter_index - 1].completed


def is_lesson_unlocked(course: Course, chapter_index: int, lesson_index: int) -> bool:
    get_lesson(course, chapter_index, lesson_index)
    if not is_chapter_unlocked(course, chapter_index):
        return False
    if lesson_index == 0:
        return True
    return _lesson_cleared(course.chapters[chapter_index].lessons[lesson_index - 1])


def refresh_unlocks(course: Course) -> Course:
    for ci, chapter in enumerate(course.chapters):
        chapter.unlocked = is_chapter_unlocked(course, ci)
        for li, lesson in enumerate(chapter.lessons):
            lesson.unlocked = is_lesson_unlocked(course, ci, li)
    return course


def update_chapter_completion(course: Course, chapter_index: int) -> bool:
    chapter = _chapter(course, chapter_index)
    chapter.completed = all(_lesson_cleared(lesson) for lesson in chapter.lessons)
    refresh_unlocks(course)
    return chapter.completed


def quiz_percentage(score: int, total_questions: int) -> int:
    if total_questions <= 0:
        raise ValidationError("totalQuestions must be positive", {"total_questions": total_questions})
    if not 0 <= score <= total_questions:
        raise ValidationError(
            "score must be between 0 and totalQuestions",
            {"score": score, "total_questions": total_questions},
        )
    ratio = Decimal(100 * score) / Decimal(total_questions)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def record_quiz_result(
    course: Course,
    chapter_index: int,
    lesson_index: int,
    score: int,
    total_questions: int,
    pass_threshold: int,
) -> QuizResult:
    """
    Score one quiz attempt on a lesson. A pass marks the lesson completed.
    A failed retake records the attempt and score but never revokes an earlier
    pass. Chapter completion and next-chapter unlock are left to the caller.
    """
    lesson = get_lesson(course, chapter_index, lesson_index)
    percentage = quiz_percentage(score, total_questions)
    passed = percentage >= pass_threshold

    lesson.attempts += 1
    lesson.quiz_score = percentage
    if passed:
        lesson.quiz_passed = True
        lesson.completed = True
    refresh_unlocks(course)
    return QuizResult(percentage=percentage, passed=passed, attempts=lesson.attempts)


def next_unlocked_lesson(course: Course) -> Optional[tuple[int, int]]:
    """First unlocked, not yet completed lesson in course order; None when everything is done."""
    for ci, chapter in enumerate(course.chapters):
        for li, lesson in enumerate(chapter.lessons):
            if not lesson.completed and is_lesson_unlocked(course, ci, li):
                return ci, li
    return None


def regenerate_quiz(
    course: Course,
    chapter_index: int,
    lesson_index: int,
    questions: list[QuizQuestion],
) -> Quiz:
    """Swap in a new question set. Title and the lesson's score/attempt state are kept."""
    if not questions:
        raise ValidationError("A quiz needs at least one question")
    lesson = get_lesson(course, chapter_index, lesson_index)
    title = lesson.quiz.title if lesson.quiz else f"Quiz for {lesson.title}"
    lesson.quiz = Quiz(title=title, questions=list(questions))
    return lesson.quiz


def initialize_progress(course: Course) -> Course:
    """Fresh progression state for a newly generated course."""
    for chapter in course.chapters:
        chapter.completed = False
        for lesson in chapter.lessons:
            lesson.completed = False
            lesson.quiz_passed = False
            lesson.quiz_score = 0
            lesson.attempts = 0
    return refresh_unlocks(course)


def is_last_lesson(course: Course, chapter_index: int, lesson_index: int) -> bool:
    return lesson_index == len(_chapter(course, chapter_index).lessons) - 1
