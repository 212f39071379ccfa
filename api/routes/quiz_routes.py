"""
Quiz endpoints: completion workflow and AI quiz regeneration.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.bootstrap import get_llm
from api.config import get_db
from api.schemas.course_schemas import QuizRegenerateRequest, QuizRegenerateResponse
from api.schemas.quiz_schemas import QuizCompleteRequest, QuizCompleteResponse
from api.services.course_service import CourseService
from api.services.quiz_service import QuizService
from infra.llm.base import LLM

quiz_routes = APIRouter()


@quiz_routes.post("/quiz/complete", response_model=QuizCompleteResponse, response_model_exclude_none=True)
async def complete_quiz(req: QuizCompleteRequest, db: Session = Depends(get_db)) -> QuizCompleteResponse:
    """
    Score a quiz attempt. A pass completes the lesson, may complete the chapter
    (unlocking the next one) and awards XP; a fail only records the attempt.
    """
    return QuizService(db).complete_quiz(req)


@quiz_routes.post("/quiz/regenerate", response_model=QuizRegenerateResponse)
async def regenerate_quiz(
    req: QuizRegenerateRequest,
    db: Session = Depends(get_db),
    llm: LLM = Depends(get_llm),
) -> QuizRegenerateResponse:
    quiz = await CourseService(db, llm).regenerate_quiz(req.course_id, req.user_id, req.chapter_index, req.lesson_index)
    return QuizRegenerateResponse(message="New quiz questions generated successfully", quiz=quiz)
