"""
Course endpoints: list, detail, AI generation, delete.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.bootstrap import get_llm
from api.config import get_db
from api.models.documents import Course
from api.schemas.course_schemas import CourseDetailResponse, DeleteCourseResponse, GenerateCourseRequest
from api.services.course_service import CourseService
from infra.llm.base import LLM

course_routes = APIRouter()


@course_routes.get("/courses", response_model=list[Course])
async def list_courses(
    user_id: str = Query(..., alias="userId", min_length=1),
    db: Session = Depends(get_db),
) -> list[Course]:
    """Courses owned by the user, newest first, with unlock flags computed."""
    return CourseService(db).list_courses(user_id)


@course_routes.get("/courses/{course_id}", response_model=CourseDetailResponse)
async def get_course(
    course_id: str,
    user_id: str = Query(..., alias="userId", min_length=1),
    db: Session = Depends(get_db),
) -> CourseDetailResponse:
    """One course plus the lesson to resume from."""
    return CourseService(db).get_course(course_id, user_id)


@course_routes.post("/generate-course", response_model=Course, status_code=201)
async def generate_course(
    req: GenerateCourseRequest,
    db: Session = Depends(get_db),
    llm: LLM = Depends(get_llm),
) -> Course:
    """Generate a course with the LLM and save it with the first chapter unlocked."""
    return await CourseService(db, llm).generate_course(req.topic, req.level, req.user_id)


@course_routes.delete("/courses/{course_id}", response_model=DeleteCourseResponse)
async def delete_course(
    course_id: str,
    user_id: str = Query(..., alias="userId", min_length=1),
    db: Session = Depends(get_db),
) -> DeleteCourseResponse:
    CourseService(db).delete_course(course_id, user_id)
    return DeleteCourseResponse(message="Course deleted successfully.", course_id=course_id)
