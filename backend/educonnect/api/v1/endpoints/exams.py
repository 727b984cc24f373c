"""
Exams API

- GET    /exams                  - role-scoped list (filters: class_id, type, status=upcoming|ongoing|past)
- POST   /exams                  - create with questions (teacher/admin)
- GET    /exams/{id}             - detail; students never see correct answers
- PUT    /exams/{id}             - update (owner/admin)
- DELETE /exams/{id}             - delete (owner/admin)
- POST   /exams/{id}/attempt     - start or resume an attempt (student)
- GET    /exams/{id}/attempts    - all attempts for an exam (owner/admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.exam import ExamType
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user, get_current_student, get_current_teacher
from educonnect.schemas.exam import ExamCreate, ExamUpdate
from educonnect.services.attempt_service import AttemptService
from educonnect.services.exam_service import ExamService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_exams(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    class_id: Optional[str] = Query(None),
    type: Optional[ExamType] = Query(None),
    status: Optional[str] = Query(None, description="upcoming | ongoing | past"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    data, total, params = await ExamService(db).list_exams(
        current_user, page, limit, class_id=class_id, exam_type=type, status=status
    )
    return paginated_response(data, total, params.page, params.limit)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_exam(
    exam_data: ExamCreate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = ExamService(db)
    exam = await service.create_exam(current_user, exam_data)
    return success_response(service.serialize(exam), "Exam created successfully")


@router.get("/{exam_id}")
async def get_exam(
    exam_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ExamService(db).get_exam(current_user, exam_id))


@router.put("/{exam_id}")
async def update_exam(
    exam_id: str,
    exam_data: ExamUpdate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = ExamService(db)
    exam = await service.update_exam(current_user, exam_id, exam_data)
    return success_response(service.serialize(exam), "Exam updated successfully")


@router.delete("/{exam_id}")
async def delete_exam(
    exam_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    await ExamService(db).delete_exam(current_user, exam_id)
    return success_response(message="Exam deleted successfully")


@router.post("/{exam_id}/attempt")
async def start_attempt(
    exam_id: str,
    response: Response,
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    payload, created = await AttemptService(db).start(current_user, exam_id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return success_response(payload, "Exam started" if created else "Resuming attempt")


@router.get("/{exam_id}/attempts")
async def list_exam_attempts(
    exam_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await AttemptService(db).list_attempts(current_user, exam_id))
