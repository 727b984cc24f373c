"""
Classes API

- GET    /classes                  - classes visible to the caller (paginated, search)
- POST   /classes                  - create a class (teacher/admin)
- GET    /classes/search?code=     - look a class up by (part of) its join code
- POST   /classes/join             - request to join by code (student, rate limited)
- GET    /classes/{id}             - class detail
- PUT    /classes/{id}             - update (owner/admin)
- DELETE /classes/{id}             - delete (owner/admin)
- POST   /classes/{id}/enroll      - request to join by id (student, rate limited)
- GET    /classes/{id}/students    - approved students with stats (owner/admin)
- POST   /classes/{id}/students    - add a student by email (owner/admin)
- GET    /classes/{id}/requests    - pending join requests (owner/admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.core.rate_limiter import enroll_rate_limit
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user, get_current_student, get_current_teacher
from educonnect.schemas.classroom import ClassCreate, ClassUpdate, JoinClassRequest, AddStudentRequest
from educonnect.services.class_service import ClassService
from educonnect.services.enrollment_service import EnrollmentService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_classes(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    data, total, params = await ClassService(db).list_classes(current_user, page, limit, search)
    return paginated_response(data, total, params.page, params.limit)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_class(
    class_data: ClassCreate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = ClassService(db)
    classroom = await service.create_class(current_user, class_data)
    return success_response(await service.serialize(classroom), "Class created successfully")


@router.get("/search")
async def search_class_by_code(
    code: str = Query(""),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ClassService(db).search_by_code(current_user, code))


@router.post("/join")
async def join_class(
    response: Response,
    join_data: JoinClassRequest,
    current_user: User = Depends(get_current_student),
    _rate_limit=Depends(enroll_rate_limit),
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(db)
    enrollment, created = await service.request_join(current_user, code=join_data.code)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return success_response(service.serialize(enrollment), "Join request sent. Waiting for teacher approval.")


@router.get("/{class_id}")
async def get_class(
    class_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ClassService(db).get_class(current_user, class_id))


@router.put("/{class_id}")
async def update_class(
    class_id: str,
    class_data: ClassUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ClassService(db)
    classroom = await service.update_class(current_user, class_id, class_data)
    return success_response(await service.serialize(classroom), "Class updated successfully")


@router.delete("/{class_id}")
async def delete_class(
    class_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ClassService(db).delete_class(current_user, class_id)
    return success_response(message="Class deleted successfully")


@router.post("/{class_id}/enroll")
async def enroll_in_class(
    class_id: str,
    response: Response,
    current_user: User = Depends(get_current_student),
    _rate_limit=Depends(enroll_rate_limit),
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(db)
    enrollment, created = await service.request_join(current_user, class_id=class_id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return success_response(service.serialize(enrollment), "Join request sent. Waiting for teacher approval.")


@router.get("/{class_id}/students")
async def list_class_students(
    class_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ClassService(db).class_students(current_user, class_id))


@router.post("/{class_id}/students", status_code=status.HTTP_201_CREATED)
async def add_student_to_class(
    class_id: str,
    student_data: AddStudentRequest,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(db)
    enrollment = await service.add_student(current_user, class_id, student_data.email)
    return success_response(service.serialize(enrollment), "Student added to class")


@router.get("/{class_id}/requests")
async def list_join_requests(
    class_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await EnrollmentService(db).pending_requests(current_user, class_id))
