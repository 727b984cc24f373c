"""
Assignments API

- GET    /assignments                    - role-scoped list (filters: class_id, status=active|past)
- POST   /assignments                    - create (teacher/admin, rate limited per user)
- GET    /assignments/{id}               - detail
- PUT    /assignments/{id}               - update (owner/admin)
- DELETE /assignments/{id}               - delete (owner/admin)
- POST   /assignments/{id}/submit        - hand in or re-hand in (student)
- GET    /assignments/{id}/submissions   - submissions overview (owner/admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.core.rate_limiter import create_assignment_rate_limit
from educonnect.models.user import User, UserRole
from educonnect.modules.auth.dependencies import get_current_user, get_current_student, get_current_teacher
from educonnect.schemas.assignment import AssignmentCreate, AssignmentUpdate, SubmissionCreate
from educonnect.services import access
from educonnect.services.assignment_service import AssignmentService
from educonnect.services.submission_service import SubmissionService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_assignments(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    class_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="active | past"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    data, total, params = await AssignmentService(db).list_assignments(
        current_user, page, limit, class_id=class_id, status=status
    )
    return paginated_response(data, total, params.page, params.limit)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_assignment(
    assignment_data: AssignmentCreate,
    current_user: User = Depends(get_current_teacher),
    _rate_limit=Depends(create_assignment_rate_limit),
    db: AsyncSession = Depends(get_db)
):
    service = AssignmentService(db)
    assignment = await service.create_assignment(current_user, assignment_data)
    return success_response(service.serialize(assignment), "Assignment created successfully")


@router.get("/{assignment_id}")
async def get_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = AssignmentService(db)
    assignment = await service.get_or_404(assignment_id)
    if current_user.role == UserRole.STUDENT:
        student = await access.require_student_profile(db, current_user)
        await access.require_approved_enrollment(db, student.id, assignment.class_id)
    else:
        access.assert_class_owner(current_user, assignment.classroom)
    return success_response(service.serialize(assignment))


@router.put("/{assignment_id}")
async def update_assignment(
    assignment_id: str,
    assignment_data: AssignmentUpdate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = AssignmentService(db)
    assignment = await service.update_assignment(current_user, assignment_id, assignment_data)
    return success_response(service.serialize(assignment), "Assignment updated successfully")


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    await AssignmentService(db).delete_assignment(current_user, assignment_id)
    return success_response(message="Assignment deleted successfully")


@router.post("/{assignment_id}/submit")
async def submit_assignment(
    assignment_id: str,
    response: Response,
    submission_data: SubmissionCreate,
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    service = SubmissionService(db)
    submission, created = await service.submit(current_user, assignment_id, submission_data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return success_response(
        service.serialize(submission),
        "Assignment submitted successfully" if created else "Submission updated successfully",
    )


@router.get("/{assignment_id}/submissions")
async def assignment_submissions(
    assignment_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await SubmissionService(db).assignment_overview(current_user, assignment_id))
