"""
Enrollments API

- GET    /enrollments        - role-scoped enrollments (filters: class_id, status)
- PUT    /enrollments/{id}   - approve or reject a join request (owner/admin)
- DELETE /enrollments/{id}   - remove an enrollment (student themself, owner or admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.classroom import EnrollmentStatus
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user, get_current_teacher
from educonnect.schemas.classroom import EnrollmentReview
from educonnect.services.enrollment_service import EnrollmentService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("")
async def list_enrollments(
    class_id: Optional[str] = Query(None),
    status: Optional[EnrollmentStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await EnrollmentService(db).list_enrollments(current_user, class_id, status))


@router.put("/{enrollment_id}")
async def review_enrollment(
    enrollment_id: str,
    review: EnrollmentReview,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(db)
    enrollment = await service.review(current_user, enrollment_id, review.status)
    verb = "approved" if enrollment.status == EnrollmentStatus.APPROVED else "rejected"
    return success_response(service.serialize(enrollment), f"Request {verb}")


@router.delete("/{enrollment_id}")
async def remove_enrollment(
    enrollment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await EnrollmentService(db).remove(current_user, enrollment_id)
    return success_response(message="Enrollment removed")
