"""
Submissions API

- GET /submissions               - own submissions (student) or one assignment's (teacher/admin)
- GET /submissions/{id}          - detail (submitting student, owner, admin)
- PUT /submissions/{id}/grade    - grade with marks and feedback (owner/admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user, get_current_teacher
from educonnect.schemas.assignment import GradeSubmission
from educonnect.services.submission_service import SubmissionService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("")
async def list_submissions(
    assignment_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await SubmissionService(db).list_submissions(current_user, assignment_id))


@router.get("/{submission_id}")
async def get_submission(
    submission_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = SubmissionService(db)
    submission = await service.get_submission(current_user, submission_id)
    return success_response(service.serialize(submission, include_assignment=True))


@router.put("/{submission_id}/grade")
async def grade_submission(
    submission_id: str,
    grade_data: GradeSubmission,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = SubmissionService(db)
    submission = await service.grade(current_user, submission_id, grade_data)
    return success_response(service.serialize(submission), "Submission graded successfully")
