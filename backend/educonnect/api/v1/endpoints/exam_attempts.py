"""
Exam attempt endpoints

- GET /exam-attempts/{id}   - attempt with answers (student owner, class owner, admin)
- PUT /exam-attempts/{id}   - save answers; submit=true auto-grades and closes the attempt
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user, get_current_student
from educonnect.schemas.exam import AttemptUpdate
from educonnect.services.attempt_service import AttemptService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("/{attempt_id}")
async def get_attempt(
    attempt_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await AttemptService(db).get_attempt(current_user, attempt_id))


@router.put("/{attempt_id}")
async def save_attempt(
    attempt_id: str,
    attempt_data: AttemptUpdate,
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    result = await AttemptService(db).save(current_user, attempt_id, attempt_data)
    return success_response(result, "Exam submitted successfully" if result["submitted"] else "Answers saved")
