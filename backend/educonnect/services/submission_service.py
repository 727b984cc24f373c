"""
Submission Service Layer
Handing in work, the teacher's submission overview and grading
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotEnrolledError,
    SubmissionNotFoundError,
    ValidationError,
)
from educonnect.core.logging_config import logger
from educonnect.models.assignment import Submission, SubmissionStatus
from educonnect.models.notification import NotificationType
from educonnect.models.user import User, UserRole
from educonnect.schemas.assignment import SubmissionCreate, GradeSubmission, SubmissionResponse
from educonnect.services import access
from educonnect.services.assignment_service import AssignmentService, class_brief
from educonnect.services.notification_service import NotificationService
from educonnect.services.status import submission_status_on_submit, is_late_submission, round_half_up


class SubmissionService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)
        self.assignments = AssignmentService(db)

    def serialize(self, submission: Submission, include_assignment: bool = False) -> Dict[str, Any]:
        data = SubmissionResponse.model_validate(submission).model_dump()
        data["student"] = access.student_summary(submission.student)
        assignment = submission.assignment
        if assignment is not None:
            data["is_late"] = is_late_submission(submission.submitted_at, assignment.due_date)
            if include_assignment:
                data["assignment"] = {
                    "id": assignment.id,
                    "title": assignment.title,
                    "due_date": assignment.due_date,
                    "total_marks": assignment.total_marks,
                    "class": class_brief(assignment.classroom),
                }
        return data

    async def get_or_404(self, submission_id: str) -> Submission:
        submission = (await self.db.execute(
            select(Submission).where(Submission.id == submission_id)
        )).scalar_one_or_none()
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        return submission

    # =====================================================
    # STUDENT
    # =====================================================

    async def submit(self, user: User, assignment_id: str, data: SubmissionCreate) -> tuple:
        """
        Hand in (or re-hand in) an assignment.

        Returns (submission, created). A graded submission is final.
        """
        now = datetime.utcnow()
        assignment = await self.assignments.get_or_404(assignment_id)

        student = await access.get_student_profile(self.db, user)
        if student is None:
            raise NotEnrolledError(assignment.class_id)
        await access.require_approved_enrollment(self.db, student.id, assignment.class_id)

        status = submission_status_on_submit(assignment.due_date, now)

        submission = (await self.db.execute(
            select(Submission).where(
                Submission.assignment_id == assignment.id,
                Submission.student_id == student.id,
            )
        )).scalar_one_or_none()

        created = submission is None
        if created:
            submission = Submission(
                assignment_id=assignment.id,
                student_id=student.id,
                content=data.content,
                attachments=data.attachments,
                status=status,
                submitted_at=now,
            )
            self.db.add(submission)

            teacher = assignment.classroom.teacher if assignment.classroom else None
            if teacher is not None:
                late_suffix = " (late)" if status == SubmissionStatus.LATE else ""
                self.notifications.notify(
                    teacher.user_id,
                    "New Submission",
                    f"{user.name} submitted {assignment.title}{late_suffix}",
                    NotificationType.INFO,
                    link=f"/dashboard/teacher/assignments/{assignment.id}/submissions",
                )
        else:
            if submission.status == SubmissionStatus.GRADED or submission.marks is not None:
                raise ValidationError("Submission already graded")
            submission.content = data.content
            submission.attachments = data.attachments
            submission.status = status
            submission.submitted_at = now

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Already submitted")

        await self.db.refresh(submission)
        logger.info(
            f"Submission {submission.id} {'created' if created else 'updated'} "
            f"for assignment {assignment.id} ({status.value})"
        )
        return submission, created

    # =====================================================
    # LISTING
    # =====================================================

    async def list_submissions(self, user: User, assignment_id: Optional[str] = None) -> List[Dict[str, Any]]:
        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            if student is None:
                return []
            query = select(Submission).where(Submission.student_id == student.id)
            if assignment_id:
                query = query.where(Submission.assignment_id == assignment_id)
        else:
            if not assignment_id:
                raise ValidationError("assignment_id is required", field="assignment_id")
            await self.assignments.get_owned(user, assignment_id)
            query = select(Submission).where(Submission.assignment_id == assignment_id)

        result = await self.db.execute(query.order_by(Submission.submitted_at.desc()))
        return [self.serialize(s, include_assignment=True) for s in result.scalars().all()]

    async def assignment_overview(self, user: User, assignment_id: str) -> Dict[str, Any]:
        """Submissions of one assignment, who has not submitted, and summary numbers"""
        assignment = await self.assignments.get_owned(user, assignment_id)

        submissions = list((await self.db.execute(
            select(Submission)
            .where(Submission.assignment_id == assignment.id)
            .order_by(Submission.submitted_at.desc())
        )).scalars().all())

        students = await access.approved_students(self.db, assignment.class_id)
        submitted_ids = {s.student_id for s in submissions}
        not_submitted = [access.student_summary(s) for s in students if s.id not in submitted_ids]

        graded_marks = [s.marks for s in submissions if s.marks is not None]
        late = [s for s in submissions if is_late_submission(s.submitted_at, assignment.due_date)]

        return {
            "assignment": self.assignments.serialize(assignment),
            "submissions": [self.serialize(s) for s in submissions],
            "not_submitted": not_submitted,
            "stats": {
                "total_students": len(students),
                "submitted": len(submissions),
                "graded": len(graded_marks),
                "pending": len(submissions) - len(graded_marks),
                "not_submitted": len(not_submitted),
                "late": len(late),
                "average_marks": round_half_up(sum(graded_marks) / len(graded_marks), 2) if graded_marks else 0,
            },
        }

    async def get_submission(self, user: User, submission_id: str) -> Submission:
        submission = await self.get_or_404(submission_id)
        is_owner_student = submission.student is not None and submission.student.user_id == user.id
        if not is_owner_student and not access.owns_class(user, submission.assignment.classroom):
            raise AuthorizationError()
        return submission

    # =====================================================
    # GRADING
    # =====================================================

    async def grade(self, user: User, submission_id: str, data: GradeSubmission) -> Submission:
        submission = await self.get_or_404(submission_id)
        assignment = submission.assignment
        access.assert_class_owner(user, assignment.classroom)

        total = assignment.total_marks
        marks = data.marks
        if marks is None or not math.isfinite(marks) or marks != int(marks) or not 0 <= marks <= total:
            raise ValidationError(f"Marks must be between 0 and {total}", field="marks")

        submission.marks = int(marks)
        submission.feedback = data.feedback
        submission.status = SubmissionStatus.GRADED
        submission.graded_at = datetime.utcnow()

        self.notifications.notify(
            submission.student.user_id,
            "Assignment Graded",
            f'Your submission for "{assignment.title}" has been graded. Score: {int(marks)}/{total}',
            NotificationType.SUCCESS,
            link="/dashboard/student/assignments",
        )
        await self.db.commit()
        await self.db.refresh(submission)

        logger.info(f"Submission {submission.id} graded {int(marks)}/{total} by {user.id}")
        return submission
