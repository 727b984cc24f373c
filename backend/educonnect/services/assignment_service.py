"""
Assignment Service Layer
Assignment CRUD and the student assignment board
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import AssignmentNotFoundError
from educonnect.core.logging_config import logger
from educonnect.models.assignment import Assignment, Submission
from educonnect.models.classroom import Classroom
from educonnect.models.notification import NotificationType
from educonnect.models.user import User, UserRole
from educonnect.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
    SubmissionResponse,
)
from educonnect.services import access
from educonnect.services.notification_service import NotificationService
from educonnect.services.status import (
    student_assignment_status,
    average_percentage,
    ASSIGNMENT_PENDING,
    ASSIGNMENT_SUBMITTED,
    ASSIGNMENT_LATE,
    ASSIGNMENT_GRADED,
    ASSIGNMENT_OVERDUE,
)
from educonnect.utils.pagination import paginate


def class_brief(classroom: Optional[Classroom]) -> Optional[Dict[str, Any]]:
    if classroom is None:
        return None
    return {
        "id": classroom.id,
        "name": classroom.name,
        "code": classroom.code,
        "subject": classroom.subject,
    }


class AssignmentService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def get_or_404(self, assignment_id: str) -> Assignment:
        assignment = (await self.db.execute(
            select(Assignment).where(Assignment.id == assignment_id)
        )).scalar_one_or_none()
        if assignment is None:
            raise AssignmentNotFoundError(assignment_id)
        return assignment

    async def get_owned(self, user: User, assignment_id: str) -> Assignment:
        assignment = await self.get_or_404(assignment_id)
        access.assert_class_owner(user, assignment.classroom)
        return assignment

    def serialize(self, assignment: Assignment) -> Dict[str, Any]:
        data = AssignmentResponse.model_validate(assignment).model_dump()
        data["class"] = class_brief(assignment.classroom)
        return data

    # =====================================================
    # LIST
    # =====================================================

    async def list_assignments(
        self,
        user: User,
        page: int,
        limit: int,
        class_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple:
        now = datetime.utcnow()
        query = select(Assignment)

        student = None
        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            class_ids = await access.approved_class_ids(self.db, student.id) if student else []
            query = query.where(Assignment.class_id.in_(class_ids))
        elif user.role == UserRole.TEACHER:
            query = query.where(Assignment.class_id.in_(await access.teacher_class_ids(self.db, user)))

        if class_id:
            query = query.where(Assignment.class_id == class_id)
        if status == "active":
            query = query.where(Assignment.due_date >= now, Assignment.is_active == True)  # noqa: E712
        elif status == "past":
            query = query.where(Assignment.due_date < now)

        query = query.order_by(Assignment.due_date.asc())
        assignments, total, params = await paginate(self.db, query, page, limit)
        data = [self.serialize(a) for a in assignments]
        ids = [a.id for a in assignments]

        if student is not None and ids:
            own = {
                s.assignment_id: s
                for s in (await self.db.execute(
                    select(Submission).where(
                        Submission.assignment_id.in_(ids), Submission.student_id == student.id
                    )
                )).scalars().all()
            }
            for item in data:
                sub = own.get(item["id"])
                item["submission"] = SubmissionResponse.model_validate(sub).model_dump() if sub else None
        elif ids:
            counts = dict((await self.db.execute(
                select(Submission.assignment_id, func.count())
                .where(Submission.assignment_id.in_(ids))
                .group_by(Submission.assignment_id)
            )).all())
            for item in data:
                item["submission_count"] = counts.get(item["id"], 0)

        return data, total, params

    # =====================================================
    # MUTATIONS
    # =====================================================

    async def create_assignment(self, user: User, data: AssignmentCreate) -> Assignment:
        classroom = await access.get_owned_class(self.db, user, data.class_id)

        assignment = Assignment(
            title=data.title,
            description=data.description,
            instructions=data.instructions,
            due_date=data.due_date,
            total_marks=data.total_marks,
            class_id=classroom.id,
            attachments=data.attachments,
        )
        self.db.add(assignment)
        await self.db.flush()

        notified = self.notifications.notify_many(
            await access.approved_student_user_ids(self.db, classroom.id),
            "New Assignment",
            f"New assignment: {data.title} - Due {data.due_date.date().isoformat()}",
            NotificationType.INFO,
            link="/dashboard/student/assignments",
        )
        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info(f"Assignment {assignment.id} created in {classroom.code}, notified {notified} student(s)")
        return assignment

    async def update_assignment(self, user: User, assignment_id: str, data: AssignmentUpdate) -> Assignment:
        assignment = await self.get_owned(user, assignment_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(assignment, field, value)
        await self.db.commit()
        await self.db.refresh(assignment)
        return assignment

    async def delete_assignment(self, user: User, assignment_id: str) -> None:
        assignment = await self.get_owned(user, assignment_id)
        await self.db.delete(assignment)
        await self.db.commit()
        logger.info(f"Assignment {assignment_id} deleted by {user.id}")

    # =====================================================
    # STUDENT BOARD
    # =====================================================

    async def student_board(
        self, user: User, status: Optional[str] = None, class_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Active assignments of the student's approved classes with derived status and stats"""
        now = datetime.utcnow()
        student = await access.get_student_profile(self.db, user)
        class_ids = await access.approved_class_ids(self.db, student.id) if student else []
        if class_id:
            class_ids = [c for c in class_ids if c == class_id]

        assignments = list((await self.db.execute(
            select(Assignment)
            .where(Assignment.class_id.in_(class_ids), Assignment.is_active == True)  # noqa: E712
            .order_by(Assignment.due_date.asc())
        )).scalars().all()) if class_ids else []

        submissions = {}
        if assignments:
            submissions = {
                s.assignment_id: s
                for s in (await self.db.execute(
                    select(Submission).where(
                        Submission.assignment_id.in_([a.id for a in assignments]),
                        Submission.student_id == student.id,
                    )
                )).scalars().all()
            }

        items = []
        for assignment in assignments:
            sub = submissions.get(assignment.id)
            derived = student_assignment_status(sub, assignment.due_date, now)
            items.append({
                **self.serialize(assignment),
                "status": derived,
                "submission_id": sub.id if sub else None,
                "submitted_at": sub.submitted_at if sub else None,
                "marks": sub.marks if sub else None,
                "feedback": sub.feedback if sub else None,
            })

        graded = [
            (submissions[a.id].marks, a.total_marks)
            for a in assignments
            if a.id in submissions and submissions[a.id].marks is not None
        ]
        statuses = [i["status"] for i in items]
        stats = {
            "total": len(items),
            "pending": statuses.count(ASSIGNMENT_PENDING),
            "submitted": statuses.count(ASSIGNMENT_SUBMITTED) + statuses.count(ASSIGNMENT_LATE),
            "graded": statuses.count(ASSIGNMENT_GRADED),
            "overdue": statuses.count(ASSIGNMENT_OVERDUE),
            "average_score": average_percentage(graded),
        }

        if status and status.lower() != "all":
            items = [i for i in items if i["status"] == status.upper()]

        return {"assignments": items, "stats": stats}
