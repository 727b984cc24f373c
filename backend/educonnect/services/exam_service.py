"""
Exam Service Layer
Exam CRUD, questions, and the teacher / student exam boards
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import ExamNotFoundError, NotEnrolledError, ValidationError
from educonnect.core.logging_config import logger
from educonnect.models.classroom import ClassEnrollment, EnrollmentStatus
from educonnect.models.exam import Exam, ExamQuestion, ExamAttempt, AttemptStatus, ExamType
from educonnect.models.notification import NotificationType
from educonnect.models.user import User, UserRole
from educonnect.schemas.exam import (
    ExamCreate,
    ExamUpdate,
    ExamResponse,
    QuestionResponse,
    QuestionWithAnswerResponse,
    to_attempt_payload,
)
from educonnect.services import access
from educonnect.services.assignment_service import class_brief
from educonnect.services.notification_service import NotificationService
from educonnect.services.status import (
    student_exam_status,
    exam_window_status,
    grading_rate,
    round_half_up,
    EXAM_AVAILABLE,
    EXAM_COMPLETED,
    EXAM_UPCOMING,
    WINDOW_UPCOMING,
    WINDOW_ONGOING,
    WINDOW_COMPLETED,
)
from educonnect.utils.pagination import paginate


FINISHED_ATTEMPT_STATUSES = (AttemptStatus.SUBMITTED, AttemptStatus.GRADED)


def default_passing_marks(total_marks: int) -> int:
    return math.ceil(total_marks * 0.4)


def serialize_questions(questions: List[ExamQuestion], with_answers: bool) -> List[Dict[str, Any]]:
    schema = QuestionWithAnswerResponse if with_answers else QuestionResponse
    return [schema.model_validate(q).model_dump() for q in questions]


class ExamService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def get_or_404(self, exam_id: str) -> Exam:
        exam = (await self.db.execute(select(Exam).where(Exam.id == exam_id))).scalar_one_or_none()
        if exam is None:
            raise ExamNotFoundError(exam_id)
        return exam

    async def get_owned(self, user: User, exam_id: str) -> Exam:
        exam = await self.get_or_404(exam_id)
        access.assert_class_owner(user, exam.classroom)
        return exam

    async def load_questions(self, exam_id: str) -> List[ExamQuestion]:
        result = await self.db.execute(
            select(ExamQuestion).where(ExamQuestion.exam_id == exam_id).order_by(ExamQuestion.order.asc())
        )
        return list(result.scalars().all())

    async def question_counts(self, exam_ids: List[str]) -> Dict[str, int]:
        if not exam_ids:
            return {}
        result = await self.db.execute(
            select(ExamQuestion.exam_id, func.count())
            .where(ExamQuestion.exam_id.in_(exam_ids))
            .group_by(ExamQuestion.exam_id)
        )
        return dict(result.all())

    def serialize(self, exam: Exam) -> Dict[str, Any]:
        data = ExamResponse.model_validate(exam).model_dump()
        data["class"] = class_brief(exam.classroom)
        return data

    # =====================================================
    # LIST
    # =====================================================

    async def list_exams(
        self,
        user: User,
        page: int,
        limit: int,
        class_id: Optional[str] = None,
        exam_type: Optional[ExamType] = None,
        status: Optional[str] = None,
    ) -> tuple:
        now = datetime.utcnow()
        query = select(Exam)

        student = None
        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            class_ids = await access.approved_class_ids(self.db, student.id) if student else []
            query = query.where(Exam.class_id.in_(class_ids))
        elif user.role == UserRole.TEACHER:
            query = query.where(Exam.class_id.in_(await access.teacher_class_ids(self.db, user)))

        if class_id:
            query = query.where(Exam.class_id == class_id)
        if exam_type:
            query = query.where(Exam.type == exam_type)
        if status == "upcoming":
            query = query.where(Exam.start_time > now)
        elif status == "ongoing":
            query = query.where(Exam.start_time <= now, Exam.end_time >= now)
        elif status == "past":
            query = query.where(Exam.end_time < now)

        exams, total, params = await paginate(self.db, query.order_by(Exam.start_time.asc()), page, limit)
        data = [self.serialize(e) for e in exams]

        counts = await self.question_counts([e.id for e in exams])
        for item in data:
            item["question_count"] = counts.get(item["id"], 0)

        if student is not None and exams:
            attempts = {
                a.exam_id: a
                for a in (await self.db.execute(
                    select(ExamAttempt).where(
                        ExamAttempt.exam_id.in_([e.id for e in exams]),
                        ExamAttempt.student_id == student.id,
                    )
                )).scalars().all()
            }
            for item in data:
                attempt = attempts.get(item["id"])
                item["attempt"] = to_attempt_payload(attempt) if attempt else None

        return data, total, params

    # =====================================================
    # MUTATIONS
    # =====================================================

    async def create_exam(self, user: User, data: ExamCreate) -> Exam:
        classroom = await access.get_owned_class(self.db, user, data.class_id)

        exam = Exam(
            title=data.title,
            description=data.description,
            type=data.type,
            class_id=classroom.id,
            duration=data.duration,
            total_marks=data.total_marks,
            passing_marks=data.passing_marks if data.passing_marks is not None else default_passing_marks(data.total_marks),
            start_time=data.start_time,
            end_time=data.end_time,
            shuffle_questions=data.shuffle_questions,
            show_results=data.show_results,
        )
        self.db.add(exam)
        await self.db.flush()

        for index, question in enumerate(data.questions):
            self.db.add(ExamQuestion(
                exam_id=exam.id,
                type=question.type,
                question=question.question,
                options=question.options,
                answer=question.answer,
                marks=question.marks,
                explanation=question.explanation,
                order=index,
            ))

        self.notifications.notify_many(
            await access.approved_student_user_ids(self.db, classroom.id),
            f"New {data.type.value}",
            f"{data.title} - Starts {data.start_time.strftime('%Y-%m-%d %H:%M')}",
            NotificationType.INFO,
            link="/dashboard/student/exams",
        )
        await self.db.commit()
        await self.db.refresh(exam)

        logger.info(f"Exam {exam.id} created in {classroom.code} with {len(data.questions)} question(s)")
        return exam

    async def update_exam(self, user: User, exam_id: str, data: ExamUpdate) -> Exam:
        exam = await self.get_owned(user, exam_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        start = changes.get("start_time", exam.start_time)
        end = changes.get("end_time", exam.end_time)
        if end <= start:
            raise ValidationError("End time must be after start time", field="end_time")

        for field, value in changes.items():
            setattr(exam, field, value)
        await self.db.commit()
        await self.db.refresh(exam)
        return exam

    async def delete_exam(self, user: User, exam_id: str) -> None:
        exam = await self.get_owned(user, exam_id)
        await self.db.delete(exam)
        await self.db.commit()
        logger.info(f"Exam {exam_id} deleted by {user.id}")

    async def get_exam(self, user: User, exam_id: str) -> Dict[str, Any]:
        """Exam detail; students must be enrolled and never see answers"""
        exam = await self.get_or_404(exam_id)
        questions = await self.load_questions(exam.id)

        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            if student is None:
                raise NotEnrolledError(exam.class_id)
            await access.require_approved_enrollment(self.db, student.id, exam.class_id)
            attempt = (await self.db.execute(
                select(ExamAttempt).where(ExamAttempt.exam_id == exam.id, ExamAttempt.student_id == student.id)
            )).scalar_one_or_none()
            data = self.serialize(exam)
            data["questions"] = serialize_questions(questions, with_answers=False)
            data["attempt"] = to_attempt_payload(attempt) if attempt else None
            return data

        access.assert_class_owner(user, exam.classroom)
        data = self.serialize(exam)
        data["questions"] = serialize_questions(questions, with_answers=True)
        return data

    # =====================================================
    # BOARDS
    # =====================================================

    async def teacher_board(
        self, user: User, class_id: Optional[str] = None, status: Optional[str] = None
    ) -> Dict[str, Any]:
        now = datetime.utcnow()
        query = select(Exam)
        if not access.is_admin(user):
            query = query.where(Exam.class_id.in_(await access.teacher_class_ids(self.db, user)))
        if class_id:
            query = query.where(Exam.class_id == class_id)
        if status == "upcoming":
            query = query.where(Exam.start_time > now)
        elif status == "ongoing":
            query = query.where(Exam.start_time <= now, Exam.end_time >= now)
        elif status == "past":
            query = query.where(Exam.end_time < now)

        exams = list((await self.db.execute(query.order_by(Exam.start_time.asc()))).scalars().all())
        exam_ids = [e.id for e in exams]
        question_counts = await self.question_counts(exam_ids)

        student_counts: Dict[str, int] = {}
        attempts_by_exam: Dict[str, List[ExamAttempt]] = {eid: [] for eid in exam_ids}
        if exams:
            student_counts = dict((await self.db.execute(
                select(ClassEnrollment.class_id, func.count())
                .where(
                    ClassEnrollment.class_id.in_({e.class_id for e in exams}),
                    ClassEnrollment.status == EnrollmentStatus.APPROVED,
                )
                .group_by(ClassEnrollment.class_id)
            )).all())
            for attempt in (await self.db.execute(
                select(ExamAttempt).where(ExamAttempt.exam_id.in_(exam_ids))
            )).scalars().all():
                attempts_by_exam[attempt.exam_id].append(attempt)

        items = []
        for exam in exams:
            attempts = attempts_by_exam.get(exam.id, [])
            finished = [a for a in attempts if a.status in FINISHED_ATTEMPT_STATUSES]
            percentages = [a.percentage for a in finished if a.percentage is not None]
            total_students = student_counts.get(exam.class_id, 0)
            items.append({
                **self.serialize(exam),
                "question_count": question_counts.get(exam.id, 0),
                "status": exam_window_status(exam, now),
                "stats": {
                    "total_students": total_students,
                    "total_attempts": len(attempts),
                    "completed_attempts": len(finished),
                    "not_attempted": max(total_students - len(attempts), 0),
                    "average_score": round_half_up(sum(percentages) / len(percentages)) if percentages else None,
                    "attempt_rate": grading_rate(len(attempts), total_students),
                },
            })

        statuses = [i["status"] for i in items]
        return {
            "exams": items,
            "stats": {
                "total": len(items),
                "upcoming": statuses.count(WINDOW_UPCOMING),
                "ongoing": statuses.count(WINDOW_ONGOING),
                "completed": statuses.count(WINDOW_COMPLETED),
            },
        }

    async def student_board(
        self, user: User, exam_type: Optional[ExamType] = None, class_id: Optional[str] = None
    ) -> Dict[str, Any]:
        now = datetime.utcnow()
        student = await access.get_student_profile(self.db, user)
        class_ids = await access.approved_class_ids(self.db, student.id) if student else []
        if class_id:
            class_ids = [c for c in class_ids if c == class_id]

        exams: List[Exam] = []
        if class_ids:
            query = select(Exam).where(Exam.class_id.in_(class_ids), Exam.is_active == True)  # noqa: E712
            if exam_type:
                query = query.where(Exam.type == exam_type)
            exams = list((await self.db.execute(query.order_by(Exam.start_time.asc()))).scalars().all())

        attempts: Dict[str, ExamAttempt] = {}
        if exams:
            attempts = {
                a.exam_id: a
                for a in (await self.db.execute(
                    select(ExamAttempt).where(
                        ExamAttempt.exam_id.in_([e.id for e in exams]),
                        ExamAttempt.student_id == student.id,
                    )
                )).scalars().all()
            }
        question_counts = await self.question_counts([e.id for e in exams])

        items = []
        for exam in exams:
            attempt = attempts.get(exam.id)
            items.append({
                **self.serialize(exam),
                "question_count": question_counts.get(exam.id, 0),
                "status": student_exam_status(attempt, exam, now),
                "attempt": {
                    "id": attempt.id,
                    "started_at": attempt.started_at,
                    "submitted_at": attempt.submitted_at,
                    "obtained_marks": attempt.obtained_marks,
                    "percentage": attempt.percentage,
                } if attempt else None,
            })

        scored = [i["attempt"]["percentage"] for i in items if i["attempt"] and i["attempt"]["percentage"] is not None]
        statuses = [i["status"] for i in items]
        return {
            "exams": items,
            "stats": {
                "total": len(items),
                "available": statuses.count(EXAM_AVAILABLE),
                "completed": statuses.count(EXAM_COMPLETED),
                "upcoming": statuses.count(EXAM_UPCOMING),
                "average_score": round_half_up(sum(scored) / len(scored)) if scored else 0,
            },
        }
