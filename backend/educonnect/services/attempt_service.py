"""
Exam Attempt Service
Starting an exam, saving answers, auto-grading on submit
"""

import random
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotEnrolledError,
    ResourceNotFoundError,
    ValidationError,
)
from educonnect.core.logging_config import logger
from educonnect.models.exam import (
    Exam,
    ExamAttempt,
    ExamQuestion,
    QuestionAnswer,
    AttemptStatus,
    AUTO_GRADED_TYPES,
)
from educonnect.models.notification import NotificationType
from educonnect.models.user import User
from educonnect.schemas.exam import AttemptUpdate, AttemptResult, to_attempt_payload
from educonnect.services import access
from educonnect.services.exam_service import ExamService, serialize_questions
from educonnect.services.notification_service import NotificationService
from educonnect.services.status import exam_percentage, exam_passed


def grade_answer(question: ExamQuestion, answer: QuestionAnswer) -> float:
    """Exact-match grading for objective questions. Returns the marks awarded."""
    correct = answer.answer is not None and answer.answer == question.answer
    answer.is_correct = correct
    answer.marks_awarded = float(question.marks) if correct else 0.0
    return answer.marks_awarded


def exam_brief(exam: Exam) -> Dict[str, Any]:
    return {
        "id": exam.id,
        "title": exam.title,
        "description": exam.description,
        "duration": exam.duration,
        "total_marks": exam.total_marks,
        "end_time": exam.end_time,
    }


class AttemptService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.exams = ExamService(db)
        self.notifications = NotificationService(db)

    async def get_or_404(self, attempt_id: str) -> ExamAttempt:
        attempt = (await self.db.execute(
            select(ExamAttempt).where(ExamAttempt.id == attempt_id)
        )).scalar_one_or_none()
        if attempt is None:
            raise ResourceNotFoundError("Attempt", attempt_id)
        return attempt

    async def load_answers(self, attempt_id: str) -> List[QuestionAnswer]:
        result = await self.db.execute(select(QuestionAnswer).where(QuestionAnswer.attempt_id == attempt_id))
        return list(result.scalars().all())

    def _owned_by(self, attempt: ExamAttempt, user: User) -> bool:
        return attempt.student is not None and attempt.student.user_id == user.id

    # =====================================================
    # START
    # =====================================================

    async def start(self, user: User, exam_id: str) -> tuple:
        """
        Begin (or resume) an attempt.

        Returns (payload, created). The payload carries the attempt and the
        exam with its questions, answers stripped.
        """
        now = datetime.utcnow()
        exam = await self.exams.get_or_404(exam_id)

        if now < exam.start_time:
            raise ValidationError("Exam has not started yet")
        if now > exam.end_time:
            raise ValidationError("Exam has ended")

        student = await access.get_student_profile(self.db, user)
        if student is None:
            raise NotEnrolledError(exam.class_id)
        await access.require_approved_enrollment(self.db, student.id, exam.class_id)

        attempt = (await self.db.execute(
            select(ExamAttempt).where(ExamAttempt.exam_id == exam.id, ExamAttempt.student_id == student.id)
        )).scalar_one_or_none()

        created = attempt is None
        if attempt is not None and attempt.status != AttemptStatus.IN_PROGRESS:
            raise ValidationError("You have already completed this exam")

        if created:
            attempt = ExamAttempt(
                exam_id=exam.id,
                student_id=student.id,
                status=AttemptStatus.IN_PROGRESS,
                started_at=now,
                total_marks=exam.total_marks,
            )
            self.db.add(attempt)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise ConflictError("Attempt already started")
            await self.db.refresh(attempt)
            logger.info(f"Attempt {attempt.id} started for exam {exam.id} by student {student.id}")

        questions = await self.exams.load_questions(exam.id)
        if exam.shuffle_questions:
            questions = list(questions)
            random.shuffle(questions)

        answers = [] if created else await self.load_answers(attempt.id)
        payload = {
            "attempt": to_attempt_payload(attempt, answers),
            "exam": {**exam_brief(exam), "questions": serialize_questions(questions, with_answers=False)},
        }
        return payload, created

    # =====================================================
    # SAVE / SUBMIT
    # =====================================================

    async def save(self, user: User, attempt_id: str, data: AttemptUpdate) -> Dict[str, Any]:
        attempt = await self.get_or_404(attempt_id)
        if not self._owned_by(attempt, user):
            raise AuthorizationError()
        if attempt.status != AttemptStatus.IN_PROGRESS:
            raise ValidationError("Exam already submitted")

        exam = attempt.exam
        questions = {q.id: q for q in await self.exams.load_questions(exam.id)}
        existing = {a.question_id: a for a in await self.load_answers(attempt.id)}

        for item in data.answers:
            if item.question_id not in questions:
                raise ValidationError("Question does not belong to this exam", field="question_id")
            answer = existing.get(item.question_id)
            if answer is None:
                answer = QuestionAnswer(attempt_id=attempt.id, question_id=item.question_id, answer=item.answer)
                self.db.add(answer)
                existing[item.question_id] = answer
            else:
                answer.answer = item.answer

        if not data.submit:
            await self.db.commit()
            return {"submitted": False}

        obtained = 0.0
        for question_id, answer in existing.items():
            question = questions[question_id]
            if question.type in AUTO_GRADED_TYPES:
                obtained += grade_answer(question, answer)

        attempt.obtained_marks = obtained
        attempt.total_marks = exam.total_marks
        attempt.percentage = exam_percentage(obtained, exam.total_marks)
        attempt.status = AttemptStatus.SUBMITTED
        attempt.submitted_at = datetime.utcnow()

        teacher = exam.classroom.teacher if exam.classroom else None
        if teacher is not None:
            self.notifications.notify(
                teacher.user_id,
                "Exam Submission",
                f"{user.name} submitted {exam.title}",
                NotificationType.INFO,
            )
        await self.db.commit()
        await self.db.refresh(attempt)

        logger.info(f"Attempt {attempt.id} submitted: {obtained}/{exam.total_marks}")

        payload = to_attempt_payload(attempt)
        payload["submitted"] = True
        payload["show_results"] = exam.show_results
        payload["results"] = AttemptResult(
            obtained_marks=obtained,
            total_marks=exam.total_marks,
            percentage=attempt.percentage,
            passed=exam_passed(obtained, exam.passing_marks),
        ).model_dump() if exam.show_results else None
        return payload

    # =====================================================
    # READ
    # =====================================================

    async def get_attempt(self, user: User, attempt_id: str) -> Dict[str, Any]:
        attempt = await self.get_or_404(attempt_id)
        if not self._owned_by(attempt, user) and not access.owns_class(user, attempt.exam.classroom):
            raise AuthorizationError()

        payload = to_attempt_payload(attempt, await self.load_answers(attempt.id))
        payload["exam"] = exam_brief(attempt.exam)
        return payload

    async def list_attempts(self, user: User, exam_id: str) -> List[Dict[str, Any]]:
        exam = await self.exams.get_owned(user, exam_id)
        attempts = (await self.db.execute(
            select(ExamAttempt)
            .where(ExamAttempt.exam_id == exam.id)
            .order_by(ExamAttempt.submitted_at.desc())
        )).scalars().all()

        items = []
        for attempt in attempts:
            payload = to_attempt_payload(attempt)
            payload["student"] = access.student_summary(attempt.student)
            items.append(payload)
        return items
