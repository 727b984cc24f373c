from sqlalchemy import (
    Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Float, Text, ForeignKey, JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class ExamType(str, enum.Enum):
    QUIZ = "QUIZ"
    MIDTERM = "MIDTERM"
    FINAL = "FINAL"
    PRACTICE = "PRACTICE"


class QuestionType(str, enum.Enum):
    MCQ = "MCQ"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"
    LONG_ANSWER = "LONG_ANSWER"


# Question types graded by exact answer match on submit
AUTO_GRADED_TYPES = (QuestionType.MCQ, QuestionType.TRUE_FALSE)


class AttemptStatus(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    GRADED = "GRADED"


class Exam(Base):
    """Timed test for a class"""
    __tablename__ = "exams"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(SQLEnum(ExamType), default=ExamType.QUIZ, nullable=False)
    class_id = Column(GUID, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    duration = Column(Integer, nullable=False)  # minutes
    total_marks = Column(Integer, nullable=False)
    passing_marks = Column(Integer, nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    shuffle_questions = Column(Boolean, default=False, nullable=False)
    show_results = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    classroom = relationship("Classroom", back_populates="exams", lazy="selectin")
    questions = relationship(
        "ExamQuestion", back_populates="exam", cascade="all, delete-orphan", passive_deletes=True,
        order_by="ExamQuestion.order",
    )
    attempts = relationship("ExamAttempt", back_populates="exam", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Exam {self.type} {self.title}>"


class ExamQuestion(Base):
    __tablename__ = "exam_questions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    exam_id = Column(GUID, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(QuestionType), nullable=False)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=True)
    answer = Column(Text, nullable=True)
    marks = Column(Integer, default=1, nullable=False)
    explanation = Column(Text, nullable=True)
    order = Column(Integer, default=0, nullable=False)

    exam = relationship("Exam", back_populates="questions")

    def __repr__(self):
        return f"<ExamQuestion {self.exam_id}#{self.order}>"


class ExamAttempt(Base):
    """One student's sitting of an exam"""
    __tablename__ = "exam_attempts"
    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_attempt_exam_student"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    exam_id = Column(GUID, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(AttemptStatus), default=AttemptStatus.IN_PROGRESS, nullable=False)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    submitted_at = Column(DateTime, nullable=True)
    obtained_marks = Column(Float, nullable=True)
    total_marks = Column(Integer, nullable=True)
    percentage = Column(Float, nullable=True)

    exam = relationship("Exam", back_populates="attempts", lazy="selectin")
    student = relationship("StudentProfile", lazy="selectin")
    answers = relationship("QuestionAnswer", back_populates="attempt", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<ExamAttempt {self.exam_id}/{self.student_id} {self.status}>"


class QuestionAnswer(Base):
    __tablename__ = "question_answers"
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_answer_attempt_question"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    attempt_id = Column(GUID, ForeignKey("exam_attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(GUID, ForeignKey("exam_questions.id", ondelete="CASCADE"), nullable=False)
    answer = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=True)
    marks_awarded = Column(Float, nullable=True)

    attempt = relationship("ExamAttempt", back_populates="answers")
    question = relationship("ExamQuestion")

    def __repr__(self):
        return f"<QuestionAnswer {self.attempt_id}/{self.question_id}>"
