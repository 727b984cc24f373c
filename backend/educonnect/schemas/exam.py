from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Any, Dict
from datetime import datetime

from educonnect.models.exam import ExamType, QuestionType, AttemptStatus
from educonnect.schemas.common import UTCDateTime


class QuestionCreate(BaseModel):
    type: QuestionType
    question: str = Field(..., min_length=1)
    options: Optional[List[Any]] = None
    answer: Optional[str] = None
    marks: int = Field(1, ge=0)
    explanation: Optional[str] = None


class ExamCreate(BaseModel):
    title: str = Field(..., min_length=2)
    description: Optional[str] = None
    type: ExamType = ExamType.QUIZ
    class_id: str = Field(..., min_length=1)
    duration: int = Field(..., ge=1)
    total_marks: int = Field(..., ge=1)
    passing_marks: Optional[int] = Field(None, ge=0)
    start_time: UTCDateTime
    end_time: UTCDateTime
    shuffle_questions: bool = False
    show_results: bool = True
    questions: List[QuestionCreate] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class ExamUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    type: Optional[ExamType] = None
    duration: Optional[int] = Field(None, ge=1)
    total_marks: Optional[int] = Field(None, ge=1)
    passing_marks: Optional[int] = Field(None, ge=0)
    start_time: Optional[UTCDateTime] = None
    end_time: Optional[UTCDateTime] = None
    shuffle_questions: Optional[bool] = None
    show_results: Optional[bool] = None
    is_active: Optional[bool] = None


class QuestionResponse(BaseModel):
    """Question as seen by a student: no answer, no explanation"""
    id: str
    type: QuestionType
    question: str
    options: Optional[List[Any]] = None
    marks: int
    order: int

    class Config:
        from_attributes = True


class QuestionWithAnswerResponse(QuestionResponse):
    answer: Optional[str] = None
    explanation: Optional[str] = None


class ExamResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    type: ExamType
    class_id: str
    duration: int
    total_marks: int
    passing_marks: Optional[int] = None
    start_time: datetime
    end_time: datetime
    shuffle_questions: bool
    show_results: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class AnswerInput(BaseModel):
    question_id: str
    answer: Optional[str] = None


class AttemptUpdate(BaseModel):
    answers: List[AnswerInput] = Field(default_factory=list)
    submit: bool = False


class AttemptResponse(BaseModel):
    id: str
    exam_id: str
    student_id: str
    status: AttemptStatus
    started_at: datetime
    submitted_at: Optional[datetime] = None
    obtained_marks: Optional[float] = None
    total_marks: Optional[int] = None
    percentage: Optional[float] = None

    class Config:
        from_attributes = True


class AttemptResult(BaseModel):
    obtained_marks: float
    total_marks: int
    percentage: float
    passed: Optional[bool] = None


class AnswerResponse(BaseModel):
    question_id: str
    answer: Optional[str] = None
    is_correct: Optional[bool] = None
    marks_awarded: Optional[float] = None

    class Config:
        from_attributes = True


def to_attempt_payload(attempt, answers=None) -> Dict[str, Any]:
    payload = AttemptResponse.model_validate(attempt).model_dump()
    if answers is not None:
        payload["answers"] = [AnswerResponse.model_validate(a).model_dump() for a in answers]
    return payload
