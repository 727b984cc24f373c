"""
Derived statuses and rates.

Pure functions over stored fields. Every time-dependent function takes an
explicit `now` so callers (and tests) control the clock.
"""

import math
from datetime import datetime
from typing import Iterable, Optional, Sequence

from educonnect.models.assignment import Submission, SubmissionStatus
from educonnect.models.attendance import AttendanceStatus
from educonnect.models.exam import Exam, ExamAttempt, AttemptStatus


# Student-facing assignment statuses
ASSIGNMENT_PENDING = "PENDING"
ASSIGNMENT_SUBMITTED = "SUBMITTED"
ASSIGNMENT_LATE = "LATE"
ASSIGNMENT_GRADED = "GRADED"
ASSIGNMENT_OVERDUE = "OVERDUE"

# Student-facing exam statuses
EXAM_UPCOMING = "UPCOMING"
EXAM_AVAILABLE = "AVAILABLE"
EXAM_IN_PROGRESS = "IN_PROGRESS"
EXAM_COMPLETED = "COMPLETED"
EXAM_MISSED = "MISSED"

# Teacher-facing exam window statuses
WINDOW_UPCOMING = "UPCOMING"
WINDOW_ONGOING = "ONGOING"
WINDOW_COMPLETED = "COMPLETED"


def round_half_up(value: float, digits: int = 0):
    """Round with ties away from zero for non-negative values (12.5 -> 13)"""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def student_assignment_status(submission: Optional[Submission], due_date: datetime, now: datetime) -> str:
    if submission is not None:
        if submission.marks is not None:
            return ASSIGNMENT_GRADED
        if submission.status == SubmissionStatus.LATE:
            return ASSIGNMENT_LATE
        return ASSIGNMENT_SUBMITTED
    if now > due_date:
        return ASSIGNMENT_OVERDUE
    return ASSIGNMENT_PENDING


def submission_status_on_submit(due_date: datetime, now: datetime) -> SubmissionStatus:
    """Status stored when a student hands in (or re-hands in) work"""
    return SubmissionStatus.LATE if now > due_date else SubmissionStatus.SUBMITTED


def is_late_submission(submitted_at: Optional[datetime], due_date: datetime) -> bool:
    return submitted_at is not None and submitted_at > due_date


def student_exam_status(attempt: Optional[ExamAttempt], exam: Exam, now: datetime) -> str:
    if attempt is not None:
        if attempt.status == AttemptStatus.GRADED or attempt.submitted_at is not None:
            return EXAM_COMPLETED
        return EXAM_IN_PROGRESS
    if exam.end_time < now:
        return EXAM_MISSED
    if exam.start_time <= now <= exam.end_time:
        return EXAM_AVAILABLE
    return EXAM_UPCOMING


def exam_window_status(exam: Exam, now: datetime) -> str:
    if exam.start_time > now:
        return WINDOW_UPCOMING
    if exam.end_time < now:
        return WINDOW_COMPLETED
    return WINDOW_ONGOING


def attendance_rate(statuses: Iterable[AttendanceStatus], total: Optional[int] = None) -> int:
    """
    Percentage of sessions attended, counting LATE as attended.

    `total` defaults to the number of statuses; pass it explicitly when
    sessions without a record should count against the student.
    """
    statuses = list(statuses)
    total = len(statuses) if total is None else total
    if total == 0:
        return 0
    attended = sum(1 for s in statuses if s in (AttendanceStatus.PRESENT, AttendanceStatus.LATE))
    return round_half_up(attended / total * 100)


def average_percentage(pairs: Sequence[tuple]) -> int:
    """Mean of obtained/total * 100 over (obtained, total) pairs; 0 when empty"""
    values = [obtained / total * 100 for obtained, total in pairs if total]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def grading_rate(graded: int, total: int) -> int:
    return round_half_up(graded / total * 100) if total else 0


def exam_percentage(obtained: float, total_marks: int) -> float:
    return obtained / total_marks * 100 if total_marks else 0.0


def exam_passed(obtained: float, passing_marks: Optional[int]) -> Optional[bool]:
    if passing_marks is None:
        return None
    return obtained >= passing_marks
