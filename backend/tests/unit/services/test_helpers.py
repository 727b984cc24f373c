"""
Unit Tests for small service helpers: class codes, pagination, month bounds, grading
"""
from datetime import datetime
from types import SimpleNamespace

from educonnect.core.config import settings
from educonnect.services.attendance_service import month_bounds
from educonnect.services.attempt_service import grade_answer
from educonnect.services.class_service import generate_class_code, CODE_ALPHABET
from educonnect.services.exam_service import default_passing_marks
from educonnect.utils.pagination import parse_pagination, total_pages


class TestClassCode:

    def test_shape(self):
        code = generate_class_code("Computer Science", 3)
        assert len(code) == 7
        assert code[:2] == "CO"
        assert code[2] == "3"
        assert all(ch in CODE_ALPHABET for ch in code)

    def test_short_department_is_padded(self):
        assert generate_class_code("-", 11).startswith("XXB")

    def test_random_suffix(self):
        codes = {generate_class_code("Maths", 1) for _ in range(30)}
        assert len(codes) > 1


class TestPagination:

    def test_defaults(self):
        params = parse_pagination()
        assert params.page == 1
        assert params.limit == settings.DEFAULT_PAGE_SIZE
        assert params.offset == 0

    def test_clamping(self):
        params = parse_pagination(page=0, limit=10_000)
        assert params.page == 1
        assert params.limit == settings.MAX_PAGE_SIZE

        assert parse_pagination(page=3, limit=0).limit == 1

    def test_offset(self):
        assert parse_pagination(page=3, limit=10).offset == 20

    def test_total_pages(self):
        assert total_pages(0, 20) == 0
        assert total_pages(41, 20) == 3


class TestMonthBounds:

    def test_regular_month(self):
        assert month_bounds(2, 2024) == (datetime(2024, 2, 1), datetime(2024, 3, 1))

    def test_december_rolls_year(self):
        assert month_bounds(12, 2023) == (datetime(2023, 12, 1), datetime(2024, 1, 1))


class TestGrading:

    def test_exact_match_awards_marks(self):
        question = SimpleNamespace(answer="4", marks=2)
        answer = SimpleNamespace(answer="4", is_correct=None, marks_awarded=None)

        assert grade_answer(question, answer) == 2.0
        assert answer.is_correct is True

    def test_mismatch_and_blank(self):
        question = SimpleNamespace(answer="4", marks=2)
        wrong = SimpleNamespace(answer=" 4", is_correct=None, marks_awarded=None)
        blank = SimpleNamespace(answer=None, is_correct=None, marks_awarded=None)

        assert grade_answer(question, wrong) == 0.0
        assert grade_answer(question, blank) == 0.0
        assert blank.is_correct is False

    def test_default_passing_marks(self):
        assert default_passing_marks(100) == 40
        assert default_passing_marks(7) == 3
