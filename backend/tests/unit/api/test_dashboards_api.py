"""
Unit Tests for Student and Teacher Dashboard Endpoints
"""
from datetime import datetime, timedelta

from httpx import AsyncClient

from educonnect.models.exam import Exam, ExamType


class TestStudentDashboard:

    async def test_counts(self, client: AsyncClient, classroom, enrollment, assignment, ongoing_exam, student_headers):
        response = await client.get('/api/v1/student/dashboard', headers=student_headers)

        assert response.status_code == 200
        data = response.json()['data']
        assert data['stats'] == {
            'enrolled_classes': 1,
            'pending_assignments': 1,
            'upcoming_exams': 1,
            'attendance_rate': 0,
        }
        assert data['student']['profile']['department'] == 'Computer Science'
        assert [c['code'] for c in data['classes']] == ['CS3AB12']

    async def test_submitted_assignment_is_not_pending(
        self, client: AsyncClient, assignment, enrollment, student_headers
    ):
        await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'done'}, headers=student_headers
        )

        data = (await client.get('/api/v1/student/dashboard', headers=student_headers)).json()['data']
        assert data['stats']['pending_assignments'] == 0

    async def test_teacher_is_rejected(self, client: AsyncClient, teacher_headers):
        response = await client.get('/api/v1/student/dashboard', headers=teacher_headers)
        assert response.status_code == 403


class TestTeacherDashboard:

    async def test_counts(
        self, client: AsyncClient, db_session, classroom, enrollment, assignment, other_student_headers,
        student_headers, teacher_headers
    ):
        await client.post(f'/api/v1/classes/{classroom.id}/enroll', headers=other_student_headers)
        await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'done'}, headers=student_headers
        )
        now = datetime.utcnow()
        db_session.add(Exam(
            title='Final', type=ExamType.FINAL, class_id=classroom.id, duration=120, total_marks=100,
            passing_marks=40, start_time=now + timedelta(days=10), end_time=now + timedelta(days=10, hours=3),
        ))
        await db_session.commit()

        data = (await client.get('/api/v1/teacher/dashboard', headers=teacher_headers)).json()['data']

        assert data['stats'] == {
            'total_classes': 1,
            'total_students': 1,
            'pending_requests': 1,
            'pending_grading': 1,
        }
        assert data['recent_submissions'][0]['assignment']['title'] == 'Linked Lists'
        assert [e['title'] for e in data['upcoming_exams']] == ['Final']

    async def test_empty_teacher(self, client: AsyncClient, other_teacher_headers):
        data = (await client.get('/api/v1/teacher/dashboard', headers=other_teacher_headers)).json()['data']

        assert data['stats']['total_classes'] == 0
        assert data['classes'] == []
