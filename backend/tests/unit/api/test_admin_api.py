"""
Unit Tests for Admin API Endpoints
"""
from httpx import AsyncClient
from sqlalchemy import select

from educonnect.models.audit_log import AuditLog
from educonnect.models.session import Session


class TestAdminAnalytics:

    async def test_overview(self, client: AsyncClient, classroom, enrollment, admin_headers):
        response = await client.get('/api/v1/admin/analytics', headers=admin_headers)

        assert response.status_code == 200
        data = response.json()['data']
        assert data['user_distribution'] == {'students': 1, 'teachers': 1, 'admins': 1}
        assert data['overview']['total_classes'] == 1
        assert data['overview']['active_classes'] == 1
        assert data['enrollments'] == {'APPROVED': 1}
        assert data['submissions']['grading_rate'] == 0
        assert data['growth']['days'] == 30

    async def test_days_range(self, client: AsyncClient, admin_headers):
        response = await client.get('/api/v1/admin/analytics?days=0', headers=admin_headers)
        assert response.status_code == 422

    async def test_non_admin_is_rejected(self, client: AsyncClient, teacher_headers):
        response = await client.get('/api/v1/admin/analytics', headers=teacher_headers)

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'FORBIDDEN'


class TestAdminUsers:

    async def test_list_and_filter(self, client: AsyncClient, student_user, teacher_user, admin_headers):
        everyone = (await client.get('/api/v1/admin/users', headers=admin_headers)).json()
        teachers = (await client.get('/api/v1/admin/users?role=TEACHER', headers=admin_headers)).json()
        by_email = (await client.get(
            f'/api/v1/admin/users?search={student_user.email}', headers=admin_headers
        )).json()

        assert everyone['total'] == 3
        assert [u['id'] for u in teachers['data']] == [teacher_user.id]
        assert by_email['data'][0]['student_profile']['semester'] == 3

    async def test_deactivate_revokes_sessions_and_is_audited(
        self, client: AsyncClient, db_session, student_user, student_headers, admin_user, admin_headers
    ):
        response = await client.put(
            f'/api/v1/admin/users/{student_user.id}', json={'is_active': False}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()['data']['is_active'] is False

        sessions = (await db_session.execute(
            select(Session.id).where(Session.user_id == student_user.id)
        )).all()
        assert sessions == []

        audit = (await db_session.execute(
            select(AuditLog.action, AuditLog.user_id, AuditLog.old_value, AuditLog.new_value)
        )).one()
        assert audit.action == 'UPDATE'
        assert audit.user_id == admin_user.id
        assert audit.old_value['is_active'] is True
        assert audit.new_value['is_active'] is False

        locked_out = await client.get('/api/v1/auth/me', headers=student_headers)
        assert locked_out.status_code == 401

    async def test_email_conflict(self, client: AsyncClient, student_user, teacher_user, admin_headers):
        response = await client.put(
            f'/api/v1/admin/users/{student_user.id}', json={'email': teacher_user.email}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'An account with this email already exists'

    async def test_delete_user(self, client: AsyncClient, db_session, other_student, admin_headers):
        response = await client.delete(f'/api/v1/admin/users/{other_student.id}', headers=admin_headers)
        assert response.status_code == 200

        missing = await client.get(f'/api/v1/admin/users/{other_student.id}', headers=admin_headers)
        assert missing.status_code == 404

        actions = (await db_session.execute(select(AuditLog.action))).scalars().all()
        assert actions == ['DELETE']

    async def test_cannot_delete_self(self, client: AsyncClient, admin_user, admin_headers):
        response = await client.delete(f'/api/v1/admin/users/{admin_user.id}', headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Cannot delete your own account'


class TestAdminClasses:

    async def test_create_for_teacher(self, client: AsyncClient, teacher_user, admin_headers):
        response = await client.post(
            '/api/v1/admin/classes',
            json={
                'name': 'Compilers',
                'department': 'Computer Science',
                'semester': 7,
                'subject': 'Compilers',
                'teacher_id': teacher_user.teacher_profile.id,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()['data']
        assert data['code'].startswith('CO7')
        assert data['teacher']['user_id'] == teacher_user.id

    async def test_create_for_unknown_teacher(self, client: AsyncClient, admin_headers):
        response = await client.post(
            '/api/v1/admin/classes',
            json={'name': 'Ghost', 'department': 'Math', 'semester': 1, 'subject': 'Nothing', 'teacher_id': 'nope'},
            headers=admin_headers,
        )
        assert response.status_code == 404

    async def test_list_by_department(self, client: AsyncClient, classroom, admin_headers):
        hit = (await client.get('/api/v1/admin/classes?department=Computer Science', headers=admin_headers)).json()
        miss = (await client.get('/api/v1/admin/classes?department=Physics', headers=admin_headers)).json()

        assert hit['total'] == 1
        assert miss['total'] == 0
