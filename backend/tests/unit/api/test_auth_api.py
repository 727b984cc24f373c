"""
Unit Tests for Authentication and Session API Endpoints
"""
from datetime import datetime, timedelta

from faker import Faker
from httpx import AsyncClient
from sqlalchemy import select

from educonnect.models.session import Session
from conftest import TEST_PASSWORD, create_user, headers_for

fake = Faker()


def signup_payload(**overrides) -> dict:
    data = {
        "name": fake.name(),
        "email": fake.unique.email(),
        "password": "securePassword123",
        "confirm_password": "securePassword123",
    }
    data.update(overrides)
    return data


class TestSignup:

    async def test_signup_student(self, client: AsyncClient):
        payload = signup_payload()
        response = await client.post('/api/v1/auth/signup', json=payload)

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['data']['email'] == payload['email'].lower()
        assert body['data']['role'] == 'STUDENT'
        assert body['data']['student_profile'] is not None
        assert 'hashed_password' not in body['data']
        assert 'session_token' in response.headers.get('set-cookie', '')

    async def test_signup_teacher_creates_profile(self, client: AsyncClient):
        payload = signup_payload(role='TEACHER', department='Physics', subject='Optics', university='Test U')
        response = await client.post('/api/v1/auth/signup', json=payload)

        assert response.status_code == 201
        profile = response.json()['data']['teacher_profile']
        assert profile['subject'] == 'Optics'

    async def test_signup_duplicate_email(self, client: AsyncClient, student_user):
        response = await client.post('/api/v1/auth/signup', json=signup_payload(email=student_user.email))

        assert response.status_code == 400
        error = response.json()['error']
        assert error['message'] == 'An account with this email already exists'

    async def test_signup_password_mismatch(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/signup', json=signup_payload(confirm_password='different123'))
        assert response.status_code == 422


class TestLogin:

    async def test_login_success(self, client: AsyncClient, student_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': student_user.email.upper(),
            'password': TEST_PASSWORD,
        })

        assert response.status_code == 200
        data = response.json()['data']
        assert data['user']['id'] == student_user.id
        assert data['session_token']

        me = await client.get('/api/v1/auth/me', headers={'Authorization': f"Bearer {data['session_token']}"})
        assert me.status_code == 200
        assert me.json()['data']['email'] == student_user.email

    async def test_login_wrong_password(self, client: AsyncClient, student_user):
        response = await client.post('/api/v1/auth/login', json={
            'email': student_user.email,
            'password': 'wrong-password',
        })

        assert response.status_code == 401
        assert response.json()['error']['message'] == 'Invalid email or password'

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/login', json={
            'email': fake.email(),
            'password': TEST_PASSWORD,
        })
        assert response.status_code == 401

    async def test_login_inactive(self, client: AsyncClient, db_session):
        user = await create_user(db_session, is_active=False)
        response = await client.post('/api/v1/auth/login', json={'email': user.email, 'password': TEST_PASSWORD})

        assert response.status_code == 403
        assert response.json()['error']['message'] == 'Account is inactive'


class TestCurrentUser:

    async def test_me_requires_session(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'UNAUTHORIZED'

    async def test_unknown_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer nope'})
        assert response.status_code == 401

    async def test_expired_session_is_deleted(self, client: AsyncClient, db_session, student_user):
        session = Session(
            session_token='expired-token',
            user_id=student_user.id,
            expires=datetime.utcnow() - timedelta(minutes=1),
        )
        db_session.add(session)
        await db_session.commit()

        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer expired-token'})

        assert response.status_code == 401
        remaining = (await db_session.execute(
            select(Session.id).where(Session.session_token == 'expired-token')
        )).first()
        assert remaining is None

    async def test_logout_revokes_session(self, client: AsyncClient, student_headers):
        response = await client.post('/api/v1/auth/logout', headers=student_headers)
        assert response.status_code == 200

        me = await client.get('/api/v1/auth/me', headers=student_headers)
        assert me.status_code == 401

    async def test_logout_without_session(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/logout')
        assert response.status_code == 200


class TestSessions:

    async def test_list_marks_current(self, client: AsyncClient, db_session, student_user, student_headers):
        await headers_for(db_session, student_user)

        response = await client.get('/api/v1/sessions', headers=student_headers)

        assert response.status_code == 200
        sessions = response.json()['data']
        assert len(sessions) == 2
        assert sum(1 for s in sessions if s['current']) == 1

    async def test_revoke_all_keeps_current(self, client: AsyncClient, db_session, student_user, student_headers):
        other = await headers_for(db_session, student_user)

        response = await client.delete('/api/v1/sessions?all=true', headers=student_headers)

        assert response.status_code == 200
        assert response.json()['data']['revoked'] == 1
        assert (await client.get('/api/v1/auth/me', headers=student_headers)).status_code == 200
        assert (await client.get('/api/v1/auth/me', headers=other)).status_code == 401

    async def test_revoke_all_requires_flag(self, client: AsyncClient, student_headers):
        response = await client.delete('/api/v1/sessions', headers=student_headers)
        assert response.status_code == 400

    async def test_cannot_revoke_someone_elses_session(
        self, client: AsyncClient, student_headers, other_student_headers
    ):
        other_sessions = (await client.get('/api/v1/sessions', headers=other_student_headers)).json()['data']

        response = await client.delete(f"/api/v1/sessions/{other_sessions[0]['id']}", headers=student_headers)
        assert response.status_code == 403

    async def test_admin_lists_other_users_sessions(self, client: AsyncClient, student_user, student_headers, admin_headers):
        response = await client.get(f'/api/v1/sessions?user_id={student_user.id}', headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()['data']) == 1

    async def test_student_cannot_list_other_users_sessions(self, client: AsyncClient, teacher_user, student_headers):
        response = await client.get(f'/api/v1/sessions?user_id={teacher_user.id}', headers=student_headers)
        assert response.status_code == 403
