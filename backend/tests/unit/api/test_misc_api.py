"""
Unit Tests for Notifications, Tasks, Announcements and Profile API Endpoints
"""
from httpx import AsyncClient
from sqlalchemy import select

from educonnect.models.notification import Notification


async def seed_notifications(db_session, user, count: int):
    for i in range(count):
        db_session.add(Notification(user_id=user.id, title=f'Note {i}', message='Something happened', type='INFO'))
    await db_session.commit()


class TestNotifications:

    async def test_list_with_unread_count(self, client: AsyncClient, db_session, student_user, student_headers):
        await seed_notifications(db_session, student_user, 3)

        response = await client.get('/api/v1/notifications?limit=2', headers=student_headers)

        body = response.json()
        assert response.status_code == 200
        assert len(body['data']) == 2
        assert body['total'] == 3
        assert body['unread_count'] == 3

    async def test_mark_one_then_all(self, client: AsyncClient, db_session, student_user, student_headers):
        await seed_notifications(db_session, student_user, 3)
        items = (await client.get('/api/v1/notifications', headers=student_headers)).json()['data']

        one = await client.put(
            '/api/v1/notifications', json={'notification_id': items[0]['id']}, headers=student_headers
        )
        assert one.json()['data'] == {'updated': 1}

        unread = (await client.get('/api/v1/notifications?unread=true', headers=student_headers)).json()
        assert unread['total'] == 2

        rest = await client.put('/api/v1/notifications', json={'mark_all': True}, headers=student_headers)
        assert rest.json()['data'] == {'updated': 2}

    async def test_mark_needs_target(self, client: AsyncClient, student_headers):
        response = await client.put('/api/v1/notifications', json={}, headers=student_headers)
        assert response.status_code == 422

    async def test_cannot_touch_foreign_notification(
        self, client: AsyncClient, db_session, student_user, other_student_headers
    ):
        await seed_notifications(db_session, student_user, 1)
        notification_id = (await db_session.execute(
            select(Notification.id)
        )).scalar_one()

        response = await client.delete(f'/api/v1/notifications?id={notification_id}', headers=other_student_headers)
        assert response.status_code == 404

    async def test_delete_all(self, client: AsyncClient, db_session, student_user, other_student, student_headers):
        await seed_notifications(db_session, student_user, 2)
        await seed_notifications(db_session, other_student, 1)

        missing_target = await client.delete('/api/v1/notifications', headers=student_headers)
        assert missing_target.status_code == 400

        response = await client.delete('/api/v1/notifications?all=true', headers=student_headers)
        assert response.json()['data'] == {'deleted': 2}


class TestTasks:

    async def test_create_and_order_by_status(self, client: AsyncClient, student_headers):
        await client.post('/api/v1/tasks', json={'title': 'Done thing', 'status': 'COMPLETED'}, headers=student_headers)
        await client.post('/api/v1/tasks', json={'title': 'Doing thing', 'status': 'IN_PROGRESS'}, headers=student_headers)
        created = await client.post('/api/v1/tasks', json={'title': 'Read chapter 4'}, headers=student_headers)

        assert created.status_code == 201
        assert created.json()['data']['priority'] == 'MEDIUM'

        tasks = (await client.get('/api/v1/tasks', headers=student_headers)).json()['data']
        assert [t['status'] for t in tasks] == ['TODO', 'IN_PROGRESS', 'COMPLETED']
        assert tasks[2]['completed_at'] is not None

    async def test_complete_and_reopen(self, client: AsyncClient, student_headers):
        created = await client.post('/api/v1/tasks', json={'title': 'Revise'}, headers=student_headers)
        task_id = created.json()['data']['id']

        done = await client.put(f'/api/v1/tasks/{task_id}', json={'status': 'COMPLETED'}, headers=student_headers)
        assert done.json()['data']['completed_at'] is not None

        reopened = await client.put(f'/api/v1/tasks/{task_id}', json={'status': 'TODO'}, headers=student_headers)
        assert reopened.json()['data']['completed_at'] is None

    async def test_other_users_task_is_not_found(self, client: AsyncClient, student_headers, other_student_headers):
        created = await client.post('/api/v1/tasks', json={'title': 'Private'}, headers=student_headers)
        task_id = created.json()['data']['id']

        update = await client.put(f'/api/v1/tasks/{task_id}', json={'title': 'Mine now'}, headers=other_student_headers)
        delete = await client.delete(f'/api/v1/tasks/{task_id}', headers=other_student_headers)

        assert update.status_code == 404
        assert delete.status_code == 404
        assert (await client.get('/api/v1/tasks', headers=other_student_headers)).json()['data'] == []


class TestAnnouncements:

    async def test_class_announcement_notifies_students(
        self, client: AsyncClient, classroom, enrollment, teacher_headers, student_headers
    ):
        response = await client.post(
            '/api/v1/announcements',
            json={'title': 'Lab moved', 'content': 'Room 204 today', 'class_id': classroom.id, 'priority': 'URGENT'},
            headers=teacher_headers,
        )

        assert response.status_code == 201
        assert response.json()['data']['author']['role'] == 'TEACHER'

        notifications = (await client.get('/api/v1/notifications', headers=student_headers)).json()['data']
        assert notifications[0]['title'] == 'New Announcement'
        assert notifications[0]['type'] == 'warning'

        listed = (await client.get('/api/v1/announcements', headers=student_headers)).json()
        assert listed['total'] == 1

    async def test_global_announcement_requires_admin(self, client: AsyncClient, teacher_headers, admin_headers, student_headers):
        payload = {'title': 'Holiday', 'content': 'Campus closed Friday', 'is_global': True}

        denied = await client.post('/api/v1/announcements', json=payload, headers=teacher_headers)
        allowed = await client.post('/api/v1/announcements', json=payload, headers=admin_headers)

        assert denied.status_code == 403
        assert allowed.status_code == 201
        visible = (await client.get('/api/v1/announcements', headers=student_headers)).json()
        assert visible['data'][0]['is_global'] is True

    async def test_class_announcement_needs_class(self, client: AsyncClient, teacher_headers):
        response = await client.post(
            '/api/v1/announcements', json={'title': 'Hello', 'content': 'World'}, headers=teacher_headers
        )
        assert response.status_code == 422

    async def test_only_author_edits(
        self, client: AsyncClient, classroom, teacher_headers, other_teacher_headers, admin_headers
    ):
        created = await client.post(
            '/api/v1/announcements',
            json={'title': 'Quiz Friday', 'content': 'Chapters 1-3', 'class_id': classroom.id},
            headers=teacher_headers,
        )
        announcement_id = created.json()['data']['id']

        denied = await client.put(
            f'/api/v1/announcements/{announcement_id}', json={'title': 'No quiz'}, headers=other_teacher_headers
        )
        edited = await client.put(
            f'/api/v1/announcements/{announcement_id}', json={'title': 'Quiz Monday'}, headers=teacher_headers
        )
        removed = await client.delete(f'/api/v1/announcements/{announcement_id}', headers=admin_headers)

        assert denied.status_code == 403
        assert edited.json()['data']['title'] == 'Quiz Monday'
        assert removed.status_code == 200


class TestProfile:

    async def test_student_profile_is_merged(self, client: AsyncClient, student_user, student_headers):
        response = await client.get('/api/v1/profile', headers=student_headers)

        data = response.json()['data']
        assert data['email'] == student_user.email
        assert data['department'] == 'Computer Science'
        assert data['semester'] == 3
        assert data['profile_id'] == student_user.student_profile.id

    async def test_update_student_fields(self, client: AsyncClient, student_headers):
        response = await client.put(
            '/api/v1/profile', json={'name': '  Asha Rao ', 'semester': 4, 'section': 'B'}, headers=student_headers
        )

        data = response.json()['data']
        assert data['name'] == 'Asha Rao'
        assert data['semester'] == 4
        assert data['section'] == 'B'

    async def test_update_teacher_fields(self, client: AsyncClient, teacher_headers):
        response = await client.put(
            '/api/v1/profile', json={'designation': 'Professor', 'semester': 2}, headers=teacher_headers
        )

        data = response.json()['data']
        assert data['designation'] == 'Professor'
        assert 'semester' not in data

    async def test_semester_range(self, client: AsyncClient, student_headers):
        response = await client.put('/api/v1/profile', json={'semester': 13}, headers=student_headers)
        assert response.status_code == 422
