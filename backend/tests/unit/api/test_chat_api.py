"""
Unit Tests for Chat API Endpoints
"""
from datetime import datetime

from httpx import AsyncClient

from educonnect.models.chat import ChatMessage


async def send(client: AsyncClient, headers: dict, content: str, **target):
    return await client.post('/api/v1/chat/messages', json={'content': content, **target}, headers=headers)


class TestChatRooms:

    async def test_direct_room_is_reused(
        self, client: AsyncClient, student_user, teacher_user, student_headers, teacher_headers
    ):
        created = await client.post(
            '/api/v1/chat/rooms', json={'type': 'direct', 'member_ids': [teacher_user.id]}, headers=student_headers
        )
        again = await client.post(
            '/api/v1/chat/rooms', json={'type': 'DIRECT', 'member_ids': [student_user.id]}, headers=teacher_headers
        )

        assert created.status_code == 201
        assert created.json()['data']['existing'] is False
        assert created.json()['data']['name'] == teacher_user.name
        assert again.status_code == 200
        assert again.json()['data']['existing'] is True
        assert again.json()['data']['id'] == created.json()['data']['id']

    async def test_direct_room_needs_one_other_member(self, client: AsyncClient, student_user, student_headers):
        response = await client.post(
            '/api/v1/chat/rooms', json={'type': 'DIRECT', 'member_ids': [student_user.id]}, headers=student_headers
        )
        assert response.status_code == 400

    async def test_unknown_room_type(self, client: AsyncClient, student_headers):
        response = await client.post('/api/v1/chat/rooms', json={'type': 'broadcast'}, headers=student_headers)

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Invalid room type'

    async def test_group_room(self, client: AsyncClient, student_user, other_student, teacher_headers):
        response = await client.post(
            '/api/v1/chat/rooms',
            json={'type': 'GROUP', 'name': ' Study group ', 'member_ids': [student_user.id, other_student.id]},
            headers=teacher_headers,
        )

        assert response.status_code == 201
        data = response.json()['data']
        assert data['name'] == 'Study group'
        roles = sorted(m['role'] for m in data['members'])
        assert roles == ['ADMIN', 'MEMBER', 'MEMBER']

    async def test_group_requires_name(self, client: AsyncClient, student_user, teacher_headers):
        response = await client.post(
            '/api/v1/chat/rooms', json={'type': 'GROUP', 'member_ids': [student_user.id]}, headers=teacher_headers
        )
        assert response.status_code == 400

    async def test_class_room_includes_approved_students(
        self, client: AsyncClient, classroom, enrollment, student_user, teacher_headers, student_headers
    ):
        created = await client.post(
            '/api/v1/chat/rooms', json={'type': 'CLASS', 'class_id': classroom.id}, headers=teacher_headers
        )
        again = await client.post(
            '/api/v1/chat/rooms', json={'type': 'CLASS', 'class_id': classroom.id}, headers=teacher_headers
        )

        assert created.status_code == 201
        assert created.json()['data']['name'] == 'Data Structures'
        assert student_user.id in [m['user_id'] for m in created.json()['data']['members']]
        assert again.json()['data']['existing'] is True

        rooms = (await client.get('/api/v1/chat/rooms', headers=student_headers)).json()['data']
        assert [r['type'] for r in rooms] == ['CLASS']

    async def test_class_room_requires_owner(self, client: AsyncClient, classroom, other_teacher_headers):
        response = await client.post(
            '/api/v1/chat/rooms', json={'type': 'CLASS', 'class_id': classroom.id}, headers=other_teacher_headers
        )
        assert response.status_code == 403


class TestChatMessages:

    async def test_room_messages_and_unread(
        self, client: AsyncClient, teacher_user, student_headers, teacher_headers
    ):
        room = await client.post(
            '/api/v1/chat/rooms', json={'type': 'DIRECT', 'member_ids': [teacher_user.id]}, headers=student_headers
        )
        room_id = room.json()['data']['id']

        sent = await send(client, student_headers, '  Hello sir  ', room_id=room_id)
        assert sent.status_code == 201
        assert sent.json()['data']['content'] == 'Hello sir'

        rooms = (await client.get('/api/v1/chat/rooms', headers=teacher_headers)).json()['data']
        assert rooms[0]['unread_count'] == 1
        assert rooms[0]['last_message']['content'] == 'Hello sir'

        history = (await client.get(f'/api/v1/chat/rooms/{room_id}/messages', headers=teacher_headers)).json()['data']
        assert [m['content'] for m in history['messages']] == ['Hello sir']
        assert history['next_cursor'] is None

        rooms = (await client.get('/api/v1/chat/rooms', headers=teacher_headers)).json()['data']
        assert rooms[0]['unread_count'] == 0

    async def test_cursor_pagination(self, client: AsyncClient, teacher_user, student_headers):
        room = await client.post(
            '/api/v1/chat/rooms', json={'type': 'DIRECT', 'member_ids': [teacher_user.id]}, headers=student_headers
        )
        room_id = room.json()['data']['id']
        for i in range(5):
            await send(client, student_headers, f'message {i}', room_id=room_id)

        first = (await client.get(
            f'/api/v1/chat/rooms/{room_id}/messages?limit=2', headers=student_headers
        )).json()['data']
        assert [m['content'] for m in first['messages']] == ['message 3', 'message 4']

        second = (await client.get(
            f"/api/v1/chat/rooms/{room_id}/messages?limit=2&cursor={first['next_cursor']}", headers=student_headers
        )).json()['data']
        assert [m['content'] for m in second['messages']] == ['message 1', 'message 2']

    async def test_cursor_keeps_messages_sharing_a_timestamp(
        self, client: AsyncClient, db_session, student_user, teacher_user, student_headers
    ):
        room = await client.post(
            '/api/v1/chat/rooms', json={'type': 'DIRECT', 'member_ids': [teacher_user.id]}, headers=student_headers
        )
        room_id = room.json()['data']['id']
        sent_at = datetime(2026, 3, 10, 9, 0, 0)
        for i in range(1, 5):
            db_session.add(ChatMessage(
                id=f'00000000-0000-0000-0000-00000000000{i}',
                room_id=room_id,
                sender_id=student_user.id,
                content=f'tied {i}',
                created_at=sent_at,
            ))
        await db_session.commit()

        first = (await client.get(
            f'/api/v1/chat/rooms/{room_id}/messages?limit=2', headers=student_headers
        )).json()['data']
        second = (await client.get(
            f"/api/v1/chat/rooms/{room_id}/messages?limit=2&cursor={first['next_cursor']}", headers=student_headers
        )).json()['data']

        assert [m['content'] for m in first['messages']] == ['tied 3', 'tied 4']
        assert [m['content'] for m in second['messages']] == ['tied 1', 'tied 2']

    async def test_non_member_is_rejected(
        self, client: AsyncClient, teacher_user, student_headers, other_student_headers
    ):
        room = await client.post(
            '/api/v1/chat/rooms', json={'type': 'DIRECT', 'member_ids': [teacher_user.id]}, headers=student_headers
        )
        room_id = room.json()['data']['id']

        read = await client.get(f'/api/v1/chat/rooms/{room_id}/messages', headers=other_student_headers)
        write = await send(client, other_student_headers, 'hi', room_id=room_id)

        assert read.status_code == 403
        assert read.json()['error']['message'] == 'Not a member of this room'
        assert write.status_code == 403

    async def test_message_needs_target(self, client: AsyncClient, student_headers):
        response = await send(client, student_headers, 'lost')
        assert response.status_code == 422

    async def test_direct_messages(
        self, client: AsyncClient, student_user, teacher_user, student_headers, teacher_headers
    ):
        await send(client, student_headers, 'Question about homework', receiver_id=teacher_user.id)
        await send(client, teacher_headers, 'Go ahead', receiver_id=student_user.id)

        thread = (await client.get(f'/api/v1/chat/direct/{student_user.id}', headers=teacher_headers)).json()['data']

        assert [m['content'] for m in thread] == ['Question about homework', 'Go ahead']
        assert thread[0]['room_id'] is None
        assert thread[0]['sender']['id'] == student_user.id

    async def test_direct_message_to_unknown_user(self, client: AsyncClient, student_headers):
        response = await send(client, student_headers, 'hello?', receiver_id='missing-user')
        assert response.status_code == 404
