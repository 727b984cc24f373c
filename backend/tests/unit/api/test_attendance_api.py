"""
Unit Tests for Attendance API Endpoints
"""
from httpx import AsyncClient

from conftest import approve_enrollment


def session_payload(class_id: str, date: str = '2026-03-10T09:00:00Z', records=None) -> dict:
    return {'class_id': class_id, 'date': date, 'topic': 'Heaps', 'records': records or []}


class TestAttendanceSessions:

    async def test_create_session_with_records(
        self, client: AsyncClient, classroom, enrollment, student_user, teacher_headers
    ):
        records = [{'student_id': student_user.student_profile.id, 'status': 'LATE', 'remarks': 'Bus'}]
        response = await client.post(
            '/api/v1/attendance', json=session_payload(classroom.id, records=records), headers=teacher_headers
        )

        assert response.status_code == 201
        data = response.json()['data']
        assert data['summary'] == {'total': 1, 'present': 0, 'absent': 0, 'late': 1, 'excused': 0}
        assert data['records'][0]['student']['user_id'] == student_user.id
        assert data['class']['code'] == 'CS3AB12'

    async def test_duplicate_date(self, client: AsyncClient, classroom, teacher_headers):
        await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)
        response = await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Attendance session already exists for this date'

    async def test_student_cannot_record(self, client: AsyncClient, classroom, student_headers):
        response = await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=student_headers)
        assert response.status_code == 403

    async def test_update_upserts_records(
        self, client: AsyncClient, db_session, classroom, enrollment, student_user, other_student, teacher_headers
    ):
        await approve_enrollment(db_session, classroom, other_student)
        student_id = student_user.student_profile.id
        created = await client.post(
            '/api/v1/attendance',
            json=session_payload(classroom.id, records=[{'student_id': student_id, 'status': 'ABSENT'}]),
            headers=teacher_headers,
        )
        session_id = created.json()['data']['id']

        response = await client.put(
            f'/api/v1/attendance/{session_id}',
            json={'topic': 'Heaps II', 'records': [
                {'student_id': student_id, 'status': 'PRESENT'},
                {'student_id': other_student.student_profile.id, 'status': 'EXCUSED'},
            ]},
            headers=teacher_headers,
        )

        data = response.json()['data']
        assert response.status_code == 200
        assert data['topic'] == 'Heaps II'
        assert data['summary']['total'] == 2
        assert data['summary']['present'] == 1
        assert data['summary']['excused'] == 1

    async def test_records_only_for_enrolled_students(
        self, client: AsyncClient, classroom, enrollment, other_student, teacher_headers
    ):
        outsider = [{'student_id': other_student.student_profile.id, 'status': 'PRESENT'}]
        response = await client.post(
            '/api/v1/attendance', json=session_payload(classroom.id, records=outsider), headers=teacher_headers
        )

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Student is not enrolled in this class'

        created = await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)
        assert created.status_code == 201

    async def test_update_rejects_unknown_student(self, client: AsyncClient, classroom, enrollment, teacher_headers):
        created = await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)
        session_id = created.json()['data']['id']

        response = await client.put(
            f'/api/v1/attendance/{session_id}',
            json={'topic': 'Tries', 'records': [{'student_id': 'nope', 'status': 'PRESENT'}]},
            headers=teacher_headers,
        )

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Student is not enrolled in this class'
        listed = (await client.get('/api/v1/attendance', headers=teacher_headers)).json()['data']
        assert listed[0]['topic'] == 'Heaps'
        assert listed[0]['records'] == []

    async def test_update_requires_owner(self, client: AsyncClient, classroom, teacher_headers, other_teacher_headers):
        created = await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)

        response = await client.put(
            f"/api/v1/attendance/{created.json()['data']['id']}", json={'topic': 'x'}, headers=other_teacher_headers
        )
        assert response.status_code == 403

    async def test_list_and_delete(self, client: AsyncClient, classroom, teacher_headers):
        created = await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)
        await client.post(
            '/api/v1/attendance', json=session_payload(classroom.id, date='2026-04-02T09:00:00Z'),
            headers=teacher_headers,
        )

        march = (await client.get(
            '/api/v1/attendance?start_date=2026-03-01T00:00:00Z&end_date=2026-03-31T23:59:59Z',
            headers=teacher_headers,
        )).json()
        assert march['total'] == 1

        deleted = await client.delete(f"/api/v1/attendance/{created.json()['data']['id']}", headers=teacher_headers)
        assert deleted.status_code == 200
        remaining = (await client.get('/api/v1/attendance', headers=teacher_headers)).json()
        assert remaining['total'] == 1


class TestStudentAttendanceReport:

    async def test_missing_record_counts_as_absent(
        self, client: AsyncClient, classroom, enrollment, student_user, student_headers, teacher_headers
    ):
        student_id = student_user.student_profile.id
        await client.post(
            '/api/v1/attendance',
            json=session_payload(classroom.id, records=[{'student_id': student_id, 'status': 'PRESENT'}]),
            headers=teacher_headers,
        )
        await client.post(
            '/api/v1/attendance', json=session_payload(classroom.id, date='2026-03-11T09:00:00Z'),
            headers=teacher_headers,
        )

        report = (await client.get('/api/v1/student/attendance', headers=student_headers)).json()['data']

        assert [r['status'] for r in report['records']] == ['ABSENT', 'PRESENT']
        assert report['stats']['total'] == 2
        assert report['stats']['rate'] == 50

    async def test_month_filter(self, client: AsyncClient, classroom, enrollment, student_headers, teacher_headers):
        await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)
        await client.post(
            '/api/v1/attendance', json=session_payload(classroom.id, date='2026-04-01T00:00:00Z'),
            headers=teacher_headers,
        )

        march = (await client.get('/api/v1/student/attendance?month=3&year=2026', headers=student_headers)).json()
        assert march['data']['stats']['total'] == 1

        invalid = await client.get('/api/v1/student/attendance?month=13&year=2026', headers=student_headers)
        assert invalid.status_code == 422

        far_future = await client.get('/api/v1/student/attendance?month=12&year=9999', headers=student_headers)
        assert far_future.status_code == 422
        last_valid = await client.get('/api/v1/student/attendance?month=12&year=9998', headers=student_headers)
        assert last_valid.status_code == 200
        assert last_valid.json()['data']['stats']['total'] == 0

    async def test_not_enrolled_sees_nothing(self, client: AsyncClient, classroom, other_student_headers, teacher_headers):
        await client.post('/api/v1/attendance', json=session_payload(classroom.id), headers=teacher_headers)

        report = (await client.get('/api/v1/student/attendance', headers=other_student_headers)).json()['data']
        assert report['records'] == []
        assert report['stats']['rate'] == 0
