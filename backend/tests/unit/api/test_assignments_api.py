"""
Unit Tests for Assignment and Submission API Endpoints
"""
from datetime import datetime, timedelta

from httpx import AsyncClient
from sqlalchemy import select

from educonnect.models.assignment import Submission, SubmissionStatus


def assignment_payload(class_id: str, **overrides) -> dict:
    payload = {
        'title': 'Binary Trees',
        'description': 'Implement insertion and traversal for a BST',
        'due_date': (datetime.utcnow() + timedelta(days=3)).isoformat() + 'Z',
        'total_marks': 20,
        'class_id': class_id,
    }
    payload.update(overrides)
    return payload


class TestAssignmentCrud:

    async def test_create_notifies_enrolled_students(
        self, client: AsyncClient, classroom, enrollment, teacher_headers, student_headers
    ):
        response = await client.post(
            '/api/v1/assignments', json=assignment_payload(classroom.id), headers=teacher_headers
        )

        assert response.status_code == 201
        data = response.json()['data']
        assert data['title'] == 'Binary Trees'
        assert data['class']['code'] == 'CS3AB12'

        notifications = (await client.get('/api/v1/notifications', headers=student_headers)).json()
        assert notifications['unread_count'] == 1
        assert notifications['data'][0]['title'] == 'New Assignment'

    async def test_create_in_foreign_class(self, client: AsyncClient, classroom, other_teacher_headers):
        response = await client.post(
            '/api/v1/assignments', json=assignment_payload(classroom.id), headers=other_teacher_headers
        )
        assert response.status_code == 403

    async def test_create_validates_payload(self, client: AsyncClient, classroom, teacher_headers):
        response = await client.post(
            '/api/v1/assignments', json=assignment_payload(classroom.id, description='short'),
            headers=teacher_headers,
        )
        assert response.status_code == 422

    async def test_list_for_teacher_counts_submissions(self, client: AsyncClient, assignment, teacher_headers):
        response = await client.get('/api/v1/assignments', headers=teacher_headers)

        body = response.json()
        assert body['total'] == 1
        assert body['data'][0]['submission_count'] == 0

    async def test_student_sees_only_enrolled_classes(
        self, client: AsyncClient, assignment, enrollment, student_headers, other_student_headers
    ):
        own = (await client.get('/api/v1/assignments', headers=student_headers)).json()
        other = (await client.get('/api/v1/assignments', headers=other_student_headers)).json()

        assert own['total'] == 1
        assert own['data'][0]['submission'] is None
        assert other['total'] == 0

    async def test_get_requires_enrollment(self, client: AsyncClient, assignment, other_student_headers):
        response = await client.get(f'/api/v1/assignments/{assignment.id}', headers=other_student_headers)

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'NOT_ENROLLED'

    async def test_update_and_delete(self, client: AsyncClient, assignment, teacher_headers):
        updated = await client.put(
            f'/api/v1/assignments/{assignment.id}', json={'total_marks': 40}, headers=teacher_headers
        )
        assert updated.json()['data']['total_marks'] == 40

        deleted = await client.delete(f'/api/v1/assignments/{assignment.id}', headers=teacher_headers)
        assert deleted.status_code == 200

        missing = await client.get(f'/api/v1/assignments/{assignment.id}', headers=teacher_headers)
        assert missing.status_code == 404
        assert missing.json()['error']['code'] == 'ASSIGNMENT_NOT_FOUND'


class TestSubmissions:

    async def test_submit_then_resubmit(self, client: AsyncClient, assignment, enrollment, student_headers):
        first = await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'v1'}, headers=student_headers
        )
        second = await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'v2'}, headers=student_headers
        )

        assert first.status_code == 201
        assert first.json()['data']['status'] == 'SUBMITTED'
        assert second.status_code == 200
        assert second.json()['data']['id'] == first.json()['data']['id']
        assert second.json()['data']['content'] == 'v2'

    async def test_late_submission(self, client: AsyncClient, db_session, assignment, enrollment, student_headers):
        assignment.due_date = datetime.utcnow() - timedelta(hours=1)
        await db_session.commit()

        response = await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'sorry'}, headers=student_headers
        )

        assert response.status_code == 201
        assert response.json()['data']['status'] == 'LATE'
        assert response.json()['data']['is_late'] is True

    async def test_submit_without_enrollment(self, client: AsyncClient, assignment, other_student_headers):
        response = await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'x'}, headers=other_student_headers
        )
        assert response.status_code == 403

    async def test_grade_range_is_checked(
        self, client: AsyncClient, assignment, enrollment, student_headers, teacher_headers
    ):
        submitted = await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'done'}, headers=student_headers
        )
        submission_id = submitted.json()['data']['id']

        too_high = await client.put(
            f'/api/v1/submissions/{submission_id}/grade', json={'marks': 51}, headers=teacher_headers
        )
        fractional = await client.put(
            f'/api/v1/submissions/{submission_id}/grade', json={'marks': 10.5}, headers=teacher_headers
        )
        assert too_high.status_code == 400
        assert too_high.json()['error']['message'] == 'Marks must be between 0 and 50'
        assert fractional.status_code == 400

        for raw in ('Infinity', '-Infinity', 'NaN', '1e400'):
            non_finite = await client.put(
                f'/api/v1/submissions/{submission_id}/grade',
                content='{"marks": ' + raw + '}',
                headers={**teacher_headers, 'Content-Type': 'application/json'},
            )
            assert non_finite.status_code == 400
            assert non_finite.json()['error']['message'] == 'Marks must be between 0 and 50'

        graded = await client.put(
            f'/api/v1/submissions/{submission_id}/grade', json={'marks': 45, 'feedback': 'Nice'},
            headers=teacher_headers,
        )
        assert graded.status_code == 200
        assert graded.json()['data']['marks'] == 45
        assert graded.json()['data']['status'] == 'GRADED'

        locked = await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'again'}, headers=student_headers
        )
        assert locked.status_code == 400

    async def test_grade_requires_owner(
        self, client: AsyncClient, db_session, assignment, enrollment, student_user, other_teacher_headers
    ):
        submission = Submission(
            assignment_id=assignment.id,
            student_id=student_user.student_profile.id,
            content='work',
            status=SubmissionStatus.SUBMITTED,
            submitted_at=datetime.utcnow(),
        )
        db_session.add(submission)
        await db_session.commit()

        response = await client.put(
            f'/api/v1/submissions/{submission.id}/grade', json={'marks': 10}, headers=other_teacher_headers
        )
        assert response.status_code == 403

        stored = (await db_session.execute(
            select(Submission.marks).where(Submission.id == submission.id)
        )).scalar_one()
        assert stored is None

    async def test_overview(self, client: AsyncClient, assignment, enrollment, student_headers, teacher_headers):
        await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'done'}, headers=student_headers
        )

        response = await client.get(f'/api/v1/assignments/{assignment.id}/submissions', headers=teacher_headers)

        data = response.json()['data']
        assert data['stats']['total_students'] == 1
        assert data['stats']['submitted'] == 1
        assert data['stats']['pending'] == 1
        assert data['not_submitted'] == []

    async def test_submissions_list_needs_assignment_for_teacher(self, client: AsyncClient, teacher_headers):
        response = await client.get('/api/v1/submissions', headers=teacher_headers)
        assert response.status_code == 400

    async def test_student_reads_own_submission(
        self, client: AsyncClient, assignment, enrollment, student_headers, other_student_headers
    ):
        submitted = await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'done'}, headers=student_headers
        )
        submission_id = submitted.json()['data']['id']

        own = await client.get(f'/api/v1/submissions/{submission_id}', headers=student_headers)
        foreign = await client.get(f'/api/v1/submissions/{submission_id}', headers=other_student_headers)

        assert own.status_code == 200
        assert own.json()['data']['assignment']['title'] == 'Linked Lists'
        assert foreign.status_code == 403


class TestStudentBoard:

    async def test_board_statuses_and_stats(
        self, client: AsyncClient, db_session, classroom, assignment, enrollment, student_headers
    ):
        await client.post(
            f'/api/v1/assignments/{assignment.id}/submit', json={'content': 'done'}, headers=student_headers
        )
        board = (await client.get('/api/v1/student/assignments', headers=student_headers)).json()['data']

        assert [a['status'] for a in board['assignments']] == ['SUBMITTED']
        assert board['stats']['total'] == 1
        assert board['stats']['submitted'] == 1
        assert board['stats']['average_score'] == 0

        filtered = (await client.get(
            '/api/v1/student/assignments?status=pending', headers=student_headers
        )).json()['data']
        assert filtered['assignments'] == []
