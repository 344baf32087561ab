#!/usr/bin/env python3
"""
Tests for the PPDB HTTP API.

Routes run against the in-memory database from tests/conftest.py through
dependency overrides; notifications are disabled unless a test installs a
notifier.
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from core.enums import PathType, PeriodStatus, RegistrationStatus
from web.backend.app import app
from web.backend.dependencies import get_db, get_notifier
from web.backend.routers.announcements import limiter
from tests import make_period, make_path, make_registration

ADMIN = {'X-Actor-Id': '1'}


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: None
    limiter.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def seeded(session_factory):
    """Committed period with one zonasi path (quota 2) and four verified applicants."""
    db = session_factory()
    period = make_period(db)
    path = make_path(db, period, PathType.PROXIMITY, quota=2)
    registrations = [
        make_registration(db, period, path, {'distance_km': d}, submitted_offset_minutes=i)
        for i, d in enumerate([1.0, 2.0, 3.0, 4.0])
    ]
    db.commit()
    ids = {
        'period': period.id,
        'path': path.id,
        'registrations': [(r.id, r.registration_number, r.student_nisn) for r in registrations],
    }
    db.close()
    return ids


def _select(client, period_id):
    assert client.post(f"/api/periods/{period_id}/calculate-scores", headers=ADMIN).status_code == 200
    assert client.post(f"/api/periods/{period_id}/run-selection", headers=ADMIN).status_code == 200


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'


class TestSelectionRoutes:

    def test_calculate_scores(self, client, seeded):
        response = client.post(f"/api/periods/{seeded['period']}/calculate-scores", headers=ADMIN)

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['total_calculated'] == 4

    def test_update_rankings(self, client, seeded):
        client.post(f"/api/periods/{seeded['period']}/calculate-scores", headers=ADMIN)

        response = client.post(f"/api/periods/{seeded['period']}/update-rankings", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()['total_ranked'] == 4

    def test_run_selection(self, client, seeded):
        client.post(f"/api/periods/{seeded['period']}/calculate-scores", headers=ADMIN)

        response = client.post(f"/api/periods/{seeded['period']}/run-selection", headers=ADMIN)

        assert response.status_code == 200
        result = response.json()['result']
        assert result['total_accepted'] == 2
        assert result['total_rejected'] == 2
        assert result['paths'][0]['quota'] == 2

    def test_actor_header_required(self, client, seeded):
        response = client.post(f"/api/periods/{seeded['period']}/run-selection")

        assert response.status_code == 401
        assert response.json()['success'] is False

    def test_unknown_period_is_404(self, client):
        response = client.post("/api/periods/9999/calculate-scores", headers=ADMIN)

        assert response.status_code == 404
        assert response.json()['type'] == 'NotFoundException'

    def test_inactive_period_is_400(self, client, session_factory):
        db = session_factory()
        period = make_period(db, status=PeriodStatus.DRAFT)
        make_path(db, period)
        db.commit()
        period_id = period.id
        db.close()

        response = client.post(f"/api/periods/{period_id}/run-selection", headers=ADMIN)

        assert response.status_code == 400
        assert response.json()['type'] == 'ValidationException'

    def test_scoring_error_reports_field(self, client, session_factory):
        db = session_factory()
        period = make_period(db)
        path = make_path(db, period, PathType.ACHIEVEMENT)
        make_registration(db, period, path, {'achievement_points': 5})
        db.commit()
        period_id = period.id
        db.close()

        response = client.post(f"/api/periods/{period_id}/calculate-scores", headers=ADMIN)

        assert response.status_code == 400
        assert response.json()['field'] == 'rapor_average'

    def test_rankings(self, client, seeded):
        _select(client, seeded['period'])

        response = client.get(
            f"/api/periods/{seeded['period']}/rankings",
            params={'path_id': seeded['path'], 'page': 1, 'page_size': 3}
        )

        assert response.status_code == 200
        body = response.json()
        assert body['total'] == 4
        assert [r['ranking'] for r in body['rankings']] == [1, 2, 3]
        assert [r['status'] for r in body['rankings']] == ['accepted', 'accepted', 'rejected']
        assert body['rankings'][0]['selection_score'] == 98.0

    def test_rankings_page_size_limit(self, client, seeded):
        response = client.get(
            f"/api/periods/{seeded['period']}/rankings",
            params={'path_id': seeded['path'], 'page_size': 1000}
        )
        assert response.status_code == 400

    def test_stats(self, client, seeded):
        client.post(f"/api/periods/{seeded['period']}/calculate-scores", headers=ADMIN)

        response = client.get(f"/api/periods/{seeded['period']}/stats")

        assert response.status_code == 200
        path_stats = response.json()['paths'][0]
        assert path_stats['total_registrations'] == 4
        assert path_stats['highest_score'] == 98.0
        assert path_stats['lowest_score'] == 92.0


class TestAnnouncementRoutes:

    def test_announce_and_check_result(self, client, seeded):
        _select(client, seeded['period'])

        response = client.post(f"/api/periods/{seeded['period']}/announce", headers=ADMIN)
        assert response.status_code == 200
        result = response.json()['result']
        assert result['accepted_notified'] == 2
        assert result['rejected_notified'] == 2

        _, number, nisn = seeded['registrations'][0]
        lookup = client.get("/api/check-result", params={'registration_number': number, 'student_nisn': nisn})
        assert lookup.status_code == 200
        assert lookup.json()['status'] == 'accepted'
        assert lookup.json()['ranking'] == 1

    def test_announce_uses_notifier(self, client, seeded):
        notifier = Mock(notify_selection_result=Mock(return_value=[]))
        app.dependency_overrides[get_notifier] = lambda: notifier
        _select(client, seeded['period'])

        response = client.post(f"/api/periods/{seeded['period']}/announce", headers=ADMIN)

        assert response.status_code == 200
        assert notifier.notify_selection_result.call_count == 4

    def test_announce_before_selection(self, client, seeded):
        response = client.post(f"/api/periods/{seeded['period']}/announce", headers=ADMIN)

        assert response.status_code == 400
        assert "run selection first" in response.json()['error']

    def test_selection_frozen_after_announcement(self, client, seeded):
        _select(client, seeded['period'])
        client.post(f"/api/periods/{seeded['period']}/announce", headers=ADMIN)

        response = client.post(f"/api/periods/{seeded['period']}/run-selection", headers=ADMIN)

        assert response.status_code == 400

    def test_check_result_before_announcement(self, client, seeded):
        _, number, nisn = seeded['registrations'][0]

        response = client.get("/api/check-result", params={'registration_number': number, 'student_nisn': nisn})

        assert response.status_code == 400

    def test_check_result_wrong_nisn(self, client, seeded):
        _, number, _ = seeded['registrations'][0]

        response = client.get("/api/check-result", params={'registration_number': number, 'student_nisn': '9999999999'})

        assert response.status_code == 404

    @pytest.mark.parametrize('nisn', ['123', '12345678901'])
    def test_check_result_nisn_length(self, client, nisn):
        response = client.get("/api/check-result", params={'registration_number': 'REG-1-1-00001', 'student_nisn': nisn})
        assert response.status_code == 422

    def test_summary(self, client, seeded):
        _select(client, seeded['period'])

        response = client.get(f"/api/periods/{seeded['period']}/summary")

        assert response.status_code == 200
        summary = response.json()['summary']
        assert (summary['verified'], summary['accepted'], summary['rejected']) == (0, 2, 2)
        assert summary['paths'][0]['remaining_quota'] == 0


class TestPeriodAndRegistrationRoutes:

    def test_activate_and_close(self, client, session_factory):
        db = session_factory()
        period = make_period(db, status=PeriodStatus.DRAFT)
        db.commit()
        period_id = period.id
        db.close()

        activated = client.post(f"/api/periods/{period_id}/activate", headers=ADMIN)
        assert activated.status_code == 200
        assert activated.json()['period']['status'] == 'active'

        again = client.post(f"/api/periods/{period_id}/activate", headers=ADMIN)
        assert again.status_code == 400

        closed = client.post(f"/api/periods/{period_id}/close", headers=ADMIN)
        assert closed.json()['period']['status'] == 'closed'

    def test_verify_and_reject(self, client, session_factory):
        db = session_factory()
        period = make_period(db)
        path = make_path(db, period)
        first = make_registration(db, period, path, status=RegistrationStatus.SUBMITTED)
        second = make_registration(db, period, path, status=RegistrationStatus.SUBMITTED)
        db.commit()
        period_id, first_id, second_id = period.id, first.id, second.id
        db.close()

        verified = client.post(f"/api/registrations/{first_id}/verify", headers=ADMIN)
        assert verified.status_code == 200
        assert verified.json()['registration']['verified_by'] == 1

        short = client.post(f"/api/registrations/{second_id}/reject", json={'reason': 'no'}, headers=ADMIN)
        assert short.status_code == 400

        rejected = client.post(
            f"/api/registrations/{second_id}/reject",
            json={'reason': 'Akta kelahiran tidak sesuai'},
            headers=ADMIN
        )
        assert rejected.status_code == 200
        assert rejected.json()['registration']['status'] == 'rejected'

        stats = client.get(f"/api/periods/{period_id}/verification-stats").json()['stats']
        assert (stats['verified'], stats['rejected'], stats['pending']) == (1, 1, 0)

    def test_submit_draft(self, client, session_factory):
        db = session_factory()
        period = make_period(db)
        path = make_path(db, period)
        draft = make_registration(db, period, path, status=RegistrationStatus.DRAFT, registration_number=None)
        db.commit()
        draft_id, period_id = draft.id, period.id
        db.close()

        response = client.post(f"/api/registrations/{draft_id}/submit")

        assert response.status_code == 200
        assert response.json()['registration']['registration_number'] == f"REG-1-{period_id}-00001"
