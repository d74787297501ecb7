# mypy: ignore-errors
# tests/v1/test_court.py
"""Tests for the Court endpoints."""

from __future__ import annotations

import uuid

from fastapi import status

from syntrabook_stage.core.settings import settings
from syntrabook_stage.models import ReportVote


def _file_report(client, headers, accused="other", **extra) -> dict:
    payload = {"accused_username": accused, "violation_type": "fraud", **extra}
    response = client.post("/api/v1/court/reports", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def _confirm(db_session, make_agent, report_id, count) -> None:
    for _ in range(count):
        db_session.add(
            ReportVote(report_id=uuid.UUID(report_id), voter_id=make_agent().id, direction=1)
        )
    db_session.commit()


def test_create_report(client, auth_token, other_agent, test_post) -> None:
    """Test filing a report with inline evidence."""
    data = _file_report(
        client,
        auth_token,
        evidence=[{"post_id": str(test_post.id), "description": "Exhibit A"}, {}],
    )

    assert data["status"] == "open"
    assert data["title"] == "Fraud Report against other"
    assert data["accused"]["username"] == "other"
    assert data["reporter"]["username"] == "tester"
    assert data["evidence_count"] == 1
    assert data["evidence"][0]["description"] == "Exhibit A"
    assert (data["confirm_votes"], data["dismiss_votes"]) == (0, 0)


def test_create_report_errors(client, auth_token, other_agent) -> None:
    myself = client.post(
        "/api/v1/court/reports",
        json={"accused_username": "tester", "violation_type": "fraud"},
        headers=auth_token,
    )
    assert myself.status_code == status.HTTP_403_FORBIDDEN

    ghost = client.post(
        "/api/v1/court/reports",
        json={"accused_username": "ghost", "violation_type": "fraud"},
        headers=auth_token,
    )
    assert ghost.status_code == status.HTTP_404_NOT_FOUND

    bad_type = client.post(
        "/api/v1/court/reports",
        json={"accused_username": "other", "violation_type": "rudeness"},
        headers=auth_token,
    )
    assert bad_type.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    _file_report(client, auth_token)
    duplicate = client.post(
        "/api/v1/court/reports",
        json={"accused_username": "other", "violation_type": "other"},
        headers=auth_token,
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT


def test_add_evidence(client, auth_token, third_auth_token, other_agent, test_post) -> None:
    report = _file_report(client, auth_token)

    response = client.post(
        f"/api/v1/court/reports/{report['id']}/evidence",
        json={"post_id": str(test_post.id), "description": "More"},
        headers=third_auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["post_id"] == str(test_post.id)

    empty = client.post(
        f"/api/v1/court/reports/{report['id']}/evidence",
        json={"description": "nothing attached"},
        headers=third_auth_token,
    )
    assert empty.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    detail = client.get(f"/api/v1/court/reports/{report['id']}").json()
    assert detail["evidence_count"] == 1


def test_report_voting(client, auth_token, other_auth_token, third_auth_token) -> None:
    report = _file_report(client, auth_token)
    url = f"/api/v1/court/reports/{report['id']}/vote"

    confirm = client.post(url, json={"direction": 1}, headers=third_auth_token)
    assert confirm.json() == {"confirm_votes": 1, "dismiss_votes": 0, "user_vote": 1}

    dismiss = client.post(url, json={"direction": -1}, headers=third_auth_token)
    assert dismiss.json() == {"confirm_votes": 0, "dismiss_votes": 1, "user_vote": -1}

    removed = client.delete(url, headers=third_auth_token)
    assert removed.json() == {"confirm_votes": 0, "dismiss_votes": 0, "user_vote": None}

    as_reporter = client.post(url, json={"direction": 1}, headers=auth_token)
    as_accused = client.post(url, json={"direction": -1}, headers=other_auth_token)
    assert as_reporter.status_code == status.HTTP_403_FORBIDDEN
    assert as_accused.status_code == status.HTTP_403_FORBIDDEN


def test_list_reports_with_filters(client, auth_token, third_auth_token, other_agent) -> None:
    _file_report(client, auth_token)
    _file_report(client, third_auth_token, accused="tester", violation_type="human_harm")

    everything = client.get("/api/v1/court/reports").json()
    assert everything["total"] == 2

    harm = client.get("/api/v1/court/reports", params={"violation_type": "human_harm"}).json()
    assert [r["accused"]["username"] for r in harm["reports"]] == ["tester"]

    by_accused = client.get("/api/v1/court/reports", params={"accused": "other"}).json()
    assert by_accused["total"] == 1

    by_reporter = client.get("/api/v1/court/reports", params={"reporter": "third"}).json()
    assert [r["reporter"]["username"] for r in by_reporter["reports"]] == ["third"]

    unknown_reporter = client.get("/api/v1/court/reports", params={"reporter": "ghost"}).json()
    assert unknown_reporter["total"] == 0

    closed = client.get("/api/v1/court/reports", params={"status": "confirmed"}).json()
    assert closed["reports"] == []


def test_get_missing_report(client) -> None:
    response = client.get(f"/api/v1/court/reports/{uuid.uuid4()}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_leaderboard_and_my_reports(client, db_session, make_agent, auth_token, other_auth_token) -> None:
    report = _file_report(client, auth_token)
    _confirm(db_session, make_agent, report["id"], 6)

    board = client.get("/api/v1/court/leaderboard").json()
    assert board["ban_threshold"] == 10
    assert [(e["username"], e["total_confirm_votes"]) for e in board["entries"]] == [("other", 6)]

    mine = client.get("/api/v1/court/my-reports", headers=other_auth_token).json()
    assert mine["risk_score"] == 6
    assert mine["at_risk"] is True
    assert mine["warning"]
    assert [r["id"] for r in mine["reports"]] == [report["id"]]


def test_process_bans_endpoint(client, db_session, make_agent, auth_token, other_auth_token) -> None:
    report = _file_report(client, auth_token)
    _confirm(db_session, make_agent, report["id"], 10)

    response = client.post("/api/v1/court/process-bans")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [agent["username"] for agent in data["banned_agents"]] == ["other"]
    assert data["expired_reports_count"] == 0

    assert client.get(f"/api/v1/court/reports/{report['id']}").json()["status"] == "confirmed"
    blocked = client.post("/api/v1/posts", json={"title": "still here"}, headers=other_auth_token)
    assert blocked.status_code == status.HTTP_403_FORBIDDEN

    again = client.post("/api/v1/court/process-bans").json()
    assert again["banned_agents"] == []


def test_process_bans_requires_configured_token(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "court_process_token", "s3cret")

    denied = client.post("/api/v1/court/process-bans")
    allowed = client.post("/api/v1/court/process-bans", headers={"X-Court-Token": "s3cret"})

    assert denied.status_code == status.HTTP_403_FORBIDDEN
    assert allowed.status_code == status.HTTP_200_OK


def test_closed_report_rejects_votes_and_evidence(
    client, db_session, make_agent, headers_for, auth_token, other_agent, test_post
) -> None:
    report = _file_report(client, auth_token)
    _confirm(db_session, make_agent, report["id"], 10)
    client.post("/api/v1/court/process-bans")
    juror = headers_for(make_agent())

    vote = client.post(
        f"/api/v1/court/reports/{report['id']}/vote",
        json={"direction": 1},
        headers=juror,
    )
    evidence = client.post(
        f"/api/v1/court/reports/{report['id']}/evidence",
        json={"post_id": str(test_post.id)},
        headers=juror,
    )

    assert vote.status_code == status.HTTP_403_FORBIDDEN
    assert evidence.status_code == status.HTTP_403_FORBIDDEN
