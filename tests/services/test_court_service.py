# mypy: ignore-errors
# tests/services/test_court_service.py
"""Tests for Court tallies, the leaderboard, risk scores and the ban sweep."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select

from syntrabook_stage.db.time import as_utc, utcnow
from syntrabook_stage.models import Agent, BanHistory, Report, ReportStatus, ReportVote
from syntrabook_stage.services.court import BAN_HISTORY_REASON, RISK_WARNING, CourtService


def _report(db_session, reporter, accused, created_at=None) -> Report:
    report = Report(
        reporter_id=reporter.id,
        accused_id=accused.id,
        violation_type="manipulation",
        title="Manipulation",
        description="Coordinated voting",
        status=ReportStatus.OPEN.value,
        created_at=created_at or utcnow(),
    )
    db_session.add(report)
    db_session.commit()
    return report


def _votes(db_session, make_agent, report, confirm=0, dismiss=0) -> None:
    for _ in range(confirm):
        db_session.add(ReportVote(report_id=report.id, voter_id=make_agent().id, direction=1))
    for _ in range(dismiss):
        db_session.add(ReportVote(report_id=report.id, voter_id=make_agent().id, direction=-1))
    db_session.commit()


def test_tally_counts_each_direction(db_session, make_agent, test_agent, other_agent) -> None:
    report = _report(db_session, test_agent, other_agent)
    _votes(db_session, make_agent, report, confirm=3, dismiss=2)

    assert CourtService(db_session).tally([report.id]) == {report.id: (3, 2)}


def test_leaderboard_ranks_open_reports(db_session, make_agent, test_agent, other_agent, third_agent) -> None:
    first = _report(db_session, test_agent, other_agent)
    second = _report(db_session, third_agent, other_agent)
    against_third = _report(db_session, test_agent, third_agent)
    closed = _report(db_session, other_agent, test_agent)
    closed.status = ReportStatus.EXPIRED.value
    db_session.commit()

    _votes(db_session, make_agent, first, confirm=2)
    _votes(db_session, make_agent, second, confirm=1, dismiss=4)
    _votes(db_session, make_agent, against_third, confirm=5)
    _votes(db_session, make_agent, closed, confirm=9)

    entries = CourtService(db_session).leaderboard()

    assert [(e.username, e.report_count, e.total_confirm_votes) for e in entries] == [
        ("third", 1, 5),
        ("other", 2, 3),
    ]


def test_leaderboard_includes_reports_without_votes(db_session, test_agent, other_agent) -> None:
    _report(db_session, test_agent, other_agent)

    entries = CourtService(db_session).leaderboard()

    assert len(entries) == 1
    assert entries[0].total_confirm_votes == 0


def test_leaderboard_excludes_banned_agents(db_session, make_agent, test_agent, other_agent) -> None:
    report = _report(db_session, test_agent, other_agent)
    _votes(db_session, make_agent, report, confirm=2)
    other_agent.is_banned = True
    db_session.commit()

    assert CourtService(db_session).leaderboard() == []


def test_risk_status_warns_at_threshold(db_session, make_agent, test_agent, other_agent) -> None:
    report = _report(db_session, test_agent, other_agent)
    _votes(db_session, make_agent, report, confirm=4, dismiss=3)
    court = CourtService(db_session)

    calm = court.risk_status(other_agent.id)
    assert (calm.risk_score, calm.at_risk, calm.warning) == (4, False, None)

    _votes(db_session, make_agent, report, confirm=2)
    risky = court.risk_status(other_agent.id)
    assert (risky.risk_score, risky.at_risk, risky.warning) == (6, True, RISK_WARNING)
    assert risky.ban_threshold == 10


def test_risk_status_ignores_old_reports(db_session, make_agent, test_agent, other_agent) -> None:
    old = _report(db_session, test_agent, other_agent, created_at=utcnow() - timedelta(hours=30))
    _votes(db_session, make_agent, old, confirm=8)

    assert CourtService(db_session).risk_status(other_agent.id).risk_score == 0


def test_my_reports_lists_every_status(db_session, test_agent, other_agent, third_agent) -> None:
    now = utcnow()
    older = _report(db_session, test_agent, other_agent, created_at=now - timedelta(days=2))
    older.status = ReportStatus.CONFIRMED.value
    db_session.commit()
    newer = _report(db_session, third_agent, other_agent, created_at=now)

    reports = CourtService(db_session).my_reports(other_agent.id)

    assert [summary.report.id for summary in reports] == [newer.id, older.id]


def test_process_bans_bans_and_confirms(db_session, make_agent, test_agent, other_agent, third_agent) -> None:
    weak = _report(db_session, test_agent, other_agent)
    strong = _report(db_session, third_agent, other_agent)
    _votes(db_session, make_agent, weak, confirm=3)
    _votes(db_session, make_agent, strong, confirm=7, dismiss=2)

    result = CourtService(db_session).process_bans()
    db_session.expire_all()

    assert [(b.username, b.confirm_votes) for b in result.banned_agents] == [("other", 10)]
    banned = db_session.get(Agent, other_agent.id)
    assert banned.is_banned is True
    assert banned.banned_at is not None
    assert banned.ban_reason == "Community vote - excessive violation reports"

    statuses = {db_session.get(Report, r.id).status for r in (weak, strong)}
    assert statuses == {ReportStatus.CONFIRMED.value}
    assert db_session.get(Report, strong.id).resolved_at is not None

    history = db_session.execute(select(BanHistory)).scalars().all()
    assert len(history) == 1
    assert history[0].agent_id == other_agent.id
    assert history[0].report_id == strong.id
    assert history[0].reason == BAN_HISTORY_REASON


def test_process_bans_below_threshold_does_nothing(db_session, make_agent, test_agent, other_agent) -> None:
    report = _report(db_session, test_agent, other_agent)
    _votes(db_session, make_agent, report, confirm=9)

    result = CourtService(db_session).process_bans()
    db_session.expire_all()

    assert result.banned_agents == []
    assert db_session.get(Agent, other_agent.id).is_banned is False
    assert db_session.get(Report, report.id).status == ReportStatus.OPEN.value


def test_process_bans_is_idempotent(db_session, make_agent, test_agent, other_agent) -> None:
    report = _report(db_session, test_agent, other_agent)
    _votes(db_session, make_agent, report, confirm=10)
    court = CourtService(db_session)

    first = court.process_bans()
    second = court.process_bans()

    assert len(first.banned_agents) == 1
    assert second.banned_agents == []
    assert second.expired_reports_count == 0
    assert len(db_session.execute(select(BanHistory)).scalars().all()) == 1


def test_process_bans_limits_batch(db_session, make_agent, test_agent) -> None:
    accused = [make_agent() for _ in range(6)]
    for agent in accused:
        report = _report(db_session, test_agent, agent)
        _votes(db_session, make_agent, report, confirm=10)

    result = CourtService(db_session).process_bans()

    assert len(result.banned_agents) == 5


def test_process_bans_expires_stale_reports(db_session, make_agent, test_agent, other_agent, third_agent) -> None:
    """Old open reports with few confirm votes expire; well-supported ones stay open."""
    now = utcnow()
    stale = _report(db_session, test_agent, other_agent, created_at=now - timedelta(days=8))
    supported = _report(db_session, third_agent, other_agent, created_at=now - timedelta(days=8))
    fresh = _report(db_session, test_agent, third_agent, created_at=now - timedelta(days=1))
    _votes(db_session, make_agent, stale, confirm=3)
    _votes(db_session, make_agent, supported, confirm=5)

    result = CourtService(db_session).process_bans(now=now)
    db_session.expire_all()

    assert result.expired_reports_count == 1
    expired = db_session.get(Report, stale.id)
    assert expired.status == ReportStatus.EXPIRED.value
    assert as_utc(expired.resolved_at) == now
    assert db_session.get(Report, supported.id).status == ReportStatus.OPEN.value
    assert db_session.get(Report, fresh.id).status == ReportStatus.OPEN.value


def test_process_bans_continues_after_a_failure(db_session, make_agent, test_agent, monkeypatch) -> None:
    """One agent failing to ban does not stop the others."""
    victims = [make_agent("victim-a"), make_agent("victim-b")]
    for agent in victims:
        report = _report(db_session, test_agent, agent)
        _votes(db_session, make_agent, report, confirm=11)

    original = CourtService._ban_agent

    def flaky_ban(self, agent_id, now):
        if agent_id == victims[0].id:
            raise RuntimeError("database hiccup")
        return original(self, agent_id, now)

    monkeypatch.setattr(CourtService, "_ban_agent", flaky_ban)

    result = CourtService(db_session).process_bans()
    db_session.expire_all()

    assert [b.username for b in result.banned_agents] == ["victim-b"]
    assert db_session.get(Agent, victims[0].id).is_banned is False
    assert db_session.get(Agent, victims[1].id).is_banned is True
