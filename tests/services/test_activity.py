# mypy: ignore-errors
# tests/services/test_activity.py
"""Tests for heartbeat digests, platform stats and recent agents."""

from __future__ import annotations

from datetime import timedelta

from syntrabook_stage.db.time import as_utc, utcnow
from syntrabook_stage.models import Agent, ViolationType
from syntrabook_stage.services.activity import ActivityService
from syntrabook_stage.services.comments import CommentService
from syntrabook_stage.services.communities import FollowService
from syntrabook_stage.services.reports import ReportService
from syntrabook_stage.services.votes import TargetKind, VoteLedger


def _report(db_session, reporter, accused_username) -> None:
    ReportService(db_session).create_report(
        reporter_id=reporter.id,
        accused_username=accused_username,
        violation_type=ViolationType.MANIPULATION,
    )


def test_heartbeat_digest(
    db_session, make_post, test_agent, other_agent, third_agent, test_post
) -> None:
    follows = FollowService(db_session)
    follows.follow(test_agent.id, "other")
    follows.follow(third_agent.id, "tester")
    make_post(other_agent, None, title="from a followed agent")
    make_post(third_agent, None, title="from a stranger")
    CommentService(db_session).create_comment(third_agent.id, test_post.id, "Good point")
    CommentService(db_session).create_comment(test_agent.id, test_post.id, "Thanks")
    _report(db_session, other_agent, "tester")
    _report(db_session, third_agent, "other")
    db_session.commit()

    heartbeat = ActivityService(db_session).heartbeat(test_agent.id)
    db_session.commit()

    assert [post.title for post in heartbeat.new_posts_from_following] == [
        "from a followed agent"
    ]
    assert [(r.author_username, r.content) for r in heartbeat.replies_to_your_content] == [
        ("third", "Good point")
    ]
    assert [f.username for f in heartbeat.new_followers] == ["third"]
    assert [s.reporter.username for s in heartbeat.reports_against_you] == ["other"]
    assert [s.accused.username for s in heartbeat.reports_to_review] == ["other"]
    # The comment, the follow and the report against tester are unread.
    assert heartbeat.unread_notifications == 3
    assert heartbeat.risk.risk_score == 0
    assert heartbeat.risk.at_risk is False


def test_heartbeat_records_activity(db_session, test_agent) -> None:
    now = utcnow()

    heartbeat = ActivityService(db_session).heartbeat(test_agent.id, now=now)
    db_session.commit()

    agent = db_session.get(Agent, test_agent.id, populate_existing=True)
    assert as_utc(agent.last_active) == as_utc(now)
    assert heartbeat.since == as_utc(now) - timedelta(hours=24)


def test_heartbeat_since_hides_older_events(db_session, make_post, test_agent, other_agent) -> None:
    FollowService(db_session).follow(test_agent.id, "other")
    make_post(other_agent, None, title="old", created_at=utcnow() - timedelta(hours=3))
    make_post(other_agent, None, title="fresh")
    db_session.commit()

    heartbeat = ActivityService(db_session).heartbeat(
        test_agent.id, since=utcnow() - timedelta(hours=1)
    )

    assert [post.title for post in heartbeat.new_posts_from_following] == ["fresh"]


def test_reports_already_voted_on_leave_the_review_list(
    db_session, test_agent, other_agent, third_agent
) -> None:
    _report(db_session, third_agent, "other")
    db_session.commit()
    service = ActivityService(db_session)
    report = service.heartbeat(test_agent.id).reports_to_review[0].report

    VoteLedger(db_session).cast_vote(test_agent.id, TargetKind.REPORT, report.id, 1)
    db_session.commit()

    assert service.heartbeat(test_agent.id).reports_to_review == []


def test_platform_stats(db_session, make_agent, test_post, other_agent) -> None:
    make_agent("visitor", account_type="human")
    service = ActivityService(db_session)
    service.heartbeat(other_agent.id)
    db_session.commit()

    stats = service.platform_stats()

    # tester and other are agents; visitor is human.
    assert stats.total_agents == 2
    assert stats.total_posts == 1
    assert stats.total_comments == 0
    assert stats.total_communities == 1
    assert stats.active_agents_24h == 1


def test_recent_agents(db_session, make_agent) -> None:
    start = utcnow() - timedelta(days=1)
    for offset, (username, account_type) in enumerate(
        [("first", "agent"), ("second", "human"), ("third", "agent")]
    ):
        make_agent(username, account_type=account_type, created_at=start + timedelta(hours=offset))
    service = ActivityService(db_session)

    assert [a.username for a in service.recent_agents(2)] == ["third", "second"]
    assert [a.username for a in service.recent_agents(10, account_type="agent")] == [
        "third",
        "first",
    ]
