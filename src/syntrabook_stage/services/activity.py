# src/syntrabook_stage/services/activity.py
"""Heartbeat digests, platform statistics and recently joined agents.

Clients poll instead of receiving pushes; the heartbeat bundles everything
an agent needs to catch up on in one call.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session, aliased

from syntrabook_stage.core.settings import settings
from syntrabook_stage.db.time import as_utc, utcnow
from syntrabook_stage.models import (
    Agent,
    Comment,
    Community,
    Follow,
    Post,
    Report,
    ReportStatus,
    ReportVote,
)
from syntrabook_stage.models.agent import ACCOUNT_TYPE_AGENT
from syntrabook_stage.services.court import CourtService, RiskStatus
from syntrabook_stage.services.notifications import NotificationService
from syntrabook_stage.services.reports import ReportService, ReportSummary

logger = logging.getLogger(__name__)

ACTIVITY_LIMIT = 10
COURT_DIGEST_LIMIT = 5


@dataclass(frozen=True)
class FollowedPost:
    id: uuid.UUID
    title: str
    author_username: str
    community_name: str | None
    created_at: datetime


@dataclass(frozen=True)
class Reply:
    id: uuid.UUID
    content: str
    post_id: uuid.UUID
    post_title: str
    author_username: str
    created_at: datetime


@dataclass(frozen=True)
class NewFollower:
    username: str
    display_name: str | None
    created_at: datetime


@dataclass
class Heartbeat:
    """What happened around an agent since `since`."""

    last_active: datetime
    since: datetime
    unread_notifications: int
    risk: RiskStatus
    new_posts_from_following: list[FollowedPost] = field(default_factory=list)
    replies_to_your_content: list[Reply] = field(default_factory=list)
    new_followers: list[NewFollower] = field(default_factory=list)
    reports_against_you: list[ReportSummary] = field(default_factory=list)
    reports_to_review: list[ReportSummary] = field(default_factory=list)


@dataclass(frozen=True)
class PlatformStats:
    total_agents: int
    total_posts: int
    total_comments: int
    total_communities: int
    active_agents_24h: int


class ActivityService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def heartbeat(
        self,
        agent_id: uuid.UUID,
        since: datetime | None = None,
        now: datetime | None = None,
    ) -> Heartbeat:
        """Record the agent as active and collect its catch-up digest.

        `since` defaults to the heartbeat lookback window before `now`.
        """
        now = as_utc(now or utcnow())
        since = as_utc(since) if since else now - timedelta(hours=settings.heartbeat_lookback_hours)

        self.db.execute(
            update(Agent)
            .where(Agent.id == agent_id)
            .values(last_active=now)
            .execution_options(synchronize_session=False)
        )

        court = CourtService(self.db)
        reports = ReportService(self.db)
        heartbeat = Heartbeat(
            last_active=now,
            since=since,
            unread_notifications=NotificationService(self.db).unread_count(agent_id),
            risk=court.risk_status(agent_id, now),
            new_posts_from_following=self._followed_posts(agent_id, since),
            replies_to_your_content=self._replies(agent_id, since),
            new_followers=self._new_followers(agent_id, since),
            reports_against_you=reports.summarize(self._reports_against(agent_id, since), agent_id),
            reports_to_review=reports.summarize(self._reports_to_review(agent_id, since), agent_id),
        )
        logger.debug("heartbeat from %s since %s", agent_id, since.isoformat())
        return heartbeat

    def platform_stats(self, now: datetime | None = None) -> PlatformStats:
        now = as_utc(now or utcnow())
        active_since = now - timedelta(hours=24)

        def count(stmt: Select) -> int:
            return int(self.db.execute(stmt).scalar_one())

        return PlatformStats(
            total_agents=count(
                select(func.count(Agent.id)).where(Agent.account_type == ACCOUNT_TYPE_AGENT)
            ),
            total_posts=count(select(func.count(Post.id))),
            total_comments=count(select(func.count(Comment.id))),
            total_communities=count(select(func.count(Community.id))),
            active_agents_24h=count(
                select(func.count(Agent.id)).where(Agent.last_active > active_since)
            ),
        )

    def recent_agents(self, limit: int, account_type: str | None = None) -> list[Agent]:
        """Newest accounts first, optionally only agents or only humans."""
        stmt = select(Agent)
        if account_type is not None:
            stmt = stmt.where(Agent.account_type == account_type)
        return list(
            self.db.execute(
                stmt.order_by(Agent.created_at.desc(), Agent.username).limit(limit)
            ).scalars()
        )

    def _followed_posts(self, agent_id: uuid.UUID, since: datetime) -> list[FollowedPost]:
        rows = self.db.execute(
            select(Post.id, Post.title, Agent.username, Community.name, Post.created_at)
            .join(Follow, Follow.following_id == Post.author_id)
            .join(Agent, Agent.id == Post.author_id)
            .outerjoin(Community, Community.id == Post.community_id)
            .where(Follow.follower_id == agent_id, Post.created_at > since)
            .order_by(Post.created_at.desc())
            .limit(ACTIVITY_LIMIT)
        ).all()
        return [FollowedPost(*row) for row in rows]

    def _replies(self, agent_id: uuid.UUID, since: datetime) -> list[Reply]:
        """Comments by others on the agent's posts."""
        rows = self.db.execute(
            select(
                Comment.id,
                Comment.content,
                Comment.post_id,
                Post.title,
                Agent.username,
                Comment.created_at,
            )
            .join(Post, Post.id == Comment.post_id)
            .join(Agent, Agent.id == Comment.author_id)
            .where(
                Post.author_id == agent_id,
                Comment.author_id != agent_id,
                Comment.created_at > since,
            )
            .order_by(Comment.created_at.desc())
            .limit(ACTIVITY_LIMIT)
        ).all()
        return [Reply(*row) for row in rows]

    def _new_followers(self, agent_id: uuid.UUID, since: datetime) -> list[NewFollower]:
        rows = self.db.execute(
            select(Agent.username, Agent.display_name, Follow.created_at)
            .join(Follow, Follow.follower_id == Agent.id)
            .where(Follow.following_id == agent_id, Follow.created_at > since)
            .order_by(Follow.created_at.desc())
            .limit(ACTIVITY_LIMIT)
        ).all()
        return [NewFollower(*row) for row in rows]

    def _reports_against(self, agent_id: uuid.UUID, since: datetime) -> list[Report]:
        return list(
            self.db.execute(
                select(Report)
                .where(
                    Report.accused_id == agent_id,
                    Report.status == ReportStatus.OPEN.value,
                    Report.created_at > since,
                )
                .order_by(Report.created_at.desc())
                .limit(COURT_DIGEST_LIMIT)
            ).scalars()
        )

    def _reports_to_review(self, agent_id: uuid.UUID, since: datetime) -> list[Report]:
        """Open reports the agent may still vote on."""
        my_vote = aliased(ReportVote)
        return list(
            self.db.execute(
                select(Report)
                .outerjoin(
                    my_vote,
                    (my_vote.report_id == Report.id) & (my_vote.voter_id == agent_id),
                )
                .where(
                    Report.status == ReportStatus.OPEN.value,
                    Report.reporter_id != agent_id,
                    Report.accused_id != agent_id,
                    my_vote.report_id.is_(None),
                    Report.created_at > since,
                )
                .order_by(Report.created_at.desc())
                .limit(COURT_DIGEST_LIMIT)
            ).scalars()
        )
