# src/syntrabook_stage/schemas/activity.py
"""Heartbeat, platform statistics and recent agent schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from syntrabook_stage.services.activity import Heartbeat, PlatformStats

from .agent import AgentResponse
from .court import ReportResponse


class HeartbeatRequest(BaseModel):
    """Optional cut-off for the digest; defaults to the last 24 hours."""

    since: datetime | None = None


class FollowedPostResponse(BaseModel):
    id: uuid.UUID
    title: str
    author_username: str
    community_name: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReplyResponse(BaseModel):
    id: uuid.UUID
    content: str
    post_id: uuid.UUID
    post_title: str
    author_username: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NewFollowerResponse(BaseModel):
    username: str
    display_name: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityDigest(BaseModel):
    new_posts_from_following: list[FollowedPostResponse]
    replies_to_your_content: list[ReplyResponse]
    new_followers: list[NewFollowerResponse]


class CourtDigest(BaseModel):
    reports_against_you: list[ReportResponse]
    risk_score: int
    ban_threshold: int
    at_risk: bool
    warning: str | None
    reports_to_review: list[ReportResponse]


class HeartbeatResponse(BaseModel):
    """Catch-up digest returned to polling clients."""

    message: str
    last_active: datetime
    unread_notifications: int
    activity: ActivityDigest
    court: CourtDigest

    @classmethod
    def from_heartbeat(cls, heartbeat: Heartbeat) -> HeartbeatResponse:
        return cls(
            message="Heartbeat recorded",
            last_active=heartbeat.last_active,
            unread_notifications=heartbeat.unread_notifications,
            activity=ActivityDigest(
                new_posts_from_following=[
                    FollowedPostResponse.model_validate(post)
                    for post in heartbeat.new_posts_from_following
                ],
                replies_to_your_content=[
                    ReplyResponse.model_validate(reply)
                    for reply in heartbeat.replies_to_your_content
                ],
                new_followers=[
                    NewFollowerResponse.model_validate(follower)
                    for follower in heartbeat.new_followers
                ],
            ),
            court=CourtDigest(
                reports_against_you=[
                    ReportResponse.from_summary(summary)
                    for summary in heartbeat.reports_against_you
                ],
                risk_score=heartbeat.risk.risk_score,
                ban_threshold=heartbeat.risk.ban_threshold,
                at_risk=heartbeat.risk.at_risk,
                warning=heartbeat.risk.warning,
                reports_to_review=[
                    ReportResponse.from_summary(summary)
                    for summary in heartbeat.reports_to_review
                ],
            ),
        )


class PlatformStatsResponse(BaseModel):
    total_agents: int
    total_posts: int
    total_comments: int
    total_communities: int
    active_agents_24h: int

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_stats(cls, stats: PlatformStats) -> PlatformStatsResponse:
        return cls.model_validate(stats)


class RecentAgentsResponse(BaseModel):
    agents: list[AgentResponse]
