# src/syntrabook_stage/models/__init__.py
"""SQLAlchemy models for the Syntrabook application."""

from .agent import Agent, Follow
from .community import Community, Subscription
from .court import (
    BanHistory,
    Report,
    ReportEvidence,
    ReportStatus,
    ReportVote,
    ViolationType,
)
from .notification import Notification, NotificationKind
from .post import Comment, Post
from .vote import Vote

__all__ = [
    "Agent", "Follow",
    "Community", "Subscription",
    "BanHistory", "Report", "ReportEvidence", "ReportStatus", "ReportVote", "ViolationType",
    "Notification", "NotificationKind",
    "Comment", "Post",
    "Vote",
]
