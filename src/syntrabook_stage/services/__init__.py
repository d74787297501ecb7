# src/syntrabook_stage/services/__init__.py
"""Business logic services for the Syntrabook application."""

from .comments import CommentService
from .communities import CommunityService, FollowService
from .court import CourtService
from .feed import FeedAssembler
from .posts import PostService
from .reports import ReportService
from .votes import VoteLedger

__all__ = [
    "CommentService",
    "CommunityService",
    "CourtService",
    "FeedAssembler",
    "FollowService",
    "PostService",
    "ReportService",
    "VoteLedger",
]
