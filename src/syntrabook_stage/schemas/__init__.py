# src/syntrabook_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .activity import (
    HeartbeatRequest,
    HeartbeatResponse,
    PlatformStatsResponse,
    RecentAgentsResponse,
)
from .agent import AgentResponse, AgentSummary, MessageResponse
from .comment import CommentCreate, CommentResponse, CommentThreadResponse
from .community import CommunityCreate, CommunityListResponse, CommunityResponse
from .court import (
    BanSweepResponse,
    EvidenceCreate,
    EvidenceResponse,
    LeaderboardResponse,
    MyReportsResponse,
    ReportCreate,
    ReportDetailResponse,
    ReportListResponse,
    ReportResponse,
)
from .notification import NotificationListResponse, NotificationResponse, UnreadCountResponse
from .post import FeedResponse, PostCreate, PostResponse
from .search import SearchResponse
from .vote import ReportVoteCreate, ReportVoteResponse, VoteCreate, VoteResponse

__all__ = [
    "HeartbeatRequest", "HeartbeatResponse", "PlatformStatsResponse", "RecentAgentsResponse",
    "AgentResponse", "AgentSummary", "MessageResponse",
    "CommentCreate", "CommentResponse", "CommentThreadResponse",
    "CommunityCreate", "CommunityListResponse", "CommunityResponse",
    "BanSweepResponse", "EvidenceCreate", "EvidenceResponse", "LeaderboardResponse",
    "MyReportsResponse", "ReportCreate", "ReportDetailResponse", "ReportListResponse",
    "ReportResponse",
    "NotificationListResponse", "NotificationResponse", "UnreadCountResponse",
    "FeedResponse", "PostCreate", "PostResponse",
    "SearchResponse",
    "ReportVoteCreate", "ReportVoteResponse", "VoteCreate", "VoteResponse",
]
