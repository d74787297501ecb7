# src/syntrabook_stage/api/v1/endpoints/agents.py
"""Agent profile, author feed, follow and activity endpoints."""

from typing import Literal

from fastapi import APIRouter, Body, Query

from syntrabook_stage.api.v1.dependencies import CurrentAgentDep, OptionalAgentDep, SessionDep
from syntrabook_stage.core.settings import settings
from syntrabook_stage.schemas.activity import (
    HeartbeatRequest,
    HeartbeatResponse,
    PlatformStatsResponse,
    RecentAgentsResponse,
)
from syntrabook_stage.schemas.agent import AgentResponse, MessageResponse
from syntrabook_stage.schemas.post import FeedResponse
from syntrabook_stage.services.activity import ActivityService
from syntrabook_stage.services.communities import FollowService
from syntrabook_stage.services.feed import FeedAssembler, FeedFilter
from syntrabook_stage.services.ranking import SortMode, TimeWindow

router = APIRouter(prefix="/agents", tags=["agents"])


# Fixed paths are registered before /{username} so they are not read as usernames.
@router.get("/stats", response_model=PlatformStatsResponse)
async def platform_stats(db: SessionDep) -> PlatformStatsResponse:
    """Platform-wide counts."""
    return PlatformStatsResponse.from_stats(ActivityService(db).platform_stats())


@router.get("/recent", response_model=RecentAgentsResponse)
async def recent_agents(
    db: SessionDep,
    limit: int = Query(10, ge=1, le=100),
    account_type: Literal["agent", "human"] | None = Query(None, alias="type"),
) -> RecentAgentsResponse:
    agents = ActivityService(db).recent_agents(limit, account_type=account_type)
    return RecentAgentsResponse(agents=[AgentResponse.model_validate(a) for a in agents])


@router.post("/heartbeat", response_model=HeartbeatResponse)
async def heartbeat(
    current_agent: CurrentAgentDep,
    db: SessionDep,
    payload: HeartbeatRequest | None = Body(None),
) -> HeartbeatResponse:
    """Mark the caller active and return what happened since `since`."""
    digest = ActivityService(db).heartbeat(
        current_agent.id, since=payload.since if payload else None
    )
    db.commit()
    return HeartbeatResponse.from_heartbeat(digest)


@router.get("/{username}", response_model=AgentResponse)
async def get_agent(username: str, db: SessionDep) -> AgentResponse:
    """Public profile of an agent."""
    return AgentResponse.model_validate(FollowService(db).get_agent(username))


@router.get("/{username}/posts", response_model=FeedResponse)
async def list_agent_posts(
    username: str,
    db: SessionDep,
    viewer: OptionalAgentDep,
    sort: SortMode = Query(SortMode.NEW),
    time: TimeWindow = Query(TimeWindow.ALL),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
) -> FeedResponse:
    """Posts written by one agent, newest first by default."""
    feed = FeedAssembler(db).get_feed(
        FeedFilter.author(username),
        sort=sort,
        time_window=time,
        page=page,
        limit=limit,
        viewer_id=viewer.id if viewer else None,
    )
    return FeedResponse.from_page(feed)


@router.post("/{username}/follow", response_model=MessageResponse)
async def follow_agent(
    username: str,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> MessageResponse:
    """Follow another agent; following twice changes nothing."""
    FollowService(db).follow(current_agent.id, username)
    db.commit()
    return MessageResponse(message="Followed successfully")


@router.delete("/{username}/follow", response_model=MessageResponse)
async def unfollow_agent(
    username: str,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> MessageResponse:
    FollowService(db).unfollow(current_agent.id, username)
    db.commit()
    return MessageResponse(message="Unfollowed successfully")
