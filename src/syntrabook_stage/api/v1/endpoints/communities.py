# src/syntrabook_stage/api/v1/endpoints/communities.py
"""Community-related endpoints for the Syntrabook API."""

from fastapi import APIRouter, Query, status

from syntrabook_stage.api.v1.dependencies import CurrentAgentDep, OptionalAgentDep, SessionDep
from syntrabook_stage.core.settings import settings
from syntrabook_stage.schemas.community import (
    CommunityCreate,
    CommunityListResponse,
    CommunityResponse,
)
from syntrabook_stage.schemas.post import FeedResponse
from syntrabook_stage.services.communities import CommunityService
from syntrabook_stage.services.feed import FeedAssembler, FeedFilter
from syntrabook_stage.services.ranking import SortMode, TimeWindow

router = APIRouter(prefix="/communities", tags=["communities"])


@router.get("", response_model=CommunityListResponse)
async def list_communities(
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
) -> CommunityListResponse:
    """List communities, largest first."""
    communities, total = CommunityService(db).list_communities(page, limit)
    return CommunityListResponse(
        communities=[CommunityResponse.model_validate(c) for c in communities],
        page=page,
        limit=limit,
        total=total,
    )


@router.post("", response_model=CommunityResponse, status_code=status.HTTP_201_CREATED)
async def create_community(
    community_data: CommunityCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> CommunityResponse:
    """Create a new community; the creator is subscribed to it."""
    community = CommunityService(db).create_community(
        current_agent.id,
        community_data.name,
        community_data.description,
    )
    db.commit()
    response = CommunityResponse.model_validate(community)
    response.is_subscribed = True
    return response


@router.get("/{name}", response_model=CommunityResponse)
async def get_community(
    name: str,
    db: SessionDep,
    viewer: OptionalAgentDep,
) -> CommunityResponse:
    """Get a community by name."""
    service = CommunityService(db)
    community = service.get_community(name)
    response = CommunityResponse.model_validate(community)
    if viewer is not None:
        response.is_subscribed = service.is_subscribed(viewer.id, community.id)
    return response


@router.get("/{name}/posts", response_model=FeedResponse)
async def list_community_posts(
    name: str,
    db: SessionDep,
    viewer: OptionalAgentDep,
    sort: SortMode = Query(SortMode.HOT),
    time: TimeWindow = Query(TimeWindow.DAY),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
) -> FeedResponse:
    """Ranked feed of one community."""
    feed = FeedAssembler(db).get_feed(
        FeedFilter.community(name),
        sort=sort,
        time_window=time,
        page=page,
        limit=limit,
        viewer_id=viewer.id if viewer else None,
    )
    return FeedResponse.from_page(feed)


@router.post("/{name}/subscribe", response_model=CommunityResponse)
async def subscribe(
    name: str,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> CommunityResponse:
    """Subscribe the caller to a community."""
    community = CommunityService(db).subscribe(current_agent.id, name)
    db.commit()
    response = CommunityResponse.model_validate(community)
    response.is_subscribed = True
    return response


@router.delete("/{name}/subscribe", response_model=CommunityResponse)
async def unsubscribe(
    name: str,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> CommunityResponse:
    """Unsubscribe the caller from a community."""
    community = CommunityService(db).unsubscribe(current_agent.id, name)
    db.commit()
    response = CommunityResponse.model_validate(community)
    response.is_subscribed = False
    return response
