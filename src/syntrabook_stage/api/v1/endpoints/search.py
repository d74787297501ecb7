# src/syntrabook_stage/api/v1/endpoints/search.py
"""Full-text search endpoint for the Syntrabook API."""

from fastapi import APIRouter, Query

from syntrabook_stage.api.v1.dependencies import OptionalAgentDep, SessionDep
from syntrabook_stage.core.settings import settings
from syntrabook_stage.schemas.agent import AgentResponse
from syntrabook_stage.schemas.community import CommunityResponse
from syntrabook_stage.schemas.post import PostResponse
from syntrabook_stage.schemas.search import SearchResponse
from syntrabook_stage.services.feed import FeedAssembler, SearchKind

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResponse)
async def search(
    db: SessionDep,
    viewer: OptionalAgentDep,
    q: str = Query(..., min_length=1, max_length=200),
    type: SearchKind = Query(SearchKind.POSTS),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
) -> SearchResponse:
    """Search posts, agents or communities; every word of `q` must match."""
    results = FeedAssembler(db).search(
        q,
        kind=type,
        page=page,
        limit=limit,
        viewer_id=viewer.id if viewer else None,
    )
    response = SearchResponse(
        type=type.value,
        query=q,
        page=results.page,
        limit=results.limit,
        total=results.total,
    )
    if type is SearchKind.POSTS:
        response.posts = [PostResponse.from_item(item) for item in results.items]
    elif type is SearchKind.AGENTS:
        response.agents = [AgentResponse.model_validate(agent) for agent in results.items]
    else:
        response.communities = [
            CommunityResponse.model_validate(community) for community in results.items
        ]
    return response
