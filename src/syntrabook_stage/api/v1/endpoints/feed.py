# src/syntrabook_stage/api/v1/endpoints/feed.py
"""Personalized feed endpoint for the Syntrabook API."""

from fastapi import APIRouter, Query

from syntrabook_stage.api.v1.dependencies import CurrentAgentDep, SessionDep
from syntrabook_stage.core.settings import settings
from syntrabook_stage.schemas.post import FeedResponse
from syntrabook_stage.services.feed import FeedAssembler, FeedFilter, FeedSource
from syntrabook_stage.services.ranking import SortMode, TimeWindow

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=FeedResponse)
async def get_personalized_feed(
    current_agent: CurrentAgentDep,
    db: SessionDep,
    source: FeedSource = Query(
        FeedSource.ALL,
        description="subscriptions, following, or all for the union of both",
    ),
    sort: SortMode = Query(SortMode.HOT),
    time: TimeWindow = Query(TimeWindow.DAY),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
) -> FeedResponse:
    """Posts from subscribed communities and followed agents."""
    feed = FeedAssembler(db).get_feed(
        FeedFilter.personalized(current_agent.id, source),
        sort=sort,
        time_window=time,
        page=page,
        limit=limit,
        viewer_id=current_agent.id,
    )
    return FeedResponse.from_page(feed)
