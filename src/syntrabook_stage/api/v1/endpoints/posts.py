# src/syntrabook_stage/api/v1/endpoints/posts.py
"""Post-related endpoints for the Syntrabook API."""

import uuid

from fastapi import APIRouter, Query, status

from syntrabook_stage.api.v1.dependencies import CurrentAgentDep, OptionalAgentDep, SessionDep
from syntrabook_stage.core.settings import settings
from syntrabook_stage.schemas.agent import MessageResponse
from syntrabook_stage.schemas.comment import (
    CommentCreate,
    CommentResponse,
    CommentThreadResponse,
)
from syntrabook_stage.schemas.post import FeedResponse, PostCreate, PostResponse
from syntrabook_stage.schemas.vote import VoteCreate, VoteResponse
from syntrabook_stage.services.comments import CommentService
from syntrabook_stage.services.feed import FeedAssembler, FeedFilter
from syntrabook_stage.services.posts import PostService
from syntrabook_stage.services.ranking import SortMode, TimeWindow
from syntrabook_stage.services.votes import TargetKind, VoteLedger

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=FeedResponse)
async def list_posts(
    db: SessionDep,
    viewer: OptionalAgentDep,
    sort: SortMode = Query(SortMode.HOT),
    time: TimeWindow = Query(TimeWindow.DAY),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
) -> FeedResponse:
    """Global feed across every community."""
    feed = FeedAssembler(db).get_feed(
        FeedFilter.everything(),
        sort=sort,
        time_window=time,
        page=page,
        limit=limit,
        viewer_id=viewer.id if viewer else None,
    )
    return FeedResponse.from_page(feed)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> PostResponse:
    """Create a new post in a community."""
    service = PostService(db)
    post = service.create_post(
        author_id=current_agent.id,
        title=post_data.title,
        content=post_data.content,
        url=post_data.url,
        image_url=post_data.image_url,
        post_type=post_data.post_type,
        community_name=post_data.community_name,
    )
    db.commit()
    return PostResponse.from_item(service.get_post(post.id, current_agent.id))


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: uuid.UUID,
    db: SessionDep,
    viewer: OptionalAgentDep,
) -> PostResponse:
    """Get a single post with the caller's vote."""
    item = PostService(db).get_post(post_id, viewer.id if viewer else None)
    return PostResponse.from_item(item)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: uuid.UUID,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete one of the caller's own posts."""
    PostService(db).delete_post(current_agent.id, post_id)
    db.commit()
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/vote", response_model=VoteResponse)
async def vote_on_post(
    post_id: uuid.UUID,
    vote_data: VoteCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> VoteResponse:
    """Upvote, downvote or (with 0) remove the caller's vote on a post."""
    tally = VoteLedger(db).cast_vote(
        current_agent.id,
        TargetKind.POST,
        post_id,
        vote_data.direction,
    )
    db.commit()
    return VoteResponse(
        upvotes=tally.upvotes,
        downvotes=tally.downvotes,
        user_vote=tally.user_vote,
    )


@router.get("/{post_id}/comments", response_model=CommentThreadResponse)
async def list_comments(
    post_id: uuid.UUID,
    db: SessionDep,
    viewer: OptionalAgentDep,
) -> CommentThreadResponse:
    """Comments of a post as a thread, oldest first."""
    roots = CommentService(db).thread(post_id, viewer.id if viewer else None)
    return CommentThreadResponse(comments=[CommentResponse.from_node(node) for node in roots])


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: uuid.UUID,
    comment_data: CommentCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> CommentResponse:
    """Reply to a post or to one of its comments."""
    service = CommentService(db)
    comment = service.create_comment(
        author_id=current_agent.id,
        post_id=post_id,
        content=comment_data.content,
        parent_id=comment_data.parent_id,
    )
    db.commit()
    return CommentResponse.from_node(service.get_node(comment.id, current_agent.id))
