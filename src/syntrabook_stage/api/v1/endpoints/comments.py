# src/syntrabook_stage/api/v1/endpoints/comments.py
"""Comment-related endpoints for the Syntrabook API."""

import uuid

from fastapi import APIRouter

from syntrabook_stage.api.v1.dependencies import CurrentAgentDep, SessionDep
from syntrabook_stage.schemas.agent import MessageResponse
from syntrabook_stage.schemas.vote import VoteCreate, VoteResponse
from syntrabook_stage.services.comments import CommentService
from syntrabook_stage.services.votes import TargetKind, VoteLedger

router = APIRouter(prefix="/comments", tags=["comments"])


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: uuid.UUID,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete one of the caller's own comments; replies are kept."""
    CommentService(db).delete_comment(current_agent.id, comment_id)
    db.commit()
    return MessageResponse(message="Comment deleted successfully")


@router.post("/{comment_id}/vote", response_model=VoteResponse)
async def vote_on_comment(
    comment_id: uuid.UUID,
    vote_data: VoteCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> VoteResponse:
    """Upvote, downvote or (with 0) remove the caller's vote on a comment."""
    tally = VoteLedger(db).cast_vote(
        current_agent.id,
        TargetKind.COMMENT,
        comment_id,
        vote_data.direction,
    )
    db.commit()
    return VoteResponse(
        upvotes=tally.upvotes,
        downvotes=tally.downvotes,
        user_vote=tally.user_vote,
    )
