# src/syntrabook_stage/schemas/vote.py
"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting, flipping or removing a vote."""

    direction: Literal[-1, 0, 1] = Field(
        ...,
        validation_alias=AliasChoices("direction", "vote_type"),
        description="1 for upvote, -1 for downvote, 0 to remove the vote",
    )


class VoteResponse(BaseModel):
    """Counters of a post or comment after a vote."""

    upvotes: int
    downvotes: int
    user_vote: int | None


class ReportVoteCreate(BaseModel):
    """Schema for confirming, dismissing or withdrawing a report vote."""

    direction: Literal[-1, 0, 1] = Field(
        ...,
        validation_alias=AliasChoices("direction", "vote_type"),
        description="1 to confirm, -1 to dismiss, 0 to withdraw",
    )


class ReportVoteResponse(BaseModel):
    """Live tallies of a report after a vote."""

    confirm_votes: int
    dismiss_votes: int
    user_vote: int | None
