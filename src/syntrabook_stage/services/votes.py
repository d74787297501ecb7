# src/syntrabook_stage/services/votes.py
"""Vote ledger for posts, comments and Court reports."""

from __future__ import annotations

import enum
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from syntrabook_stage.models import Comment, Post, Report, ReportVote, Vote
from syntrabook_stage.models.court import REPORT_VOTE_CONFIRM, REPORT_VOTE_DISMISS
from syntrabook_stage.models.vote import VOTE_DOWN, VOTE_UP
from syntrabook_stage.services.errors import (
    DomainValidationError,
    ForbiddenError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

VALID_DIRECTIONS = frozenset({VOTE_UP, VOTE_DOWN, 0})


class TargetKind(str, enum.Enum):
    """Kinds of entity that accumulate directed votes."""

    POST = "post"
    COMMENT = "comment"
    REPORT = "report"


@dataclass(frozen=True)
class VoteTally:
    """Counters of a post or comment after a vote, plus the caller's vote."""

    upvotes: int
    downvotes: int
    user_vote: int | None


@dataclass(frozen=True)
class ReportTally:
    """Live confirm/dismiss counts of a report plus the caller's vote."""

    confirm_votes: int
    dismiss_votes: int
    user_vote: int | None


_COUNTED_MODELS: dict[TargetKind, type[Post] | type[Comment]] = {
    TargetKind.POST: Post,
    TargetKind.COMMENT: Comment,
}


class VoteLedger:
    """Single-vote-per-target ledger.

    Mutations run inside the caller's transaction; the caller commits. Post and
    comment counters are adjusted with SQL-side increments so concurrent voters
    on the same target never lose updates.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def cast_vote(
        self,
        voter_id: uuid.UUID,
        target_kind: TargetKind,
        target_id: uuid.UUID,
        direction: int,
    ) -> VoteTally | ReportTally:
        """Record `direction` (+1, -1, or 0 to remove) for the voter on a target.

        Re-sending the direction already on record is a no-op.

        Raises:
            NotFoundError: If the target does not exist.
            ForbiddenError: For report votes by the reporter or the accused, or
                on reports that are no longer open.
            DomainValidationError: If `direction` is outside {+1, -1, 0}.
        """
        if direction not in VALID_DIRECTIONS:
            raise DomainValidationError("direction must be 1, -1 or 0")

        if target_kind is TargetKind.REPORT:
            return self.cast_report_vote(voter_id, target_id, direction)
        return self._cast_content_vote(voter_id, target_kind, target_id, direction)

    def my_vote(
        self,
        voter_id: uuid.UUID,
        target_kind: TargetKind,
        target_id: uuid.UUID,
    ) -> int | None:
        """Return the voter's direction on one target, or None."""
        return self.my_votes(voter_id, target_kind, [target_id]).get(target_id)

    def my_votes(
        self,
        voter_id: uuid.UUID | None,
        target_kind: TargetKind,
        target_ids: Iterable[uuid.UUID],
    ) -> dict[uuid.UUID, int]:
        """Map target id to the voter's direction for every target they voted on."""
        ids = list(target_ids)
        if voter_id is None or not ids:
            return {}

        if target_kind is TargetKind.REPORT:
            rows = self.db.execute(
                select(ReportVote.report_id, ReportVote.direction).where(
                    ReportVote.voter_id == voter_id,
                    ReportVote.report_id.in_(ids),
                )
            ).all()
            return {row[0]: row[1] for row in rows}

        column = Vote.post_id if target_kind is TargetKind.POST else Vote.comment_id
        rows = self.db.execute(
            select(column, Vote.direction).where(
                Vote.voter_id == voter_id,
                column.in_(ids),
            )
        ).all()
        return {row[0]: row[1] for row in rows}

    def report_tally(self, report_id: uuid.UUID, voter_id: uuid.UUID | None = None) -> ReportTally:
        """Live confirm/dismiss counts of one report."""
        confirm, dismiss = self.db.execute(
            select(
                func.coalesce(
                    func.sum(case((ReportVote.direction == REPORT_VOTE_CONFIRM, 1), else_=0)),
                    0,
                ),
                func.coalesce(
                    func.sum(case((ReportVote.direction == REPORT_VOTE_DISMISS, 1), else_=0)),
                    0,
                ),
            ).where(ReportVote.report_id == report_id)
        ).one()
        user_vote = None
        if voter_id is not None:
            user_vote = self.my_vote(voter_id, TargetKind.REPORT, report_id)
        return ReportTally(
            confirm_votes=int(confirm),
            dismiss_votes=int(dismiss),
            user_vote=user_vote,
        )

    def _cast_content_vote(
        self,
        voter_id: uuid.UUID,
        target_kind: TargetKind,
        target_id: uuid.UUID,
        direction: int,
    ) -> VoteTally:
        model = _COUNTED_MODELS[target_kind]
        target = self.db.get(model, target_id)
        if target is None:
            raise NotFoundError(f"{target_kind.value.capitalize()} not found")

        column = Vote.post_id if target_kind is TargetKind.POST else Vote.comment_id
        existing = self.db.execute(
            select(Vote)
            .where(Vote.voter_id == voter_id, column == target_id)
            .with_for_update()
        ).scalar_one_or_none()

        up_delta = 0
        down_delta = 0

        if direction == 0:
            if existing is not None:
                up_delta, down_delta = _counter_delta(existing.direction, -1)
                self.db.delete(existing)
        elif existing is None:
            self.db.add(
                Vote(
                    voter_id=voter_id,
                    post_id=target_id if target_kind is TargetKind.POST else None,
                    comment_id=target_id if target_kind is TargetKind.COMMENT else None,
                    direction=direction,
                )
            )
            up_delta, down_delta = _counter_delta(direction, 1)
        elif existing.direction != direction:
            old_up, old_down = _counter_delta(existing.direction, -1)
            new_up, new_down = _counter_delta(direction, 1)
            up_delta, down_delta = old_up + new_up, old_down + new_down
            existing.direction = direction

        if up_delta or down_delta:
            self.db.execute(
                update(model)
                .where(model.id == target_id)
                .values(
                    upvotes=model.upvotes + up_delta,
                    downvotes=model.downvotes + down_delta,
                )
                .execution_options(synchronize_session=False)
            )
        self.db.flush()
        self.db.refresh(target)

        logger.debug(
            "vote %s on %s %s by %s (up %+d, down %+d)",
            direction,
            target_kind.value,
            target_id,
            voter_id,
            up_delta,
            down_delta,
        )
        return VoteTally(
            upvotes=target.upvotes,
            downvotes=target.downvotes,
            user_vote=direction or None,
        )

    def cast_report_vote(
        self,
        voter_id: uuid.UUID,
        report_id: uuid.UUID,
        direction: int,
    ) -> ReportTally:
        """Confirm (1), dismiss (-1) or withdraw (0) a vote on an open report."""
        if direction not in VALID_DIRECTIONS:
            raise DomainValidationError("direction must be 1, -1 or 0")
        report = self.db.get(Report, report_id)
        if report is None:
            raise NotFoundError("Report not found")
        if voter_id in (report.reporter_id, report.accused_id):
            raise ForbiddenError("You cannot vote on a report you are involved in")
        if not report.is_open:
            raise ForbiddenError("This report is no longer open for voting")

        existing = self.db.execute(
            select(ReportVote)
            .where(ReportVote.report_id == report_id, ReportVote.voter_id == voter_id)
            .with_for_update()
        ).scalar_one_or_none()

        if direction == 0:
            if existing is not None:
                self.db.delete(existing)
        elif existing is None:
            self.db.add(ReportVote(report_id=report_id, voter_id=voter_id, direction=direction))
        elif existing.direction != direction:
            existing.direction = direction
        self.db.flush()

        logger.debug("report vote %s on %s by %s", direction, report_id, voter_id)
        return self.report_tally(report_id, voter_id)


def _counter_delta(direction: int, sign: int) -> tuple[int, int]:
    """Translate a vote direction into (upvote, downvote) counter deltas."""
    if direction == VOTE_UP:
        return sign, 0
    return 0, sign
