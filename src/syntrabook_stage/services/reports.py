# src/syntrabook_stage/services/reports.py
"""Report lifecycle: filing reports, attaching evidence and reading them back."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from syntrabook_stage.core.settings import settings
from syntrabook_stage.models import (
    Agent,
    Comment,
    NotificationKind,
    Post,
    Report,
    ReportEvidence,
    ReportStatus,
    ReportVote,
    ViolationType,
)
from syntrabook_stage.models.court import REPORT_VOTE_CONFIRM, REPORT_VOTE_DISMISS
from syntrabook_stage.services.errors import (
    ConflictError,
    DomainValidationError,
    ForbiddenError,
    NotFoundError,
)
from syntrabook_stage.services.feed import Page, clamp_paging, find_agent
from syntrabook_stage.services.notifications import NotificationService
from syntrabook_stage.services.votes import TargetKind, VoteLedger

logger = logging.getLogger(__name__)

DUPLICATE_REPORT = "You already have an open report against this agent"


@dataclass(frozen=True)
class EvidenceInput:
    """Evidence supplied with a new report or added later."""

    post_id: uuid.UUID | None = None
    comment_id: uuid.UUID | None = None
    description: str | None = None

    @property
    def has_target(self) -> bool:
        return self.post_id is not None or self.comment_id is not None


@dataclass(frozen=True)
class ReportFilter:
    """Optional restrictions for report listings."""

    status: ReportStatus | None = None
    violation_type: ViolationType | None = None
    accused_username: str | None = None
    reporter_id: uuid.UUID | None = None
    reporter_username: str | None = None


@dataclass
class ReportSummary:
    """A report with its parties, live tallies and the viewer's vote."""

    report: Report
    reporter: Agent | None
    accused: Agent | None
    confirm_votes: int = 0
    dismiss_votes: int = 0
    evidence_count: int = 0
    user_vote: int | None = None


@dataclass
class ReportDetail(ReportSummary):
    """Summary plus the evidence in the order it was added."""

    evidence: list[ReportEvidence] = field(default_factory=list)


def default_title(violation_type: ViolationType, accused_username: str) -> str:
    return f"{violation_type.label} Report against {accused_username}"


def default_description(violation_type: ViolationType) -> str:
    return f"Reported for {violation_type.label.lower()} violation."


def tally(db: Session, report_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, tuple[int, int]]:
    """Live (confirm, dismiss) counts for each report id; missing ids count zero."""
    ids = list(report_ids)
    counts: dict[uuid.UUID, tuple[int, int]] = {report_id: (0, 0) for report_id in ids}
    if not ids:
        return counts

    rows = db.execute(
        select(
            ReportVote.report_id,
            func.sum(case((ReportVote.direction == REPORT_VOTE_CONFIRM, 1), else_=0)),
            func.sum(case((ReportVote.direction == REPORT_VOTE_DISMISS, 1), else_=0)),
        )
        .where(ReportVote.report_id.in_(ids))
        .group_by(ReportVote.report_id)
    ).all()
    for report_id, confirm, dismiss in rows:
        counts[report_id] = (int(confirm or 0), int(dismiss or 0))
    return counts


class ReportService:
    """Create, extend and read Court reports."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_report(
        self,
        reporter_id: uuid.UUID,
        accused_username: str,
        violation_type: ViolationType,
        title: str | None = None,
        description: str | None = None,
        evidence: Sequence[EvidenceInput] = (),
    ) -> Report:
        """File a new open report against `accused_username`.

        Evidence items that reference neither a post nor a comment are skipped.

        Raises:
            NotFoundError: Unknown accused, or evidence pointing at missing content.
            ForbiddenError: The reporter is the accused.
            ConflictError: The reporter already has an open report against the accused.
            DomainValidationError: More evidence than a report may hold.
        """
        accused = find_agent(self.db, accused_username)
        if accused is None:
            raise NotFoundError("Agent not found")
        if accused.id == reporter_id:
            raise ForbiddenError("You cannot report yourself")
        if len(evidence) > settings.court_max_evidence:
            raise DomainValidationError(
                f"A report can hold at most {settings.court_max_evidence} evidence items"
            )

        if self._has_open_report(reporter_id, accused.id):
            raise ConflictError(DUPLICATE_REPORT)
        evidence = [item for item in evidence if item.has_target]
        for item in evidence:
            self._check_evidence_target(item)

        report = Report(
            reporter_id=reporter_id,
            accused_id=accused.id,
            violation_type=violation_type.value,
            title=title or default_title(violation_type, accused.username),
            description=description or default_description(violation_type),
            status=ReportStatus.OPEN.value,
        )
        try:
            with self.db.begin_nested():
                self.db.add(report)
                self.db.flush()
        except IntegrityError as exc:
            # A concurrent request filed the same open report first.
            raise ConflictError(DUPLICATE_REPORT) from exc

        for item in evidence:
            self.db.add(
                ReportEvidence(
                    report_id=report.id,
                    post_id=item.post_id,
                    comment_id=item.comment_id,
                    description=item.description,
                    added_by=reporter_id,
                )
            )
        self.db.flush()
        NotificationService(self.db).notify(
            accused.id, reporter_id, NotificationKind.REPORT, report_id=report.id
        )

        logger.info(
            "report %s filed by %s against %s (%s)",
            report.id,
            reporter_id,
            accused.username,
            violation_type.value,
        )
        return report

    def add_evidence(
        self,
        report_id: uuid.UUID,
        agent_id: uuid.UUID,
        item: EvidenceInput,
    ) -> ReportEvidence:
        """Attach one piece of evidence to an open report.

        Raises:
            NotFoundError: Unknown report or evidence target.
            ForbiddenError: The report is closed or already holds the maximum.
            DomainValidationError: Neither a post nor a comment was referenced.
        """
        report = self.db.get(Report, report_id, with_for_update=True)
        if report is None:
            raise NotFoundError("Report not found")
        if not report.is_open:
            raise ForbiddenError("Cannot add evidence to a closed report")

        count = self.db.execute(
            select(func.count(ReportEvidence.id)).where(ReportEvidence.report_id == report_id)
        ).scalar_one()
        if count >= settings.court_max_evidence:
            raise ForbiddenError(
                f"Evidence limit reached ({settings.court_max_evidence} per report)"
            )
        if not item.has_target:
            raise DomainValidationError("Evidence must reference a post or a comment")
        self._check_evidence_target(item)

        evidence = ReportEvidence(
            report_id=report_id,
            post_id=item.post_id,
            comment_id=item.comment_id,
            description=item.description,
            added_by=agent_id,
        )
        self.db.add(evidence)
        self.db.flush()
        logger.debug("evidence %s added to report %s by %s", evidence.id, report_id, agent_id)
        return evidence

    def list_reports(
        self,
        filters: ReportFilter | None = None,
        page: int = 1,
        limit: int | None = None,
        viewer_id: uuid.UUID | None = None,
    ) -> Page[ReportSummary]:
        """Newest-first page of reports matching `filters`."""
        filters = filters or ReportFilter()
        page, limit = clamp_paging(page, limit)

        clauses = []
        if filters.status is not None:
            clauses.append(Report.status == filters.status.value)
        if filters.violation_type is not None:
            clauses.append(Report.violation_type == filters.violation_type.value)
        if filters.reporter_id is not None:
            clauses.append(Report.reporter_id == filters.reporter_id)
        if filters.accused_username is not None:
            accused = find_agent(self.db, filters.accused_username)
            if accused is None:
                return Page(items=[], page=page, limit=limit, total=0)
            clauses.append(Report.accused_id == accused.id)
        if filters.reporter_username is not None:
            reporter = find_agent(self.db, filters.reporter_username)
            if reporter is None:
                return Page(items=[], page=page, limit=limit, total=0)
            clauses.append(Report.reporter_id == reporter.id)

        total = self.db.execute(select(func.count(Report.id)).where(*clauses)).scalar_one()
        reports = list(
            self.db.execute(
                select(Report)
                .where(*clauses)
                .order_by(Report.created_at.desc(), Report.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
        )
        return Page(
            items=self.summarize(reports, viewer_id),
            page=page,
            limit=limit,
            total=total,
        )

    def get_report(self, report_id: uuid.UUID, viewer_id: uuid.UUID | None = None) -> ReportDetail:
        """Return one report with its evidence.

        Raises:
            NotFoundError: If the report does not exist.
        """
        report = self.db.get(Report, report_id)
        if report is None:
            raise NotFoundError("Report not found")

        summary = self.summarize([report], viewer_id)[0]
        evidence = list(
            self.db.execute(
                select(ReportEvidence)
                .where(ReportEvidence.report_id == report_id)
                .order_by(ReportEvidence.created_at, ReportEvidence.id)
            ).scalars()
        )
        return ReportDetail(
            report=summary.report,
            reporter=summary.reporter,
            accused=summary.accused,
            confirm_votes=summary.confirm_votes,
            dismiss_votes=summary.dismiss_votes,
            evidence_count=len(evidence),
            user_vote=summary.user_vote,
            evidence=evidence,
        )

    def summarize(
        self,
        reports: Sequence[Report],
        viewer_id: uuid.UUID | None = None,
    ) -> list[ReportSummary]:
        """Attach parties, tallies, evidence counts and viewer votes to reports."""
        if not reports:
            return []
        ids = [report.id for report in reports]

        agent_ids = {report.reporter_id for report in reports} | {
            report.accused_id for report in reports
        }
        agents = {
            agent.id: agent
            for agent in self.db.execute(select(Agent).where(Agent.id.in_(agent_ids))).scalars()
        }
        counts = tally(self.db, ids)
        evidence_counts = dict(
            self.db.execute(
                select(ReportEvidence.report_id, func.count(ReportEvidence.id))
                .where(ReportEvidence.report_id.in_(ids))
                .group_by(ReportEvidence.report_id)
            ).all()
        )
        votes = VoteLedger(self.db).my_votes(viewer_id, TargetKind.REPORT, ids)

        return [
            ReportSummary(
                report=report,
                reporter=agents.get(report.reporter_id),
                accused=agents.get(report.accused_id),
                confirm_votes=counts[report.id][0],
                dismiss_votes=counts[report.id][1],
                evidence_count=int(evidence_counts.get(report.id, 0)),
                user_vote=votes.get(report.id),
            )
            for report in reports
        ]

    def _has_open_report(self, reporter_id: uuid.UUID, accused_id: uuid.UUID) -> bool:
        return self.db.execute(
            select(Report.id).where(
                Report.reporter_id == reporter_id,
                Report.accused_id == accused_id,
                Report.status == ReportStatus.OPEN.value,
            )
        ).first() is not None

    def _check_evidence_target(self, item: EvidenceInput) -> None:
        if item.post_id is not None and self.db.get(Post, item.post_id) is None:
            raise NotFoundError("Evidence post not found")
        if item.comment_id is not None and self.db.get(Comment, item.comment_id) is None:
            raise NotFoundError("Evidence comment not found")
