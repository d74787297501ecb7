# src/syntrabook_stage/services/court.py
"""Court tallies, the violation leaderboard, risk scores and the ban sweep."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import Select, case, func, select, update
from sqlalchemy.orm import Session

from syntrabook_stage.core.settings import settings
from syntrabook_stage.db.time import as_utc, utcnow
from syntrabook_stage.models import Agent, BanHistory, Report, ReportStatus, ReportVote
from syntrabook_stage.models.court import REPORT_VOTE_CONFIRM
from syntrabook_stage.services import reports as report_service
from syntrabook_stage.services.reports import ReportService, ReportSummary

logger = logging.getLogger(__name__)

RISK_WARNING = "You are at risk of being banned. Review your recent activity."
BAN_HISTORY_REASON = "Daily ban processing - community vote threshold exceeded"


@dataclass(frozen=True)
class LeaderboardEntry:
    """Open-report totals for one accused agent."""

    accused_id: uuid.UUID
    username: str
    display_name: str | None
    report_count: int
    total_confirm_votes: int


@dataclass(frozen=True)
class RiskStatus:
    """Advisory ban-risk reading for one agent."""

    risk_score: int
    ban_threshold: int
    at_risk: bool
    warning: str | None


@dataclass(frozen=True)
class BannedAgent:
    agent_id: uuid.UUID
    username: str
    confirm_votes: int


@dataclass
class BanSweepResult:
    """Outcome of one ban sweep. Agents whose ban failed are left out."""

    banned_agents: list[BannedAgent] = field(default_factory=list)
    expired_reports_count: int = 0
    processed_at: datetime = field(default_factory=utcnow)


def _confirm_counts() -> Select:
    """Per-report confirm vote counts."""
    return (
        select(
            ReportVote.report_id.label("report_id"),
            func.sum(case((ReportVote.direction == REPORT_VOTE_CONFIRM, 1), else_=0)).label(
                "confirm_votes"
            ),
        )
        .group_by(ReportVote.report_id)
    )


class CourtService:
    """Reads and sweeps the Court.

    Ban decisions are made only by `process_bans`; casting report votes never
    changes a report's status.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def tally(self, report_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, tuple[int, int]]:
        """Live (confirm, dismiss) counts per report."""
        return report_service.tally(self.db, report_ids)

    def leaderboard(
        self,
        limit: int | None = None,
        min_confirm_votes: int = 0,
    ) -> list[LeaderboardEntry]:
        """Non-banned agents ranked by confirm votes summed over their open reports."""
        if limit is None:
            limit = settings.court_leaderboard_size

        counts = _confirm_counts().subquery()
        total_confirm = func.coalesce(func.sum(counts.c.confirm_votes), 0)
        report_count = func.count(Report.id)
        stmt = (
            select(Agent.id, Agent.username, Agent.display_name, report_count, total_confirm)
            .join(Report, Report.accused_id == Agent.id)
            .outerjoin(counts, counts.c.report_id == Report.id)
            .where(Report.status == ReportStatus.OPEN.value, Agent.is_banned.is_(False))
            .group_by(Agent.id, Agent.username, Agent.display_name)
            .order_by(total_confirm.desc(), report_count.desc(), Agent.username)
            .limit(limit)
        )
        if min_confirm_votes > 0:
            stmt = stmt.having(total_confirm >= min_confirm_votes)

        return [
            LeaderboardEntry(
                accused_id=agent_id,
                username=username,
                display_name=display_name,
                report_count=int(reports),
                total_confirm_votes=int(confirms),
            )
            for agent_id, username, display_name, reports, confirms in self.db.execute(stmt).all()
        ]

    def risk_status(self, agent_id: uuid.UUID, now: datetime | None = None) -> RiskStatus:
        """Confirm votes on the agent's open reports filed within the risk window."""
        now = as_utc(now or utcnow())
        since = now - timedelta(hours=settings.court_risk_window_hours)
        risk_score = self.db.execute(
            select(func.count())
            .select_from(ReportVote)
            .join(Report, Report.id == ReportVote.report_id)
            .where(
                Report.accused_id == agent_id,
                Report.status == ReportStatus.OPEN.value,
                Report.created_at > since,
                ReportVote.direction == REPORT_VOTE_CONFIRM,
            )
        ).scalar_one()
        at_risk = risk_score >= settings.court_risk_warning_votes
        return RiskStatus(
            risk_score=int(risk_score),
            ban_threshold=settings.court_ban_threshold,
            at_risk=at_risk,
            warning=RISK_WARNING if at_risk else None,
        )

    def my_reports(
        self,
        agent_id: uuid.UUID,
        viewer_id: uuid.UUID | None = None,
    ) -> list[ReportSummary]:
        """Every report filed against the agent, newest first."""
        reports = list(
            self.db.execute(
                select(Report)
                .where(Report.accused_id == agent_id)
                .order_by(Report.created_at.desc(), Report.id.desc())
            ).scalars()
        )
        return ReportService(self.db).summarize(reports, viewer_id)

    def process_bans(self, now: datetime | None = None) -> BanSweepResult:
        """Ban the worst offenders and expire stale, low-signal reports.

        Up to `court_ban_batch_size` agents whose open reports carry at least
        `court_ban_threshold` confirm votes are banned, one transaction each.
        A failure on one agent is logged and the sweep moves on. Open reports
        older than `court_expiry_days` with fewer than
        `court_expiry_min_confirm_votes` confirm votes are then expired.

        Re-running the sweep is safe: bans only apply to agents not yet banned
        and transitions only apply to reports still open.
        """
        now = as_utc(now or utcnow())
        result = BanSweepResult(processed_at=now)

        violators = self.leaderboard(
            limit=settings.court_ban_batch_size,
            min_confirm_votes=settings.court_ban_threshold,
        )
        for entry in violators:
            try:
                banned = self._ban_agent(entry.accused_id, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                logger.exception("Failed to ban agent %s", entry.username)
                continue
            if not banned:
                logger.info("Agent %s was already banned; skipping", entry.username)
                continue
            logger.warning(
                "Banned agent %s with %d confirm votes",
                entry.username,
                entry.total_confirm_votes,
            )
            result.banned_agents.append(
                BannedAgent(
                    agent_id=entry.accused_id,
                    username=entry.username,
                    confirm_votes=entry.total_confirm_votes,
                )
            )

        result.expired_reports_count = self._expire_stale_reports(now)
        self.db.commit()
        # Bulk updates above bypass the identity map.
        self.db.expire_all()

        logger.info(
            "Ban sweep at %s: %d banned, %d reports expired",
            now.isoformat(),
            len(result.banned_agents),
            result.expired_reports_count,
        )
        return result

    def _ban_agent(self, agent_id: uuid.UUID, now: datetime) -> bool:
        """Ban one agent, confirm its open reports and record the ban.

        Returns False without touching anything when the agent is already banned.
        """
        banned = self.db.execute(
            update(Agent)
            .where(Agent.id == agent_id, Agent.is_banned.is_(False))
            .values(is_banned=True, banned_at=now, ban_reason=settings.court_ban_reason)
            .execution_options(synchronize_session=False)
        )
        if banned.rowcount == 0:
            return False

        counts = _confirm_counts().subquery()
        leading_report_id = self.db.execute(
            select(Report.id)
            .outerjoin(counts, counts.c.report_id == Report.id)
            .where(Report.accused_id == agent_id, Report.status == ReportStatus.OPEN.value)
            .order_by(
                func.coalesce(counts.c.confirm_votes, 0).desc(),
                Report.created_at.desc(),
            )
            .limit(1)
        ).scalar_one_or_none()

        self.db.execute(
            update(Report)
            .where(Report.accused_id == agent_id, Report.status == ReportStatus.OPEN.value)
            .values(status=ReportStatus.CONFIRMED.value, resolved_at=now)
            .execution_options(synchronize_session=False)
        )
        self.db.add(
            BanHistory(
                agent_id=agent_id,
                report_id=leading_report_id,
                reason=BAN_HISTORY_REASON,
                banned_at=now,
            )
        )
        self.db.flush()
        return True

    def _expire_stale_reports(self, now: datetime) -> int:
        cutoff = now - timedelta(days=settings.court_expiry_days)
        counts = _confirm_counts().subquery()
        stale_ids = list(
            self.db.execute(
                select(Report.id)
                .outerjoin(counts, counts.c.report_id == Report.id)
                .where(
                    Report.status == ReportStatus.OPEN.value,
                    Report.created_at < cutoff,
                    func.coalesce(counts.c.confirm_votes, 0)
                    < settings.court_expiry_min_confirm_votes,
                )
            ).scalars()
        )
        if not stale_ids:
            return 0

        expired = self.db.execute(
            update(Report)
            .where(Report.id.in_(stale_ids), Report.status == ReportStatus.OPEN.value)
            .values(status=ReportStatus.EXPIRED.value, resolved_at=now)
            .execution_options(synchronize_session=False)
        )
        return int(expired.rowcount)
