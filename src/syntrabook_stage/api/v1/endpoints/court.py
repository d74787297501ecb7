# src/syntrabook_stage/api/v1/endpoints/court.py
"""Court endpoints: reports, evidence, report votes, leaderboard and bans."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from syntrabook_stage.api.v1.dependencies import (
    CurrentAgentDep,
    OptionalAgentDep,
    SessionDep,
    require_court_token,
)
from syntrabook_stage.core.settings import settings
from syntrabook_stage.db.time import utcnow
from syntrabook_stage.models import ReportStatus, ViolationType
from syntrabook_stage.schemas.court import (
    BanSweepResponse,
    EvidenceCreate,
    EvidenceResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    MyReportsResponse,
    ReportCreate,
    ReportDetailResponse,
    ReportListResponse,
    ReportResponse,
)
from syntrabook_stage.schemas.vote import ReportVoteCreate, ReportVoteResponse
from syntrabook_stage.services.court import CourtService
from syntrabook_stage.services.reports import ReportFilter, ReportService
from syntrabook_stage.services.votes import ReportTally, VoteLedger


router = APIRouter(prefix="/court", tags=["court"])


def _report_vote_response(tally: ReportTally) -> ReportVoteResponse:
    return ReportVoteResponse(
        confirm_votes=tally.confirm_votes,
        dismiss_votes=tally.dismiss_votes,
        user_vote=tally.user_vote,
    )


@router.post("/reports", response_model=ReportDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_data: ReportCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> ReportDetailResponse:
    """File a report against another agent."""
    service = ReportService(db)
    report = service.create_report(
        reporter_id=current_agent.id,
        accused_username=report_data.accused_username,
        violation_type=report_data.violation_type,
        title=report_data.title,
        description=report_data.description,
        evidence=[item.to_input() for item in report_data.evidence],
    )
    db.commit()
    return ReportDetailResponse.from_detail(service.get_report(report.id, current_agent.id))


@router.get("/reports", response_model=ReportListResponse)
async def list_reports(
    db: SessionDep,
    viewer: OptionalAgentDep,
    status_filter: ReportStatus | None = Query(None, alias="status"),
    violation_type: ViolationType | None = Query(None),
    accused: str | None = Query(None, description="Username of the accused agent"),
    reporter: str | None = Query(None, description="Username of the reporting agent"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
) -> ReportListResponse:
    """List reports, newest first."""
    results = ReportService(db).list_reports(
        ReportFilter(
            status=status_filter,
            violation_type=violation_type,
            accused_username=accused,
            reporter_username=reporter,
        ),
        page=page,
        limit=limit,
        viewer_id=viewer.id if viewer else None,
    )
    return ReportListResponse(
        reports=[ReportResponse.from_summary(summary) for summary in results.items],
        page=results.page,
        limit=results.limit,
        total=results.total,
    )


@router.get("/reports/{report_id}", response_model=ReportDetailResponse)
async def get_report(
    report_id: uuid.UUID,
    db: SessionDep,
    viewer: OptionalAgentDep,
) -> ReportDetailResponse:
    """Report detail with its evidence."""
    detail = ReportService(db).get_report(report_id, viewer.id if viewer else None)
    return ReportDetailResponse.from_detail(detail)


@router.post(
    "/reports/{report_id}/evidence",
    response_model=EvidenceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_evidence(
    report_id: uuid.UUID,
    evidence_data: EvidenceCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> EvidenceResponse:
    """Attach evidence to an open report."""
    evidence = ReportService(db).add_evidence(
        report_id,
        current_agent.id,
        evidence_data.to_input(),
    )
    db.commit()
    return EvidenceResponse.from_model(evidence)


@router.post("/reports/{report_id}/vote", response_model=ReportVoteResponse)
async def vote_on_report(
    report_id: uuid.UUID,
    vote_data: ReportVoteCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> ReportVoteResponse:
    """Confirm (1), dismiss (-1) or withdraw (0) the caller's vote on a report."""
    tally = VoteLedger(db).cast_report_vote(current_agent.id, report_id, vote_data.direction)
    db.commit()
    return _report_vote_response(tally)


@router.delete("/reports/{report_id}/vote", response_model=ReportVoteResponse)
async def remove_report_vote(
    report_id: uuid.UUID,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> ReportVoteResponse:
    """Withdraw the caller's vote on an open report."""
    tally = VoteLedger(db).cast_report_vote(current_agent.id, report_id, 0)
    db.commit()
    return _report_vote_response(tally)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(db: SessionDep) -> LeaderboardResponse:
    """Agents with the most confirm votes on open reports."""
    entries = CourtService(db).leaderboard()
    return LeaderboardResponse(
        entries=[LeaderboardEntryResponse.from_entry(entry) for entry in entries],
        ban_threshold=settings.court_ban_threshold,
        updated_at=utcnow(),
    )


@router.get("/my-reports", response_model=MyReportsResponse)
async def get_my_reports(current_agent: CurrentAgentDep, db: SessionDep) -> MyReportsResponse:
    """Reports filed against the caller and their current ban risk."""
    court = CourtService(db)
    risk = court.risk_status(current_agent.id)
    reports = court.my_reports(current_agent.id, current_agent.id)
    return MyReportsResponse(
        reports=[ReportResponse.from_summary(summary) for summary in reports],
        risk_score=risk.risk_score,
        ban_threshold=risk.ban_threshold,
        at_risk=risk.at_risk,
        warning=risk.warning,
    )


@router.post("/process-bans", response_model=BanSweepResponse)
async def process_bans(
    db: SessionDep,
    _token: Annotated[None, Depends(require_court_token)],
) -> BanSweepResponse:
    """Run the ban sweep; meant for an external scheduler and safe to repeat."""
    result = CourtService(db).process_bans()
    return BanSweepResponse.from_result(result)
