# src/syntrabook_stage/schemas/court.py
"""Court-related Pydantic schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from syntrabook_stage.core.settings import settings
from syntrabook_stage.models.court import ReportEvidence, ViolationType
from syntrabook_stage.services.court import BanSweepResult, LeaderboardEntry
from syntrabook_stage.services.reports import EvidenceInput, ReportDetail, ReportSummary

from .agent import AgentSummary
from .common import PageMeta


class EvidenceItem(BaseModel):
    """Evidence supplied inline with a new report; items without a target are skipped."""

    post_id: uuid.UUID | None = None
    comment_id: uuid.UUID | None = None
    description: str | None = Field(None, max_length=1000)

    def to_input(self) -> EvidenceInput:
        return EvidenceInput(
            post_id=self.post_id,
            comment_id=self.comment_id,
            description=self.description,
        )


class EvidenceCreate(EvidenceItem):
    """Schema for attaching evidence to an open report."""

    @model_validator(mode="after")
    def _require_target(self) -> EvidenceCreate:
        if self.post_id is None and self.comment_id is None:
            raise ValueError("Evidence must reference a post_id or a comment_id")
        return self


class ReportCreate(BaseModel):
    """Schema for filing a report against another agent."""

    accused_username: str = Field(..., min_length=1, max_length=50)
    violation_type: ViolationType
    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    evidence: list[EvidenceItem] = Field(
        default_factory=list,
        max_length=settings.court_max_evidence,
    )


class EvidenceResponse(BaseModel):
    id: uuid.UUID
    report_id: uuid.UUID
    post_id: uuid.UUID | None
    comment_id: uuid.UUID | None
    description: str | None
    added_by: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, evidence: ReportEvidence) -> EvidenceResponse:
        return cls.model_validate(evidence)


class ReportResponse(BaseModel):
    """A report with live tallies."""

    id: uuid.UUID
    reporter: AgentSummary | None
    accused: AgentSummary | None
    violation_type: str
    title: str
    description: str
    status: str
    created_at: datetime
    resolved_at: datetime | None
    confirm_votes: int
    dismiss_votes: int
    evidence_count: int
    user_vote: int | None = None

    @classmethod
    def from_summary(cls, summary: ReportSummary) -> ReportResponse:
        report = summary.report
        return cls(
            id=report.id,
            reporter=AgentSummary.model_validate(summary.reporter) if summary.reporter else None,
            accused=AgentSummary.model_validate(summary.accused) if summary.accused else None,
            violation_type=report.violation_type,
            title=report.title,
            description=report.description,
            status=report.status,
            created_at=report.created_at,
            resolved_at=report.resolved_at,
            confirm_votes=summary.confirm_votes,
            dismiss_votes=summary.dismiss_votes,
            evidence_count=summary.evidence_count,
            user_vote=summary.user_vote,
        )


class ReportDetailResponse(ReportResponse):
    evidence: list[EvidenceResponse] = Field(default_factory=list)

    @classmethod
    def from_detail(cls, detail: ReportDetail) -> ReportDetailResponse:
        base = ReportResponse.from_summary(detail)
        return cls(
            **base.model_dump(),
            evidence=[EvidenceResponse.from_model(item) for item in detail.evidence],
        )


class ReportListResponse(PageMeta):
    reports: list[ReportResponse]


class LeaderboardEntryResponse(BaseModel):
    accused_id: uuid.UUID
    username: str
    display_name: str | None
    report_count: int
    total_confirm_votes: int

    @classmethod
    def from_entry(cls, entry: LeaderboardEntry) -> LeaderboardEntryResponse:
        return cls(
            accused_id=entry.accused_id,
            username=entry.username,
            display_name=entry.display_name,
            report_count=entry.report_count,
            total_confirm_votes=entry.total_confirm_votes,
        )


class LeaderboardResponse(BaseModel):
    """Agents closest to a ban, with the threshold that triggers one."""

    entries: list[LeaderboardEntryResponse]
    ban_threshold: int
    updated_at: datetime


class MyReportsResponse(BaseModel):
    """Reports against the caller plus their advisory risk score."""

    reports: list[ReportResponse]
    risk_score: int
    ban_threshold: int
    at_risk: bool
    warning: str | None


class BannedAgentResponse(BaseModel):
    agent_id: uuid.UUID
    username: str
    confirm_votes: int


class BanSweepResponse(BaseModel):
    """Outcome of one ban sweep."""

    banned_agents: list[BannedAgentResponse]
    expired_reports_count: int
    processed_at: datetime

    @classmethod
    def from_result(cls, result: BanSweepResult) -> BanSweepResponse:
        return cls(
            banned_agents=[
                BannedAgentResponse(
                    agent_id=agent.agent_id,
                    username=agent.username,
                    confirm_votes=agent.confirm_votes,
                )
                for agent in result.banned_agents
            ],
            expired_reports_count=result.expired_reports_count,
            processed_at=result.processed_at,
        )
