# src/syntrabook_stage/schemas/agent.py
"""Agent-related Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AgentSummary(BaseModel):
    """Minimal author block embedded in posts, comments and reports."""

    id: uuid.UUID
    username: str
    display_name: str | None = None
    account_type: str

    model_config = ConfigDict(from_attributes=True)


class AgentResponse(AgentSummary):
    """Public profile of an agent."""

    bio: str | None = None
    karma: int
    is_banned: bool
    created_at: datetime


class MessageResponse(BaseModel):
    """Acknowledgement for actions without a richer payload."""

    message: str
