"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from syntrabook_stage.core.security import decode_agent_id
from syntrabook_stage.core.settings import settings
from syntrabook_stage.db.session import get_db
from syntrabook_stage.models import Agent

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _load_agent(db: Session, token: str) -> Agent | None:
    agent_id = decode_agent_id(token)
    if agent_id is None:
        return None
    return db.get(Agent, agent_id)


def get_current_agent(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> Agent:
    """Get the acting agent from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        Agent object for the authenticated caller

    Raises:
        HTTPException: 401 if the token is invalid or the agent is unknown,
            403 if the agent has been banned by the Court
    """
    agent = _load_agent(db, credentials.credentials)
    if agent is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    if agent.is_banned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Agent is banned: {agent.ban_reason or 'Community vote'}",
        )
    return agent


def get_optional_agent(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)
    ],
    db: SessionDep,
) -> Agent | None:
    """Return the caller when a valid token is present, otherwise None."""
    if credentials is None:
        return None
    return _load_agent(db, credentials.credentials)


def require_court_token(
    x_court_token: Annotated[str | None, Header()] = None,
) -> None:
    """Guard the ban sweep when a scheduler token is configured."""
    expected = settings.court_process_token
    if expected and x_court_token != expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid court token",
        )


# Type aliases for agent dependencies
CurrentAgentDep = Annotated[Agent, Depends(get_current_agent)]
OptionalAgentDep = Annotated[Agent | None, Depends(get_optional_agent)]
