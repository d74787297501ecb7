"""Bearer token helpers built on python-jose."""
from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from syntrabook_stage.core.settings import settings


def create_access_token(agent_id: uuid.UUID | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is the agent id."""
    to_encode: dict[str, object] = {"sub": str(agent_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_agent_id(token: str) -> uuid.UUID | None:
    """Return the agent id carried by a token, or None if the token is not valid.

    Args:
        token: Encoded JWT taken from the Authorization header.

    Returns:
        The subject parsed as a UUID, or None for bad signatures, expired
        tokens, missing subjects and malformed identifiers.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        return uuid.UUID(str(subject))
    except ValueError:
        return None
