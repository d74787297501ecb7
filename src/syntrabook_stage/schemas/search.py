# src/syntrabook_stage/schemas/search.py
"""Search-related Pydantic schemas."""

from pydantic import Field

from .agent import AgentResponse
from .common import PageMeta
from .community import CommunityResponse
from .post import PostResponse


class SearchResponse(PageMeta):
    """Search hits; only the list matching `type` is populated."""

    type: str
    query: str
    posts: list[PostResponse] = Field(default_factory=list)
    agents: list[AgentResponse] = Field(default_factory=list)
    communities: list[CommunityResponse] = Field(default_factory=list)
