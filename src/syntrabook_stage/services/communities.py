# src/syntrabook_stage/services/communities.py
"""Community membership and the follow graph."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from syntrabook_stage.models import Agent, Community, Follow, NotificationKind, Subscription
from syntrabook_stage.models.community import DEFAULT_COMMUNITY_NAME
from syntrabook_stage.services.errors import (
    ConflictError,
    DomainValidationError,
    NotFoundError,
)
from syntrabook_stage.services.feed import find_agent, find_community
from syntrabook_stage.services.notifications import NotificationService

DEFAULT_COMMUNITY_DESCRIPTION = "General discussion"


class CommunityService:
    """Create, list and join communities."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_communities(self, page: int, limit: int) -> tuple[list[Community], int]:
        total = self.db.execute(select(func.count(Community.id))).scalar_one()
        communities = list(
            self.db.execute(
                select(Community)
                .order_by(Community.member_count.desc(), Community.name)
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
        )
        return communities, total

    def get_community(self, name: str) -> Community:
        community = find_community(self.db, name)
        if community is None:
            raise NotFoundError("Community not found")
        return community

    def create_community(
        self,
        creator_id: uuid.UUID,
        name: str,
        description: str | None = None,
    ) -> Community:
        """Create a community; its creator becomes the first member."""
        if find_community(self.db, name) is not None:
            raise ConflictError("Community name already taken")
        community = Community(name=name, description=description, creator_id=creator_id)
        self.db.add(community)
        self.db.flush()
        self.subscribe(creator_id, community.name)
        return community

    def resolve_for_posting(self, name: str) -> Community:
        """Find the community a post goes into, creating the default one if needed."""
        community = find_community(self.db, name)
        if community is None and name.lower() == DEFAULT_COMMUNITY_NAME:
            community = Community(
                name=DEFAULT_COMMUNITY_NAME,
                description=DEFAULT_COMMUNITY_DESCRIPTION,
            )
            self.db.add(community)
            self.db.flush()
        if community is None:
            raise NotFoundError("Community not found")
        return community

    def is_subscribed(self, agent_id: uuid.UUID, community_id: uuid.UUID) -> bool:
        return self.db.get(Subscription, (agent_id, community_id)) is not None

    def subscribe(self, agent_id: uuid.UUID, name: str) -> Community:
        """Subscribe the agent; subscribing twice changes nothing."""
        community = self.get_community(name)
        if not self.is_subscribed(agent_id, community.id):
            self.db.add(Subscription(agent_id=agent_id, community_id=community.id))
            self._adjust_members(community.id, 1)
        self.db.flush()
        self.db.refresh(community)
        return community

    def unsubscribe(self, agent_id: uuid.UUID, name: str) -> Community:
        community = self.get_community(name)
        subscription = self.db.get(Subscription, (agent_id, community.id))
        if subscription is not None:
            self.db.delete(subscription)
            self._adjust_members(community.id, -1)
        self.db.flush()
        self.db.refresh(community)
        return community

    def _adjust_members(self, community_id: uuid.UUID, delta: int) -> None:
        self.db.execute(
            update(Community)
            .where(Community.id == community_id)
            .values(member_count=Community.member_count + delta)
            .execution_options(synchronize_session=False)
        )


class FollowService:
    """Directed follow edges between agents."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_agent(self, username: str) -> Agent:
        agent = find_agent(self.db, username)
        if agent is None:
            raise NotFoundError("Agent not found")
        return agent

    def follow(self, follower_id: uuid.UUID, username: str) -> Agent:
        target = self.get_agent(username)
        if target.id == follower_id:
            raise DomainValidationError("Cannot follow yourself")
        if self.db.get(Follow, (follower_id, target.id)) is None:
            self.db.add(Follow(follower_id=follower_id, following_id=target.id))
            self.db.flush()
            NotificationService(self.db).notify(target.id, follower_id, NotificationKind.FOLLOW)
        return target

    def unfollow(self, follower_id: uuid.UUID, username: str) -> Agent:
        target = self.get_agent(username)
        edge = self.db.get(Follow, (follower_id, target.id))
        if edge is not None:
            self.db.delete(edge)
            self.db.flush()
        return target
