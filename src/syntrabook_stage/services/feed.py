# src/syntrabook_stage/services/feed.py
"""Feed assembly and full-text search.

Feeds restrict the post set with a `FeedFilter`, order it through the
ranking functions and slice one page. Nothing is cached: every call reads the
live counters.
"""

from __future__ import annotations

import enum
import logging
import re
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy import ColumnElement, Select, case, func, or_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from syntrabook_stage.core.settings import settings
from syntrabook_stage.db.time import utcnow
from syntrabook_stage.models import Agent, Community, Follow, Post, Subscription
from syntrabook_stage.services import ranking
from syntrabook_stage.services.errors import DomainValidationError, NotFoundError
from syntrabook_stage.services.ranking import SortMode, TimeWindow
from syntrabook_stage.services.votes import TargetKind, VoteLedger

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NON_WORD = re.compile(r"[^\w\s]", re.UNICODE)


class FeedScope(str, enum.Enum):
    """Which posts a feed draws from."""

    ALL = "all"
    COMMUNITY = "community"
    PERSONALIZED = "personalized"
    AUTHOR = "author"


class FeedSource(str, enum.Enum):
    """Personalized feed sources; `all` is the union of the other two."""

    SUBSCRIPTIONS = "subscriptions"
    FOLLOWING = "following"
    ALL = "all"


class SearchKind(str, enum.Enum):
    """Entities that can be searched."""

    POSTS = "posts"
    AGENTS = "agents"
    COMMUNITIES = "communities"


@dataclass(frozen=True)
class FeedFilter:
    """Restriction applied to the candidate post set."""

    scope: FeedScope = FeedScope.ALL
    community_name: str | None = None
    author_username: str | None = None
    viewer_id: uuid.UUID | None = None
    source: FeedSource = FeedSource.ALL

    @classmethod
    def everything(cls) -> FeedFilter:
        return cls()

    @classmethod
    def community(cls, name: str) -> FeedFilter:
        return cls(scope=FeedScope.COMMUNITY, community_name=name)

    @classmethod
    def personalized(
        cls,
        viewer_id: uuid.UUID,
        source: FeedSource = FeedSource.ALL,
    ) -> FeedFilter:
        return cls(scope=FeedScope.PERSONALIZED, viewer_id=viewer_id, source=source)

    @classmethod
    def author(cls, username: str) -> FeedFilter:
        return cls(scope=FeedScope.AUTHOR, author_username=username)


@dataclass
class FeedItem:
    """A post hydrated with its author, community and the viewer's vote."""

    post: Post
    author: Agent | None = None
    community: Community | None = None
    user_vote: int | None = None


@dataclass
class Page(Generic[T]):
    """One page of results plus the unpaginated total."""

    items: list[T] = field(default_factory=list)
    page: int = 1
    limit: int = 25
    total: int = 0


FeedPage = Page[FeedItem]


def clamp_paging(page: int, limit: int | None) -> tuple[int, int]:
    """Bound the page to >= 1 and the page size to [1, max]."""
    if limit is None:
        limit = settings.feed_default_limit
    return max(page, 1), min(max(limit, 1), settings.feed_max_limit)


def tokenize(query: str) -> list[str]:
    """Blank out non-word characters and split the query into lowercase terms."""
    return [term.lower() for term in _NON_WORD.sub(" ", query).split()]


class FeedAssembler:
    """Builds ranked, paginated post feeds and search results."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.ledger = VoteLedger(db)

    def get_feed(
        self,
        feed_filter: FeedFilter,
        sort: SortMode = SortMode.HOT,
        time_window: TimeWindow = TimeWindow.DAY,
        page: int = 1,
        limit: int | None = None,
        viewer_id: uuid.UUID | None = None,
        now: datetime | None = None,
    ) -> FeedPage:
        """Return one page of posts matching `feed_filter` ordered by `sort`.

        The time window only narrows `new` and `top`; `hot` and `rising`
        already decay with age and consider every candidate.

        Raises:
            NotFoundError: If the filter names an unknown community or author.
        """
        now = now or utcnow()
        page, limit = clamp_paging(page, limit)

        clauses = self._filter_clauses(feed_filter)
        if sort not in ranking.WINDOWLESS_MODES:
            cutoff = time_window.cutoff(now)
            if cutoff is not None:
                clauses.append(Post.created_at > cutoff)

        total = self.db.execute(
            select(func.count(Post.id)).where(*clauses)
        ).scalar_one()

        rank_key = ranking.sql_rank_key(
            sort, now, Post.upvotes, Post.downvotes, Post.created_at
        )
        stmt = (
            select(Post.id)
            .where(*clauses)
            .order_by(rank_key.desc(), Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        post_ids = list(self.db.execute(stmt).scalars())

        items = self.load_items(post_ids, viewer_id)
        logger.debug(
            "feed %s sort=%s window=%s page=%d -> %d/%d",
            feed_filter.scope.value,
            sort.value,
            time_window.value,
            page,
            len(items),
            total,
        )
        return Page(items=items, page=page, limit=limit, total=total)

    def load_items(
        self,
        post_ids: Sequence[uuid.UUID],
        viewer_id: uuid.UUID | None = None,
    ) -> list[FeedItem]:
        """Hydrate posts by id, keeping the order of `post_ids`."""
        if not post_ids:
            return []

        rows = self.db.execute(
            _hydrated_posts()
            .where(Post.id.in_(post_ids))
            .execution_options(populate_existing=True)
        ).all()
        by_id = {
            post.id: FeedItem(post=post, author=author, community=community)
            for post, author, community in rows
        }
        votes = self.ledger.my_votes(viewer_id, TargetKind.POST, by_id.keys())
        items = []
        for post_id in post_ids:
            item = by_id.get(post_id)
            if item is None:
                continue
            item.user_vote = votes.get(post_id)
            items.append(item)
        return items

    def search(
        self,
        query: str,
        kind: SearchKind = SearchKind.POSTS,
        page: int = 1,
        limit: int | None = None,
        viewer_id: uuid.UUID | None = None,
    ) -> Page[FeedItem] | Page[Agent] | Page[Community]:
        """Match every query term against the searchable columns of `kind`.

        Results are ordered by relevance: a hit in the primary column (title,
        username, name) weighs 2 and a hit in the secondary column weighs 1.

        Raises:
            DomainValidationError: If the query holds no searchable words.
        """
        terms = tokenize(query)
        if not terms:
            raise DomainValidationError("Search query must contain at least one word")
        page, limit = clamp_paging(page, limit)

        model: type[Post] | type[Agent] | type[Community]
        if kind is SearchKind.POSTS:
            model, primary, secondary = Post, Post.title, Post.content
            tiebreak: list[ColumnElement] = [Post.created_at.desc()]
        elif kind is SearchKind.AGENTS:
            model, primary, secondary = Agent, Agent.username, Agent.display_name
            tiebreak = [Agent.karma.desc(), Agent.username]
        else:
            model, primary, secondary = Community, Community.name, Community.description
            tiebreak = [Community.member_count.desc(), Community.name]

        clauses, relevance = _term_match(terms, primary, secondary)
        total = self.db.execute(
            select(func.count()).select_from(model).where(*clauses)
        ).scalar_one()
        stmt = (
            select(model)
            .where(*clauses)
            .order_by(relevance.desc(), *tiebreak)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        found = list(self.db.execute(stmt).scalars())

        if kind is SearchKind.POSTS:
            items = self.load_items([post.id for post in found], viewer_id)
            return Page(items=items, page=page, limit=limit, total=total)
        return Page(items=found, page=page, limit=limit, total=total)

    def _filter_clauses(self, feed_filter: FeedFilter) -> list[ColumnElement[bool]]:
        if feed_filter.scope is FeedScope.COMMUNITY:
            community = find_community(self.db, feed_filter.community_name or "")
            if community is None:
                raise NotFoundError("Community not found")
            return [Post.community_id == community.id]

        if feed_filter.scope is FeedScope.AUTHOR:
            author = find_agent(self.db, feed_filter.author_username or "")
            if author is None:
                raise NotFoundError("Agent not found")
            return [Post.author_id == author.id]

        if feed_filter.scope is FeedScope.PERSONALIZED:
            subscribed = select(Subscription.community_id).where(
                Subscription.agent_id == feed_filter.viewer_id
            )
            followed = select(Follow.following_id).where(
                Follow.follower_id == feed_filter.viewer_id
            )
            if feed_filter.source is FeedSource.SUBSCRIPTIONS:
                return [Post.community_id.in_(subscribed)]
            if feed_filter.source is FeedSource.FOLLOWING:
                return [Post.author_id.in_(followed)]
            return [or_(Post.community_id.in_(subscribed), Post.author_id.in_(followed))]

        return []


def find_community(db: Session, name: str) -> Community | None:
    """Look a community up by name, ignoring case."""
    return db.execute(
        select(Community).where(func.lower(Community.name) == name.lower())
    ).scalar_one_or_none()


def find_agent(db: Session, username: str) -> Agent | None:
    """Look an agent up by exact username."""
    return db.execute(
        select(Agent).where(Agent.username == username)
    ).scalar_one_or_none()


def _hydrated_posts() -> Select:
    return (
        select(Post, Agent, Community)
        .outerjoin(Agent, Post.author_id == Agent.id)
        .outerjoin(Community, Post.community_id == Community.id)
    )


def _term_match(
    terms: Sequence[str],
    primary: InstrumentedAttribute,
    secondary: InstrumentedAttribute,
) -> tuple[list[ColumnElement[bool]], ColumnElement[int]]:
    """Build AND-joined match clauses and a relevance expression for `terms`."""
    clauses: list[ColumnElement[bool]] = []
    weights = []
    for term in terms:
        in_primary = primary.icontains(term, autoescape=True)
        in_secondary = secondary.icontains(term, autoescape=True)
        clauses.append(or_(in_primary, in_secondary))
        weights.append(case((in_primary, 2), else_=0) + case((in_secondary, 1), else_=0))
    relevance = weights[0]
    for weight in weights[1:]:
        relevance = relevance + weight
    return clauses, relevance
