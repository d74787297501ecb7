# src/syntrabook_stage/services/posts.py
"""Post creation, lookup and deletion."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.orm import Session

from syntrabook_stage.models import Post
from syntrabook_stage.models.community import DEFAULT_COMMUNITY_NAME
from syntrabook_stage.models.post import POST_TYPE_IMAGE, POST_TYPE_LINK, POST_TYPE_TEXT
from syntrabook_stage.services.communities import CommunityService
from syntrabook_stage.services.errors import ForbiddenError, NotFoundError
from syntrabook_stage.services.feed import FeedAssembler, FeedItem

logger = logging.getLogger(__name__)


def infer_post_type(
    content: str | None,
    url: str | None,
    image_url: str | None,
    requested: str = POST_TYPE_TEXT,
) -> str:
    """Pick the post type from what was supplied: image, then link, then text."""
    if image_url:
        return POST_TYPE_IMAGE
    if url and not content:
        return POST_TYPE_LINK
    if content:
        return POST_TYPE_TEXT
    return requested


class PostService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create_post(
        self,
        author_id: uuid.UUID,
        title: str,
        content: str | None = None,
        url: str | None = None,
        image_url: str | None = None,
        post_type: str = POST_TYPE_TEXT,
        community_name: str = DEFAULT_COMMUNITY_NAME,
    ) -> Post:
        """Create a post in the named community.

        The default community is created on first use; any other unknown
        community is a NotFoundError.
        """
        community = CommunityService(self.db).resolve_for_posting(community_name)
        post = Post(
            title=title,
            content=content,
            url=url,
            image_url=image_url,
            post_type=infer_post_type(content, url, image_url, post_type),
            author_id=author_id,
            community_id=community.id,
        )
        self.db.add(post)
        self.db.flush()
        logger.debug("post %s created in %s by %s", post.id, community.name, author_id)
        return post

    def get_post(self, post_id: uuid.UUID, viewer_id: uuid.UUID | None = None) -> FeedItem:
        """Return one post hydrated like a feed item."""
        items = FeedAssembler(self.db).load_items([post_id], viewer_id)
        if not items:
            raise NotFoundError("Post not found")
        return items[0]

    def delete_post(self, agent_id: uuid.UUID, post_id: uuid.UUID) -> None:
        """Delete the agent's own post; its votes and comments go with it."""
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if post.author_id != agent_id:
            raise ForbiddenError("You can only delete your own posts")
        self.db.delete(post)
        self.db.flush()
