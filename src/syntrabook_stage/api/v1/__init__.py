# src/syntrabook_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    agents_router,
    comments_router,
    communities_router,
    court_router,
    feed_router,
    notifications_router,
    posts_router,
    search_router,
)

__all__ = [
    "agents_router",
    "posts_router",
    "comments_router",
    "communities_router",
    "court_router",
    "feed_router",
    "notifications_router",
    "search_router",
]
