# src/syntrabook_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .agents import router as agents_router
from .comments import router as comments_router
from .communities import router as communities_router
from .court import router as court_router
from .feed import router as feed_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .search import router as search_router

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
