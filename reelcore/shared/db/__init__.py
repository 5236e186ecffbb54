"""
Database Module

Connectivity and session management for ReelCore.

Architecture Overview:
======================
┌─────────────────────────────────────────────────────────────────────────────┐
│                        DATABASE LAYER                                       │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│   FastAPI Route                    Worker job / sweep                       │
│       │  get_db()                      │  AsyncSessionLocal()               │
│       ▼                                ▼                                    │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │                      AsyncSession                           │          │
│   └─────────────────────────────────────────────────────────────┘          │
│       │                                                                     │
│       ▼                                                                     │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │  Repositories: ContentItem, Engagement, Category,           │          │
│   │                UserContentIndex, User                       │          │
│   └─────────────────────────────────────────────────────────────┘          │
│       │                                                                     │
│       ▼                                                                     │
│   PostgreSQL (asyncpg)                                                      │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘
"""

from reelcore.shared.db.session import (
    get_db,
    init_db,
    close_db,
    AsyncSessionLocal,
    engine,
)

__all__ = [
    "get_db",  # FastAPI dependency for a request-scoped session
    "init_db",  # Connectivity check + category seeding at startup
    "close_db",  # Pool disposal at shutdown
    "AsyncSessionLocal",  # Session factory for background work
    "engine",  # Engine (migrations)
]
