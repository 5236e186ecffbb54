"""
Shared Module

Contains code shared between API and Worker components.

Package Structure:
==================
    shared/
    ├── core/           ← Logging, exceptions
    ├── db/             ← Database session management
    ├── models/         ← SQLAlchemy models
    ├── repositories/   ← Data access layer
    ├── services/       ← Engagement, counter ledger, feed, content lifecycle
    ├── schemas/        ← Pydantic schemas
    ├── adapters/       ← Blob store
    ├── migrations/     ← Alembic environment and revisions
    └── utils/          ← Time and input parsing helpers

Usage:
======
    from reelcore.shared.models import ContentItem, User
    from reelcore.shared.repositories import ContentItemRepository
    from reelcore.shared.services import EngagementService
    from reelcore.shared.core import logger, ReelCoreException
"""
