"""
API Dependencies

FastAPI dependencies for injection into route handlers.

Dependencies:
=============
- Database: get_db(), DbSession
- Actor: OptionalViewer, CurrentActor, ModeratorActor
- Services: *ServiceDep aliases, BlobStoreDep, SessionFactoryDep, SweepRegistryDep

Usage:
======
    from reelcore.api.dependencies import CurrentActor, DbSession

    @router.post("/{content_id}/save")
    async def save(content_id: UUID, actor: CurrentActor, db: DbSession):
        ...
"""

from reelcore.api.dependencies.database import (
    get_db,
    DbSession,
)
from reelcore.api.dependencies.actor import (
    ACTOR_HEADER,
    OptionalViewer,
    CurrentActor,
    ModeratorActor,
)

__all__ = [
    # Database
    "get_db",
    "DbSession",
    # Actor
    "ACTOR_HEADER",
    "OptionalViewer",
    "CurrentActor",
    "ModeratorActor",
]
