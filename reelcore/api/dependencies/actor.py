"""
Actor Dependencies

Identifies who is calling. Authentication is handled upstream (gateway);
this service trusts the ``X-Actor-Id`` header and only checks that the
user exists.

Dependency Hierarchy:
=====================
    get_optional_actor()   ← Parse X-Actor-Id, load the user (None if absent)
           │
           ├── get_viewer()          ← Viewer for feed reads (anonymous allowed)
           ├── get_current_actor()   ← Header required
           │        │
           │        ▼
           └── get_moderator()       ← Moderator or admin role required

Type Aliases:
=============
    OptionalViewer  - Viewer (anonymous when no header)
    CurrentActor    - User, header required
    ModeratorActor  - User with moderation rights
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Header

from reelcore.api.dependencies.database import DbSession
from reelcore.shared.core.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    UserNotFoundError,
)
from reelcore.shared.models.user import User
from reelcore.shared.repositories.user_repository import UserRepository
from reelcore.shared.services.feed_service import Viewer


ACTOR_HEADER = "X-Actor-Id"


async def get_optional_actor(
    db: DbSession,
    x_actor_id: Annotated[Optional[str], Header(alias=ACTOR_HEADER)] = None,
) -> Optional[User]:
    """
    Load the calling user from the actor header.

    Raises:
        InvalidArgumentError: Header is not a UUID
        UserNotFoundError: No such user
    """
    if not x_actor_id:
        return None

    try:
        actor_id = uuid.UUID(x_actor_id)
    except ValueError as e:
        raise InvalidArgumentError(
            f"{ACTOR_HEADER} must be a UUID", details={"value": x_actor_id}
        ) from e

    user = await UserRepository(db).get(actor_id)
    if user is None:
        raise UserNotFoundError(str(actor_id))
    return user


async def get_viewer(
    actor: Annotated[Optional[User], Depends(get_optional_actor)],
) -> Viewer:
    return Viewer.from_user(actor) if actor is not None else Viewer.anonymous()


async def get_current_actor(
    actor: Annotated[Optional[User], Depends(get_optional_actor)],
) -> User:
    if actor is None:
        raise InvalidArgumentError(f"{ACTOR_HEADER} header is required")
    return actor


async def get_moderator(
    actor: Annotated[User, Depends(get_current_actor)],
) -> User:
    if not actor.is_moderator:
        raise ForbiddenError(details={"actor_id": str(actor.id)})
    return actor


# ═══════════════════════════════════════════════════════════════════════════════
# TYPE ALIASES
# ═══════════════════════════════════════════════════════════════════════════════

OptionalViewer = Annotated[Viewer, Depends(get_viewer)]
CurrentActor = Annotated[User, Depends(get_current_actor)]
ModeratorActor = Annotated[User, Depends(get_moderator)]
