"""
Pydantic Schemas

Request and response models for the API.

Schema Categories:
==================
- common: Base schemas, pagination, error responses
- content: Feed, reel lifecycle, engagement and admin schemas
"""

from reelcore.shared.schemas.common import (
    BaseSchema,
    PaginationMeta,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
)
from reelcore.shared.schemas.content import (
    AuthorResponse,
    ReelResponse,
    FeedResponse,
    ReelDetailResponse,
    UpdateReelRequest,
    DeleteReelResponse,
    LikeResponse,
    ViewRequest,
    ViewResponse,
    ShareRequest,
    ShareResponse,
    SaveResponse,
    ApprovalRequest,
    RemoveResponse,
    CommentCountRequest,
    CommentCountResponse,
    SweepRequest,
    SweepResponse,
    CounterReconcileResponse,
    IndexPruneResponse,
    CategoryCountResponse,
    CategoryListResponse,
)

__all__ = [
    # Common
    "BaseSchema",
    "PaginationMeta",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    # Content
    "AuthorResponse",
    "ReelResponse",
    "FeedResponse",
    "ReelDetailResponse",
    "UpdateReelRequest",
    "DeleteReelResponse",
    "LikeResponse",
    "ViewRequest",
    "ViewResponse",
    "ShareRequest",
    "ShareResponse",
    "SaveResponse",
    # Admin
    "ApprovalRequest",
    "RemoveResponse",
    "CommentCountRequest",
    "CommentCountResponse",
    "SweepRequest",
    "SweepResponse",
    "CounterReconcileResponse",
    "IndexPruneResponse",
    # Categories
    "CategoryCountResponse",
    "CategoryListResponse",
]
