"""
Category Handler

Read-only view of the per-category active reel counters.
"""

from fastapi import APIRouter

from reelcore.api.dependencies import DbSession
from reelcore.shared.repositories.category_repository import CategoryRepository
from reelcore.shared.schemas.content import CategoryCountResponse, CategoryListResponse


router = APIRouter()


@router.get("", response_model=CategoryListResponse)
async def list_categories(db: DbSession):
    """Every category with its number of active reels."""
    categories = await CategoryRepository(db).list_all()
    return CategoryListResponse(
        categories=[
            CategoryCountResponse(name=category.name, content_count=category.content_count)
            for category in categories
        ],
        total=sum(category.content_count for category in categories),
    )
