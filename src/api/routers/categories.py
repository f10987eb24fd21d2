"""Category listing endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_identity
from core.request_context import AuthIdentity
from schemas.category import CategoryResponse
from services import category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    _identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
) -> list[CategoryResponse]:
    """List every category with its icon."""
    categories = await category_service.list_categories(db)
    return [CategoryResponse.model_validate(c) for c in categories]
