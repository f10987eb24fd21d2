"""Transaction endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_category_cache,
    get_current_identity,
    get_llm_client,
    get_summary_cache,
)
from core.request_context import AuthIdentity
from schemas.base import MessageResponse
from schemas.transaction import (
    ClearTransactionsResponse,
    TransactionCreate,
    TransactionCreateResponse,
    TransactionListResponse,
    TransactionResponse,
)
from services import transaction_service
from services.category_service import CategoryCache
from services.exceptions import TransactionForbiddenError, TransactionNotFoundError
from services.llm_client import LLMClient
from services.summary_service import SummaryCache

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionCreateResponse, status_code=201)
async def create_transaction(
    data: TransactionCreate,
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    llm: LLMClient = Depends(get_llm_client),
    category_cache: CategoryCache = Depends(get_category_cache),
    summary_cache: SummaryCache = Depends(get_summary_cache),
) -> TransactionCreateResponse:
    """
    Create a transaction and categorize it.

    Keyword matches are categorized locally; anything else goes to the classifier,
    and unrecognized or failed classifications land in "Other".
    """
    transaction = await transaction_service.create_transaction(
        db,
        identity.user_id,
        data,
        llm=llm,
        category_cache=category_cache,
        summary_cache=summary_cache,
    )
    return TransactionCreateResponse(
        transaction=TransactionResponse.model_validate(transaction),
    )


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
) -> TransactionListResponse:
    """List the current user's transactions, newest first."""
    transactions = await transaction_service.get_transactions(db, identity.user_id)
    return TransactionListResponse(
        count=len(transactions),
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
    )


# Declared before /{transaction_id} so "all" is not parsed as an id
@router.delete("/all", response_model=ClearTransactionsResponse)
async def clear_transactions(
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    summary_cache: SummaryCache = Depends(get_summary_cache),
) -> ClearTransactionsResponse:
    """Delete every transaction the current user owns."""
    count = await transaction_service.clear_transactions(
        db, identity.user_id, summary_cache=summary_cache,
    )
    return ClearTransactionsResponse(message=f"Deleted {count} transactions.", count=count)


@router.delete("/{transaction_id}", response_model=MessageResponse)
async def delete_transaction(
    transaction_id: UUID,
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    summary_cache: SummaryCache = Depends(get_summary_cache),
) -> MessageResponse:
    """
    Delete one transaction.

    Returns 404 if it does not exist and 403 if it belongs to someone else.
    """
    try:
        await transaction_service.delete_transaction(
            db, identity.user_id, transaction_id, summary_cache=summary_cache,
        )
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TransactionForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    return MessageResponse(message="Transaction deleted.")
