"""Receipt scanning endpoints."""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_category_cache,
    get_current_identity,
    get_llm_client,
    get_settings,
    get_summary_cache,
)
from core.config import Settings
from core.request_context import AuthIdentity
from schemas.receipt import ReceiptSaveRequest, ReceiptSaveResponse, ScanResponse
from schemas.transaction import TransactionResponse
from services import transaction_service
from services.category_service import CategoryCache
from services.exceptions import NoValidTransactionsError, ReceiptScanError
from services.llm_client import LLMClient
from services.receipt_service import ALLOWED_MIME_TYPES, scan_receipt
from services.summary_service import SummaryCache

router = APIRouter(prefix="/receipts", tags=["receipts"])


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/scan", response_model=ScanResponse)
async def scan_receipt_image(
    receipt: UploadFile | None = File(default=None),
    _identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    llm: LLMClient = Depends(get_llm_client),
    category_cache: CategoryCache = Depends(get_category_cache),
    settings: Settings = Depends(get_settings),
) -> ScanResponse:
    """
    Extract transactions from an uploaded receipt or screenshot.

    Nothing is saved; the client shows the result for confirmation and then calls
    `/receipts/save`. Returns 422 with `{error, detail}` when extraction fails.
    """
    if receipt is None:
        raise _bad_request("No image file uploaded.")
    if receipt.content_type not in ALLOWED_MIME_TYPES:
        raise _bad_request(
            "Invalid file type. Please upload a JPEG, PNG, WebP, or GIF image.",
        )

    image = await receipt.read(settings.max_receipt_bytes + 1)
    if len(image) > settings.max_receipt_bytes:
        max_mb = settings.max_receipt_bytes // (1024 * 1024)
        raise _bad_request(f"File too large. Maximum size is {max_mb} MB.")

    category_names = await category_cache.get_names(db)
    try:
        extracted = await scan_receipt(image, receipt.content_type, category_names, llm)
    except ReceiptScanError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": e.error, "detail": e.detail},
        ) from e
    return ScanResponse(extracted=extracted)


@router.post("/save", response_model=ReceiptSaveResponse, status_code=201)
async def save_scanned_transactions(
    data: ReceiptSaveRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    category_cache: CategoryCache = Depends(get_category_cache),
    summary_cache: SummaryCache = Depends(get_summary_cache),
) -> ReceiptSaveResponse:
    """Save one or many confirmed transactions from a scan."""
    try:
        saved = await transaction_service.save_scanned_transactions(
            db,
            identity.user_id,
            data.transactions,
            category_cache=category_cache,
            summary_cache=summary_cache,
        )
    except NoValidTransactionsError as e:
        raise _bad_request(str(e)) from e

    responses = [TransactionResponse.model_validate(t) for t in saved]
    return ReceiptSaveResponse(transactions=responses, transaction=responses[0])
