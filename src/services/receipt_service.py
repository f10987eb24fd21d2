"""Receipt and screenshot scanning through a vision model."""
import base64
import json
import logging
import re
from decimal import Decimal, InvalidOperation

from schemas.receipt import ExtractedTransaction
from services.categorizer import match_category_name
from services.exceptions import LLMServiceError, ReceiptScanError
from services.llm_client import CompletionClient

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})
SCAN_MAX_TOKENS = 1024
FAILED_TO_PROCESS = "Failed to process the image."

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"```\s*$")

SCAN_PROMPT = (
    "Extract ALL transactions from this receipt/screenshot as a JSON array.\n"
    'Each object: {{"amount":<number>,"description":"<string>",'
    '"date":"<YYYY-MM-DD|null>","category":"<one of: {categories}>",'
    '"type":"<debit|credit>"}}\n'
    "Rules: JSON array only, no markdown. Single txn = array of 1. "
    '"+"/ green = credit, "-"/red/plain = debit. Unknown fields: null or 0. '
    'No transactions found: [{{"error":"No transactions found"}}]'
)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    return _FENCE_END.sub("", _FENCE_START.sub("", text.strip())).strip()


def describe_failure(error: Exception) -> str:
    """Turn an extraction failure into a hint the user can act on."""
    message = str(error)
    status_code = getattr(error, "status_code", None)
    lowered = message.lower()

    if status_code in (401, 403) or "api_key" in lowered or "authentication" in lowered:
        return "AI service API key is invalid or missing. Check your GROQ_API_KEY."
    if "safety" in lowered or "content_filter" in lowered:
        return "Image was blocked by AI safety filters. Try a clearer screenshot."
    if status_code == 429 or "rate_limit" in lowered or "quota" in lowered:
        return "AI service rate limit reached. Please wait a moment and try again."
    if isinstance(error, ValueError) or "json" in lowered or "parse" in lowered:
        return "AI returned an unreadable response. Try a clearer image."
    if "connection" in lowered or "timed out" in lowered:
        return "Cannot reach AI service. Check your internet connection."
    return message or "Unknown error"


def _amount(value: object) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    # NaN and Infinity parse but are not amounts
    return abs(amount) if amount.is_finite() else Decimal("0")


def _text(value: object) -> str | None:
    return str(value) if value else None


def parse_extraction(text: str, category_names: list[str]) -> list[ExtractedTransaction]:
    """
    Parse the model's JSON answer into validated transactions.

    Raises:
        ValueError: The answer is not JSON.
        ReceiptScanError: The model reported, or we found, no transactions.
    """
    parsed = json.loads(strip_code_fences(text))
    items = parsed if isinstance(parsed, list) else [parsed]

    if len(items) == 1 and isinstance(items[0], dict) and items[0].get("error"):
        raise ReceiptScanError(str(items[0]["error"]))

    extracted = []
    for item in items:
        if not isinstance(item, dict) or item.get("error"):
            continue
        extracted.append(
            ExtractedTransaction(
                amount=_amount(item.get("amount")),
                description=_text(item.get("description")) or "Unknown",
                date=_text(item.get("date")),
                category=match_category_name(item.get("category"), category_names)
                or "Other",
                type="credit" if item.get("type") == "credit" else "debit",
            ),
        )

    if not extracted:
        raise ReceiptScanError("Could not extract any transactions from this image.")
    return extracted


async def scan_receipt(
    image: bytes,
    mime_type: str,
    category_names: list[str],
    llm: CompletionClient,
) -> list[ExtractedTransaction]:
    """
    Extract every transaction visible in a receipt image.

    Failures are not recovered: the caller reports them and the user retries with a
    clearer image.

    Raises:
        ReceiptScanError: With a categorized `detail` when the model call or parsing
            fails, or without one when the image simply holds no transactions.
    """
    image_url = f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"
    prompt = SCAN_PROMPT.format(categories=",".join(category_names))

    try:
        answer = await llm.complete(
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
            model=llm.vision_model,
            max_tokens=SCAN_MAX_TOKENS,
            temperature=0,
        )
        return parse_extraction(answer, category_names)
    except ReceiptScanError:
        raise
    except (LLMServiceError, ValueError) as e:
        logger.warning("receipt_scan_failed error=%s", e, exc_info=True)
        raise ReceiptScanError(FAILED_TO_PROCESS, detail=describe_failure(e)) from e
