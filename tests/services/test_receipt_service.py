"""Tests for receipt extraction parsing and failure categorization."""
import json
from decimal import Decimal

import pytest

from services.exceptions import LLMServiceError, ReceiptScanError
from services.receipt_service import (
    describe_failure,
    parse_extraction,
    scan_receipt,
    strip_code_fences,
)

CATEGORY_NAMES = ["Food", "Transport", "Shopping", "Other"]


class TestStripCodeFences:
    """Tests for strip_code_fences."""

    def test__strip_code_fences__removes_json_fence(self) -> None:
        assert strip_code_fences('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'

    def test__strip_code_fences__leaves_plain_text(self) -> None:
        assert strip_code_fences('  [{"a": 1}] ') == '[{"a": 1}]'


class TestParseExtraction:
    """Tests for parse_extraction."""

    def test__parse_extraction__normalizes_fields(self) -> None:
        text = json.dumps(
            [
                {"amount": "-45.5", "description": "Metro top-up", "date": "2024-02-10",
                 "category": "transport", "type": "debit"},
                {"amount": "oops", "description": "", "category": "Toys", "type": "refund"},
            ],
        )

        result = parse_extraction(text, CATEGORY_NAMES)

        assert result[0].amount == Decimal("45.5")
        assert result[0].category == "Transport"
        assert result[0].date == "2024-02-10"
        assert result[1].amount == Decimal("0")
        assert result[1].description == "Unknown"
        assert result[1].category == "Other"
        assert result[1].type == "debit"
        assert result[1].date is None

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", float("nan")])
    def test__parse_extraction__non_finite_amount_becomes_zero(self, amount: object) -> None:
        text = json.dumps(
            [
                {"amount": amount, "description": "Smudged line", "type": "debit"},
                {"amount": 10, "description": "Chai", "category": "Food", "type": "debit"},
            ],
        )

        result = parse_extraction(text, CATEGORY_NAMES)

        assert [item.amount for item in result] == [Decimal("0"), Decimal("10")]
        assert result[1].description == "Chai"

    def test__parse_extraction__non_string_fields_are_coerced(self) -> None:
        text = json.dumps(
            [
                {"amount": 75, "description": 12345, "date": 20240601, "type": "debit"},
                {"amount": 20, "description": ["odd"], "type": "credit"},
            ],
        )

        result = parse_extraction(text, CATEGORY_NAMES)

        assert result[0].description == "12345"
        assert result[0].date == "20240601"
        assert result[1].description == "['odd']"
        assert result[1].type == "credit"

    def test__parse_extraction__single_object_is_wrapped(self) -> None:
        text = '{"amount": 99, "description": "Mug", "category": "Shopping", "type": "debit"}'

        result = parse_extraction(text, CATEGORY_NAMES)

        assert len(result) == 1
        assert result[0].description == "Mug"

    def test__parse_extraction__error_item_raises(self) -> None:
        with pytest.raises(ReceiptScanError) as exc_info:
            parse_extraction('[{"error": "No transactions found"}]', CATEGORY_NAMES)

        assert exc_info.value.error == "No transactions found"
        assert exc_info.value.detail is None

    def test__parse_extraction__empty_array_raises(self) -> None:
        with pytest.raises(ReceiptScanError):
            parse_extraction("[]", CATEGORY_NAMES)

    def test__parse_extraction__non_json_raises_value_error(self) -> None:
        with pytest.raises(ValueError):  # noqa: PT011
            parse_extraction("not json at all", CATEGORY_NAMES)


class TestDescribeFailure:
    """Tests for describe_failure."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (
                LLMServiceError("401 invalid_api_key", status_code=401),
                "AI service API key is invalid or missing. Check your GROQ_API_KEY.",
            ),
            (
                LLMServiceError("GROQ_API_KEY is not configured"),
                "AI service API key is invalid or missing. Check your GROQ_API_KEY.",
            ),
            (
                LLMServiceError("400 content_filter triggered", status_code=400),
                "Image was blocked by AI safety filters. Try a clearer screenshot.",
            ),
            (
                LLMServiceError("429 rate_limit_exceeded", status_code=429),
                "AI service rate limit reached. Please wait a moment and try again.",
            ),
            (
                ValueError("Expecting value: line 1 column 1 (char 0)"),
                "AI returned an unreadable response. Try a clearer image.",
            ),
            (
                LLMServiceError("Connection error: name resolution failed"),
                "Cannot reach AI service. Check your internet connection.",
            ),
            (
                LLMServiceError("Request timed out: read timeout"),
                "Cannot reach AI service. Check your internet connection.",
            ),
            (LLMServiceError("500 boom", status_code=500), "500 boom"),
        ],
    )
    def test__describe_failure__categorizes_errors(
        self, error: Exception, expected: str,
    ) -> None:
        assert describe_failure(error) == expected


class TestScanReceipt:
    """Tests for scan_receipt."""

    async def test__scan_receipt__sends_image_as_data_url(self, fake_llm) -> None:
        fake_llm.replies = ['[{"amount": 10, "description": "Tea", "category": "Food"}]']

        result = await scan_receipt(b"abc", "image/jpeg", CATEGORY_NAMES, fake_llm)

        assert result[0].description == "Tea"
        call = fake_llm.calls[0]
        assert call["model"] == fake_llm.vision_model
        text_part, image_part = call["messages"][0]["content"]
        assert "Food,Transport,Shopping,Other" in text_part["text"]
        assert image_part["image_url"]["url"] == "data:image/jpeg;base64,YWJj"

    async def test__scan_receipt__llm_failure_raises_with_detail(self, fake_llm) -> None:
        fake_llm.error = LLMServiceError("Connection error: refused")

        with pytest.raises(ReceiptScanError) as exc_info:
            await scan_receipt(b"abc", "image/png", CATEGORY_NAMES, fake_llm)

        assert exc_info.value.error == "Failed to process the image."
        assert exc_info.value.detail == (
            "Cannot reach AI service. Check your internet connection."
        )
