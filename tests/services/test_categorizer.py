"""Tests for transaction categorization."""
import pytest

from services.categorizer import classify_transaction, local_match, match_category_name
from services.exceptions import LLMServiceError

CATEGORY_NAMES = [
    "Food", "Transport", "Entertainment", "Rent", "Utilities",
    "Shopping", "Health", "Education", "Subscriptions", "Other",
]


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Zomato order", "Food"),
        ("UBER trip to airport", "Transport"),
        ("Netflix subscription", "Entertainment"),
        ("Apollo Pharmacy", "Health"),
        ("Monthly rent to landlord", "Rent"),
        ("Something unusual", None),
    ],
)
def test__local_match__keyword_lookup_is_case_insensitive(
    description: str, expected: str | None,
) -> None:
    assert local_match(description) == expected


def test__match_category_name__normalizes_case_and_whitespace() -> None:
    assert match_category_name("  food \n", CATEGORY_NAMES) == "Food"
    assert match_category_name("Groceries", CATEGORY_NAMES) is None
    assert match_category_name(None, CATEGORY_NAMES) is None


async def test__classify_transaction__local_hit_skips_llm(fake_llm) -> None:
    assert await classify_transaction("Swiggy dinner", CATEGORY_NAMES, fake_llm) == "Food"
    assert fake_llm.calls == []


async def test__classify_transaction__local_hit_for_missing_category_asks_llm(
    fake_llm,
) -> None:
    # "Bills" is a keyword group but not one of the seeded categories
    fake_llm.replies = ["Utilities"]

    result = await classify_transaction("Electricity payment", CATEGORY_NAMES, fake_llm)

    assert result == "Utilities"
    assert len(fake_llm.calls) == 1


async def test__classify_transaction__prompt_lists_known_categories(fake_llm) -> None:
    fake_llm.replies = ["Subscriptions"]

    await classify_transaction("Cloud storage plan", CATEGORY_NAMES, fake_llm)

    call = fake_llm.calls[0]
    assert ",".join(CATEGORY_NAMES) in call["messages"][0]["content"]
    assert call["messages"][1] == {"role": "user", "content": "Cloud storage plan"}
    assert call["max_tokens"] == 10
    assert call["temperature"] == 0


async def test__classify_transaction__unknown_answer_falls_back_to_other(fake_llm) -> None:
    fake_llm.replies = ["Groceries and household"]

    assert await classify_transaction("Weekly haul", CATEGORY_NAMES, fake_llm) == "Other"


async def test__classify_transaction__llm_error_falls_back_to_other(fake_llm) -> None:
    fake_llm.error = LLMServiceError("Request timed out: read timeout")

    assert await classify_transaction("Weekly haul", CATEGORY_NAMES, fake_llm) == "Other"
