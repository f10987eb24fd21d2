"""Transaction categorization: local keyword match first, LLM second."""
import logging

from models.category import OTHER_CATEGORY
from services.exceptions import LLMServiceError
from services.llm_client import CompletionClient

logger = logging.getLogger(__name__)


# Obvious merchants/keywords never reach the LLM
KEYWORD_MAP: dict[str, list[str]] = {
    "Food": [
        "zomato", "swiggy", "mcdonald", "domino", "pizza", "burger",
        "restaurant", "cafe", "starbucks", "kfc", "subway", "food",
        "biryani", "dunkin", "bakery", "grocery", "grofers", "blinkit",
        "bigbasket", "zepto", "instamart", "mess", "canteen", "dhaba",
    ],
    "Transport": [
        "uber", "ola", "rapido", "auto", "taxi", "metro", "bus",
        "petrol", "diesel", "fuel", "parking", "toll", "irctc",
        "train", "flight", "indigo", "spicejet", "redbus",
    ],
    "Shopping": [
        "amazon", "flipkart", "myntra", "ajio", "meesho", "nykaa",
        "mall", "shopping", "store", "market", "reliance",
    ],
    "Entertainment": [
        "netflix", "spotify", "hotstar", "prime video", "youtube",
        "movie", "cinema", "pvr", "inox", "game", "steam", "playstation",
    ],
    "Bills": [
        "electricity", "water bill", "gas bill", "internet", "wifi",
        "broadband", "airtel", "jio", "postpaid", "prepaid", "dth",
        "recharge", "emi", "loan",
    ],
    "Health": [
        "pharmacy", "hospital", "doctor", "medical", "medicine",
        "apollo", "1mg", "pharmeasy", "netmeds", "gym", "fitness",
    ],
    "Education": [
        "udemy", "coursera", "book", "stationery", "tuition",
        "college", "school", "exam", "coaching",
    ],
    "Rent": ["rent", "landlord", "housing", "pg ", "hostel"],
    "Savings": ["savings", "deposit", "mutual fund", "sip", "invest", "fd", "rd"],
}

CLASSIFY_MAX_TOKENS = 10


def local_match(description: str) -> str | None:
    """Return the first category whose keyword appears in the description."""
    lower = description.lower()
    for category, keywords in KEYWORD_MAP.items():
        if any(keyword in lower for keyword in keywords):
            return category
    return None


def match_category_name(candidate: str | None, category_names: list[str]) -> str | None:
    """Case-insensitive lookup of `candidate` among the known names."""
    if not candidate:
        return None
    wanted = candidate.strip().lower()
    for name in category_names:
        if name.lower() == wanted:
            return name
    return None


async def classify_transaction(
    description: str,
    category_names: list[str],
    llm: CompletionClient,
) -> str:
    """
    Map a free-text description onto one of `category_names`.

    A keyword hit is used only if that category actually exists. Otherwise the LLM
    picks a name; anything it returns outside the known set, and any LLM failure,
    falls back to "Other" so the write that triggered classification still succeeds.
    """
    local = local_match(description)
    if local and local in category_names:
        return local

    try:
        answer = await llm.complete(
            [
                {
                    "role": "system",
                    "content": (
                        f"Classify transactions into one of: {','.join(category_names)}. "
                        "Reply with ONLY the category name."
                    ),
                },
                {"role": "user", "content": description},
            ],
            model=llm.text_model,
            max_tokens=CLASSIFY_MAX_TOKENS,
            temperature=0,
        )
    except LLMServiceError as e:
        logger.warning("classification_failed error=%s fallback=%s", e, OTHER_CATEGORY)
        return OTHER_CATEGORY

    matched = match_category_name(answer, category_names)
    if matched:
        return matched

    logger.warning(
        "classification_unrecognized answer=%r fallback=%s", answer, OTHER_CATEGORY,
    )
    return OTHER_CATEGORY
