"""Keyword-based transaction classifier.

Matches description keywords against a fixed table of merchants and
terms. It needs no network access, so it serves as the fallback when the
AI classifier is unavailable and as a predictable classifier in tests.
"""

import re
from typing import Optional

import structlog

from centsible_core.models import RawTransaction, TransactionCategory, TransactionTag
from centsible_core.transactions import HIGH_AMOUNT, parse_transaction_amount

from .interfaces.base import Classification

logger = structlog.get_logger()


# =============================================================================
# KEYWORD TABLES
# =============================================================================

# Checked in order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: dict[TransactionCategory, list[str]] = {
    TransactionCategory.INCOME: [
        'payroll', 'direct deposit', 'salary', 'wages', 'paycheck',
        'gusto', 'adp', 'paychex', 'dividend', 'interest earned',
    ],
    TransactionCategory.HOUSING: [
        'rent', 'landlord', 'property management', 'apartment', 'lease',
        'mortgage', 'hoa',
    ],
    TransactionCategory.UTILITIES: [
        'con ed', 'coned', 'electric', 'gas bill', 'water bill',
        'national grid', 'verizon', 'at&t', 't-mobile', 'spectrum',
        'comcast', 'xfinity', 'internet', 'utility',
    ],
    TransactionCategory.FOOD: [
        'grocery', 'supermarket', 'whole foods', 'trader joe', 'safeway',
        'kroger', 'publix', 'aldi', 'wegmans', 'restaurant', 'cafe',
        'diner', 'pizza', 'sushi', 'burger', 'mcdonald', 'chipotle',
        'starbucks', 'dunkin', 'coffee', 'doordash', 'grubhub', 'uber eats',
    ],
    TransactionCategory.TRANSPORT: [
        'shell', 'exxon', 'chevron', 'gas station', 'fuel', 'uber', 'lyft',
        'taxi', 'mta', 'metro', 'transit', 'amtrak', 'parking', 'toll',
    ],
    TransactionCategory.HEALTHCARE: [
        'hospital', 'medical', 'doctor', 'clinic', 'urgent care', 'dental',
        'pharmacy', 'cvs', 'walgreens', 'prescription',
    ],
    TransactionCategory.ENTERTAINMENT: [
        'netflix', 'spotify', 'hulu', 'disney', 'cinema', 'theater',
        'ticketmaster', 'steam',
    ],
    TransactionCategory.EDUCATION: [
        'tuition', 'university', 'college', 'school', 'coursera', 'udemy',
    ],
    TransactionCategory.BUSINESS: [
        'office depot', 'staples', 'quickbooks', 'aws', 'fedex', 'zoom',
    ],
    TransactionCategory.SHOPPING: [
        'amazon', 'walmart', 'target', 'costco', 'best buy', 'ebay',
        'etsy', 'ikea',
    ],
    TransactionCategory.TRANSFER: [
        'transfer', 'zelle', 'venmo', 'cash app', 'paypal',
    ],
}

TAG_KEYWORDS: dict[TransactionTag, list[str]] = {
    TransactionTag.SUBSCRIPTION: [
        'netflix', 'spotify', 'hulu', 'disney', 'subscription', 'membership',
    ],
    TransactionTag.RECURRING: [
        'autopay', 'recurring', 'monthly', 'rent', 'payroll', 'direct deposit',
        'subscription',
    ],
    TransactionTag.REFUND: ['refund', 'reversal', 'chargeback'],
    TransactionTag.INTERNATIONAL: ['intl', 'international', 'foreign transaction'],
}

CATEGORY_TAGS: dict[TransactionCategory, TransactionTag] = {
    TransactionCategory.HOUSING: TransactionTag.ESSENTIAL,
    TransactionCategory.UTILITIES: TransactionTag.ESSENTIAL,
    TransactionCategory.HEALTHCARE: TransactionTag.ESSENTIAL,
    TransactionCategory.ENTERTAINMENT: TransactionTag.DISCRETIONARY,
    TransactionCategory.SHOPPING: TransactionTag.DISCRETIONARY,
    TransactionCategory.BUSINESS: TransactionTag.BUSINESS_EXPENSE,
}


def _keyword_pattern(keywords: list[str]) -> re.Pattern:
    # Whole words, allowing a plural or possessive: "mcdonald's", "tolls"
    alternatives = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternatives})(?:'?s)?\b", re.IGNORECASE)


class KeywordClassifier:
    """Classify transactions by description keywords.

    Categories come from ``CATEGORY_KEYWORDS`` (first match wins). Tags
    come from ``TAG_KEYWORDS``, from the category (``essential``,
    ``discretionary``, ``business_expense``) and from the amount
    (``high_value`` above $1,000). A description that matches no category
    is tagged ``needs_review``. Confidence is left to the normalizer.
    """

    def __init__(
        self,
        category_keywords: Optional[dict[TransactionCategory, list[str]]] = None,
        tag_keywords: Optional[dict[TransactionTag, list[str]]] = None,
    ):
        if category_keywords is None:
            category_keywords = CATEGORY_KEYWORDS
        if tag_keywords is None:
            tag_keywords = TAG_KEYWORDS

        self._categories = [
            (category, _keyword_pattern(keywords))
            for category, keywords in category_keywords.items()
            if keywords
        ]
        self._tags = [
            (tag, _keyword_pattern(keywords))
            for tag, keywords in tag_keywords.items()
            if keywords
        ]

    def categorize(self, description: str) -> Optional[TransactionCategory]:
        """Return the first category whose keywords appear in ``description``."""
        for category, pattern in self._categories:
            if pattern.search(description):
                return category
        return None

    def classify(self, raw: RawTransaction) -> Classification:
        description = str(raw.raw_description or "")
        category = self.categorize(description)

        tags = {tag for tag, pattern in self._tags if pattern.search(description)}
        if category is None:
            tags.add(TransactionTag.NEEDS_REVIEW)
        elif category in CATEGORY_TAGS:
            tags.add(CATEGORY_TAGS[category])

        amount = parse_transaction_amount(raw.raw_amount)
        if amount is not None and abs(amount) > HIGH_AMOUNT:
            tags.add(TransactionTag.HIGH_VALUE)

        classification = Classification(
            category=category or TransactionCategory.OTHER,
            tags=[tag for tag in TransactionTag if tag in tags],
        )
        logger.debug(
            "keyword_classified",
            category=classification.category.value,
            tags=[tag.value for tag in classification.tags],
        )
        return classification


__all__ = [
    "CATEGORY_KEYWORDS",
    "TAG_KEYWORDS",
    "KeywordClassifier",
]
