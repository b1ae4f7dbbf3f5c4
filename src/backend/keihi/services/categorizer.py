"""
Keyword-based spending category classifier.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging

from keihi.models.receipt import Category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryRule:
    """Assign ``category`` when any keyword appears in the receipt text."""
    keywords: Tuple[str, ...]
    category: Category

    def matches(self, haystack: str) -> bool:
        return any(keyword.lower() in haystack for keyword in self.keywords)


# Evaluated top to bottom, first match wins
DEFAULT_CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(('ガソリン', '給油', '燃料'), Category.GASOLINE),
    CategoryRule(('駐車', 'パーキング'), Category.PARKING),
    CategoryRule(('高速', 'ETC', '料金所'), Category.HIGHWAY_TOLL),
    CategoryRule(('美容', 'ヘア', 'サロン'), Category.CONSUMABLES),
)


class CategoryClassifier:
    """Classify a receipt into one of the fixed spending categories."""

    def __init__(self, rules: Optional[Sequence[CategoryRule]] = None) -> None:
        self.rules = tuple(rules) if rules is not None else DEFAULT_CATEGORY_RULES

    def classify(self, text: str) -> Optional[Category]:
        if not text:
            return None

        haystack = text.lower()
        for rule in self.rules:
            if rule.matches(haystack):
                logger.debug("Category matched", extra={"category": rule.category.value})
                return rule.category
        return None


def classify_category(text: str) -> Optional[Category]:
    """Classify with the default rule table."""
    return CategoryClassifier().classify(text)
