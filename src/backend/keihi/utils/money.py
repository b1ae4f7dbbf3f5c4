"""
Shared yen parsing utilities for OCR receipt text.

Handles the number shapes found on Japanese receipts:
- Comma grouped: 1,500 or 12,345
- Bare runs: 1500 (3-7 digits)
- Currency marked: ¥1,500, ￥1500, 1,500円
- OCR noise: l,5OO → 1500, 1 , 5 0 0 → 1500

Amounts are whole yen; there are no fractional units.
"""

from typing import List, Optional, Pattern
import re

from .normalize import correct_ocr_confusions, join_split_digits

# Upper bound (exclusive) for any amount on a personal receipt
MAX_AMOUNT = 10_000_000
_MAX_AMOUNT_DIGITS = len(str(MAX_AMOUNT))

COMMA_GROUPED = re.compile(r'([0-9]{1,3}(?:,[0-9]{3})+)')
BARE_DIGITS = re.compile(r'([0-9]{3,7})')

_MARKED_COMMA_GROUPED = re.compile(r'[¥￥]?\s*([0-9]{1,3}(?:,[0-9]{3})+)')
_MARKED_BARE_DIGITS = re.compile(r'[¥￥]?\s*([0-9]{3,7})')

CURRENCY_MARKER_PATTERNS = (
    re.compile(r'[¥￥]\s*([0-9,]+)'),
    re.compile(r'([0-9,]+)\s*円'),
)


def parse_yen(amount_str: str) -> Optional[int]:
    """
    Parse a digit string with optional thousands commas into whole yen.

    Runs longer than any valid amount are clamped to MAX_AMOUNT, which every
    range check rejects, so arbitrarily long OCR digit runs are never converted.

    Examples:
        >>> parse_yen("1,500")
        1500
        >>> parse_yen(",")
    """
    if not amount_str:
        return None

    digits = amount_str.replace(',', '').strip()
    if not digits.isdecimal():
        return None
    if len(digits.lstrip('0')) > _MAX_AMOUNT_DIGITS:
        return MAX_AMOUNT
    return int(digits)


def clean_price_text(text: str, numbers_only: bool = True) -> str:
    """Apply OCR confusion correction and rejoin split digits."""
    return join_split_digits(correct_ocr_confusions(text, numbers_only=numbers_only))


def find_price(text: str) -> Optional[int]:
    """
    Find the first price anywhere in a line.

    Comma-grouped numbers are preferred over bare 3-7 digit runs.

    Args:
        text: A single receipt line (half-width digits)

    Returns:
        Amount in yen, or None if no number of price shape is present
    """
    corrected = clean_price_text(text)

    match = COMMA_GROUPED.search(corrected)
    if match:
        return parse_yen(match.group(1))

    match = BARE_DIGITS.search(corrected)
    if match:
        return parse_yen(match.group(1))

    return None


def find_price_after(text: str, keyword: Pattern) -> Optional[int]:
    """
    Find the price immediately following a keyword match in a line.

    Args:
        text: A single receipt line (half-width digits)
        keyword: Compiled keyword pattern (e.g. 合計)

    Returns:
        Amount in yen, or None if the keyword or a following number is missing
    """
    keyword_match = keyword.search(text)
    if not keyword_match:
        return None

    # Whole-tail correction: "合計 lOOO円" reads as 1000
    after_keyword = clean_price_text(text[keyword_match.end():], numbers_only=False)

    match = _MARKED_COMMA_GROUPED.search(after_keyword)
    if match:
        return parse_yen(match.group(1))

    match = _MARKED_BARE_DIGITS.search(after_keyword)
    if match:
        return parse_yen(match.group(1))

    return None


def find_marked_prices(text: str) -> List[int]:
    """
    Find every amount carrying a currency marker (¥1,500 or 1,500円).

    Args:
        text: Full receipt text (half-width digits)

    Returns:
        Parsed amounts in order of appearance, markers scanned in table order
    """
    amounts = []
    for pattern in CURRENCY_MARKER_PATTERNS:
        for match in pattern.finditer(text):
            value = parse_yen(match.group(1))
            if value is not None:
                amounts.append(value)
    return amounts


def is_valid_amount(amount: Optional[int]) -> bool:
    """Amounts must be positive and below MAX_AMOUNT."""
    return amount is not None and 0 < amount < MAX_AMOUNT


def format_yen(amount: Optional[int]) -> str:
    """
    Format whole yen for display.

    Examples:
        >>> format_yen(1500)
        '¥1,500'
    """
    if amount is None:
        return 'N/A'
    return f"¥{amount:,}"
