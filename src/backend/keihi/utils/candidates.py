"""
Candidate dataclasses for amount extraction.

Each candidate represents a potential total found next to a keyword,
with the metadata used for selection.
"""

from dataclasses import dataclass
from typing import Optional

from .money import is_valid_amount


@dataclass(frozen=True)
class AmountCandidate:
    """
    Candidate for the receipt total.

    Selection factors:
    - priority: Keyword priority (higher = stronger total indicator)
    - line_index: Line the keyword was found on (earlier wins ties)
    """
    amount: int
    priority: int
    line_index: int
    label: str  # Keyword that anchored the amount (e.g. 合計金額)


def create_amount_candidate(
    amount: Optional[int],
    priority: int,
    line_index: int,
    label: str
) -> Optional[AmountCandidate]:
    """
    Create AmountCandidate if the amount is in range.

    Args:
        amount: Parsed amount, possibly None
        priority: Priority of the keyword that anchored it
        line_index: Index of the keyword line
        label: Keyword label

    Returns:
        AmountCandidate, or None when 0 < amount < 10,000,000 does not hold
    """
    if not is_valid_amount(amount):
        return None
    return AmountCandidate(amount=amount, priority=priority, line_index=line_index, label=label)
