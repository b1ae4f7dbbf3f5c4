"""
Selection functions for extraction candidates.
"""

from typing import Iterable, List, Optional

from .candidates import AmountCandidate

__all__ = ['rank_amounts', 'select_best_amount', 'select_max_amount']


def rank_amounts(candidates: Iterable[AmountCandidate]) -> List[AmountCandidate]:
    """
    Order candidates by keyword priority, highest first.

    The sort is stable, so candidates with equal priority keep the
    order in which they were found.
    """
    return sorted(candidates, key=lambda c: c.priority, reverse=True)


def select_best_amount(candidates: Iterable[AmountCandidate]) -> Optional[AmountCandidate]:
    """
    Select the highest-priority candidate.

    Args:
        candidates: Candidates in the order they were found

    Returns:
        Best candidate or None if no candidates
    """
    ranked = rank_amounts(candidates)
    return ranked[0] if ranked else None


def select_max_amount(amounts: Iterable[Optional[int]], low: int, high: int, low_inclusive: bool = False) -> Optional[int]:
    """
    Select the largest amount inside a range.

    Args:
        amounts: Parsed amounts (None entries are ignored)
        low: Lower bound
        high: Upper bound (exclusive)
        low_inclusive: Whether ``low`` itself is accepted

    Returns:
        Largest amount in range, or None
    """
    best = None
    for amount in amounts:
        if amount is None or amount >= high:
            continue
        if amount < low or (amount == low and not low_inclusive):
            continue
        if best is None or amount > best:
            best = amount
    return best
