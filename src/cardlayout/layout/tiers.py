"""
Module: layout.tiers

Purpose:
    Classify a card count into a density tier.
    Tiers control font sizes and spacing; they are deliberately
    independent of the column geometry in layout.columns.

Key Functions:
    - classify_tier(): Map card count N to a Tier
    - validate_card_count(): Reject non-positive / non-integer counts

Key Classes:
    - Tier: Density tier enum
    - InvalidCardCountError: Raised for invalid card counts

Dependencies:
    - enum (std)

Used By:
    - layout.params: Per-tier parameter lookup
    - layout.calculator: Standard layout aggregation
"""

from __future__ import annotations

from enum import Enum


class InvalidCardCountError(ValueError):
    """Card count is not a positive integer."""
    pass


class Tier(str, Enum):
    """
    Density tier derived from the card count.

    Breakpoints:
        1-3 -> TIER1, 4 -> TIER1_5, 5-6 -> TIER2, 7-8 -> TIER2_5, 9+ -> TIER3
    """

    TIER1 = "tier1"
    TIER1_5 = "tier1_5"
    TIER2 = "tier2"
    TIER2_5 = "tier2_5"
    TIER3 = "tier3"


# (upper bound inclusive, tier); anything above the last bound is TIER3
_TIER_BREAKPOINTS: tuple[tuple[int, Tier], ...] = (
    (3, Tier.TIER1),
    (4, Tier.TIER1_5),
    (6, Tier.TIER2),
    (8, Tier.TIER2_5),
)


def validate_card_count(card_count: object) -> int:
    """
    Check that card_count is a positive integer.

    Booleans are rejected even though they subclass int.

    Args:
        card_count: Value supplied by the caller

    Returns:
        The card count unchanged

    Raises:
        InvalidCardCountError: If card_count is not an int >= 1
    """
    if isinstance(card_count, bool) or not isinstance(card_count, int):
        raise InvalidCardCountError(
            f"card_count must be an integer, got {type(card_count).__name__}: {card_count!r}"
        )
    if card_count < 1:
        raise InvalidCardCountError(f"card_count must be >= 1, got {card_count}")
    return card_count


def classify_tier(card_count: int) -> Tier:
    """
    Map a card count to its density tier.

    Args:
        card_count: Number of cards (N >= 1)

    Returns:
        The Tier for N

    Raises:
        InvalidCardCountError: If card_count is invalid

    Example:
        >>> classify_tier(4)
        <Tier.TIER1_5: 'tier1_5'>
    """
    validate_card_count(card_count)
    for upper, tier in _TIER_BREAKPOINTS:
        if card_count <= upper:
            return tier
    return Tier.TIER3
