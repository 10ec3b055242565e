"""
Module: layout.columns

Purpose:
    Grid geometry for the card zone: column width class and the extra
    horizontal inset applied to the content wrapper.

    This table is tuned independently from the density tiers in
    layout.tiers; 4 cards use two rows of two, not four columns.

Key Functions:
    - resolve_column_width(): Map card count N to a ColumnWidth
    - resolve_wrapper_padding_x(): Extra horizontal inset for N

Key Classes:
    - ColumnWidth: Column width class enum (value is the CSS class)

Dependencies:
    - layout.tiers: validate_card_count

Used By:
    - layout.calculator: Standard layout aggregation
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from .tiers import validate_card_count


class ColumnWidth(str, Enum):
    """Card width class; the value is the CSS class applied to each card."""

    SINGLE = "w-2/3"
    TWO_COLUMN = "card-width-2col"
    THREE_COLUMN = "card-width-3col"
    FOUR_COLUMN = "card-width-4col"


_COLUMN_TABLE = MappingProxyType({
    1: ColumnWidth.SINGLE,
    2: ColumnWidth.TWO_COLUMN,
    3: ColumnWidth.THREE_COLUMN,
    4: ColumnWidth.TWO_COLUMN,
    5: ColumnWidth.THREE_COLUMN,
    6: ColumnWidth.THREE_COLUMN,
})

# Keeps edge cards off the canvas edge for the wide 3/4 column grids
_WRAPPER_PADDING_X = MappingProxyType({
    3: "160px",
    5: "100px",
    6: "100px",
    7: "60px",
    8: "60px",
})

NO_WRAPPER_PADDING = "0px"


def resolve_column_width(card_count: int) -> ColumnWidth:
    """
    Map a card count to its column width class.

    Args:
        card_count: Number of cards (N >= 1)

    Returns:
        ColumnWidth for N; 7 or more cards always use four columns

    Raises:
        InvalidCardCountError: If card_count is invalid
    """
    validate_card_count(card_count)
    return _COLUMN_TABLE.get(card_count, ColumnWidth.FOUR_COLUMN)


def resolve_wrapper_padding_x(card_count: int) -> str:
    """Horizontal wrapper inset for N: non-zero only for N=3 and 5 <= N <= 8."""
    validate_card_count(card_count)
    return _WRAPPER_PADDING_X.get(card_count, NO_WRAPPER_PADDING)
