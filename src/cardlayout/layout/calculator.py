"""
Module: layout.calculator

Purpose:
    Aggregate tier parameters, column width and wrapper inset into one
    LayoutDescriptor. Purely compositional; every rule lives in the
    leaf modules.

Key Functions:
    - calculate_standard_layout(): Main entry point for templates
    - card_theme_color(): Cyclic palette assignment for card i

Key Classes:
    - LayoutDescriptor: Fully resolved rendering parameters

Dependencies:
    - layout.tiers, layout.params, layout.columns

Used By:
    - cardlayout.export.document: Layout application script
    - Visual templates (external)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

from .columns import resolve_column_width, resolve_wrapper_padding_x
from .params import LayoutOverrides, resolve_tier_parameters
from .tiers import Tier, classify_tier

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LayoutDescriptor:
    """
    Resolved layout for one card composition (immutable).

    Produced fresh per call and never cached, so two calls with the
    same arguments compare equal but share no mutable state.

    Attributes:
        card_count: Number of cards the layout was computed for
        tier: Density tier of the card count
        card_width_class: CSS class sizing each card
        title_size_class: CSS class for the title
        desc_size_class: CSS class for descriptions
        icon_size: Icon size (CSS length)
        wrapper_gap: Title/card-zone gap (CSS length)
        container_gap: Inter-card gap (CSS length)
        card_padding: Inner card padding (CSS length)
        wrapper_padding_x: Extra horizontal wrapper inset (CSS length)
    """

    card_count: int
    tier: Tier
    card_width_class: str
    title_size_class: str
    desc_size_class: str
    icon_size: str
    wrapper_gap: str
    container_gap: str
    card_padding: str
    wrapper_padding_x: str

    def to_dict(self) -> dict[str, object]:
        """Serialize with the camelCase keys used by template scripts."""
        return {
            "cardCount": self.card_count,
            "tier": self.tier.value,
            "cardWidthClass": self.card_width_class,
            "titleSizeClass": self.title_size_class,
            "descSizeClass": self.desc_size_class,
            "iconSize": self.icon_size,
            "wrapperGap": self.wrapper_gap,
            "containerGap": self.container_gap,
            "cardPadding": self.card_padding,
            "wrapperPaddingX": self.wrapper_padding_x,
        }


def calculate_standard_layout(
    card_count: int,
    overrides: Optional[LayoutOverrides] = None,
) -> LayoutDescriptor:
    """
    Compute the standard card layout for a card count.

    Args:
        card_count: Number of cards (N >= 1)
        overrides: Optional partial per-tier parameter overrides

    Returns:
        Fully populated LayoutDescriptor

    Raises:
        InvalidCardCountError: If card_count is not a positive integer

    Example:
        >>> layout = calculate_standard_layout(4)
        >>> layout.tier, layout.card_width_class
        (<Tier.TIER1_5: 'tier1_5'>, 'card-width-2col')
    """
    tier = classify_tier(card_count)
    params = resolve_tier_parameters(tier, overrides)
    width = resolve_column_width(card_count)

    layout = LayoutDescriptor(
        card_count=card_count,
        tier=tier,
        card_width_class=width.value,
        title_size_class=params.title_size_class,
        desc_size_class=params.desc_size_class,
        icon_size=params.icon_size,
        wrapper_gap=params.wrapper_gap,
        container_gap=params.container_gap,
        card_padding=params.card_padding,
        wrapper_padding_x=resolve_wrapper_padding_x(card_count),
    )
    logger.debug(f"Layout for {card_count} cards: {tier.value}, {layout.card_width_class}")
    return layout


def card_theme_color(themes: Sequence[T], index: int) -> T:
    """
    Pick the palette entry for card ``index``, cycling through ``themes``.

    Raises:
        ValueError: If themes is empty
    """
    if not themes:
        raise ValueError("themes must not be empty")
    return themes[index % len(themes)]
