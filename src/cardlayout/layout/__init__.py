"""
Module: cardlayout.layout

Purpose:
    Deterministic responsive layout engine.
    Converts a card count into every sizing/spacing parameter a
    template needs, plus the title fit configuration.

Key Functions:
    - calculate_standard_layout(): Resolve the LayoutDescriptor
    - get_standard_title_config(): Resolve the TitleFitConfig
    - classify_tier(): Card count -> density tier
    - resolve_column_width(): Card count -> column width class

Key Classes:
    - Tier, ColumnWidth: Independent breakpoint enums
    - TierParameters, LayoutDescriptor, TitleFitConfig: Immutable values

Dependencies:
    - None beyond the standard library

Used By:
    - cardlayout.autofit: Title shrink program
    - cardlayout.export: Static document assembly
"""

from .tiers import Tier, InvalidCardCountError, classify_tier, validate_card_count
from .params import TierParameters, DEFAULT_LAYOUT_TIERS, resolve_tier_parameters
from .columns import ColumnWidth, resolve_column_width, resolve_wrapper_padding_x
from .calculator import LayoutDescriptor, calculate_standard_layout, card_theme_color
from .title_config import (
    TitleFitConfig,
    DEFAULT_TITLE_CONFIGS,
    get_standard_title_config,
    title_bucket,
)

__all__ = [
    # Tiers
    "Tier",
    "InvalidCardCountError",
    "classify_tier",
    "validate_card_count",
    # Parameters
    "TierParameters",
    "DEFAULT_LAYOUT_TIERS",
    "resolve_tier_parameters",
    # Columns
    "ColumnWidth",
    "resolve_column_width",
    "resolve_wrapper_padding_x",
    # Calculator
    "LayoutDescriptor",
    "calculate_standard_layout",
    "card_theme_color",
    # Title
    "TitleFitConfig",
    "DEFAULT_TITLE_CONFIGS",
    "get_standard_title_config",
    "title_bucket",
]
