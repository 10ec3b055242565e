"""
Module: layout.params

Purpose:
    Per-tier default layout parameters and caller override merging.

Key Functions:
    - resolve_tier_parameters(): Merge overrides over a tier's defaults

Key Classes:
    - TierParameters: Immutable sizing/spacing values for one tier

Key Constants:
    - DEFAULT_LAYOUT_TIERS: Read-only default table shared by all styles

Dependencies:
    - dataclasses (std)
    - layout.tiers: Tier

Used By:
    - layout.calculator: Standard layout aggregation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from .tiers import Tier

logger = logging.getLogger(__name__)

# {tier key: {field name: value}}; tier keys may be Tier members or their string values
LayoutOverrides = Mapping[Union[Tier, str], Mapping[str, Any]]


@dataclass(frozen=True)
class TierParameters:
    """
    Sizing and spacing values for one density tier (immutable).

    Attributes:
        title_size_class: CSS class for the title text size (e.g. text-5xl)
        desc_size_class: CSS class for card descriptions
        icon_size: Icon size (CSS length)
        wrapper_gap: Gap between title and card zone (CSS length)
        container_gap: Gap between cards (CSS length)
        card_padding: Inner card padding (CSS length)
    """

    title_size_class: str
    desc_size_class: str
    icon_size: str
    wrapper_gap: str
    container_gap: str
    card_padding: str


# camelCase names used by script-side callers
_FIELD_ALIASES = MappingProxyType({
    "titleSizeClass": "title_size_class",
    "descSizeClass": "desc_size_class",
    "iconSize": "icon_size",
    "wrapperGap": "wrapper_gap",
    "containerGap": "container_gap",
    "cardPadding": "card_padding",
})

_FIELD_NAMES = frozenset(f.name for f in fields(TierParameters))


DEFAULT_LAYOUT_TIERS: Mapping[Tier, TierParameters] = MappingProxyType({
    Tier.TIER1: TierParameters(
        title_size_class="text-5-5xl", desc_size_class="text-4xl",
        icon_size="72px", wrapper_gap="72px", container_gap="32px", card_padding="40px",
    ),
    Tier.TIER1_5: TierParameters(
        title_size_class="text-5xl", desc_size_class="text-3-5xl",
        icon_size="68px", wrapper_gap="68px", container_gap="28px", card_padding="36px",
    ),
    Tier.TIER2: TierParameters(
        title_size_class="text-4-5xl", desc_size_class="text-3xl",
        icon_size="64px", wrapper_gap="36px", container_gap="24px", card_padding="32px",
    ),
    # Tighter spacing for 7-8 cards so the viewport rarely has to scale
    Tier.TIER2_5: TierParameters(
        title_size_class="text-4xl", desc_size_class="text-2-5xl",
        icon_size="52px", wrapper_gap="32px", container_gap="20px", card_padding="20px",
    ),
    Tier.TIER3: TierParameters(
        title_size_class="text-3-5xl", desc_size_class="text-2xl",
        icon_size="48px", wrapper_gap="32px", container_gap="12px", card_padding="16px",
    ),
})


_TIER_KEYS = frozenset(t.value for t in Tier)


def _override_for(tier: Tier, overrides: LayoutOverrides) -> Optional[Mapping[str, Any]]:
    """Find the override entry for a tier, accepting enum or string keys."""
    by_value = {(k.value if isinstance(k, Tier) else k): v for k, v in overrides.items()}
    unknown = sorted(str(k) for k in by_value if k not in _TIER_KEYS)
    if unknown:
        logger.debug(f"Ignoring overrides for unknown tier keys: {unknown}")
    return by_value.get(tier.value)


def _normalize_fields(tier: Tier, entry: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for name, value in entry.items():
        field_name = _FIELD_ALIASES.get(name, name)
        if field_name not in _FIELD_NAMES:
            logger.warning(f"Ignoring unknown layout field {name!r} in {tier.value} override")
            continue
        normalized[field_name] = value
    return normalized


def resolve_tier_parameters(
    tier: Tier,
    overrides: Optional[LayoutOverrides] = None,
) -> TierParameters:
    """
    Resolve the parameters for a tier, applying caller overrides.

    Merging is shallow and per field: any field present in
    ``overrides[tier]`` wins, every other field keeps its default.
    Unknown tier keys are ignored so older callers keep working when
    tiers are added. The default table is never mutated.

    Args:
        tier: Tier to resolve
        overrides: Optional partial per-tier override mapping

    Returns:
        A new or shared (when nothing is overridden) TierParameters

    Example:
        >>> resolve_tier_parameters(Tier.TIER1, {"tier1": {"iconSize": "999px"}}).icon_size
        '999px'
    """
    defaults = DEFAULT_LAYOUT_TIERS[tier]
    if not overrides:
        return defaults

    entry = _override_for(tier, overrides)
    if not entry:
        return defaults

    changes = _normalize_fields(tier, entry)
    return replace(defaults, **changes) if changes else defaults
