"""
Module: layout.title_config

Purpose:
    Title shrink-to-fit configuration per card-count bucket.
    Uses its own buckets and override shape; title fitting is tuned
    separately from card geometry.

Key Functions:
    - get_standard_title_config(): Resolve TitleFitConfig for a card count
    - title_bucket(): Map card count to its bucket label

Key Classes:
    - TitleFitConfig: Immutable {initial, min} font size plus loop settings

Dependencies:
    - dataclasses (std)
    - layout.tiers: validate_card_count

Used By:
    - cardlayout.autofit: Title shrink program
    - cardlayout.export.document: Exported title fit script
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional

from cardlayout.config import DEFAULT_TITLE_MAX_WIDTH_PX

from .tiers import validate_card_count

logger = logging.getLogger(__name__)

# {bucket label: {"initial_font_size"|"initialFontSize"|...: px}}
TitleOverrides = Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class TitleFitConfig:
    """
    Settings for the title shrink loop (immutable).

    Attributes:
        initial_font_size: Font size (px) applied before measuring
        min_font_size: Floor (px) the loop never shrinks below
        max_width: Width budget (px) the title must fit in
        step: Pixels removed per iteration

    Example:
        >>> TitleFitConfig(initial_font_size=90, min_font_size=45).max_width
        1700
    """

    initial_font_size: float
    min_font_size: float
    max_width: float = DEFAULT_TITLE_MAX_WIDTH_PX
    step: float = 1

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.min_font_size <= 0:
            raise ValueError(f"min_font_size must be positive: {self.min_font_size}")
        if self.initial_font_size < self.min_font_size:
            raise ValueError(
                f"initial_font_size ({self.initial_font_size}) must be >= "
                f"min_font_size ({self.min_font_size})"
            )
        if self.max_width <= 0:
            raise ValueError(f"max_width must be positive: {self.max_width}")
        if self.step <= 0:
            raise ValueError(f"step must be positive: {self.step}")


# (upper bound inclusive, bucket label); anything above is "9+"
_TITLE_BUCKETS: tuple[tuple[int, str], ...] = (
    (3, "1-3"),
    (4, "4"),
    (6, "5-6"),
    (8, "7-8"),
)
_LAST_BUCKET = "9+"

DEFAULT_TITLE_CONFIGS: Mapping[str, TitleFitConfig] = MappingProxyType({
    "1-3": TitleFitConfig(initial_font_size=90, min_font_size=45),
    "4": TitleFitConfig(initial_font_size=80, min_font_size=40),
    "5-6": TitleFitConfig(initial_font_size=72, min_font_size=36),
    "7-8": TitleFitConfig(initial_font_size=64, min_font_size=32),
    "9+": TitleFitConfig(initial_font_size=56, min_font_size=30),
})

_FIELD_ALIASES = MappingProxyType({
    "initialFontSize": "initial_font_size",
    "minFontSize": "min_font_size",
    "maxWidth": "max_width",
    "initial_font_size": "initial_font_size",
    "min_font_size": "min_font_size",
    "max_width": "max_width",
    "step": "step",
})


def title_bucket(card_count: int) -> str:
    """Bucket label ("1-3", "4", "5-6", "7-8", "9+") for a card count."""
    validate_card_count(card_count)
    for upper, label in _TITLE_BUCKETS:
        if card_count <= upper:
            return label
    return _LAST_BUCKET


def get_standard_title_config(
    card_count: int,
    overrides: Optional[TitleOverrides] = None,
    *,
    max_width: Optional[float] = None,
    step: Optional[float] = None,
) -> TitleFitConfig:
    """
    Resolve the title fit configuration for a card count.

    Overrides are merged per field over the bucket's defaults; unknown
    bucket labels are ignored.

    Args:
        card_count: Number of cards (N >= 1)
        overrides: Optional partial per-bucket overrides
        max_width: Optional width budget replacing the default 1700px
        step: Optional shrink step (some styles use 2px)

    Returns:
        TitleFitConfig for the bucket

    Raises:
        InvalidCardCountError: If card_count is invalid
        ValueError: If the merged values are inconsistent

    Example:
        >>> get_standard_title_config(5).initial_font_size
        72
    """
    bucket = title_bucket(card_count)
    config = DEFAULT_TITLE_CONFIGS[bucket]

    changes: dict[str, Any] = {}
    if overrides:
        unknown = sorted(k for k in overrides if k not in DEFAULT_TITLE_CONFIGS)
        if unknown:
            logger.debug(f"Ignoring title overrides for unknown buckets: {unknown}")
        for name, value in (overrides.get(bucket) or {}).items():
            field_name = _FIELD_ALIASES.get(name)
            if field_name is None:
                logger.warning(f"Ignoring unknown title field {name!r} in bucket {bucket}")
                continue
            changes[field_name] = value
    if max_width is not None:
        changes["max_width"] = max_width
    if step is not None:
        changes["step"] = step

    return replace(config, **changes) if changes else config
