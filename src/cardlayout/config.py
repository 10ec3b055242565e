"""
Module: cardlayout.config

Purpose:
    Canvas and auto-fit constants shared by the layout engine, the native
    fit interpreter and the script generator. Immutable configuration with
    validation on construction.

Key Classes:
    - FitConfig: Immutable canvas/fit configuration

Dependencies:
    - dataclasses (std)

Used By:
    - cardlayout.autofit.program: Constants baked into fit programs
    - cardlayout.autofit.codegen: Timing constants for generated scripts
    - cardlayout.export.document: Canvas size of exported documents
"""

from __future__ import annotations

from dataclasses import dataclass


# Fixed 1920x1080 canvas
CANVAS_WIDTH_PX = 1920
CANVAS_HEIGHT_PX = 1080

# Vertical breathing room kept free below the scaled composition
SAFETY_MARGIN_PX = 40

DEFAULT_TITLE_MAX_WIDTH_PX = 1700
DEFAULT_MIN_SCALE = 0.6
DEFAULT_GUARD_LIMIT = 100
DEFAULT_TEXT_FIT_GUARD_LIMIT = 50
DEFAULT_BOTTOM_RESERVED_PX = 100


@dataclass(frozen=True)
class FitConfig:
    """
    Configuration for the auto-fit passes (immutable).

    The defaults reproduce the fixed canvas contract: titles must fit within
    1700px and the composition must fit within 1040px (1080px canvas minus a
    40px safety margin), never scaling below 0.6.

    Attributes:
        canvas_width: Canvas width in pixels
        canvas_height: Canvas height in pixels
        safety_margin: Pixels subtracted from canvas height for the fit budget
        title_max_width: Width budget for the title shrink loop
        min_scale: Lower clamp for the viewport scale factor
        guard_limit: Iteration ceiling for the title shrink loop
        text_fit_guard_limit: Iteration ceiling for per-element text fit
        viewport_defer_ms: Delay before the generated viewport fit runs
        font_wait_timeout_ms: Upper bound on waiting for web fonts
        bottom_reserved_px: Default bottom reserve for exported documents

    Example:
        >>> config = FitConfig()
        >>> config.max_content_height
        1040
    """

    # Canvas
    canvas_width: int = CANVAS_WIDTH_PX
    canvas_height: int = CANVAS_HEIGHT_PX
    safety_margin: int = SAFETY_MARGIN_PX

    # Title shrink
    title_max_width: int = DEFAULT_TITLE_MAX_WIDTH_PX
    guard_limit: int = DEFAULT_GUARD_LIMIT
    text_fit_guard_limit: int = DEFAULT_TEXT_FIT_GUARD_LIMIT

    # Viewport scale
    min_scale: float = DEFAULT_MIN_SCALE

    # Timing (generated scripts only)
    viewport_defer_ms: int = 50
    font_wait_timeout_ms: int = 1500

    # Export
    bottom_reserved_px: int = DEFAULT_BOTTOM_RESERVED_PX

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.canvas_width <= 0:
            raise ValueError(f"canvas_width must be positive: {self.canvas_width}")
        if self.canvas_height <= 0:
            raise ValueError(f"canvas_height must be positive: {self.canvas_height}")
        if not 0 <= self.safety_margin < self.canvas_height:
            raise ValueError(f"safety_margin out of range: {self.safety_margin}")
        if self.title_max_width <= 0:
            raise ValueError(f"title_max_width must be positive: {self.title_max_width}")
        if self.guard_limit <= 0:
            raise ValueError(f"guard_limit must be positive: {self.guard_limit}")
        if self.text_fit_guard_limit <= 0:
            raise ValueError(
                f"text_fit_guard_limit must be positive: {self.text_fit_guard_limit}"
            )
        if not 0 < self.min_scale <= 1:
            raise ValueError(f"min_scale must be in (0, 1]: {self.min_scale}")
        if self.viewport_defer_ms < 0:
            raise ValueError(f"viewport_defer_ms must be non-negative: {self.viewport_defer_ms}")
        if self.font_wait_timeout_ms < 0:
            raise ValueError(
                f"font_wait_timeout_ms must be non-negative: {self.font_wait_timeout_ms}"
            )
        if self.bottom_reserved_px < 0:
            raise ValueError(
                f"bottom_reserved_px must be non-negative: {self.bottom_reserved_px}"
            )

    @property
    def max_content_height(self) -> int:
        """Height budget for the whole composition (canvas minus safety margin)."""
        return self.canvas_height - self.safety_margin


DEFAULT_FIT_CONFIG = FitConfig()
