"""
Module: autofit.elements

Purpose:
    Measurable element abstraction used by the native fit interpreter,
    plus server-side implementations backed by Pillow font metrics.

Key Classes:
    - FitElement: Abstract measurable/stylable element
    - PillowTextElement: Single-line text measured with Pillow
    - StackElement: Vertical stack (title + cards) for height fitting

Dependencies:
    - PIL: Font loading and text metrics

Used By:
    - autofit.native: Interpreter and AutoFitter
    - autofit.browser: Playwright-backed implementation
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from PIL import ImageFont

from .program import CLIENT_WIDTH, COMPUTED_FONT_SIZE, SCROLL_HEIGHT, SCROLL_WIDTH

logger = logging.getLogger(__name__)

_PX_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)px\s*$")

DEFAULT_FONT_SIZE_PX = 16.0
DEFAULT_LINE_HEIGHT = 1.1


class FitElement(ABC):
    """
    Element the fit algorithms measure and restyle.

    Mirrors the small part of the DOM the algorithms touch:
    ``scrollWidth``, ``scrollHeight``, ``clientWidth``, the computed
    font size, and inline style writes.
    """

    @abstractmethod
    def measure(self, prop: str) -> Optional[float]:
        """
        Read a measurement by its DOM name.

        Args:
            prop: One of scrollWidth, scrollHeight, clientWidth, fontSize

        Returns:
            Measured value in px, or None if the element cannot be measured
        """

    @abstractmethod
    def set_style(self, prop: str, value: str) -> None:
        """Write an inline style property; an empty string clears it."""


def parse_px(value: Optional[str]) -> Optional[float]:
    """Parse a CSS pixel length like ``"42px"``; anything else gives None."""
    if not value:
        return None
    match = _PX_RE.match(value)
    return float(match.group(1)) if match else None


@lru_cache(maxsize=256)
def _load_font(font_path: Optional[str], size: int) -> Optional[ImageFont.FreeTypeFont]:
    """
    Load a TrueType font for measurement.

    Tries the explicit path first, then common system fonts, then
    Pillow's bundled default font.

    Args:
        font_path: Optional path to a .ttf/.otf file
        size: Font size in px (rounded by the caller)

    Returns:
        Font object, or None if nothing could be loaded
    """
    font_options = [font_path] if font_path else []
    font_options += [
        "DejaVuSans.ttf",
        "Arial.ttf",
        "arial.ttf",
        "LiberationSans-Regular.ttf",
    ]

    for font_name in font_options:
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.warning("Could not load TrueType font, using default")
    try:
        return ImageFont.load_default(size=size)
    except (IOError, OSError, TypeError) as e:
        logger.debug(f"Default font unavailable: {e}")
        return None


class PillowTextElement(FitElement):
    """
    Single-line text measured with Pillow font metrics.

    Used to pre-fit titles on the server before a document is exported,
    so the static HTML already carries a close font size. Widths are
    rounded up to whole pixels like the DOM's ``scrollWidth``.

    Attributes:
        text: Text content
        font_path: Optional font file; system fallbacks otherwise
        line_height: Line height multiplier for ``scrollHeight``
        box_width: Fixed ``clientWidth``; defaults to the content width
        style: Inline styles written by the fit passes

    Example:
        >>> el = PillowTextElement("Quarterly results")
        >>> el.set_style("fontSize", "60px")
        >>> el.measure("scrollWidth") > 0
        True
    """

    def __init__(
        self,
        text: str,
        *,
        font_path: Optional[Union[str, Path]] = None,
        base_font_size: float = DEFAULT_FONT_SIZE_PX,
        line_height: float = DEFAULT_LINE_HEIGHT,
        box_width: Optional[float] = None,
    ) -> None:
        self.text = text
        self.font_path = str(font_path) if font_path else None
        self.base_font_size = base_font_size
        self.line_height = line_height
        self.box_width = box_width
        self.style: Dict[str, str] = {}

    @property
    def font_size(self) -> float:
        """Inline font size if set, otherwise the base (stylesheet) size."""
        inline = parse_px(self.style.get("fontSize"))
        return inline if inline is not None else self.base_font_size

    def _text_width(self) -> Optional[float]:
        size = self.font_size
        if size <= 0 or not self.text:
            return 0.0
        font = _load_font(self.font_path, max(1, round(size)))
        if font is None:
            return None
        return float(math.ceil(font.getlength(self.text)))

    def measure(self, prop: str) -> Optional[float]:
        if prop == SCROLL_WIDTH:
            width = self._text_width()
            if width is None or self.box_width is None:
                return width
            return max(width, float(self.box_width))
        if prop == CLIENT_WIDTH:
            if self.box_width is not None:
                return float(self.box_width)
            return self._text_width()
        if prop == SCROLL_HEIGHT:
            return float(math.ceil(self.font_size * self.line_height))
        if prop == COMPUTED_FONT_SIZE:
            return self.font_size
        return None

    def set_style(self, prop: str, value: str) -> None:
        if value:
            self.style[prop] = value
        else:
            self.style.pop(prop, None)

    def __repr__(self) -> str:
        return f"PillowTextElement({self.text!r}, font_size={self.font_size})"


class StackElement(FitElement):
    """
    Vertical stack of children with gaps, e.g. title above the card zone.

    ``scrollHeight`` is the sum of child heights plus gaps and padding;
    transforms written to ``style`` do not change it, just as CSS
    transforms do not affect layout height.

    Attributes:
        children: Child elements or fixed pixel heights
        gap: Vertical gap between children (px)
        padding: Vertical padding added once at top and bottom (px)
        style: Inline styles written by the fit passes
    """

    def __init__(
        self,
        children: Sequence[Union[FitElement, float]],
        *,
        gap: float = 0.0,
        padding: float = 0.0,
        width: Optional[float] = None,
    ) -> None:
        self.children = list(children)
        self.gap = gap
        self.padding = padding
        self.width = width
        self.style: Dict[str, str] = {}

    def _child_height(self, child: Union[FitElement, float]) -> float:
        if isinstance(child, FitElement):
            return child.measure(SCROLL_HEIGHT) or 0.0
        return float(child)

    def measure(self, prop: str) -> Optional[float]:
        if prop == SCROLL_HEIGHT:
            heights = [self._child_height(c) for c in self.children]
            gaps = self.gap * max(0, len(heights) - 1)
            return float(math.ceil(sum(heights) + gaps + 2 * self.padding))
        if prop in (SCROLL_WIDTH, CLIENT_WIDTH):
            return self.width
        if prop == COMPUTED_FONT_SIZE:
            return parse_px(self.style.get("fontSize")) or DEFAULT_FONT_SIZE_PX
        return None

    def set_style(self, prop: str, value: str) -> None:
        if value:
            self.style[prop] = value
        else:
            self.style.pop(prop, None)
