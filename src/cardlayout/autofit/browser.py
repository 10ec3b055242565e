"""
Module: autofit.browser

Purpose:
    Run the native fit interpreter against a live browser DOM through
    Playwright. Used to prove the native and generated forms converge on
    the same page, and to fit pages in headless capture pipelines.

Key Functions:
    - bind_target(): Resolve a program's selectors the way the script does
    - fit_page(): Native title + viewport fit on a Playwright page

Key Classes:
    - PlaywrightElement: FitElement over a Playwright ElementHandle

Dependencies:
    - playwright (optional "browser" extra): sync API

Used By:
    - tests/autofit/test_browser_equivalence.py
"""

from __future__ import annotations

import logging
from typing import Optional

from playwright.sync_api import ElementHandle, Error as PlaywrightError, Page

from cardlayout.config import DEFAULT_FIT_CONFIG, FitConfig
from cardlayout.layout.title_config import TitleFitConfig

from .elements import FitElement
from .native import CompositionFit, fit_composition
from .program import COMPUTED_FONT_SIZE, Program, title_fit_program, viewport_fit_program

logger = logging.getLogger(__name__)

_READ_PROP_JS = "(el, prop) => el[prop]"
_READ_FONT_SIZE_JS = "el => parseFloat(window.getComputedStyle(el).fontSize)"
_WRITE_STYLE_JS = "(el, args) => { el.style[args[0]] = args[1]; }"
_READ_RESERVE_JS = (
    "() => parseFloat(document.documentElement.dataset.p2vBottomReserved || '0') || 0"
)


class PlaywrightElement(FitElement):
    """
    FitElement backed by a Playwright ElementHandle.

    Measurement errors (detached element, closed page) read as None so
    the interpreter treats the element as already fitting.
    """

    def __init__(self, handle: ElementHandle) -> None:
        self.handle = handle

    def measure(self, prop: str) -> Optional[float]:
        try:
            if prop == COMPUTED_FONT_SIZE:
                value = self.handle.evaluate(_READ_FONT_SIZE_JS)
            else:
                value = self.handle.evaluate(_READ_PROP_JS, prop)
        except PlaywrightError as e:
            logger.debug(f"Could not measure {prop}: {e}")
            return None
        return float(value) if isinstance(value, (int, float)) else None

    def set_style(self, prop: str, value: str) -> None:
        self.handle.evaluate(_WRITE_STYLE_JS, [prop, value])


def bind_target(page: Page, program: Program) -> Optional[PlaywrightElement]:
    """Resolve the first selector of ``program.target`` that matches, like the script does."""
    for selector in program.target.selectors:
        handle = page.query_selector(selector)
        if handle is not None:
            return PlaywrightElement(handle)
    return None


def fit_page(
    page: Page,
    title_config: TitleFitConfig,
    *,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
) -> CompositionFit:
    """
    Fit the composition on ``page`` with the native interpreter.

    The bottom reserve is read from the page, as the generated script
    reads it.

    Args:
        page: Page holding a rendered composition
        title_config: Title fit configuration
        fit_config: Canvas and guard settings

    Returns:
        CompositionFit with the final font size and scale
    """
    title = bind_target(page, title_fit_program(title_config, fit_config.guard_limit))
    wrapper = bind_target(page, viewport_fit_program(fit_config))
    reserve = float(page.evaluate(_READ_RESERVE_JS) or 0)
    return fit_composition(
        title,
        wrapper,
        title_config,
        fit_config=fit_config,
        bottom_reserve=reserve,
    )
