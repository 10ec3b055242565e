"""
Module: autofit.program

Purpose:
    Canonical step programs for the auto-fit algorithms.
    Each algorithm is described once as a small immutable tree of
    statements and expressions. The native interpreter (autofit.native)
    executes it against measurable elements, the emitter
    (autofit.codegen) turns the same tree into plain JavaScript, so the
    two forms cannot drift apart.

Key Functions:
    - title_fit_program(): Algorithm A, shrink a title to a width budget
    - viewport_fit_program(): Algorithm B, scale the composition to the canvas
    - text_fit_program(): Algorithm C, shrink every element to its own box
    - js_number(): Format a number exactly as JavaScript's String(number)

Key Classes:
    - Program, Target: A fit pass and the DOM elements it binds
    - Const, Var, Env, Measure, BinOp, All, Max, Not: Expressions
    - Let, Assign, SetStyle, While, If, Return: Statements

Algorithm A (title):
    1. size <- initial; apply
    2. guard <- 0
    3. while width > max_width and size > min and guard < limit:
       size <- size - step; apply; guard <- guard + 1

Algorithm B (viewport):
    1. contentH <- wrapper.scrollHeight
    2. maxH <- max(0, 1040 - bottom reserve)
    3. contentH > maxH: scale <- max(0.6, maxH / contentH), apply centred
       otherwise clear the transform

Dependencies:
    - dataclasses (std)
    - cardlayout.config: FitConfig
    - layout.title_config: TitleFitConfig

Used By:
    - autofit.native: Interpreter
    - autofit.codegen: JavaScript emitter
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Tuple, Union

from cardlayout.config import DEFAULT_FIT_CONFIG, FitConfig
from cardlayout.layout.title_config import TitleFitConfig


# ─────────────────────────────────────────────────────────────────────────────
# Expressions
# ─────────────────────────────────────────────────────────────────────────────

# DOM measurements a program may read
SCROLL_WIDTH = "scrollWidth"
SCROLL_HEIGHT = "scrollHeight"
CLIENT_WIDTH = "clientWidth"
COMPUTED_FONT_SIZE = "fontSize"

MEASUREMENTS = frozenset({SCROLL_WIDTH, SCROLL_HEIGHT, CLIENT_WIDTH, COMPUTED_FONT_SIZE})

# Host-provided inputs
ENV_BOTTOM_RESERVE = "bottomReserve"

BINARY_OPS = frozenset({">", "<", ">=", "<=", "+", "-", "*", "/"})


@dataclass(frozen=True)
class Const:
    value: Union[float, str]


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Env:
    """Value supplied by the host (dataset attribute in scripts, argument natively)."""
    name: str


@dataclass(frozen=True)
class Measure:
    """Read a measurement from a bound target element."""
    target: str
    prop: str

    def __post_init__(self) -> None:
        if self.prop not in MEASUREMENTS:
            raise ValueError(f"Unknown measurement: {self.prop!r}")


@dataclass(frozen=True)
class BinOp:
    op: str
    left: "Expr"
    right: "Expr"

    def __post_init__(self) -> None:
        if self.op not in BINARY_OPS:
            raise ValueError(f"Unsupported operator: {self.op!r}")


@dataclass(frozen=True)
class All:
    """Short-circuit conjunction, evaluated left to right."""
    terms: Tuple["Expr", ...]


@dataclass(frozen=True)
class Max:
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class Not:
    operand: "Expr"


Expr = Union[Const, Var, Env, Measure, BinOp, All, Max, Not]

# Style values are concatenations of literal text and expressions
StylePart = Union[str, Expr]


# ─────────────────────────────────────────────────────────────────────────────
# Statements
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Let:
    name: str
    value: Expr


@dataclass(frozen=True)
class Assign:
    name: str
    value: Expr


@dataclass(frozen=True)
class SetStyle:
    """Write ``target.style[prop]``; an empty ``parts`` clears the property."""
    target: str
    prop: str
    parts: Tuple[StylePart, ...] = ()


@dataclass(frozen=True)
class While:
    condition: Expr
    body: Tuple["Stmt", ...]


@dataclass(frozen=True)
class If:
    condition: Expr
    then: Tuple["Stmt", ...]
    orelse: Tuple["Stmt", ...] = ()


@dataclass(frozen=True)
class Return:
    pass


Stmt = Union[Let, Assign, SetStyle, While, If, Return]


@dataclass(frozen=True)
class Target:
    """
    Element a program operates on.

    Attributes:
        name: Variable name the element is bound to
        selectors: CSS selectors tried in order; the first match wins
        many: Run the body once per element matching ``selectors[0]``
    """
    name: str
    selectors: Tuple[str, ...]
    many: bool = False


@dataclass(frozen=True)
class Program:
    """
    One fit pass.

    Attributes:
        name: Function name used in generated scripts
        target: Element binding
        body: Statements executed with the target bound
    """
    name: str
    target: Target
    body: Tuple[Stmt, ...]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def js_number(value: float) -> str:
    """
    Format a number the way JavaScript's ``String(number)`` does.

    Integral values drop the fractional part ("42", not "42.0"). Other
    values use Python's shortest round-trip digits, written in fixed
    notation from 1e-6 up and in exponent notation ("1.5e-7", "1e+21")
    outside that range, as JavaScript does.
    """
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    text = repr(number)
    if "e" in text and 1e-6 <= abs(number) < 1e21:
        # Python switches to exponents below 1e-4, JavaScript below 1e-6
        return format(Decimal(text), "f")
    if "e" in text:
        mantissa, exponent = text.split("e")
        exp = int(exponent)
        text = f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
    return text


def _gt(left: Expr, right: Expr) -> BinOp:
    return BinOp(">", left, right)


def _lt(left: Expr, right: Expr) -> BinOp:
    return BinOp("<", left, right)


# ─────────────────────────────────────────────────────────────────────────────
# Programs
# ─────────────────────────────────────────────────────────────────────────────

TITLE_SELECTORS: Tuple[str, ...] = (
    ".js-title-text",
    ".main-title",
    ".content-wrapper h1",
    "h1",
)

WRAPPER_SELECTORS: Tuple[str, ...] = (
    ".content-wrapper",
    ".main-container",
)


@lru_cache(maxsize=64)
def title_fit_program(
    config: TitleFitConfig,
    guard_limit: int = DEFAULT_FIT_CONFIG.guard_limit,
) -> Program:
    """
    Build Algorithm A for a title configuration.

    Args:
        config: Initial/min font size, width budget and step
        guard_limit: Iteration ceiling for the shrink loop

    Returns:
        Program binding ``title`` and leaving ``size``/``guard`` as results
    """
    title = "title"
    size = Var("size")
    guard = Var("guard")
    apply_size = SetStyle(title, "fontSize", (size, "px"))

    return Program(
        name="fitTitle",
        target=Target(title, TITLE_SELECTORS),
        body=(
            Let("size", Const(config.initial_font_size)),
            apply_size,
            Let("guard", Const(0)),
            While(
                All((
                    _gt(Measure(title, SCROLL_WIDTH), Const(config.max_width)),
                    _gt(size, Const(config.min_font_size)),
                    _lt(guard, Const(guard_limit)),
                )),
                (
                    Assign("size", BinOp("-", size, Const(config.step))),
                    apply_size,
                    Assign("guard", BinOp("+", guard, Const(1))),
                ),
            ),
        ),
    )


@lru_cache(maxsize=8)
def viewport_fit_program(fit_config: FitConfig = DEFAULT_FIT_CONFIG) -> Program:
    """
    Build Algorithm B.

    The transform is either set absolutely or cleared, so running the
    program repeatedly never compounds the scale.

    Returns:
        Program binding ``wrapper`` and leaving ``contentH``/``maxH``/``scale``
    """
    wrapper = "wrapper"
    content_h = Var("contentH")
    max_h = Var("maxH")

    return Program(
        name="fitViewport",
        target=Target(wrapper, WRAPPER_SELECTORS),
        body=(
            Let("reserve", Env(ENV_BOTTOM_RESERVE)),
            Let("maxH", Max(
                Const(0),
                BinOp("-", Const(fit_config.max_content_height), Var("reserve")),
            )),
            Let("contentH", Measure(wrapper, SCROLL_HEIGHT)),
            Let("scale", Const(1)),
            If(
                _gt(content_h, max_h),
                (
                    Assign("scale", Max(Const(fit_config.min_scale), BinOp("/", max_h, content_h))),
                    SetStyle(wrapper, "transform", ("scale(", Var("scale"), ")")),
                    SetStyle(wrapper, "transformOrigin", ("center center",)),
                ),
                (
                    SetStyle(wrapper, "transform"),
                ),
            ),
        ),
    )


@lru_cache(maxsize=64)
def text_fit_program(
    selector: str,
    min_font_size: float = 12,
    guard_limit: int = DEFAULT_FIT_CONFIG.text_fit_guard_limit,
) -> Program:
    """
    Build Algorithm C: shrink each matching element until it stops overflowing.

    Every element starts from its stylesheet font size (the inline size is
    cleared first) and shrinks 1px at a time while its content is wider
    than its box.

    Args:
        selector: CSS selector for the elements to fit
        min_font_size: Floor (px)
        guard_limit: Iteration ceiling per element
    """
    el = "el"
    font_size = Var("fontSize")
    apply_size = SetStyle(el, "fontSize", (font_size, "px"))

    return Program(
        name="fitText",
        target=Target(el, (selector,), many=True),
        body=(
            SetStyle(el, "fontSize"),
            Let("fontSize", Measure(el, COMPUTED_FONT_SIZE)),
            If(Not(font_size), (Return(),)),
            Let("guard", Const(0)),
            While(
                All((
                    _gt(Measure(el, SCROLL_WIDTH), Measure(el, CLIENT_WIDTH)),
                    _gt(font_size, Const(min_font_size)),
                    _lt(Var("guard"), Const(guard_limit)),
                )),
                (
                    Assign("fontSize", BinOp("-", font_size, Const(1))),
                    apply_size,
                    Assign("guard", BinOp("+", Var("guard"), Const(1))),
                ),
            ),
        ),
    )
