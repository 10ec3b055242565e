"""
Module: autofit.native

Purpose:
    Native form of the auto-fit algorithms. Interprets the canonical
    programs from autofit.program against FitElement objects, and drives
    them through a small mount/update lifecycle.

Key Functions:
    - execute(): Run a Program with a bound element
    - fit_title(): Algorithm A
    - fit_viewport(): Algorithm B
    - fit_text(): Algorithm C over several elements
    - fit_composition(): A then B, in the required order

Key Classes:
    - TitleFitResult, ViewportFitResult, TextFitResult: Final fit state
    - CompositionFit: Both passes of one run
    - AutoFitter: Re-runs the passes on mount and on every change
    - ProgramError: Malformed program

Dependencies:
    - autofit.program: Program tree
    - autofit.elements: FitElement

Used By:
    - autofit.browser: Live DOM equivalence runs
    - Server-side pre-fitting before export
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Union

from cardlayout.config import DEFAULT_FIT_CONFIG, FitConfig
from cardlayout.layout.title_config import TitleFitConfig, get_standard_title_config

from .elements import FitElement
from .program import (
    All,
    Assign,
    BinOp,
    Const,
    ENV_BOTTOM_RESERVE,
    Env,
    Expr,
    If,
    Let,
    Max,
    Measure,
    Not,
    Program,
    Return,
    SetStyle,
    Stmt,
    Var,
    While,
    js_number,
    text_fit_program,
    title_fit_program,
    viewport_fit_program,
)

logger = logging.getLogger(__name__)

Value = Union[float, bool, str]


class ProgramError(Exception):
    """Program references an unbound name or an unsupported node."""
    pass


class _ReturnSignal(Exception):
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Interpreter
# ─────────────────────────────────────────────────────────────────────────────

class _Frame:
    """Transient state of one program run; discarded when the run ends."""

    def __init__(
        self,
        program: Program,
        element: FitElement,
        env: Mapping[str, float],
    ) -> None:
        self.program = program
        self.element = element
        self.env = env
        self.variables: Dict[str, Value] = {}

    def measure(self, node: Measure) -> float:
        if node.target != self.program.target.name:
            raise ProgramError(f"Unbound target {node.target!r} in {self.program.name}")
        try:
            value = self.element.measure(node.prop)
        except (OSError, RuntimeError, ValueError) as e:
            logger.debug(f"{self.program.name}: {node.prop} unavailable ({e}), treating as 0")
            return 0.0
        if value is None or not math.isfinite(value):
            # Unmeasurable elements behave as if they already fit
            return 0.0
        return float(value)

    def evaluate(self, node: Expr) -> Value:
        if isinstance(node, Const):
            return node.value
        if isinstance(node, Var):
            try:
                return self.variables[node.name]
            except KeyError:
                raise ProgramError(f"Undefined variable {node.name!r} in {self.program.name}")
        if isinstance(node, Env):
            return float(self.env.get(node.name, 0.0))
        if isinstance(node, Measure):
            return self.measure(node)
        if isinstance(node, All):
            result: Value = True
            for term in node.terms:
                result = self.evaluate(term)
                if not result:
                    return result
            return result
        if isinstance(node, Not):
            return not self.evaluate(node.operand)
        if isinstance(node, Max):
            return max(self.evaluate(node.left), self.evaluate(node.right))
        if isinstance(node, BinOp):
            return _apply(node.op, self.evaluate(node.left), self.evaluate(node.right))
        raise ProgramError(f"Unsupported expression: {node!r}")

    def format_parts(self, parts: Iterable[object]) -> str:
        chunks = []
        for part in parts:
            if isinstance(part, str):
                chunks.append(part)
                continue
            value = self.evaluate(part)
            chunks.append(value if isinstance(value, str) else js_number(value))
        return "".join(chunks)

    def run(self, body: Iterable[Stmt]) -> None:
        for stmt in body:
            if isinstance(stmt, (Let, Assign)):
                if isinstance(stmt, Assign) and stmt.name not in self.variables:
                    raise ProgramError(f"Assignment to undeclared {stmt.name!r}")
                self.variables[stmt.name] = self.evaluate(stmt.value)
            elif isinstance(stmt, SetStyle):
                self.element.set_style(stmt.prop, self.format_parts(stmt.parts))
            elif isinstance(stmt, While):
                while self.evaluate(stmt.condition):
                    self.run(stmt.body)
            elif isinstance(stmt, If):
                self.run(stmt.then if self.evaluate(stmt.condition) else stmt.orelse)
            elif isinstance(stmt, Return):
                raise _ReturnSignal()
            else:
                raise ProgramError(f"Unsupported statement: {stmt!r}")


def _apply(op: str, left: Value, right: Value) -> Value:
    if op == ">":
        return left > right
    if op == "<":
        return left < right
    if op == ">=":
        return left >= right
    if op == "<=":
        return left <= right
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            return math.inf if left > 0 else (0.0 if left == 0 else -math.inf)
        return left / right
    raise ProgramError(f"Unsupported operator: {op!r}")


def execute(
    program: Program,
    element: Optional[FitElement],
    env: Optional[Mapping[str, float]] = None,
) -> Optional[Dict[str, Value]]:
    """
    Run a program with its target bound to ``element``.

    Args:
        program: Program to interpret
        element: Element bound to ``program.target``; None skips the run
        env: Host inputs read by Env nodes (missing names read as 0)

    Returns:
        Final variables of the run, or None if there was no element

    Raises:
        ProgramError: If the program is malformed
    """
    if element is None:
        logger.debug(f"{program.name}: no target element, skipping")
        return None
    frame = _Frame(program, element, env or {})
    try:
        frame.run(program.body)
    except _ReturnSignal:
        pass
    return dict(frame.variables)


# ─────────────────────────────────────────────────────────────────────────────
# Algorithms
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TitleFitResult:
    """
    Final state of a title shrink pass.

    Attributes:
        font_size: Font size (px) left applied to the title
        iterations: Loop iterations performed (the guard counter)
    """
    font_size: float
    iterations: int


@dataclass(frozen=True)
class ViewportFitResult:
    """
    Final state of a viewport scale pass.

    Attributes:
        content_height: Measured wrapper scrollHeight (px)
        max_height: Height budget after the bottom reserve (px)
        scale: Applied scale factor (1.0 when the transform was cleared)
    """
    content_height: float
    max_height: float
    scale: float

    @property
    def scaled(self) -> bool:
        """Whether a transform was applied."""
        return self.content_height > self.max_height


@dataclass(frozen=True)
class TextFitResult:
    """Final state of one element in a text fit pass (font_size 0 = skipped)."""
    font_size: float
    iterations: int


@dataclass(frozen=True)
class CompositionFit:
    """Results of one title + viewport run; either may be None if unbound."""
    title: Optional[TitleFitResult]
    viewport: Optional[ViewportFitResult]


def fit_title(
    title: Optional[FitElement],
    config: TitleFitConfig,
    *,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
) -> Optional[TitleFitResult]:
    """
    Shrink a title until it fits its width budget (Algorithm A).

    Always restarts from ``config.initial_font_size`` so repeated runs
    never drift. Zero-width or unmeasurable titles are treated as
    already fitting.

    Args:
        title: Title element, or None if not mounted
        config: Title fit configuration
        fit_config: Supplies the guard ceiling

    Returns:
        TitleFitResult, or None if there is no title

    Example:
        >>> result = fit_title(el, TitleFitConfig(initial_font_size=60, min_font_size=30))
        >>> result.font_size <= 60
        True
    """
    program = title_fit_program(config, fit_config.guard_limit)
    state = execute(program, title)
    if state is None:
        return None
    result = TitleFitResult(font_size=state["size"], iterations=int(state["guard"]))
    if result.iterations >= fit_config.guard_limit:
        logger.debug(f"Title fit stopped by guard at {result.font_size}px")
    else:
        logger.debug(f"Title fit: {result.font_size}px after {result.iterations} steps")
    return result


def fit_viewport(
    wrapper: Optional[FitElement],
    *,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
    bottom_reserve: float = 0.0,
) -> Optional[ViewportFitResult]:
    """
    Scale the composition down to the canvas height budget (Algorithm B).

    Sets an absolute ``scale(...)`` transform when the content is too
    tall and clears it otherwise, so the pass is idempotent.

    Args:
        wrapper: Composition wrapper element, or None if not mounted
        fit_config: Canvas height, safety margin and minimum scale
        bottom_reserve: Extra pixels reserved below the composition

    Returns:
        ViewportFitResult, or None if there is no wrapper
    """
    program = viewport_fit_program(fit_config)
    state = execute(program, wrapper, {ENV_BOTTOM_RESERVE: bottom_reserve})
    if state is None:
        return None
    result = ViewportFitResult(
        content_height=state["contentH"],
        max_height=state["maxH"],
        scale=float(state["scale"]),
    )
    logger.debug(
        f"Viewport fit: content {result.content_height}px / {result.max_height}px "
        f"-> scale {result.scale}"
    )
    return result


def fit_text(
    elements: Iterable[FitElement],
    min_font_size: float = 12,
    *,
    selector: str = "*",
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
) -> List[TextFitResult]:
    """
    Shrink each element until its content fits its own box (Algorithm C).

    Args:
        elements: Elements to fit, in document order
        min_font_size: Floor (px)
        selector: Selector the elements were matched with (names the program)
        fit_config: Supplies the per-element guard ceiling

    Returns:
        One TextFitResult per element
    """
    program = text_fit_program(selector, min_font_size, fit_config.text_fit_guard_limit)
    results = []
    for element in elements:
        state = execute(program, element) or {}
        results.append(TextFitResult(
            font_size=float(state.get("fontSize", 0.0)),
            iterations=int(state.get("guard", 0)),
        ))
    return results


def fit_composition(
    title: Optional[FitElement],
    wrapper: Optional[FitElement],
    title_config: TitleFitConfig,
    *,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
    bottom_reserve: float = 0.0,
) -> CompositionFit:
    """Run the title pass, then the viewport pass (title size feeds the height)."""
    title_result = fit_title(title, title_config, fit_config=fit_config)
    viewport_result = fit_viewport(
        wrapper, fit_config=fit_config, bottom_reserve=bottom_reserve
    )
    return CompositionFit(title=title_result, viewport=viewport_result)


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────

class AutoFitter:
    """
    Native fit driver for a live composition.

    Runs both passes after mount and again after every content or
    card-count change. Each run restarts from the initial font size and
    recomputes the transform from scratch.

    Example:
        >>> fitter = AutoFitter(title_el, wrapper_el, card_count=5)
        >>> fitter.mount()
        >>> fitter.update(card_count=9)  # re-resolves the title config
    """

    def __init__(
        self,
        title: Optional[FitElement],
        wrapper: Optional[FitElement],
        *,
        card_count: int,
        title_config: Optional[TitleFitConfig] = None,
        fit_config: FitConfig = DEFAULT_FIT_CONFIG,
        bottom_reserve: float = 0.0,
    ) -> None:
        self.title = title
        self.wrapper = wrapper
        self.fit_config = fit_config
        self.bottom_reserve = bottom_reserve
        self._explicit_config = title_config
        self._card_count = card_count
        self._title_config = title_config or self._standard_config(card_count)
        self._content_key: Optional[Hashable] = None
        self._mounted = False
        self.last_fit: Optional[CompositionFit] = None

    def _standard_config(self, card_count: int) -> TitleFitConfig:
        return get_standard_title_config(
            card_count, max_width=self.fit_config.title_max_width
        )

    @property
    def title_config(self) -> TitleFitConfig:
        return self._title_config

    @property
    def card_count(self) -> int:
        return self._card_count

    def _run(self) -> CompositionFit:
        self.last_fit = fit_composition(
            self.title,
            self.wrapper,
            self._title_config,
            fit_config=self.fit_config,
            bottom_reserve=self.bottom_reserve,
        )
        return self.last_fit

    def mount(self) -> CompositionFit:
        """Run both passes for the first time."""
        self._mounted = True
        return self._run()

    def update(
        self,
        *,
        card_count: Optional[int] = None,
        content_key: Optional[Hashable] = None,
        force: bool = False,
    ) -> Optional[CompositionFit]:
        """
        Re-run the passes if the card count or content changed.

        Args:
            card_count: New card count; re-resolves the standard title config
            content_key: Any hashable fingerprint of the rendered content
            force: Run even if nothing changed

        Returns:
            The new CompositionFit, or None if nothing ran
        """
        changed = force
        if card_count is not None and card_count != self._card_count:
            self._card_count = card_count
            if self._explicit_config is None:
                self._title_config = self._standard_config(card_count)
            changed = True
        if content_key is not None and content_key != self._content_key:
            self._content_key = content_key
            changed = True

        if not self._mounted or not changed:
            return None
        return self._run()
