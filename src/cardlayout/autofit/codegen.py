"""
Module: autofit.codegen

Purpose:
    Script form of the auto-fit algorithms. Emits plain ES5 JavaScript
    from the canonical programs in autofit.program, for embedding in a
    framework-free static HTML document (export, download, headless
    capture).

Key Functions:
    - emit_function(): Program -> JavaScript function declaration
    - generate_title_fit_script(): Algorithm A, runs at once and after fonts load
    - generate_viewport_fit_script(): Algorithm B, deferred ~50ms
    - generate_fit_text_script(): Algorithm C for a selector
    - generate_bottom_reserve_script(): Reserve space below the composition
    - generate_layout_apply_script(): Apply a LayoutDescriptor to static DOM

Dependencies:
    - json (std): JavaScript string literals
    - autofit.program: Program tree

Used By:
    - cardlayout.export.document: Static document assembly
"""

from __future__ import annotations

import json
import logging
from typing import List, Union

from cardlayout.config import DEFAULT_FIT_CONFIG, FitConfig
from cardlayout.layout.calculator import LayoutDescriptor
from cardlayout.layout.columns import ColumnWidth
from cardlayout.layout.title_config import TitleFitConfig

from .program import (
    All,
    Assign,
    BinOp,
    COMPUTED_FONT_SIZE,
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

INDENT = "  "

# Event other scripts dispatch when they change the layout
LAYOUT_CHANGE_EVENT = "p2v:layout-change"

# Inline width for a lone card (two thirds of the card zone)
SINGLE_CARD_WIDTH = "66.666%"

# Class tokens identifying the outer container when .main-container is absent
CONTAINER_CLASS_TOKENS = (
    "container",
    "flex",
    "flex-col",
    "items-center",
    "justify-center",
    "w-full",
    "h-full",
)

# Host inputs; each maps to a helper function emitted alongside the program
_ENV_READERS = {
    ENV_BOTTOM_RESERVE: (
        "readBottomReserve",
        """function readBottomReserve() {
  try {
    return parseFloat(document.documentElement.dataset.p2vBottomReserved || '0') || 0;
  } catch (e) {
    return 0;
  }
}""",
    ),
}


def js_string(value: str) -> str:
    """JavaScript string literal, safe inside an inline ``<script>``."""
    return json.dumps(value).replace("</", "<\\/")


def js_string_json(value: object) -> str:
    """JSON object literal with sorted keys, safe inside an inline ``<script>``."""
    return json.dumps(value, sort_keys=True).replace("</", "<\\/")


# ─────────────────────────────────────────────────────────────────────────────
# Emitter
# ─────────────────────────────────────────────────────────────────────────────

def emit_expr(node: Expr, *, top: bool = False) -> str:
    """
    Emit a JavaScript expression.

    Nested operators are parenthesized, so precedence never depends on
    JavaScript's operator table.
    """
    if isinstance(node, Const):
        if isinstance(node.value, str):
            return js_string(node.value)
        return js_number(node.value)
    if isinstance(node, Var):
        return node.name
    if isinstance(node, Env):
        try:
            return f"{_ENV_READERS[node.name][0]}()"
        except KeyError:
            raise ValueError(f"No script reader for host input {node.name!r}")
    if isinstance(node, Measure):
        if node.prop == COMPUTED_FONT_SIZE:
            return f"parseFloat(window.getComputedStyle({node.target}).fontSize)"
        return f"{node.target}.{node.prop}"
    if isinstance(node, Not):
        return f"!{emit_expr(node.operand)}"
    if isinstance(node, Max):
        return f"Math.max({emit_expr(node.left, top=True)}, {emit_expr(node.right, top=True)})"
    if isinstance(node, BinOp):
        text = f"{emit_expr(node.left)} {node.op} {emit_expr(node.right)}"
    elif isinstance(node, All):
        text = " && ".join(emit_expr(term) for term in node.terms)
    else:
        raise ValueError(f"Cannot emit expression: {node!r}")
    return text if top else f"({text})"


def _emit_style_value(parts: tuple) -> str:
    if not parts:
        return "''"
    return " + ".join(
        js_string(part) if isinstance(part, str) else emit_expr(part)
        for part in parts
    )


def emit_statements(body: tuple[Stmt, ...], depth: int) -> List[str]:
    """Emit statements as indented JavaScript lines."""
    pad = INDENT * depth
    lines: List[str] = []
    for stmt in body:
        if isinstance(stmt, Let):
            lines.append(f"{pad}var {stmt.name} = {emit_expr(stmt.value, top=True)};")
        elif isinstance(stmt, Assign):
            lines.append(f"{pad}{stmt.name} = {emit_expr(stmt.value, top=True)};")
        elif isinstance(stmt, SetStyle):
            lines.append(
                f"{pad}{stmt.target}.style.{stmt.prop} = {_emit_style_value(stmt.parts)};"
            )
        elif isinstance(stmt, While):
            lines.append(f"{pad}while ({emit_expr(stmt.condition, top=True)}) {{")
            lines.extend(emit_statements(stmt.body, depth + 1))
            lines.append(f"{pad}}}")
        elif isinstance(stmt, If):
            lines.append(f"{pad}if ({emit_expr(stmt.condition, top=True)}) {{")
            lines.extend(emit_statements(stmt.then, depth + 1))
            if stmt.orelse:
                lines.append(f"{pad}}} else {{")
                lines.extend(emit_statements(stmt.orelse, depth + 1))
            lines.append(f"{pad}}}")
        elif isinstance(stmt, Return):
            lines.append(f"{pad}return;")
        else:
            raise ValueError(f"Cannot emit statement: {stmt!r}")
    return lines


def _uses_env(body: tuple, found: set) -> set:
    """Collect Env names referenced anywhere in a statement list."""
    def visit(node: object) -> None:
        if isinstance(node, Env):
            found.add(node.name)
        elif isinstance(node, tuple):
            for item in node:
                visit(item)
        elif hasattr(node, "__dataclass_fields__"):
            for name in node.__dataclass_fields__:
                visit(getattr(node, name))
    visit(body)
    return found


def emit_function(program: Program, depth: int = 1) -> str:
    """
    Emit a program as a JavaScript function declaration.

    Single targets resolve the first matching selector and return early
    when nothing matches. ``many`` targets run the body once per element.
    """
    pad = INDENT * depth
    inner = INDENT * (depth + 1)
    target = program.target
    lines: List[str] = []

    for env_name in sorted(_uses_env(program.body, set())):
        lines.extend(pad + line for line in _ENV_READERS[env_name][1].splitlines())

    if target.many:
        item = INDENT * (depth + 2)
        lines.append(f"{pad}function {program.name}() {{")
        lines.append(f"{inner}var els = document.querySelectorAll({js_string(target.selectors[0])});")
        lines.append(f"{inner}for (var i = 0; i < els.length; i++) {{")
        lines.append(f"{item}(function({target.name}) {{")
        lines.append(f"{item}{INDENT}if (!{target.name}) return;")
        lines.extend(emit_statements(program.body, depth + 3))
        lines.append(f"{item}}})(els[i]);")
        lines.append(f"{inner}}}")
        lines.append(f"{pad}}}")
        return "\n".join(lines)

    lookup = " ||\n".join(
        f"{inner}{INDENT}document.querySelector({js_string(selector)})"
        for selector in target.selectors
    )
    lines.append(f"{pad}function {program.name}() {{")
    lines.append(f"{inner}var {target.name} =\n{lookup};")
    lines.append(f"{inner}if (!{target.name}) return;")
    lines.extend(emit_statements(program.body, depth + 1))
    lines.append(f"{pad}}}")
    return "\n".join(lines)


def _font_wait(callback: str, fit_config: FitConfig) -> str:
    """
    Re-run ``callback`` once web fonts have loaded (or a timeout passed).

    Reduces layout drift between the first paint and the final fonts.
    """
    timeout = fit_config.font_wait_timeout_ms
    defer = fit_config.viewport_defer_ms
    return f"""
  try {{
    var hasFonts = document.fonts && document.fonts.ready;
    if (hasFonts) {{
      Promise.race([
        document.fonts.ready,
        new Promise(function(resolve) {{ return setTimeout(resolve, {timeout}); }}),
      ]).then(function() {{
        requestAnimationFrame(function() {{
          {callback}();
          setTimeout({callback}, {defer});
        }});
      }});
    }} else {{
      setTimeout({callback}, {defer});
    }}
  }} catch (_) {{}}
"""


# ─────────────────────────────────────────────────────────────────────────────
# Public scripts
# ─────────────────────────────────────────────────────────────────────────────

def generate_title_fit_script(
    config: TitleFitConfig,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
) -> str:
    """
    Generate the title shrink script (Algorithm A).

    Runs immediately when the script is parsed and again after fonts
    load; every run restarts from the initial font size.

    Args:
        config: Title fit configuration
        fit_config: Guard ceiling and timing

    Returns:
        JavaScript source for a ``<script>`` tag
    """
    program = title_fit_program(config, fit_config.guard_limit)
    return f"""
(function() {{
{emit_function(program)}

  {program.name}();
{_font_wait(program.name, fit_config)}}})();
"""


def generate_viewport_fit_script(fit_config: FitConfig = DEFAULT_FIT_CONFIG) -> str:
    """
    Generate the viewport scale script (Algorithm B).

    The first run is deferred by ``fit_config.viewport_defer_ms`` so the
    title pass and layout settle first; later runs follow font loading,
    window resizes and layout-change events, coalesced per frame.

    Returns:
        JavaScript source for a ``<script>`` tag
    """
    program = viewport_fit_program(fit_config)
    return f"""
(function() {{
{emit_function(program)}

  var rafId = 0;
  function scheduleFit() {{
    if (typeof requestAnimationFrame !== 'function') {{
      {program.name}();
      return;
    }}
    if (rafId) cancelAnimationFrame(rafId);
    rafId = requestAnimationFrame(function() {{
      rafId = 0;
      {program.name}();
    }});
  }}

  setTimeout({program.name}, {fit_config.viewport_defer_ms});
  window.addEventListener('resize', scheduleFit);
  window.addEventListener({js_string(LAYOUT_CHANGE_EVENT)}, scheduleFit);
{_font_wait("scheduleFit", fit_config)}}})();
"""


def generate_fit_text_script(
    selector: str,
    min_font_size: float = 12,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
) -> str:
    """Generate the per-element text fit script (Algorithm C) for ``selector``."""
    program = text_fit_program(selector, min_font_size, fit_config.text_fit_guard_limit)
    return f"""
(function() {{
{emit_function(program)}

  {program.name}();
{_font_wait(program.name, fit_config)}}})();
"""


def generate_bottom_reserve_script(
    reserve_px: Union[int, float] = DEFAULT_FIT_CONFIG.bottom_reserved_px,
) -> str:
    """
    Generate the bottom reserve script.

    Publishes the reserve on ``<html data-p2v-bottom-reserved>`` (read by
    the viewport fit), pads the main container by the reserve on top of
    its own padding, and announces the change. Templates without a
    ``.main-container`` fall back to the first element whose class names
    contain every token in CONTAINER_CLASS_TOKENS. Re-running replaces the
    previous reserve instead of adding to it.

    Args:
        reserve_px: Pixels to keep free below the composition

    Raises:
        ValueError: If reserve_px is negative
    """
    if reserve_px < 0:
        raise ValueError(f"reserve_px must be non-negative: {reserve_px}")
    class_test = " &&\n".join(
        f"          cn.indexOf({js_string(token)}) !== -1" for token in CONTAINER_CLASS_TOKENS
    )
    return f"""
(function() {{
  var reserve = {js_number(reserve_px)};
  function apply() {{
    try {{ document.documentElement.dataset.p2vBottomReserved = String(reserve); }} catch (e) {{}}

    var target = document.querySelector('.main-container');
    if (!target) {{
      var all = document.querySelectorAll('*');
      for (var i = 0; i < all.length; i++) {{
        var el = all[i];
        if (!(el instanceof HTMLElement)) continue;
        var cn = el.className;
        if (typeof cn !== 'string') continue;
        if (
{class_test}
        ) {{
          target = el;
          break;
        }}
      }}
    }}
    if (!target) return;

    var prevReserve = 0;
    if (target.dataset && target.dataset.bottomReserved) {{
      prevReserve = parseFloat(target.dataset.bottomReserved) || 0;
    }}

    var basePb = NaN;
    if (target.dataset && target.dataset.p2vBasePaddingBottom) {{
      basePb = parseFloat(target.dataset.p2vBasePaddingBottom);
    }}
    if (!isFinite(basePb)) {{
      var currentPb = 0;
      try {{ currentPb = parseFloat(getComputedStyle(target).paddingBottom) || 0; }} catch (e) {{}}
      basePb = currentPb - prevReserve;
      if (!isFinite(basePb) || basePb < 0) basePb = currentPb;
    }}

    target.style.paddingBottom = (basePb + reserve) + 'px';
    target.style.boxSizing = 'border-box';
    if (target.dataset) {{
      target.dataset.p2vBasePaddingBottom = String(basePb);
      target.dataset.bottomReserved = String(reserve);
    }}

    try {{
      window.dispatchEvent(new Event({js_string(LAYOUT_CHANGE_EVENT)}));
    }} catch (e) {{}}
  }}

  if (document.readyState === 'loading') {{
    document.addEventListener('DOMContentLoaded', apply, {{ once: true }});
  }} else {{
    apply();
  }}
  window.addEventListener('load', apply, {{ once: true }});
}})();
"""


def generate_layout_apply_script(layout: LayoutDescriptor) -> str:
    """
    Generate a script applying a LayoutDescriptor to a static document.

    Sets the card width, card padding and icon size on every
    ``.card-item``, the gap on ``.card-zone`` and the gap and horizontal
    inset on ``.content-wrapper``. A single card gets an inline 66.666%
    width so the document does not depend on a utility class being
    present in the stylesheet.

    Args:
        layout: Descriptor from calculate_standard_layout()

    Returns:
        JavaScript source for a ``<script>`` tag
    """
    layout_json = js_string_json(layout.to_dict())
    return f"""
(function() {{
  var layout = {layout_json};
  var widthClasses = ['w-2/3', 'card-width-2col', 'card-width-3col', 'card-width-4col'];

  var cards = document.querySelectorAll('.card-item');
  for (var i = 0; i < cards.length; i++) {{
    var card = cards[i];
    for (var j = 0; j < widthClasses.length; j++) card.classList.remove(widthClasses[j]);
    card.style.width = '';
    if (layout.cardWidthClass === {js_string(ColumnWidth.SINGLE.value)}) {{
      card.style.width = {js_string(SINGLE_CARD_WIDTH)};
    }} else {{
      card.classList.add(layout.cardWidthClass);
    }}
    card.style.padding = layout.cardPadding;
    var icon = card.querySelector('.js-icon, .material-symbols-rounded, .material-icons');
    if (icon) icon.style.fontSize = layout.iconSize;
  }}

  var zone = document.querySelector('.card-zone');
  if (zone) {{
    zone.style.gap = layout.containerGap;
    try {{ zone.style.setProperty('--container-gap', layout.containerGap); }} catch (e) {{}}
  }}

  var wrapper = document.querySelector('.content-wrapper');
  if (wrapper) {{
    wrapper.style.gap = layout.wrapperGap;
    wrapper.style.paddingLeft = layout.wrapperPaddingX;
    wrapper.style.paddingRight = layout.wrapperPaddingX;
  }}
}})();
"""
