"""
Module: export.document

Purpose:
    Assemble the standalone HTML document for the static export path.
    The document has no component framework; an inline script applies
    the computed layout and runs the generated fit passes in order:
    layout, bottom reserve, title fit, viewport fit.

Key Functions:
    - build_layout_script(): The combined inline ``<script>`` element
    - build_static_document(): Full HTML document around a rendered body

Dependencies:
    - html (std): Escaping
    - layout: calculate_standard_layout, get_standard_title_config
    - autofit.codegen: Generated scripts

Used By:
    - Export, download and headless capture pipelines (external)
"""

from __future__ import annotations

import html
import logging
from typing import Optional

from cardlayout.autofit.codegen import (
    generate_bottom_reserve_script,
    generate_layout_apply_script,
    generate_title_fit_script,
    generate_viewport_fit_script,
)
from cardlayout.config import DEFAULT_FIT_CONFIG, FitConfig
from cardlayout.layout import (
    TitleFitConfig,
    calculate_standard_layout,
    get_standard_title_config,
)
from cardlayout.layout.params import LayoutOverrides

logger = logging.getLogger(__name__)


def build_layout_script(
    card_count: int,
    *,
    layout_overrides: Optional[LayoutOverrides] = None,
    title_config: Optional[TitleFitConfig] = None,
    bottom_reserved_px: Optional[float] = None,
    apply_layout: bool = True,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
) -> str:
    """
    Build the inline script element for a static document.

    Args:
        card_count: Number of cards in the composition
        layout_overrides: Optional per-tier parameter overrides
        title_config: Title fit configuration; standard config for N otherwise
        bottom_reserved_px: Bottom reserve; fit_config default otherwise
        apply_layout: Include the layout application script (skip when the
            body was serialized from a live page that already applied it)
        fit_config: Canvas, guard and timing settings

    Returns:
        ``<script>...</script>`` markup

    Raises:
        InvalidCardCountError: If card_count is invalid
    """
    title_config = title_config or get_standard_title_config(
        card_count, max_width=fit_config.title_max_width
    )
    reserve = fit_config.bottom_reserved_px if bottom_reserved_px is None else bottom_reserved_px

    parts = []
    if apply_layout:
        parts.append(generate_layout_apply_script(
            calculate_standard_layout(card_count, layout_overrides)
        ))
    parts.append(generate_bottom_reserve_script(reserve))
    parts.append(generate_title_fit_script(title_config, fit_config))
    parts.append(generate_viewport_fit_script(fit_config))
    return f"<script>{''.join(parts)}</script>"


def build_static_document(
    body_html: str,
    card_count: int,
    *,
    title: str = "",
    head_html: str = "",
    layout_overrides: Optional[LayoutOverrides] = None,
    title_config: Optional[TitleFitConfig] = None,
    bottom_reserved_px: Optional[float] = None,
    apply_layout: bool = True,
    fit_config: FitConfig = DEFAULT_FIT_CONFIG,
) -> str:
    """
    Wrap a rendered composition in a standalone HTML document.

    The page is pinned to the canvas size; the inline script reproduces
    the live component's fit behavior.

    Args:
        body_html: Rendered composition markup (trusted, inserted verbatim)
        card_count: Number of cards in the composition
        title: Document ``<title>`` (escaped)
        head_html: Extra head markup such as stylesheet links (trusted)
        layout_overrides: Optional per-tier parameter overrides
        title_config: Title fit configuration override
        bottom_reserved_px: Bottom reserve override
        apply_layout: Include the layout application script
        fit_config: Canvas, guard and timing settings

    Returns:
        Complete HTML document

    Example:
        >>> doc = build_static_document("<div class='main-container'>...</div>", 5)
        >>> doc.startswith("<!DOCTYPE html>")
        True
    """
    script = build_layout_script(
        card_count,
        layout_overrides=layout_overrides,
        title_config=title_config,
        bottom_reserved_px=bottom_reserved_px,
        apply_layout=apply_layout,
        fit_config=fit_config,
    )
    width = fit_config.canvas_width
    height = fit_config.canvas_height
    logger.debug(f"Building static document for {card_count} cards ({len(body_html)} chars)")

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{html.escape(title)}</title>
    {head_html}
    <style>
      html, body {{ margin: 0; padding: 0; width: {width}px; height: {height}px; overflow: hidden; }}
      body {{ background: transparent; }}
      .content-wrapper {{ transform-origin: center center; }}
    </style>
  </head>
  <body>
    {body_html}
    {script}
  </body>
</html>
"""
