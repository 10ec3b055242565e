"""
Module: cardlayout.autofit

Purpose:
    Dual-mode auto-fit: shrink an overflowing title, scale an overflowing
    composition. Each algorithm is one program (autofit.program) with a
    native interpreter (autofit.native) and a JavaScript emitter
    (autofit.codegen).

Key Functions:
    - fit_title(), fit_viewport(), fit_text(), fit_composition(): Native form
    - generate_title_fit_script(), generate_viewport_fit_script(): Script form

Key Classes:
    - FitElement: Measurable element interface
    - AutoFitter: Native mount/update driver

Dependencies:
    - PIL: Server-side text measurement
    - playwright (optional): autofit.browser only, not imported here

Used By:
    - cardlayout.export: Static document scripts
"""

from .program import (
    Program,
    Target,
    js_number,
    text_fit_program,
    title_fit_program,
    viewport_fit_program,
)
from .elements import FitElement, PillowTextElement, StackElement
from .native import (
    AutoFitter,
    CompositionFit,
    ProgramError,
    TextFitResult,
    TitleFitResult,
    ViewportFitResult,
    execute,
    fit_composition,
    fit_text,
    fit_title,
    fit_viewport,
)
from .codegen import (
    emit_function,
    generate_bottom_reserve_script,
    generate_fit_text_script,
    generate_layout_apply_script,
    generate_title_fit_script,
    generate_viewport_fit_script,
)

__all__ = [
    # Programs
    "Program",
    "Target",
    "js_number",
    "title_fit_program",
    "viewport_fit_program",
    "text_fit_program",
    # Elements
    "FitElement",
    "PillowTextElement",
    "StackElement",
    # Native form
    "AutoFitter",
    "CompositionFit",
    "ProgramError",
    "TitleFitResult",
    "ViewportFitResult",
    "TextFitResult",
    "execute",
    "fit_title",
    "fit_viewport",
    "fit_text",
    "fit_composition",
    # Script form
    "emit_function",
    "generate_title_fit_script",
    "generate_viewport_fit_script",
    "generate_fit_text_script",
    "generate_bottom_reserve_script",
    "generate_layout_apply_script",
]
