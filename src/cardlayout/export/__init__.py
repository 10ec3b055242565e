"""
Module: cardlayout.export

Purpose:
    Static export path: standalone HTML documents whose inline script
    reproduces the live layout and fit behavior.

Key Functions:
    - build_static_document(): Full HTML document
    - build_layout_script(): Inline script element only
"""

from .document import build_layout_script, build_static_document

__all__ = [
    "build_layout_script",
    "build_static_document",
]
