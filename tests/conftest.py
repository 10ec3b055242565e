import math
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

# Add src to sys.path so we can import cardlayout
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from cardlayout.autofit.elements import FitElement, parse_px  # noqa: E402


class StubElement(FitElement):
    """
    Scriptable FitElement for fit-loop tests.

    Widths are computed from the current font size by ``width_fn``;
    every style write is recorded in ``writes``.
    """

    def __init__(
        self,
        width_fn: Optional[Callable[[float], Optional[float]]] = None,
        *,
        height: Optional[float] = 0.0,
        client_width: Optional[float] = None,
        base_font_size: Optional[float] = 16.0,
        error: Optional[Exception] = None,
    ) -> None:
        self.width_fn = width_fn or (lambda size: 0.0)
        self.height = height
        self.client_width = client_width
        self.base_font_size = base_font_size
        self.error = error
        self.style: Dict[str, str] = {}
        self.writes: List[Tuple[str, str]] = []

    @property
    def font_size(self) -> Optional[float]:
        inline = parse_px(self.style.get("fontSize"))
        return inline if inline is not None else self.base_font_size

    def measure(self, prop: str) -> Optional[float]:
        if self.error is not None:
            raise self.error
        if prop == "scrollWidth":
            size = self.font_size
            return self.width_fn(size) if size is not None else None
        if prop == "clientWidth":
            return self.client_width
        if prop == "scrollHeight":
            return self.height
        if prop == "fontSize":
            return self.font_size
        return None

    def set_style(self, prop: str, value: str) -> None:
        self.writes.append((prop, value))
        if value:
            self.style[prop] = value
        else:
            self.style.pop(prop, None)


@pytest.fixture
def stub_element():
    """Factory for StubElement instances."""
    return StubElement


@pytest.fixture
def always_overflowing():
    """Width function that never fits (2000px at any size)."""
    return lambda size: 2000.0


@pytest.fixture
def unmeasurable():
    """Width function for an element that reports NaN."""
    return lambda size: math.nan
