"""Top-level package for the card layout engine.

Provides subpackages:
- cardlayout.layout – tier/column tables and the standard layout calculator
- cardlayout.autofit – title shrink and viewport scale, native and script forms
- cardlayout.export – standalone HTML documents for the static export path
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    # In dev mode, read directly from pyproject.toml
    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    # Fallback to importlib.metadata for installed package
    try:
        from importlib.metadata import PackageNotFoundError, version as pkg_version
        return pkg_version("cardlayout")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()

from .config import FitConfig, DEFAULT_FIT_CONFIG
from .layout import (
    InvalidCardCountError,
    LayoutDescriptor,
    Tier,
    TitleFitConfig,
    calculate_standard_layout,
    get_standard_title_config,
)
from .autofit import (
    generate_title_fit_script,
    generate_viewport_fit_script,
    fit_title,
    fit_viewport,
)

__all__ = [
    "__version__",
    "FitConfig",
    "DEFAULT_FIT_CONFIG",
    "InvalidCardCountError",
    "LayoutDescriptor",
    "Tier",
    "TitleFitConfig",
    "calculate_standard_layout",
    "get_standard_title_config",
    "generate_title_fit_script",
    "generate_viewport_fit_script",
    "fit_title",
    "fit_viewport",
]
