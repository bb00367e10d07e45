"""Write rendered charts to disk."""

from __future__ import annotations

__all__ = ["PNG_SCALE", "PngExportUnavailable", "write_png", "write_svg"]

from pathlib import Path

PNG_SCALE = 2


class PngExportUnavailable(RuntimeError):
    """Raised when PNG output is requested without cairosvg installed."""


def write_svg(svg: str, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(svg, encoding="utf-8")
    return path


def write_png(svg: str, path: str | Path, scale: float = PNG_SCALE) -> Path:
    """Rasterize *svg* with cairosvg (install the ``png`` extra)."""
    try:
        import cairosvg
    except ImportError as exc:
        raise PngExportUnavailable(
            "PNG export needs cairosvg: pip install 'spc-labels[png]'"
        ) from exc

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    cairosvg.svg2png(bytestring=svg.encode("utf-8"), write_to=str(path), scale=scale)
    return path
