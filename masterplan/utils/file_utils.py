"""File utilities."""
from __future__ import annotations

from pathlib import Path

from masterplan.utils.config import settings


def ensure_dir(path: str) -> Path:
    """Ensure directory exists and return Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def save_svg(name: str, svg_text: str) -> str:
    """Write a rendered diagram under the output directory and return its path."""
    output_dir = ensure_dir(settings.output_dir)
    path = Path(output_dir) / f"{name}.svg"
    path.write_text(svg_text, encoding="utf-8")
    return str(path)
