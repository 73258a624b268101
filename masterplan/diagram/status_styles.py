"""Status-keyed colours and labels for diagram regions."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict

from masterplan.models.hierarchy import EntityStatus

HOVER_FILL_ALPHA = 0.35
BASE_STROKE_WIDTH = "2"
HOVER_STROKE_WIDTH = "4"
FOCUS_OUTLINE = "3px solid #1E3A5F"

_RGBA_RE = re.compile(r"rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*[\d.]+\s*\)")


@dataclass(frozen=True)
class StatusColors:
    fill: str
    stroke: str
    indicator: str


STATUS_COLORS: Dict[EntityStatus, StatusColors] = {
    EntityStatus.AVAILABLE: StatusColors(
        fill="rgba(107, 175, 123, 0.12)", stroke="#6BAF7B", indicator="#6BAF7B"
    ),
    EntityStatus.RESERVED: StatusColors(
        fill="rgba(212, 162, 76, 0.12)", stroke="#D4A24C", indicator="#D4A24C"
    ),
    EntityStatus.SOLD: StatusColors(
        fill="rgba(196, 96, 90, 0.12)", stroke="#C4605A", indicator="#C4605A"
    ),
    EntityStatus.NOT_AVAILABLE: StatusColors(
        fill="rgba(94, 90, 93, 0.12)", stroke="#5E5A5D", indicator="#5E5A5D"
    ),
}

STATUS_LABELS: Dict[EntityStatus, str] = {
    EntityStatus.AVAILABLE: "Disponible",
    EntityStatus.RESERVED: "Reservado",
    EntityStatus.SOLD: "Vendido",
    EntityStatus.NOT_AVAILABLE: "No Disponible",
}


def status_colors(status: EntityStatus | str) -> StatusColors:
    """Return the fill/stroke/indicator triple for a status."""
    return STATUS_COLORS[EntityStatus(status)]


def status_label(status: EntityStatus | str) -> str:
    return STATUS_LABELS[EntityStatus(status)]


def hover_fill(fill: str) -> str:
    """Brighten an rgba fill by raising its alpha to the hover level."""
    match = _RGBA_RE.fullmatch(fill.strip())
    if not match:
        return fill
    r, g, b = match.groups()
    return f"rgba({r}, {g}, {b}, {HOVER_FILL_ALPHA})"
