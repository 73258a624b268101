"""Synthesized on-diagram labels for bound regions."""
from __future__ import annotations

from xml.etree import ElementTree as ET

from masterplan.diagram.status_styles import StatusColors
from masterplan.diagram.svg_document import BBox, DiagramDocument

LABEL_HEIGHT = 22
LABEL_CHAR_WIDTH = 8
LABEL_PADDING = 10
INDICATOR_RADIUS = 6
LABEL_BACKGROUND = "rgba(255, 255, 255, 0.9)"
LABEL_TEXT_COLOR = "#333"


def _fmt(value: float) -> str:
    return f"{value:g}"


def label_width(label: str) -> float:
    return len(label) * LABEL_CHAR_WIDTH + LABEL_PADDING


def build_label_group(
    document: DiagramDocument,
    region_id: str,
    label: str,
    colors: StatusColors,
    bbox: BBox,
) -> ET.Element:
    """Build a pill, a status dot and a caption centred on ``bbox``.

    The group is decorative only: ``pointer-events="none"`` keeps clicks on the
    region underneath.
    """
    cx, cy = bbox.center
    width = label_width(label)

    group = ET.Element(document.qualify("g"), {
        "pointer-events": "none",
        "data-overlay-label": region_id,
    })
    ET.SubElement(group, document.qualify("rect"), {
        "x": _fmt(cx - width / 2),
        "y": _fmt(cy - 15),
        "width": _fmt(width),
        "height": str(LABEL_HEIGHT),
        "rx": "4",
        "fill": LABEL_BACKGROUND,
        "stroke": colors.stroke,
        "stroke-width": "1",
    })
    ET.SubElement(group, document.qualify("circle"), {
        "cx": _fmt(cx - 20),
        "cy": _fmt(cy - 5),
        "r": str(INDICATOR_RADIUS),
        "fill": colors.indicator,
        "stroke": "white",
        "stroke-width": "2",
    })
    text = ET.SubElement(group, document.qualify("text"), {
        "x": _fmt(cx),
        "y": _fmt(cy - 1),
        "text-anchor": "middle",
        "dominant-baseline": "middle",
        "font-size": "14",
        "font-weight": "600",
        "fill": LABEL_TEXT_COLOR,
    })
    text.text = label
    return group
