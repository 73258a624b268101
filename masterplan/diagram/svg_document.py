"""Parsed diagram documents: element lookup, inline styles and bounding boxes."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

from masterplan.errors import LoadError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Shapes that get dimmed when they are not a bound region.
SHAPE_TAGS = frozenset({"path", "rect", "polygon", "circle", "ellipse"})
CONTAINER_TAGS = frozenset({"g", "a", "switch", "svg"})

_PATH_COMMAND_RE = re.compile(r"[\s,]*([MmLlHhVvCcSsQqTtAaZz])")
_PATH_NUMBER_RE = re.compile(r"[\s,]*([-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?)")
# Arc flags are single digits and may run into the next number ("0110" is 0, 1, 10).
_PATH_FLAG_RE = re.compile(r"[\s,]*([01])")
_NUMBER_RE = re.compile(r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")

# Number of coordinates consumed per command.
_PATH_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}


def _register_namespaces() -> None:
    ET.register_namespace("", SVG_NS)
    ET.register_namespace("xlink", XLINK_NS)


def strip_ns(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _parse_float(value: Optional[str], default: float = 0.0) -> float:
    if value is None:
        return default
    match = _NUMBER_RE.match(value.strip())
    if not match:
        return default
    try:
        return float(match.group(0))
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Inline style helpers
# ---------------------------------------------------------------------------


def parse_style(style: Optional[str]) -> Dict[str, str]:
    declarations: Dict[str, str] = {}
    for chunk in (style or "").split(";"):
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        name = name.strip()
        if name:
            declarations[name] = value.strip()
    return declarations


def format_style(declarations: Dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in declarations.items())


def set_style(el: ET.Element, declarations: Dict[str, str]) -> None:
    """Merge declarations into the element's inline ``style`` attribute."""
    merged = parse_style(el.get("style"))
    merged.update(declarations)
    el.set("style", format_style(merged))


def get_style(el: ET.Element, name: str) -> Optional[str]:
    return parse_style(el.get("style")).get(name)


def remove_style(el: ET.Element, *names: str) -> None:
    current = parse_style(el.get("style"))
    for name in names:
        current.pop(name, None)
    if current:
        el.set("style", format_style(current))
    elif "style" in el.attrib:
        del el.attrib["style"]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def union(self, other: "BBox") -> "BBox":
        x0 = min(self.x, other.x)
        y0 = min(self.y, other.y)
        x1 = max(self.x + self.width, other.x + other.width)
        y1 = max(self.y + self.height, other.y + other.height)
        return BBox(x0, y0, x1 - x0, y1 - y0)

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> Optional["BBox"]:
        pts = list(points)
        if not pts:
            return None
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def _points_attr(value: Optional[str]) -> List[Tuple[float, float]]:
    numbers = [float(n) for n in _NUMBER_RE.findall(value or "")]
    return list(zip(numbers[0::2], numbers[1::2]))


def _path_args(d: str, pos: int, command: str) -> Optional[Tuple[List[float], int]]:
    """Read one argument group for ``command`` starting at ``pos``."""
    upper = command.upper()
    values: List[float] = []
    for position in range(_PATH_ARITY[upper]):
        pattern = _PATH_FLAG_RE if upper == "A" and position in (3, 4) else _PATH_NUMBER_RE
        match = pattern.match(d, pos)
        if match is None:
            return None
        values.append(float(match.group(1)))
        pos = match.end()
    return values, pos


def path_points(d: str) -> List[Tuple[float, float]]:
    """Return every end point and control point of an SVG path.

    The hull of these points contains the rendered curve, which is all label
    placement needs.
    """
    d = d or ""
    end = len(d.rstrip(" \t\r\n,"))
    points: List[Tuple[float, float]] = []
    cx = cy = 0.0
    start_x = start_y = 0.0
    command = ""
    pos = 0
    while pos < end:
        match = _PATH_COMMAND_RE.match(d, pos)
        if match is not None:
            command = match.group(1)
            pos = match.end()
            if command in "Zz":
                cx, cy = start_x, start_y
                points.append((cx, cy))
            continue
        upper = command.upper()
        if not _PATH_ARITY.get(upper):
            # Stray number with no command (or after a closepath).
            stray = _PATH_NUMBER_RE.match(d, pos)
            if stray is None:
                break
            pos = stray.end()
            continue
        parsed = _path_args(d, pos, command)
        if parsed is None:
            break
        values, pos = parsed
        relative = command.islower()
        if upper == "H":
            cx = cx + values[0] if relative else values[0]
        elif upper == "V":
            cy = cy + values[0] if relative else values[0]
        elif upper == "A":
            # Only the arc end point is tracked.
            ex, ey = values[5], values[6]
            cx, cy = (cx + ex, cy + ey) if relative else (ex, ey)
        else:
            pairs = list(zip(values[0::2], values[1::2]))
            for px, py in pairs[:-1]:
                points.append((cx + px, cy + py) if relative else (px, py))
            ex, ey = pairs[-1]
            cx, cy = (cx + ex, cy + ey) if relative else (ex, ey)
        points.append((cx, cy))
        if upper == "M":
            start_x, start_y = cx, cy
            # Extra pairs after a moveto are implicit linetos.
            command = "l" if relative else "L"
    return points


def element_bbox(el: ET.Element) -> Optional[BBox]:
    """Bounding box of an element in its own user space, or None without geometry."""
    tag = strip_ns(el.tag)
    if tag in ("rect", "image", "use"):
        width = _parse_float(el.get("width"))
        height = _parse_float(el.get("height"))
        if tag == "use" and not width and not height:
            return None
        return BBox(_parse_float(el.get("x")), _parse_float(el.get("y")), width, height)
    if tag == "circle":
        r = _parse_float(el.get("r"))
        cx = _parse_float(el.get("cx"))
        cy = _parse_float(el.get("cy"))
        return BBox(cx - r, cy - r, 2 * r, 2 * r)
    if tag == "ellipse":
        rx = _parse_float(el.get("rx"))
        ry = _parse_float(el.get("ry"))
        cx = _parse_float(el.get("cx"))
        cy = _parse_float(el.get("cy"))
        return BBox(cx - rx, cy - ry, 2 * rx, 2 * ry)
    if tag == "line":
        return BBox.from_points([
            (_parse_float(el.get("x1")), _parse_float(el.get("y1"))),
            (_parse_float(el.get("x2")), _parse_float(el.get("y2"))),
        ])
    if tag in ("polygon", "polyline"):
        return BBox.from_points(_points_attr(el.get("points")))
    if tag == "path":
        return BBox.from_points(path_points(el.get("d") or ""))
    if tag in CONTAINER_TAGS:
        box: Optional[BBox] = None
        for child in el:
            child_box = element_bbox(child)
            if child_box is None:
                continue
            box = child_box if box is None else box.union(child_box)
        return box
    return None


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


@dataclass
class DiagramDocument:
    root: ET.Element
    _id_index: Dict[str, ET.Element] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        for el in self.root.iter():
            el_id = el.get("id")
            if el_id and el_id not in self._id_index:
                self._id_index[el_id] = el

    @property
    def namespace(self) -> str:
        tag = self.root.tag
        return tag[1:].split("}", 1)[0] if tag.startswith("{") else ""

    def qualify(self, tag: str) -> str:
        ns = self.namespace
        return f"{{{ns}}}{tag}" if ns else tag

    def find_by_id(self, element_id: str) -> Optional[ET.Element]:
        return self._id_index.get(element_id)

    def shapes(self) -> Iterator[ET.Element]:
        for el in self.root.iter():
            if strip_ns(el.tag) in SHAPE_TAGS:
                yield el

    def coordinate_frame(self) -> Tuple[float, float, float, float]:
        """Declared (x, y, width, height) of the document's coordinate system."""
        view_box = _NUMBER_RE.findall(self.root.get("viewBox") or "")
        if len(view_box) == 4:
            x, y, w, h = (float(v) for v in view_box)
            return (x, y, w, h)
        return (
            0.0,
            0.0,
            _parse_float(self.root.get("width")),
            _parse_float(self.root.get("height")),
        )

    def to_svg(self) -> str:
        _register_namespaces()
        return ET.tostring(self.root, encoding="unicode")


def parse_diagram(svg_text: str) -> DiagramDocument:
    """Parse SVG text into a document; raise LoadError when it is not a diagram."""
    if svg_text is None or not svg_text.strip():
        raise LoadError("Empty diagram document")
    try:
        root = ET.fromstring(svg_text.strip())
    except ET.ParseError as exc:
        raise LoadError(f"Malformed diagram document: {exc}") from exc
    if strip_ns(root.tag).lower() != "svg":
        raise LoadError("No SVG element found")
    return DiagramDocument(root=root)
