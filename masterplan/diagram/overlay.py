"""Interactive diagram overlay: binds entities to diagram regions.

Lifecycle: ``idle -> loading -> ready | error``. A new ``load`` always tears the
previous bindings down first, and a load that was superseded (or whose owner was
unmounted) is dropped without touching the surface.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Set
from xml.etree import ElementTree as ET

import httpx

from masterplan.diagram.labels import build_label_group
from masterplan.diagram.status_styles import (
    BASE_STROKE_WIDTH,
    FOCUS_OUTLINE,
    HOVER_STROKE_WIDTH,
    StatusColors,
    hover_fill,
    status_colors,
    status_label,
)
from masterplan.diagram.surface import HostSurface, InteractionEvent, ListenerEntry
from masterplan.diagram.svg_document import (
    DiagramDocument,
    element_bbox,
    parse_diagram,
    remove_style,
    set_style,
)
from masterplan.errors import BindingWarning, LoadError
from masterplan.models.hierarchy import EntityStatus
from masterplan.utils.config import settings
from masterplan.utils.http_client import build_async_client

logger = logging.getLogger(__name__)

ACTIVATION_KEYS = frozenset({"Enter", " ", "Space", "Spacebar"})


class OverlayState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class EntityDescriptor:
    region_id: str
    label: str
    status: EntityStatus
    on_activate: Callable[[], None]


@dataclass
class RegionBinding:
    descriptor: EntityDescriptor
    element: ET.Element
    colors: StatusColors
    label_group: Optional[ET.Element] = None
    listeners: List[ListenerEntry] = field(default_factory=list)

    @property
    def events(self) -> Set[str]:
        return {entry.event for entry in self.listeners}


@dataclass
class RenderedDiagram:
    document_url: str
    document: DiagramDocument
    bindings: Dict[str, RegionBinding] = field(default_factory=dict)
    warnings: List[BindingWarning] = field(default_factory=list)

    def to_svg(self) -> str:
        return self.document.to_svg()


def error_placeholder_svg(message: str) -> str:
    """Inline placeholder shown in the diagram area when a load fails."""
    root = ET.Element("svg", {
        "xmlns": "http://www.w3.org/2000/svg",
        "width": "100%",
        "height": "100%",
        "viewBox": "0 0 600 120",
        "data-overlay-error": "true",
    })
    ET.SubElement(root, "rect", {"x": "0", "y": "0", "width": "600", "height": "120", "fill": "#FEF2F2"})
    text = ET.SubElement(root, "text", {
        "x": "300",
        "y": "60",
        "text-anchor": "middle",
        "dominant-baseline": "middle",
        "font-size": "14",
        "fill": "#B91C1C",
    })
    text.text = f"Error loading interactive map: {message}"
    return ET.tostring(root, encoding="unicode")


class DiagramOverlay:
    """One mounted diagram instance with its region bindings."""

    def __init__(
        self,
        surface: Optional[HostSurface] = None,
        client: Optional[httpx.AsyncClient] = None,
        *,
        accessible: Optional[bool] = None,
        dim_opacity: Optional[float] = None,
        background_opacity: Optional[float] = None,
    ) -> None:
        self.surface = surface or HostSurface()
        self._client = client
        self.accessible = settings.accessible_regions if accessible is None else accessible
        self.dim_opacity = settings.dim_opacity if dim_opacity is None else dim_opacity
        self.background_opacity = (
            settings.background_opacity if background_opacity is None else background_opacity
        )
        self.state = OverlayState.IDLE
        self.error_message: Optional[str] = None
        self.rendered: Optional[RenderedDiagram] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(
        self,
        document_url: str,
        entities: Sequence[EntityDescriptor],
        background_url: Optional[str] = None,
    ) -> Optional[RenderedDiagram]:
        """Fetch ``document_url`` and bind ``entities`` to it.

        Returns None when the load was superseded before it resolved. Raises
        ``LoadError`` (after entering the ``error`` state) when the fetch or the
        parse fails.
        """
        self.teardown()
        self._generation += 1
        generation = self._generation
        self.state = OverlayState.LOADING

        try:
            svg_text = await self._fetch(document_url)
            document = parse_diagram(svg_text)
        except LoadError as exc:
            if generation != self._generation:
                return None
            logger.error(f"Error loading diagram {document_url}: {exc}")
            self.state = OverlayState.ERROR
            self.error_message = str(exc)
            self.surface.show_error(self.error_message)
            raise

        if generation != self._generation:
            logger.debug(f"Discarding stale diagram load for {document_url}")
            return None

        self.rendered = self._apply(document_url, document, entities, background_url)
        self.state = OverlayState.READY
        return self.rendered

    async def _fetch(self, document_url: str) -> str:
        try:
            if self._client is not None:
                response = await self._client.get(document_url)
            else:
                async with build_async_client() as client:
                    response = await client.get(document_url)
        except httpx.HTTPError as exc:
            raise LoadError(f"Failed to load SVG: {exc}") from exc
        if not response.is_success:
            raise LoadError(f"Failed to load SVG ({response.status_code}): {response.reason_phrase}")
        return response.text

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def _apply(
        self,
        document_url: str,
        document: DiagramDocument,
        entities: Sequence[EntityDescriptor],
        background_url: Optional[str],
    ) -> RenderedDiagram:
        rendered = RenderedDiagram(document_url=document_url, document=document)
        root = document.root

        root.set("width", "100%")
        root.set("height", "100%")
        set_style(root, {"display": "block", "background": "transparent"})

        targets: Dict[str, ET.Element] = {}
        for entity in entities:
            if entity.region_id in targets:
                self._warn(rendered, f"Duplicate region id '{entity.region_id}' in entity list; keeping the first")
                continue
            element = document.find_by_id(entity.region_id)
            if element is None:
                self._warn(rendered, f"Element with id '{entity.region_id}' not found in SVG")
                continue
            targets[entity.region_id] = element

        covered: Set[ET.Element] = set()
        for element in targets.values():
            covered.update(element.iter())
        for shape in document.shapes():
            if shape not in covered:
                set_style(shape, {"opacity": f"{self.dim_opacity:g}"})

        if background_url:
            self._insert_background(document, background_url)

        self.surface.mount(document)

        labels: List[ET.Element] = []
        for entity in entities:
            element = targets.get(entity.region_id)
            if element is None or entity.region_id in rendered.bindings:
                continue
            binding = self._bind(entity, element)
            bbox = element_bbox(element)
            if bbox is None:
                logger.warning(f"Could not add label for {entity.region_id}: no geometry")
            else:
                binding.label_group = build_label_group(
                    document, entity.region_id, entity.label, binding.colors, bbox
                )
                labels.append(binding.label_group)
            rendered.bindings[entity.region_id] = binding

        for group in labels:
            root.append(group)

        logger.info(
            f"Bound {len(rendered.bindings)}/{len(entities)} regions on {document_url}"
        )
        return rendered

    def _warn(self, rendered: RenderedDiagram, message: str) -> None:
        logger.warning(message)
        rendered.warnings.append(BindingWarning(message))

    def _insert_background(self, document: DiagramDocument, background_url: str) -> None:
        x, y, width, height = document.coordinate_frame()
        image = ET.Element(document.qualify("image"), {
            "href": background_url,
            "x": f"{x:g}",
            "y": f"{y:g}",
            "width": f"{width:g}",
            "height": f"{height:g}",
            "preserveAspectRatio": "xMidYMid slice",
            "opacity": f"{self.background_opacity:g}",
            "pointer-events": "none",
            "data-overlay-background": "true",
        })
        document.root.insert(0, image)

    def _bind(self, entity: EntityDescriptor, element: ET.Element) -> RegionBinding:
        colors = status_colors(entity.status)
        binding = RegionBinding(descriptor=entity, element=element, colors=colors)

        set_style(element, {
            "cursor": "pointer",
            "transition": "all 0.3s ease",
            "fill": colors.fill,
            "stroke": colors.stroke,
            "stroke-width": BASE_STROKE_WIDTH,
        })

        def highlight(event: InteractionEvent) -> None:
            set_style(element, {"fill": hover_fill(colors.fill), "stroke-width": HOVER_STROKE_WIDTH})

        def unhighlight(event: InteractionEvent) -> None:
            set_style(element, {"fill": colors.fill, "stroke-width": BASE_STROKE_WIDTH})

        def activate(event: InteractionEvent) -> None:
            event.stop_propagation()
            entity.on_activate()

        handlers = [
            ("pointerenter", highlight),
            ("pointerleave", unhighlight),
            ("click", activate),
        ]

        if self.accessible:
            def focus(event: InteractionEvent) -> None:
                highlight(event)
                set_style(element, {"outline": FOCUS_OUTLINE})

            def blur(event: InteractionEvent) -> None:
                unhighlight(event)
                remove_style(element, "outline")

            def keydown(event: InteractionEvent) -> None:
                if event.key in ACTIVATION_KEYS:
                    event.prevent_default()
                    activate(event)

            element.set("tabindex", "0")
            element.set("role", "button")
            element.set("aria-label", f"{entity.label} - {status_label(entity.status)}")
            handlers += [("focus", focus), ("blur", blur), ("keydown", keydown)]

        for event_name, handler in handlers:
            binding.listeners.append(self.surface.add_listener(element, event_name, handler))
        return binding

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def teardown(self) -> None:
        """Detach every listener and clear the surface. Safe to call repeatedly."""
        if self.rendered is not None:
            for binding in self.rendered.bindings.values():
                for entry in binding.listeners:
                    self.surface.remove_listener(entry)
                binding.listeners.clear()
        self.surface.clear()
        self.rendered = None
        self.error_message = None
        self.state = OverlayState.IDLE

    def unmount(self) -> None:
        """Cancel any in-flight load and tear down."""
        self._generation += 1
        self.teardown()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> str:
        if self.state is OverlayState.READY and self.rendered is not None:
            return self.rendered.to_svg()
        if self.state is OverlayState.ERROR:
            return error_placeholder_svg(self.error_message or "unknown error")
        return ""

