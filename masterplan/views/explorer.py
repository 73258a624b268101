"""Explorer screen: one level of the hierarchy over its diagram.

``ExplorerPage`` is the resolved data for a path; ``ExplorerView`` turns it into
overlay input, display strings and click behaviour.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from masterplan.diagram.overlay import DiagramOverlay, EntityDescriptor, RenderedDiagram
from masterplan.errors import LoadError
from masterplan.hierarchy.resolver import LayerTree, Resolution, build_href, count_available
from masterplan.media.loader import MediaHandle, MediaLoader
from masterplan.models.hierarchy import (
    BreadcrumbItem,
    Layer,
    Media,
    MediaPurpose,
    MediaType,
    Project,
)
from masterplan.utils.config import settings
from masterplan.views.detail import DetailPanel, UnitPage, main_image
from masterplan.views.navigator import Navigator

logger = logging.getLogger(__name__)

FALLBACK_CHILD_LABEL = "elemento"
NO_DIAGRAM_MESSAGE = "No hay mapa disponible para este nivel"


class LeafClickPolicy(str, Enum):
    NAVIGATE = "navigate"
    PANEL = "panel"


@dataclass
class ExplorerPage:
    project: Project
    current_layer: Optional[Layer]
    children: List[Layer]
    siblings: List[Layer]
    media: List[Media]
    children_media: Dict[str, List[Media]]
    breadcrumbs: List[BreadcrumbItem]
    is_leaf_level: bool
    current_path: List[str] = field(default_factory=list)

    @classmethod
    def compose(cls, tree: LayerTree, media: Sequence[Media], path: Sequence[str]) -> "ExplorerPage":
        resolution = tree.resolve(path)
        return cls.from_resolution(resolution, media)

    @classmethod
    def from_resolution(cls, resolution: Resolution, media: Sequence[Media]) -> "ExplorerPage":
        current = resolution.current_layer
        owner = current.id if current else None
        child_ids = {child.id for child in resolution.children}
        children_media: Dict[str, List[Media]] = {}
        for item in media:
            if item.layer_id in child_ids:
                children_media.setdefault(item.layer_id, []).append(item)
        return cls(
            project=resolution.project,
            current_layer=current,
            children=resolution.children,
            siblings=resolution.siblings,
            media=[item for item in media if item.layer_id == owner],
            children_media=children_media,
            breadcrumbs=resolution.breadcrumbs,
            is_leaf_level=resolution.is_leaf_level,
            current_path=resolution.current_path,
        )

    @property
    def is_unit(self) -> bool:
        """True when the path points at a sale unit rather than a map level."""
        return self.current_layer is not None and not self.children and not self.current_layer.svg_path


@dataclass
class SiblingItem:
    layer: Layer
    href: str
    is_current: bool


class ExplorerView:
    def __init__(
        self,
        page: ExplorerPage,
        navigator: Optional[Navigator] = None,
        leaf_click_policy: Optional[LeafClickPolicy] = None,
        media_loader: Optional[MediaLoader] = None,
        overlay: Optional[DiagramOverlay] = None,
    ) -> None:
        self.page = page
        self.navigator = navigator or Navigator(page.project.slug, page.current_path)
        self.leaf_click_policy = LeafClickPolicy(leaf_click_policy or settings.leaf_click_policy)
        self.media_loader = media_loader
        self.overlay = overlay
        self.selected_layer: Optional[Layer] = None
        self.panel_image: Optional[MediaHandle] = None
        self.panel_media_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Display strings
    # ------------------------------------------------------------------

    @property
    def diagram_url(self) -> Optional[str]:
        current = self.page.current_layer
        if current is not None and current.svg_path:
            return current.svg_path
        return self.page.project.svg_path

    @property
    def background_url(self) -> Optional[str]:
        for item in self.page.media:
            if item.purpose == MediaPurpose.EXPLORATION and item.type == MediaType.IMAGE:
                return item.href
        return None

    @property
    def child_depth(self) -> int:
        current = self.page.current_layer
        return current.depth + 1 if current else 0

    def _label_at(self, depth: int) -> Optional[str]:
        labels = self.page.project.layer_labels
        return labels[depth] if 0 <= depth < len(labels) else None

    @property
    def level_label(self) -> str:
        current = self.page.current_layer
        if current is None:
            return ""
        return self._label_at(current.depth) or ""

    @property
    def child_label(self) -> str:
        return self._label_at(self.child_depth) or FALLBACK_CHILD_LABEL

    @property
    def title(self) -> str:
        current = self.page.current_layer
        return current.name if current else self.page.project.name

    @property
    def subtitle(self) -> str:
        return f"Selecciona un {self.child_label.lower()} para explorar"

    @property
    def availability(self) -> tuple[int, int]:
        return count_available(self.page.children)

    @property
    def footer(self) -> str:
        available, total = self.availability
        return f"{available} de {total} {self.child_label.lower()}s disponibles"

    @property
    def placeholder(self) -> Optional[str]:
        return None if self.diagram_url else NO_DIAGRAM_MESSAGE

    # ------------------------------------------------------------------
    # Overlay wiring
    # ------------------------------------------------------------------

    def entities(self) -> List[EntityDescriptor]:
        return [
            EntityDescriptor(
                region_id=child.region_id,
                label=child.label,
                status=child.status,
                on_activate=lambda child=child: self.activate(child),
            )
            for child in self.page.children
        ]

    async def mount(self) -> Optional[RenderedDiagram]:
        """Load the level diagram into the overlay. No-op without a diagram.

        A failed load leaves the overlay in the ``error`` state, whose render is the
        placeholder.
        """
        if self.overlay is None:
            self.overlay = DiagramOverlay()
        if not self.diagram_url:
            return None
        try:
            return await self.overlay.load(self.diagram_url, self.entities(), self.background_url)
        except LoadError as exc:
            logger.warning(f"Diagram for {self.title} unavailable, showing placeholder: {exc}")
            return None

    async def unmount(self) -> None:
        if self.overlay is not None:
            self.overlay.unmount()
        if self.panel_media_task is not None and not self.panel_media_task.done():
            self.panel_media_task.cancel()
        if self.media_loader is not None:
            await self.media_loader.dispose()

    # ------------------------------------------------------------------
    # Clicks
    # ------------------------------------------------------------------

    def child_path(self, child: Layer) -> List[str]:
        return self.page.current_path + [child.slug]

    def activate(self, child: Layer) -> None:
        if not self.page.is_leaf_level or self.leaf_click_policy is LeafClickPolicy.NAVIGATE:
            self.navigator.push(self.child_path(child))
            return
        self.open_panel(child)

    def open_panel(self, layer: Layer) -> None:
        self.selected_layer = layer
        self.panel_image = None
        if self.media_loader is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop; panel for {layer.slug} opens without media")
            return
        if self.panel_media_task is not None and not self.panel_media_task.done():
            self.panel_media_task.cancel()
        self.panel_media_task = loop.create_task(self.load_panel_media())

    def close_panel(self) -> None:
        self.selected_layer = None
        self.panel_image = None

    def detail_panel(self) -> Optional[DetailPanel]:
        layer = self.selected_layer
        if layer is None:
            return None
        panel = DetailPanel.build(layer, self.page.children_media.get(layer.id, []), self.page.project.type)
        if self.panel_image is not None and not self.panel_image.revoked:
            panel.image_url = self.panel_image.object_url
        return panel

    def cover_url(self, layer: Layer) -> Optional[str]:
        image = main_image(self.page.children_media.get(layer.id, []))
        return image.href if image else None

    async def load_panel_media(self) -> Optional[MediaHandle]:
        """Fetch the selected unit's cover, then queue its neighbours' covers."""
        layer = self.selected_layer
        if layer is None or self.media_loader is None:
            return None
        url = self.cover_url(layer)
        handle = await self.media_loader.request(url) if url else None
        if self.selected_layer is not None and self.selected_layer.id == layer.id:
            self.panel_image = handle

        children = self.page.children
        idx = next((i for i, child in enumerate(children) if child.id == layer.id), None)
        if idx is not None:
            neighbours = [children[i] for i in (idx - 1, idx + 1) if 0 <= i < len(children)]
            self.media_loader.prefetch(self.cover_url(n) for n in neighbours)
        return handle

    # ------------------------------------------------------------------
    # Siblings
    # ------------------------------------------------------------------

    @property
    def show_sibling_switcher(self) -> bool:
        return self.page.current_layer is not None and len(self.page.siblings) > 1

    def sibling_path(self, sibling: Layer) -> List[str]:
        return self.page.current_path[:-1] + [sibling.slug]

    def sibling_switcher(self) -> List[SiblingItem]:
        if not self.show_sibling_switcher:
            return []
        current = self.page.current_layer
        return [
            SiblingItem(
                layer=sibling,
                href=build_href(self.page.project.slug, self.sibling_path(sibling), self.navigator.route_prefix),
                is_current=sibling.id == current.id,
            )
            for sibling in self.page.siblings
        ]

    def select_sibling(self, sibling: Layer) -> bool:
        """Move to ``sibling`` in place of the current layer; False when already there."""
        current = self.page.current_layer
        if current is None or sibling.id == current.id:
            return False
        self.navigator.replace(self.sibling_path(sibling))
        return True

    def unit_page(self) -> Optional[UnitPage]:
        if not self.page.is_unit:
            return None
        return UnitPage.build(
            self.page.current_layer,
            self.page.media,
            self.page.project.type,
            self.page.siblings,
            lambda sibling: build_href(
                self.page.project.slug, self.sibling_path(sibling), self.navigator.route_prefix
            ),
        )
