"""Layer tree indexing and slug-path resolution.

Layers arrive as a flat list (every depth, any order). ``LayerTree`` indexes
them by parent and resolves slug paths by repeated linear descent from the
roots. Ordering is always by ``sort_order``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from masterplan.errors import HierarchyError, NotFoundError
from masterplan.models.hierarchy import BreadcrumbItem, EntityStatus, Layer, Project
from masterplan.utils.config import settings


def build_href(project_slug: str, path: Sequence[str], route_prefix: Optional[str] = None) -> str:
    """Route for a project-relative slug path, e.g. ``/p/los-alamos/zona-a``."""
    prefix = settings.route_prefix if route_prefix is None else route_prefix
    parts = [prefix.strip("/"), project_slug, *path]
    return "/" + "/".join(p for p in parts if p)



def count_available(layers: Sequence[Layer]) -> tuple[int, int]:
    """(available, total) over ``layers``."""
    available = sum(1 for layer in layers if layer.status == EntityStatus.AVAILABLE)
    return available, len(layers)


@dataclass
class Resolution:
    project: Project
    current_layer: Optional[Layer]
    children: List[Layer]
    siblings: List[Layer]
    breadcrumbs: List[BreadcrumbItem]
    is_leaf_level: bool
    current_path: List[str] = field(default_factory=list)

    @property
    def child_depth(self) -> int:
        return self.current_layer.depth + 1 if self.current_layer else 0

    def availability(self) -> tuple[int, int]:
        return count_available(self.children)


class LayerTree:
    """Index over one project's flat layer set."""

    def __init__(self, project: Project, layers: Iterable[Layer]) -> None:
        self.project = project
        self._by_id: Dict[str, Layer] = {}
        self._children: Dict[Optional[str], List[Layer]] = {}

        for layer in layers:
            if layer.id in self._by_id:
                raise HierarchyError(f"Duplicate layer id '{layer.id}'")
            self._by_id[layer.id] = layer

        for layer in self._by_id.values():
            self._check_depth(layer)
            self._children.setdefault(layer.parent_id, []).append(layer)

        for siblings in self._children.values():
            siblings.sort(key=lambda l: l.sort_order)
            seen: Dict[str, str] = {}
            for layer in siblings:
                if layer.slug in seen:
                    raise HierarchyError(
                        f"Slug '{layer.slug}' is shared by sibling layers {seen[layer.slug]} and {layer.id}"
                    )
                seen[layer.slug] = layer.id

    def _check_depth(self, layer: Layer) -> None:
        if layer.parent_id is None:
            if layer.depth != 0:
                raise HierarchyError(f"Root layer '{layer.slug}' has depth {layer.depth}, expected 0")
            return
        parent = self._by_id.get(layer.parent_id)
        if parent is None:
            raise HierarchyError(f"Layer '{layer.slug}' references missing parent '{layer.parent_id}'")
        if layer.depth != parent.depth + 1:
            raise HierarchyError(
                f"Layer '{layer.slug}' has depth {layer.depth}, expected {parent.depth + 1}"
            )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, layer_id: str) -> Optional[Layer]:
        return self._by_id.get(layer_id)

    def roots(self) -> List[Layer]:
        return list(self._children.get(None, []))

    def children_of(self, layer: Optional[Layer]) -> List[Layer]:
        return list(self._children.get(layer.id if layer else None, []))

    def parent_of(self, layer: Layer) -> Optional[Layer]:
        return self._by_id.get(layer.parent_id) if layer.parent_id else None

    def siblings_of(self, layer: Optional[Layer]) -> List[Layer]:
        if layer is None:
            return []
        return list(self._children.get(layer.parent_id, []))

    def is_leaf(self, layer: Layer) -> bool:
        """A sale unit: no child diagram and no children."""
        return not layer.svg_path and not self._children.get(layer.id)

    def ancestry(self, layer: Layer) -> List[Layer]:
        """Layers from the root down to ``layer`` inclusive."""
        chain = [layer]
        while chain[-1].parent_id:
            chain.append(self._by_id[chain[-1].parent_id])
        return list(reversed(chain))

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def walk(self, path: Sequence[str]) -> Optional[Layer]:
        current: Optional[Layer] = None
        for depth, segment in enumerate(path):
            match = next((c for c in self.children_of(current) if c.slug == segment), None)
            if match is None:
                raise NotFoundError(
                    f"Layer '{segment}' not found at depth {depth} of project '{self.project.slug}'"
                )
            current = match
        return current

    def resolve(self, path: Sequence[str]) -> Resolution:
        """Resolve a slug path into the current layer and its neighbourhood."""
        path = [segment for segment in path if segment]
        current = self.walk(path)
        children = self.children_of(current)
        return Resolution(
            project=self.project,
            current_layer=current,
            children=children,
            siblings=self.siblings_of(current),
            breadcrumbs=self.breadcrumbs(path),
            is_leaf_level=all(self.is_leaf(child) for child in children),
            current_path=list(path),
        )

    def breadcrumbs(self, path: Sequence[str]) -> List[BreadcrumbItem]:
        crumbs = [BreadcrumbItem(label=settings.root_breadcrumb_label, href=build_href(self.project.slug, []))]
        current: Optional[Layer] = None
        for idx, segment in enumerate(path):
            current = next(c for c in self.children_of(current) if c.slug == segment)
            crumbs.append(BreadcrumbItem(label=current.name, href=build_href(self.project.slug, path[: idx + 1])))
        last = crumbs[-1]
        crumbs[-1] = BreadcrumbItem(label=last.label)
        return crumbs

    def all_layer_paths(self, max_depth: Optional[int] = None) -> List[List[str]]:
        """Every resolvable slug path, depth-first in sort order.

        ``max_depth`` caps the path length (a project's ``max_depth``).
        """
        paths: List[List[str]] = []

        def visit(layer: Layer, prefix: List[str]) -> None:
            path = prefix + [layer.slug]
            if max_depth is not None and len(path) > max_depth:
                return
            paths.append(path)
            for child in self.children_of(layer):
                visit(child, path)

        for root in self.roots():
            visit(root, [])
        return paths
