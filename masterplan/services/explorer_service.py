"""Compose repository data into explorer pages and rendered diagrams."""
from __future__ import annotations

from typing import List, Optional, Sequence

import httpx

from masterplan.diagram.overlay import DiagramOverlay, error_placeholder_svg
from masterplan.hierarchy.resolver import LayerTree, build_href
from masterplan.services.repository import SqlRepository
from masterplan.views.explorer import NO_DIAGRAM_MESSAGE, ExplorerPage, ExplorerView

def get_explorer_page(repo: SqlRepository, project_slug: str, path: Sequence[str]) -> ExplorerPage:
    """Resolve ``path`` inside ``project_slug``; raises NotFoundError on any miss."""
    project = repo.get_project(project_slug)
    tree = LayerTree(project, repo.get_layers(project.id))
    return ExplorerPage.compose(tree, repo.get_media(project.id), path)


def list_routes(repo: SqlRepository) -> List[str]:
    """Every pre-renderable route: each project root and every layer path."""
    routes: List[str] = []
    for slug in repo.list_project_slugs():
        project = repo.get_project(slug)
        routes.append(build_href(slug, []))
        routes.extend(build_href(slug, path) for path in repo.list_layer_paths(project.id))
    return routes


async def render_level_diagram(
    page: ExplorerPage,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Render the page's diagram with status styling and labels.

    A missing diagram or a failed load yields the inline placeholder SVG.
    """
    view = ExplorerView(page, overlay=DiagramOverlay(client=client))
    if not view.diagram_url:
        return error_placeholder_svg(NO_DIAGRAM_MESSAGE)
    await view.mount()
    svg = view.overlay.render()
    view.overlay.unmount()
    return svg
