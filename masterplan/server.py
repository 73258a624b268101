"""REST API server."""
from __future__ import annotations

import logging
from typing import Dict, Generator, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session as DbSession

from masterplan.db import Base, SessionLocal, engine
from masterplan.errors import NotFoundError
from masterplan.media.storage import responsive_urls
from masterplan.schemas import (
    AvailabilityResponse,
    ExplorerPageResponse,
    HealthResponse,
    ProjectListResponse,
    SiblingResponse,
)
from masterplan.services.explorer_service import get_explorer_page, render_level_diagram
from masterplan.services.repository import SqlRepository
from masterplan.utils.config import settings
from masterplan.views.detail import main_image
from masterplan.views.explorer import ExplorerPage, ExplorerView

logger = logging.getLogger(__name__)

app = FastAPI(title="masterplan")
explorer_router = APIRouter()


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(bind=engine)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.info(f"404 {request.url.path}: {exc}")
    return JSONResponse(status_code=404, content={"error": str(exc)})


def route_prefix(prefix: Optional[str] = None) -> str:
    """Mount point for explorer pages; matches the hrefs built by the resolver."""
    value = (settings.route_prefix if prefix is None else prefix).strip("/")
    return f"/{value}" if value else ""


def get_db() -> Generator[DbSession, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_repository(db: DbSession = Depends(get_db)) -> SqlRepository:
    return SqlRepository(db)


def _split_path(layer_path: Optional[str]) -> list[str]:
    return [segment for segment in (layer_path or "").split("/") if segment]


def _child_images(page: ExplorerPage) -> Dict[str, Dict[str, str]]:
    images: Dict[str, Dict[str, str]] = {}
    for layer_id, items in page.children_media.items():
        image = main_image(items)
        if image is not None:
            images[layer_id] = responsive_urls(image.storage_path)
    return images


def _serialize_page(page: ExplorerPage) -> ExplorerPageResponse:
    view = ExplorerView(page)
    available, total = view.availability
    return ExplorerPageResponse(
        project=page.project,
        current_layer=page.current_layer,
        children=page.children,
        siblings=page.siblings,
        media=page.media,
        children_media=page.children_media,
        breadcrumbs=page.breadcrumbs,
        is_leaf_level=page.is_leaf_level,
        current_path=page.current_path,
        title=view.title,
        subtitle=view.subtitle,
        level_label=view.level_label,
        child_label=view.child_label,
        diagram_url=view.diagram_url,
        background_url=view.background_url,
        availability=AvailabilityResponse(available=available, total=total, footer=view.footer),
        child_images=_child_images(page),
        sibling_switcher=[
            SiblingResponse(
                id=item.layer.id,
                slug=item.layer.slug,
                label=item.layer.label,
                status=item.layer.status.value,
                href=item.href,
                is_current=item.is_current,
            )
            for item in view.sibling_switcher()
        ],
    )


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse()


@app.get("/projects", response_model=ProjectListResponse)
def list_projects(repo: SqlRepository = Depends(get_repository)):
    return ProjectListResponse(projects=repo.list_project_slugs())


@explorer_router.get("/{project_slug}", response_model=ExplorerPageResponse)
def project_root(project_slug: str, repo: SqlRepository = Depends(get_repository)):
    return _serialize_page(get_explorer_page(repo, project_slug, []))


@explorer_router.get("/{project_slug}/{layer_path:path}", response_model=ExplorerPageResponse)
def project_layer(project_slug: str, layer_path: str, repo: SqlRepository = Depends(get_repository)):
    return _serialize_page(get_explorer_page(repo, project_slug, _split_path(layer_path)))


def get_diagram_page(
    project_slug: str,
    path: Optional[str] = Query(None, description="Slash-separated layer path"),
    repo: SqlRepository = Depends(get_repository),
) -> ExplorerPage:
    return get_explorer_page(repo, project_slug, _split_path(path))


@app.get("/diagram/{project_slug}")
async def diagram(page: ExplorerPage = Depends(get_diagram_page)):
    svg = await render_level_diagram(page)
    return Response(content=svg, media_type="image/svg+xml")


app.include_router(explorer_router, prefix=route_prefix())
