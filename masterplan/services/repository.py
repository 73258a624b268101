"""Read-side data repository backed by SQLAlchemy."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session as DbSession

from masterplan.db_models import LayerRecord, MediaRecord, ProjectRecord
from masterplan.errors import NotFoundError
from masterplan.hierarchy.resolver import LayerTree
from masterplan.models.hierarchy import Coordinates, Layer, Media, Project

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def project_from_record(record: ProjectRecord) -> Project:
    return Project(
        id=record.id,
        slug=record.slug,
        name=record.name,
        description=record.description,
        type=record.type,
        status=record.status,
        layer_labels=list(record.layer_labels or []),
        max_depth=record.max_depth or 0,
        svg_path=record.svg_path,
        address=record.address,
        city=record.city,
        state=record.state,
        country=record.country,
        coordinates=Coordinates(**record.coordinates) if record.coordinates else None,
        settings=dict(record.settings or {}),
    )


def layer_from_record(record: LayerRecord) -> Layer:
    return Layer(
        id=record.id,
        project_id=record.project_id,
        parent_id=record.parent_id,
        depth=record.depth,
        sort_order=record.sort_order,
        slug=record.slug,
        name=record.name,
        label=record.label,
        svg_element_id=record.svg_element_id,
        status=record.status,
        svg_path=record.svg_path,
        properties=dict(record.properties or {}),
        buyer_name=record.buyer_name,
        buyer_email=record.buyer_email,
        buyer_phone=record.buyer_phone,
        buyer_notes=record.buyer_notes,
        reserved_at=_iso(record.reserved_at),
        sold_at=_iso(record.sold_at),
    )


def media_from_record(record: MediaRecord) -> Media:
    return Media(
        id=record.id,
        project_id=record.project_id,
        layer_id=record.layer_id,
        type=record.type,
        purpose=record.purpose,
        storage_path=record.storage_path,
        url=record.url,
        title=record.title,
        description=record.description,
        alt_text=record.alt_text,
        sort_order=record.sort_order,
        metadata=dict(record.metadata_json or {}),
    )


class SqlRepository:
    def __init__(self, db: DbSession) -> None:
        self.db = db

    def get_project(self, slug: str) -> Project:
        record = self.db.execute(
            select(ProjectRecord).where(ProjectRecord.slug == slug)
        ).scalar_one_or_none()
        if record is None:
            raise NotFoundError(f"Project not found: {slug}")
        return project_from_record(record)

    def get_layers(self, project_id: str) -> List[Layer]:
        rows = self.db.execute(
            select(LayerRecord)
            .where(LayerRecord.project_id == project_id)
            .order_by(LayerRecord.depth, LayerRecord.sort_order)
        ).scalars()
        return [layer_from_record(row) for row in rows]

    def get_media(self, project_id: str) -> List[Media]:
        rows = self.db.execute(
            select(MediaRecord)
            .where(MediaRecord.project_id == project_id)
            .order_by(MediaRecord.sort_order)
        ).scalars()
        return [media_from_record(row) for row in rows]

    def list_project_slugs(self) -> List[str]:
        return list(self.db.execute(select(ProjectRecord.slug).order_by(ProjectRecord.name)).scalars())

    def list_layer_paths(self, project_id: str) -> List[List[str]]:
        record = self.db.get(ProjectRecord, project_id)
        if record is None:
            raise NotFoundError(f"Project not found: {project_id}")
        project = project_from_record(record)
        tree = LayerTree(project, self.get_layers(project_id))
        return tree.all_layer_paths(project.max_depth or None)
