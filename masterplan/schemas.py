"""Pydantic schemas for API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from masterplan.models.hierarchy import BreadcrumbItem, Layer, Media, Project


class HealthResponse(BaseModel):
    status: str = "ok"


class ProjectListResponse(BaseModel):
    projects: List[str]


class AvailabilityResponse(BaseModel):
    available: int
    total: int
    footer: str


class SiblingResponse(BaseModel):
    id: str
    slug: str
    label: str
    status: str
    href: str
    is_current: bool


class ExplorerPageResponse(BaseModel):
    project: Project
    current_layer: Optional[Layer] = None
    children: List[Layer] = Field(default_factory=list)
    siblings: List[Layer] = Field(default_factory=list)
    media: List[Media] = Field(default_factory=list)
    children_media: Dict[str, List[Media]] = Field(default_factory=dict)
    breadcrumbs: List[BreadcrumbItem] = Field(default_factory=list)
    is_leaf_level: bool
    current_path: List[str] = Field(default_factory=list)
    title: str
    subtitle: str
    level_label: str
    child_label: str
    diagram_url: Optional[str] = None
    background_url: Optional[str] = None
    availability: AvailabilityResponse
    child_images: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    sibling_switcher: List[SiblingResponse] = Field(default_factory=list)
