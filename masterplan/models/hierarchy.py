"""Core hierarchy models: projects, layers and media (framework-agnostic)."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class EntityStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    NOT_AVAILABLE = "not_available"


class ProjectType(str, Enum):
    SUBDIVISION = "subdivision"
    BUILDING = "building"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaPurpose(str, Enum):
    COVER = "cover"
    GALLERY = "gallery"
    EXPLORATION = "exploration"
    TRANSITION = "transition"
    THUMBNAIL = "thumbnail"
    FLOOR_PLAN = "floor_plan"


class Coordinates(BaseModel):
    lat: float
    lng: float


class Project(BaseModel):
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    type: ProjectType
    status: EntityStatus = EntityStatus.AVAILABLE
    layer_labels: List[str] = Field(default_factory=list)
    max_depth: int = 0
    svg_path: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    settings: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class Layer(BaseModel):
    id: str
    project_id: str
    parent_id: Optional[str] = None
    depth: int = 0
    sort_order: int = 0
    slug: str
    name: str
    label: str
    svg_element_id: Optional[str] = None
    status: EntityStatus = EntityStatus.AVAILABLE
    svg_path: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    # Buyer details live on leaf layers; never part of public payloads.
    buyer_name: Optional[str] = Field(default=None, exclude=True)
    buyer_email: Optional[str] = Field(default=None, exclude=True)
    buyer_phone: Optional[str] = Field(default=None, exclude=True)
    buyer_notes: Optional[str] = Field(default=None, exclude=True)
    reserved_at: Optional[str] = Field(default=None, exclude=True)
    sold_at: Optional[str] = Field(default=None, exclude=True)

    model_config = {"frozen": True}

    @property
    def region_id(self) -> str:
        """Identifier of the diagram element this layer binds to."""
        return self.svg_element_id or self.slug


class Media(BaseModel):
    id: str
    project_id: str
    layer_id: Optional[str] = None
    type: MediaType
    purpose: MediaPurpose
    storage_path: str
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    alt_text: Optional[str] = None
    sort_order: int = 0
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def href(self) -> str:
        return self.url or self.storage_path


class BreadcrumbItem(BaseModel):
    label: str
    href: Optional[str] = None


class SubdivisionLotProperties(BaseModel):
    area: Optional[float] = None
    price: Optional[float] = None
    is_corner: Optional[bool] = None
    front_meters: Optional[float] = None
    depth_meters: Optional[float] = None
    orientation: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    model_config = {"extra": "ignore"}


class BuildingUnitProperties(BaseModel):
    area: Optional[float] = None
    price: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    floor_number: Optional[int] = None
    unit_type: Optional[str] = None
    has_balcony: Optional[bool] = None
    orientation: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    model_config = {"extra": "ignore"}


UnitProperties = Union[SubdivisionLotProperties, BuildingUnitProperties]

_PROPERTY_MODELS = {
    ProjectType.SUBDIVISION: SubdivisionLotProperties,
    ProjectType.BUILDING: BuildingUnitProperties,
}


def typed_properties(layer: Layer, project_type: ProjectType) -> UnitProperties:
    """Validate a layer's free-form property bag against its project type.

    Unknown keys are dropped; values of the wrong type raise ``ValidationError``.
    """
    props = dict(layer.properties or {})
    if props.get("features") is None:
        props.pop("features", None)
    return _PROPERTY_MODELS[ProjectType(project_type)].model_validate(props)
