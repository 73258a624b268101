from masterplan.models.hierarchy import (
    BreadcrumbItem,
    BuildingUnitProperties,
    Coordinates,
    EntityStatus,
    Layer,
    Media,
    MediaPurpose,
    MediaType,
    Project,
    ProjectType,
    SubdivisionLotProperties,
    UnitProperties,
    typed_properties,
)

__all__ = [
    "BreadcrumbItem",
    "BuildingUnitProperties",
    "Coordinates",
    "EntityStatus",
    "Layer",
    "Media",
    "MediaPurpose",
    "MediaType",
    "Project",
    "ProjectType",
    "SubdivisionLotProperties",
    "UnitProperties",
    "typed_properties",
]
