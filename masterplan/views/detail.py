"""Leaf detail payloads: the inline panel and the dedicated unit page."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from masterplan.diagram.status_styles import status_label
from masterplan.models.hierarchy import (
    BuildingUnitProperties,
    EntityStatus,
    Layer,
    Media,
    MediaPurpose,
    MediaType,
    ProjectType,
    SubdivisionLotProperties,
    typed_properties,
)

CTA_LABEL = "Consultar Disponibilidad"
DEFAULT_FEATURE = "Servicios completos"
CORNER_FEATURE = "Lote de esquina"
BALCONY_FEATURE = "Balcón"


def _num(value: float) -> str:
    return f"{value:g}"


def format_amount(value: float) -> str:
    """Group thousands with ``.`` and use ``,`` for decimals (es-AR)."""
    if float(value).is_integer():
        return f"{int(value):,}".replace(",", ".")
    whole, _, decimals = f"{value:,.2f}".partition(".")
    decimals = decimals.rstrip("0")
    whole = whole.replace(",", ".")
    return f"{whole},{decimals}" if decimals else whole


def format_price(price: Optional[float]) -> Optional[str]:
    if price is None:
        return None
    return f"${format_amount(price)}"


def format_price_per_m2(price: Optional[float], area: Optional[float]) -> Optional[str]:
    if price is None or not area:
        return None
    return f"${round(price / area)}/m²"


def format_area(area: Optional[float]) -> Optional[str]:
    return None if area is None else f"{_num(area)} m²"


def format_dimensions(front: Optional[float], depth: Optional[float], compact: bool = False) -> Optional[str]:
    parts = []
    if front:
        parts.append(f"{_num(front)}m" if compact else f"Frente: {_num(front)}m")
    if depth:
        parts.append(f"{_num(depth)}m" if compact else f"Fondo: {_num(depth)}m")
    return " × ".join(parts) or None


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def format_rooms(bedrooms: Optional[int], bathrooms: Optional[int], compact: bool = False) -> Optional[str]:
    parts = []
    if bedrooms is not None:
        parts.append(f"{bedrooms} dorm." if compact else _plural(bedrooms, "dormitorio", "dormitorios"))
    if bathrooms is not None:
        parts.append(_plural(bathrooms, "baño", "baños"))
    return " / ".join(parts) or None


def feature_list(props, project_type: ProjectType) -> List[str]:
    is_corner = isinstance(props, SubdivisionLotProperties) and bool(props.is_corner)
    has_balcony = isinstance(props, BuildingUnitProperties) and bool(props.has_balcony)
    features: List[str] = []
    if is_corner and project_type == ProjectType.SUBDIVISION:
        features.append(CORNER_FEATURE)
    if has_balcony and project_type == ProjectType.BUILDING:
        features.append(BALCONY_FEATURE)
    features.extend(props.features)
    if not features:
        features.append(DEFAULT_FEATURE)
    return features


def _images(media: Sequence[Media], *purposes: MediaPurpose) -> List[Media]:
    return [m for m in media if m.type == MediaType.IMAGE and (not purposes or m.purpose in purposes)]


def main_image(media: Sequence[Media]) -> Optional[Media]:
    """Cover image, else the first gallery image."""
    covers = _images(media, MediaPurpose.COVER)
    if covers:
        return covers[0]
    gallery = _images(media, MediaPurpose.GALLERY)
    return gallery[0] if gallery else None


@dataclass
class DetailPanel:
    layer: Layer
    project_type: ProjectType
    properties: object
    status_label: str
    image: Optional[Media]
    area: Optional[str]
    dimensions: Optional[str]
    unit_type: Optional[str]
    rooms: Optional[str]
    orientation: Optional[str]
    price: Optional[str]
    price_per_m2: Optional[str]
    description: Optional[str]
    features: List[str] = field(default_factory=list)
    image_url: Optional[str] = None

    @property
    def name(self) -> str:
        return self.layer.name

    @property
    def show_cta(self) -> bool:
        return self.layer.status == EntityStatus.AVAILABLE

    @property
    def cta_label(self) -> Optional[str]:
        return CTA_LABEL if self.show_cta else None

    @classmethod
    def build(cls, layer: Layer, media: Sequence[Media], project_type: ProjectType) -> "DetailPanel":
        props = typed_properties(layer, project_type)
        front = getattr(props, "front_meters", None)
        depth = getattr(props, "depth_meters", None)
        return cls(
            layer=layer,
            project_type=ProjectType(project_type),
            properties=props,
            status_label=status_label(layer.status),
            image=main_image(media),
            area=format_area(props.area),
            dimensions=format_dimensions(front, depth),
            unit_type=getattr(props, "unit_type", None),
            rooms=format_rooms(getattr(props, "bedrooms", None), getattr(props, "bathrooms", None)),
            orientation=props.orientation,
            price=format_price(props.price),
            price_per_m2=format_price_per_m2(props.price, props.area),
            description=props.description,
            features=feature_list(props, ProjectType(project_type)),
        )


@dataclass
class SiblingCard:
    layer: Layer
    href: str
    is_current: bool
    status_label: str
    area: Optional[str] = None
    price: Optional[str] = None


@dataclass
class UnitPage:
    """Dedicated page for a leaf layer with its gallery and neighbouring units."""

    detail: DetailPanel
    gallery: List[Media]
    siblings: List[SiblingCard]
    floor_label: Optional[str] = None
    dimensions: Optional[str] = None
    rooms: Optional[str] = None

    @classmethod
    def build(
        cls,
        layer: Layer,
        media: Sequence[Media],
        project_type: ProjectType,
        siblings: Sequence[Layer],
        sibling_href,
    ) -> "UnitPage":
        detail = DetailPanel.build(layer, media, project_type)
        props = detail.properties
        gallery = _images(media, MediaPurpose.GALLERY, MediaPurpose.COVER, MediaPurpose.FLOOR_PLAN)
        floor_number = getattr(props, "floor_number", None)
        cards = []
        if len(siblings) > 1:
            for sibling in siblings:
                sibling_props = sibling.properties or {}
                cards.append(SiblingCard(
                    layer=sibling,
                    href=sibling_href(sibling),
                    is_current=sibling.id == layer.id,
                    status_label=status_label(sibling.status),
                    area=format_area(sibling_props.get("area")),
                    price=format_price(sibling_props.get("price")),
                ))
        return cls(
            detail=detail,
            gallery=gallery or _images(media),
            siblings=cards,
            floor_label=f"Piso {floor_number}" if floor_number else None,
            dimensions=format_dimensions(
                getattr(props, "front_meters", None), getattr(props, "depth_meters", None), compact=True
            ),
            rooms=format_rooms(
                getattr(props, "bedrooms", None), getattr(props, "bathrooms", None), compact=True
            ),
        )
