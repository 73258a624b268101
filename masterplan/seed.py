"""Demo data: the "los-alamos" subdivision and the "torre-norte" building."""
from __future__ import annotations

import logging
from typing import Dict, List

from sqlalchemy import delete
from sqlalchemy.orm import Session as DbSession

from masterplan.db_models import LayerRecord, MediaRecord, ProjectRecord
from masterplan.media.storage import lot_image_path

logger = logging.getLogger(__name__)

LOS_ALAMOS_SOLD = {2, 5, 7}
ORIENTATIONS = {"A": "Norte", "B": "Este", "C": "Sur", "D": "Oeste"}


def clear_all(db: DbSession) -> None:
    db.execute(delete(MediaRecord))
    db.execute(delete(LayerRecord))
    db.execute(delete(ProjectRecord))
    db.commit()


def seed_los_alamos(db: DbSession) -> ProjectRecord:
    """One zone, one block, eight lots; lots 2, 5 and 7 are sold."""
    project = ProjectRecord(
        slug="los-alamos",
        name="Los Alamos",
        description="Loteo residencial con lotes de 300 m²",
        type="subdivision",
        layer_labels=["Zona", "Manzana", "Lote"],
        max_depth=3,
        svg_path="/svgs/mapa-principal.svg",
        city="Pilar",
        state="Buenos Aires",
        country="Argentina",
    )
    db.add(project)
    db.flush()

    zone = LayerRecord(
        project_id=project.id,
        depth=0,
        sort_order=0,
        slug="zona-a",
        name="Zona A",
        label="A",
        svg_element_id="zona-a",
        svg_path="/svgs/zonas/zona-a.svg",
    )
    db.add(zone)
    db.flush()

    block = LayerRecord(
        project_id=project.id,
        parent_id=zone.id,
        depth=1,
        sort_order=0,
        slug="zona-a-manzana-1",
        name="Manzana 1",
        label="M1",
        svg_element_id="manzana-1",
        svg_path="/svgs/manzanas/zona-a-manzana-1.svg",
    )
    db.add(block)
    db.flush()

    for number in range(1, 9):
        slug = f"zona-a-manzana-1-lote-{number:02d}"
        lot = LayerRecord(
            project_id=project.id,
            parent_id=block.id,
            depth=2,
            sort_order=number - 1,
            slug=slug,
            name=f"Lote {number:02d}",
            label=f"L{number}",
            svg_element_id=f"lote-{number:02d}",
            status="sold" if number in LOS_ALAMOS_SOLD else "available",
            properties={
                "area": 300,
                "price": None if number in LOS_ALAMOS_SOLD else 45000 + number * 1000,
                "front_meters": 10,
                "depth_meters": 30,
                "is_corner": number in (1, 8),
                "orientation": "Norte" if number <= 4 else "Sur",
            },
        )
        db.add(lot)
        db.flush()
        db.add(MediaRecord(
            project_id=project.id,
            layer_id=lot.id,
            type="image",
            purpose="cover",
            storage_path=lot_image_path(lot.slug),
            sort_order=0,
        ))

    db.add(MediaRecord(
        project_id=project.id,
        layer_id=block.id,
        type="image",
        purpose="exploration",
        storage_path="backgrounds/zona-a-manzana-1.jpg",
    ))
    db.commit()
    logger.info(f"Seeded {project.slug}")
    return project


def unit_status(tower_idx: int, floor: int, unit_idx: int) -> str:
    code = tower_idx * 100 + floor * 10 + unit_idx
    if code % 7 == 0:
        return "sold"
    if code % 5 == 0:
        return "reserved"
    if code % 11 == 0:
        return "not_available"
    return "available"


def unit_properties(tower: str, floor: int, letter: str, status: str) -> Dict[str, object]:
    large = letter in ("A", "C")
    area = (85 if large else 55) + (floor % 3) * 5
    unit_type = "3 Ambientes" if large else "2 Ambientes"
    has_balcony = letter in ("A", "B")
    base: List[str] = ["Aire acondicionado", "Calefacción central", "Portero eléctrico"]
    premium = ["Piso de porcelanato", "Cocina equipada", "Vestidor"]
    orientation = ORIENTATIONS.get(letter, "Norte")
    return {
        "area": area,
        "price": None if status == "sold" else area * (1800 + floor * 120),
        "bedrooms": 3 if large else 2,
        "bathrooms": 2 if large else 1,
        "unit_type": unit_type,
        "floor_number": floor,
        "has_balcony": has_balcony,
        "orientation": orientation,
        "features": base + premium if large else base + premium[:1],
        "description": (
            f"Departamento {unit_type.lower()} en piso {floor} de Torre {tower}. "
            f"{'Con balcón. ' if has_balcony else ''}Orientación {orientation.lower()}."
        ),
    }


def seed_torre_norte(db: DbSession, floors: int = 4, letters: str = "ABCD") -> ProjectRecord:
    """Two towers, ``floors`` floors each, one unit per letter on every floor."""
    project = ProjectRecord(
        slug="torre-norte",
        name="Torre Norte",
        description="Complejo residencial de 2 torres con departamentos de 2 y 3 ambientes",
        type="building",
        layer_labels=["Torre", "Piso", "Departamento"],
        max_depth=3,
        svg_path="/svgs/vista-torres.svg",
        city="Buenos Aires",
        state="CABA",
        country="Argentina",
    )
    db.add(project)
    db.flush()

    for tower_idx, tower in enumerate(("A", "B")):
        tower_slug = f"torre-{tower.lower()}"
        tower_layer = LayerRecord(
            project_id=project.id,
            depth=0,
            sort_order=tower_idx,
            slug=tower_slug,
            name=f"Torre {tower}",
            label=f"Torre {tower}",
            svg_element_id=tower_slug,
            svg_path=f"/svgs/torres/{tower_slug}.svg",
        )
        db.add(tower_layer)
        db.flush()
        for floor in range(1, floors + 1):
            floor_slug = f"{tower_slug}-piso-{floor}"
            floor_layer = LayerRecord(
                project_id=project.id,
                parent_id=tower_layer.id,
                depth=1,
                sort_order=floor - 1,
                slug=floor_slug,
                name=f"Piso {floor}",
                label=f"P{floor}",
                svg_element_id=f"piso-{floor}",
                svg_path=f"/svgs/pisos/{floor_slug}.svg",
            )
            db.add(floor_layer)
            db.flush()
            for unit_idx, letter in enumerate(letters):
                status = unit_status(tower_idx, floor, unit_idx)
                db.add(LayerRecord(
                    project_id=project.id,
                    parent_id=floor_layer.id,
                    depth=2,
                    sort_order=unit_idx,
                    slug=f"{floor_slug}-depto-{letter.lower()}",
                    name=f"Depto {letter}",
                    label=letter,
                    svg_element_id=f"depto-{letter.lower()}",
                    status=status,
                    properties=unit_properties(tower, floor, letter, status),
                ))
    db.commit()
    logger.info(f"Seeded {project.slug}")
    return project
