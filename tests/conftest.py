import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest

from masterplan.hierarchy.resolver import LayerTree
from masterplan.models.hierarchy import Layer, Media, Project


def make_layer(layer_id, slug, name, *, parent=None, sort=0, status="available", svg=None,
               label=None, element_id=None, properties=None, project_id="p-1"):
    return Layer(
        id=layer_id,
        project_id=project_id,
        parent_id=parent.id if parent else None,
        depth=parent.depth + 1 if parent else 0,
        sort_order=sort,
        slug=slug,
        name=name,
        label=label or name,
        svg_element_id=element_id,
        status=status,
        svg_path=svg,
        properties=properties or {},
    )


BLOCK_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 800 400">
  <g id="lotes">
    <rect id="lote-01" x="0" y="0" width="100" height="200"/>
    <rect id="lote-02" x="100" y="0" width="100" height="200"/>
    <rect id="lote-03" x="200" y="0" width="100" height="200"/>
    <rect id="lote-04" x="300" y="0" width="100" height="200"/>
    <rect id="lote-05" x="400" y="0" width="100" height="200"/>
    <rect id="lote-06" x="500" y="0" width="100" height="200"/>
    <rect id="lote-07" x="600" y="0" width="100" height="200"/>
    <polygon id="lote-08" points="700,0 800,0 800,200 700,200"/>
  </g>
  <path id="calle" d="M0 300 H800"/>
  <circle id="arbol" cx="50" cy="350" r="10"/>
</svg>"""


@pytest.fixture
def block_svg():
    return BLOCK_SVG


@pytest.fixture
def los_alamos_project():
    return Project(
        id="p-1",
        slug="los-alamos",
        name="Los Alamos",
        type="subdivision",
        layer_labels=["Zona", "Manzana", "Lote"],
        max_depth=3,
        svg_path="/svgs/mapa-principal.svg",
    )


@pytest.fixture
def los_alamos_layers():
    zone = make_layer("z-a", "zona-a", "Zona A", label="A", svg="/svgs/zonas/zona-a.svg")
    block = make_layer(
        "m-1", "zona-a-manzana-1", "Manzana 1", parent=zone, label="M1",
        element_id="manzana-1", svg="/svgs/manzanas/zona-a-manzana-1.svg",
    )
    lots = [
        make_layer(
            f"l-{n}",
            f"zona-a-manzana-1-lote-{n:02d}",
            f"Lote {n:02d}",
            parent=block,
            sort=n - 1,
            label=f"L{n}",
            element_id=f"lote-{n:02d}",
            status="sold" if n in (2, 5, 7) else "available",
            properties={"area": 300, "price": 45000 + n * 1000, "front_meters": 10, "depth_meters": 30},
        )
        for n in range(1, 9)
    ]
    # Insertion order must not matter.
    return list(reversed(lots)) + [block, zone]


@pytest.fixture
def los_alamos_tree(los_alamos_project, los_alamos_layers):
    return LayerTree(los_alamos_project, los_alamos_layers)


@pytest.fixture
def los_alamos_media():
    media = [
        Media(
            id="bg-1",
            project_id="p-1",
            layer_id="m-1",
            type="image",
            purpose="exploration",
            storage_path="backgrounds/zona-a-manzana-1.jpg",
        )
    ]
    for n in range(1, 9):
        media.append(Media(
            id=f"cover-{n}",
            project_id="p-1",
            layer_id=f"l-{n}",
            type="image",
            purpose="cover",
            storage_path=f"zona-a/manzana-1/lote-{n:02d}-main.jpg",
        ))
    return media


@pytest.fixture
def tower_project():
    return Project(
        id="p-2",
        slug="torre-norte",
        name="Torre Norte",
        type="building",
        layer_labels=["Torre", "Piso", "Departamento"],
        max_depth=3,
        svg_path="/svgs/vista-torres.svg",
    )


@pytest.fixture
def tower_tree(tower_project):
    tower = make_layer("t-a", "torre-a", "Torre A", svg="/svgs/torres/torre-a.svg", project_id="p-2")
    layers = [tower]
    for floor in range(1, 4):
        floor_layer = make_layer(
            f"f-{floor}", f"torre-a-piso-{floor}", f"Piso {floor}", parent=tower, sort=floor - 1,
            label=f"P{floor}", element_id=f"piso-{floor}", svg=f"/svgs/pisos/torre-a-piso-{floor}.svg",
            project_id="p-2",
        )
        layers.append(floor_layer)
        for idx, letter in enumerate("AB"):
            layers.append(make_layer(
                f"u-{floor}{letter}", f"torre-a-piso-{floor}-depto-{letter.lower()}", f"Depto {letter}",
                parent=floor_layer, sort=idx, label=letter, element_id=f"depto-{letter.lower()}",
                properties={"area": 80, "bedrooms": 3, "bathrooms": 2, "floor_number": floor},
                project_id="p-2",
            ))
    return LayerTree(tower_project, layers)


@pytest.fixture
def layer_factory():
    return make_layer
