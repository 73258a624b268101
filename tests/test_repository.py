import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from masterplan.db import Base
from masterplan.db_models import LayerRecord
from masterplan.errors import NotFoundError
from masterplan.seed import seed_los_alamos, seed_torre_norte
from masterplan.services.explorer_service import get_explorer_page, list_routes
from masterplan.services.repository import SqlRepository
from masterplan.views.explorer import ExplorerView


test_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        seed_los_alamos(session)
        seed_torre_norte(session)
        yield session
    finally:
        session.close()


@pytest.fixture
def repo(db_session):
    return SqlRepository(db_session)


def test_get_project(repo):
    project = repo.get_project("los-alamos")
    assert project.name == "Los Alamos"
    assert project.type == "subdivision"
    assert project.layer_labels == ["Zona", "Manzana", "Lote"]


def test_unknown_project_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        repo.get_project("nope")


def test_layers_are_ordered_by_depth_then_sort_order(repo):
    project = repo.get_project("los-alamos")
    layers = repo.get_layers(project.id)
    assert len(layers) == 10
    assert [l.depth for l in layers] == sorted(l.depth for l in layers)
    assert [l.slug for l in layers[2:4]] == ["zona-a-manzana-1-lote-01", "zona-a-manzana-1-lote-02"]


def test_buyer_fields_never_serialize(repo, db_session):
    record = db_session.query(LayerRecord).filter_by(slug="zona-a-manzana-1-lote-02").one()
    record.buyer_name = "Ana"
    db_session.commit()

    project = repo.get_project("los-alamos")
    lot = next(l for l in repo.get_layers(project.id) if l.slug == "zona-a-manzana-1-lote-02")
    assert lot.buyer_name == "Ana"
    assert "buyer_name" not in lot.model_dump()


def test_media_and_slugs(repo):
    project = repo.get_project("los-alamos")
    media = repo.get_media(project.id)
    assert {m.purpose.value for m in media} == {"cover", "exploration"}
    assert repo.list_project_slugs() == ["los-alamos", "torre-norte"]


def test_list_layer_paths(repo):
    tower = repo.get_project("torre-norte")
    paths = repo.list_layer_paths(tower.id)
    assert len(paths) == 2 + 2 * 4 + 2 * 4 * 4
    assert paths[0] == ["torre-a"]
    assert paths[1] == ["torre-a", "torre-a-piso-1"]
    assert paths[2] == ["torre-a", "torre-a-piso-1", "torre-a-piso-1-depto-a"]


def test_los_alamos_end_to_end(repo):
    page = get_explorer_page(repo, "los-alamos", ["zona-a", "zona-a-manzana-1"])
    view = ExplorerView(page)

    assert len(page.children) == 8
    assert page.is_leaf_level
    assert view.availability == (5, 8)
    assert [b.label for b in page.breadcrumbs] == ["Mapa Principal", "Zona A", "Manzana 1"]
    assert page.breadcrumbs[-1].href is None
    assert all(b.href for b in page.breadcrumbs[:-1])
    assert view.background_url == "backgrounds/zona-a-manzana-1.jpg"
    assert len(page.children_media) == 8


def test_explorer_page_not_found(repo):
    with pytest.raises(NotFoundError):
        get_explorer_page(repo, "los-alamos", ["zona-z"])


def test_list_routes(repo):
    routes = list_routes(repo)
    assert routes[0] == "/p/los-alamos"
    assert "/p/los-alamos/zona-a/zona-a-manzana-1/zona-a-manzana-1-lote-08" in routes
    assert "/p/torre-norte" in routes
    assert len(routes) == (1 + 10) + (1 + 42)
