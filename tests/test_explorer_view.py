"""Explorer composition: display strings, click policies and sibling switching."""
import asyncio

import httpx

from masterplan.media.loader import MediaLoader
from masterplan.views.explorer import ExplorerPage, ExplorerView, LeafClickPolicy
from masterplan.views.navigator import Navigator


def _block_page(tree, media):
    return ExplorerPage.compose(tree, media, ["zona-a", "zona-a-manzana-1"])


def test_block_level_display(los_alamos_tree, los_alamos_media):
    view = ExplorerView(_block_page(los_alamos_tree, los_alamos_media))

    assert view.title == "Manzana 1"
    assert view.level_label == "Manzana"
    assert view.child_label == "Lote"
    assert view.subtitle == "Selecciona un lote para explorar"
    assert view.availability == (5, 8)
    assert view.footer == "5 de 8 lotes disponibles"
    assert view.diagram_url == "/svgs/manzanas/zona-a-manzana-1.svg"
    assert view.background_url == "backgrounds/zona-a-manzana-1.jpg"
    assert view.placeholder is None


def test_root_level_uses_project_diagram(los_alamos_tree, los_alamos_media):
    view = ExplorerView(ExplorerPage.compose(los_alamos_tree, los_alamos_media, []))
    assert view.title == "Los Alamos"
    assert view.level_label == ""
    assert view.child_label == "Zona"
    assert view.diagram_url == "/svgs/mapa-principal.svg"
    assert view.background_url is None
    assert view.footer == "1 de 1 zonas disponibles"


def test_child_label_falls_back_past_last_depth(los_alamos_tree, los_alamos_media):
    page = ExplorerPage.compose(
        los_alamos_tree, los_alamos_media, ["zona-a", "zona-a-manzana-1", "zona-a-manzana-1-lote-01"]
    )
    view = ExplorerView(page)
    assert view.child_label == "elemento"
    assert page.is_unit


def test_page_media_is_split_by_owner(los_alamos_tree, los_alamos_media):
    page = _block_page(los_alamos_tree, los_alamos_media)
    assert [m.id for m in page.media] == ["bg-1"]
    assert sorted(page.children_media) == [f"l-{n}" for n in range(1, 9)]
    assert page.children_media["l-3"][0].id == "cover-3"


def test_entities_follow_child_order(los_alamos_tree, los_alamos_media):
    view = ExplorerView(_block_page(los_alamos_tree, los_alamos_media))
    entities = view.entities()
    assert [e.region_id for e in entities] == [f"lote-{n:02d}" for n in range(1, 9)]
    assert entities[1].status == "sold"
    assert entities[0].label == "L1"


def test_non_leaf_click_pushes_child_path(los_alamos_tree, los_alamos_media):
    page = ExplorerPage.compose(los_alamos_tree, los_alamos_media, ["zona-a"])
    navigator = Navigator("los-alamos", ["zona-a"])
    view = ExplorerView(page, navigator, leaf_click_policy=LeafClickPolicy.PANEL)

    view.entities()[0].on_activate()

    assert navigator.current == ["zona-a", "zona-a-manzana-1"]
    assert navigator.current_href == "/p/los-alamos/zona-a/zona-a-manzana-1"
    assert len(navigator) == 2
    assert view.selected_layer is None


def test_leaf_click_navigate_policy(los_alamos_tree, los_alamos_media):
    page = _block_page(los_alamos_tree, los_alamos_media)
    navigator = Navigator("los-alamos", page.current_path)
    view = ExplorerView(page, navigator, leaf_click_policy=LeafClickPolicy.NAVIGATE)

    view.entities()[2].on_activate()

    assert navigator.current == ["zona-a", "zona-a-manzana-1", "zona-a-manzana-1-lote-03"]
    assert view.selected_layer is None
    assert view.detail_panel() is None


def test_leaf_click_panel_policy(los_alamos_tree, los_alamos_media):
    page = _block_page(los_alamos_tree, los_alamos_media)
    navigator = Navigator("los-alamos", page.current_path)
    view = ExplorerView(page, navigator, leaf_click_policy="panel")

    view.entities()[0].on_activate()

    assert len(navigator) == 1
    panel = view.detail_panel()
    assert panel.name == "Lote 01"
    assert panel.price == "$46.000"
    assert panel.price_per_m2 == "$153/m²"
    assert panel.dimensions == "Frente: 10m × Fondo: 30m"
    assert panel.image.id == "cover-1"
    assert panel.image_url is None

    view.close_panel()
    assert view.detail_panel() is None


def test_panel_loads_cover_and_prefetches_neighbours(los_alamos_tree, los_alamos_media):
    fetched = []

    def handler(request):
        fetched.append(request.url.path)
        return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})

    async def scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://storage.test")
        loader = MediaLoader(client, prefetch_delay=0)
        view = ExplorerView(
            _block_page(los_alamos_tree, los_alamos_media),
            leaf_click_policy=LeafClickPolicy.PANEL,
            media_loader=loader,
        )
        view.entities()[2].on_activate()
        handle = await view.panel_media_task
        await asyncio.sleep(0.05)
        panel = view.detail_panel()
        covers = [view.cover_url(child) for child in view.page.children]
        cached = sorted(url for url in covers if loader.cached(url) is not None)
        await view.unmount()
        await client.aclose()
        return handle, panel, cached, loader

    handle, panel, cached, loader = asyncio.run(scenario())

    assert fetched[0] == "/zona-a/manzana-1/lote-03-main.jpg"
    assert panel.image_url == handle.object_url
    assert handle.object_url.startswith("blob:masterplan/")
    assert cached == [
        "zona-a/manzana-1/lote-02-main.jpg",
        "zona-a/manzana-1/lote-03-main.jpg",
        "zona-a/manzana-1/lote-04-main.jpg",
    ]
    assert handle.revoked
    assert all(loader.cached(url) is None for url in cached)


def test_sibling_switcher_highlights_current(tower_tree):
    page = ExplorerPage.compose(tower_tree, [], ["torre-a", "torre-a-piso-2"])
    view = ExplorerView(page)

    assert view.show_sibling_switcher
    items = view.sibling_switcher()
    assert [i.layer.slug for i in items] == ["torre-a-piso-1", "torre-a-piso-2", "torre-a-piso-3"]
    assert [i.is_current for i in items] == [False, True, False]
    assert items[0].href == "/p/torre-norte/torre-a/torre-a-piso-1"


def test_sibling_switch_replaces_last_segment(tower_tree):
    navigator = Navigator("torre-norte")
    navigator.push(["torre-a"])
    navigator.push(["torre-a", "torre-a-piso-1"])
    page_a = ExplorerPage.compose(tower_tree, [], navigator.current)
    view = ExplorerView(page_a, navigator)
    target = next(s for s in page_a.siblings if s.slug == "torre-a-piso-3")

    assert view.select_sibling(target) is True

    assert navigator.current == ["torre-a", "torre-a-piso-3"]
    assert len(navigator) == 3
    page_b = ExplorerPage.compose(tower_tree, [], navigator.current)
    assert page_b.current_layer.id == target.id
    assert len(page_b.breadcrumbs) == len(page_a.breadcrumbs)

    assert navigator.back() is True
    assert navigator.current == ["torre-a"]


def test_selecting_current_sibling_is_a_noop(tower_tree):
    navigator = Navigator("torre-norte", ["torre-a", "torre-a-piso-1"])
    page = ExplorerPage.compose(tower_tree, [], navigator.current)
    view = ExplorerView(page, navigator)

    assert view.select_sibling(page.current_layer) is False
    assert navigator.history == [["torre-a", "torre-a-piso-1"]]


def test_single_sibling_hides_switcher(los_alamos_tree, los_alamos_media):
    view = ExplorerView(_block_page(los_alamos_tree, los_alamos_media))
    assert not view.show_sibling_switcher
    assert view.sibling_switcher() == []


def test_mount_binds_children_to_diagram(los_alamos_tree, los_alamos_media, block_svg):
    from masterplan.diagram.overlay import DiagramOverlay

    async def scenario():
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text=block_svg)),
            base_url="http://storage.test",
        )
        view = ExplorerView(
            _block_page(los_alamos_tree, los_alamos_media),
            overlay=DiagramOverlay(client=client, accessible=False),
        )
        rendered = await view.mount()
        await client.aclose()
        return view, rendered

    view, rendered = asyncio.run(scenario())
    assert len(rendered.bindings) == 8
    view.overlay.surface.dispatch("lote-05", "click")
    assert view.selected_layer.slug == "zona-a-manzana-1-lote-05"


def test_failed_diagram_load_stays_inside_the_view(los_alamos_tree, los_alamos_media):
    from masterplan.diagram.overlay import DiagramOverlay, OverlayState

    async def scenario():
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
            base_url="http://storage.test",
        )
        view = ExplorerView(
            _block_page(los_alamos_tree, los_alamos_media),
            overlay=DiagramOverlay(client=client),
        )
        rendered = await view.mount()
        await client.aclose()
        return view, rendered

    view, rendered = asyncio.run(scenario())
    assert rendered is None
    assert view.overlay.state is OverlayState.ERROR
    assert "Error loading interactive map" in view.overlay.render()
    assert view.overlay.surface.error_message
