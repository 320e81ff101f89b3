import asyncio

import httpx
import pytest

from models.pokemon import PokemonSummary
from models.ui_state import BrowseState, DetailState
from services.catalog_client import CatalogClient
from tests.conftest import BASE_URL, FakePokeApi, make_names
from viewmodels.catalog_browser import CatalogBrowser
from viewmodels.task_scope import TaskScope


def _browser(api: FakePokeApi, **kwargs) -> CatalogBrowser:
    return CatalogBrowser(api.client(), TaskScope(), **kwargs)


@pytest.mark.asyncio
async def test_construction_loads_first_page(fake_api):
    browser = _browser(fake_api)

    assert browser.browse_state.value.loading is True
    await browser._scope.join()

    state = browser.browse_state.value
    assert not state.loading
    assert [p.name for p in state.items] == fake_api.names[:10]
    assert state.can_load_more
    assert fake_api.list_offsets == [0]


@pytest.mark.asyncio
async def test_pages_accumulate_in_request_order(fake_api):
    browser = _browser(fake_api)
    await browser._scope.join()

    await browser.load_more_pokemon()
    await browser.load_more_pokemon()

    assert fake_api.list_offsets == [0, 10, 20]
    assert [p.name for p in browser.loaded_items] == fake_api.names
    assert len(set(browser.loaded_items)) == len(fake_api.names)
    assert browser.browse_state.value.items == browser.loaded_items


@pytest.mark.asyncio
async def test_load_more_while_loading_is_noop(fake_api):
    browser = _browser(fake_api, autoload=False)
    gate = fake_api.hold("/api/v2/pokemon")

    first = browser.load_more_pokemon()
    assert browser.load_more_pokemon() is None
    assert browser.load_more_pokemon() is None

    gate.set()
    await first
    assert fake_api.list_offsets == [0]
    assert len(browser.loaded_items) == 10


@pytest.mark.asyncio
async def test_end_of_catalogue_stops_pagination():
    api = FakePokeApi(make_names(12))
    browser = _browser(api)
    await browser._scope.join()
    await browser.load_more_pokemon()

    assert browser.browse_state.value.can_load_more is False
    assert browser.load_more_pokemon() is None
    assert browser.load_more_pokemon() is None
    assert api.list_offsets == [0, 10]
    assert len(browser.loaded_items) == 12


@pytest.mark.asyncio
async def test_short_page_does_not_end_pagination():
    api = FakePokeApi(make_names(30))
    # Serve a short first page that still advertises a next link.
    original = api._list

    def short_list(request):
        response = original(request)
        body = response.json()
        body["results"] = body["results"][:4]
        return httpx.Response(200, json=body)

    api._list = short_list
    browser = _browser(api)
    await browser._scope.join()

    assert len(browser.loaded_items) == 4
    assert browser.browse_state.value.can_load_more is True
    await browser.load_more_pokemon()
    assert api.list_offsets == [0, 4]


@pytest.mark.asyncio
async def test_failed_page_keeps_buffer_and_allows_retry(fake_api):
    browser = _browser(fake_api)
    await browser._scope.join()

    fake_api.fail_next = 500
    await browser.load_more_pokemon()

    state = browser.browse_state.value
    assert not state.loading
    assert state.can_load_more
    assert state.error and "500" in state.error
    assert len(browser.loaded_items) == 10

    await browser.load_more_pokemon()
    assert browser.browse_state.value.error is None
    assert fake_api.list_offsets == [0, 10, 10]
    assert len(browser.loaded_items) == 20


@pytest.mark.asyncio
async def test_observers_see_loading_transition(fake_api):
    browser = _browser(fake_api, autoload=False)
    seen = []
    browser.browse_state.subscribe(lambda s: seen.append(s.loading))

    await browser.load_more_pokemon()

    assert seen == [False, True, False]


@pytest.mark.asyncio
async def test_search_filters_loaded_items_case_insensitively():
    api = FakePokeApi(["Charmander", "Charmeleon", "Squirtle"])
    browser = _browser(api)
    await browser._scope.join()

    browser.update_search_query("char")

    assert [p.name for p in browser.filtered_items.value] == ["Charmander", "Charmeleon"]
    assert len(browser.loaded_items) == 3
    assert browser.search_query.value == "char"
    assert api.list_offsets == [0]


@pytest.mark.asyncio
async def test_blank_query_shows_everything(fake_api):
    browser = _browser(fake_api)
    await browser._scope.join()

    browser.update_search_query("mon-00")
    assert len(browser.filtered_items.value) == 9
    browser.update_search_query("   ")

    assert browser.filtered_items.value == browser.loaded_items


@pytest.mark.asyncio
async def test_query_survives_pagination(fake_api):
    browser = _browser(fake_api)
    await browser._scope.join()
    browser.update_search_query("mon-01")
    assert [p.name for p in browser.filtered_items.value] == ["mon-010"]

    await browser.load_more_pokemon()

    assert [p.name for p in browser.filtered_items.value] == [
        "mon-010", "mon-011", "mon-012", "mon-013", "mon-014",
        "mon-015", "mon-016", "mon-017", "mon-018", "mon-019",
    ]
    assert fake_api.list_offsets == [0, 10]


@pytest.mark.asyncio
async def test_detail_is_loading_then_exactly_one_outcome(fake_api):
    browser = _browser(fake_api, autoload=False)

    task = browser.load_pokemon_detail("25")
    assert browser.detail_state.value == DetailState(loading=True)
    await task

    state = browser.detail_state.value
    assert state.loading is False
    assert state.item.id == 25
    assert state.error is None


@pytest.mark.asyncio
async def test_detail_failure_sets_error_only(fake_api):
    browser = _browser(fake_api, autoload=False)

    await browser.load_pokemon_detail("missingno")

    state = browser.detail_state.value
    assert state.loading is False
    assert state.item is None
    assert "not found" in state.error


@pytest.mark.asyncio
async def test_new_detail_request_replaces_previous_result(fake_api):
    browser = _browser(fake_api, autoload=False)
    await browser.load_pokemon_detail("1")
    seen = []
    browser.detail_state.subscribe(seen.append)

    task = browser.load_pokemon_detail("2")
    assert seen[-1] == DetailState(loading=True)
    await task
    assert browser.detail_state.value.item.id == 2


@pytest.mark.asyncio
async def test_stale_detail_response_is_dropped(fake_api):
    browser = _browser(fake_api, autoload=False)
    slow_gate = fake_api.hold("/api/v2/pokemon/1")

    slow = browser.load_pokemon_detail("1")
    await asyncio.sleep(0)
    await browser.load_pokemon_detail("2")
    slow_gate.set()
    await slow

    assert browser.detail_state.value.item.id == 2


@pytest.mark.asyncio
async def test_clear_detail_closes_view_and_ignores_in_flight(fake_api):
    browser = _browser(fake_api, autoload=False)
    gate = fake_api.hold("/api/v2/pokemon/3")

    task = browser.load_pokemon_detail("3")
    browser.clear_pokemon_detail()
    assert browser.detail_state.value is None

    gate.set()
    await task
    assert browser.detail_state.value is None


@pytest.mark.asyncio
async def test_close_cancels_in_flight_page(fake_api):
    browser = _browser(fake_api, autoload=False)
    fake_api.hold("/api/v2/pokemon")
    task = browser.load_more_pokemon()
    await asyncio.sleep(0)

    browser.close()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert browser.loaded_items == ()


def test_summary_id_comes_from_last_path_segment():
    entry = PokemonSummary(name="pikachu", href="https://pokeapi.co/api/v2/pokemon/25/")
    assert entry.pokemon_id == "25"
    assert BrowseState().can_load_more is True


@pytest.mark.asyncio
async def test_non_object_detail_body_ends_in_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[1, 2]))
    browser = CatalogBrowser(CatalogClient(BASE_URL, transport=transport), TaskScope(), autoload=False)

    await browser.load_pokemon_detail("25")

    state = browser.detail_state.value
    assert state.loading is False
    assert state.item is None
    assert state.error


@pytest.mark.asyncio
async def test_non_object_page_body_keeps_pagination_usable():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
    browser = CatalogBrowser(CatalogClient(BASE_URL, transport=transport), TaskScope(), autoload=False)

    await browser.load_more_pokemon()

    state = browser.browse_state.value
    assert state.loading is False
    assert state.error
    assert browser.load_more_pokemon() is not None
    await browser._scope.join()


class _ExplodingClient:
    async def list_page(self, offset, limit):
        raise RuntimeError("decoder exploded")

    async def get_detail(self, id_or_name):
        raise RuntimeError("decoder exploded")


@pytest.mark.asyncio
async def test_unexpected_client_failure_still_settles_state():
    browser = CatalogBrowser(_ExplodingClient(), TaskScope(), autoload=False)

    await browser.load_more_pokemon()
    await browser.load_pokemon_detail("1")

    browse = browser.browse_state.value
    assert browse.loading is False
    assert "decoder exploded" in browse.error
    detail = browser.detail_state.value
    assert detail.loading is False
    assert detail.item is None
    assert "decoder exploded" in detail.error
