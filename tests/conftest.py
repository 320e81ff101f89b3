"""
Shared pytest fixtures for the Pokédex client test suite.

FakePokeApi serves the two catalogue endpoints through httpx.MockTransport so
the real CatalogClient is exercised end to end without network access.
"""

import asyncio
import os
from typing import Dict, List, Optional

import httpx
import pytest

from services.catalog_client import CatalogClient
from services.credential_store import CredentialStore

BASE_URL = "https://pokeapi.test/api/v2/"


def detail_payload(pokemon_id: int, name: str) -> dict:
    return {
        "id": pokemon_id,
        "name": name,
        "height": 4,
        "weight": 60,
        "base_experience": 112,
        "sprites": {
            "front_default": f"https://img.test/{pokemon_id}.png",
            "back_default": None,
            "front_shiny": f"https://img.test/shiny/{pokemon_id}.png",
            "back_shiny": None,
            "other": {},
        },
        "abilities": [
            {"ability": {"name": "static", "url": "https://x/ability/9/"}, "is_hidden": False, "slot": 1},
            {"ability": {"name": "lightning-rod", "url": "https://x/ability/31/"}, "is_hidden": True, "slot": 3},
        ],
        "types": [{"slot": 1, "type": {"name": "electric", "url": "https://x/type/13/"}}],
        "stats": [
            {"base_stat": 35, "effort": 0, "stat": {"name": "hp", "url": "https://x/stat/1/"}},
            {"base_stat": 90, "effort": 2, "stat": {"name": "speed", "url": "https://x/stat/6/"}},
        ],
    }


class FakePokeApi:
    """
    In-memory stand-in for the catalogue.

    Attributes
    ----------
    names      : Catalogue entries; id = position + 1.
    requests   : Every request received, in order.
    fail_next  : Status code (or "network") to answer the next request with.
    gates      : Optional per-path asyncio.Event the handler waits on.
    """

    def __init__(self, names: List[str]) -> None:
        self.names = names
        self.requests: List[httpx.Request] = []
        self.fail_next: Optional[object] = None
        self.gates: Dict[str, asyncio.Event] = {}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> CatalogClient:
        return CatalogClient(BASE_URL, transport=self.transport())

    def hold(self, path: str) -> asyncio.Event:
        """Block requests to *path* until the returned event is set."""
        gate = asyncio.Event()
        self.gates[path] = gate
        return gate

    @property
    def list_offsets(self) -> List[int]:
        return [
            int(r.url.params["offset"])
            for r in self.requests
            if r.url.path.endswith("/pokemon")
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()

        if self.fail_next is not None:
            failure, self.fail_next = self.fail_next, None
            if failure == "network":
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(int(failure), json={"detail": "boom"})

        if path.endswith("/pokemon"):
            return self._list(request)
        key = path.rstrip("/").rsplit("/", 1)[-1]
        return self._detail(key)

    def _list(self, request: httpx.Request) -> httpx.Response:
        offset = int(request.url.params["offset"])
        limit = int(request.url.params["limit"])
        chunk = self.names[offset:offset + limit]
        end = offset + limit
        return httpx.Response(
            200,
            json={
                "count": len(self.names),
                "next": f"{BASE_URL}pokemon?offset={end}&limit={limit}" if end < len(self.names) else None,
                "previous": f"{BASE_URL}pokemon?offset={max(offset - limit, 0)}&limit={limit}" if offset else None,
                "results": [
                    {"name": name, "url": f"{BASE_URL}pokemon/{offset + i + 1}/"}
                    for i, name in enumerate(chunk)
                ],
            },
        )

    def _detail(self, key: str) -> httpx.Response:
        if key.isdigit() and 1 <= int(key) <= len(self.names):
            index = int(key) - 1
        elif key in self.names:
            index = self.names.index(key)
        else:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, json=detail_payload(index + 1, self.names[index]))


def make_names(count: int) -> List[str]:
    return [f"mon-{i:03d}" for i in range(1, count + 1)]


@pytest.fixture
def fake_api():
    return FakePokeApi(make_names(25))


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "data")


@pytest.fixture(scope="session")
def qt_app():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
