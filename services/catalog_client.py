"""
services/catalog_client.py – Async PokéAPI client.

Thin pass-through over httpx.AsyncClient: one request per call, no retries,
no caching.  Transport and HTTP failures are mapped onto the PokedexError
taxonomy and handed back inside a Result so nothing is raised across the
client boundary.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from models.pokemon import PokemonDetail, PokemonPage
from services.exceptions import NetworkError, NotFound, PokedexError, RemoteError, Result

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────────────────
API_BASE_URL: str = "https://pokeapi.co/api/v2/"
HTTP_TIMEOUT: float = 30.0


class CatalogClient:
    """
    Parameters
    ----------
    base_url  : Catalogue root; must end with "/".
    timeout   : Per-request timeout in seconds.
    transport : Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        *,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not base_url.endswith("/"):
            base_url += "/"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Public API ───────────────────────────────────────────────────────────

    async def list_page(self, offset: int, limit: int) -> Result[PokemonPage]:
        """
        Fetch one page of the catalogue listing.

        Raises
        ------
        ValueError when *offset* is negative or *limit* is not positive.
        """
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")

        try:
            status, body = await self._get_json("pokemon", {"offset": offset, "limit": limit})
            return Result.success(_parse(PokemonPage.from_api, body, status))
        except PokedexError as exc:
            logger.warning("Page load failed (offset=%d, limit=%d): %s", offset, limit, exc)
            return Result.failure(exc)

    async def get_detail(self, id_or_name: str) -> Result[PokemonDetail]:
        key = str(id_or_name).strip().lower()
        if not key:
            return Result.failure(NotFound("No Pokémon id or name given."))

        try:
            status, body = await self._get_json(f"pokemon/{key}")
            return Result.success(_parse(PokemonDetail.from_api, body, status))
        except PokedexError as exc:
            logger.warning("Detail load failed for %r: %s", key, exc)
            return Result.failure(exc)

    # ── Private helpers ───────────────────────────────────────────────────────

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None):
        logger.debug("GET %s %s", path, params or "")
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 404:
                raise NotFound(f"Pokémon '{path.rsplit('/', 1)[-1]}' not found.") from exc
            raise RemoteError(status) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Network error while contacting the catalogue: {exc}") from exc

        try:
            return response.status_code, response.json()
        except ValueError as exc:
            raise RemoteError(
                response.status_code, "Catalogue returned a response that is not JSON."
            ) from exc


def _parse(factory, body: Any, status: int):
    if not isinstance(body, dict):
        raise RemoteError(
            status, f"Catalogue response is not an object: got {type(body).__name__}"
        )
    try:
        return factory(body)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise RemoteError(
            status, f"Catalogue response could not be parsed: missing or bad field {exc}"
        ) from exc
