"""
viewmodels/catalog_browser.py – Paginated catalogue listing, search and detail.

State channels
--------------
  browse_state   : BrowseState            – pagination progress + all items
  search_query   : str                    – current search text
  filtered_items : tuple[PokemonSummary]  – items matching the search text
  detail_state   : DetailState | None     – the selected entry's detail

Pages are requested strictly in offset order, PAGE_SIZE apart; the remote
``next`` link alone decides whether more pages exist.  Search only filters
what is already loaded.
"""

import asyncio
import logging
from typing import List, Optional

from models.pokemon import PokemonSummary
from models.ui_state import BrowseState, DetailState
from services import search_service
from services.catalog_client import CatalogClient
from services.exceptions import RemoteError, Result
from services.state_channel import StateChannel
from viewmodels.task_scope import TaskScope

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────────────────
PAGE_SIZE: int = 10


class CatalogBrowser:
    """
    Parameters
    ----------
    client    : Catalogue client used for list and detail requests.
    scope     : Task scope the remote calls are launched in.
    page_size : Entries requested per page.
    autoload  : Request the first page immediately on construction.
    """

    def __init__(
        self,
        client: CatalogClient,
        scope: TaskScope,
        *,
        page_size: int = PAGE_SIZE,
        autoload: bool = True,
    ) -> None:
        self._client = client
        self._scope = scope
        self._page_size = page_size
        self._buffer: List[PokemonSummary] = []
        # Bumped on every detail request / clear; stale responses are dropped.
        self._detail_generation = 0

        self.browse_state = StateChannel(BrowseState(), name="browse_state")
        self.search_query = StateChannel("", name="search_query")
        self.filtered_items = StateChannel((), name="filtered_items")
        self.detail_state: StateChannel = StateChannel(None, name="detail_state")

        if autoload:
            self.load_more_pokemon()

    @property
    def loaded_items(self) -> tuple:
        """Snapshot of the accumulation buffer."""
        return tuple(self._buffer)

    # ── Listing ───────────────────────────────────────────────────────────────

    def load_more_pokemon(self) -> Optional[asyncio.Task]:
        """
        Request the next page unless one is in flight or the end was reached.

        Returns the launched task, or None when the call was a no-op.
        """
        state = self.browse_state.value
        if state.loading or not state.can_load_more:
            return None

        self.browse_state.update(loading=True)
        offset = len(self._buffer)
        return self._scope.launch(self._load_page(offset), name=f"load_page@{offset}")

    async def _load_page(self, offset: int) -> None:
        try:
            result = await self._client.list_page(offset, self._page_size)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure loading page at offset %d", offset)
            self.browse_state.update(loading=False, error=f"Failed to load Pokémon: {exc}")
            return
        if result.ok:
            page = result.value
            self._buffer.extend(page.results)
            self.browse_state.update(
                loading=False,
                items=tuple(self._buffer),
                can_load_more=page.next is not None,
                error=None,
            )
            logger.debug("Loaded %d entries (total %d)", len(page.results), len(self._buffer))
        else:
            self.browse_state.update(
                loading=False, error=result.message or "Failed to load Pokémon"
            )
        self._refresh_filtered()

    # ── Search ────────────────────────────────────────────────────────────────

    def update_search_query(self, text: str) -> None:
        self.search_query.publish(text)
        self._refresh_filtered()

    def _refresh_filtered(self) -> None:
        self.filtered_items.publish(search_service.search(self._buffer, self.search_query.value))

    # ── Detail ────────────────────────────────────────────────────────────────

    def load_pokemon_detail(self, id_or_name: str) -> asyncio.Task:
        self._detail_generation += 1
        generation = self._detail_generation
        self.detail_state.publish(DetailState(loading=True))
        return self._scope.launch(
            self._load_detail(id_or_name, generation), name=f"load_detail:{id_or_name}"
        )

    async def _load_detail(self, id_or_name: str, generation: int) -> None:
        try:
            result = await self._client.get_detail(id_or_name)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure loading detail for %r", id_or_name)
            result = Result.failure(RemoteError(0, f"Failed to load Pokémon details: {exc}"))
        if generation != self._detail_generation:
            logger.warning("Dropping stale detail response for %r", id_or_name)
            return
        if result.ok:
            self.detail_state.publish(DetailState(item=result.value))
        else:
            self.detail_state.publish(
                DetailState(error=result.message or "Failed to load Pokémon details")
            )

    def clear_pokemon_detail(self) -> None:
        self._detail_generation += 1
        self.detail_state.publish(None)

    def close(self) -> None:
        self._scope.close()
