"""
app_container.py – Explicit construction of the application's components.

Nothing here is a process-wide singleton: the window (or a test) builds one
container, passes it around and closes it on shutdown.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx

from services.auth_repository import AuthRepository
from services.catalog_client import API_BASE_URL, HTTP_TIMEOUT, CatalogClient
from services.credential_store import CredentialStore
from viewmodels.catalog_browser import PAGE_SIZE, CatalogBrowser
from viewmodels.session_manager import SessionManager
from viewmodels.task_scope import TaskScope

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR: Path = Path.home() / ".pokedex_client"


@dataclass(frozen=True)
class AppConfig:
    """
    Attributes
    ----------
    data_dir     : Where users.db and user_prefs.json live.
    api_base_url : Catalogue root URL.
    http_timeout : Per-request timeout in seconds.
    page_size    : Entries per listing page.
    """

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    api_base_url: str = API_BASE_URL
    http_timeout: float = HTTP_TIMEOUT
    page_size: int = PAGE_SIZE


class AppContainer:
    """
    Owns the store, the catalogue client and both view-models.

    Must be created while *loop* (or the running loop) is available because the
    catalogue browser requests its first page on construction.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        autoload: bool = True,
    ) -> None:
        self.config = config
        self.store = CredentialStore(config.data_dir)
        self.auth = AuthRepository(self.store)
        self.client = CatalogClient(
            config.api_base_url, timeout=config.http_timeout, transport=transport
        )
        self._session_scope = TaskScope(loop)
        self.session = SessionManager(self.auth, self._session_scope)
        self.browser = CatalogBrowser(
            self.client, TaskScope(loop), page_size=config.page_size, autoload=autoload
        )
        logger.info("Application ready (data dir: %s)", config.data_dir)

    async def aclose(self) -> None:
        self.browser.close()
        self._session_scope.close()
        await self.client.aclose()
