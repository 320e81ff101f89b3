"""
main.py – Pokédex client entry point.
Bootstraps the PySide6 QApplication and runs the asyncio loop on top of Qt.

Environment
-----------
  POKEDEX_API_URL   : Catalogue root (default https://pokeapi.co/api/v2/)
  POKEDEX_DATA_DIR  : Credential storage directory (default ~/.pokedex_client)
  POKEDEX_LOG_LEVEL : Logging level name (default INFO)
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

from PySide6 import QtAsyncio
from PySide6.QtWidgets import QApplication

from app_container import DEFAULT_DATA_DIR, AppConfig
from main_window import MainWindow
from services.catalog_client import API_BASE_URL


def _config_from_env() -> AppConfig:
    return AppConfig(
        data_dir=Path(os.environ.get("POKEDEX_DATA_DIR", str(DEFAULT_DATA_DIR))).expanduser(),
        api_base_url=os.environ.get("POKEDEX_API_URL", API_BASE_URL),
    )


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("POKEDEX_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Pokédex")
    app.setOrganizationName("Pokédex")

    window = MainWindow(_config_from_env())
    window.show()

    async def _start() -> None:
        window.start(asyncio.get_running_loop())

    QtAsyncio.run(_start(), keep_running=True, handle_sigint=True)


if __name__ == "__main__":
    main()
