"""
services/credential_store.py – Durable identities and the session flag.

Responsibilities
----------------
1. Keep registered identities in a single-table SQLite database keyed by email.
2. Mirror the logged-in (email, token) pair into a small JSON preference file.
3. Publish "is a complete session flag present" on a StateChannel[bool].

Blocking disk work runs on a worker thread via asyncio.to_thread(); the flag
channel is only ever published from the calling (event loop) thread.
"""

import asyncio
import json
import logging
import os
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Dict, Optional, Tuple

from models.user import Identity
from services.exceptions import DuplicateEmail, StorageFault
from services.state_channel import StateChannel

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────────────────
DATABASE_FILENAME: str = "users.db"
PREFERENCES_FILENAME: str = "user_prefs.json"
EMAIL_KEY: str = "email"
TOKEN_KEY: str = "token"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS user (
    email TEXT PRIMARY KEY NOT NULL,
    name  TEXT NOT NULL,
    token TEXT NOT NULL
)
"""


class CredentialStore:
    """
    Owns the identity table and the session-flag preference file.

    Parameters
    ----------
    data_dir : Directory holding users.db and user_prefs.json; created on
               demand.
    """

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)
        self._db_path = self._data_dir / DATABASE_FILENAME
        self._prefs_path = self._data_dir / PREFERENCES_FILENAME
        self._init_storage()
        self._session_flag = StateChannel(
            _is_complete(self._read_prefs_sync()), name="session_flag"
        )

    # ── Identities ────────────────────────────────────────────────────────────

    async def create_identity(self, email: str, display_name: str, token: str) -> Identity:
        """
        Insert a new identity.

        Raises
        ------
        DuplicateEmail if *email* is already registered.
        StorageFault on any database error.
        """
        identity = Identity(email=email, display_name=display_name, token=token)
        await asyncio.to_thread(self._insert_sync, identity)
        logger.info("Created identity for %s", email)
        return identity

    async def find_by_email(self, email: str) -> Optional[Identity]:
        return await asyncio.to_thread(
            self._query_one_sync,
            "SELECT email, name, token FROM user WHERE email = ?",
            (email,),
        )

    async def find_by_email_and_token(self, email: str, token: str) -> Optional[Identity]:
        return await asyncio.to_thread(
            self._query_one_sync,
            "SELECT email, name, token FROM user WHERE email = ? AND token = ?",
            (email, token),
        )

    # ── Session flag ──────────────────────────────────────────────────────────

    async def set_session_flag(self, email: str, token: str) -> None:
        await asyncio.to_thread(self._write_prefs_sync, {EMAIL_KEY: email, TOKEN_KEY: token})
        self._publish_flag(_is_complete({EMAIL_KEY: email, TOKEN_KEY: token}))

    async def clear_session_flag(self) -> None:
        await asyncio.to_thread(self._write_prefs_sync, {})
        self._publish_flag(False)

    async def read_session_flag(self) -> Optional[Tuple[str, str]]:
        """Return the stored (email, token) pair, or None when incomplete."""
        prefs = await asyncio.to_thread(self._read_prefs_sync)
        if not _is_complete(prefs):
            return None
        return prefs[EMAIL_KEY], prefs[TOKEN_KEY]

    def observe_session_flag(self) -> StateChannel:
        """Channel that emits whenever presence of a complete pair changes."""
        return self._session_flag

    def _publish_flag(self, present: bool) -> None:
        if present != self._session_flag.value:
            self._session_flag.publish(present)

    # ── Blocking helpers (worker thread) ──────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _init_storage(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with closing(self._connect()) as conn, conn:
                conn.execute(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StorageFault(
                f"Cannot initialise credential storage in '{self._data_dir}': {exc}"
            ) from exc

    def _insert_sync(self, identity: Identity) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    "INSERT INTO user (email, name, token) VALUES (?, ?, ?)",
                    (identity.email, identity.display_name, identity.token),
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmail() from exc
        except sqlite3.Error as exc:
            raise StorageFault(f"Failed to save identity: {exc}") from exc

    def _query_one_sync(self, sql: str, params: tuple) -> Optional[Identity]:
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StorageFault(f"Failed to read identity: {exc}") from exc
        if row is None:
            return None
        email, name, token = row
        return Identity(email=email, display_name=name, token=token)

    def _read_prefs_sync(self) -> Dict[str, str]:
        if not self._prefs_path.exists():
            return {}
        try:
            text = self._prefs_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageFault(
                f"Cannot read preferences '{self._prefs_path}': {exc}"
            ) from exc
        try:
            data = json.loads(text)
        except ValueError as exc:
            logger.warning("Ignoring corrupted preferences '%s': %s", self._prefs_path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences '%s': not a JSON object", self._prefs_path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_prefs_sync(self, prefs: Dict[str, str]) -> None:
        # Readers see either the old or the new file, never a partial one.
        tmp = self._prefs_path.with_suffix(".tmp")
        try:
            tmp.write_text(json.dumps(prefs), encoding="utf-8")
            os.replace(tmp, self._prefs_path)
        except OSError as exc:
            raise StorageFault(
                f"Cannot write preferences '{self._prefs_path}': {exc}"
            ) from exc


def _is_complete(prefs: Dict[str, str]) -> bool:
    return bool(prefs.get(EMAIL_KEY)) and bool(prefs.get(TOKEN_KEY))
