"""
services/auth_repository.py – Login, registration and logout over the store.

Every public coroutine returns a Result; PokedexError raised by the store is
caught here and never reaches the view-model.
"""

import asyncio
import logging
from typing import Optional

from models.user import Identity
from services import password_hashing
from services.credential_store import CredentialStore
from services.exceptions import InvalidCredentials, PokedexError, Result, StorageFault
from services.state_channel import StateChannel

logger = logging.getLogger(__name__)


class AuthRepository:
    def __init__(
        self,
        store: CredentialStore,
        *,
        iterations: int = password_hashing.PBKDF2_ITERATIONS,
    ) -> None:
        self._store = store
        self._iterations = iterations

    @property
    def is_authenticated(self) -> StateChannel:
        return self._store.observe_session_flag()

    async def login(self, email: str, password: str) -> Result[Identity]:
        try:
            identity = await self._store.find_by_email(email)
            if identity is None or not await asyncio.to_thread(
                password_hashing.verify_token, password, identity.token
            ):
                logger.info("Rejected login for %s", email)
                return Result.failure(InvalidCredentials())
            await self._store.set_session_flag(identity.email, identity.token)
        except PokedexError as exc:
            return Result.failure(exc)
        except Exception as exc:  # noqa: BLE001
            return Result.failure(StorageFault(f"Login failed: {exc}"))
        logger.info("Logged in as %s", email)
        return Result.success(identity)

    async def register(self, display_name: str, email: str, password: str) -> Result[Identity]:
        try:
            # PBKDF2 runs on a worker thread, never on the event loop.
            token = await asyncio.to_thread(
                password_hashing.derive_token, password, iterations=self._iterations
            )
            identity = await self._store.create_identity(email, display_name, token)
        except PokedexError as exc:
            return Result.failure(exc)
        except Exception as exc:  # noqa: BLE001
            return Result.failure(StorageFault(f"Failed to register user: {exc}"))
        return Result.success(identity)

    async def logout(self) -> Result[None]:
        try:
            await self._store.clear_session_flag()
        except PokedexError as exc:
            return Result.failure(exc)
        logger.info("Logged out")
        return Result.success(None)

    async def current_user(self) -> Result[Optional[Identity]]:
        """Resolve the session flag to its identity; None when logged out."""
        try:
            flag = await self._store.read_session_flag()
            if flag is None:
                return Result.success(None)
            email, token = flag
            return Result.success(await self._store.find_by_email_and_token(email, token))
        except PokedexError as exc:
            return Result.failure(exc)
