"""
viewmodels/session_manager.py – Login, registration and profile state.

Login and registration each own a form buffer and a status machine::

    IDLE ──submit──▶ SUBMITTING ──▶ SUCCEEDED
      ▲                   │
      └──edit── FAILED ◀──┘

Local validation failures go straight from IDLE to FAILED without touching
the store.  Registration never logs the user in.
"""

import asyncio
import logging
import re
from typing import Optional

from models.ui_state import FormStatus, LoginFormState, RegisterFormState, UserProfileState
from services.auth_repository import AuthRepository
from services.exceptions import EmptyCredentials, PokedexError, ValidationError
from services.state_channel import StateChannel
from viewmodels.task_scope import TaskScope

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────────────────
MIN_PASSWORD_LENGTH: int = 6

# Same shape the platform e-mail matcher accepts: local@domain.tld
EMAIL_PATTERN: re.Pattern = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


class SessionManager:
    def __init__(self, repository: AuthRepository, scope: TaskScope) -> None:
        self._repository = repository
        self._scope = scope
        self.login_state = StateChannel(LoginFormState(), name="login_state")
        self.register_state = StateChannel(RegisterFormState(), name="register_state")
        self.profile_state = StateChannel(UserProfileState(), name="profile_state")

    @property
    def is_authenticated(self) -> StateChannel:
        return self._repository.is_authenticated

    # ── Login ─────────────────────────────────────────────────────────────────

    def update_login_form(
        self, username: Optional[str] = None, password: Optional[str] = None
    ) -> None:
        state = self.login_state.value
        self.login_state.update(
            username=state.username if username is None else username,
            password=state.password if password is None else password,
            status=FormStatus.IDLE if state.status is FormStatus.FAILED else state.status,
            error_message=None,
            failure=None,
        )

    def login(self) -> Optional[asyncio.Task]:
        state = self.login_state.value
        if state.is_loading:
            return None
        if not state.username.strip() or not state.password.strip():
            self._fail_login(EmptyCredentials())
            return None

        self.login_state.update(status=FormStatus.SUBMITTING, error_message=None, failure=None)
        return self._scope.launch(self._login(state.username, state.password), name="login")

    async def _login(self, email: str, password: str) -> None:
        result = await self._repository.login(email, password)
        if result.ok:
            self.login_state.update(status=FormStatus.SUCCEEDED, error_message=None, failure=None)
        else:
            self._fail_login(result.error)

    def _fail_login(self, error: PokedexError) -> None:
        self.login_state.update(
            status=FormStatus.FAILED,
            error_message=str(error) or "Login failed",
            failure=error,
        )

    # ── Registration ──────────────────────────────────────────────────────────

    def update_register_form(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        confirm_password: Optional[str] = None,
    ) -> None:
        state = self.register_state.value
        self.register_state.update(
            username=state.username if username is None else username,
            email=state.email if email is None else email,
            password=state.password if password is None else password,
            confirm_password=(
                state.confirm_password if confirm_password is None else confirm_password
            ),
            status=FormStatus.IDLE if state.status is FormStatus.FAILED else state.status,
            error_message=None,
            failure=None,
        )

    def reset_register_form(self) -> None:
        self.register_state.publish(RegisterFormState())

    def register(self) -> Optional[asyncio.Task]:
        state = self.register_state.value
        if state.is_loading:
            return None
        problem = self._validate_registration(state)
        if problem is not None:
            self._fail_register(problem)
            return None

        self.register_state.update(status=FormStatus.SUBMITTING, error_message=None, failure=None)
        return self._scope.launch(
            self._register(state.username, state.email, state.password), name="register"
        )

    @staticmethod
    def _validate_registration(state: RegisterFormState) -> Optional[ValidationError]:
        if not state.username.strip():
            return ValidationError("username", "required", "Username cannot be empty")
        if not state.email.strip() or not is_valid_email(state.email):
            return ValidationError("email", "format", "Valid email is required")
        if len(state.password) < MIN_PASSWORD_LENGTH:
            return ValidationError(
                "password",
                "min_length",
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            )
        if state.password != state.confirm_password:
            return ValidationError("confirm_password", "match", "Passwords don't match")
        return None

    async def _register(self, username: str, email: str, password: str) -> None:
        result = await self._repository.register(username, email, password)
        if result.ok:
            self.register_state.update(
                status=FormStatus.SUCCEEDED, error_message=None, failure=None
            )
        else:
            self._fail_register(result.error)

    def _fail_register(self, error: PokedexError) -> None:
        self.register_state.update(
            status=FormStatus.FAILED,
            error_message=str(error) or "Registration failed",
            failure=error,
        )

    # ── Session ───────────────────────────────────────────────────────────────

    def logout(self) -> asyncio.Task:
        self.login_state.publish(LoginFormState())
        self.profile_state.publish(UserProfileState())
        return self._scope.launch(self._logout(), name="logout")

    async def _logout(self) -> None:
        result = await self._repository.logout()
        if not result.ok:
            logger.warning("Logout failed: %s", result.message)

    def load_user_profile(self) -> asyncio.Task:
        self.profile_state.update(loading=True)
        return self._scope.launch(self._load_user_profile(), name="load_user_profile")

    async def _load_user_profile(self) -> None:
        result = await self._repository.current_user()
        if result.ok:
            self.profile_state.publish(UserProfileState(identity=result.value))
        else:
            self.profile_state.publish(
                UserProfileState(error=result.message or "Failed to load profile")
            )
