"""
models/ui_state.py – Immutable snapshots published to the window.

View-models never mutate a snapshot; they publish a replacement built with
dataclasses.replace() so every observer sees each transition.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from models.pokemon import PokemonDetail, PokemonSummary
from models.user import Identity
from services.exceptions import PokedexError


class FormStatus(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class BrowseState:
    """
    Paginated catalogue listing.

    Attributes
    ----------
    loading       : A page request is in flight.
    items         : Every summary loaded so far, in remote order.
    can_load_more : The last page response carried a ``next`` link.
    error         : Message of the last failed page load, if any.
    """

    loading: bool = False
    items: Tuple[PokemonSummary, ...] = ()
    can_load_more: bool = True
    error: Optional[str] = None


@dataclass(frozen=True)
class DetailState:
    """Outcome of the current detail request; item and error are exclusive."""

    loading: bool = False
    item: Optional[PokemonDetail] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class LoginFormState:
    username: str = ""
    password: str = ""
    status: FormStatus = FormStatus.IDLE
    error_message: Optional[str] = None
    failure: Optional[PokedexError] = None

    @property
    def is_loading(self) -> bool:
        return self.status is FormStatus.SUBMITTING

    @property
    def is_success(self) -> bool:
        return self.status is FormStatus.SUCCEEDED


@dataclass(frozen=True)
class RegisterFormState:
    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    status: FormStatus = FormStatus.IDLE
    error_message: Optional[str] = None
    failure: Optional[PokedexError] = None

    @property
    def is_loading(self) -> bool:
        return self.status is FormStatus.SUBMITTING

    @property
    def is_success(self) -> bool:
        return self.status is FormStatus.SUCCEEDED


@dataclass(frozen=True)
class UserProfileState:
    loading: bool = False
    identity: Optional[Identity] = None
    error: Optional[str] = None
