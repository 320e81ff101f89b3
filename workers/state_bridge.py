"""
workers/state_bridge.py – Relays view-model state channels to Qt signals.

Signal contract
---------------
  browse_changed(object)         : BrowseState        : list, spinner, errors
  items_changed(object)          : tuple of summaries : the visible list
  detail_changed(object)         : DetailState | None : detail pane
  authenticated_changed(bool)    : session flag       : route decisions
  login_changed(object)          : LoginFormState
  register_changed(object)       : RegisterFormState
  profile_changed(object)        : UserProfileState

Channels replay their latest value on subscribe, so every signal fires once
from bind() with the current state; widgets connected beforehand start in
sync without polling.
"""

from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from services.state_channel import StateChannel, Subscription
from viewmodels.catalog_browser import CatalogBrowser
from viewmodels.session_manager import SessionManager


class StateBridge(QObject):

    # ── Signals ───────────────────────────────────────────────────────────────
    browse_changed        = Signal(object)
    items_changed         = Signal(object)
    detail_changed        = Signal(object)
    authenticated_changed = Signal(bool)
    login_changed         = Signal(object)
    register_changed      = Signal(object)
    profile_changed       = Signal(object)

    def __init__(
        self,
        browser: CatalogBrowser,
        session: SessionManager,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._browser = browser
        self._session = session
        self._subscriptions: List[Subscription] = []

    def bind(self) -> None:
        """Subscribe to every channel; emits the current state once."""
        if self._subscriptions:
            return
        self._relay(self._browser.browse_state, self.browse_changed)
        self._relay(self._browser.filtered_items, self.items_changed)
        self._relay(self._browser.detail_state, self.detail_changed)
        self._relay(self._session.is_authenticated, self.authenticated_changed)
        self._relay(self._session.login_state, self.login_changed)
        self._relay(self._session.register_state, self.register_changed)
        self._relay(self._session.profile_state, self.profile_changed)

    def unbind(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions.clear()

    def _relay(self, channel: StateChannel, signal) -> None:
        self._subscriptions.append(channel.subscribe(signal.emit))
