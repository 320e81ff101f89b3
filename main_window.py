"""
main_window.py – Pokédex main window.

Pages (QStackedWidget)
----------------------
  Login     : email + password, link to Register
  Register  : username, email, password, confirmation
  Browser   : search bar, paginated list, detail pane, profile + logout

The window only renders snapshots delivered through StateBridge and forwards
user input to the view-models; it holds no state of its own.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QSplitter,
    QStackedWidget,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from app_container import AppConfig, AppContainer
from models.pokemon import PokemonSummary
from models.ui_state import BrowseState, DetailState, LoginFormState, RegisterFormState, UserProfileState
from workers.state_bridge import StateBridge

# ── Colour palette ─────────────────────────────────────────────────────────────
_BG         = "#0f1117"
_BG2        = "#1a1d27"
_BG3        = "#22263a"
_ACCENT     = "#4f8ef7"
_TEXT       = "#e2e8f0"
_TEXT_DIM   = "#718096"
_ERROR      = "#fc8181"
_BORDER     = "#2d3748"

_STYLESHEET = f"""
QMainWindow, QWidget {{
    background-color: {_BG};
    color: {_TEXT};
    font-family: 'Segoe UI', sans-serif;
    font-size: 13px;
}}
QLineEdit {{
    background-color: {_BG2};
    border: 1px solid {_BORDER};
    border-radius: 6px;
    padding: 8px 12px;
}}
QLineEdit:focus {{
    border-color: {_ACCENT};
}}
QListWidget {{
    background-color: {_BG2};
    border: 1px solid {_BORDER};
    border-radius: 6px;
    padding: 4px;
}}
QListWidget::item:selected {{
    background-color: {_ACCENT};
    color: white;
}}
QPushButton {{
    background-color: {_BG3};
    border: 1px solid {_BORDER};
    border-radius: 5px;
    padding: 7px 14px;
}}
QPushButton:hover {{
    background-color: {_ACCENT};
    color: white;
}}
QLabel#error {{
    color: {_ERROR};
}}
QStatusBar {{
    background: {_BG2};
    color: {_TEXT_DIM};
}}
"""

# Fetch the next page when the list is scrolled this close to its end.
_SCROLL_THRESHOLD = 3


class MainWindow(QMainWindow):
    """Primary application window."""

    def __init__(self, config: AppConfig) -> None:
        super().__init__()
        self.setWindowTitle("Pokédex")
        self.setMinimumSize(900, 620)
        self.setStyleSheet(_STYLESHEET)

        self._config = config
        self._container: Optional[AppContainer] = None
        self._bridge: Optional[StateBridge] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Task] = None

        self._build_ui()

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Create the view-models on *loop* and start rendering their state."""
        self._loop = loop
        self._container = AppContainer(self._config, loop=loop)
        self._bridge = StateBridge(self._container.browser, self._container.session, self)
        self._connect_signals()
        self._bridge.bind()

    # ── UI construction ───────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        self._pages = QStackedWidget()
        self.setCentralWidget(self._pages)
        self._login_page = self._build_login_page()
        self._register_page = self._build_register_page()
        self._browser_page = self._build_browser_page()
        for page in (self._login_page, self._register_page, self._browser_page):
            self._pages.addWidget(page)

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)

    def _build_login_page(self) -> QWidget:
        w = QWidget()
        form = QFormLayout(w)
        self._login_email = QLineEdit()
        self._login_password = QLineEdit()
        self._login_password.setEchoMode(QLineEdit.EchoMode.Password)
        self._login_error = QLabel()
        self._login_error.setObjectName("error")
        self._login_btn = QPushButton("Log in")
        self._to_register_btn = QPushButton("Create an account")
        form.addRow("Email", self._login_email)
        form.addRow("Password", self._login_password)
        form.addRow(self._login_error)
        form.addRow(self._login_btn)
        form.addRow(self._to_register_btn)
        return w

    def _build_register_page(self) -> QWidget:
        w = QWidget()
        form = QFormLayout(w)
        self._reg_username = QLineEdit()
        self._reg_email = QLineEdit()
        self._reg_password = QLineEdit()
        self._reg_confirm = QLineEdit()
        for field in (self._reg_password, self._reg_confirm):
            field.setEchoMode(QLineEdit.EchoMode.Password)
        self._reg_error = QLabel()
        self._reg_error.setObjectName("error")
        self._register_btn = QPushButton("Register")
        self._to_login_btn = QPushButton("Back to login")
        form.addRow("Username", self._reg_username)
        form.addRow("Email", self._reg_email)
        form.addRow("Password", self._reg_password)
        form.addRow("Confirm", self._reg_confirm)
        form.addRow(self._reg_error)
        form.addRow(self._register_btn)
        form.addRow(self._to_login_btn)
        return w

    def _build_browser_page(self) -> QWidget:
        w = QWidget()
        layout = QVBoxLayout(w)

        top = QHBoxLayout()
        self._search_bar = QLineEdit()
        self._search_bar.setPlaceholderText("Search loaded Pokémon…")
        self._search_bar.setClearButtonEnabled(True)
        self._profile_label = QLabel()
        self._logout_btn = QPushButton("Log out")
        top.addWidget(self._search_bar, 6)
        top.addWidget(self._profile_label, 2)
        top.addWidget(self._logout_btn, 1)
        layout.addLayout(top)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)
        self._list = QListWidget()
        self._load_more_btn = QPushButton("Load more")
        left_layout.addWidget(self._list)
        left_layout.addWidget(self._load_more_btn)
        splitter.addWidget(left)

        self._detail = QLabel()
        self._detail.setAlignment(Qt.AlignmentFlag.AlignTop)
        self._detail.setWordWrap(True)
        self._detail.setTextFormat(Qt.TextFormat.RichText)
        self._close_detail_btn = QPushButton("Close")
        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.addWidget(self._detail, 1)
        right_layout.addWidget(self._close_detail_btn)
        splitter.addWidget(right)
        splitter.setSizes([560, 340])
        layout.addWidget(splitter, 1)
        return w

    # ── Signal wiring ─────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        session = self._container.session
        browser = self._container.browser

        self._login_email.textEdited.connect(lambda t: session.update_login_form(username=t))
        self._login_password.textEdited.connect(lambda t: session.update_login_form(password=t))
        self._login_btn.clicked.connect(session.login)
        self._to_register_btn.clicked.connect(self._show_register)

        self._reg_username.textEdited.connect(lambda t: session.update_register_form(username=t))
        self._reg_email.textEdited.connect(lambda t: session.update_register_form(email=t))
        self._reg_password.textEdited.connect(lambda t: session.update_register_form(password=t))
        self._reg_confirm.textEdited.connect(
            lambda t: session.update_register_form(confirm_password=t)
        )
        self._register_btn.clicked.connect(session.register)
        self._to_login_btn.clicked.connect(self._show_login)

        self._search_bar.textChanged.connect(browser.update_search_query)
        self._load_more_btn.clicked.connect(browser.load_more_pokemon)
        self._list.verticalScrollBar().valueChanged.connect(self._on_scrolled)
        self._list.currentItemChanged.connect(self._on_item_selected)
        self._close_detail_btn.clicked.connect(browser.clear_pokemon_detail)
        self._logout_btn.clicked.connect(session.logout)

        self._bridge.authenticated_changed.connect(self._on_authenticated_changed)
        self._bridge.login_changed.connect(self._on_login_changed)
        self._bridge.register_changed.connect(self._on_register_changed)
        self._bridge.profile_changed.connect(self._on_profile_changed)
        self._bridge.browse_changed.connect(self._on_browse_changed)
        self._bridge.items_changed.connect(self._on_items_changed)
        self._bridge.detail_changed.connect(self._on_detail_changed)

    # ── Slots ─────────────────────────────────────────────────────────────────

    @Slot(bool)
    def _on_authenticated_changed(self, authenticated: bool) -> None:
        if authenticated:
            self._pages.setCurrentWidget(self._browser_page)
            self._container.session.load_user_profile()
        else:
            self._show_login()

    @Slot(object)
    def _on_login_changed(self, state: LoginFormState) -> None:
        self._login_btn.setEnabled(not state.is_loading)
        self._login_error.setText(state.error_message or "")

    @Slot(object)
    def _on_register_changed(self, state: RegisterFormState) -> None:
        self._register_btn.setEnabled(not state.is_loading)
        self._reg_error.setText(state.error_message or "")
        if state.is_success:
            self._set_status("Registration successful – please log in.")
            self._show_login()

    @Slot(object)
    def _on_profile_changed(self, state: UserProfileState) -> None:
        if state.identity is not None:
            self._profile_label.setText(f"Welcome, {state.identity.display_name}!")
        else:
            self._profile_label.setText(state.error or "")

    @Slot(object)
    def _on_browse_changed(self, state: BrowseState) -> None:
        self._load_more_btn.setEnabled(state.can_load_more and not state.loading)
        self._load_more_btn.setText("Loading…" if state.loading else "Load more")
        if state.error:
            self._set_status(f"Error: {state.error}")
        else:
            self._set_status(f"{len(state.items)} Pokémon loaded.")

    @Slot(object)
    def _on_items_changed(self, items) -> None:
        self._list.blockSignals(True)
        self._list.clear()
        for entry in items:
            item = QListWidgetItem(str(entry))
            item.setData(Qt.ItemDataRole.UserRole, entry)
            self._list.addItem(item)
        self._list.blockSignals(False)

    @Slot(object)
    def _on_detail_changed(self, state: Optional[DetailState]) -> None:
        self._close_detail_btn.setVisible(state is not None)
        if state is None:
            self._detail.setText("")
        elif state.loading:
            self._detail.setText("Loading…")
        elif state.error is not None:
            self._detail.setText(f'<span style="color:{_ERROR}">Error: {state.error}</span>')
        elif state.item is not None:
            self._detail.setText(_render_detail(state.item))

    @Slot(int)
    def _on_scrolled(self, value: int) -> None:
        bar = self._list.verticalScrollBar()
        if bar.maximum() - value <= _SCROLL_THRESHOLD:
            self._container.browser.load_more_pokemon()

    @Slot()
    def _on_item_selected(self) -> None:
        item = self._list.currentItem()
        if item is None:
            return
        entry: PokemonSummary = item.data(Qt.ItemDataRole.UserRole)
        self._container.browser.load_pokemon_detail(entry.pokemon_id)

    # ── UI helpers ────────────────────────────────────────────────────────────

    def _show_login(self) -> None:
        self._pages.setCurrentWidget(self._login_page)

    def _show_register(self) -> None:
        for field in (self._reg_username, self._reg_email, self._reg_password, self._reg_confirm):
            field.clear()
        self._container.session.reset_register_form()
        self._pages.setCurrentWidget(self._register_page)

    def _set_status(self, msg: str) -> None:
        self._status_bar.showMessage(msg)

    def closeEvent(self, event) -> None:
        if self._bridge is not None:
            self._bridge.unbind()
        if self._container is not None and self._shutdown is None:
            self._shutdown = self._loop.create_task(self._container.aclose())
        super().closeEvent(event)


def _render_detail(p) -> str:
    types = ", ".join(t.name.capitalize() for t in p.types)
    abilities = ", ".join(
        a.name.capitalize() + (" (hidden)" if a.is_hidden else "") for a in p.abilities
    )
    stats = "".join(
        f"<tr><td>{s.name.capitalize()}</td><td align='right'>{s.base_stat}</td></tr>"
        for s in p.stats
    )
    return (
        f"<h2>#{p.id} {p.display_name}</h2>"
        f"<p>Height: {p.height_m} m &nbsp; Weight: {p.weight_kg} kg</p>"
        f"<p>Types: {types}</p><p>Abilities: {abilities}</p>"
        f"<table>{stats}</table>"
    )
