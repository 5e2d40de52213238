from __future__ import annotations

import logging
from typing import Optional, Tuple

from rich.text import Text

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Footer, Header, Input, ProgressBar, Static

from ytrss.api.client import YtrssClient
from ytrss.config import Settings, load_settings
from ytrss.credentials import CredentialStore
from ytrss.dispatcher import CommandDispatcher
from ytrss.machine import (
    AddAnother,
    AnyKey,
    Cancel,
    CancelPoll,
    ClearCredential,
    ConfirmRow,
    Exit,
    GoMainMenu,
    MenuChoice,
    PollTick,
    Quit,
    SchedulePoll,
    SelectMenu,
    State,
    Submit,
    View,
    initial,
    transition,
)
from ytrss.models import ItemStatus
from ytrss.polling import PollingScheduler
from ytrss.presentation import (
    HELP_STYLE,
    ITEM_COLUMNS,
    PODCAST_COLUMNS,
    SPINNER_FRAMES,
    help_text,
    item_rows,
    podcast_rows,
    render,
)

logger = logging.getLogger(__name__)

_INPUT_VIEWS = {View.AWAITING_CREDENTIAL, View.ENTERING_URL}


class YtrssApp(App[None]):
    BINDINGS = [
        Binding("ctrl+c", "quit_app", "Quit", priority=True),
        Binding("escape", "cancel", "Back", priority=True),
        # Input binds ctrl+d to delete-right; check_action limits the override
        # to the screens where it means something.
        Binding("ctrl+d", "clear_api_key", "Clear API key", priority=True),
        ("q", "quit_view", "Quit"),
        ("a", "add_another", "Add another URL"),
        ("m", "main_menu", "Main menu"),
    ]

    CSS = """
    Screen {
        background: #0b0d0c;
        color: #d6d6d6;
    }

    #root {
        layout: vertical;
        height: 1fr;
        padding: 1 2;
    }

    #body {
        height: auto;
    }

    #menu {
        height: auto;
    }

    Button {
        background: #1f2322;
        color: #e6e6e6;
        border: solid #2d3231;
        margin-right: 1;
    }

    Button:focus {
        background: #7D56F4;
        border: solid #7D56F4;
        color: #ffffff;
    }

    Input {
        background: #0f1211;
        border: solid #2a2f2e;
        color: #e6e6e6;
        width: 80;
    }

    Input:focus {
        border: solid #7D56F4;
    }

    DataTable {
        height: auto;
        max-height: 22;
        background: #0f1211;
    }

    DataTable > .datatable--header {
        background: #121817;
        color: #e6e6e6;
        text-style: bold;
    }

    DataTable > .datatable--cursor {
        background: #7D56F4;
        color: #ffffff;
    }

    #usage_bar {
        height: auto;
        margin-top: 1;
    }

    #help {
        height: auto;
        margin-top: 1;
    }
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        credentials: Optional[CredentialStore] = None,
        client: Optional[YtrssClient] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or load_settings()
        self.credentials = credentials or CredentialStore()
        self.client = client or YtrssClient(
            credentials=self.credentials,
            base_url=self.settings.base_url,
            timeout=self.settings.request_timeout,
        )
        self.state = State(poll_interval=self.settings.poll_interval)
        self.dispatcher = CommandDispatcher(
            client=self.client,
            credentials=self.credentials,
            run_in_background=lambda work: self.run_worker(
                work, thread=True, group="commands", exit_on_error=False
            ),
            deliver=lambda event: self.call_from_thread(self.feed, event),
        )
        self.poller = PollingScheduler(self.set_timer, lambda gen: self.feed(PollTick(gen)))
        self._spinner_index = 0
        self._podcast_rows_shown: Optional[Tuple] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="root"):
            yield Static("", id="body")
            with Horizontal(id="menu"):
                yield Button(MenuChoice.ADD_URL.value, id="add_url", variant="primary")
                yield Button(MenuChoice.SET_API_KEY.value, id="set_api_key")
            yield ProgressBar(total=1, show_eta=False, id="usage_bar")
            yield Input(id="entry")
            yield DataTable(id="podcasts")
            yield DataTable(id="items")
            yield Static("", id="help")
        yield Footer()

    def on_mount(self) -> None:
        podcasts = self.query_one("#podcasts", DataTable)
        podcasts.cursor_type = "row"
        podcasts.add_columns(*PODCAST_COLUMNS)
        items = self.query_one("#items", DataTable)
        items.cursor_type = "row"
        items.add_columns(*ITEM_COLUMNS)

        self.set_interval(0.1, self._advance_spinner)

        state, effects = initial(self.settings.poll_interval)
        self.state = state
        self._apply(effects)
        self._refresh_view(view_changed=True)

    # Event loop entry point: every input and every async result comes through here.
    def feed(self, event: object) -> None:
        old = self.state
        state, effects = transition(old, event, self.credentials)
        if state is old and not effects:
            return
        logger.debug("%s: %s -> %s (%d effects)", type(event).__name__, old.view.value, state.view.value, len(effects))
        self.state = state
        self._apply(effects)
        self._refresh_view(view_changed=state.view is not old.view)

    def _apply(self, effects) -> None:
        for effect in effects:
            if self.dispatcher.handles(effect):
                self.dispatcher.dispatch(effect)
            elif isinstance(effect, SchedulePoll):
                self.poller.schedule(effect.delay, effect.generation)
            elif isinstance(effect, CancelPoll):
                self.poller.cancel()
            elif isinstance(effect, Exit):
                self.poller.cancel()
                self.exit(return_code=effect.return_code)
            else:
                logger.warning("Unhandled effect %r", effect)

    def _refresh_view(self, *, view_changed: bool = False) -> None:
        state = self.state
        view = state.view

        self.query_one("#body", Static).update(render(state))
        self.query_one("#help", Static).update(Text(help_text(state), style=HELP_STYLE))

        menu = self.query_one("#menu", Horizontal)
        menu.display = view is View.MAIN_MENU

        bar = self.query_one("#usage_bar", ProgressBar)
        bar.display = view is View.MAIN_MENU and state.usage is not None
        if state.usage is not None:
            bar.update(total=1, progress=state.usage.ratio())

        entry = self.query_one("#entry", Input)
        entry.display = view in _INPUT_VIEWS
        if view_changed and view in _INPUT_VIEWS:
            entry.value = ""
            entry.password = view is View.AWAITING_CREDENTIAL
            entry.placeholder = (
                "Enter your API key" if view is View.AWAITING_CREDENTIAL else "Paste YouTube URL here"
            )

        if view_changed:
            self._focus_for(view)
            self.refresh_bindings()

        podcasts = self.query_one("#podcasts", DataTable)
        podcasts.display = view is View.SELECTING_PODCAST and bool(state.podcasts)
        if view is View.SELECTING_PODCAST:
            changed = self._fill_podcasts(podcasts)
            if (changed or view_changed) and state.podcasts:
                podcasts.focus()

        items = self.query_one("#items", DataTable)
        items.display = view is View.VIEWING_ITEMS and bool(state.items)
        if view is View.VIEWING_ITEMS:
            self._fill_items(items)
            if state.items and not items.has_focus:
                items.focus()

    def _fill_podcasts(self, table: DataTable) -> bool:
        rows = tuple(podcast_rows(self.state.podcasts))
        if rows == self._podcast_rows_shown:
            return False
        self._podcast_rows_shown = rows
        table.clear()
        for i, row in enumerate(rows):
            table.add_row(*row, key=str(i))
        return True

    def _fill_items(self, table: DataTable) -> None:
        frame = SPINNER_FRAMES[self._spinner_index % len(SPINNER_FRAMES)]
        rows = item_rows(self.state.items, frame)
        cursor = table.cursor_row
        table.clear()
        for row in rows:
            table.add_row(*row)
        if rows:
            table.move_cursor(row=min(max(cursor, 0), len(rows) - 1))

    def _focus_for(self, view: View) -> None:
        if view in _INPUT_VIEWS:
            self.query_one("#entry", Input).focus()
        elif view is View.MAIN_MENU:
            self.query_one("#add_url", Button).focus()
        else:
            self.set_focus(None)

    def _advance_spinner(self) -> None:
        self._spinner_index += 1
        state = self.state
        if state.view is not View.VIEWING_ITEMS:
            return
        if any(i.status is ItemStatus.CREATED for i in state.items):
            self._fill_items(self.query_one("#items", DataTable))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        before = self.state
        self.feed(Submit(event.value))
        if self.state is not before:
            event.input.value = ""

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "add_url":
            self.feed(SelectMenu(MenuChoice.ADD_URL))
        elif event.button.id == "set_api_key":
            self.feed(SelectMenu(MenuChoice.SET_API_KEY))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        if event.data_table.id == "podcasts":
            self.feed(ConfirmRow(event.cursor_row))

    def on_key(self, event: events.Key) -> None:
        if self.state.view is View.FATAL_ERROR:
            event.stop()
            self.feed(AnyKey())

    def action_quit_app(self) -> None:
        self.feed(Quit())

    def action_quit_view(self) -> None:
        if self.state.view in _INPUT_VIEWS:
            return
        self.feed(Quit())

    def action_cancel(self) -> None:
        if self.state.view is View.FATAL_ERROR:
            self.feed(AnyKey())
            return
        self.feed(Cancel())

    def check_action(self, action: str, parameters: tuple) -> Optional[bool]:
        if action == "clear_api_key":
            return self.state.view in (View.AWAITING_CREDENTIAL, View.FATAL_ERROR)
        return True

    def action_clear_api_key(self) -> None:
        if self.state.view is View.FATAL_ERROR:
            self.feed(AnyKey())
            return
        self.feed(ClearCredential())

    def action_add_another(self) -> None:
        self.feed(AddAnother())

    def action_main_menu(self) -> None:
        self.feed(GoMainMenu())
