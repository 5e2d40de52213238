"""Pure rendering helpers: state in, text out.

Nothing here touches widgets; the TUI copies these strings and rows into
Textual widgets after every transition.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from rich.text import Text

from ytrss.machine import State, View
from ytrss.models import Item, ItemStatus, Podcast, Usage

TITLE_STYLE = "bold #7D56F4"
HELP_STYLE = "#626262"
ERROR_STYLE = "bold #FF0000"
SUCCESS_STYLE = "bold #04B575"

SPINNER_FRAMES = ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷")

ITEM_COLUMNS = ("Title", "Status", "Created")
PODCAST_COLUMNS = ("Title",)

# Tried in order; the first that parses wins.
CREATED_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S.%fZ",
    "%Y-%m-%d %H:%M:%SZ",
    "%Y-%m-%d %H:%M:%S.%f%z",
)

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def format_bytes(n: int) -> str:
    kb = 1024
    mb = 1024 * kb
    gb = 1024 * mb
    if n >= gb:
        return f"{n / gb:.2f} GB"
    if n >= mb:
        return f"{n / mb:.2f} MB"
    if n >= kb:
        return f"{n / kb:.2f} KB"
    return f"{n} B"


def parse_created(created: str) -> Optional[datetime]:
    s = (created or "").strip()
    if not s:
        return None
    # strptime's %f stops at microseconds; servers may send nanoseconds.
    s = _FRACTION_RE.sub(r"\1", s)
    for fmt in CREATED_FORMATS:
        try:
            dt = datetime.strptime(s, fmt)
        except ValueError:
            continue
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    return None


def sort_items(items: Iterable[Item]) -> List[Item]:
    """Newest first; items without a usable timestamp keep their order at the end."""

    def key(item: Item) -> Tuple[int, float]:
        dt = parse_created(item.created)
        if dt is None:
            return (1, 0.0)
        return (0, -dt.timestamp())

    return sorted(items, key=key)


def status_label(item: Item, spinner_frame: str = SPINNER_FRAMES[0]) -> str:
    if item.status is ItemStatus.CREATED:
        return f"{spinner_frame} PROCESSING"
    if item.status is ItemStatus.ERROR:
        return "❌ ERROR"
    if item.status is ItemStatus.SUCCESS:
        return "✓ SUCCESS"
    return item.raw_status or "-"


def display_title(item: Item) -> str:
    if item.title:
        return item.title
    if item.status is ItemStatus.CREATED:
        return "Processing..."
    return "(No title)"


def display_created(item: Item) -> str:
    dt = parse_created(item.created)
    if dt is None:
        return "-"
    local = dt.astimezone()
    hour = local.hour % 12 or 12
    return f"{local:%b} {local.day}, {local.year} {hour}:{local:%M} {local:%p}"


def item_rows(items: Sequence[Item], spinner_frame: str = SPINNER_FRAMES[0]) -> List[Tuple[str, str, str]]:
    return [
        (display_title(item), status_label(item, spinner_frame), display_created(item))
        for item in sort_items(items)
    ]


def podcast_rows(podcasts: Sequence[Podcast]) -> List[Tuple[str]]:
    return [(p.title or p.id,) for p in podcasts]


def usage_text(usage: Usage) -> str:
    return f"Usage: {format_bytes(usage.used)} / {format_bytes(usage.limit)}"


def title_text(state: State) -> str:
    if state.view is View.AWAITING_CREDENTIAL:
        return "Set API Key"
    if state.view is View.MAIN_MENU:
        return "Main Menu"
    if state.view is View.SELECTING_PODCAST:
        return "Select a Podcast"
    podcast = state.selected_podcast.title if state.selected_podcast else ""
    if state.view is View.ENTERING_URL:
        return f"Add URL to: {podcast}"
    if state.view is View.VIEWING_ITEMS:
        return f"Items for: {podcast}"
    return "Fatal Error"


def help_text(state: State) -> str:
    if state.view is View.AWAITING_CREDENTIAL:
        return "Press Enter to save • Ctrl+d to clear API key • Esc to cancel"
    if state.view is View.MAIN_MENU:
        return "Tab/←/→: Navigate • Enter: Select • q: Quit"
    if state.view is View.SELECTING_PODCAST:
        return "↑/↓: Navigate • Enter: Select • Esc: Back • q: Quit"
    if state.view is View.ENTERING_URL:
        return "Press Enter to add URL • Esc: Back • Ctrl+c: Quit"
    if state.view is View.VIEWING_ITEMS:
        if state.polling:
            return "Polling for updates... • a: Add another URL • m: Main menu • q: Quit"
        return "a: Add another URL • m: Main menu • q: Quit"
    return "Press any key to exit"


def render(state: State) -> Text:
    """Everything on screen except the input box and tables."""
    out = Text()

    if state.view is View.FATAL_ERROR:
        out.append(f"Fatal Error: {state.error}", style=ERROR_STYLE)
        return out

    out.append(title_text(state), style=TITLE_STYLE)
    out.append("\n")

    if state.message:
        out.append("\n")
        out.append(state.message, style=SUCCESS_STYLE)
        out.append("\n")

    if state.view is View.MAIN_MENU and state.usage is not None:
        out.append("\n")
        out.append(usage_text(state.usage), style=HELP_STYLE)
        out.append("\n")
    elif state.view is View.SELECTING_PODCAST:
        if state.podcasts_loading:
            out.append("\nLoading podcasts...\n", style=HELP_STYLE)
        elif not state.podcasts:
            out.append("\nNo podcasts found.\n")
    elif state.view is View.ENTERING_URL and state.submitting:
        out.append("\nSubmitting...\n", style=HELP_STYLE)
    elif state.view is View.VIEWING_ITEMS and state.polling and not state.items:
        out.append("\nLoading items...\n", style=HELP_STYLE)

    # The main menu shows either the usage figure or the error, never both.
    hide_error = state.view is View.MAIN_MENU and state.usage is not None
    if state.error and not hide_error:
        out.append("\n")
        out.append(f"Error: {state.error}", style=ERROR_STYLE)
        out.append("\n")

    return out
