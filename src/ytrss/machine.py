"""Screen state machine.

``transition(state, event, credentials)`` is the only place where the screen
changes. It never performs network I/O: work that needs the network is
returned as effects for the dispatcher, and its outcome comes back later as
another event. Writing the API key is the one synchronous side effect, since
the store is local and only touched by explicit user action.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Protocol, Tuple

from ytrss.errors import YtrssError
from ytrss.models import Item, Podcast, Usage
from ytrss.polling import POLL_INTERVAL, PollStep, next_poll_step


class View(str, Enum):
    AWAITING_CREDENTIAL = "awaiting_credential"
    MAIN_MENU = "main_menu"
    SELECTING_PODCAST = "selecting_podcast"
    ENTERING_URL = "entering_url"
    VIEWING_ITEMS = "viewing_items"
    FATAL_ERROR = "fatal_error"


class MenuChoice(str, Enum):
    ADD_URL = "Add YouTube URL"
    SET_API_KEY = "Set API Key"


class CredentialWriter(Protocol):
    def set(self, secret: str) -> None: ...

    def clear(self) -> None: ...


# Input events


@dataclass(frozen=True)
class Submit:
    text: str


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class ClearCredential:
    pass


@dataclass(frozen=True)
class SelectMenu:
    choice: MenuChoice


@dataclass(frozen=True)
class ConfirmRow:
    index: int


@dataclass(frozen=True)
class AddAnother:
    pass


@dataclass(frozen=True)
class GoMainMenu:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class AnyKey:
    pass


@dataclass(frozen=True)
class FatalErrorOccurred:
    message: str


# Result events. Screen-bound results carry the generation they were issued
# under; see State.generation.


@dataclass(frozen=True)
class CredentialChecked:
    has_credential: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class PodcastsLoaded:
    generation: int
    podcasts: Tuple[Podcast, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class UrlAdded:
    generation: int
    item: Optional[Item] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ItemsLoaded:
    generation: int
    items: Tuple[Item, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class UsageLoaded:
    usage: Optional[Usage] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class PollTick:
    generation: int


# Effects


@dataclass(frozen=True)
class CheckCredential:
    pass


@dataclass(frozen=True)
class LoadPodcasts:
    generation: int


@dataclass(frozen=True)
class AddUrl:
    generation: int
    podcast_id: str
    url: str


@dataclass(frozen=True)
class LoadItems:
    generation: int
    podcast_id: str


@dataclass(frozen=True)
class LoadUsage:
    pass


@dataclass(frozen=True)
class SchedulePoll:
    generation: int
    delay: float


@dataclass(frozen=True)
class CancelPoll:
    pass


@dataclass(frozen=True)
class Exit:
    return_code: int = 0


@dataclass(frozen=True)
class State:
    view: View = View.AWAITING_CREDENTIAL
    has_credential: bool = False
    usage: Optional[Usage] = None
    message: str = ""
    error: str = ""
    podcasts: Tuple[Podcast, ...] = ()
    podcasts_loading: bool = False
    selected_podcast: Optional[Podcast] = None
    items: Tuple[Item, ...] = ()
    polling: bool = False
    poll_pending: bool = False
    submitting: bool = False
    # Bumped on every screen change; results for an older generation are stale.
    generation: int = 0
    poll_interval: float = POLL_INTERVAL
    exit_code: Optional[int] = None

    @property
    def terminated(self) -> bool:
        return self.exit_code is not None


class Transition(NamedTuple):
    state: State
    effects: Tuple[object, ...] = ()


def initial(poll_interval: float = POLL_INTERVAL) -> Transition:
    return Transition(State(poll_interval=poll_interval), (CheckCredential(),))


def _enter(state: State, view: View, **changes) -> State:
    return replace(state, view=view, generation=state.generation + 1, **changes)


def _stop_polling(state: State) -> Transition:
    effects = (CancelPoll(),) if state.poll_pending else ()
    return Transition(replace(state, polling=False, poll_pending=False), effects)


def _quit(state: State, return_code: int) -> Transition:
    state, effects = _stop_polling(state)
    return Transition(replace(state, exit_code=return_code), effects + (Exit(return_code),))


def _on_submit(state: State, event: Submit, credentials: CredentialWriter) -> Transition:
    text = (event.text or "").strip()
    if not text:
        return Transition(state)

    if state.view is View.AWAITING_CREDENTIAL:
        try:
            credentials.set(text)
        except YtrssError as exc:
            return Transition(replace(state, error=str(exc), message=""))
        new = _enter(
            state,
            View.MAIN_MENU,
            has_credential=True,
            message="API key saved successfully!",
            error="",
        )
        return Transition(new, (LoadUsage(),))

    if state.view is View.ENTERING_URL:
        if state.submitting or state.selected_podcast is None:
            return Transition(state)
        new = replace(state, submitting=True, error="", message="")
        return Transition(new, (AddUrl(state.generation, state.selected_podcast.id, text),))

    return Transition(state)


def _on_cancel(state: State, event: Cancel, credentials: CredentialWriter) -> Transition:
    if state.view is View.AWAITING_CREDENTIAL:
        if state.has_credential:
            return Transition(_enter(state, View.MAIN_MENU, error=""))
        return _quit(state, 0)
    if state.view is View.SELECTING_PODCAST:
        return Transition(_enter(state, View.MAIN_MENU, podcasts_loading=False))
    if state.view is View.ENTERING_URL:
        return Transition(_enter(state, View.SELECTING_PODCAST, submitting=False, error=""))
    return Transition(state)


def _on_clear_credential(state: State, event: ClearCredential, credentials: CredentialWriter) -> Transition:
    if state.view is not View.AWAITING_CREDENTIAL:
        return Transition(state)
    try:
        credentials.clear()
    except YtrssError as exc:
        return Transition(replace(state, error=str(exc), message=""))
    return Transition(
        replace(state, has_credential=False, message="API key cleared successfully!", error="")
    )


def _on_select_menu(state: State, event: SelectMenu, credentials: CredentialWriter) -> Transition:
    if state.view is not View.MAIN_MENU:
        return Transition(state)
    if event.choice is MenuChoice.SET_API_KEY:
        return Transition(_enter(state, View.AWAITING_CREDENTIAL, error="", message=""))
    if event.choice is MenuChoice.ADD_URL:
        new = _enter(
            state,
            View.SELECTING_PODCAST,
            podcasts=(),
            podcasts_loading=True,
            error="",
            message="",
        )
        return Transition(new, (LoadPodcasts(new.generation),))
    return Transition(state)


def _on_confirm_row(state: State, event: ConfirmRow, credentials: CredentialWriter) -> Transition:
    if state.view is not View.SELECTING_PODCAST or state.podcasts_loading:
        return Transition(state)
    if not 0 <= event.index < len(state.podcasts):
        return Transition(state)
    new = _enter(
        state,
        View.ENTERING_URL,
        selected_podcast=state.podcasts[event.index],
        submitting=False,
        error="",
    )
    return Transition(new)


def _on_add_another(state: State, event: AddAnother, credentials: CredentialWriter) -> Transition:
    if state.view is not View.VIEWING_ITEMS:
        return Transition(state)
    state, effects = _stop_polling(state)
    return Transition(_enter(state, View.ENTERING_URL, submitting=False, error=""), effects)


def _on_go_main_menu(state: State, event: GoMainMenu, credentials: CredentialWriter) -> Transition:
    if state.view is not View.VIEWING_ITEMS:
        return Transition(state)
    state, effects = _stop_polling(state)
    new = _enter(state, View.MAIN_MENU, selected_podcast=None, items=(), error="")
    return Transition(new, effects + (LoadUsage(),))


def _on_quit(state: State, event: Quit, credentials: CredentialWriter) -> Transition:
    return _quit(state, 1 if state.view is View.FATAL_ERROR else 0)


def _on_any_key(state: State, event: AnyKey, credentials: CredentialWriter) -> Transition:
    if state.view is View.FATAL_ERROR:
        return _quit(state, 1)
    return Transition(state)


def _on_fatal(state: State, event: FatalErrorOccurred, credentials: CredentialWriter) -> Transition:
    state, effects = _stop_polling(state)
    new = _enter(
        state,
        View.FATAL_ERROR,
        error=event.message,
        message="",
        selected_podcast=None,
        submitting=False,
    )
    return Transition(new, effects)


def _on_credential_checked(state: State, event: CredentialChecked, credentials: CredentialWriter) -> Transition:
    if event.error:
        return _on_fatal(state, FatalErrorOccurred(event.error), credentials)
    if not event.has_credential:
        return Transition(replace(state, has_credential=False))
    if state.view is View.AWAITING_CREDENTIAL and not state.has_credential:
        new = _enter(state, View.MAIN_MENU, has_credential=True)
        return Transition(new, (LoadUsage(),))
    return Transition(replace(state, has_credential=True))


def _on_usage_loaded(state: State, event: UsageLoaded, credentials: CredentialWriter) -> Transition:
    if event.error:
        return Transition(replace(state, error=event.error))
    return Transition(replace(state, usage=event.usage))


def _is_current(state: State, generation: int, view: View) -> bool:
    return state.generation == generation and state.view is view


def _on_podcasts_loaded(state: State, event: PodcastsLoaded, credentials: CredentialWriter) -> Transition:
    if not _is_current(state, event.generation, View.SELECTING_PODCAST):
        return Transition(state)
    if event.error:
        return Transition(_enter(state, View.MAIN_MENU, podcasts_loading=False, error=event.error))
    return Transition(replace(state, podcasts=tuple(event.podcasts), podcasts_loading=False, error=""))


def _on_url_added(state: State, event: UrlAdded, credentials: CredentialWriter) -> Transition:
    if not _is_current(state, event.generation, View.ENTERING_URL):
        return Transition(state)
    if event.error:
        return Transition(replace(state, submitting=False, error=event.error))
    if state.selected_podcast is None:
        return Transition(replace(state, submitting=False))
    new = _enter(
        state,
        View.VIEWING_ITEMS,
        submitting=False,
        polling=True,
        poll_pending=False,
        items=(),
        error="",
    )
    return Transition(new, (LoadItems(new.generation, state.selected_podcast.id),))


def _on_items_loaded(state: State, event: ItemsLoaded, credentials: CredentialWriter) -> Transition:
    if not _is_current(state, event.generation, View.VIEWING_ITEMS) or not state.polling:
        return Transition(state)
    if event.error:
        return Transition(replace(state, error=event.error, polling=False))

    state = replace(state, items=tuple(event.items), error="")
    step = next_poll_step(state.items)
    if step is PollStep.CONTINUE:
        if state.poll_pending:
            return Transition(state)
        return Transition(
            replace(state, poll_pending=True),
            (SchedulePoll(state.generation, state.poll_interval),),
        )
    state = replace(state, polling=False)
    if step is PollStep.SETTLED_REFRESH_USAGE:
        return Transition(state, (LoadUsage(),))
    return Transition(state)


def _on_poll_tick(state: State, event: PollTick, credentials: CredentialWriter) -> Transition:
    if state.generation != event.generation:
        return Transition(state)
    state = replace(state, poll_pending=False)
    if state.view is not View.VIEWING_ITEMS or not state.polling or state.selected_podcast is None:
        return Transition(state)
    return Transition(state, (LoadItems(state.generation, state.selected_podcast.id),))


_HANDLERS: Dict[type, Callable[[State, object, CredentialWriter], Transition]] = {
    Submit: _on_submit,
    Cancel: _on_cancel,
    ClearCredential: _on_clear_credential,
    SelectMenu: _on_select_menu,
    ConfirmRow: _on_confirm_row,
    AddAnother: _on_add_another,
    GoMainMenu: _on_go_main_menu,
    Quit: _on_quit,
    AnyKey: _on_any_key,
    FatalErrorOccurred: _on_fatal,
    CredentialChecked: _on_credential_checked,
    UsageLoaded: _on_usage_loaded,
    PodcastsLoaded: _on_podcasts_loaded,
    UrlAdded: _on_url_added,
    ItemsLoaded: _on_items_loaded,
    PollTick: _on_poll_tick,
}


def transition(state: State, event: object, credentials: CredentialWriter) -> Transition:
    if state.terminated:
        return Transition(state)
    handler = _HANDLERS.get(type(event))
    if handler is None:
        return Transition(state)
    return handler(state, event, credentials)
