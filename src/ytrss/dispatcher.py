"""Runs the network/storage effects of the state machine off the UI loop.

Each effect becomes one unit of work that always produces exactly one
result event, success or failure.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from ytrss.api.client import YtrssClient
from ytrss.errors import CredentialNotFoundError, YtrssError
from ytrss.machine import (
    AddUrl,
    CheckCredential,
    CredentialChecked,
    ItemsLoaded,
    LoadItems,
    LoadPodcasts,
    LoadUsage,
    PodcastsLoaded,
    UrlAdded,
    UsageLoaded,
)

logger = logging.getLogger(__name__)


class SecretReader(Protocol):
    def get(self) -> str: ...


def _describe(exc: Exception) -> str:
    if isinstance(exc, YtrssError):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"


class CommandDispatcher:
    """Turns effects into background work.

    ``run_in_background`` hands a zero-argument callable to the host's worker
    pool; ``deliver`` posts the result event back onto the UI loop.
    """

    HANDLES = (CheckCredential, LoadPodcasts, AddUrl, LoadItems, LoadUsage)

    def __init__(
        self,
        *,
        client: YtrssClient,
        credentials: SecretReader,
        run_in_background: Callable[[Callable[[], None]], object],
        deliver: Callable[[object], None],
    ) -> None:
        self.client = client
        self.credentials = credentials
        self._run_in_background = run_in_background
        self._deliver = deliver

    def handles(self, effect: object) -> bool:
        return isinstance(effect, self.HANDLES)

    def dispatch(self, effect: object) -> None:
        logger.debug("Dispatching %s", effect)

        def work() -> None:
            self._deliver(self.perform(effect))

        self._run_in_background(work)

    def perform(self, effect: object) -> object:
        """Execute ``effect`` synchronously and return its result event."""
        if isinstance(effect, CheckCredential):
            try:
                self.credentials.get()
            except CredentialNotFoundError:
                return CredentialChecked(has_credential=False)
            except Exception as exc:
                logger.exception("Credential check failed")
                return CredentialChecked(has_credential=False, error=_describe(exc))
            return CredentialChecked(has_credential=True)

        if isinstance(effect, LoadPodcasts):
            try:
                podcasts = self.client.list_podcasts()
            except Exception as exc:
                self._log_failure(effect, exc)
                return PodcastsLoaded(effect.generation, error=_describe(exc))
            return PodcastsLoaded(effect.generation, podcasts=tuple(podcasts))

        if isinstance(effect, AddUrl):
            try:
                item = self.client.add_url(effect.podcast_id, effect.url)
            except Exception as exc:
                self._log_failure(effect, exc)
                return UrlAdded(effect.generation, error=_describe(exc))
            return UrlAdded(effect.generation, item=item)

        if isinstance(effect, LoadItems):
            try:
                items = self.client.get_items(effect.podcast_id)
            except Exception as exc:
                self._log_failure(effect, exc)
                return ItemsLoaded(effect.generation, error=_describe(exc))
            return ItemsLoaded(effect.generation, items=tuple(items))

        if isinstance(effect, LoadUsage):
            try:
                usage = self.client.get_usage()
            except Exception as exc:
                self._log_failure(effect, exc)
                return UsageLoaded(error=_describe(exc))
            return UsageLoaded(usage=usage)

        raise TypeError(f"not a dispatchable effect: {effect!r}")

    def _log_failure(self, effect: object, exc: Exception) -> None:
        if isinstance(exc, YtrssError):
            logger.warning("%s failed: %s", type(effect).__name__, exc)
        else:
            logger.exception("%s crashed", type(effect).__name__)
