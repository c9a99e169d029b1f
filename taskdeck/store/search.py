from __future__ import annotations

from collections.abc import Callable

from taskdeck.observability import get_json_logger
from taskdeck.scheduling import ScheduledCall, Scheduler


class DebouncedSearch:
    """Trailing-edge debounce between raw search keystrokes and the view.

    - `set_input` echoes the raw text at once and re-arms a single timer
    - only the last input inside a quiet window of `delay` seconds commits
    - the committed value is the text captured when the timer was armed, trimmed
    - after `dispose` nothing is scheduled or committed any more
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_commit: Callable[[str], None],
        *,
        delay: float = 0.4,
    ) -> None:
        self._scheduler = scheduler
        self._on_commit = on_commit
        self._delay = delay
        self._raw = ""
        self._pending: ScheduledCall | None = None
        self._pending_text: str | None = None
        self._disposed = False
        self._logger = get_json_logger("taskdeck.search")

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def set_input(self, text: str) -> None:
        if self._disposed:
            self._logger.debug(
                "search input after dispose ignored", extra={"event": "search_ignored"}
            )
            return
        self._raw = text
        self._cancel_pending()
        self._pending_text = text
        self._pending = self._scheduler.call_later(self._delay, lambda: self._fire(text))

    def flush(self) -> None:
        """Commit the pending input now instead of waiting for the timer."""
        if self._disposed or self._pending_text is None:
            return
        text = self._pending_text
        self._cancel_pending()
        self._commit(text)

    def dispose(self) -> None:
        self._cancel_pending()
        self._disposed = True

    def _fire(self, text: str) -> None:
        if self._disposed:
            return
        self._pending = None
        self._pending_text = None
        self._commit(text)

    def _commit(self, text: str) -> None:
        query = text.strip()
        self._logger.debug(
            "search committed",
            extra={"event": "search_committed", "attributes": {"query_len": len(query)}},
        )
        self._on_commit(query)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None
        self._pending_text = None


__all__ = ["DebouncedSearch"]
