"""
Font Registry Client
====================

Loads catalog fonts into the rendering runtime and owns their load states.

State machine, per font id::

    Unloaded --start--> Loading --success--> Loaded
                        Loading --failure--> Failed --reload--> Loading

Loads run on a thread pool so fonts never wait on each other. Each id has
at most one outstanding load: concurrent ``ensure_loaded`` calls share the
future kept in the in-flight registry.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from ..core.exceptions import ClientClosedError, FontLoadError, InvalidStateTransition
from ..core.models import FontRecord, LoadState
from .fetchers import FontFetcher
from .runtime import PillowRenderingRuntime

logger = logging.getLogger(__name__)


class FontRegistryClient:
    """
    Single-flight font loader.

    Args:
        fetcher: Fetches font bytes by resource URL
        runtime: Rendering runtime fonts are registered with
        max_workers: Maximum number of concurrent loads
    """

    def __init__(
        self,
        fetcher: FontFetcher,
        runtime: PillowRenderingRuntime,
        max_workers: int = 4,
    ):
        self.fetcher = fetcher
        self.runtime = runtime
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="font-load")
        self._lock = threading.Lock()
        self._states: dict[str, LoadState] = {}
        self._records: dict[str, FontRecord] = {}
        # id -> future of the current (or last finished) load
        self._loads: dict[str, Future] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get_state(self, font_id: str) -> LoadState:
        with self._lock:
            return self._states.get(font_id, LoadState.UNLOADED)

    def states(self) -> dict[str, LoadState]:
        """Snapshot of every known load state."""
        with self._lock:
            return dict(self._states)

    def track(self, record: FontRecord) -> LoadState:
        """Record a newly visible font as Unloaded if it is not known yet."""
        with self._lock:
            self._records.setdefault(record.id, record)
            return self._states.setdefault(record.id, LoadState.UNLOADED)

    def ensure_loaded(self, record: FontRecord) -> Future:
        """
        Make sure ``record`` is loaded, starting a load only if none exists.

        Returns:
            Future resolving to LoadState.LOADED, or raising FontLoadError.
            Every caller for the same id gets the same future.
        """
        with self._lock:
            if self._closed:
                raise ClientClosedError()

            self._records.setdefault(record.id, record)
            state = self._states.get(record.id, LoadState.UNLOADED)
            if state is not LoadState.UNLOADED:
                return self._loads[record.id]

            return self._start_load(record)

    def reload(self, font_id: str) -> Future:
        """
        Retry a failed font.

        Raises:
            InvalidStateTransition: The font is not in the Failed state
        """
        with self._lock:
            if self._closed:
                raise ClientClosedError()

            state = self._states.get(font_id, LoadState.UNLOADED)
            if state is not LoadState.FAILED:
                raise InvalidStateTransition(font_id, state, "reload")

            logger.info(f"Reloading font {font_id}")
            return self._start_load(self._records[font_id])

    def _start_load(self, record: FontRecord) -> Future:
        # Caller holds the lock
        future: Future = Future()
        future.set_running_or_notify_cancel()
        self._states[record.id] = LoadState.LOADING
        self._loads[record.id] = future
        self._executor.submit(self._load, record, future)
        logger.debug(f"Started loading font {record.id} from {record.resource_url}")
        return future

    def _load(self, record: FontRecord, future: Future) -> None:
        try:
            data = self.fetcher.fetch(record.resource_url)
            self.runtime.register(record.id, data)
        except FontLoadError as e:
            self._finish(record.id, future, LoadState.FAILED, e)
        except Exception as e:
            self._finish(record.id, future, LoadState.FAILED, FontLoadError(record.id, e))
        else:
            self._finish(record.id, future, LoadState.LOADED)

    def _finish(
        self,
        font_id: str,
        future: Future,
        state: LoadState,
        error: FontLoadError | None = None,
    ) -> None:
        with self._lock:
            discarded = self._closed
            if not discarded:
                self._states[font_id] = state

        if discarded:
            # Torn down while loading: complete quietly, surface nothing
            logger.debug(f"Discarding late result for font {font_id}: {state.value}")
            future.set_result(state)
            return

        if error is not None:
            logger.warning(f"Font {font_id} failed to load: {error.cause}")
            future.set_exception(error)
        else:
            logger.debug(f"Font {font_id} loaded")
            future.set_result(state)

    def close(self) -> None:
        """Tear down the client; loads still running finish in the background."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=False)
        logger.debug("Font registry client closed")

    def __enter__(self) -> "FontRegistryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
