"""Debounced, generation-tagged search requests.

Each `update()` bumps a generation counter and restarts the quiet-period
timer. When the timer fires the query runs tagged with the generation it
was started for; if a newer `update()` arrived while it was in flight the
result is dropped instead of delivered, so a slow stale query can never
overwrite the results of a newer one.
"""
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class DebouncedSearch:
    """Runs `search_fn(*args)` after `delay_seconds` of quiet.

    Args:
        search_fn: callable performing the query.
        on_results: called as on_results(generation, results) for the latest generation only.
        on_error: called as on_error(generation, exc) for the latest generation only.
        delay_seconds: debounce window.
        timer_factory: threading.Timer compatible factory (injectable for tests).
    """

    def __init__(
        self,
        search_fn: Callable[..., Any],
        on_results: Callable[[int, Any], None],
        on_error: Optional[Callable[[int, Exception], None]] = None,
        delay_seconds: float = 0.3,
        timer_factory=threading.Timer
    ):
        self.search_fn = search_fn
        self.on_results = on_results
        self.on_error = on_error
        self.delay_seconds = delay_seconds
        self.timer_factory = timer_factory
        self._generation = 0
        self._timer = None
        self._lock = threading.RLock()
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    def update(self, *args) -> int:
        """Schedule a query for new input; returns the generation assigned to it."""
        with self._lock:
            if self._closed:
                return self._generation
            self._generation += 1
            generation = self._generation
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self.timer_factory(self.delay_seconds, self._run, args=(generation,) + tuple(args))
            self._timer.daemon = True
            self._timer.start()
        return generation

    def is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _run(self, generation: int, *args):
        if not self.is_current(generation):
            return
        try:
            results = self.search_fn(*args)
        except Exception as e:
            with self._lock:
                if self.is_current(generation):
                    logger.warning(f"Search generation {generation} failed: {e}")
                    if self.on_error:
                        self.on_error(generation, e)
            return
        # update() takes the same lock, so no newer generation can start between
        # this check and the delivery
        with self._lock:
            if not self.is_current(generation):
                logger.debug(f"Discarding stale search generation {generation} (latest {self._generation})")
                return
            self.on_results(generation, results)

    def cancel(self):
        """Stop any pending query and ignore results of in-flight ones."""
        with self._lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()
        return False
