from __future__ import annotations

import itertools
import logging
from threading import RLock
from typing import Any, Callable, Hashable


logger = logging.getLogger(__name__)


class TimerScheduler:
    """Background timers keyed by room (or any hashable key).

    Each key holds at most one live task, tagged with a generation drawn
    from one process-wide counter. `cancel` forgets the key, so a task that
    wakes up after being replaced or cancelled sees the mismatch and exits
    without touching the room. Keys are dropped once their task ends, so the
    maps only hold live timers. Callbacks must still check the room phase
    themselves before acting.
    """

    def __init__(
        self,
        start_task: Callable[..., Any],
        sleep: Callable[[float], Any],
        interval: float = 1.0,
        enabled: bool = True,
    ) -> None:
        self._start_task = start_task
        self._sleep = sleep
        self.interval = interval
        self.enabled = enabled
        self._lock = RLock()
        self._counter = itertools.count(1)
        self._generations: dict[Hashable, int] = {}
        self._running: set[Hashable] = set()
        self._rearm: set[Hashable] = set()

    def _bump(self, key: Hashable) -> int:
        with self._lock:
            gen = next(self._counter)
            self._generations[key] = gen
            return gen

    def _is_current(self, key: Hashable, gen: int) -> bool:
        with self._lock:
            return self._generations.get(key) == gen

    def _finish(self, key: Hashable, gen: int) -> None:
        with self._lock:
            if self._generations.get(key) == gen:
                self._running.discard(key)
                self._rearm.discard(key)
                del self._generations[key]

    def is_running(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._running

    def ensure_ticker(self, key: Hashable, on_tick: Callable[[Hashable], bool]) -> bool:
        """Start a repeating tick for `key` unless one is already running.

        `on_tick` returns False to stop the ticker.
        """
        if not self.enabled:
            return False
        with self._lock:
            if key in self._running:
                # Keeps a ticker that is about to stop alive for one more tick.
                self._rearm.add(key)
                return False
            self._running.add(key)
            gen = self._bump(key)

        def _runner() -> None:
            try:
                while True:
                    self._sleep(self.interval)
                    if not self._is_current(key, gen):
                        logger.debug("[timer-stale] key=%s gen=%d", key, gen)
                        return
                    with self._lock:
                        self._rearm.discard(key)
                    if on_tick(key):
                        continue
                    with self._lock:
                        if key in self._rearm and self._generations.get(key) == gen:
                            self._rearm.discard(key)
                            continue
                        # Released under the same lock as the rearm check.
                        self._finish(key, gen)
                    return
            except Exception:
                logger.exception("[timer-error] key=%s", key)
            finally:
                self._finish(key, gen)

        logger.debug("[timer-set] key=%s gen=%d interval=%s", key, gen, self.interval)
        self._start_task(_runner)
        return True

    def call_later(self, key: Hashable, delay: float, callback: Callable[[], Any]) -> bool:
        """Run `callback` once after `delay` seconds unless `key` is cancelled first."""
        if not self.enabled:
            return False
        with self._lock:
            self._running.add(key)
            gen = self._bump(key)

        def _runner() -> None:
            try:
                self._sleep(delay)
                if not self._is_current(key, gen):
                    logger.debug("[timer-stale] key=%s gen=%d", key, gen)
                    return
                logger.debug("[timer-fire] key=%s gen=%d", key, gen)
                callback()
            except Exception:
                logger.exception("[timer-error] key=%s", key)
            finally:
                self._finish(key, gen)

        logger.debug("[timer-set] key=%s gen=%d delay=%s", key, gen, delay)
        self._start_task(_runner)
        return True

    def cancel(self, key: Hashable) -> None:
        with self._lock:
            if key not in self._generations:
                return
            del self._generations[key]
            self._running.discard(key)
            self._rearm.discard(key)
        logger.debug("[timer-cancel] key=%s", key)
