"""Rate limiting for bursts of host events.

Plotly reports every intermediate axis range while the user drags or scrolls.
:class:`QueuedDebouncer` queues those calls and replays them on a fixed
cadence, so a burst costs one tick per period instead of one per event.
Inside a running asyncio loop (Jupyter kernels) the timer is the loop's own
``call_later``; elsewhere a daemon :class:`threading.Timer` is used.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Optional

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = ["QueuedDebouncer"]


@dataclass
class _PendingCall:
    args: tuple[Any, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)


class QueuedDebouncer:
    """Replay queued calls to ``callback`` at most once per period.

    Parameters
    ----------
    callback : callable
        Invoked with the arguments of a queued call.
    execute_every_ms : int
        Period between replays, in milliseconds.
    drop_overflow : bool, default True
        Keep only the newest queued call at each replay. Axis ranges are
        absolute, so older ones carry no information once a newer one exists.

    Notes
    -----
    A failing callback is logged and does not stop later replays.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        *,
        execute_every_ms: int,
        drop_overflow: bool = True,
    ) -> None:
        if execute_every_ms <= 0:
            raise ValueError(f"execute_every_ms must be > 0, got {execute_every_ms!r}")
        self._callback = callback
        self._period_s = execute_every_ms / 1000.0
        self._drop_overflow = bool(drop_overflow)
        self._pending: Deque[_PendingCall] = deque()
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._pending.append(_PendingCall(args, dict(kwargs)))
            if self._timer is None:
                self._arm_locked()

    def _arm_locked(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(self._period_s, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()
        else:
            self._timer = loop.call_later(self._period_s, self._fire)

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
            if not self._pending:
                return
            if self._drop_overflow:
                newest = self._pending[-1]
                self._pending.clear()
                self._pending.append(newest)
            call = self._pending.popleft()
            if self._pending:
                self._arm_locked()

        try:
            self._callback(*call.args, **call.kwargs)
        except Exception:
            logger.exception("QueuedDebouncer callback failed")
