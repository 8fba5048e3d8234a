# memory_game/timers.py
from __future__ import annotations
from threading import Timer
from typing import Any, Callable


class ThreadScheduler:
    """Runs callbacks after a delay on daemon timer threads.

    call_later() returns the started Timer; its cancel() drops the callback
    if it has not fired yet.
    """

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Timer:
        timer = Timer(delay, callback, args=args)
        timer.daemon = True
        timer.start()
        return timer
