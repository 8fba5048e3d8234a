# memory_game/engine.py
from __future__ import annotations
from datetime import datetime, timedelta
from threading import RLock
from typing import Any, Callable, Dict, List, Optional
import logging

from .board import SYMBOLS, Board, Card, Shuffle
from .stats import FileStatsRepository, GameStats
from .timers import ThreadScheduler

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_NAME = "Player 1"
UNKNOWN_PLAYER_NAME = "Unknown"
MISMATCH_DELAY = 0.8  # seconds both cards stay visible after a miss
TICK_INTERVAL = 1.0

Listener = Callable[[str, Any], None]


def format_game_time(elapsed: timedelta) -> str:
    minutes, seconds = divmod(int(elapsed.total_seconds()), 60)
    return f"{minutes:02d}:{seconds:02d}"


class GameEngine:
    """
    Turn logic for one player on a 4x4 board.

    Turn: Idle -> AwaitingSecond (first set) -> Checking (second set) -> Idle.
    While checking, every flip is rejected. A miss stays visible for
    MISMATCH_DELAY seconds before both cards are turned back down.

    Each new_game() bumps the generation; deferred callbacks carry the
    generation they were scheduled in and do nothing once it is stale.
    """

    def __init__(
        self,
        stats_repository: FileStatsRepository,
        *,
        player_name: str = DEFAULT_PLAYER_NAME,
        scheduler: Optional[ThreadScheduler] = None,
        clock: Callable[[], datetime] = datetime.now,
        shuffle: Optional[Shuffle] = None,
        mismatch_delay: float = MISMATCH_DELAY,
        tick_interval: float = TICK_INTERVAL,
    ):
        self._stats = stats_repository
        self._scheduler = scheduler or ThreadScheduler()
        self._clock = clock
        self._shuffle = shuffle
        self._mismatch_delay = mismatch_delay
        self._tick_interval = tick_interval
        self._lock = RLock()
        self._listeners: List[Listener] = []

        self._player_name = player_name
        self._board: Optional[Board] = None
        self._generation = 0
        self._move_count = 0
        self._elapsed = timedelta(0)
        self._started_at: Optional[datetime] = None
        self._completed = False
        self._first: Optional[int] = None
        self._second: Optional[int] = None
        self._checking = False
        self._pending_hide = None
        self._tick = None
        self.high_scores: List[GameStats] = []
        self.last_stats: Optional[GameStats] = None

    # ----- notification -----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener(event, payload); returns a function that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                # listener errors never interrupt a state change
                logger.exception("Listener failed on %r event", event)

    # ----- read-only state -----

    @property
    def cards(self) -> List[Card]:
        with self._lock:
            return self._board.cards() if self._board is not None else []

    @property
    def move_count(self) -> int:
        return self._move_count

    @property
    def elapsed(self) -> timedelta:
        return self._elapsed

    @property
    def game_time(self) -> str:
        return format_game_time(self._elapsed)

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def checking(self) -> bool:
        return self._checking

    @property
    def player_name(self) -> str:
        return self._player_name

    @player_name.setter
    def player_name(self, value: str) -> None:
        with self._lock:
            self._player_name = value
            self._emit("player_name", value)

    def state(self) -> Dict[str, Any]:
        with self._lock:
            rows, cols = self._board.size() if self._board is not None else (0, 0)
            return {
                "rows": rows,
                "cols": cols,
                "cards": [self._card_view(card) for card in self.cards],
                "moves": self._move_count,
                "game_time": self.game_time,
                "completed": self._completed,
                "checking": self._checking,
                "player_name": self._player_name,
            }

    def _card_view(self, card: Card) -> Dict[str, Any]:
        row, col = self._board.position(card.id)
        return dict(card.to_dict(), row=row, col=col)

    # ----- commands -----

    def new_game(self) -> None:
        with self._lock:
            self._generation += 1
            self._cancel_timers()

            self._board = Board.deal(SYMBOLS, self._shuffle)
            self._reset_selection()
            self._checking = False
            self._move_count = 0
            self._elapsed = timedelta(0)
            self._completed = False
            self.last_stats = None
            self._started_at = self._clock()
            self._schedule_tick()
            logger.debug("New game %d started", self._generation)

            self._emit("board", self._board.cards())
            self._emit("moves", self._move_count)
            self._emit("elapsed", self.game_time)
            self._emit("checking", False)

    def can_flip(self, card_id: Any) -> bool:
        return self._reject_reason(card_id) is None

    def _reject_reason(self, card_id: Any) -> Optional[str]:
        if self._board is None:
            return "game not started"
        if self._checking:
            return "checking"
        if card_id not in self._board:
            return "unknown card"
        card = self._board.peek(card_id)
        if card.matched:
            return "already matched"
        if card.face_up:
            return "already face up"
        return None

    def attempt_flip(self, card_id: Any) -> Dict[str, Any]:
        """
        Flip a card and apply the matching rules.
        Return a JSON-serializable dict describing what happened.
        """
        with self._lock:
            reason = self._reject_reason(card_id)
            if reason is not None:
                return {"status": "rejected", "card": card_id, "reason": reason}

            card = self._board.flip_up(card_id)
            self._emit("card", card)

            if self._first is None:
                self._first = card_id
                return {"status": "ok", "flipped": card_id, "symbol": card.symbol, "match": None}

            self._second = card_id
            self._checking = True
            self._emit("checking", True)
            self._move_count += 1
            self._emit("moves", self._move_count)

            first = self._board.peek(self._first)
            if first.symbol == card.symbol:
                self._resolve_match()
                return {"status": "ok", "flipped": card_id, "symbol": card.symbol, "match": True}

            pair = [self._first, self._second]
            self._pending_hide = self._scheduler.call_later(
                self._mismatch_delay, self._hide_mismatch, self._generation
            )
            return {
                "status": "ok",
                "flipped": card_id,
                "symbol": card.symbol,
                "match": False,
                "pending_hide": pair,
            }

    def request_top_ten(self) -> List[GameStats]:
        scores = self._stats.top_ten()
        with self._lock:
            self.high_scores = list(scores)
            self._emit("high_scores", self.high_scores)
            return self.high_scores

    def stats_for_player(self, name: Optional[str] = None) -> List[GameStats]:
        return list(self._stats.stats_for_player(self._player_name if name is None else name))

    # ----- resolution -----

    def _resolve_match(self) -> None:
        for card in self._board.mark_matched(self._first, self._second):
            self._emit("card", card)
        self._reset_selection()
        self._finish_check()
        self._check_completion()

    def _hide_mismatch(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._second is None:
                return
            for card_id in (self._first, self._second):
                self._emit("card", self._board.flip_down(card_id))
            self._pending_hide = None
            self._reset_selection()
            self._finish_check()

    def _finish_check(self) -> None:
        self._checking = False
        self._emit("checking", False)

    def _reset_selection(self) -> None:
        self._first = None
        self._second = None

    def _check_completion(self) -> None:
        if self._completed or not self._board.all_matched():
            return

        now = self._clock()
        self._completed = True
        self._stop_tick()
        self._elapsed = self._since_start(now)
        self._emit("elapsed", self.game_time)

        name = self._player_name if self._player_name and self._player_name.strip() else UNKNOWN_PLAYER_NAME
        stats = GameStats.create(name, self._move_count, self._elapsed, now)
        self.last_stats = stats
        logger.info("Game completed by %s in %d moves (%s)", name, stats.moves, self.game_time)
        self._emit("completed", stats)
        self._stats.save(stats)

    # ----- timers -----

    def _schedule_tick(self) -> None:
        self._tick = self._scheduler.call_later(self._tick_interval, self._on_tick, self._generation)

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._completed:
                return
            self._elapsed = self._since_start(self._clock())
            self._emit("elapsed", self.game_time)
            self._schedule_tick()

    def _stop_tick(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _cancel_timers(self) -> None:
        self._stop_tick()
        if self._pending_hide is not None:
            self._pending_hide.cancel()
            self._pending_hide = None

    def shutdown(self) -> None:
        """Stop the tick and drop any pending mismatch callback."""
        with self._lock:
            self._generation += 1
            self._cancel_timers()

    def _since_start(self, now: datetime) -> timedelta:
        # wall clock may step back (DST); never report a negative time
        return max(now - self._started_at, timedelta(0))
