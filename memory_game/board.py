# memory_game/board.py
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, replace
from threading import RLock
from typing import Callable, List, Optional, Sequence, Tuple
import random

ROWS = 4
COLS = 4
BOARD_SIZE = ROWS * COLS

SYMBOLS: Tuple[str, ...] = ("🐶", "🐱", "🐭", "🐹", "🐰", "🦊", "🐻", "🐼")

Shuffle = Callable[[List[str]], None]


@dataclass(frozen=True)
class Card:
    id: int
    symbol: str
    face_up: bool = False
    matched: bool = False

    def to_dict(self) -> dict:
        shown = self.face_up or self.matched
        return {
            "id": self.id,
            "symbol": self.symbol if shown else None,
            "face_up": self.face_up,
            "matched": self.matched,
        }


class Board:
    """
    Mutable Board ADT for a 4x4 memory game.

    Rep:
      - cards is a list of BOARD_SIZE Card snapshots, cards[i].id == i
      - every symbol occurs exactly twice
      - matched => face_up
    Safety:
      - guarded by an internal lock; cards are frozen so snapshots handed
        out by peek() never change under the caller
    """

    def __init__(self, symbols: Sequence[str]):
        if len(symbols) != BOARD_SIZE:
            raise ValueError(f"board needs exactly {BOARD_SIZE} symbols")
        if any(n != 2 for n in Counter(symbols).values()):
            raise ValueError("every symbol must appear exactly twice")

        self._lock = RLock()
        self._cards: List[Card] = [Card(id=i, symbol=s) for i, s in enumerate(symbols)]
        self._check_rep()

    @classmethod
    def deal(cls, symbols: Sequence[str] = SYMBOLS, shuffle: Optional[Shuffle] = None) -> "Board":
        """Duplicate each symbol once and shuffle the pairs into a new board."""
        values = list(symbols) * 2
        (shuffle or random.shuffle)(values)
        return cls(values)

    def _check_rep(self) -> None:
        assert len(self._cards) == BOARD_SIZE
        for i, card in enumerate(self._cards):
            assert card.id == i
            assert isinstance(card.symbol, str)
            if card.matched:
                assert card.face_up is True

    def size(self) -> Tuple[int, int]:
        return (ROWS, COLS)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return isinstance(card_id, int) and not isinstance(card_id, bool) and 0 <= card_id < BOARD_SIZE

    def cards(self) -> List[Card]:
        with self._lock:
            return list(self._cards)

    def peek(self, card_id: int) -> Card:
        with self._lock:
            self._validate_id(card_id)
            return self._cards[card_id]

    def position(self, card_id: int) -> Tuple[int, int]:
        self._validate_id(card_id)
        return divmod(card_id, COLS)

    def flip_up(self, card_id: int) -> Card:
        """Turn a card face up and return the new snapshot."""
        with self._lock:
            self._validate_id(card_id)
            card = self._cards[card_id]
            if card.matched:
                raise ValueError("cannot flip a matched card")
            if card.face_up:
                raise ValueError("already face up")

            card = self._cards[card_id] = replace(card, face_up=True)
            self._check_rep()
            return card

    def flip_down(self, card_id: int) -> Card:
        with self._lock:
            self._validate_id(card_id)
            card = self._cards[card_id]
            if card.matched:
                raise ValueError("cannot flip down a matched card")
            if not card.face_up:
                return card
            card = self._cards[card_id] = replace(card, face_up=False)
            self._check_rep()
            return card

    def mark_matched(self, id1: int, id2: int) -> Tuple[Card, Card]:
        """Mark two face-up cards with the same symbol as permanently matched."""
        with self._lock:
            self._validate_id(id1)
            self._validate_id(id2)
            if id1 == id2:
                raise ValueError("a card cannot match itself")
            c1 = self._cards[id1]
            c2 = self._cards[id2]
            if not c1.face_up or not c2.face_up:
                raise ValueError("both must be face up to match")
            if c1.symbol != c2.symbol:
                raise ValueError("symbols do not match")

            c1 = self._cards[id1] = replace(c1, matched=True)
            c2 = self._cards[id2] = replace(c2, matched=True)
            self._check_rep()
            return c1, c2

    def all_matched(self) -> bool:
        with self._lock:
            return all(card.matched for card in self._cards)

    def _validate_id(self, card_id: int) -> None:
        if card_id not in self:
            raise ValueError("invalid card id")
