# memory_game/stats.py
"""Completed-game records and the flat-file store that keeps them.

File layout, one record per line after a fixed header::

    PlayerName,Moves,GameTime,CompletedAt
    Alice,12,00:01:07,2026-03-01 14:22:05

Names are written as-is apart from line breaks, which become spaces; a name
containing a comma produces a line with too many fields, which is skipped on
read.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, List, Optional, Union
import logging
import re

logger = logging.getLogger(__name__)

HEADER = "PlayerName,Moves,GameTime,CompletedAt"
DELIMITER = ","
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TOP_SCORES = 10

# everything str.splitlines() treats as a line boundary
_LINE_BREAK_RE = re.compile(r"[\r\n\x0b\x0c\x1c-\x1e\x85\u2028\u2029]")

# HH:MM:SS, plus the .NET "c" form ([d.]hh:mm:ss[.fffffff]) older files used.
_DURATION_RE = re.compile(
    r"^(?:(?P<days>\d+)\.)?(?P<hours>\d{2,}):(?P<minutes>[0-5]\d):(?P<seconds>[0-5]\d)"
    r"(?:\.(?P<fraction>\d{1,7}))?$"
)


@dataclass(frozen=True)
class GameStats:
    player_name: str
    moves: int
    game_time: timedelta
    completed_at: datetime

    def __post_init__(self):
        if self.moves < 0:
            raise ValueError("moves must be non-negative")
        if self.game_time < timedelta(0):
            raise ValueError("game_time must be non-negative")

    @classmethod
    def create(cls, player_name: str, moves: int, game_time: timedelta, completed_at: datetime) -> "GameStats":
        """Build a record truncated to whole seconds, the precision the file keeps."""
        return cls(
            player_name=clean_name(player_name),
            moves=moves,
            game_time=timedelta(seconds=int(game_time.total_seconds())),
            completed_at=completed_at.replace(microsecond=0),
        )

    def to_dict(self) -> dict:
        return {
            "player_name": self.player_name,
            "moves": self.moves,
            "game_time": format_duration(self.game_time),
            "completed_at": format_timestamp(self.completed_at),
        }


def format_duration(value: timedelta) -> str:
    total = int(value.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_duration(text: str) -> timedelta:
    m = _DURATION_RE.match(text.strip())
    if m is None:
        raise ValueError(f"bad duration: {text!r}")
    fraction = m.group("fraction") or ""
    return timedelta(
        days=int(m.group("days") or 0),
        hours=int(m.group("hours")),
        minutes=int(m.group("minutes")),
        seconds=int(m.group("seconds")),
        microseconds=int(fraction[:6].ljust(6, "0")),
    )


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    return datetime.strptime(text.strip(), TIMESTAMP_FORMAT)


def clean_name(name: str) -> str:
    """Replace line breaks so a name can never spill into another record."""
    return _LINE_BREAK_RE.sub(" ", name)


def format_record(stats: GameStats) -> str:
    return DELIMITER.join((
        clean_name(stats.player_name),
        str(stats.moves),
        format_duration(stats.game_time),
        format_timestamp(stats.completed_at),
    ))


def parse_record(line: str) -> GameStats:
    """Parse one data line; raises ValueError when the line is malformed."""
    parts = line.rstrip("\r\n").split(DELIMITER)
    if len(parts) != 4:
        raise ValueError(f"expected 4 fields, got {len(parts)}")
    name, moves, game_time, completed_at = parts
    return GameStats(
        player_name=name,
        moves=int(moves),
        game_time=parse_duration(game_time),
        completed_at=parse_timestamp(completed_at),
    )


class FileStatsRepository:
    """Append-only store of completed games in a delimited text file."""

    def __init__(self, path: Union[str, Path] = "gamestats.csv"):
        self.path = Path(path)
        try:
            self._ensure_file()
        except OSError:
            logger.exception("Could not create stats file %s", self.path)

    def _ensure_file(self) -> None:
        if not self.path.exists():
            with self.path.open("w", encoding="utf-8", newline="") as f:
                f.write(HEADER + "\n")

    def save(self, stats: GameStats) -> bool:
        """Append one record. Returns False (and logs) if the file can't be written."""
        try:
            line = (format_record(stats) + "\n").encode("utf-8")
            self._ensure_file()
            with self.path.open("ab") as f:
                f.write(line)
        except (OSError, UnicodeError):
            logger.exception("Error saving stats to %s", self.path)
            return False
        return True

    def _iter_stats(self) -> Iterator[GameStats]:
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return
        except OSError:
            logger.exception("Error reading stats from %s", self.path)
            return

        # only "\n" ends a record; each line is decoded on its own
        for lineno, raw in enumerate(data.split(b"\n"), start=1):
            try:
                line = raw.decode("utf-8").rstrip("\r")
            except UnicodeDecodeError as e:
                logger.warning("Skipping stats record %s:%d: %s", self.path, lineno, e)
                continue
            if not line.strip():
                continue
            if lineno == 1 and line.strip() == HEADER:
                continue
            try:
                yield parse_record(line)
            except ValueError as e:
                logger.warning("Skipping stats record %s:%d: %s", self.path, lineno, e)

    def all_stats(self) -> List[GameStats]:
        return list(self._iter_stats())

    def top_ten(self) -> List[GameStats]:
        ranked = sorted(self._iter_stats(), key=lambda s: (s.moves, s.game_time))
        return ranked[:TOP_SCORES]

    def stats_for_player(self, name: Optional[str]) -> List[GameStats]:
        wanted = (name or "").casefold()
        return [s for s in self._iter_stats() if s.player_name.casefold() == wanted]
