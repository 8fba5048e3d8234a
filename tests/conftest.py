# tests/conftest.py
from datetime import datetime, timedelta
import itertools

import pytest

from memory_game.engine import GameEngine


class ManualClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class _Job:
    def __init__(self, due, seq, callback, args):
        self.due, self.seq, self.callback, self.args = due, seq, callback, args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by advance(); moves the shared clock as jobs fire."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self._jobs = []
        self._seq = itertools.count()

    def call_later(self, delay, callback, *args):
        job = _Job(self.clock.now + timedelta(seconds=delay), next(self._seq), callback, args)
        self._jobs.append(job)
        return job

    def pending(self):
        return [j for j in self._jobs if not j.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.clock.now + timedelta(seconds=seconds)
        while True:
            due = [j for j in self.pending() if j.due <= target]
            if not due:
                break
            job = min(due, key=lambda j: (j.due, j.seq))
            self._jobs.remove(job)
            self.clock.now = job.due
            job.callback(*job.args)
        self.clock.now = target


class RecordingRepository:
    def __init__(self):
        self.saved = []

    def save(self, stats):
        self.saved.append(stats)
        return True

    def top_ten(self):
        return sorted(self.saved, key=lambda s: (s.moves, s.game_time))[:10]

    def stats_for_player(self, name):
        return [s for s in self.saved if s.player_name.casefold() == name.casefold()]


def in_order(values):
    """Leave the deal unshuffled: card i and card i+8 share a symbol."""


def pairs_adjacent(values):
    values.sort()


@pytest.fixture
def clock():
    return ManualClock(datetime(2026, 3, 1, 12, 0, 0))


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def repo():
    return RecordingRepository()


@pytest.fixture
def make_engine(repo, scheduler, clock):
    def factory(shuffle=in_order, stats_repository=None, **kwargs):
        engine = GameEngine(
            stats_repository if stats_repository is not None else repo,
            scheduler=scheduler,
            clock=clock,
            shuffle=shuffle,
            **kwargs,
        )
        engine.new_game()
        return engine
    return factory


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def paired_engine(make_engine):
    return make_engine(shuffle=pairs_adjacent)
