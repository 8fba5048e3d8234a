"""Runtime settings, read from MEMORY_* environment variables."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional
import os


@dataclass
class Config:
    stats_file: str = "gamestats.csv"
    host: str = "127.0.0.1"
    port: int = 5000
    player_name: str = "Player 1"
    log_level: str = "INFO"


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    env = os.environ if environ is None else environ
    defaults = Config()
    return Config(
        stats_file=env.get("MEMORY_STATS_FILE", defaults.stats_file),
        host=env.get("MEMORY_HOST", defaults.host),
        port=int(env.get("MEMORY_PORT", defaults.port)),
        player_name=env.get("MEMORY_PLAYER", defaults.player_name),
        log_level=env.get("MEMORY_LOG_LEVEL", defaults.log_level).upper(),
    )
