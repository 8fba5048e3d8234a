# tests/test_config.py
import pytest

from memory_game import __main__ as cli
from memory_game.config import Config, load_config


def test_defaults():
    assert load_config({}) == Config()


def test_environment_overrides():
    cfg = load_config({
        "MEMORY_STATS_FILE": "/tmp/scores.csv",
        "MEMORY_HOST": "0.0.0.0",
        "MEMORY_PORT": "8080",
        "MEMORY_PLAYER": "Alice",
        "MEMORY_LOG_LEVEL": "debug",
    })
    assert cfg == Config("/tmp/scores.csv", "0.0.0.0", 8080, "Alice", "DEBUG")


def test_bad_port():
    with pytest.raises(ValueError):
        load_config({"MEMORY_PORT": "http"})


def test_cli_flags_override_environment(monkeypatch):
    monkeypatch.setenv("MEMORY_PORT", "8080")
    monkeypatch.setenv("MEMORY_PLAYER", "Alice")

    a = cli.parse_args(["--port", "9000", "--log-level", "debug"])
    assert a.port == 9000
    assert a.player == "Alice"
    assert a.log_level == "DEBUG"


def test_main_runs_app(monkeypatch, tmp_path):
    monkeypatch.delenv("MEMORY_HOST", raising=False)
    calls = []
    monkeypatch.setattr("flask.Flask.run", lambda self, **kw: calls.append(kw))

    stats_file = tmp_path / "scores.csv"
    cli.main(["--stats-file", str(stats_file), "--port", "5055"])

    assert calls == [{"host": "127.0.0.1", "port": 5055, "threaded": True}]
    assert stats_file.exists()
