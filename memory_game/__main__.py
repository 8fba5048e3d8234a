import argparse
import logging

from .config import load_config
from .engine import GameEngine
from .server import create_app
from .stats import FileStatsRepository

logger = logging.getLogger("memory_game")


def parse_args(argv=None):
    cfg = load_config()
    p = argparse.ArgumentParser(prog="memory_game", description="Memory card game server")
    p.add_argument("-H", "--host", default=cfg.host)
    p.add_argument("-p", "--port", type=int, default=cfg.port)
    p.add_argument("-s", "--stats-file", default=cfg.stats_file, help="where completed games are recorded")
    p.add_argument("--player", default=cfg.player_name, help="player name stored with each result")
    p.add_argument("--log-level", default=cfg.log_level,
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper)
    return p.parse_args(argv)


def main(argv=None):
    a = parse_args(argv)
    logging.basicConfig(level=a.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    engine = GameEngine(FileStatsRepository(a.stats_file), player_name=a.player)
    engine.new_game()
    app = create_app(engine)
    logger.info("Memory game on %s:%d (stats in %s)", a.host, a.port, a.stats_file)
    try:
        app.run(host=a.host, port=a.port, threaded=True)
    finally:
        engine.shutdown()


if __name__ == "__main__":
    main()
