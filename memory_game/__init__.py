from .board import Board, Card
from .engine import GameEngine
from .stats import FileStatsRepository, GameStats

__all__ = ["Board", "Card", "GameEngine", "FileStatsRepository", "GameStats"]
