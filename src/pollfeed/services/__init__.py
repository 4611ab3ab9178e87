"""Business logic services for the Pollfeed application."""

from .trending import TrendingRunReport, TrendingScoreWorker

__all__ = [
    "TrendingRunReport",
    "TrendingScoreWorker",
]
