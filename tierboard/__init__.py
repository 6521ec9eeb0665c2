"""Tierboard: competitive tier list leaderboard and admin panel backend."""

__version__ = "1.0.0"
