"""Bounded newest-first history of completed podcast runs."""

from .store import HISTORY_CAPACITY, HISTORY_KEY, HistoryStore

__all__ = ["HISTORY_CAPACITY", "HISTORY_KEY", "HistoryStore"]
