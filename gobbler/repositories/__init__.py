"""Repository layer for gobbler."""

from .state_repo import ClockStore, StateRepository

__all__ = ["ClockStore", "StateRepository"]
