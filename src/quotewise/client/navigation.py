"""Navigation hooks used when a session ends."""

from typing import Protocol


class Navigator(Protocol):
    """Where the consumer currently is and how to move it."""

    @property
    def current_path(self) -> str: ...

    def navigate(self, path: str) -> None: ...


class MemoryNavigator:
    """Navigator that only records where it was sent."""

    def __init__(self, current_path: str = "/") -> None:
        self._current_path = current_path
        self.history: list[str] = []

    @property
    def current_path(self) -> str:
        return self._current_path

    def navigate(self, path: str) -> None:
        self.history.append(path)
        self._current_path = path
