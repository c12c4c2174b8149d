"""Repositories persisting the shop store."""
import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from feedmap.errors import StoreError
from feedmap.store.models import StoreState

logger = logging.getLogger(__name__)


class StateRepository(ABC):
    """Loads and saves the whole store state."""

    @abstractmethod
    def load(self) -> StoreState:
        pass

    @abstractmethod
    def save(self, state: StoreState) -> None:
        pass


class InMemoryRepository(StateRepository):
    """Keeps state in memory; handy for tests and one-off sessions."""

    def __init__(self, state: StoreState = None):
        self._state = copy.deepcopy(state) if state is not None else StoreState()

    def load(self) -> StoreState:
        return copy.deepcopy(self._state)

    def save(self, state: StoreState) -> None:
        self._state = copy.deepcopy(state)


class JsonFileRepository(StateRepository):
    """Stores state as a JSON document on disk.

    Saves go through a temporary file that replaces the store in one step.
    After a load that found the file unreadable, saves are refused so the
    damaged file is left for inspection.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.unreadable = False

    def load(self) -> StoreState:
        """Load state; a missing or unreadable file yields an empty store."""
        if not self.path.exists():
            self.unreadable = False
            return StoreState()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            state = StoreState.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Error reading store {self.path}: {e}")
            self.unreadable = True
            return StoreState()

        self.unreadable = False
        return state

    def save(self, state: StoreState) -> None:
        """
        Write state atomically.

        Raises:
            StoreError: If the existing store could not be read on last load
        """
        if self.unreadable:
            raise StoreError(
                f"Store {self.path} could not be read; move or repair it before saving"
            )

        self.path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            try:
                json.dump(state.to_dict(), f, indent=2)
            except Exception:
                f.close()
                temp_path.unlink()
                raise

        os.replace(temp_path, self.path)
