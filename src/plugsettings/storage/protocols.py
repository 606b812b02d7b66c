# src/plugsettings/storage/protocols.py
from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable

from plugsettings.errors import PersistError, RetrievalError


@runtime_checkable
class DataPersistence(Protocol):
    """Protocol defining the raw persistence boundary of a plugin.

    The payload is opaque: whatever was last saved is handed back on load,
    with no envelope, version or schema. Implementations replace the stored
    payload wholesale on every save.
    """

    async def load_data(self) -> Any:
        """Return the last persisted payload.

        Returns:
            Any JSON-compatible value, or None when nothing was saved yet
        """
        ...

    async def save_data(self, data: Any) -> None:
        """Persist a JSON-serializable value, replacing any earlier payload.

        Args:
            data: Value to persist
        """
        ...


class MemoryDataStore:
    """In-memory implementation of DataPersistence.

    Useful for embedding and for tests: the payload is kept as-is and every
    call is recorded.
    """

    def __init__(self, payload: Any = None):
        self.payload: Any = payload
        self.load_calls: int = 0
        self.save_calls: list[Any] = []

    async def load_data(self) -> Any:
        """Return a copy of the stored payload."""
        self.load_calls += 1
        return copy.deepcopy(self.payload)

    async def save_data(self, data: Any) -> None:
        """Record the exact object passed in and keep a snapshot as payload."""
        self.save_calls.append(data)
        self.payload = copy.deepcopy(data)

    def reset_call_history(self) -> None:
        """Reset the call history for testing."""
        self.load_calls = 0
        self.save_calls = []


class ErrorSimulatingDataStore(MemoryDataStore):
    """Data store that can simulate storage failures."""

    def __init__(self, payload: Any = None, fail_on_methods: list[str] | None = None):
        """Initialize with optional methods that should fail.

        Args:
            payload: Payload returned while loading does not fail
            fail_on_methods: Method names that should raise ("load_data", "save_data")
        """
        super().__init__(payload)
        self.fail_on_methods = fail_on_methods or []

    async def load_data(self) -> Any:
        """Either return the payload or raise RetrievalError."""
        if "load_data" in self.fail_on_methods:
            self.load_calls += 1
            raise RetrievalError("Simulated storage read failure")
        return await super().load_data()

    async def save_data(self, data: Any) -> None:
        """Either record the save or raise PersistError."""
        if "save_data" in self.fail_on_methods:
            raise PersistError("Simulated storage write failure")
        await super().save_data(data)


def assert_saved_with(store: MemoryDataStore, expected: Any) -> bool:
    """Assert that the last save received exactly ``expected`` (same object).

    Args:
        store: The memory store instance
        expected: Object that should have been handed to save_data

    Returns:
        True if the assertion passes, raises AssertionError otherwise
    """
    assert len(store.save_calls) > 0, "save_data was not called"
    last = store.save_calls[-1]
    assert last is expected, f"Expected the live object {id(expected)}, got {id(last)}"
    return True
