"""State store: Protocol + JSON-file implementation with a synchronous flush per change."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import ValidationError

from factkeeper.domain.phases import ConversationPhase
from factkeeper.domain.state import FieldName, StoreSnapshot, UserFields
from factkeeper.domain.validators import validate_field_name

logger = logging.getLogger(__name__)

_MISSING = object()


class StorePersistenceError(RuntimeError):
    """The state file could not be written; the triggering change was rolled back."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to write state file {path}: {cause}")
        self.path = path
        self.cause = cause


@runtime_checkable
class StateStore(Protocol):
    """Protocol for per-user phase, active field and collected values."""

    async def get_state(self, user_id: int) -> ConversationPhase:
        """Current phase; CHOOSING for unseen users."""
        ...

    async def set_state(self, user_id: int, phase: ConversationPhase) -> None:
        """Set phase. Durable before returning."""
        ...

    async def get_context(self, user_id: int) -> str:
        """Field being edited, or "" when unset."""
        ...

    async def set_context(self, user_id: int, field_name: str | FieldName) -> None:
        """Set the field being edited. Durable before returning."""
        ...

    async def update_field(self, user_id: int, field_name: str | FieldName, value: str) -> None:
        """Write one field value. Durable before returning."""
        ...

    async def render_summary(self, user_id: int) -> str:
        """Four-line summary, or the no-data sentinel."""
        ...


class JsonFileStateStore:
    """
    All users' data in one JSON document, rewritten atomically on every change.

    The table lock guards the in-memory tables and is never held across the
    file write. The write lock spans one mutation, its flush and any rollback,
    so a change is on disk or undone before the next change starts. Readers
    only take the table lock.
    """

    def __init__(self, path: str | Path, no_data_text: str = "No data.") -> None:
        self.path = Path(path)
        self.no_data_text = no_data_text
        self._tables = StoreSnapshot()
        self._lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._load()

    # --- reads ---

    async def get_state(self, user_id: int) -> ConversationPhase:
        async with self._lock:
            return self._tables.states.get(user_id, ConversationPhase.CHOOSING)

    async def get_context(self, user_id: int) -> str:
        async with self._lock:
            return self._tables.context.get(user_id, "")

    async def render_summary(self, user_id: int) -> str:
        async with self._lock:
            record = self._tables.data.get(user_id)
            if record is None:
                return self.no_data_text
            return record.render()

    async def snapshot(self) -> StoreSnapshot:
        """Deep copy of all tables."""
        async with self._lock:
            return self._tables.model_copy(deep=True)

    # --- mutations ---

    async def set_state(self, user_id: int, phase: ConversationPhase) -> None:
        phase = ConversationPhase(phase)
        async with self._write_lock:
            async with self._lock:
                undo = _swap(self._tables.states, user_id, phase)
            await self._commit(undo)

    async def set_context(self, user_id: int, field_name: str | FieldName) -> None:
        field = validate_field_name(field_name)
        async with self._write_lock:
            async with self._lock:
                undo = _swap(self._tables.context, user_id, field.value)
            await self._commit(undo)

    async def update_field(self, user_id: int, field_name: str | FieldName, value: str) -> None:
        field = validate_field_name(field_name)
        async with self._write_lock:
            async with self._lock:
                current = self._tables.data.get(user_id)
                record = current.model_copy() if current is not None else UserFields()
                record.set(field, value)
                undo = _swap(self._tables.data, user_id, record)
            await self._commit(undo)

    # --- persistence ---

    async def _commit(self, undo: Callable[[], None]) -> None:
        """Flush, or roll back and re-raise. Caller holds the write lock."""
        try:
            await self._flush()
        except StorePersistenceError:
            async with self._lock:
                undo()
            raise

    async def _flush(self) -> None:
        async with self._lock:
            payload = self._tables.model_dump_json(indent=2, by_alias=True)
        try:
            await asyncio.to_thread(_write_atomic, self.path, payload)
        except OSError as e:
            logger.error("Failed to write state file %s: %s", self.path, e)
            raise StorePersistenceError(self.path, e) from e

    def _load(self) -> None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("State file %s not found; it will be created on first change", self.path)
            return
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read state file %s, starting empty: %s", self.path, e)
            return

        try:
            self._tables = StoreSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("State file %s is malformed, starting empty: %s", self.path, e)
            return
        logger.info(
            "Loaded state file %s (%d users)",
            self.path,
            len(set(self._tables.states) | set(self._tables.data) | set(self._tables.context)),
        )


def _swap(table: dict[int, Any], key: int, value: Any) -> Callable[[], None]:
    """Store value and return a closure that restores the previous entry."""
    previous = table.get(key, _MISSING)
    table[key] = value

    def undo() -> None:
        if previous is _MISSING:
            del table[key]
        else:
            table[key] = previous

    return undo


def _write_atomic(path: Path, payload: str) -> None:
    """Write to a temp file beside path, fsync, then rename over path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
