"""
State Store module for the local rate-limit and pricing state.

The state is one small JSON object in one file. Reading never fails (a missing
or corrupt file is empty state) and writing is best effort, since losing this
state must not break an API operation.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .audit_logger import AuditLogger
from .exceptions import PersistenceError
from .models import LocalState


class StateStore:
    """
    JSON file persistence for LocalState.

    Writes replace the whole object (no field merge) and go through a temporary
    file renamed over the target, so a reader never sees a half-written file.
    Each ``update`` is a synchronous read-modify-write, which keeps it atomic
    with respect to other coroutines of the same event loop.
    """

    COMPONENT = "state_store"

    def __init__(self, file_path: Path, logger: Optional[AuditLogger] = None) -> None:
        """
        Initialize the state store.

        Args:
            file_path: Path to the state file (JSON format)
            logger: Optional logger for read/write failures
        """
        self._file_path = Path(file_path)
        self._logger = logger

    @property
    def file_path(self) -> Path:
        """Get the state file path."""
        return self._file_path

    def read(self) -> LocalState:
        """
        Load the state file.

        Returns:
            The stored state, or an empty LocalState if the file is missing,
            unreadable or not valid JSON
        """
        try:
            raw = self._load_raw()
        except PersistenceError as e:
            self._log_failure("Error reading state file", e)
            return LocalState()
        if raw is None:
            return LocalState()
        return LocalState.from_dict(raw)

    def write(self, state: LocalState) -> bool:
        """
        Replace the state file with ``state``.

        Returns:
            True if the file was written, False if the write failed (logged)
        """
        try:
            self._dump_raw(state.to_dict())
        except PersistenceError as e:
            self._log_failure("Error writing state file", e)
            return False
        return True

    def update(self, mutate: Callable[[LocalState], None]) -> LocalState:
        """
        Read the state, apply ``mutate`` in place and write it back.

        Returns:
            The updated state (also when the write failed)
        """
        state = self.read()
        mutate(state)
        self.write(state)
        return state

    def _load_raw(self) -> Optional[dict]:
        if not self._file_path.exists():
            return None

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to parse state file: {e}",
                details={"file_path": str(self._file_path)},
            )
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read state file: {e}",
                details={"file_path": str(self._file_path)},
            )

        if not isinstance(data, dict):
            raise PersistenceError(
                code="parse_error",
                message="State file does not contain a JSON object",
                details={"file_path": str(self._file_path)},
            )
        return data

    def _dump_raw(self, data: dict) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._file_path.parent,
                prefix=f".{self._file_path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_path, self._file_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write state file: {e}",
                details={"file_path": str(self._file_path)},
            )

    def _log_failure(self, message: str, error: PersistenceError) -> None:
        if self._logger is not None:
            self._logger.log_error(
                self.COMPONENT,
                message,
                error=error,
                additional_data=error.details,
            )
