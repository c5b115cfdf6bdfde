"""
JSON File Storage Implementation

DESIGN DECISION: Each slot is one file, ``<directory>/<slot>.json``,
holding exactly the text the ledger store wrote. This mirrors a browser
key-value store: one named slot, one serialized document.

TRADEOFFS:
- The whole snapshot is rewritten on every mutation (fine for one person's ledger)
- No locking; a single process owns the directory
- Writes go through a temp file and an atomic rename, so a crash never
  leaves a half-written snapshot behind
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from household_ledger.services.storage.interface import (
    PersistenceError,
    SnapshotStorageInterface,
    StorageError,
)


class JsonFileStorage(SnapshotStorageInterface):
    """File-per-slot snapshot storage."""

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, slot: str) -> Path:
        """File a slot is stored in."""
        if not slot or "/" in slot or "\\" in slot or slot.startswith("."):
            raise StorageError(f"Invalid slot name: {slot!r}")
        return self._directory / f"{slot}.json"

    def read(self, slot: str) -> Optional[str]:
        path = self.path_for(slot)
        try:
            # Undecodable bytes become U+FFFD; the store then sees a malformed snapshot
            return path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read slot {slot}: {e}") from e

    def write(self, slot: str, payload: str) -> None:
        path = self.path_for(slot)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{slot}.",
                suffix=".tmp",
                dir=self._directory,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to write slot {slot}: {e}") from e

    def delete(self, slot: str) -> bool:
        path = self.path_for(slot)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete slot {slot}: {e}") from e
