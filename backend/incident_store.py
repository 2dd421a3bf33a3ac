"""Flare Backend — Incident snapshot storage

The whole incident collection is written as one JSON snapshot under a single
key. There are no partial or merge writes: every save replaces the previous
snapshot, and a failed save leaves the previous snapshot untouched.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from config import DATA_DIR, STORE_KEY
from models import Incident

logger = logging.getLogger("flare.store")

_collection_adapter = TypeAdapter(list[Incident])


class IncidentStore:
    """Snapshot persistence for the incident collection."""

    def __init__(self, data_dir: Path | str = DATA_DIR, key: str = STORE_KEY):
        self._dir = Path(data_dir)
        self._key = key
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._dir / f"{self._key}.json"

    def save(self, incidents: list[Incident]) -> None:
        """Overwrite the snapshot with the full collection. Never raises."""
        try:
            payload = _collection_adapter.dump_json(list(incidents))
        except Exception as e:
            logger.warning(f"Failed to encode {len(incidents)} incidents (snapshot unchanged): {e}")
            return

        with self._lock:
            tmp_name = None
            try:
                self._dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=f".{self._key}.", suffix=".tmp", dir=self._dir)
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
                tmp_name = None
                logger.info(f"Saved {len(incidents)} incidents to {self.path}")
            except OSError as e:
                logger.warning(f"Failed to write incident snapshot (snapshot unchanged): {e}")
            finally:
                if tmp_name is not None:
                    try:
                        os.unlink(tmp_name)
                    except OSError:
                        pass

    def load(self) -> list[Incident]:
        """Read the snapshot. Missing or malformed data yields an empty list."""
        with self._lock:
            try:
                raw = self.path.read_bytes()
            except FileNotFoundError:
                return []
            except OSError as e:
                logger.warning(f"Failed to read incident snapshot: {e}")
                return []

        try:
            return _collection_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Corrupt incident snapshot at {self.path}, starting empty: {e.error_count()} errors")
            return []

    def clear(self) -> None:
        """Bulk-remove every stored incident."""
        with self._lock:
            try:
                self.path.unlink()
                logger.info(f"Cleared incident snapshot {self.path}")
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Failed to clear incident snapshot: {e}")
