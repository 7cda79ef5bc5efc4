"""
Document backend implementations.

Provides a JSON file backend and an in-memory backend for the
DocumentBackend port.
"""
import contextlib
import copy
import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from access_keys.ports.document_backend import DocumentBackend

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "global_keys_backup_"


class FileDocumentBackend(DocumentBackend):
    """
    JSON file backend.

    Writes go to a temporary file in the same directory which then
    replaces the target, so readers never observe a half-written file.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the backend.

        Args:
            path: Location of the JSON document
        """
        self.path = Path(path)
        self._write_lock = threading.Lock()

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, document: Dict[str, Any]) -> None:
        payload = json.dumps(document, indent=2)
        with self._write_lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        logger.debug("Saved key database to %s", self.path)

    def backup(self, directory: Union[str, Path], keep: int = 5) -> Path:
        """
        Copy the current document into a timestamped backup file.

        Only the newest ``keep`` backups are retained.

        Args:
            directory: Backup directory
            keep: Number of backups to retain

        Returns:
            Path of the new backup
        """
        document = self.load()
        if document is None:
            raise FileNotFoundError(f"No key database at {self.path}")

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        target = directory / f"{BACKUP_PREFIX}{timestamp}.json"
        target.write_text(json.dumps(document), encoding="utf-8")

        for stale in self.list_backups(directory)[keep:]:
            stale.unlink()
            logger.info("Removed old backup %s", stale.name)
        return target

    @staticmethod
    def list_backups(directory: Union[str, Path]) -> List[Path]:
        """Backups in ``directory``, newest first."""
        return sorted(Path(directory).glob(f"{BACKUP_PREFIX}*.json"), reverse=True)


class InMemoryDocumentBackend(DocumentBackend):
    """In-memory backend (tests and client-side mirrors)."""

    def __init__(self, document: Optional[Dict[str, Any]] = None):
        self._document = copy.deepcopy(document)
        self.save_count = 0

    def load(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._document)

    def save(self, document: Dict[str, Any]) -> None:
        # Serializing catches values the file backend would reject.
        self._document = json.loads(json.dumps(document))
        self.save_count += 1
