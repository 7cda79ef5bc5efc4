"""
Credential cache for the client agent.

Stores the single access key the client is using between runs.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class CredentialCache(ABC):
    """Port for the cached access key."""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Return the cached key code, or None."""
        pass

    @abstractmethod
    def save(self, code: str) -> None:
        """Cache a key code, replacing any previous one."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget the cached key code."""
        pass


class MemoryCredentialCache(CredentialCache):
    """Process-local cache (tests and short-lived clients)."""

    def __init__(self, code: Optional[str] = None):
        self._code = code

    def load(self) -> Optional[str]:
        return self._code

    def save(self, code: str) -> None:
        self._code = code

    def clear(self) -> None:
        self._code = None


class FileCredentialCache(CredentialCache):
    """Cache the key code in a small text file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        code = self.path.read_text(encoding="utf-8").strip()
        return code or None

    def save(self, code: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(code, encoding="utf-8")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("Removed cached key at %s", self.path)
