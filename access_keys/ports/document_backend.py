"""
Document backend port (interface).

The key store keeps all of its state in a single JSON document.
A backend only knows how to load and save that document.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class DocumentBackend(ABC):
    """
    Abstract key-value persistence for the store document.

    Implementations may be files, browser-like local storage or a
    database row. Failures are raised as ``OSError`` or ``ValueError``
    and translated by the store.
    """

    @abstractmethod
    def load(self) -> Optional[Dict[str, Any]]:
        """
        Load the document.

        Returns:
            Parsed document or None if nothing was saved yet
        """
        pass

    @abstractmethod
    def save(self, document: Dict[str, Any]) -> None:
        """
        Persist the document, replacing the previous one.

        Args:
            document: JSON-serializable document
        """
        pass
