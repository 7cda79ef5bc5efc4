"""
Key lifecycle commands.

Commands to revoke, reactivate and delete a key by its identifier.
"""
from dataclasses import dataclass


@dataclass
class RevokeKeyCommand:
    """Command to revoke a key."""

    key_id: str


@dataclass
class ReactivateKeyCommand:
    """Command to reactivate a revoked or expired key."""

    key_id: str


@dataclass
class DeleteKeyCommand:
    """Command to delete a key."""

    key_id: str
