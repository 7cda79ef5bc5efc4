"""
Administrative queries.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class GetStatsQuery:
    """Query for store-wide statistics."""


@dataclass
class ListKeysQuery:
    """
    Query to list keys.

    ``status`` filters on stored status; ``search`` matches code,
    customer name or customer email (case-insensitive).
    """

    status: Optional[str] = None
    search: Optional[str] = None


@dataclass
class ListActivityQuery:
    """Query for the activity log, newest first."""

    limit: Optional[int] = None
