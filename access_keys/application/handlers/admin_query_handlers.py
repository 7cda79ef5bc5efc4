"""
Administrative query handlers.
"""
from typing import List

from access_keys.application.dto.key_dto import ActivityLogDTO, KeyRecordDTO, StatsDTO
from access_keys.application.queries.admin_queries import (
    GetStatsQuery,
    ListActivityQuery,
    ListKeysQuery,
)
from access_keys.domain.key_record import KeyRecord
from access_keys.domain.services import KeyStatistics
from access_keys.ports.key_store import KeyStore


def to_key_record_dto(record: KeyRecord) -> KeyRecordDTO:
    """Convert a KeyRecord to its listing DTO."""
    return KeyRecordDTO(
        id=record.id,
        key=record.code,
        status=record.status.value,
        created_at=record.created_at,
        expires_at=record.expires_at,
        duration_days=record.duration_days,
        uses_remaining=record.uses_remaining,
        total_uses=record.total_uses,
        price=record.price,
        customer_name=record.customer_name,
        customer_email=record.customer_email,
        notes=record.notes,
        usage_count=len(record.usage_log),
    )


class GetStatsHandler:
    """Handler for GetStatsQuery."""

    def __init__(self, store: KeyStore):
        self.store = store

    async def handle(self, query: GetStatsQuery) -> StatsDTO:
        stats = KeyStatistics.compute(await self.store.list_all(), await self.store.revenue())
        return StatsDTO(
            total_keys=stats.total_keys,
            active_keys=stats.active_keys,
            expired_keys=stats.expired_keys,
            total_revenue=stats.total_revenue,
            total_uses=stats.total_uses,
        )


class ListKeysHandler:
    """Handler for ListKeysQuery."""

    def __init__(self, store: KeyStore):
        self.store = store

    async def handle(self, query: ListKeysQuery) -> List[KeyRecordDTO]:
        """
        Handle list keys query.

        Returns:
            Matching keys, newest first
        """
        records = await self.store.list_all()
        if query.status:
            records = [r for r in records if r.status.value == query.status]
        if query.search:
            needle = query.search.lower()
            records = [
                r
                for r in records
                if needle in r.code.lower()
                or needle in r.customer_name.lower()
                or needle in r.customer_email.lower()
            ]
        return [to_key_record_dto(r) for r in records]


class ListActivityHandler:
    """Handler for ListActivityQuery."""

    def __init__(self, store: KeyStore):
        self.store = store

    async def handle(self, query: ListActivityQuery) -> List[ActivityLogDTO]:
        entries = list(reversed(await self.store.list_activity()))
        if query.limit is not None:
            entries = entries[: query.limit]
        return [ActivityLogDTO(e.timestamp, e.message, e.type.value) for e in entries]
