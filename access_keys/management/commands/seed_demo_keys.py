"""
Django management command to seed demo keys.

Creates the demo and test keys used by client fallbacks and manual
testing. Existing codes are left untouched.
"""

import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from access_keys.application.services.activity_recorder import utc_now
from access_keys.container import get_container
from access_keys.domain.key_record import KeyRecord

logger = logging.getLogger(__name__)

DEMO_KEYS = [
    {"code": "DEMO-ABCD-1234-EFGH", "duration_days": 30, "uses_limit": 10000,
     "customer_name": "Demo User", "notes": "Demo key for testing"},
    {"code": "TEST-WXYZ-5678-IJKL", "duration_days": 7, "uses_limit": 5000,
     "customer_name": "Test User", "notes": "Test key"},
]


class Command(BaseCommand):
    """Command to seed demo keys."""

    help = "Create demo keys for development and testing"

    def handle(self, *args, **options):
        async_to_sync(self._seed)()

    async def _seed(self):
        store = get_container().store
        created = 0
        for demo in DEMO_KEYS:
            async with store.lock(demo["code"]):
                if await store.get(demo["code"]) is not None:
                    self.stdout.write(f"  - {demo['code']} already exists")
                    continue
                await store.put(KeyRecord.create(now=utc_now(), **demo))
                created += 1
                self.stdout.write(f"  - Created {demo['code']}")
        logger.info("Seeded %d demo keys", created)
        self.stdout.write(self.style.SUCCESS(f"Created {created} demo key(s)"))
