"""
Core views for health checks and system status.
"""

import logging

from asgiref.sync import async_to_sync
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from access_keys.container import get_container
from core.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class HealthView(View):
    """Health check endpoint."""

    def get(self, _request):
        """Return service health status."""
        return JsonResponse({"status": "healthy", "service": "global-key-service"})


@method_decorator(csrf_exempt, name="dispatch")
class ReadyView(View):
    """Readiness check endpoint."""

    def get(self, _request):
        """Check if service is ready to accept traffic."""
        checks = {"key_store": self._check_store()}

        all_healthy = all(checks.values())
        return JsonResponse(
            {
                "status": "ready" if all_healthy else "not_ready",
                "checks": checks,
            },
            status=200 if all_healthy else 503,
        )

    def _check_store(self) -> bool:
        """Check that the key store document can be read."""
        try:
            async_to_sync(get_container().store.settings)()
            return True
        except StoreUnavailableError as e:
            logger.warning("Key store not ready: %s", e)
            return False
