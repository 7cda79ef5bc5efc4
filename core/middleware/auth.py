"""
Admin authentication middleware.

This middleware checks the admin credential for the administrative
key APIs.
"""

import logging
from typing import Optional

from asgiref.sync import async_to_sync
from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

from access_keys.container import get_container
from access_keys.domain.services import AdminAuthenticator
from core.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class AdminAuthenticationMiddleware(MiddlewareMixin):
    """
    Middleware for admin authentication.

    This middleware:
    1. Leaves every path outside the admin prefix alone
    2. Compares the X-Admin-Password header with the stored credential
    3. Returns 401 Unauthorized if authentication fails
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and validate the admin credential.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if authentication fails, None otherwise
        """
        if not request.path.startswith(settings.ADMIN_PATH_PREFIX):
            return None

        password = request.headers.get(settings.ADMIN_PASSWORD_HEADER)
        if not password:
            return JsonResponse(
                {
                    "error": {
                        "code": "UNAUTHORIZED",
                        "message": f"Missing admin credential. Provide {settings.ADMIN_PASSWORD_HEADER} header.",
                    }
                },
                status=401,
            )

        try:
            store_settings = async_to_sync(get_container().store.settings)()
        except StoreUnavailableError as e:
            logger.error("Cannot authenticate admin request: %s", e)
            return JsonResponse(
                {"error": {"code": e.code, "message": e.message}},
                status=503,
            )

        if not AdminAuthenticator.is_valid(store_settings, password):
            logger.warning("Invalid admin credential attempted on %s", request.path)
            return JsonResponse(
                {"error": {"code": "UNAUTHORIZED", "message": "Invalid admin credential"}},
                status=401,
            )

        request.admin_password = password  # type: ignore
        return None
