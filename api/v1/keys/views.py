"""
Public key API views.

These endpoints are used by client applications to:
- Validate a key (consumes one use)
- Check key status (consumes nothing)
- Read client-visible settings and store statistics
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from access_keys.application.dto.key_dto import ValidationResult
from access_keys.application.queries.admin_queries import GetStatsQuery
from access_keys.container import get_container
from api.v1.keys.serializers import (
    KeyRequestSerializer,
    PublicSettingsSerializer,
    StatsSerializer,
    StatusResponseSerializer,
    ValidationResponseSerializer,
)
from core.domain.exceptions import StoreUnavailableError
from core.domain.value_objects import KeyCode, ValidationStatus
from core.instrumentation import Status, StatusCode, get_tracer

tracer = get_tracer(__name__)


def _client_details(request: Request):
    return (
        request.META.get("REMOTE_ADDR") or "unknown",
        request.META.get("HTTP_USER_AGENT") or "unknown",
    )


class ValidateKeyView(APIView):
    """View for consuming key validation."""

    @extend_schema(
        operation_id="validate_key",
        summary="Validate Key",
        description=(
            "Validate an access key and consume one use on success. Every evaluated "
            "outcome is answered with HTTP 200; check the `valid` and `status` fields."
        ),
        tags=["Keys"],
        request=KeyRequestSerializer,
        responses={
            200: ValidationResponseSerializer,
            400: {"description": "Bad Request"},
            503: ValidationResponseSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Validate a key."""
        return async_to_sync(self._handle_validate)(request)

    async def _handle_validate(self, request: Request) -> Response:
        """Async handler for validate."""
        with tracer.start_as_current_span("api_validate_key") as span:
            serializer = KeyRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            code = KeyCode.normalize(serializer.validated_data["key"])
            client_address, client_agent = _client_details(request)

            try:
                result = await get_container().validation.validate(
                    code, client_address=client_address, client_agent=client_agent
                )
            except StoreUnavailableError as e:
                span.set_status(Status(StatusCode.ERROR, e.message))
                result = ValidationResult(
                    valid=False, message=e.message, status=ValidationStatus.ERROR
                )
                return Response(result.to_dict(), status=status.HTTP_503_SERVICE_UNAVAILABLE)

            span.set_attribute("key.status", result.status.value)
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class KeyStatusView(APIView):
    """View for non-consuming status checks."""

    @extend_schema(
        operation_id="key_status",
        summary="Key Status",
        description="Report a key's stored status and remaining allowance without consuming a use.",
        tags=["Keys"],
        request=KeyRequestSerializer,
        responses={
            200: StatusResponseSerializer,
            400: {"description": "Bad Request"},
            503: {"description": "Key store unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        """Check key status."""
        return async_to_sync(self._handle_status)(request)

    async def _handle_status(self, request: Request) -> Response:
        serializer = KeyRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        code = KeyCode.normalize(serializer.validated_data["key"])
        result = await get_container().validation.check_status(code)
        return Response(result.to_dict(), status=status.HTTP_200_OK)


class PublicSettingsView(APIView):
    """View for client-visible settings."""

    @extend_schema(
        operation_id="get_settings",
        summary="Get Settings",
        tags=["Keys"],
        responses={200: PublicSettingsSerializer},
    )
    def get(self, request: Request) -> Response:
        settings = async_to_sync(get_container().store.settings)()
        return Response(settings.public_view())


class StatsView(APIView):
    """View for store statistics."""

    @extend_schema(
        operation_id="get_stats",
        summary="Get Stats",
        description="Key counts by stored status, total revenue and total consumed uses.",
        tags=["Keys"],
        responses={200: StatsSerializer},
    )
    def get(self, request: Request) -> Response:
        stats = async_to_sync(get_container().get_stats.handle)(GetStatsQuery())
        return Response(StatsSerializer(stats).data)
