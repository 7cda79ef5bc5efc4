"""
Administrative API views.

Every endpoint here sits behind AdminAuthenticationMiddleware, which
rejects requests without a valid X-Admin-Password header.
"""

from dataclasses import asdict

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from access_keys.application.commands.create_key import CreateKeyCommand
from access_keys.application.commands.key_lifecycle import (
    DeleteKeyCommand,
    ReactivateKeyCommand,
    RevokeKeyCommand,
)
from access_keys.application.commands.maintenance import (
    ExpireOverdueKeysCommand,
    PruneLogsCommand,
)
from access_keys.application.commands.update_settings import UpdateSettingsCommand
from access_keys.application.handlers.admin_query_handlers import to_key_record_dto
from access_keys.application.queries.admin_queries import ListActivityQuery, ListKeysQuery
from access_keys.container import get_container
from api.v1.admin.serializers import (
    ActivityLogSerializer,
    CreateKeyRequestSerializer,
    ExpireKeysRequestSerializer,
    ExpireKeysResponseSerializer,
    KeyRecordSerializer,
    ListKeysQuerySerializer,
    PruneLogsRequestSerializer,
    PruneLogsResponseSerializer,
    UpdateSettingsRequestSerializer,
)
from api.v1.keys.serializers import PublicSettingsSerializer
from core.instrumentation import get_tracer

tracer = get_tracer(__name__)

ADMIN_HEADER = OpenApiParameter(
    name="X-Admin-Password",
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
    description="Admin credential",
)


def _record_response(record, status_code=status.HTTP_200_OK) -> Response:
    return Response(KeyRecordSerializer(asdict(to_key_record_dto(record))).data, status=status_code)


class KeysView(APIView):
    """View for listing and creating keys."""

    @extend_schema(
        operation_id="list_keys",
        summary="List Keys",
        description="List keys, newest first, optionally filtered by status or a search term.",
        tags=["Admin"],
        parameters=[
            ADMIN_HEADER,
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY),
        ],
        responses={200: KeyRecordSerializer(many=True), 401: {"description": "Unauthorized"}},
    )
    def get(self, request: Request) -> Response:
        """List keys."""
        serializer = ListKeysQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        query = ListKeysQuery(
            status=serializer.validated_data.get("status"),
            search=serializer.validated_data.get("search") or None,
        )
        keys = async_to_sync(get_container().list_keys.handle)(query)
        return Response(KeyRecordSerializer([asdict(k) for k in keys], many=True).data)

    @extend_schema(
        operation_id="create_key",
        summary="Create Key",
        description=(
            "Issue a new key. The price defaults to 3 per day of validity and is "
            "added to the store revenue."
        ),
        tags=["Admin"],
        parameters=[ADMIN_HEADER],
        request=CreateKeyRequestSerializer,
        responses={
            201: KeyRecordSerializer,
            400: {"description": "Bad Request"},
            401: {"description": "Unauthorized"},
        },
    )
    def post(self, request: Request) -> Response:
        """Create a key."""
        return async_to_sync(self._handle_create)(request)

    async def _handle_create(self, request: Request) -> Response:
        with tracer.start_as_current_span("create_key") as span:
            serializer = CreateKeyRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            command = CreateKeyCommand(**serializer.validated_data)
            record = await get_container().create_key.handle(command)
            span.set_attribute("key.id", record.id)
            return _record_response(record, status.HTTP_201_CREATED)


class KeyDetailView(APIView):
    """View for deleting a key."""

    @extend_schema(
        operation_id="delete_key",
        summary="Delete Key",
        tags=["Admin"],
        parameters=[ADMIN_HEADER],
        responses={204: None, 401: {"description": "Unauthorized"}, 404: {"description": "Not Found"}},
    )
    def delete(self, request: Request, key_id: str) -> Response:
        async_to_sync(get_container().delete_key.handle)(DeleteKeyCommand(key_id=key_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class RevokeKeyView(APIView):
    """View for revoking a key."""

    @extend_schema(
        operation_id="revoke_key",
        summary="Revoke Key",
        tags=["Admin"],
        parameters=[ADMIN_HEADER],
        request=None,
        responses={200: KeyRecordSerializer, 404: {"description": "Not Found"}},
    )
    def post(self, request: Request, key_id: str) -> Response:
        record = async_to_sync(get_container().revoke_key.handle)(RevokeKeyCommand(key_id=key_id))
        return _record_response(record)


class ReactivateKeyView(APIView):
    """View for reactivating a key."""

    @extend_schema(
        operation_id="reactivate_key",
        summary="Reactivate Key",
        tags=["Admin"],
        parameters=[ADMIN_HEADER],
        request=None,
        responses={200: KeyRecordSerializer, 404: {"description": "Not Found"}},
    )
    def post(self, request: Request, key_id: str) -> Response:
        record = async_to_sync(get_container().reactivate_key.handle)(
            ReactivateKeyCommand(key_id=key_id)
        )
        return _record_response(record)


class ExpireKeysView(APIView):
    """View for the on-demand expiry sweep."""

    @extend_schema(
        operation_id="expire_keys",
        summary="Expire Overdue Keys",
        tags=["Admin"],
        parameters=[ADMIN_HEADER],
        request=ExpireKeysRequestSerializer,
        responses={200: ExpireKeysResponseSerializer},
    )
    def post(self, request: Request) -> Response:
        serializer = ExpireKeysRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        dry_run = serializer.validated_data["dry_run"]
        expired = async_to_sync(get_container().expire_overdue.handle)(
            ExpireOverdueKeysCommand(dry_run=dry_run)
        )
        return Response({"expired": expired, "dry_run": dry_run})


class PruneLogsView(APIView):
    """View for removing old activity and usage entries."""

    @extend_schema(
        operation_id="prune_logs",
        summary="Prune Logs",
        tags=["Admin"],
        parameters=[ADMIN_HEADER],
        request=PruneLogsRequestSerializer,
        responses={200: PruneLogsResponseSerializer},
    )
    def post(self, request: Request) -> Response:
        serializer = PruneLogsRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        cleared = async_to_sync(get_container().prune_logs.handle)(
            PruneLogsCommand(older_than_days=serializer.validated_data["older_than_days"])
        )
        return Response({"cleared": cleared})


class ActivityView(APIView):
    """View for the activity log."""

    @extend_schema(
        operation_id="list_activity",
        summary="List Activity",
        description="Activity log entries, newest first.",
        tags=["Admin"],
        parameters=[
            ADMIN_HEADER,
            OpenApiParameter(name="limit", type=int, location=OpenApiParameter.QUERY),
        ],
        responses={200: ActivityLogSerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        limit = request.query_params.get("limit")
        if limit is not None and not limit.isdigit():
            return Response(
                {"error": {"limit": ["A non-negative integer is required."]}},
                status=status.HTTP_400_BAD_REQUEST,
            )

        entries = async_to_sync(get_container().list_activity.handle)(
            ListActivityQuery(limit=int(limit) if limit is not None else None)
        )
        return Response(ActivityLogSerializer([asdict(e) for e in entries], many=True).data)


class AdminSettingsView(APIView):
    """View for updating store settings."""

    @extend_schema(
        operation_id="update_settings",
        summary="Update Settings",
        description=(
            "Change redirect URL, auto-expiry, activity logging or the admin password. "
            "Omitted fields are left unchanged."
        ),
        tags=["Admin"],
        parameters=[ADMIN_HEADER],
        request=UpdateSettingsRequestSerializer,
        responses={200: PublicSettingsSerializer, 401: {"description": "Unauthorized"}},
    )
    def patch(self, request: Request) -> Response:
        serializer = UpdateSettingsRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        command = UpdateSettingsCommand(
            admin_password=getattr(request, "admin_password", ""),
            **serializer.validated_data,
        )
        updated = async_to_sync(get_container().update_settings.handle)(command)
        return Response(updated.public_view())
