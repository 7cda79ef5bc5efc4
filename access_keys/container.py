"""
Composition root for the key service.

Builds the store, backend and every service/handler from the
``GLOBAL_KEYS`` settings dict. Views and management commands resolve
their collaborators from the container attached to the app config.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from django.apps import apps

from access_keys.application.handlers.admin_handlers import (
    CreateKeyHandler,
    DeleteKeyHandler,
    ExpireOverdueKeysHandler,
    PruneLogsHandler,
    ReactivateKeyHandler,
    RevokeKeyHandler,
    UpdateSettingsHandler,
)
from access_keys.application.handlers.admin_query_handlers import (
    GetStatsHandler,
    ListActivityHandler,
    ListKeysHandler,
)
from access_keys.application.services.activity_recorder import ActivityRecorder
from access_keys.application.services.validation_service import ValidationService
from access_keys.domain.store_settings import (
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_REDIRECT_URL,
    StoreSettings,
)
from access_keys.infrastructure.backends import FileDocumentBackend, InMemoryDocumentBackend
from access_keys.infrastructure.repositories.json_key_store import (
    ACTIVITY_LOG_LIMIT,
    JsonDocumentKeyStore,
)
from access_keys.ports.document_backend import DocumentBackend

logger = logging.getLogger(__name__)


@dataclass
class KeyServiceContainer:
    """Wired collaborators of the key service."""

    backend: DocumentBackend
    store: JsonDocumentKeyStore
    validation: ValidationService
    create_key: CreateKeyHandler
    revoke_key: RevokeKeyHandler
    reactivate_key: ReactivateKeyHandler
    delete_key: DeleteKeyHandler
    update_settings: UpdateSettingsHandler
    expire_overdue: ExpireOverdueKeysHandler
    prune_logs: PruneLogsHandler
    get_stats: GetStatsHandler
    list_keys: ListKeysHandler
    list_activity: ListActivityHandler
    backup_dir: Optional[str] = None
    backup_keep: int = 5

    def close(self) -> None:
        self.store.close()


def build_container(
    config: Mapping[str, Any], backend: Optional[DocumentBackend] = None
) -> KeyServiceContainer:
    """
    Build the container from a ``GLOBAL_KEYS`` style mapping.

    An empty ``DATABASE_PATH`` selects the in-memory backend.

    Args:
        config: Key service configuration
        backend: Optional backend overriding ``DATABASE_PATH``

    Returns:
        KeyServiceContainer
    """
    if backend is None:
        path = config.get("DATABASE_PATH")
        backend = FileDocumentBackend(path) if path else InMemoryDocumentBackend()

    store = JsonDocumentKeyStore(
        backend,
        default_settings=StoreSettings(
            redirect_url=config.get("DEFAULT_REDIRECT_URL") or DEFAULT_REDIRECT_URL,
            admin_password=config.get("DEFAULT_ADMIN_PASSWORD") or DEFAULT_ADMIN_PASSWORD,
        ),
        activity_limit=int(config.get("ACTIVITY_LOG_LIMIT") or ACTIVITY_LOG_LIMIT),
    )
    activity = ActivityRecorder(store)

    logger.info("Key service wired with %s", type(backend).__name__)
    return KeyServiceContainer(
        backend=backend,
        store=store,
        validation=ValidationService(store, activity=activity),
        create_key=CreateKeyHandler(store, activity=activity),
        revoke_key=RevokeKeyHandler(store, activity=activity),
        reactivate_key=ReactivateKeyHandler(store, activity=activity),
        delete_key=DeleteKeyHandler(store, activity=activity),
        update_settings=UpdateSettingsHandler(store, activity=activity),
        expire_overdue=ExpireOverdueKeysHandler(store, activity=activity),
        prune_logs=PruneLogsHandler(store, activity=activity),
        get_stats=GetStatsHandler(store),
        list_keys=ListKeysHandler(store),
        list_activity=ListActivityHandler(store),
        backup_dir=config.get("BACKUP_DIR"),
        backup_keep=int(config.get("BACKUP_KEEP") or 5),
    )


def get_container() -> KeyServiceContainer:
    """Container attached to the access_keys app config."""
    return apps.get_app_config("access_keys").container
