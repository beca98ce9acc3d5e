# File path: modules/backend/__init__.py

from .client import (  # noqa: F401
    ROLE_ANON,
    ROLE_SERVICE,
    SERVICE_ROLE_TABLES,
    SERVICE_ROLE_READ_TABLES,
    BackendError,
    ConfigError,
    PermissionDeniedError,
    TableClient,
    TableMissingError,
    handle_db_error,
    parse_datetime,
    public_client,
    service_client,
)
