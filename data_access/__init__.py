"""
data-access-library - a configuration-driven CRUD facade over DynamoDB.

Tables are declared as entity descriptors; the service turns each one into a
PynamoDB model and exposes a uniform async surface over them:

- search / get_by_id for reads
- validate_duplicate for uniqueness checks built on search
- create / update / delete for writes

Connection handling, request retries and consistency stay with PynamoDB and
DynamoDB; this package only configures them.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from data_access.config import ServiceConfig, Settings, get_settings, load_service_config
from data_access.domain.entities import EntityDescriptor, EntityOptions, FieldSpec, Throughput
from data_access.domain.errors import (
    BadRequestError,
    ConflictError,
    DataAccessError,
    NotFoundError,
    TableNotReadyError,
    UnknownTableError,
)
from data_access.services.abstract import AbstractDataAccessService, DataAccessService
from data_access.services.dynamodb import DynamoDbService
from data_access.utils.logging import configure_logging, get_logger
from data_access.utils.tracing import TraceStats, trace_block, traced

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "ServiceConfig",
    "Settings",
    "get_settings",
    "load_service_config",
    # Descriptors
    "EntityDescriptor",
    "EntityOptions",
    "FieldSpec",
    "Throughput",
    # Errors
    "BadRequestError",
    "ConflictError",
    "DataAccessError",
    "NotFoundError",
    "TableNotReadyError",
    "UnknownTableError",
    # Services
    "AbstractDataAccessService",
    "DataAccessService",
    "DynamoDbService",
    # Logging
    "configure_logging",
    "get_logger",
    # Tracing
    "TraceStats",
    "trace_block",
    "traced",
]
