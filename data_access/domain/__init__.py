"""
Domain package for the data-access library.

Exports entity descriptor models and the error taxonomy. Keep this package
free of backend I/O; it only defines and validates data.
"""

from data_access.domain.entities import (
    EntityDescriptor,
    EntityOptions,
    FieldSpec,
    FieldType,
    Throughput,
)
from data_access.domain.errors import (
    BadRequestError,
    ConflictError,
    DataAccessError,
    NotFoundError,
    TableNotReadyError,
    UnknownTableError,
)

__all__ = [
    # Descriptors
    "EntityDescriptor",
    "EntityOptions",
    "FieldSpec",
    "FieldType",
    "Throughput",
    # Errors
    "BadRequestError",
    "ConflictError",
    "DataAccessError",
    "NotFoundError",
    "TableNotReadyError",
    "UnknownTableError",
]
