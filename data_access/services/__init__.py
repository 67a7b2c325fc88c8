"""
Services package for the data-access library.

Re-exports the service contract and the DynamoDB implementation so callers
can import from `data_access.services` directly.
"""

from data_access.services.abstract import (
    AbstractDataAccessService,
    Criteria,
    DataAccessService,
    Keys,
)
from data_access.services.dynamodb import DynamoDbService
from data_access.services.filters import OPERATORS, build_condition

__all__ = [
    # Abstracts
    "AbstractDataAccessService",
    "Criteria",
    "DataAccessService",
    "Keys",
    # Implementations
    "DynamoDbService",
    # Filters
    "OPERATORS",
    "build_condition",
]
