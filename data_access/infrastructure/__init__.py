"""
Infrastructure package for the data-access library.

Centralizes backend concerns: building PynamoDB models from entity
descriptors and applying table lifecycle defaults. Keep this layer focused on
the database SDK, decoupled from the service facade's contract.
"""

from data_access.infrastructure.model_factory import (
    build_model,
    build_models,
    sync_table,
    sync_tables,
    update_throughput,
    wait_for_active,
)

__all__ = [
    "build_model",
    "build_models",
    "sync_table",
    "sync_tables",
    "update_throughput",
    "wait_for_active",
]
