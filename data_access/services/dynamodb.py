"""
DynamoDB implementation of the data-access service.

Table models are built from the configured entity descriptors while the
service is constructed, so the service is ready for use as soon as the
constructor returns. Every operation runs the blocking PynamoDB call in a
worker thread via ``asyncio.to_thread`` and is wrapped in a trace.

Example
-------
    service = DynamoDbService(load_service_config("config.json"))
    country = await service.create("countries", {"name": "Canada", "countryCode": "CAN"})
    await service.validate_duplicate("countries", ["name", "countryCode"], ["Canada", "CAN"])
"""

from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Type, Union

from pynamodb.expressions.condition import Condition
from pynamodb.models import Model

from data_access.config import ServiceConfig, Settings, get_settings
from data_access.domain.errors import BadRequestError, NotFoundError, UnknownTableError
from data_access.infrastructure.model_factory import build_models, sync_tables
from data_access.services.abstract import AbstractDataAccessService, Criteria, Keys
from data_access.services.filters import build_condition
from data_access.utils.logging import get_logger
from data_access.utils.tracing import traced

log = get_logger(__name__)


def _scan(model: Type[Model], condition: Optional[Condition]) -> List[Model]:
    return list(model.scan(filter_condition=condition))


def _first_by_hash_key(model: Type[Model], record_id: Any) -> Optional[Model]:
    return next(iter(model.query(record_id, limit=1)), None)


class DynamoDbService(AbstractDataAccessService):
    """
    CRUD facade over the tables described by a ``ServiceConfig``.

    Parameters
    ----------
    config : ServiceConfig or mapping
        Service configuration; a plain mapping is validated into a
        ``ServiceConfig`` first.
    settings : Settings, optional
        Observability metadata attached to traces. Defaults to ``get_settings()``.
    """

    name: str = "dynamodb"

    def __init__(
        self,
        config: Union[ServiceConfig, Mapping[str, Any]],
        settings: Optional[Settings] = None,
    ) -> None:
        if not isinstance(config, ServiceConfig):
            config = ServiceConfig.model_validate(config)
        settings = settings or get_settings()

        self.config = config
        self.trace_tags = {
            "service": settings.service_name,
            "version": settings.service_version,
        }
        if settings.exporter_url:
            self.trace_tags["exporter"] = settings.exporter_url
        self._models: Mapping[str, Type[Model]] = MappingProxyType(build_models(config))
        log.info(
            "DynamoDB service initialized with %d table(s)",
            len(self._models),
            extra={"tables": sorted(self._models), "local": config.is_local_db},
        )

        if config.backend_defaults.enabled:
            self.sync_tables()

    @property
    def tables(self) -> Mapping[str, Type[Model]]:
        """Read-only mapping of table name to model."""
        return self._models

    def model(self, table_name: str) -> Type[Model]:
        """
        Resolve the model bound to ``table_name``.

        Raises
        ------
        UnknownTableError
            If the table is not configured.
        """
        try:
            return self._models[table_name]
        except KeyError:
            raise UnknownTableError(f"{table_name} is not a configured table") from None

    def sync_tables(self) -> None:
        """Apply the configured backend defaults (create, update, wait for ACTIVE)."""
        sync_tables(self._models, self.config.entities, self.config.backend_defaults)

    @traced()
    async def search(self, table_name: str, criteria: Optional[Criteria] = None) -> List[Model]:
        """
        Scan ``table_name`` for records matching ``criteria``.

        Parameters
        ----------
        table_name : str
            The table to scan.
        criteria : mapping, optional
            Field name to value or to ``{operator: operand}``; see
            ``data_access.services.filters``.

        Returns
        -------
        list
            Matching records; empty when nothing matches.
        """
        model = self.model(table_name)
        condition = build_condition(model, criteria)
        return await asyncio.to_thread(_scan, model, condition)

    @traced()
    async def get_by_id(self, table_name: str, record_id: Any) -> Model:
        """
        Get a record by its hash key.

        Raises
        ------
        NotFoundError
            If no record with ``record_id`` exists.
        """
        model = self.model(table_name)
        record = await asyncio.to_thread(_first_by_hash_key, model, record_id)
        if record is None:
            raise NotFoundError(f"{table_name} with id: {record_id} doesn't exist")
        return record

    @traced()
    async def validate_duplicate(self, table_name: str, keys: Keys, values: Any) -> None:
        await super().validate_duplicate(table_name, keys, values)

    @traced()
    async def create(self, table_name: str, data: Mapping[str, Any]) -> Model:
        """Create a record in ``table_name`` from ``data`` and return it once saved."""
        model = self.model(table_name)
        record = model(**data)
        await asyncio.to_thread(record.save)
        return record

    @traced()
    async def update(self, record: Model, data: Mapping[str, Any]) -> Model:
        """
        Overwrite the fields in ``data`` on ``record`` and save it.

        Raises
        ------
        BadRequestError
            If ``data`` names a field the record's table does not define.
        """
        attributes = record.get_attributes()
        unknown = sorted(key for key in data if key not in attributes)
        if unknown:
            raise BadRequestError(f"{record.Meta.table_name} has no field(s) {unknown}")

        for key, value in data.items():
            setattr(record, key, value)
        await asyncio.to_thread(record.save)
        return record

    @traced("remove")
    async def delete(self, record: Model) -> Model:
        """Delete ``record`` and return it."""
        await asyncio.to_thread(record.delete)
        return record


__all__ = ["DynamoDbService"]
