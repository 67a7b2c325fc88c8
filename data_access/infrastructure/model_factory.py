"""
PynamoDB model factory and table lifecycle helpers.

Turns validated entity descriptors into PynamoDB ``Model`` subclasses bound to
one table each, and applies the backend defaults (create missing tables,
update provisioned throughput, wait for ACTIVE status).

Connection management, request retries and backoff stay inside
PynamoDB/botocore; the only polling done here is the ACTIVE-status wait,
implemented with tenacity.
"""

from __future__ import annotations

import copy
import functools
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Type

from pynamodb.attributes import (
    Attribute,
    BinaryAttribute,
    BooleanAttribute,
    JSONAttribute,
    ListAttribute,
    MapAttribute,
    NumberAttribute,
    NumberSetAttribute,
    UnicodeAttribute,
    UnicodeSetAttribute,
    UTCDateTimeAttribute,
)
from pynamodb.connection import TableConnection
from pynamodb.models import Model
from tenacity import retry, retry_if_exception_type, stop_after_delay, wait_exponential

from data_access.config import AwsConfig, BackendDefaults, ServiceConfig
from data_access.domain.entities import EntityDescriptor, FieldSpec, FieldType
from data_access.domain.errors import TableNotReadyError
from data_access.utils.logging import get_logger

log = get_logger(__name__)

_ATTRIBUTE_TYPES: Dict[FieldType, Type[Attribute]] = {
    FieldType.STRING: UnicodeAttribute,
    FieldType.NUMBER: NumberAttribute,
    FieldType.BOOLEAN: BooleanAttribute,
    FieldType.BINARY: BinaryAttribute,
    FieldType.DATETIME: UTCDateTimeAttribute,
    FieldType.MAP: MapAttribute,
    FieldType.LIST: ListAttribute,
    FieldType.JSON: JSONAttribute,
    FieldType.STRING_SET: UnicodeSetAttribute,
    FieldType.NUMBER_SET: NumberSetAttribute,
}

_DEFAULT_FACTORIES: Dict[str, Callable[[], Any]] = {
    "uuid4": lambda: str(uuid.uuid4()),
    "utcnow": lambda: datetime.now(timezone.utc),
}


def _build_attribute(spec: FieldSpec) -> Attribute:
    """Instantiate the PynamoDB attribute for one field spec."""
    kwargs: Dict[str, Any] = {
        "hash_key": spec.hash_key,
        "range_key": spec.range_key,
        # Key attributes can never be null.
        "null": not (spec.required or spec.is_key),
    }
    if spec.attr_name:
        kwargs["attr_name"] = spec.attr_name
    if spec.default_factory is not None:
        kwargs["default_for_new"] = _DEFAULT_FACTORIES[spec.default_factory]
    elif isinstance(spec.default, (list, dict, set)):
        # PynamoDB only accepts immutable defaults; each record gets its own copy.
        kwargs["default"] = functools.partial(copy.deepcopy, spec.default)
    elif spec.default is not None:
        kwargs["default"] = spec.default
    return _ATTRIBUTE_TYPES[spec.type](**kwargs)


def _meta_attributes(
    table_name: str, descriptor: EntityDescriptor, aws: AwsConfig, host: Optional[str]
) -> Dict[str, Any]:
    """Compose the ``Meta`` namespace; unset values fall back to PynamoDB settings."""
    options = descriptor.options
    meta: Dict[str, Any] = {
        "table_name": table_name,
        "region": aws.region,
        "host": host,
        "aws_access_key_id": aws.access_key_id,
        "aws_secret_access_key": aws.secret_access_key,
        "aws_session_token": aws.session_token,
        "connect_timeout_seconds": aws.connect_timeout_seconds,
        "read_timeout_seconds": aws.read_timeout_seconds,
        "max_retry_attempts": aws.max_retry_attempts,
        "billing_mode": options.effective_billing_mode,
    }
    if options.throughput is not None:
        meta["read_capacity_units"] = options.throughput.read
        meta["write_capacity_units"] = options.throughput.write
    return {key: value for key, value in meta.items() if value is not None}


def _class_name(table_name: str) -> str:
    parts = [part for part in table_name.replace("-", "_").split("_") if part]
    return "".join(part[:1].upper() + part[1:] for part in parts) + "Model"


def build_model(
    table_name: str,
    descriptor: EntityDescriptor,
    aws: Optional[AwsConfig] = None,
    host: Optional[str] = None,
) -> Type[Model]:
    """
    Build a PynamoDB model class bound to ``table_name``.

    Parameters
    ----------
    table_name : str
        Logical and physical table name.
    descriptor : EntityDescriptor
        Validated field/option definition.
    aws : AwsConfig, optional
        Credentials, region and client knobs.
    host : str, optional
        Endpoint override (local database).

    Raises
    ------
    ValueError
        If a field name shadows an attribute of ``pynamodb.models.Model``.
    """
    aws = aws or AwsConfig()
    attributes: Dict[str, Any] = {}
    for name, spec in descriptor.fields.items():
        if name.startswith("_") or hasattr(Model, name):
            raise ValueError(f"{table_name}: field name {name!r} is reserved")
        attributes[name] = _build_attribute(spec)

    meta = type("Meta", (), _meta_attributes(table_name, descriptor, aws, host))
    model = type(_class_name(table_name), (Model,), {"Meta": meta, **attributes})
    log.debug(
        "Built model %s for table %s",
        model.__name__,
        table_name,
        extra={"table": table_name, "fields": sorted(descriptor.fields)},
    )
    return model


def build_models(config: ServiceConfig) -> Dict[str, Type[Model]]:
    """Build one model per configured entity, keyed by table name."""
    return {
        table_name: build_model(table_name, descriptor, config.aws_config, config.host)
        for table_name, descriptor in config.entities.items()
    }


def _table_connection(model: Type[Model]) -> TableConnection:
    meta = model.Meta
    return TableConnection(
        meta.table_name,
        region=getattr(meta, "region", None),
        host=getattr(meta, "host", None),
        aws_access_key_id=getattr(meta, "aws_access_key_id", None),
        aws_secret_access_key=getattr(meta, "aws_secret_access_key", None),
        aws_session_token=getattr(meta, "aws_session_token", None),
    )


def update_throughput(model: Type[Model], descriptor: EntityDescriptor) -> bool:
    """
    Align a provisioned table's capacity with its descriptor.

    Returns
    -------
    bool
        True if an update was issued.
    """
    throughput = descriptor.options.throughput
    if throughput is None or descriptor.options.effective_billing_mode != "PROVISIONED":
        return False

    current = model.describe_table().get("ProvisionedThroughput", {})
    if (
        current.get("ReadCapacityUnits") == throughput.read
        and current.get("WriteCapacityUnits") == throughput.write
    ):
        return False

    log.info(
        "Updating throughput of %s to read=%s write=%s",
        model.Meta.table_name,
        throughput.read,
        throughput.write,
    )
    _table_connection(model).update_table(
        read_capacity_units=throughput.read,
        write_capacity_units=throughput.write,
    )
    return True


def wait_for_active(model: Type[Model], timeout: float = 180.0) -> None:
    """
    Block until the table reports ACTIVE status.

    Raises
    ------
    TableNotReadyError
        If the table is still not ACTIVE after ``timeout`` seconds.
    pynamodb.exceptions.TableDoesNotExist
        If the table does not exist at all.
    """
    table_name = model.Meta.table_name

    @retry(
        stop=stop_after_delay(timeout),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception_type(TableNotReadyError),
        reraise=True,
    )
    def _poll() -> None:
        status = model.describe_table().get("TableStatus")
        if status != "ACTIVE":
            raise TableNotReadyError(f"{table_name} is {status}, expected ACTIVE")

    _poll()


def sync_table(
    model: Type[Model], descriptor: EntityDescriptor, defaults: BackendDefaults
) -> None:
    """Apply create/update/wait defaults to one table."""
    table_name = model.Meta.table_name
    exists = model.exists()
    if not exists and defaults.create:
        log.info("Creating table %s", table_name)
        model.create_table(wait=False)
    elif exists and defaults.update:
        update_throughput(model, descriptor)

    if defaults.wait_for_active:
        wait_for_active(model, timeout=defaults.wait_for_active_timeout)


def sync_tables(
    models: Mapping[str, Type[Model]],
    entities: Mapping[str, EntityDescriptor],
    defaults: BackendDefaults,
) -> None:
    for table_name, model in models.items():
        sync_table(model, entities[table_name], defaults)


__all__ = [
    "build_model",
    "build_models",
    "sync_table",
    "sync_tables",
    "update_throughput",
    "wait_for_active",
]
