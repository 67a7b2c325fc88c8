"""
Entity descriptors: the declarative definition of a table.

A descriptor maps field names to their attributes (type, key role, required
flag, default) plus a storage options block. Descriptors are validated when
the configuration is loaded, so a malformed table definition fails fast
instead of on the first query against it.

Example
-------
    Country = EntityDescriptor.model_validate({
        "fields": {
            "id": {"type": "String", "hashKey": True, "required": True},
            "name": {"type": "String", "required": True},
            "countryCode": {"type": "String", "required": True},
            "isDeleted": {"type": "Boolean", "default": False},
        },
        "options": {"throughput": {"read": 10, "write": 5}},
    })
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from numbers import Number
from typing import Any, Dict, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    BINARY = "binary"
    DATETIME = "datetime"
    MAP = "map"
    LIST = "list"
    JSON = "json"
    STRING_SET = "string_set"
    NUMBER_SET = "number_set"


# Legacy and capitalised type names accepted in descriptor files.
_TYPE_ALIASES: Dict[str, FieldType] = {
    "str": FieldType.STRING,
    "int": FieldType.NUMBER,
    "float": FieldType.NUMBER,
    "bool": FieldType.BOOLEAN,
    "buffer": FieldType.BINARY,
    "bytes": FieldType.BINARY,
    "date": FieldType.DATETIME,
    "object": FieldType.MAP,
    "dict": FieldType.MAP,
    "array": FieldType.LIST,
    "stringset": FieldType.STRING_SET,
    "numberset": FieldType.NUMBER_SET,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            # fromisoformat only understands the "Z" suffix from Python 3.11.
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValueError(f"default {value!r} is not an ISO 8601 datetime") from None
    if not isinstance(value, datetime):
        raise ValueError(f"default {value!r} is not a datetime")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _coerce_default(field_type: FieldType, value: Any) -> Any:
    """Check a descriptor default against its field type, converting JSON forms."""
    if field_type is FieldType.JSON:
        return value
    if field_type is FieldType.DATETIME:
        return _parse_datetime(value)
    if field_type is FieldType.BINARY:
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, bytes):
            return value
    elif field_type is FieldType.STRING_SET or field_type is FieldType.NUMBER_SET:
        check = _is_number if field_type is FieldType.NUMBER_SET else (lambda item: isinstance(item, str))
        if isinstance(value, (list, tuple, set, frozenset)) and all(check(item) for item in value):
            return set(value)
    else:
        checks = {
            FieldType.STRING: lambda item: isinstance(item, str),
            FieldType.NUMBER: _is_number,
            FieldType.BOOLEAN: lambda item: isinstance(item, bool),
            FieldType.MAP: lambda item: isinstance(item, dict),
            FieldType.LIST: lambda item: isinstance(item, list),
        }
        if checks[field_type](value):
            return value
    raise ValueError(f"default {value!r} does not match field type {field_type.value}")


class FieldSpec(BaseModel):
    """Attributes of a single field."""

    type: FieldType = FieldType.STRING
    hash_key: bool = Field(False, validation_alias=AliasChoices("hash_key", "hashKey"))
    range_key: bool = Field(False, validation_alias=AliasChoices("range_key", "rangeKey"))
    required: bool = False
    default: Any = None
    default_factory: Optional[Literal["uuid4", "utcnow"]] = Field(
        None, validation_alias=AliasChoices("default_factory", "defaultFactory")
    )
    attr_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("attr_name", "attrName")
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, type):
            value = value.__name__
        if isinstance(value, str):
            name = value.strip().lower()
            return _TYPE_ALIASES.get(name, name)
        return value

    @field_validator("default")
    @classmethod
    def _check_default(cls, value: Any, info: ValidationInfo) -> Any:
        field_type = info.data.get("type")
        if value is None or field_type is None:
            return value
        return _coerce_default(field_type, value)

    @model_validator(mode="after")
    def _check_roles(self) -> "FieldSpec":
        if self.hash_key and self.range_key:
            raise ValueError("a field cannot be both hash key and range key")
        if self.default is not None and self.default_factory is not None:
            raise ValueError("default and default_factory are mutually exclusive")
        return self

    @property
    def is_key(self) -> bool:
        return self.hash_key or self.range_key


class Throughput(BaseModel):
    """Provisioned capacity units."""

    read: int = Field(..., gt=0)
    write: int = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)


class EntityOptions(BaseModel):
    """Storage options for a table."""

    throughput: Optional[Throughput] = None
    billing_mode: Optional[Literal["PROVISIONED", "PAY_PER_REQUEST"]] = Field(
        None, validation_alias=AliasChoices("billing_mode", "billingMode")
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def effective_billing_mode(self) -> str:
        if self.billing_mode:
            return self.billing_mode
        return "PROVISIONED" if self.throughput else "PAY_PER_REQUEST"


class EntityDescriptor(BaseModel):
    """Fields and options of one table."""

    fields: Dict[str, FieldSpec]
    options: EntityOptions = Field(default_factory=EntityOptions)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _check_keys(self) -> "EntityDescriptor":
        hash_keys = [name for name, spec in self.fields.items() if spec.hash_key]
        range_keys = [name for name, spec in self.fields.items() if spec.range_key]
        if len(hash_keys) != 1:
            raise ValueError(f"exactly one hash key field is required, got {hash_keys}")
        if len(range_keys) > 1:
            raise ValueError(f"at most one range key field is allowed, got {range_keys}")
        return self

    @property
    def hash_key(self) -> str:
        return next(name for name, spec in self.fields.items() if spec.hash_key)

    @property
    def range_key(self) -> Optional[str]:
        return next((name for name, spec in self.fields.items() if spec.range_key), None)


__all__ = [
    "EntityDescriptor",
    "EntityOptions",
    "FieldSpec",
    "FieldType",
    "Throughput",
]
