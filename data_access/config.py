"""
Configuration for the data-access library.

Two layers live here:

- ``Settings``: environment-derived observability metadata (service name,
  version, log level) loaded with Pydantic Settings.
- ``ServiceConfig``: the per-service configuration handed to
  ``DynamoDbService`` (AWS credentials, local endpoint switch, backend
  defaults and entity descriptors). It accepts both snake_case names and the
  camelCase keys used by existing JSON configuration files.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from data_access.domain.entities import EntityDescriptor


class Settings(BaseSettings):
    # Logging
    log_level: str = Field("DEBUG", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Service metadata attached to traces
    service_name: str = Field("data-access-library", alias="SERVICE_NAME")
    application_name: str = Field("data-access-library", alias="APPLICATION_NAME")
    exporter_url: str = Field("", alias="EXPORTER_URL")
    service_version: str = Field("v1", alias="SERVICE_VERSION")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


class AwsConfig(BaseModel):
    """
    AWS connection parameters passed through to every table model's ``Meta``.

    Unknown keys are kept so that configuration files written for other SDKs
    still load; only the fields declared here reach PynamoDB.
    """

    access_key_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("access_key_id", "accessKeyId")
    )
    secret_access_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("secret_access_key", "secretAccessKey")
    )
    session_token: Optional[str] = Field(
        None, validation_alias=AliasChoices("session_token", "sessionToken")
    )
    region: Optional[str] = None
    connect_timeout_seconds: Optional[float] = Field(
        None, validation_alias=AliasChoices("connect_timeout_seconds", "connectTimeout")
    )
    read_timeout_seconds: Optional[float] = Field(
        None, validation_alias=AliasChoices("read_timeout_seconds", "readTimeout")
    )
    max_retry_attempts: Optional[int] = Field(
        None, validation_alias=AliasChoices("max_retry_attempts", "maxRetries")
    )

    model_config = ConfigDict(extra="allow")


class BackendDefaults(BaseModel):
    """Table lifecycle flags applied when the service starts."""

    create: bool = False
    update: bool = False
    wait_for_active: bool = Field(
        False, validation_alias=AliasChoices("wait_for_active", "waitForActive")
    )
    wait_for_active_timeout: float = Field(
        180.0,
        gt=0,
        validation_alias=AliasChoices("wait_for_active_timeout", "waitForActiveTimeout"),
    )

    model_config = ConfigDict(extra="ignore")

    @property
    def enabled(self) -> bool:
        return self.create or self.update or self.wait_for_active


class ServiceConfig(BaseModel):
    """
    Configuration of one ``DynamoDbService`` instance.

    Example
    -------
        {
          "awsConfig": {"region": "us-east-1"},
          "isLocalDB": true,
          "localDatabaseURL": "http://localhost:8000",
          "dynamooseDefaults": {"create": false, "update": false, "waitForActive": false},
          "entities": {"countries": {"fields": {...}, "options": {...}}}
        }
    """

    aws_config: AwsConfig = Field(
        default_factory=AwsConfig,
        validation_alias=AliasChoices("aws_config", "awsConfig"),
    )
    is_local_db: bool = Field(
        False, validation_alias=AliasChoices("is_local_db", "isLocalDB")
    )
    local_database_url: str = Field(
        "http://localhost:8000",
        validation_alias=AliasChoices("local_database_url", "localDatabaseURL"),
    )
    backend_defaults: BackendDefaults = Field(
        default_factory=BackendDefaults,
        validation_alias=AliasChoices(
            "backend_defaults", "backendDefaults", "dynamooseDefaults"
        ),
    )
    entities: Dict[str, EntityDescriptor] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @property
    def host(self) -> Optional[str]:
        """Endpoint override for the local database, ``None`` for the managed service."""
        return self.local_database_url if self.is_local_db else None


def load_service_config(path: Union[str, Path]) -> ServiceConfig:
    """
    Read a JSON configuration file into a validated ``ServiceConfig``.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    pydantic.ValidationError
        If the configuration or any entity descriptor is invalid.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return ServiceConfig.model_validate(raw)


__all__ = [
    "AwsConfig",
    "BackendDefaults",
    "ServiceConfig",
    "Settings",
    "get_settings",
    "load_service_config",
]
