"""
Pytest configuration for the data-access library.

Provides fixtures for:
- Entity descriptors and service configuration
- Fake AWS credentials isolated from the developer's environment
- A DynamoDbService running against DynamoDB mocked by moto
"""

from __future__ import annotations

from typing import Any, Dict, Generator

import pytest
from moto import mock_aws

from data_access.config import ServiceConfig, Settings
from data_access.services.dynamodb import DynamoDbService

TEST_REGION = "us-east-1"


@pytest.fixture
def country_entity() -> Dict[str, Any]:
    """
    Country descriptor in the camelCase format used by JSON configuration files.
    """
    return {
        "fields": {
            "id": {"type": "String", "hashKey": True, "required": True, "defaultFactory": "uuid4"},
            "name": {"type": "String", "required": True},
            "countryFlag": {"type": "String"},
            "countryCode": {"type": "String", "required": True},
            "isDeleted": {"type": "Boolean", "default": False},
        },
        "options": {"throughput": {"read": 10, "write": 5}},
    }


@pytest.fixture
def city_entity() -> Dict[str, Any]:
    return {
        "fields": {
            "id": {"type": "string", "hash_key": True},
            "name": {"type": "string", "required": True},
            "population": {"type": "number"},
            "tags": {"type": "string_set"},
        },
    }


@pytest.fixture
def raw_config(country_entity: Dict[str, Any], city_entity: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "awsConfig": {
            "accessKeyId": "testing",
            "secretAccessKey": "testing",
            "region": TEST_REGION,
        },
        "isLocalDB": False,
        "dynamooseDefaults": {"create": True, "update": False, "waitForActive": True},
        "entities": {"countries": country_entity, "cities": city_entity},
    }


@pytest.fixture
def service_config(raw_config: Dict[str, Any]) -> ServiceConfig:
    return ServiceConfig.model_validate(raw_config)


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides; ignores any local .env file.
    """
    return Settings(
        _env_file=None,
        log_level="DEBUG",
        service_name="data-access-test",
        service_version="test",
    )


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Point botocore at fake credentials so nothing can reach a real account.
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)


@pytest.fixture
def mocked_dynamodb(aws_credentials: None) -> Generator[None, None, None]:
    with mock_aws():
        yield


@pytest.fixture
def service(
    mocked_dynamodb: None, service_config: ServiceConfig, test_settings: Settings
) -> DynamoDbService:
    """
    Service with both tables created in the mocked backend.
    """
    return DynamoDbService(service_config, settings=test_settings)
