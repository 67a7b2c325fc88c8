from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest

from data_access.domain.errors import BadRequestError, ConflictError
from data_access.services.abstract import AbstractDataAccessService, DataAccessService


class _RecordingService(AbstractDataAccessService):
    """In-memory service returning canned search results and recording calls."""

    name = "recording"

    def __init__(self, matches: Optional[List[Any]] = None) -> None:
        self.matches = matches or []
        self.search_calls: List[Tuple[str, Dict[str, Any]]] = []

    async def search(self, table_name: str, criteria: Optional[Mapping[str, Any]] = None) -> List[Any]:
        self.search_calls.append((table_name, dict(criteria or {})))
        return list(self.matches)

    async def get_by_id(self, table_name: str, record_id: Any) -> Any:
        raise NotImplementedError

    async def create(self, table_name: str, data: Mapping[str, Any]) -> Any:
        raise NotImplementedError

    async def update(self, record: Any, data: Mapping[str, Any]) -> Any:
        raise NotImplementedError

    async def delete(self, record: Any) -> Any:
        raise NotImplementedError


def test_recording_service_satisfies_protocol() -> None:
    assert isinstance(_RecordingService(), DataAccessService)


@pytest.mark.asyncio
async def test_no_match_passes_silently() -> None:
    service = _RecordingService()

    assert await service.validate_duplicate("countries", "name", "Canada") is None
    assert service.search_calls == [("countries", {"name": {"eq": "Canada"}})]


@pytest.mark.asyncio
async def test_single_key_conflict_message() -> None:
    service = _RecordingService(matches=[object()])

    with pytest.raises(ConflictError) as excinfo:
        await service.validate_duplicate("countries", "name", "Canada")

    assert str(excinfo.value) == "countries with name: Canada already exists"
    assert excinfo.value.http_status == 409


@pytest.mark.asyncio
async def test_key_list_conflict_enumerates_every_pair() -> None:
    service = _RecordingService(matches=[object(), object()])

    with pytest.raises(ConflictError) as excinfo:
        await service.validate_duplicate("countries", ["name", "countryCode"], ["Canada", "CAN"])

    assert str(excinfo.value) == "countries with [ name: Canada, countryCode: CAN ] already exists"
    assert service.search_calls == [
        ("countries", {"name": {"eq": "Canada"}, "countryCode": {"eq": "CAN"}})
    ]


@pytest.mark.asyncio
async def test_one_item_key_list_still_uses_list_message() -> None:
    service = _RecordingService(matches=[object()])

    with pytest.raises(ConflictError, match=r"countries with \[ name: Canada \] already exists"):
        await service.validate_duplicate("countries", ["name"], ["Canada"])


@pytest.mark.asyncio
async def test_scalar_value_with_one_item_key_list_is_accepted() -> None:
    service = _RecordingService()

    await service.validate_duplicate("countries", ["name"], "Canada")

    assert service.search_calls == [("countries", {"name": {"eq": "Canada"}})]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("keys", "values"),
    [
        (["name", "countryCode"], ["Canada"]),
        (["name"], ["Canada", "CAN"]),
        (("name", "countryCode"), "Canada"),
    ],
)
async def test_arity_mismatch_is_rejected_before_searching(keys, values) -> None:
    service = _RecordingService(matches=[object()])

    with pytest.raises(BadRequestError, match="do not match") as excinfo:
        await service.validate_duplicate("countries", keys, values)

    assert excinfo.value.http_status == 400
    assert service.search_calls == []


@pytest.mark.asyncio
async def test_empty_key_list_is_rejected() -> None:
    service = _RecordingService(matches=[object()])

    with pytest.raises(BadRequestError, match="at least one key"):
        await service.validate_duplicate("countries", [], [])

    assert service.search_calls == []
