"""
Abstract service interface for the data-access library.

Backends implement the DataAccessService protocol (or subclass the
AbstractDataAccessService ABC) so callers depend on one contract regardless
of the database behind it. Every operation is a coroutine: it resolves with
the result or raises once the backend call completes.
"""

from __future__ import annotations

import abc
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from data_access.domain.errors import BadRequestError, ConflictError
from data_access.services.filters import equality_criteria

Criteria = Mapping[str, Any]
Keys = Union[str, Sequence[str]]


@runtime_checkable
class DataAccessService(Protocol):
    """
    Common interface of every data-access backend.

    Attributes
    ----------
    name : str
        A short machine-friendly backend identifier.
    """

    name: str

    async def search(self, table_name: str, criteria: Optional[Criteria] = None) -> List[Any]:
        """
        Return the records of ``table_name`` matching ``criteria``.

        Returns an empty list, never None, when nothing matches.
        """
        ...

    async def get_by_id(self, table_name: str, record_id: Any) -> Any:
        """
        Return the record whose primary key is ``record_id``.

        Raises NotFoundError when no record matches.
        """
        ...

    async def validate_duplicate(self, table_name: str, keys: Keys, values: Any) -> None:
        """
        Raise ConflictError if a record already holds the given key/value set.

        Raises BadRequestError, before touching the database, when the number
        of keys and values differ.
        """
        ...

    async def create(self, table_name: str, data: Mapping[str, Any]) -> Any:
        """Persist a new record and return it with backend-assigned values."""
        ...

    async def update(self, record: Any, data: Mapping[str, Any]) -> Any:
        """Overwrite the given fields of ``record``, persist and return it."""
        ...

    async def delete(self, record: Any) -> Any:
        """Remove ``record`` and return it."""
        ...


class AbstractDataAccessService(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses set `name` and implement the backend calls. The duplicate check
    only composes `search`, so it is shared here.
    """

    name: str

    @abc.abstractmethod
    async def search(
        self, table_name: str, criteria: Optional[Criteria] = None
    ) -> List[Any]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def get_by_id(self, table_name: str, record_id: Any) -> Any:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def create(self, table_name: str, data: Mapping[str, Any]) -> Any:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def update(self, record: Any, data: Mapping[str, Any]) -> Any:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def delete(self, record: Any) -> Any:  # pragma: no cover
        raise NotImplementedError

    async def validate_duplicate(self, table_name: str, keys: Keys, values: Any) -> None:
        """
        Check whether records matching the given key/value set already exist.

        Parameters
        ----------
        table_name : str
            The table in which to look for duplicates.
        keys : str or sequence of str
            One attribute name, or several.
        values : Any
            The value for a single key, or one value per key.

        Raises
        ------
        BadRequestError
            If ``keys`` is an empty sequence or its length differs from ``values``.
        ConflictError
            If at least one record matches every key/value pair.
        """
        if isinstance(keys, str):
            criteria = equality_criteria([keys], [values])
            described = f"{keys}: {values}"
        else:
            keys = list(keys)
            if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
                values = [values]
            values = list(values)
            if not keys:
                raise BadRequestError("at least one key is required")
            if len(keys) != len(values):
                raise BadRequestError(f"size of {keys} and {values} do not match.")
            criteria = equality_criteria(keys, values)
            pairs = ", ".join(f"{key}: {value}" for key, value in zip(keys, values))
            described = f"[ {pairs} ]"

        records = await self.search(table_name, criteria)
        if records:
            raise ConflictError(f"{table_name} with {described} already exists")


__all__ = [
    "AbstractDataAccessService",
    "Criteria",
    "DataAccessService",
    "Keys",
]
