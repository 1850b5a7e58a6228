"""Table-oriented contract of the remote data store consumed by the directory store."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

Row = dict[str, Any]


class RemoteStoreError(RuntimeError):
    """Any failure reported by the remote store (network, validation, permission, ...)."""

    def __init__(self, message: str = "") -> None:
        detail = message.strip() if message and message.strip() else "Remote store request failed."
        super().__init__(detail)
        self.message = detail


@dataclass(frozen=True)
class Join:
    """Select a referenced parent row alongside each row.

    The parent appears in the result row under ``table`` as a dict of the
    requested ``columns``, or ``None`` when the foreign key is null or points
    at a row that no longer exists.
    """

    table: str
    columns: tuple[str, ...] = ("id",)
    foreign_key: Optional[str] = None

    @property
    def fk_column(self) -> str:
        return self.foreign_key or f"{self.table}_id"


def is_multi_value(value: Any) -> bool:
    """Return True when a filter value means "column IN values"."""
    return isinstance(value, (list, tuple, set, frozenset))


class RemoteStore(Protocol):
    async def select(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        *,
        joins: Iterable[Join] = (),
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        raise NotImplementedError

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        raise NotImplementedError

    async def update(self, table: str, values: Mapping[str, Any], *, match: Mapping[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, table: str, *, match: Mapping[str, Any]) -> None:
        raise NotImplementedError
