import asyncio
import itertools
from datetime import datetime, timedelta, timezone

import pytest

from directory_core.remote import RemoteStoreError
from directory_core.remote.base import is_multi_value
from directory_core.store import DirectoryStore
from directory_core.utils.settings import StoreSettings


def _matches(row, match):
    for key, value in (match or {}).items():
        if is_multi_value(value):
            if row.get(key) not in value:
                return False
        elif row.get(key) != value:
            return False
    return True


class FakeRemote:
    """In-memory remote store that records every call.

    ``fail[(op, table)] = "message"`` makes the next matching call raise
    ``RemoteStoreError``; ``delay[(op, table)] = seconds`` suspends it first.
    """

    def __init__(self):
        self.tables = {name: [] for name in ("commission", "district", "group", "band", "member", "band_member")}
        self.calls = []
        self.fail = {}
        self.delay = {}
        self._ids = itertools.count(1)
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def seed(self, table, **row):
        if table != "band_member":
            row.setdefault("id", f"{table}-{next(self._ids)}")
            self._clock += timedelta(seconds=1)
            row.setdefault("created_at", self._clock)
        self.tables[table].append(row)
        return row

    def calls_for(self, op, table=None):
        return [c for c in self.calls if c[0] == op and (table is None or c[1] == table)]

    def selected_tables(self):
        return [c[1] for c in self.calls if c[0] == "select"]

    async def _enter(self, op, table):
        wait = self.delay.get((op, table))
        if wait:
            await asyncio.sleep(wait)
        message = self.fail.pop((op, table), None)
        if message is not None:
            raise RemoteStoreError(message)

    async def select(self, table, columns=("*",), *, joins=(), filters=None, order_by=None, descending=False):
        self.calls.append(("select", table, {"columns": tuple(columns), "joins": tuple(joins),
                                             "filters": dict(filters or {}), "order_by": order_by,
                                             "descending": descending}))
        await self._enter("select", table)
        rows = []
        for row in self.tables[table]:
            if not _matches(row, filters):
                continue
            out = dict(row) if "*" in columns else {c: row.get(c) for c in columns}
            for join in joins:
                parent = next((p for p in self.tables[join.table] if p["id"] == row.get(join.fk_column)), None)
                out[join.table] = None if parent is None else {c: parent.get(c) for c in join.columns}
            rows.append(out)
        if order_by:
            rows.sort(key=lambda r: r[order_by], reverse=descending)
        return rows

    async def insert(self, table, rows):
        rows = [dict(r) for r in rows]
        self.calls.append(("insert", table, rows))
        await self._enter("insert", table)
        inserted = [self.seed(table, **row) for row in rows]
        return [dict(r) for r in inserted]

    async def update(self, table, values, *, match):
        self.calls.append(("update", table, {"values": dict(values), "match": dict(match)}))
        await self._enter("update", table)
        for row in self.tables[table]:
            if _matches(row, match):
                row.update(values)

    async def delete(self, table, *, match):
        self.calls.append(("delete", table, {"match": dict(match)}))
        await self._enter("delete", table)
        self.tables[table] = [row for row in self.tables[table] if not _matches(row, match)]


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def store(remote):
    return DirectoryStore(remote, StoreSettings())


@pytest.fixture
def hierarchy(remote):
    """One commission > district > group > band chain with a member in the band."""
    commission = remote.seed("commission", name_ar="لجنة", name_en="Commission One", code="C1")
    district = remote.seed("district", name="North", code="D1", commission_id=commission["id"])
    group = remote.seed("group", name="G", town_name="Riverside", code="G1",
                        district_id=district["id"], commission_id=commission["id"])
    band = remote.seed("band", name="Brass", code="B1", town_name="Riverside", group_id=group["id"],
                       district_id=district["id"], commission_id=commission["id"])
    member = remote.seed("member", name="Ali", code="M1", civil_id="123", phone_number="555")
    remote.seed("band_member", member_id=member["id"], band_id=band["id"])
    return {"commission": commission, "district": district, "group": group, "band": band, "member": member}
