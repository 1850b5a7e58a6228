"""
Directory store: in-memory collections synchronized with the remote store.

Holds the five directory collections (commissions, districts, groups, bands,
members) and a loading/error slot per entity. Every fetch replaces its whole
collection; every mutation writes through the remote store and then reloads
the affected collection, plus dependents after a delete. Failures never
propagate to the caller: they land in the entity's error slot and the
operation returns False.
"""
from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from pydantic import BaseModel

from directory_core.db import schemas
from directory_core.remote import RemoteStore, RemoteStoreError, get_remote_store
from directory_core.store.entities import (
    BAND,
    BAND_MEMBER_TABLE,
    COMMISSION,
    DISTRICT,
    ENTITIES,
    GROUP,
    MEMBER,
    EntitySpec,
    dependents_of,
    get_spec,
    insert_row,
)
from directory_core.store.membership import membership_rows, plan_membership
from directory_core.store.state import DirectorySnapshot, EntityStatus
from directory_core.utils.settings import (
    CascadeRefresh,
    StoreSettings,
    UpdatePolicy,
    get_store_settings,
)

logger = logging.getLogger(__name__)

Listener = Callable[["DirectoryStore"], None]
Payload = Union[BaseModel, Mapping[str, Any]]

_CREATE_SCHEMAS: dict[str, type[BaseModel]] = {
    COMMISSION: schemas.CommissionCreate,
    DISTRICT: schemas.DistrictCreate,
    GROUP: schemas.GroupCreate,
    BAND: schemas.BandCreate,
    MEMBER: schemas.MemberCreate,
}

_UPDATE_SCHEMAS: dict[str, type[BaseModel]] = {
    COMMISSION: schemas.CommissionUpdate,
    DISTRICT: schemas.DistrictUpdate,
    GROUP: schemas.GroupUpdate,
    BAND: schemas.BandUpdate,
    MEMBER: schemas.MemberUpdate,
}


def _coerce(model_cls: type[BaseModel], payload: Payload) -> BaseModel:
    if isinstance(payload, model_cls):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    # keys present in the mapping become the model's set fields
    return model_cls.model_validate(dict(payload))


def _failure_message(exc: Exception) -> str:
    if isinstance(exc, RemoteStoreError):
        return exc.message
    return str(exc) or exc.__class__.__name__


class DirectoryStore:
    """Process-wide holder of the directory collections and their status."""

    def __init__(self, remote: RemoteStore, settings: Optional[StoreSettings] = None) -> None:
        self.remote = remote
        self.settings = settings or get_store_settings()
        self.commissions: list[schemas.Commission] = []
        self.districts: list[schemas.District] = []
        self.groups: list[schemas.Group] = []
        self.bands: list[schemas.Band] = []
        self.members: list[schemas.Member] = []
        self._status: dict[str, EntityStatus] = {entity: EntityStatus() for entity in ENTITIES}
        self._error_stamps = itertools.count(1)
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Status and observation
    # ------------------------------------------------------------------

    def status(self, entity: str) -> EntityStatus:
        get_spec(entity)
        return self._status[entity]

    @property
    def is_loading(self) -> bool:
        return any(status.loading for status in self._status.values())

    @property
    def error(self) -> Optional[str]:
        """Most recently recorded error across all entity slots."""
        failed = [status for status in self._status.values() if status.error is not None]
        if not failed:
            return None
        return max(failed, key=lambda status: status.error_seq).error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(store)`` after every state change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> DirectorySnapshot:
        return DirectorySnapshot(
            commissions=tuple(self.commissions),
            districts=tuple(self.districts),
            groups=tuple(self.groups),
            bands=tuple(self.bands),
            members=tuple(self.members),
            statuses={
                entity: EntityStatus(status.loading, status.error, status.error_seq)
                for entity, status in self._status.items()
            },
            is_loading=self.is_loading,
            error=self.error,
        )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Directory store listener failed")

    def _begin(self, entity: str) -> None:
        status = self._status[entity]
        status.loading = True
        status.error = None
        self._notify()

    def _succeed(self, entity: str) -> None:
        self._status[entity].loading = False
        self._notify()

    def _fail(self, entity: str, operation: str, exc: Exception) -> None:
        status = self._status[entity]
        status.error = _failure_message(exc)
        status.error_seq = next(self._error_stamps)
        status.loading = False
        logger.warning("%s %s failed: %s", operation, entity, status.error)
        self._notify()

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch(self, entity: str) -> bool:
        """Reload one collection; on failure the previous contents stay untouched."""
        spec = get_spec(entity)
        self._begin(entity)
        try:
            records = await self._load(spec)
        except Exception as exc:
            self._fail(entity, "fetch", exc)
            return False
        setattr(self, spec.collection, records)
        self._succeed(entity)
        return True

    async def _load(self, spec: EntitySpec) -> list[BaseModel]:
        rows = await self.remote.select(
            spec.table,
            ("*",),
            joins=spec.joins,
            order_by=spec.order_by,
            descending=True,
        )
        if spec.name == MEMBER:
            links = await self.remote.select(BAND_MEMBER_TABLE, ("member_id", "band_id"))
            band_ids: dict[str, set[str]] = defaultdict(set)
            for link in links:
                band_ids[link["member_id"]].add(link["band_id"])
            rows = [{**row, "band_ids": band_ids.get(row["id"], ())} for row in rows]
        return [spec.to_record(row) for row in rows]

    async def fetch_all(self) -> bool:
        """Fetch all five collections concurrently; True when every fetch succeeded."""
        results = await asyncio.gather(*(self.fetch(entity) for entity in ENTITIES))
        return all(results)

    async def refresh_dependents(self, entity: str) -> bool:
        """Re-fetch the collections that depend on ``entity``, one after another."""
        transitive = self.settings.cascade_refresh is CascadeRefresh.TRANSITIVE
        ok = True
        for dependent in dependents_of(entity, transitive=transitive):
            logger.debug("Cascade refresh of %s after %s change", dependent, entity)
            ok = await self.fetch(dependent) and ok
        return ok

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, entity: str, payload: Payload) -> bool:
        spec = get_spec(entity)
        self._begin(entity)
        try:
            create = _coerce(_CREATE_SCHEMAS[entity], payload)
            inserted = await self.remote.insert(spec.table, [insert_row(entity, create)])
            if entity == MEMBER and create.band_ids:
                if not inserted or not inserted[0].get("id"):
                    raise RemoteStoreError("Member insert did not return the new row")
                await self.remote.insert(
                    BAND_MEMBER_TABLE, membership_rows(inserted[0]["id"], create.band_ids)
                )
        except Exception as exc:
            self._fail(entity, "add", exc)
            return False
        return await self.fetch(entity)

    async def update(self, entity: str, record_id: str, changes: Payload) -> bool:
        spec = get_spec(entity)
        self._begin(entity)
        try:
            update = _coerce(_UPDATE_SCHEMAS[entity], changes)
            values = self._update_values(spec, update)
            if values:
                await self.remote.update(spec.table, values, match={"id": record_id})
            else:
                logger.debug("No column changes for %s %s; skipping remote update", entity, record_id)
            if entity == MEMBER and "band_ids" in update.model_fields_set and update.band_ids is not None:
                await self._reconcile_memberships(record_id, update.band_ids)
        except Exception as exc:
            self._fail(entity, "update", exc)
            return False
        return await self.fetch(entity)

    def _update_values(self, spec: EntitySpec, update: BaseModel) -> dict[str, Any]:
        data = update.model_dump(exclude_unset=True)
        values = {key: value for key, value in data.items() if key in spec.fields}
        if self.settings.update_policy is UpdatePolicy.DROP_FALSY:
            values = {key: value for key, value in values.items() if value}
        return values

    async def _reconcile_memberships(self, member_id: str, band_ids: Iterable[str]) -> None:
        rows = await self.remote.select(
            BAND_MEMBER_TABLE, ("band_id",), filters={"member_id": member_id}
        )
        plan = plan_membership((row["band_id"] for row in rows), band_ids)
        if plan.is_noop:
            return
        failures = []
        if plan.to_remove:
            try:
                await self.remote.delete(
                    BAND_MEMBER_TABLE,
                    match={"member_id": member_id, "band_id": sorted(plan.to_remove)},
                )
            except RemoteStoreError as exc:
                failures.append(exc.message)
        # adds go ahead even when the removal failed
        if plan.to_add:
            try:
                await self.remote.insert(BAND_MEMBER_TABLE, membership_rows(member_id, sorted(plan.to_add)))
            except RemoteStoreError as exc:
                failures.append(exc.message)
        if failures:
            raise RemoteStoreError("; ".join(failures))
        logger.info(
            "Reconciled bands for member %s: +%d -%d",
            member_id,
            len(plan.to_add),
            len(plan.to_remove),
        )

    async def delete(self, entity: str, record_id: str) -> bool:
        spec = get_spec(entity)
        self._begin(entity)
        try:
            await self.remote.delete(spec.table, match={"id": record_id})
        except Exception as exc:
            self._fail(entity, "delete", exc)
            return False
        reloaded = await self.fetch(entity)
        refreshed = await self.refresh_dependents(entity)
        return reloaded and refreshed

    # ------------------------------------------------------------------
    # Per-entity operations
    # ------------------------------------------------------------------

    async def fetch_commissions(self) -> bool:
        return await self.fetch(COMMISSION)

    async def fetch_districts(self) -> bool:
        return await self.fetch(DISTRICT)

    async def fetch_groups(self) -> bool:
        return await self.fetch(GROUP)

    async def fetch_bands(self) -> bool:
        return await self.fetch(BAND)

    async def fetch_members(self) -> bool:
        return await self.fetch(MEMBER)

    async def add_commission(self, commission: Payload) -> bool:
        return await self.add(COMMISSION, commission)

    async def update_commission(self, commission_id: str, changes: Payload) -> bool:
        return await self.update(COMMISSION, commission_id, changes)

    async def delete_commission(self, commission_id: str) -> bool:
        return await self.delete(COMMISSION, commission_id)

    async def add_district(self, district: Payload) -> bool:
        return await self.add(DISTRICT, district)

    async def update_district(self, district_id: str, changes: Payload) -> bool:
        return await self.update(DISTRICT, district_id, changes)

    async def delete_district(self, district_id: str) -> bool:
        return await self.delete(DISTRICT, district_id)

    async def add_group(self, group: Payload) -> bool:
        return await self.add(GROUP, group)

    async def update_group(self, group_id: str, changes: Payload) -> bool:
        return await self.update(GROUP, group_id, changes)

    async def delete_group(self, group_id: str) -> bool:
        return await self.delete(GROUP, group_id)

    async def add_band(self, band: Payload) -> bool:
        return await self.add(BAND, band)

    async def update_band(self, band_id: str, changes: Payload) -> bool:
        return await self.update(BAND, band_id, changes)

    async def delete_band(self, band_id: str) -> bool:
        return await self.delete(BAND, band_id)

    async def add_member(self, member: Payload) -> bool:
        return await self.add(MEMBER, member)

    async def update_member(self, member_id: str, changes: Payload) -> bool:
        return await self.update(MEMBER, member_id, changes)

    async def delete_member(self, member_id: str) -> bool:
        return await self.delete(MEMBER, member_id)


_directory_store: Optional[DirectoryStore] = None
_store_lock = threading.Lock()


def get_directory_store() -> DirectoryStore:
    """Return the process-wide directory store bound to the configured remote store."""
    global _directory_store
    if _directory_store is None:
        with _store_lock:
            if _directory_store is None:
                _directory_store = DirectoryStore(get_remote_store())
    return _directory_store


def reset_directory_store_for_tests() -> None:
    global _directory_store
    with _store_lock:
        _directory_store = None
