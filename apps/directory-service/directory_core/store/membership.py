"""Band membership reconciliation helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class MembershipPlan:
    to_add: frozenset[str]
    to_remove: frozenset[str]

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_remove


def plan_membership(current: Iterable[str], desired: Iterable[str]) -> MembershipPlan:
    """Return the band ids to insert and delete to turn ``current`` into ``desired``."""
    current_set = frozenset(current)
    desired_set = frozenset(desired)
    return MembershipPlan(
        to_add=desired_set - current_set,
        to_remove=current_set - desired_set,
    )


def membership_rows(member_id: str, band_ids: Iterable[str]) -> list[dict[str, str]]:
    """One ``band_member`` row per supplied band id, in order.

    Duplicates are kept; the (member_id, band_id) primary key rejects them.
    """
    return [{"member_id": member_id, "band_id": band_id} for band_id in band_ids]
