"""
Module: works_kernel.selectors.view_selector
Responsibility: Read-only, role-specific views over the submission store --
    the lists each dashboard renders (pending, approved, rejected, sent back,
    forwarded, all works, grouped by CR number) plus the column filters and
    dropdown options applied on top of them.
Architecture position: Kernel > Selectors.  May import from domain/ and
    services/submission_store.  Selectors NEVER mutate the store.

Invariants enforced:
    - Read-only access: every method returns a fresh tuple snapshot.
    - Ordering: views are stably sorted ascending by numeric priority;
      missing or non-numeric priority sorts as 0.
    - Filters are an AND of independent predicates and never touch the store.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable

from works_kernel.domain.roles import Role, get_role_spec
from works_kernel.domain.routing import (
    is_approved_by_self,
    is_forwarded_past,
    is_pending_for,
    is_rejected_by_self,
    is_sent_back_to,
    is_visible_to,
)
from works_kernel.domain.submission import Submission
from works_kernel.services.submission_store import SubmissionStore


class ViewName(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SENT_BACK_REJECTED = "sentBackRejected"
    FORWARDED = "forwarded"
    ALL_WORKS = "allWorks"
    BY_CR_NUMBER = "byCrNumber"


# Names the dashboards used for the same views
_VIEW_ALIASES: dict[str, ViewName] = {
    "selfRejected": ViewName.REJECTED,
    "noOfCrs": ViewName.BY_CR_NUMBER,
}


def parse_view_name(value: str | ViewName) -> ViewName:
    """Resolve a view name, accepting the legacy dashboard aliases.

    Raises:
        ValueError: for an unknown view name.
    """
    if isinstance(value, ViewName):
        return value
    if value in _VIEW_ALIASES:
        return _VIEW_ALIASES[value]
    return ViewName(value)


# ---------------------------------------------------------------------------
# Display helpers used by the column filters
# ---------------------------------------------------------------------------


def priority_key(value: Any) -> float:
    """Numeric sort key for a priority; anything non-numeric counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return 0.0 if math.isnan(number) else number


def sort_by_priority(records: Iterable[Submission]) -> tuple[Submission, ...]:
    """Stable ascending sort on ``priority_key``."""
    return tuple(sorted(records, key=lambda r: priority_key(r.priority)))


def format_inr(amount: Any) -> str:
    """Whole rupees with Indian digit grouping, e.g. ``₹12,34,567``."""
    try:
        value = Decimal(str(amount)) if amount not in (None, "") else Decimal(0)
    except InvalidOperation:
        value = Decimal(0)
    if not value.is_finite():
        value = Decimal(0)
    rounded = int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    digits = str(abs(rounded))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"{'-' if rounded < 0 else ''}₹{digits}"


def format_locality(record: Submission) -> str:
    """``area, locality, Ward No: N`` from whichever parts are present."""
    parts = [p for p in (record.area, record.locality) if p]
    if record.ward_no:
        parts.append(f"Ward No: {record.ward_no}")
    if parts:
        return ", ".join(parts)
    return record.locality or "-"


def _priority_text(value: Any) -> str:
    if value in (None, "", 0) or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _contains(haystack: Any, needle: str) -> bool:
    return needle.casefold() in str(haystack or "").casefold()


@dataclass(frozen=True)
class ColumnFilters:
    """Per-column filters from the dashboard table header.

    Empty strings are inactive.  ``sector`` and ``status`` are exact
    matches (dropdowns); the rest are case-insensitive substring matches,
    except ``priority`` which matches the literal text.
    """

    cr_number: str = ""
    cr_date: str = ""
    sector: str = ""
    status: str = ""
    proposal: str = ""
    cost: str = ""
    locality: str = ""
    lat_long: str = ""
    priority: str = ""

    @property
    def is_active(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def matches(self, record: Submission) -> bool:
        if self.cr_number and not _contains(record.cr_number, self.cr_number):
            return False
        if self.cr_date and not _contains(record.cr_date, self.cr_date):
            return False
        if self.sector and record.sector != self.sector:
            return False
        if self.status and record.status.display != self.status:
            return False
        if self.proposal and not _contains(record.proposal, self.proposal):
            return False
        if self.cost and not _contains(format_inr(record.cost), self.cost):
            return False
        if self.locality and not _contains(format_locality(record), self.locality):
            return False
        if self.lat_long and not _contains(record.latlong, self.lat_long):
            return False
        if self.priority and self.priority not in _priority_text(record.priority):
            return False
        return True

    def apply(self, records: Iterable[Submission]) -> tuple[Submission, ...]:
        if not self.is_active:
            return tuple(records)
        return tuple(r for r in records if self.matches(r))


# ---------------------------------------------------------------------------
# CR number grouping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CrGroup:
    """Records sharing a council resolution number (``None`` = no CR)."""

    cr_number: str | None
    records: tuple[Submission, ...]


def cr_key(record: Submission) -> str | None:
    key = (record.cr_number or "").strip().upper()
    return key or None


def group_by_cr_number(records: Iterable[Submission]) -> tuple[CrGroup, ...]:
    """Group in order of first appearance; records without a CR come last."""
    grouped: dict[str | None, list[Submission]] = {}
    for record in records:
        grouped.setdefault(cr_key(record), []).append(record)
    ordered = [CrGroup(k, tuple(v)) for k, v in grouped.items() if k is not None]
    if None in grouped:
        ordered.append(CrGroup(None, tuple(grouped[None])))
    return tuple(ordered)


def count_cr_numbers(records: Iterable[Submission]) -> int:
    """Distinct CR numbers; blank CR numbers are not counted."""
    return len({k for k in map(cr_key, records) if k is not None})


def unique_sectors(records: Iterable[Submission]) -> tuple[str, ...]:
    return tuple(sorted({r.sector for r in records if r.sector}))


def unique_statuses(records: Iterable[Submission]) -> tuple[str, ...]:
    return tuple(sorted({r.status.display for r in records}))


# ---------------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------------


class ViewSelector:
    """
    Role-specific read access to a ``SubmissionStore``.

    Contract:
        Reads the store's current snapshot on every call; nothing is cached,
        so views always reflect the latest committed command.
    """

    def __init__(self, store: SubmissionStore):
        self.store = store

    def _select(self, role: Role, view: ViewName) -> list[Submission]:
        records = self.store.records()
        if view == ViewName.PENDING:
            return [r for r in records if is_pending_for(r, role)]
        if view == ViewName.APPROVED:
            downstream = get_role_spec(role).shows_downstream_progress
            return [
                r for r in records
                if is_approved_by_self(r, role)
                or (downstream and is_forwarded_past(r, role))
            ]
        if view == ViewName.REJECTED:
            return [r for r in records if is_rejected_by_self(r, role)]
        if view == ViewName.SENT_BACK_REJECTED:
            return [r for r in records if is_sent_back_to(r, role)]
        if view == ViewName.FORWARDED:
            return [r for r in records if is_forwarded_past(r, role)]
        # ALL_WORKS and BY_CR_NUMBER
        return [r for r in records if is_visible_to(r, role)]

    def view(
        self,
        role: Role,
        view: ViewName | str,
        filters: ColumnFilters | None = None,
    ) -> tuple[Submission, ...]:
        """Records in ``view`` for ``role``, filtered, in display order.

        ``BY_CR_NUMBER`` returns the role's works ordered group by group.
        """
        name = parse_view_name(view)
        selected = sort_by_priority(self._select(role, name))
        if filters is not None:
            selected = filters.apply(selected)
        if name == ViewName.BY_CR_NUMBER:
            return tuple(r for group in group_by_cr_number(selected) for r in group.records)
        return selected

    def cr_groups(
        self, role: Role, filters: ColumnFilters | None = None
    ) -> tuple[CrGroup, ...]:
        return group_by_cr_number(self.view(role, ViewName.ALL_WORKS, filters))

    def counts(self, role: Role) -> dict[ViewName, int]:
        """Card counts for the dashboard header."""
        counts = {
            name: len(self._select(role, name))
            for name in ViewName
            if name != ViewName.BY_CR_NUMBER
        }
        counts[ViewName.BY_CR_NUMBER] = count_cr_numbers(
            self._select(role, ViewName.ALL_WORKS)
        )
        return counts

    def filter_options(self, role: Role, view: ViewName | str) -> dict[str, tuple[str, ...]]:
        """Dropdown values for the sector and status column filters."""
        records = self.view(role, view)
        return {"sector": unique_sectors(records), "status": unique_statuses(records)}
