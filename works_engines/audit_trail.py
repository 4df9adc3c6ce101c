"""
works_engines.audit_trail -- "Who verified when" timeline for one proposal.

Responsibility:
    Projects the verification stamps accumulated on a submission into an
    ordered timeline, most recent role first.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Pure projection: recomputed from the record on every call, never
      cached, since stamps accumulate over the record's lifetime.
    - ``step_index`` is the role's chain position (Engineer origin = 0).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from works_kernel.domain.roles import ENGINEER_DESIGNATION, ENGINEER_POSITION, ROLE_CHAIN
from works_kernel.domain.submission import Submission


@dataclass(frozen=True)
class AuditTrailEntry:
    step_index: int
    role: str
    name: str
    designation: str
    timestamp: datetime | str | None


def build_audit_trail(
    record: Submission,
    include_origin: bool = False,
) -> tuple[AuditTrailEntry, ...]:
    """Timeline of verification stamps, sorted by descending step index.

    Args:
        record: The submission to project.
        include_origin: Also list the Engineer/Admin origin stamp
            (``forwarded_from``) as step 0 when it carries a name.
    """
    entries: list[AuditTrailEntry] = []
    for spec in ROLE_CHAIN:
        stamp = getattr(record, spec.stamp_field)
        if stamp is None:
            continue
        entries.append(
            AuditTrailEntry(
                step_index=spec.position,
                role=spec.role.value,
                name=stamp.name or "-",
                designation=stamp.designation or spec.designation,
                timestamp=stamp.timestamp,
            )
        )

    origin = record.forwarded_from
    if include_origin and origin is not None and (origin.name or "").strip():
        entries.append(
            AuditTrailEntry(
                step_index=ENGINEER_POSITION,
                role=ENGINEER_DESIGNATION,
                name=origin.name,
                designation=origin.designation or ENGINEER_DESIGNATION,
                timestamp=origin.timestamp,
            )
        )

    entries.sort(key=lambda e: e.step_index, reverse=True)
    return tuple(entries)
