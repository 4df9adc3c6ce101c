"""
Submission domain types (``works_kernel.domain.submission``).

Responsibility
--------------
Immutable value objects for one capital-works proposal and the audit data
that accumulates on it as it moves up the approval chain.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``Submission`` is frozen; every transition produces a new instance via
  ``dataclasses.replace`` so attachment references are shared, never
  copied or re-encoded.
* A role's verification stamp, once set, is never cleared or replaced by
  another role's transition (checked by ``works_kernel.invariants``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from works_kernel.domain.roles import Role, get_role_spec
from works_kernel.domain.status import PENDING_REVIEW, WorkflowStatus

ATTACHMENT_FIELDS: tuple[str, ...] = (
    "work_image",
    "detailed_report",
    "committee_report",
    "council_resolution",
)


@dataclass(frozen=True)
class VerificationStamp:
    """Proof that a named person in a role reviewed the proposal."""

    name: str
    designation: str
    timestamp: datetime | str | None = None


@dataclass(frozen=True)
class ForwardedTo:
    """Routing record written by a forward; ``section`` is the routing key."""

    department: str
    section: str
    remarks: str = ""
    timestamp: datetime | str | None = None


@dataclass(frozen=True)
class Selection:
    """Classification metadata chosen when the proposal was created."""

    year: str | None = None
    installment: str | None = None
    grant_type: str | None = None
    program: str | None = None


@dataclass(frozen=True)
class Submission:
    """One capital-works proposal.

    Descriptive fields (sector .. selection) belong to the editing
    collaborator.  ``status``, ``forwarded_to``, ``rejected_by`` and the
    ``*_verified_by`` stamps change only through the transition engine.
    Attachment fields hold opaque references (file handle, blob key, URL)
    that the kernel never inspects.  ``extra`` carries source keys the
    kernel does not model so they survive a load/save cycle.
    """

    id: str
    status: WorkflowStatus = PENDING_REVIEW

    sector: str | None = None
    proposal: str | None = None
    cost: Decimal | None = None
    area: str | None = None
    locality: str | None = None
    ward_no: str | None = None
    latlong: str | None = None
    priority: Any = None
    cr_number: str | None = None
    cr_date: str | None = None
    selection: Selection | None = None

    work_image: Any = None
    detailed_report: Any = None
    committee_report: Any = None
    council_resolution: Any = None

    forwarded_to: ForwardedTo | None = None
    remarks: str = ""
    rejected_by: str | None = None

    forwarded_from: VerificationStamp | None = None
    commissioner_verified_by: VerificationStamp | None = None
    eeph_verified_by: VerificationStamp | None = None
    seph_verified_by: VerificationStamp | None = None
    encph_verified_by: VerificationStamp | None = None
    cdma_verified_by: VerificationStamp | None = None

    extra: dict[str, Any] = field(default_factory=dict)

    def stamp_for(self, role: Role) -> VerificationStamp | None:
        """Return the verification stamp recorded for ``role``."""
        return getattr(self, get_role_spec(role).stamp_field)

    def attachments(self) -> dict[str, Any]:
        """Attachment references that are present, keyed by field name."""
        return {
            name: getattr(self, name)
            for name in ATTACHMENT_FIELDS
            if getattr(self, name) is not None
        }
