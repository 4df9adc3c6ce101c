"""
Workflow status variant (``works_kernel.domain.status``).

Responsibility
--------------
Represents a proposal's workflow position as a tagged value
``(phase, role, target)`` instead of a free-form string, and renders the
display strings the dashboards and stored records use.

Vocabulary rendered by ``WorkflowStatus.display``:

=====================  ===========================================
Variant                Display
=====================  ===========================================
PENDING                ``Pending Review``
APPROVED, Commissioner ``Approved``
APPROVED, role R       ``R Approved``
REJECTED, Commissioner ``Rejected`` (disambiguated by ``rejected_by``)
REJECTED, role R       ``R Rejected``
FORWARDED, target S    ``Forwarded to S``
=====================  ===========================================

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Engine code builds statuses from the variant and never parses display
  text.  ``parse_status`` exists only for the codec boundary, where
  records arrive from the submission source as strings.
* The Commissioner's unqualified ``Approved`` / ``Rejected`` strings are
  kept as-is: stored records and external readers depend on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from works_kernel.domain.roles import Role, get_role_spec, parse_role, role_for_section
from works_kernel.exceptions import UnknownRoleError, UnknownStatusError


class WorkflowPhase(str, Enum):
    """Outcome axis of the status variant."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FORWARDED = "forwarded"


PENDING_REVIEW_TEXT = "Pending Review"
FORWARDED_PREFIX = "Forwarded to "


@dataclass(frozen=True)
class WorkflowStatus:
    """A position in the approval chain.

    ``role`` is the role whose outcome this is (None for the bootstrap
    ``Pending Review`` state and for forwards).  ``target`` is set only for
    ``FORWARDED`` and names the role whose queue the record is in.
    """

    phase: WorkflowPhase
    role: Role | None = None
    target: Role | None = None

    def __post_init__(self) -> None:
        if self.phase == WorkflowPhase.FORWARDED:
            if self.target is None or self.role is not None:
                raise ValueError("FORWARDED status requires a target and no role")
        elif self.phase == WorkflowPhase.PENDING:
            if self.role is not None or self.target is not None:
                raise ValueError("PENDING status carries neither role nor target")
        elif self.role is None or self.target is not None:
            raise ValueError(f"{self.phase.value} status requires a role and no target")

    @property
    def display(self) -> str:
        if self.phase == WorkflowPhase.PENDING:
            return PENDING_REVIEW_TEXT
        if self.phase == WorkflowPhase.FORWARDED:
            return FORWARDED_PREFIX + get_role_spec(self.target).section_token
        word = "Approved" if self.phase == WorkflowPhase.APPROVED else "Rejected"
        if self.role == Role.COMMISSIONER:
            return word
        return f"{self.role.value} {word}"

    def __str__(self) -> str:
        return self.display

    @property
    def is_pending_review(self) -> bool:
        return self.phase == WorkflowPhase.PENDING

    def is_approved_by(self, role: Role) -> bool:
        return self.phase == WorkflowPhase.APPROVED and self.role == role

    def is_rejected_by(self, role: Role) -> bool:
        return self.phase == WorkflowPhase.REJECTED and self.role == role

    def is_forwarded_to(self, role: Role) -> bool:
        return self.phase == WorkflowPhase.FORWARDED and self.target == role


PENDING_REVIEW = WorkflowStatus(WorkflowPhase.PENDING)


def approved(role: Role) -> WorkflowStatus:
    return WorkflowStatus(WorkflowPhase.APPROVED, role=role)


def rejected(role: Role) -> WorkflowStatus:
    return WorkflowStatus(WorkflowPhase.REJECTED, role=role)


def forwarded_to(target: Role) -> WorkflowStatus:
    return WorkflowStatus(WorkflowPhase.FORWARDED, target=target)


def parse_status(text: str | None) -> WorkflowStatus:
    """Read a stored status string back into the variant.

    Codec boundary only.  Blank text reads as ``Pending Review`` (the
    dashboards display a missing status as pending).  Matching ignores
    case and surrounding whitespace.

    Raises:
        UnknownStatusError: for text outside the vocabulary.
    """
    raw = (text or "").strip()
    if not raw or raw.casefold() == PENDING_REVIEW_TEXT.casefold():
        return PENDING_REVIEW

    folded = raw.casefold()
    if folded == "approved":
        return approved(Role.COMMISSIONER)
    if folded == "rejected":
        return rejected(Role.COMMISSIONER)

    if folded.startswith(FORWARDED_PREFIX.casefold()):
        target = role_for_section(raw[len(FORWARDED_PREFIX):])
        if target is None:
            raise UnknownStatusError(raw)
        return forwarded_to(target)

    head, _, tail = raw.rpartition(" ")
    try:
        role = parse_role(head)
    except UnknownRoleError:
        raise UnknownStatusError(raw) from None
    if tail.casefold() == "approved":
        return approved(role)
    if tail.casefold() == "rejected":
        return rejected(role)
    raise UnknownStatusError(raw)
