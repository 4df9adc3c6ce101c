"""
Workflow commands and results (``works_kernel.domain.commands``).

Responsibility
--------------
The command/query vocabulary the dashboards use to drive the engine:
tagged command records for approve, reject and forward (single and
bulk), the verification payload an approver supplies, and the structured
result every command returns.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Single commands are bulk commands of size one: both expose ``ids``.
* A result always accounts for every requested id, either as an updated
  record or as a ``RejectedId`` carrying a machine-readable code.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union

from works_kernel.domain.roles import Role
from works_kernel.domain.submission import Submission


class CommandKind(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    FORWARD = "forward"
    BULK_APPROVE = "bulk_approve"
    BULK_REJECT = "bulk_reject"
    BULK_FORWARD = "bulk_forward"


@dataclass(frozen=True)
class VerificationPayload:
    """What the approver attests to in the preview modal.

    ``designation`` defaults to the role's registry designation and
    ``timestamp`` to the engine clock when left empty.
    """

    name: str
    designation: str = ""
    timestamp: datetime | str | None = None
    remarks: str = ""


@dataclass(frozen=True)
class Approve:
    role: Role
    submission_id: str
    verification: VerificationPayload | None

    kind = CommandKind.APPROVE

    @property
    def ids(self) -> tuple[str, ...]:
        return (self.submission_id,)


@dataclass(frozen=True)
class Reject:
    role: Role
    submission_id: str
    remarks: str

    kind = CommandKind.REJECT

    @property
    def ids(self) -> tuple[str, ...]:
        return (self.submission_id,)


@dataclass(frozen=True)
class Forward:
    """Route an approved record to a downstream section.

    ``destination`` is a role or its section token.  ``department`` falls
    back to the configured default department when empty.
    """

    role: Role
    submission_id: str
    destination: Role | str | None
    confirmed: bool = False
    remarks: str = ""
    department: str = ""

    kind = CommandKind.FORWARD

    @property
    def ids(self) -> tuple[str, ...]:
        return (self.submission_id,)


@dataclass(frozen=True)
class BulkApprove:
    role: Role
    ids: tuple[str, ...]
    verification: VerificationPayload | None

    kind = CommandKind.BULK_APPROVE


@dataclass(frozen=True)
class BulkReject:
    role: Role
    ids: tuple[str, ...]
    remarks: str

    kind = CommandKind.BULK_REJECT


@dataclass(frozen=True)
class BulkForward:
    role: Role
    ids: tuple[str, ...]
    destination: Role | str | None
    confirmed: bool = False
    remarks: str = ""
    department: str = ""

    kind = CommandKind.BULK_FORWARD


WorkflowCommand = Union[Approve, Reject, Forward, BulkApprove, BulkReject, BulkForward]


@dataclass(frozen=True)
class RejectedId:
    """An id the command could not apply to, with the reason."""

    submission_id: str
    code: str
    reason: str


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command.

    Partial success is a normal result, not an exception: ids that failed
    their own precondition are listed in ``rejected_ids`` while the rest
    of the batch is committed.
    """

    kind: CommandKind
    role: Role
    updated_records: tuple[Submission, ...] = ()
    rejected_ids: tuple[RejectedId, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.rejected_ids

    @property
    def is_partial_failure(self) -> bool:
        return bool(self.updated_records) and bool(self.rejected_ids)

    @property
    def updated_ids(self) -> tuple[str, ...]:
        return tuple(record.id for record in self.updated_records)

    def reason_for(self, submission_id: str) -> RejectedId | None:
        for rejected in self.rejected_ids:
            if rejected.submission_id == submission_id:
                return rejected
        return None
