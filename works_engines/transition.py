"""
works_engines.transition -- Pure approval-chain state machine.

Responsibility:
    Validates and applies approve, reject and forward to submission
    records, stamps the audit data each transition owes, and runs any of
    them across a batch with partial-success semantics.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import works_kernel types.

Transitions (role R):

    ============================  =========  ===========================
    From                          Command    To
    ============================  =========  ===========================
    Pending Review (R=Commiss.)   approve    Approved
    Forwarded to R                approve    R Approved
    Pending Review / Forwarded    reject     R Rejected (Rejected for
    to R                                     the Commissioner)
    Rejected (R=Commiss.)         approve    Approved
    R Approved                    forward    Forwarded to <target>
    ============================  =========  ===========================

Invariants enforced:
    - Reject requires the record to be in R's pending queue
      (``works_kernel.domain.routing.is_pending_for``).  Approve also
      accepts a Commissioner reject back for re-review
      (``is_approvable_by``).
    - Command inputs (remarks, verifier name, destination, confirmation)
      are checked before the record status, so one bad input fails every
      id of a batch the same way.
    - Approval and forwarding are separate steps; approve never advances
      the record to the next role.
    - Every transition is checked with ``verify_carry_forward``: attachment
      references stay identical and other roles' stamps stay untouched.
    - An existing stamp for the acting role is kept, not overwritten.
    - Purity: no clock access; callers pass ``now``.

Failure modes:
    - MissingRequiredFieldError -- reject without remarks, approve without
      a verifier name.
    - MissingDestinationError / NotConfirmedError -- forward inputs.
    - InvalidTransitionError / InvalidDestinationError -- status or target
      not allowed.
    - CarryForwardViolationError -- propagates; indicates a defect.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Mapping

from works_kernel.domain.commands import RejectedId, VerificationPayload
from works_kernel.domain.roles import (
    Role,
    get_role_spec,
    is_downstream,
    role_for_section,
    successor,
)
from works_kernel.domain.routing import is_approvable_by, is_pending_for
from works_kernel.domain.status import approved, forwarded_to, rejected
from works_kernel.domain.submission import ForwardedTo, Submission, VerificationStamp
from works_kernel.exceptions import (
    InvalidDestinationError,
    InvalidTransitionError,
    MissingDestinationError,
    MissingRequiredFieldError,
    NotConfirmedError,
    SubmissionNotFoundError,
    WorkflowError,
)
from works_kernel.invariants import verify_carry_forward


@dataclass(frozen=True)
class BatchOutcome:
    """Records a batch changed, and the ids it could not change."""

    updated: tuple[Submission, ...] = ()
    rejected: tuple[RejectedId, ...] = ()


# ---------------------------------------------------------------------------
# Command input checks (independent of the record)
# ---------------------------------------------------------------------------


def check_approve_inputs(
    submission_id: str, verification: VerificationPayload | None
) -> None:
    if verification is None or not (verification.name or "").strip():
        raise MissingRequiredFieldError(submission_id, "verification", "approve")


def check_reject_inputs(submission_id: str, remarks: str | None) -> None:
    if not (remarks or "").strip():
        raise MissingRequiredFieldError(submission_id, "remarks", "reject")


def check_forward_inputs(
    submission_id: str, destination: Role | str | None, confirmed: bool
) -> None:
    """Destination first, then confirmation."""
    if isinstance(destination, str) and not destination.strip():
        destination = None
    if destination is None:
        raise MissingDestinationError(submission_id)
    if not confirmed:
        raise NotConfirmedError(submission_id)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def approve(
    record: Submission,
    role: Role,
    verification: VerificationPayload | None,
    now: datetime,
    default_designation: str | None = None,
) -> Submission:
    """Approve ``record`` as ``role`` and stamp the verification.

    Args:
        record: Current version of the submission.
        role: Acting role.
        verification: Who verified; ``name`` is required.
        now: Timestamp used when the payload carries none.
        default_designation: Used when the payload designation is blank;
            falls back to the role registry designation.

    Returns:
        The approved submission.
    """
    check_approve_inputs(record.id, verification)
    if not is_approvable_by(record, role):
        raise InvalidTransitionError(record.id, role.value, "approve", record.status.display)

    spec = get_role_spec(role)
    changes: dict[str, object] = {
        "status": approved(role),
        "remarks": verification.remarks or "",
    }
    if record.stamp_for(role) is None:
        changes[spec.stamp_field] = VerificationStamp(
            name=verification.name.strip(),
            designation=(verification.designation or "").strip()
            or default_designation
            or spec.designation,
            timestamp=verification.timestamp or now,
        )

    result = dataclasses.replace(record, **changes)
    verify_carry_forward(record, result, role)
    return result


def reject(record: Submission, role: Role, remarks: str | None) -> Submission:
    """Reject ``record`` as ``role``; remarks are mandatory.

    The record leaves ``role``'s pending queue and appears in the
    predecessor's sent-back queue (the Commissioner's own rejected queue
    for a Commissioner reject).
    """
    check_reject_inputs(record.id, remarks)
    text = (remarks or "").strip()
    if not is_pending_for(record, role):
        raise InvalidTransitionError(record.id, role.value, "reject", record.status.display)

    result = dataclasses.replace(
        record,
        status=rejected(role),
        remarks=text,
        rejected_by=role.value,
    )
    verify_carry_forward(record, result, role)
    return result


def resolve_destination(destination: Role | str | None) -> Role | None:
    """Map a destination role or section token to a role (None if blank)."""
    if isinstance(destination, Role):
        return destination
    if destination is None or not destination.strip():
        return None
    return role_for_section(destination)


def forward(
    record: Submission,
    role: Role,
    destination: Role | str | None,
    confirmed: bool,
    now: datetime,
    department: str,
    remarks: str = "",
    permitted: Iterable[Role] | None = None,
) -> Submission:
    """Route an approved record into a downstream section's queue.

    Args:
        permitted: Sections ``role`` may forward to.  Defaults to the next
            role in the chain.
    """
    check_forward_inputs(record.id, destination, confirmed)
    if not record.status.is_approved_by(role):
        raise InvalidTransitionError(record.id, role.value, "forward", record.status.display)

    target = resolve_destination(destination)
    if permitted is None:
        nxt = successor(role)
        allowed = (nxt,) if nxt is not None else ()
    else:
        allowed = tuple(permitted)
    if target is None or target not in allowed or not is_downstream(role, target):
        raise InvalidDestinationError(
            record.id, role.value, str(destination), record.status.display
        )

    note = (remarks or "").strip()
    changes: dict[str, object] = {
        "status": forwarded_to(target),
        "forwarded_to": ForwardedTo(
            department=department,
            section=get_role_spec(target).section_token,
            remarks=note,
            timestamp=now,
        ),
    }
    if note:
        changes["remarks"] = note

    result = dataclasses.replace(record, **changes)
    verify_carry_forward(record, result, role)
    return result


def run_batch(
    records: Mapping[str, Submission],
    ids: Iterable[str],
    apply: Callable[[Submission], Submission],
    check_inputs: Callable[[str], None] | None = None,
) -> BatchOutcome:
    """Apply ``apply`` to each id, keeping successes and reporting failures.

    Ids are processed once each, in first-seen order.  ``check_inputs``
    runs before the record lookup, so a bad command input is reported for
    unknown ids too.  A record failing its own precondition is reported in
    ``rejected`` and left unchanged; the others proceed.  Errors other than
    ``WorkflowError`` propagate.
    """
    updated: list[Submission] = []
    failures: list[RejectedId] = []
    seen: set[str] = set()

    for submission_id in ids:
        if submission_id in seen:
            continue
        seen.add(submission_id)

        if check_inputs is not None:
            try:
                check_inputs(submission_id)
            except WorkflowError as exc:
                failures.append(RejectedId(submission_id, exc.code, exc.reason))
                continue

        record = records.get(submission_id)
        if record is None:
            err = SubmissionNotFoundError(submission_id)
            failures.append(RejectedId(submission_id, err.code, str(err)))
            continue
        try:
            updated.append(apply(record))
        except WorkflowError as exc:
            failures.append(RejectedId(submission_id, exc.code, exc.reason))

    return BatchOutcome(updated=tuple(updated), rejected=tuple(failures))
