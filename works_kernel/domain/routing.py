"""
Queue routing predicates (``works_kernel.domain.routing``).

Responsibility
--------------
Decides, for one record and one role, which of the role's queues the
record belongs to.  The transition engine uses ``is_pending_for`` as the
precondition for approve/reject; the view selector uses all of them to
build the dashboards' lists.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.

Invariants enforced
-------------------
* For a fixed role, pending / approved-by-self / rejected-by-self are
  mutually exclusive (each depends on a different status phase).
* Bounce-back is derived, not stored: a record rejected by role S shows
  up in the sent-back queue of S's predecessor.  A Commissioner reject
  has no predecessor and stays in the Commissioner's own rejected queue,
  where it can be approved again (``is_approvable_by``) without being
  listed as pending.
"""

from __future__ import annotations

from works_kernel.domain.roles import Role, get_role_spec, is_downstream, successor
from works_kernel.domain.status import WorkflowPhase
from works_kernel.domain.submission import Submission


def section_matches(submission: Submission, role: Role) -> bool:
    """True when the forward routing key names ``role``.

    ``forwarded_to.section`` is compared trimmed and case-insensitively.
    Records without a routing record fall back to the status target.
    """
    routed = submission.forwarded_to
    if routed is None:
        return submission.status.is_forwarded_to(role)
    token = get_role_spec(role).section_token
    return (routed.section or "").strip().casefold() == token.casefold()


def is_pending_for(submission: Submission, role: Role) -> bool:
    """Awaiting action by ``role``."""
    status = submission.status
    if role == Role.COMMISSIONER:
        return status.is_pending_review
    return status.is_forwarded_to(role) and section_matches(submission, role)


def is_approvable_by(submission: Submission, role: Role) -> bool:
    """Pending for ``role``, or a Commissioner reject back for re-review."""
    if role == Role.COMMISSIONER and submission.status.is_rejected_by(role):
        return True
    return is_pending_for(submission, role)


def is_approved_by_self(submission: Submission, role: Role) -> bool:
    return submission.status.is_approved_by(role)


def is_rejected_by_self(submission: Submission, role: Role) -> bool:
    return submission.status.is_rejected_by(role)


def is_forwarded_past(submission: Submission, role: Role) -> bool:
    """Approved by ``role`` and now further down the chain.

    Covers records forwarded to a later role and records a later role has
    approved.  Records a later role rejected are excluded; the rejecting
    role's predecessor sees those as sent back.

    Other roles need their own stamp, since a forward may skip them.  The
    Commissioner does not: every record enters through the Commissioner,
    so chain position alone places a record past it even when a loaded
    record lost the stamp.
    """
    if role != Role.COMMISSIONER and submission.stamp_for(role) is None:
        return False
    status = submission.status
    if status.phase == WorkflowPhase.FORWARDED:
        return is_downstream(role, status.target)
    if status.phase == WorkflowPhase.APPROVED:
        return is_downstream(role, status.role)
    return False


def is_sent_back_to(submission: Submission, role: Role) -> bool:
    """Rejected by the next role in the chain and returned to ``role``."""
    nxt = successor(role)
    return nxt is not None and submission.status.is_rejected_by(nxt)


def is_visible_to(submission: Submission, role: Role) -> bool:
    """Belongs to any of ``role``'s queues.

    The Commissioner sees every record: all proposals enter the chain
    through the Commissioner's queue.
    """
    if role == Role.COMMISSIONER:
        return True
    return (
        is_pending_for(submission, role)
        or is_approved_by_self(submission, role)
        or is_rejected_by_self(submission, role)
        or is_forwarded_past(submission, role)
        or is_sent_back_to(submission, role)
    )
