"""
Kernel Invariants Contract.

These invariants are structural law for every transition.  No
configuration may switch them off.  ``verify_carry_forward`` is the
post-transition check the engine runs on every record it changes.
"""

from __future__ import annotations

from enum import Enum, unique

from works_kernel.domain.roles import ROLE_CHAIN, Role
from works_kernel.domain.submission import ATTACHMENT_FIELDS, Submission
from works_kernel.exceptions import CarryForwardViolationError


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    ATTACHMENT_PRESERVATION = "attachment_preservation"
    """Every attachment reference present before a transition is present
    and identical (``is``) after it."""

    STAMP_MONOTONICITY = "stamp_monotonicity"
    """A verification stamp, once set, is never cleared or replaced by a
    transition of any role."""

    IDENTITY = "identity"
    """A transition never changes a record's id."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "works_engines",
    "works_services",
    "works_config",
)


def verify_carry_forward(before: Submission, after: Submission, actor: Role) -> None:
    """Check that a transition by ``actor`` carried everything forward.

    Raises:
        CarryForwardViolationError: naming the first field found dropped
            or altered.
    """
    if after.id != before.id:
        raise CarryForwardViolationError(before.id, "id", f"changed to {after.id}")

    for name in ATTACHMENT_FIELDS:
        old = getattr(before, name)
        if old is not None and getattr(after, name) is not old:
            raise CarryForwardViolationError(
                before.id, name, "attachment reference dropped or replaced"
            )

    for spec in ROLE_CHAIN:
        old = getattr(before, spec.stamp_field)
        if old is None:
            if spec.role != actor and getattr(after, spec.stamp_field) is not None:
                raise CarryForwardViolationError(
                    before.id, spec.stamp_field, f"set by {actor.value}"
                )
            continue
        if getattr(after, spec.stamp_field) != old:
            raise CarryForwardViolationError(
                before.id, spec.stamp_field, "existing stamp cleared or replaced"
            )

    if before.forwarded_from is not None and after.forwarded_from != before.forwarded_from:
        raise CarryForwardViolationError(
            before.id, "forwarded_from", "origin stamp cleared or replaced"
        )
