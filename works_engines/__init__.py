"""
Works Engines - Pure calculation layer for the approval chain.

Engines take submissions and command inputs and return new submissions
or projections.  They perform no I/O, read no clock and hold no state.

Engines:
    transition   -- approve / reject / forward state machine, batch runner
    audit_trail  -- verification timeline projection
"""

from works_engines.audit_trail import AuditTrailEntry, build_audit_trail
from works_engines.transition import (
    BatchOutcome,
    approve,
    check_approve_inputs,
    check_forward_inputs,
    check_reject_inputs,
    forward,
    reject,
    resolve_destination,
    run_batch,
)

__all__ = [
    "AuditTrailEntry",
    "BatchOutcome",
    "approve",
    "build_audit_trail",
    "check_approve_inputs",
    "check_forward_inputs",
    "check_reject_inputs",
    "forward",
    "reject",
    "resolve_destination",
    "run_batch",
]
