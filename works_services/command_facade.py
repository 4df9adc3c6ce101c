"""
works_services.command_facade -- Single entry point for dashboard screens.

Responsibility:
    Accepts workflow commands from the presentation layer, runs them
    through the pure transition engine against the current store snapshot,
    commits the changed records back in one step, and answers the view
    and audit-trail queries the screens render.  Each dashboard becomes a
    thin binding that supplies its role.

Architecture position:
    Services layer.  May import from works_engines/ (pure engines),
    works_kernel/ (domain, services, selectors) and works_config/.

Invariants enforced:
    - All mutation goes through ``submit``; screens never assign fields.
    - One command is one atomic store replace: ids that fail their own
      precondition are reported, the rest commit together.
    - Every requested id is accounted for in the result.

Failure modes:
    - UnknownRoleError when the command names no chain role.
    - CarryForwardViolationError propagates from the engine (defect).
    - Per-id workflow errors never raise; they become ``RejectedId``s.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable

from works_config.schema import WorkflowConfig
from works_engines.audit_trail import AuditTrailEntry, build_audit_trail
from works_engines.transition import (
    BatchOutcome,
    approve,
    check_approve_inputs,
    check_forward_inputs,
    check_reject_inputs,
    forward,
    reject,
    run_batch,
)
from works_kernel.domain.clock import Clock, SystemClock
from works_kernel.domain.commands import (
    Approve,
    BulkApprove,
    BulkForward,
    BulkReject,
    CommandResult,
    Forward,
    Reject,
    WorkflowCommand,
)
from works_kernel.domain.roles import Role, parse_role
from works_kernel.domain.submission import Submission
from works_kernel.logging_config import LogContext, get_logger
from works_kernel.selectors.view_selector import (
    ColumnFilters,
    CrGroup,
    ViewName,
    ViewSelector,
)
from works_kernel.services.submission_store import SubmissionStore

logger = get_logger("services.command_facade")

TRACE_TYPE_WORKFLOW_TRANSITION = "WORKFLOW_TRANSITION"
OUTCOME_SUCCESS = "success"


def _emit_transition_trace(
    kind: str,
    role: Role,
    submission_id: str,
    outcome: str,
    reason: str,
    to_status: str | None = None,
    outcome_sink: Callable[[dict], None] | None = None,
) -> None:
    """Emit one structured record per processed id."""
    record: dict[str, Any] = {
        "trace_type": TRACE_TYPE_WORKFLOW_TRANSITION,
        "ts": datetime.now(timezone.utc).isoformat(),
        "command": kind,
        "role": role.value,
        "submission_id": submission_id,
        "outcome": outcome,
        "reason": reason,
    }
    if to_status is not None:
        record["to_status"] = to_status
    record.update(LogContext.get_all())
    logger.info("workflow_transition", extra=record)
    if outcome_sink is not None:
        outcome_sink(dict(record, message="workflow_transition"))


class WorkflowCommandFacade:
    """Command/query API over one submission store."""

    def __init__(
        self,
        store: SubmissionStore,
        clock: Clock | None = None,
        config: WorkflowConfig | None = None,
        outcome_sink: Callable[[dict], None] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._config = config or WorkflowConfig()
        self._outcome_sink = outcome_sink
        self._selector = ViewSelector(store)

    @property
    def store(self) -> SubmissionStore:
        return self._store

    @property
    def config(self) -> WorkflowConfig:
        return self._config

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _transition_for(
        self, command: WorkflowCommand, role: Role
    ) -> Callable[[Submission], Submission]:
        now = self._clock.now()
        if isinstance(command, (Approve, BulkApprove)):
            return partial(
                approve,
                role=role,
                verification=command.verification,
                now=now,
                default_designation=self._config.designation_for(role),
            )
        if isinstance(command, (Reject, BulkReject)):
            return partial(reject, role=role, remarks=command.remarks)
        if isinstance(command, (Forward, BulkForward)):
            return partial(
                forward,
                role=role,
                destination=command.destination,
                confirmed=command.confirmed,
                now=now,
                department=(command.department or "").strip()
                or self._config.default_department,
                remarks=command.remarks,
                permitted=self._config.targets_for(role),
            )
        raise TypeError(f"Unsupported command: {type(command).__name__}")

    @staticmethod
    def _input_check_for(command: WorkflowCommand) -> Callable[[str], None]:
        if isinstance(command, (Approve, BulkApprove)):
            return partial(check_approve_inputs, verification=command.verification)
        if isinstance(command, (Reject, BulkReject)):
            return partial(check_reject_inputs, remarks=command.remarks)
        return partial(
            check_forward_inputs,
            destination=command.destination,
            confirmed=command.confirmed,
        )

    def submit(self, command: WorkflowCommand) -> CommandResult:
        """Validate and apply ``command``; return the structured outcome."""
        role = parse_role(command.role)
        kind = command.kind.value
        actor_name = None
        verification = getattr(command, "verification", None)
        if verification is not None:
            actor_name = verification.name

        with LogContext.bind(actor_role=role.value, actor_name=actor_name, command=kind):
            t0 = time.monotonic()
            apply = self._transition_for(command, role)
            snapshot = {record.id: record for record in self._store.records()}
            outcome: BatchOutcome = run_batch(
                snapshot, command.ids, apply, self._input_check_for(command)
            )
            self._store.replace(outcome.updated)

            for record in outcome.updated:
                _emit_transition_trace(
                    kind, role, record.id, OUTCOME_SUCCESS, "applied",
                    to_status=record.status.display,
                    outcome_sink=self._outcome_sink,
                )
            for failed in outcome.rejected:
                _emit_transition_trace(
                    kind, role, failed.submission_id, failed.code, failed.reason,
                    outcome_sink=self._outcome_sink,
                )

            logger.info(
                "command_completed",
                extra={
                    "updated_count": len(outcome.updated),
                    "rejected_count": len(outcome.rejected),
                    "store_version": self._store.version,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 3),
                },
            )

        return CommandResult(
            kind=command.kind,
            role=role,
            updated_records=outcome.updated,
            rejected_ids=outcome.rejected,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_view(
        self,
        role: Role | str,
        view: ViewName | str,
        filters: ColumnFilters | None = None,
    ) -> tuple[Submission, ...]:
        return self._selector.view(parse_role(role), view, filters)

    def cr_groups(
        self, role: Role | str, filters: ColumnFilters | None = None
    ) -> tuple[CrGroup, ...]:
        return self._selector.cr_groups(parse_role(role), filters)

    def view_counts(self, role: Role | str) -> dict[ViewName, int]:
        return self._selector.counts(parse_role(role))

    def filter_options(self, role: Role | str, view: ViewName | str) -> dict[str, tuple[str, ...]]:
        return self._selector.filter_options(parse_role(role), view)

    def forward_targets(self, role: Role | str) -> tuple[Role, ...]:
        """Sections the role's forward dropdown offers."""
        return self._config.targets_for(parse_role(role))

    def build_audit_trail(
        self,
        record: Submission | str,
        include_origin: bool = False,
    ) -> tuple[AuditTrailEntry, ...]:
        """Timeline for a record, or for the stored record with that id."""
        if isinstance(record, str):
            record = self._store.get(record)
        return build_audit_trail(record, include_origin=include_origin)
