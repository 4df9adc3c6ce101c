"""Tests for command value objects and CommandResult."""

from tests.factories import make_submission
from works_kernel.domain.commands import (
    Approve,
    BulkReject,
    CommandKind,
    CommandResult,
    Forward,
    Reject,
    RejectedId,
    VerificationPayload,
)
from works_kernel.domain.roles import Role


class TestCommands:
    def test_single_commands_expose_ids(self):
        assert Approve(Role.EEPH, "a", VerificationPayload("N")).ids == ("a",)
        assert Reject(Role.EEPH, "b", "bad").ids == ("b",)
        assert Forward(Role.EEPH, "c", "SEPH", confirmed=True).ids == ("c",)

    def test_kinds(self):
        assert Approve.kind == CommandKind.APPROVE
        assert BulkReject(Role.SEPH, ("a",), "x").kind == CommandKind.BULK_REJECT


class TestCommandResult:
    def test_full_success(self):
        result = CommandResult(
            CommandKind.APPROVE, Role.EEPH, updated_records=(make_submission("a"),)
        )
        assert result.succeeded
        assert not result.is_partial_failure
        assert result.updated_ids == ("a",)

    def test_partial_failure(self):
        failure = RejectedId("b", "INVALID_TRANSITION", "not pending")
        result = CommandResult(
            CommandKind.BULK_APPROVE,
            Role.EEPH,
            updated_records=(make_submission("a"),),
            rejected_ids=(failure,),
        )
        assert not result.succeeded
        assert result.is_partial_failure
        assert result.reason_for("b") is failure
        assert result.reason_for("a") is None

    def test_total_failure_is_not_partial(self):
        result = CommandResult(
            CommandKind.REJECT,
            Role.SEPH,
            rejected_ids=(RejectedId("a", "MISSING_REQUIRED_FIELD", "remarks"),),
        )
        assert not result.succeeded
        assert not result.is_partial_failure
