"""
Tests for the workflow command facade.

Tests cover:
- end-to-end approve / forward / reject across roles
- bulk commands with partial success
- store commit semantics and version bumps
- structured transition logging
- configured forward targets and designations
"""

import pytest

from tests.factories import FIXED_NOW, make_approved_by, make_forwarded_to, make_submission
from works_config.schema import DesignationDef, WorkflowConfig
from works_kernel.domain.commands import (
    Approve,
    BulkApprove,
    BulkForward,
    BulkReject,
    CommandKind,
    Forward,
    Reject,
    VerificationPayload,
)
from works_kernel.domain.roles import Role
from works_kernel.exceptions import SubmissionNotFoundError, UnknownRoleError
from works_kernel.selectors.view_selector import ViewName
from works_kernel.services.submission_store import SubmissionStore
from works_services import WorkflowCommandFacade


def _verify(name: str = "Officer") -> VerificationPayload:
    return VerificationPayload(name=name)


def _ids(records):
    return [r.id for r in records]


class TestEndToEnd:
    def test_commissioner_approve_then_forward(self, facade, store):
        store.add(make_submission("w1"))

        result = facade.submit(Approve(Role.COMMISSIONER, "w1", _verify("K. Rao")))
        assert result.succeeded
        assert store.get("w1").status.display == "Approved"
        assert store.get("w1").commissioner_verified_by.timestamp == FIXED_NOW

        result = facade.submit(Forward(Role.COMMISSIONER, "w1", "EEPH", confirmed=True))
        assert result.succeeded
        assert store.get("w1").status.display == "Forwarded to EEPH"
        assert store.get("w1").forwarded_to.department == "Administration"
        assert store.get("w1").forwarded_to.section == "EEPH"
        assert store.get("w1").commissioner_verified_by.name == "K. Rao"
        assert _ids(facade.list_view(Role.EEPH, ViewName.PENDING)) == ["w1"]
        assert _ids(facade.list_view(Role.COMMISSIONER, ViewName.APPROVED)) == ["w1"]

    def test_seph_reject_bounces_to_eeph(self, facade, store):
        store.add(make_forwarded_to(Role.SEPH, "w2"))

        result = facade.submit(Reject(Role.SEPH, "w2", "estimate incomplete"))

        assert result.succeeded
        assert store.get("w2").status.display == "SEPH Rejected"
        assert _ids(facade.list_view(Role.EEPH, ViewName.SENT_BACK_REJECTED)) == ["w2"]
        assert _ids(facade.list_view(Role.SEPH, ViewName.PENDING)) == []

    def test_commissioner_rejection_can_be_approved_later(self, facade, store):
        store.add(make_submission("w5"))

        assert facade.submit(Reject(Role.COMMISSIONER, "w5", "missing estimate")).succeeded
        assert _ids(facade.list_view(Role.COMMISSIONER, ViewName.REJECTED)) == ["w5"]
        assert _ids(facade.list_view(Role.COMMISSIONER, ViewName.PENDING)) == []

        result = facade.submit(Approve(Role.COMMISSIONER, "w5", _verify("K. Rao")))

        assert result.succeeded
        assert store.get("w5").status.display == "Approved"
        assert _ids(facade.list_view(Role.COMMISSIONER, ViewName.REJECTED)) == []
        assert _ids(facade.list_view(Role.COMMISSIONER, ViewName.APPROVED)) == ["w5"]

    def test_full_chain_to_cdma(self, facade, store):
        store.add(make_submission("w3"))
        chain = [Role.COMMISSIONER, Role.EEPH, Role.SEPH, Role.ENCPH, Role.CDMA]
        for index, role in enumerate(chain):
            assert facade.submit(Approve(role, "w3", _verify(role.value))).succeeded
            if index + 1 < len(chain):
                forward = Forward(role, "w3", chain[index + 1], confirmed=True)
                assert facade.submit(forward).succeeded

        record = store.get("w3")
        assert record.status.display == "CDMA Approved"
        trail = facade.build_audit_trail("w3", include_origin=True)
        assert [e.step_index for e in trail] == [5, 4, 3, 2, 1, 0]
        assert trail[0].name == "CDMA"

    def test_role_may_be_given_as_text(self, facade, store):
        store.add(make_submission("w4"))
        result = facade.submit(Approve("commissioner", "w4", _verify()))
        assert result.role == Role.COMMISSIONER
        assert result.succeeded


class TestBulkCommands:
    def test_bulk_approve_partial_success(self, facade, store):
        store.add(make_forwarded_to(Role.EEPH, "a"))
        store.add(make_approved_by(Role.EEPH, "b"))
        store.add(make_forwarded_to(Role.EEPH, "c"))

        result = facade.submit(BulkApprove(Role.EEPH, ("a", "b", "c"), _verify()))

        assert result.kind == CommandKind.BULK_APPROVE
        assert result.is_partial_failure
        assert result.updated_ids == ("a", "c")
        assert result.reason_for("b").code == "INVALID_TRANSITION"
        assert store.get("a").status.display == "EEPH Approved"
        assert store.get("b").status.display == "EEPH Approved"
        assert store.get("b").eeph_verified_by.name == "EEPH Officer"

    def test_bulk_reject_without_remarks_rejects_all(self, facade, store):
        store.add(make_submission("a"))
        store.add(make_submission("b"))
        version = store.version

        result = facade.submit(BulkReject(Role.COMMISSIONER, ("a", "b"), "  "))

        assert result.updated_records == ()
        assert {r.code for r in result.rejected_ids} == {"MISSING_REQUIRED_FIELD"}
        assert store.version == version

    def test_bulk_forward_uses_configured_targets(self, facade, store):
        store.add(make_approved_by(Role.COMMISSIONER, "a"))
        store.add(make_approved_by(Role.COMMISSIONER, "b"))

        result = facade.submit(
            BulkForward(Role.COMMISSIONER, ("a", "b"), "ENCPH", confirmed=True, remarks="fast track")
        )

        assert result.succeeded
        assert _ids(facade.list_view(Role.ENCPH, "pending")) == ["a", "b"]
        assert store.get("a").remarks == "fast track"

    def test_unconfirmed_forward_changes_nothing(self, facade, store):
        store.add(make_approved_by(Role.COMMISSIONER, "a"))
        result = facade.submit(BulkForward(Role.COMMISSIONER, ("a",), "EEPH"))
        assert result.rejected_ids[0].code == "NOT_CONFIRMED"
        assert store.get("a").status.display == "Approved"

    def test_one_commit_per_command(self, facade, store):
        store.add(make_submission("a"))
        store.add(make_submission("b"))
        version = store.version
        facade.submit(BulkApprove(Role.COMMISSIONER, ("a", "b"), _verify()))
        assert store.version == version + 1

    def test_unknown_id_reported(self, facade):
        result = facade.submit(Reject(Role.COMMISSIONER, "ghost", "no"))
        assert result.rejected_ids[0].code == "SUBMISSION_NOT_FOUND"

    def test_missing_remarks_reported_for_unknown_ids_too(self, facade, store):
        store.add(make_submission("a"))
        result = facade.submit(BulkReject(Role.COMMISSIONER, ("a", "ghost"), ""))

        assert [r.submission_id for r in result.rejected_ids] == ["a", "ghost"]
        assert {r.code for r in result.rejected_ids} == {"MISSING_REQUIRED_FIELD"}

    def test_missing_destination_reported_for_unknown_ids_too(self, facade):
        result = facade.submit(BulkForward(Role.COMMISSIONER, ("ghost",), " ", confirmed=True))
        assert result.rejected_ids[0].code == "MISSING_DESTINATION"

    def test_unknown_role_raises(self, facade):
        with pytest.raises(UnknownRoleError):
            facade.submit(Reject("Engineer", "a", "no"))


class TestConfiguration:
    def test_forward_targets_from_config(self, facade):
        assert facade.forward_targets(Role.EEPH) == (Role.SEPH, Role.ENCPH)
        assert facade.forward_targets("CDMA") == ()

    def test_default_config_forwards_to_successor_only(self, deterministic_clock):
        store = SubmissionStore([make_approved_by(Role.COMMISSIONER, "a")])
        facade = WorkflowCommandFacade(store, clock=deterministic_clock)
        result = facade.submit(Forward(Role.COMMISSIONER, "a", "SEPH", confirmed=True))
        assert result.rejected_ids[0].code == "INVALID_DESTINATION"

    def test_configured_designation_and_department(self, deterministic_clock):
        config = WorkflowConfig(
            default_department="Public Health",
            designations=(DesignationDef(Role.COMMISSIONER, "Municipal Commissioner"),),
        )
        store = SubmissionStore([make_submission("a")])
        facade = WorkflowCommandFacade(store, clock=deterministic_clock, config=config)

        facade.submit(Approve(Role.COMMISSIONER, "a", _verify()))
        facade.submit(Forward(Role.COMMISSIONER, "a", "EEPH", confirmed=True))

        record = store.get("a")
        assert record.commissioner_verified_by.designation == "Municipal Commissioner"
        assert record.forwarded_to.department == "Public Health"


class TestQueries:
    def test_view_counts(self, facade, store):
        store.add(make_submission("a"))
        store.add(make_approved_by(Role.COMMISSIONER, "b"))
        counts = facade.view_counts("Commissioner")
        assert counts[ViewName.PENDING] == 1
        assert counts[ViewName.APPROVED] == 1
        assert counts[ViewName.ALL_WORKS] == 2

    def test_cr_groups(self, facade, store):
        store.add(make_submission("a", cr_number="CR-1"))
        store.add(make_submission("b", cr_number=None))
        groups = facade.cr_groups(Role.COMMISSIONER)
        assert [g.cr_number for g in groups] == ["CR-1", None]

    def test_audit_trail_unknown_id(self, facade):
        with pytest.raises(SubmissionNotFoundError):
            facade.build_audit_trail("ghost")


class TestLogging:
    def test_transition_traces(self, facade, store, captured_logs):
        store.add(make_submission("a"))
        facade.submit(BulkReject(Role.COMMISSIONER, ("a", "ghost"), "duplicate"))

        logs = captured_logs()
        traces = [r for r in logs if r["message"] == "workflow_transition"]
        assert {t["submission_id"]: t["outcome"] for t in traces} == {
            "a": "success",
            "ghost": "SUBMISSION_NOT_FOUND",
        }
        assert traces[0]["actor_role"] == "Commissioner"
        assert traces[0]["to_status"] == "Rejected"
        completed = [r for r in logs if r["message"] == "command_completed"]
        assert completed[0]["updated_count"] == 1
        assert completed[0]["rejected_count"] == 1

    def test_outcome_sink_receives_traces(self, deterministic_clock):
        seen = []
        store = SubmissionStore([make_submission("a")])
        facade = WorkflowCommandFacade(store, clock=deterministic_clock, outcome_sink=seen.append)
        facade.submit(Approve(Role.COMMISSIONER, "a", _verify()))
        assert seen[0]["outcome"] == "success"
        assert seen[0]["command"] == "approve"
