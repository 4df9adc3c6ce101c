"""Tests for the camelCase record codec."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from works_kernel.domain.codec import (
    format_cost,
    parse_cost,
    parse_timestamp,
    submission_from_dict,
    submission_to_dict,
)
from works_kernel.domain.roles import Role
from works_kernel.domain.status import PENDING_REVIEW, forwarded_to
from works_kernel.exceptions import UnknownStatusError


def _source_record(**overrides) -> dict:
    record = {
        "id": "abc123",
        "status": "Forwarded to SEPH",
        "sector": "Water",
        "proposal": "New pipeline",
        "cost": 2500000,
        "wardNo": "4",
        "crNumber": "CR-11",
        "crDate": "2024-02-01",
        "priority": "2",
        "workImage": "blob://img/1",
        "detailedReport": {"url": "https://files/dpr.pdf"},
        "selection": {"year": "2024", "installment": "1", "grantType": "Tied", "program": "15FC"},
        "forwardedTo": {
            "department": "Administration",
            "section": "SEPH",
            "remarks": "urgent",
            "timestamp": "2024-02-03T09:30:00Z",
        },
        "forwardedFrom": {"name": "Asha", "designation": "Engineer", "timestamp": "2024-01-30"},
        "commissionerVerifiedBy": {
            "name": "K. Rao",
            "designation": "Commissioner",
            "timestamp": "2024-02-01T10:00:00+05:30",
        },
        "eephVerifiedBy": {"name": "M. Das", "designation": "EEPH", "timestamp": "yesterday"},
        "createdBy": "uid-77",
    }
    record.update(overrides)
    return record


class TestSubmissionFromDict:
    def test_maps_wire_keys(self):
        record = submission_from_dict(_source_record())

        assert record.id == "abc123"
        assert record.status == forwarded_to(Role.SEPH)
        assert record.ward_no == "4"
        assert record.cr_number == "CR-11"
        assert record.cost == Decimal("2500000")
        assert record.selection.grant_type == "Tied"
        assert record.forwarded_to.section == "SEPH"
        assert record.forwarded_to.timestamp == datetime(2024, 2, 3, 9, 30, tzinfo=timezone.utc)
        assert record.commissioner_verified_by.name == "K. Rao"
        assert record.forwarded_from.designation == "Engineer"

    def test_unparseable_timestamp_kept_verbatim(self):
        record = submission_from_dict(_source_record())
        assert record.eeph_verified_by.timestamp == "yesterday"

    def test_unknown_keys_kept_in_extra(self):
        record = submission_from_dict(_source_record())
        assert record.extra == {"createdBy": "uid-77"}

    def test_attachments_passed_by_reference(self):
        report = {"url": "https://files/dpr.pdf"}
        record = submission_from_dict(_source_record(detailedReport=report))
        assert record.detailed_report is report

    def test_numeric_id_becomes_text(self):
        assert submission_from_dict({"id": 42}).id == "42"

    def test_missing_status_is_pending(self):
        assert submission_from_dict({"id": "x"}).status == PENDING_REVIEW

    def test_missing_id_raises(self):
        with pytest.raises(KeyError):
            submission_from_dict({"status": "Approved"})

    def test_unknown_status_raises(self):
        with pytest.raises(UnknownStatusError):
            submission_from_dict({"id": "x", "status": "Archived"})


class TestSubmissionToDict:
    def test_round_trip_preserves_record(self):
        source = _source_record()
        written = submission_to_dict(submission_from_dict(source))

        assert written["status"] == "Forwarded to SEPH"
        assert written["createdBy"] == "uid-77"
        assert written["selection"]["grantType"] == "Tied"
        assert written["forwardedTo"]["timestamp"] == "2024-02-03T09:30:00+00:00"
        assert written["eephVerifiedBy"]["timestamp"] == "yesterday"
        assert written["sephVerifiedBy"] is None
        assert written["cost"] == 2500000
        assert submission_from_dict(written) == submission_from_dict(source)


class TestScalars:
    def test_parse_cost(self):
        assert parse_cost("1250.50") == Decimal("1250.50")
        assert parse_cost(None) is None
        assert parse_cost("") is None
        with pytest.raises(ValueError):
            parse_cost("lots")

    def test_format_cost(self):
        assert format_cost(Decimal("100.00")) == 100
        assert format_cost(Decimal("99.5")) == 99.5
        assert format_cost(None) is None

    def test_parse_timestamp(self):
        assert parse_timestamp("") is None
        assert parse_timestamp("2024-01-01T00:00:00") == datetime(2024, 1, 1)
        assert parse_timestamp("not a date") == "not a date"
