"""
Submission codec (``works_kernel.domain.codec``).

Responsibility
--------------
Translates between the camelCase record format produced by the
submission source (``forwardedTo``, ``commissionerVerifiedBy``,
``crNumber`` ...) and the kernel's ``Submission`` value object.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.

Invariants enforced
-------------------
* Keys the kernel does not model are kept in ``Submission.extra`` and
  written back unchanged, so a load/save cycle never drops data.
* Attachment values are passed through by reference in both directions.
* Status strings are parsed here and nowhere else.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from works_kernel.domain.status import parse_status
from works_kernel.domain.submission import (
    ForwardedTo,
    Selection,
    Submission,
    VerificationStamp,
)

# (wire key, model attribute) for plain scalar fields
_SCALAR_FIELDS: tuple[tuple[str, str], ...] = (
    ("sector", "sector"),
    ("proposal", "proposal"),
    ("area", "area"),
    ("locality", "locality"),
    ("wardNo", "ward_no"),
    ("latlong", "latlong"),
    ("priority", "priority"),
    ("crNumber", "cr_number"),
    ("crDate", "cr_date"),
    ("workImage", "work_image"),
    ("detailedReport", "detailed_report"),
    ("committeeReport", "committee_report"),
    ("councilResolution", "council_resolution"),
    ("rejectedBy", "rejected_by"),
)

_STAMP_FIELDS: tuple[tuple[str, str], ...] = (
    ("forwardedFrom", "forwarded_from"),
    ("commissionerVerifiedBy", "commissioner_verified_by"),
    ("eephVerifiedBy", "eeph_verified_by"),
    ("sephVerifiedBy", "seph_verified_by"),
    ("encphVerifiedBy", "encph_verified_by"),
    ("cdmaVerifiedBy", "cdma_verified_by"),
)

_KNOWN_KEYS: frozenset[str] = frozenset(
    {"id", "status", "cost", "selection", "forwardedTo", "remarks"}
    | {wire for wire, _ in _SCALAR_FIELDS}
    | {wire for wire, _ in _STAMP_FIELDS}
)


def parse_timestamp(value: Any) -> datetime | str | None:
    """ISO-8601 text becomes a ``datetime``; anything else is kept verbatim."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return text
    return str(value)


def format_timestamp(value: datetime | str | None) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def parse_cost(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid cost: {value!r}") from None


def format_cost(value: Decimal | None) -> int | float | None:
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def stamp_from_dict(data: Mapping[str, Any] | None) -> VerificationStamp | None:
    if not data:
        return None
    return VerificationStamp(
        name=data.get("name") or "",
        designation=data.get("designation") or "",
        timestamp=parse_timestamp(data.get("timestamp")),
    )


def stamp_to_dict(stamp: VerificationStamp | None) -> dict[str, Any] | None:
    if stamp is None:
        return None
    return {
        "name": stamp.name,
        "designation": stamp.designation,
        "timestamp": format_timestamp(stamp.timestamp),
    }


def _forwarded_to_from_dict(data: Mapping[str, Any] | None) -> ForwardedTo | None:
    if not data:
        return None
    return ForwardedTo(
        department=data.get("department") or "",
        section=data.get("section") or "",
        remarks=data.get("remarks") or "",
        timestamp=parse_timestamp(data.get("timestamp")),
    )


def _selection_from_dict(data: Mapping[str, Any] | None) -> Selection | None:
    if not data:
        return None
    return Selection(
        year=data.get("year"),
        installment=data.get("installment"),
        grant_type=data.get("grantType"),
        program=data.get("program"),
    )


def submission_from_dict(data: Mapping[str, Any]) -> Submission:
    """Build a ``Submission`` from a source record.

    Raises:
        KeyError: if the record has no ``id``.
        UnknownStatusError: if ``status`` is outside the vocabulary.
        ValueError: if ``cost`` is not numeric.
    """
    if data.get("id") in (None, ""):
        raise KeyError("id")

    kwargs: dict[str, Any] = {
        attr: data.get(wire) for wire, attr in _SCALAR_FIELDS
    }
    kwargs.update(
        {attr: stamp_from_dict(data.get(wire)) for wire, attr in _STAMP_FIELDS}
    )
    return Submission(
        id=str(data["id"]),
        status=parse_status(data.get("status")),
        cost=parse_cost(data.get("cost")),
        selection=_selection_from_dict(data.get("selection")),
        forwarded_to=_forwarded_to_from_dict(data.get("forwardedTo")),
        remarks=data.get("remarks") or "",
        extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        **kwargs,
    )


def submission_to_dict(submission: Submission) -> dict[str, Any]:
    """Render a ``Submission`` in the source record format."""
    out: dict[str, Any] = dict(submission.extra)
    out["id"] = submission.id
    out["status"] = submission.status.display
    out["cost"] = format_cost(submission.cost)
    for wire, attr in _SCALAR_FIELDS:
        out[wire] = getattr(submission, attr)
    out["remarks"] = submission.remarks

    selection = submission.selection
    out["selection"] = None if selection is None else {
        "year": selection.year,
        "installment": selection.installment,
        "grantType": selection.grant_type,
        "program": selection.program,
    }

    forwarded = submission.forwarded_to
    out["forwardedTo"] = None if forwarded is None else {
        "department": forwarded.department,
        "section": forwarded.section,
        "remarks": forwarded.remarks,
        "timestamp": format_timestamp(forwarded.timestamp),
    }

    for wire, attr in _STAMP_FIELDS:
        out[wire] = stamp_to_dict(getattr(submission, attr))
    return out
