"""
works_kernel.services.submission_store -- Canonical in-memory proposal store.

Responsibility:
    Holds the one collection of submissions every dashboard reads from and
    offers primitive, rule-free mutations: add, atomic replace, and field
    edits for the editing collaborator.  Business rules live in the
    transition engine; the store only guarantees identity and ordering.

Architecture position:
    Kernel > Services.  May import from domain/.

Invariants enforced:
    - Ids are unique; insertion order is preserved (views sort stably on it).
    - ``replace`` is all-or-nothing: an unknown id aborts the whole swap.
    - Workflow-owned fields cannot be changed through ``edit``.

Failure modes:
    - SubmissionNotFoundError on unknown ids.
    - DuplicateSubmissionError on adding an existing id.
    - ProtectedFieldError when ``edit`` targets workflow-owned fields.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Iterator, Mapping

from works_kernel.domain.codec import submission_from_dict, submission_to_dict
from works_kernel.domain.roles import STAMP_FIELDS
from works_kernel.domain.submission import Submission
from works_kernel.exceptions import (
    DuplicateSubmissionError,
    ProtectedFieldError,
    SubmissionNotFoundError,
)
from works_kernel.logging_config import get_logger

logger = get_logger("services.submission_store")

PROTECTED_FIELDS: frozenset[str] = frozenset(
    {"id", "status", "forwarded_to", "rejected_by", "forwarded_from"} | set(STAMP_FIELDS)
)


class SubmissionStore:
    """Ordered, id-keyed collection of ``Submission`` records."""

    def __init__(self, records: Iterable[Submission] = ()) -> None:
        self._records: dict[str, Submission] = {}
        self._version = 0
        for record in records:
            self.add(record)

    @classmethod
    def from_dicts(cls, rows: Iterable[Mapping[str, Any]]) -> "SubmissionStore":
        """Build a store from source records (camelCase dicts)."""
        return cls(submission_from_dict(row) for row in rows)

    def to_dicts(self) -> list[dict[str, Any]]:
        return [submission_to_dict(record) for record in self._records.values()]

    @property
    def version(self) -> int:
        """Incremented on every successful mutation."""
        return self._version

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, submission_id: object) -> bool:
        return submission_id in self._records

    def __iter__(self) -> Iterator[Submission]:
        return iter(self.records())

    def records(self) -> tuple[Submission, ...]:
        """Read-only snapshot in insertion order."""
        return tuple(self._records.values())

    def get(self, submission_id: str) -> Submission:
        try:
            return self._records[submission_id]
        except KeyError:
            raise SubmissionNotFoundError(submission_id) from None

    def find(self, submission_id: str) -> Submission | None:
        return self._records.get(submission_id)

    def add(self, record: Submission) -> None:
        if record.id in self._records:
            raise DuplicateSubmissionError(record.id)
        self._records[record.id] = record
        self._version += 1

    def replace(self, records: Iterable[Submission]) -> None:
        """Swap in new versions of existing records in one step."""
        batch = list(records)
        for record in batch:
            if record.id not in self._records:
                raise SubmissionNotFoundError(record.id)
        if not batch:
            return
        for record in batch:
            self._records[record.id] = record
        self._version += 1
        logger.debug(
            "store_replaced",
            extra={"replaced_ids": [r.id for r in batch], "store_version": self._version},
        )

    def edit(self, submission_id: str, **changes: Any) -> Submission:
        """Apply descriptive-field edits made outside the workflow.

        Raises:
            SubmissionNotFoundError: unknown id.
            ProtectedFieldError: a change targets a workflow-owned field.
            TypeError: a change names a field ``Submission`` does not have.
        """
        current = self.get(submission_id)
        blocked = tuple(sorted(name for name in changes if name in PROTECTED_FIELDS))
        if blocked:
            raise ProtectedFieldError(submission_id, blocked)
        updated = dataclasses.replace(current, **changes)
        self._records[submission_id] = updated
        self._version += 1
        return updated
