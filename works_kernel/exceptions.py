"""
Typed Exception Hierarchy for the Works Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The dashboards that consume this kernel decide how a failure is shown
(banner, modal, inline message). They can only do that if every failure
is identifiable without parsing message text:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, UI-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        engine.reject(record, Role.SEPH, remarks)
    except Exception as e:
        if "remarks" in str(e):  # FRAGILE - message might change
            show_remarks_prompt()

Example - RIGHT way (what this module enables):
    try:
        engine.reject(record, Role.SEPH, remarks)
    except MissingRequiredFieldError as e:     # Typed catch
        show_prompt(field=e.field_name)         # Structured data

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from WorksKernelError:

    WorksKernelError (base)
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |   |   +-- InvalidDestinationError
    |   +-- MissingRequiredFieldError
    |   |   +-- MissingDestinationError
    |   +-- NotConfirmedError
    |
    +-- RoleError
    |   +-- UnknownRoleError
    |
    +-- SubmissionError
    |   +-- SubmissionNotFoundError
    |   +-- DuplicateSubmissionError
    |   +-- ProtectedFieldError
    |   +-- UnknownStatusError
    |
    +-- AuditError
        +-- CarryForwardViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Workflow        | INVALID_TRANSITION          | Current status does not allow the command
                | INVALID_DESTINATION         | Forward target is not a permitted section
                | MISSING_REQUIRED_FIELD      | Remarks / verifier name not supplied
                | MISSING_DESTINATION         | Forward without a destination section
                | NOT_CONFIRMED               | Forward without explicit confirmation
----------------|-----------------------------|-----------------------------------------
Role            | UNKNOWN_ROLE                | Text does not name a chain role
----------------|-----------------------------|-----------------------------------------
Submission      | SUBMISSION_NOT_FOUND        | Id not present in the store
                | DUPLICATE_SUBMISSION        | Id already present in the store
                | PROTECTED_FIELD             | Editor tried to change workflow fields
                | UNKNOWN_STATUS              | Status text outside the vocabulary
----------------|-----------------------------|-----------------------------------------
Audit           | CARRY_FORWARD_VIOLATION     | A transition dropped an attachment or
                |                             | altered another role's stamp

Workflow errors raised for a single record inside a command are not
propagated: the command facade turns them into ``RejectedId`` entries.
Audit errors always propagate -- they indicate a defect, not bad input.
"""

from __future__ import annotations


class WorksKernelError(Exception):
    """
    Base exception for all works kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "WORKS_KERNEL_ERROR"


# Workflow-related exceptions


class WorkflowError(WorksKernelError):
    """Base exception for state-machine errors on a single record."""

    code: str = "WORKFLOW_ERROR"

    def __init__(self, submission_id: str | None, reason: str):
        self.submission_id = submission_id
        self.reason = reason
        super().__init__(reason)


class InvalidTransitionError(WorkflowError):
    """The record's current status does not allow the command."""

    code: str = "INVALID_TRANSITION"

    def __init__(
        self,
        submission_id: str | None,
        role: str,
        action: str,
        current_status: str,
        reason: str | None = None,
    ):
        self.role = role
        self.action = action
        self.current_status = current_status
        super().__init__(
            submission_id,
            reason
            or f"{role} cannot {action} submission {submission_id} "
            f"in status '{current_status}'",
        )


class InvalidDestinationError(InvalidTransitionError):
    """Forward target is not a section this role may forward to."""

    code: str = "INVALID_DESTINATION"

    def __init__(
        self,
        submission_id: str | None,
        role: str,
        destination: str,
        current_status: str,
    ):
        self.destination = destination
        super().__init__(
            submission_id,
            role,
            "forward",
            current_status,
            reason=f"{role} cannot forward submission {submission_id} to '{destination}'",
        )


class MissingRequiredFieldError(WorkflowError):
    """A field the command needs was not supplied."""

    code: str = "MISSING_REQUIRED_FIELD"

    def __init__(self, submission_id: str | None, field_name: str, action: str):
        self.field_name = field_name
        self.action = action
        super().__init__(
            submission_id,
            f"'{field_name}' is required to {action} submission {submission_id}",
        )


class MissingDestinationError(MissingRequiredFieldError):
    """Forward attempted without selecting a destination section."""

    code: str = "MISSING_DESTINATION"

    def __init__(self, submission_id: str | None):
        super().__init__(submission_id, "destination", "forward")


class NotConfirmedError(WorkflowError):
    """Forward attempted without the explicit human confirmation."""

    code: str = "NOT_CONFIRMED"

    def __init__(self, submission_id: str | None):
        super().__init__(
            submission_id,
            f"Forwarding submission {submission_id} requires confirmation "
            "('Scrutinized and Recommended')",
        )


# Role-related exceptions


class RoleError(WorksKernelError):
    """Base exception for role-registry errors."""

    code: str = "ROLE_ERROR"


class UnknownRoleError(RoleError):
    """Text does not name one of the approving roles."""

    code: str = "UNKNOWN_ROLE"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown role: '{value}'")


# Submission-related exceptions


class SubmissionError(WorksKernelError):
    """Base exception for submission store errors."""

    code: str = "SUBMISSION_ERROR"


class SubmissionNotFoundError(SubmissionError):
    """Submission with given ID was not found."""

    code: str = "SUBMISSION_NOT_FOUND"

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission not found: {submission_id}")


class DuplicateSubmissionError(SubmissionError):
    """Submission with given ID already exists."""

    code: str = "DUPLICATE_SUBMISSION"

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission already exists: {submission_id}")


class ProtectedFieldError(SubmissionError):
    """Editor attempted to change a field owned by the workflow."""

    code: str = "PROTECTED_FIELD"

    def __init__(self, submission_id: str, field_names: tuple[str, ...]):
        self.submission_id = submission_id
        self.field_names = field_names
        super().__init__(
            f"Fields {', '.join(field_names)} of submission {submission_id} "
            "can only change through workflow commands"
        )


class UnknownStatusError(SubmissionError):
    """Status text outside the workflow vocabulary."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, status_text: str):
        self.status_text = status_text
        super().__init__(f"Unknown workflow status: '{status_text}'")


# Audit-related exceptions


class AuditError(WorksKernelError):
    """Base exception for audit-trail integrity errors."""

    code: str = "AUDIT_ERROR"


class CarryForwardViolationError(AuditError):
    """
    A transition lost data it was required to carry forward.

    Every transition must keep attachment references identical and must
    leave other roles' verification stamps untouched.
    """

    code: str = "CARRY_FORWARD_VIOLATION"

    def __init__(self, submission_id: str, field_name: str, detail: str):
        self.submission_id = submission_id
        self.field_name = field_name
        self.detail = detail
        super().__init__(
            f"Transition on submission {submission_id} violated carry-forward "
            f"of '{field_name}': {detail}"
        )
