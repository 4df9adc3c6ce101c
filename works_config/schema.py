"""
WorkflowConfig schema.

Frozen dataclasses the YAML loader produces.  Configuration never changes
the chain of roles; it only selects labels and which downstream sections
a role may forward to.
"""

from __future__ import annotations

from dataclasses import dataclass

from works_kernel.domain.roles import Role, get_role_spec, successor


@dataclass(frozen=True)
class ForwardTargetDef:
    """Sections offered in ``role``'s forward dropdown, nearest first."""

    role: Role
    targets: tuple[Role, ...] = ()


@dataclass(frozen=True)
class DesignationDef:
    """Designation written into stamps when the approver leaves it blank."""

    role: Role
    designation: str


@dataclass(frozen=True)
class WorkflowConfig:
    config_id: str = "default"
    version: int = 1
    default_department: str = "Administration"
    log_level: str = "INFO"
    forward_targets: tuple[ForwardTargetDef, ...] = ()
    designations: tuple[DesignationDef, ...] = ()
    checksum: str | None = None

    def targets_for(self, role: Role) -> tuple[Role, ...]:
        """Permitted forward destinations; the next role when unconfigured."""
        for entry in self.forward_targets:
            if entry.role == role:
                return entry.targets
        nxt = successor(role)
        return (nxt,) if nxt is not None else ()

    def designation_for(self, role: Role) -> str:
        for entry in self.designations:
            if entry.role == role:
                return entry.designation
        return get_role_spec(role).designation
