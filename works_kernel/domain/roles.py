"""
Role registry (``works_kernel.domain.roles``).

Responsibility
--------------
Static table of the approving roles, their order in the chain, the
designation written into verification stamps, and the section token a
forward uses to route a proposal into the role's queue.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* The chain is fixed: Commissioner < EEPH < SEPH < ENCPH < CDMA.
* Positions are 1..5 in chain order; position 0 is reserved for the
  Engineer/Admin originator, which is not an actor in the engine.
* Section tokens are unique and matched case-insensitively.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from works_kernel.exceptions import UnknownRoleError


class Role(str, Enum):
    """The approving roles, in chain order."""

    COMMISSIONER = "Commissioner"
    EEPH = "EEPH"
    SEPH = "SEPH"
    ENCPH = "ENCPH"
    CDMA = "CDMA"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RoleSpec:
    """Registry entry for one role.

    ``stamp_field`` names the ``Submission`` attribute holding this role's
    verification stamp.  ``shows_downstream_progress`` marks roles whose
    approved view also lists records already forwarded past them.
    """

    role: Role
    designation: str
    section_token: str
    position: int
    stamp_field: str
    shows_downstream_progress: bool = False


ENGINEER_DESIGNATION = "Engineer"
ENGINEER_POSITION = 0

ROLE_CHAIN: tuple[RoleSpec, ...] = (
    RoleSpec(
        role=Role.COMMISSIONER,
        designation="Commissioner",
        section_token="COMMISSIONER",
        position=1,
        stamp_field="commissioner_verified_by",
        shows_downstream_progress=True,
    ),
    RoleSpec(
        role=Role.EEPH,
        designation="EEPH",
        section_token="EEPH",
        position=2,
        stamp_field="eeph_verified_by",
    ),
    RoleSpec(
        role=Role.SEPH,
        designation="SEPH",
        section_token="SEPH",
        position=3,
        stamp_field="seph_verified_by",
    ),
    RoleSpec(
        role=Role.ENCPH,
        designation="ENCPH",
        section_token="ENCPH",
        position=4,
        stamp_field="encph_verified_by",
        shows_downstream_progress=True,
    ),
    RoleSpec(
        role=Role.CDMA,
        designation="CDMA",
        section_token="CDMA",
        position=5,
        stamp_field="cdma_verified_by",
    ),
)

_BY_ROLE: dict[Role, RoleSpec] = {spec.role: spec for spec in ROLE_CHAIN}
_BY_TOKEN: dict[str, RoleSpec] = {
    spec.section_token.casefold(): spec for spec in ROLE_CHAIN
}

STAMP_FIELDS: tuple[str, ...] = tuple(spec.stamp_field for spec in ROLE_CHAIN)


def get_role_spec(role: Role) -> RoleSpec:
    """Return the registry entry for ``role``."""
    return _BY_ROLE[role]


def parse_role(value: str | Role) -> Role:
    """Resolve a role from its identifier, designation or section token.

    Matching is case-insensitive and ignores surrounding whitespace, so the
    lower-case identifiers issued by the login layer (``"eeph"``) resolve
    as well as display names (``"Commissioner"``).

    Raises:
        UnknownRoleError: if ``value`` names no role in the chain.
    """
    if isinstance(value, Role):
        return value
    key = (value or "").strip().casefold()
    for spec in ROLE_CHAIN:
        if key in (
            spec.role.value.casefold(),
            spec.role.name.casefold(),
            spec.designation.casefold(),
        ):
            return spec.role
    spec = _BY_TOKEN.get(key)
    if spec is None:
        raise UnknownRoleError(value)
    return spec.role


def role_for_section(section: str | None) -> Role | None:
    """Return the role whose section token matches ``section``, if any."""
    if not section:
        return None
    spec = _BY_TOKEN.get(section.strip().casefold())
    return spec.role if spec else None


def predecessor(role: Role) -> Role | None:
    """The role immediately before ``role`` in the chain (None for Commissioner)."""
    index = get_role_spec(role).position - 1
    return ROLE_CHAIN[index - 1].role if index > 0 else None


def successor(role: Role) -> Role | None:
    """The role immediately after ``role`` in the chain (None for CDMA)."""
    index = get_role_spec(role).position - 1
    return ROLE_CHAIN[index + 1].role if index + 1 < len(ROLE_CHAIN) else None


def downstream_roles(role: Role) -> tuple[Role, ...]:
    """All roles after ``role``, nearest first."""
    position = get_role_spec(role).position
    return tuple(spec.role for spec in ROLE_CHAIN if spec.position > position)


def is_downstream(role: Role, other: Role) -> bool:
    """True when ``other`` comes after ``role`` in the chain."""
    return get_role_spec(other).position > get_role_spec(role).position
