"""
Configuration Loader (``works_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into the frozen ``works_config.schema``
types.  Runtime callers go through ``works_config.get_active_config()``;
the CLI also uses ``load_yaml_file`` to read submission seed files, which
may be YAML or JSON (JSON is a subset of YAML).

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for malformed values.
* Forward targets must be roles downstream of the forwarding role.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown role names  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from works_config.schema import DesignationDef, ForwardTargetDef, WorkflowConfig
from works_kernel.domain.roles import is_downstream, parse_role
from works_kernel.exceptions import UnknownRoleError


def load_yaml_file(path: Path) -> Any:
    """
    Load a single YAML (or JSON) file.

    Postconditions:
        - Returns the parsed document, or an empty dict for an empty file.
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return {} if data is None else data


def dump_yaml_file(path: Path, data: Any) -> None:
    """Write ``data`` as block-style YAML, keeping key order."""
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)


def _role(value: Any, context: str):
    try:
        return parse_role(str(value))
    except UnknownRoleError:
        raise ValueError(f"Unknown role '{value}' in {context}") from None


def parse_forward_targets(data: dict[str, Any]) -> tuple[ForwardTargetDef, ...]:
    """Parse the ``forward_targets`` mapping.

    Raises:
        ValueError: for unknown roles or a target that is not downstream.
    """
    parsed: list[ForwardTargetDef] = []
    for role_name, targets in (data or {}).items():
        role = _role(role_name, "forward_targets")
        resolved = tuple(_role(t, f"forward_targets.{role_name}") for t in targets or ())
        for target in resolved:
            if not is_downstream(role, target):
                raise ValueError(
                    f"forward_targets.{role_name}: {target.value} is not downstream "
                    f"of {role.value}"
                )
        parsed.append(ForwardTargetDef(role=role, targets=resolved))
    return tuple(parsed)


def parse_designations(data: dict[str, Any]) -> tuple[DesignationDef, ...]:
    return tuple(
        DesignationDef(role=_role(name, "designations"), designation=str(value))
        for name, value in (data or {}).items()
    )


def parse_workflow_config(data: dict[str, Any]) -> WorkflowConfig:
    """Parse a workflow configuration document.

    Raises:
        ValueError: if a value is invalid.
    """
    if not isinstance(data, dict):
        raise ValueError("Workflow configuration must be a mapping")
    department = data.get("default_department", "Administration")
    if not isinstance(department, str) or not department.strip():
        raise ValueError("default_department must be a non-empty string")
    return WorkflowConfig(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        default_department=department.strip(),
        log_level=str(data.get("log_level", "INFO")).upper(),
        forward_targets=parse_forward_targets(data.get("forward_targets") or {}),
        designations=parse_designations(data.get("designations") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
