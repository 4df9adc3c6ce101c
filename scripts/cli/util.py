"""CLI utilities: table formatting and store file I/O."""

from pathlib import Path
from typing import Any

from works_config.loader import dump_yaml_file, load_yaml_file
from works_engines.audit_trail import AuditTrailEntry
from works_kernel.domain.submission import Submission
from works_kernel.selectors.view_selector import format_inr, format_locality
from works_kernel.services.submission_store import SubmissionStore

W = 100


def load_store(path: Path) -> SubmissionStore:
    """Read a seed file: a list of records, or ``{"submissions": [...]}``.

    An empty file or a null ``submissions`` key is an empty store.

    Raises:
        ValueError: if the document is not a list of record mappings.
    """
    data = load_yaml_file(path)
    rows = (data.get("submissions") if isinstance(data, dict) else data) or []
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise ValueError(f"{path}: expected a list of submission records")
    return SubmissionStore.from_dicts(rows)


def save_store(path: Path, store: SubmissionStore) -> None:
    dump_yaml_file(path, {"submissions": store.to_dicts()})


def fmt_row(index: int, record: Submission) -> str:
    return (
        f"{index:>3}  {record.id:<12} {str(record.priority or '-'):>4}  "
        f"{record.status.display:<20} {format_inr(record.cost):>14}  "
        f"{(record.proposal or '-')[:30]:<30}  {format_locality(record)[:30]}"
    )


def fmt_header() -> str:
    return (
        f"{'#':>3}  {'ID':<12} {'PRI':>4}  {'STATUS':<20} {'COST':>14}  "
        f"{'PROPOSAL':<30}  LOCALITY"
    )


def fmt_trail_entry(entry: AuditTrailEntry) -> str:
    ts: Any = entry.timestamp
    stamp = ts.isoformat() if hasattr(ts, "isoformat") else (ts or "-")
    return f"  [{entry.step_index}] {entry.designation:<14} {entry.name:<24} {stamp}"

