"""CLI entry: argument parsing and subcommand dispatch."""

import argparse
import sys
from dataclasses import fields
from pathlib import Path

import yaml

from scripts.cli.util import (
    W,
    fmt_header,
    fmt_row,
    fmt_trail_entry,
    load_store,
    save_store,
)
from works_config import get_active_config
from works_kernel.domain.commands import (
    BulkApprove,
    BulkForward,
    BulkReject,
    CommandResult,
    VerificationPayload,
)
from works_kernel.domain.roles import parse_role
from works_kernel.exceptions import WorksKernelError
from works_kernel.logging_config import configure_logging, get_logger
from works_kernel.selectors.view_selector import ColumnFilters, ViewName, parse_view_name
from works_services import WorkflowCommandFacade

logger = get_logger("cli")

_FILTER_KEYS = tuple(f.name for f in fields(ColumnFilters))


def _parse_filters(pairs: list[str] | None) -> ColumnFilters | None:
    if not pairs:
        return None
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip().replace("-", "_")
        if not sep or key not in _FILTER_KEYS:
            raise ValueError(
                f"Bad filter {pair!r}; expected key=value with key in {', '.join(_FILTER_KEYS)}"
            )
        values[key] = value
    return ColumnFilters(**values)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m scripts.cli",
        description="Capital-works approval chain",
    )
    parser.add_argument("--store", required=True, type=Path,
                        help="YAML/JSON file holding the submissions")
    parser.add_argument("--config", type=Path, default=None,
                        help="Workflow config (defaults to the packaged workflow.yaml)")
    parser.add_argument("--log-level", default=None,
                        help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    views = sub.add_parser("views", help="List a dashboard view")
    views.add_argument("--role", required=True)
    views.add_argument("--view", default=ViewName.PENDING.value)
    views.add_argument("--filter", action="append", dest="filters", metavar="KEY=VALUE")
    views.add_argument("--counts", action="store_true", help="Print card counts instead")

    trail = sub.add_parser("trail", help="Print the verification trail of one proposal")
    trail.add_argument("--id", required=True, dest="submission_id")
    trail.add_argument("--origin", action="store_true", help="Include the origin stamp")

    approve = sub.add_parser("approve", help="Approve proposals")
    approve.add_argument("--role", required=True)
    approve.add_argument("--id", required=True, action="append", dest="ids")
    approve.add_argument("--name", default="")
    approve.add_argument("--designation", default="")
    approve.add_argument("--remarks", default="")

    reject = sub.add_parser("reject", help="Reject proposals")
    reject.add_argument("--role", required=True)
    reject.add_argument("--id", required=True, action="append", dest="ids")
    reject.add_argument("--remarks", default="")

    forward = sub.add_parser("forward", help="Forward approved proposals downstream")
    forward.add_argument("--role", required=True)
    forward.add_argument("--id", required=True, action="append", dest="ids")
    forward.add_argument("--to", dest="destination", default=None)
    forward.add_argument("--confirm", action="store_true")
    forward.add_argument("--department", default="")
    forward.add_argument("--remarks", default="")
    return parser


def _show_view(facade: WorkflowCommandFacade, args: argparse.Namespace) -> int:
    if args.counts:
        for name, count in facade.view_counts(args.role).items():
            print(f"  {name.value:<18} {count:>5}")
        return 0
    role = parse_role(args.role)
    view = parse_view_name(args.view)
    records = facade.list_view(role, view, _parse_filters(args.filters))
    print(f"  {role.value} / {view.value}  ({len(records)} records)")
    print("  " + "-" * W)
    print("  " + fmt_header())
    for index, record in enumerate(records, start=1):
        print("  " + fmt_row(index, record))
    return 0


def _show_trail(facade: WorkflowCommandFacade, args: argparse.Namespace) -> int:
    record = facade.store.get(args.submission_id)
    print(f"  {record.id}: {record.proposal or '-'}  [{record.status.display}]")
    entries = facade.build_audit_trail(record, include_origin=args.origin)
    if not entries:
        print("  (no verification stamps)")
    for entry in entries:
        print(fmt_trail_entry(entry))
    return 0


def _report(result: CommandResult) -> int:
    for record in result.updated_records:
        print(f"  OK    {record.id:<12} -> {record.status.display}")
    for rejected in result.rejected_ids:
        print(f"  FAIL  {rejected.submission_id:<12} {rejected.code}: {rejected.reason}")
    return 0 if result.succeeded else 1


def _run_command(facade: WorkflowCommandFacade, args: argparse.Namespace) -> int:
    ids = tuple(args.ids)
    if args.command == "approve":
        verification = None
        if args.name.strip():
            verification = VerificationPayload(
                name=args.name, designation=args.designation, remarks=args.remarks
            )
        command = BulkApprove(role=args.role, ids=ids, verification=verification)
    elif args.command == "reject":
        command = BulkReject(role=args.role, ids=ids, remarks=args.remarks)
    else:
        command = BulkForward(
            role=args.role,
            ids=ids,
            destination=args.destination,
            confirmed=args.confirm,
            remarks=args.remarks,
            department=args.department,
        )
    result = facade.submit(command)
    if result.updated_records:
        save_store(args.store, facade.store)
    return _report(result)


def main(argv: list[str] | None = None) -> int:
    """Run one CLI invocation; returns the process exit code.

    0 on success, 1 when any id was rejected, 2 on usage or load errors.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = get_active_config(args.config)
        configure_logging(level=(args.log_level or config.log_level).upper(), stream=sys.stderr)
        store = load_store(args.store)
        facade = WorkflowCommandFacade(store, config=config)
        if args.command == "views":
            return _show_view(facade, args)
        if args.command == "trail":
            return _show_trail(facade, args)
        return _run_command(facade, args)
    except (
        WorksKernelError, FileNotFoundError, ValueError, KeyError, yaml.YAMLError
    ) as exc:
        logger.warning("cli_error", extra={"error": str(exc)})
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
