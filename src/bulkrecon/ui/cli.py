from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from bulkrecon.adapters.filesystem import reconcile_sidecar
from bulkrecon.app import (
    SnapshotBackend,
    reconcile_manifest_file,
    reconcile_pending_manifests,
    resolve_current_state,
)
from bulkrecon.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from bulkrecon.domain.current_state import ActionReview

log = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--account-id",
        type=str,
        required=True,
        help="Advertising account whose snapshots are read",
    )
    parser.add_argument(
        "--snapshot-date",
        type=str,
        help="Use this published snapshot (YYYY-MM-DD) instead of the latest one",
    )
    parser.add_argument(
        "--backend",
        choices=[backend.value for backend in SnapshotBackend],
        default=SnapshotBackend.SQL.value,
        help="Snapshot store to read from (default: sql)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-manifest and per-lookup details",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile bulk creation manifests against published snapshots"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pending = subparsers.add_parser(
        "reconcile-pending",
        help="Run one reconciliation pass over the pending manifest queue",
    )
    _add_common_arguments(pending)
    pending.add_argument(
        "--queue-dir",
        type=Path,
        help="Queue base directory holding _PENDING_RECONCILE, or the pending directory "
        "itself (defaults to BULKRECON_QUEUE_DIR)",
    )
    pending.add_argument(
        "--dry-run",
        action="store_true",
        help="Report decisions without moving files or writing sidecars",
    )
    pending.add_argument(
        "--max-manifests",
        type=int,
        help="Process at most this many pending manifests",
    )

    single = subparsers.add_parser(
        "reconcile",
        help="Reconcile one manifest file and print the result without moving it",
    )
    _add_common_arguments(single)
    single.add_argument("--manifest", type=Path, required=True, help="Manifest JSON file")

    current = subparsers.add_parser(
        "current-state",
        help="Look up current values for the entities a changes file updates",
    )
    _add_common_arguments(current)
    current.add_argument("--changes", type=Path, required=True, help="Changes JSON file")

    return parser.parse_args(list(argv))


def _parse_snapshot_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid snapshot date (expected YYYY-MM-DD): {value}") from exc


def _validate(args: argparse.Namespace) -> date | None:
    if not args.account_id.strip():
        raise ValueError("--account-id must not be blank")
    max_manifests = getattr(args, "max_manifests", None)
    if max_manifests is not None and max_manifests < 1:
        raise ValueError("--max-manifests must be >= 1")
    return _parse_snapshot_date(args.snapshot_date)


def _format_review(review: ActionReview) -> str:
    status = "OK" if review.ok else ("MISSING" if not review.found else "INVALID")
    delta = f" ({review.delta:+g})" if review.delta is not None else ""
    line = (
        f"{status} {review.action_type} {review.entity_id}: "
        f"{review.current_value} -> {review.new_value}{delta}"
    )
    return f"{line} [{review.problem}]" if review.problem else line


def _run(args: argparse.Namespace, snapshot_date: date | None) -> None:
    backend = SnapshotBackend(args.backend)
    account_id = args.account_id.strip()
    if args.command == "reconcile-pending":
        summary = reconcile_pending_manifests(
            account_id=account_id,
            queue_dir=args.queue_dir,
            backend=backend,
            snapshot_date=snapshot_date,
            dry_run=args.dry_run,
            max_manifests=args.max_manifests,
        )
        log.info(
            "Done%s: processed=%s reconciled=%s pending=%s failed=%s skipped=%s",
            " (dry run)" if summary.dry_run else "",
            summary.processed,
            summary.reconciled,
            summary.pending,
            summary.failed,
            summary.skipped,
        )
    elif args.command == "reconcile":
        outcome = reconcile_manifest_file(
            account_id=account_id,
            manifest_path=args.manifest,
            backend=backend,
            snapshot_date=snapshot_date,
        )
        sys.stdout.write(reconcile_sidecar(outcome).model_dump_json(indent=2) + "\n")
    elif args.command == "current-state":
        report = resolve_current_state(
            account_id=account_id,
            changes_path=args.changes,
            backend=backend,
            snapshot_date=snapshot_date,
        )
        for review in report.reviews:
            sys.stdout.write(_format_review(review) + "\n")
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(verbose=parsed_args.verbose)
        snapshot_date = _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args, snapshot_date)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
