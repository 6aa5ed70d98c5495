# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from rollcall.adapters.zoom import parse_export_timestamp
from rollcall.app import (
    add_registration,
    build_window_config,
    confirm_review,
    list_attendance,
    list_pending,
    prepare_review,
    reset_training,
    resolve_pending,
    search_registrations,
    unlink_attendance,
)
from rollcall.config import ConfigurationError, configure_logging
from rollcall.domain.errors import EmptyInputError, MalformedInputError, RollcallError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from rollcall.domain.attendance import ReviewWorkspace

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile training attendance exports")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a participant export")
    validate.add_argument("csv", type=Path, help="Participant export (CSV)")
    validate.add_argument("--training", required=True, help="Training id")
    validate.add_argument("--live-start", required=True, help="Start of the live session")
    validate.add_argument("--window-start", help="Start of the activity window")
    validate.add_argument("--window-end", help="End of the activity window")
    validate.add_argument(
        "--no-window",
        action="store_true",
        help="Training has no activity window; approve on total minutes only",
    )
    validate.add_argument(
        "--days",
        type=int,
        default=1,
        help="Number of days the training spans (1 or 2)",
    )
    validate.add_argument(
        "--day",
        type=int,
        default=1,
        help="Day of the training this export belongs to",
    )
    validate.add_argument(
        "--live-end",
        help="End of the live session (defaults to the last leave time in the export)",
    )
    validate.add_argument(
        "--min-minutes",
        type=int,
        help="Minimum total minutes for approval (defaults to config)",
    )
    validate.add_argument(
        "--min-percent",
        type=int,
        help="Minimum window percentage for approval (defaults to config)",
    )
    validate.add_argument(
        "--exclude",
        action="append",
        metavar="NAME",
        help="Participant name fragment to ignore (repeatable; defaults to config)",
    )
    validate.add_argument(
        "--commit",
        action="store_true",
        help="Confirm auto-matches, queue the rest as not found, and store the result",
    )

    pending = subparsers.add_parser("pending", help="Pending attendance queue")
    pending_sub = pending.add_subparsers(dest="pending_command", required=True)
    pending_list = pending_sub.add_parser("list", help="List unresolved entries")
    pending_list.add_argument("--training", help="Only entries of this training")
    pending_resolve = pending_sub.add_parser("resolve", help="Link an entry to a registration")
    pending_resolve.add_argument("pending_id", type=int)
    pending_resolve.add_argument("registration_id", type=int)

    attendance = subparsers.add_parser("attendance", help="Stored attendance outcomes")
    attendance_sub = attendance.add_subparsers(dest="attendance_command", required=True)
    attendance_list = attendance_sub.add_parser("list", help="List stored outcomes")
    attendance_list.add_argument("--training", help="Only outcomes of this training")
    attendance_list.add_argument(
        "--all",
        action="store_true",
        help="Include rejected outcomes",
    )
    attendance_unlink = attendance_sub.add_parser("unlink", help="Clear one registration")
    attendance_unlink.add_argument("registration_id", type=int)
    attendance_reset = attendance_sub.add_parser("reset", help="Clear a whole training")
    attendance_reset.add_argument("training_id")

    registration = subparsers.add_parser("registration", help="Registration management")
    registration_sub = registration.add_subparsers(dest="registration_command", required=True)
    registration_add = registration_sub.add_parser("add", help="Create a registration")
    registration_add.add_argument("--training", required=True, help="Training id")
    registration_add.add_argument("--name", required=True, help="Registrant display name")
    registration_add.add_argument("--phone")
    registration_add.add_argument("--city")
    registration_add.add_argument("--email")
    registration_add.add_argument("--recruiter", help="Recruiter code")
    registration_search = registration_sub.add_parser("search", help="Find registrations")
    registration_search.add_argument("query", help="Name or phone fragment")
    registration_search.add_argument("--limit", type=int, default=20)

    return parser.parse_args(list(argv))


def _parse_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = parse_export_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid timestamp: {value}")
    return parsed


def _print_workspace(workspace: ReviewWorkspace) -> None:
    summary = workspace.summary()
    print(
        f"rows={summary.total_rows} dropped={summary.dropped_rows} "
        f"participants={summary.consolidated} approved={summary.approved} "
        f"rejected={summary.rejected}"
    )
    print(
        f"auto={summary.auto_matched} suggested={summary.suggested} "
        f"pending={summary.pending} confirmed={summary.confirmed} "
        f"not_found={summary.not_found} doubt={summary.doubt}"
    )
    for row in workspace.rows():
        analysis = row.analysis
        candidate = getattr(row.association, "candidate", None)
        link = f"#{candidate.id} {candidate.display_name}" if candidate is not None else "-"
        verdict = "APPROVED" if analysis.approved else "rejected"
        print(
            f"{verdict:<9} {row.participant.display_name:<32} "
            f"{analysis.total_minutes:>4}min {analysis.window_percentage:>3}% "
            f"{row.association.status:<12} {link}"
        )


def _commit_workspace(workspace: ReviewWorkspace) -> None:
    confirmed = workspace.confirm_all_auto_matched()
    for name in workspace.blocking():
        workspace.mark_not_found(name)
    report = confirm_review(workspace)
    log.info(
        "Confirmed %s auto-matches; saved=%s pending=%s failed=%s",
        confirmed,
        report.saved,
        report.pending_saved,
        report.failed,
    )
    for failure in report.failures:
        print(f"FAILED {failure.participant_name}: {failure.message}", file=sys.stderr)


def _run_validate(args: argparse.Namespace) -> None:
    config = build_window_config(
        training_id=args.training,
        live_start=_parse_timestamp(args.live_start),
        window_start=_parse_timestamp(args.window_start),
        window_end=_parse_timestamp(args.window_end),
        live_end=_parse_timestamp(args.live_end),
        has_window=not args.no_window,
        min_minutes=args.min_minutes,
        min_percent=args.min_percent,
        total_days=args.days,
        current_day=args.day,
    )
    text = args.csv.read_text(encoding="utf-8-sig")
    workspace = prepare_review(text, config, exclusions=args.exclude)
    if args.commit:
        _commit_workspace(workspace)
    _print_workspace(workspace)


def _run_pending(args: argparse.Namespace) -> None:
    if args.pending_command == "list":
        for entry in list_pending(training_id=args.training):
            candidates = ", ".join(f"#{ref.id} {ref.display_name}" for ref in entry.candidates)
            print(
                f"{entry.id:>5} {entry.training_id:<12} {entry.participant_name:<32} "
                f"{entry.status:<10} {entry.total_minutes:>4}min {candidates}"
            )
    elif args.pending_command == "resolve":
        registration = resolve_pending(args.pending_id, args.registration_id)
        print(f"Linked pending entry {args.pending_id} to registration {registration.id}")


def _run_attendance(args: argparse.Namespace) -> None:
    if args.attendance_command == "list":
        for registration in list_attendance(
            training_id=args.training,
            approved_only=not args.all,
        ):
            verdict = "APPROVED" if registration.attendance_approved else "rejected"
            print(
                f"{registration.id:>5} {verdict:<9} {registration.display_name:<32} "
                f"{registration.attendance_participant_name or '':<32} "
                f"{registration.attendance_total_minutes or 0:>4}min "
                f"{registration.attendance_window_percentage or 0:>3}%"
            )
    elif args.attendance_command == "unlink":
        unlink_attendance(args.registration_id)
        print(f"Cleared attendance of registration {args.registration_id}")
    elif args.attendance_command == "reset":
        result = reset_training(args.training_id)
        print(
            f"Reset training {args.training_id}: {result.cleared} registrations cleared, "
            f"{result.pending_deleted} pending entries removed"
        )


def _run_registration(args: argparse.Namespace) -> None:
    if args.registration_command == "add":
        registration = add_registration(
            training_id=args.training,
            display_name=args.name,
            phone=args.phone,
            city=args.city,
            email=args.email,
            recruiter_code=args.recruiter,
        )
        print(f"Created registration {registration.id}")
    elif args.registration_command == "search":
        for registration in search_registrations(args.query, limit=args.limit):
            print(
                f"{registration.id:>5} {registration.training_id:<12} "
                f"{registration.display_name:<32} {registration.phone or ''}"
            )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "validate":
            _run_validate(parsed_args)
        elif parsed_args.command == "pending":
            _run_pending(parsed_args)
        elif parsed_args.command == "attendance":
            _run_attendance(parsed_args)
        elif parsed_args.command == "registration":
            _run_registration(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, ConfigurationError, MalformedInputError, EmptyInputError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except RollcallError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        log.exception("Fatal error")
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
