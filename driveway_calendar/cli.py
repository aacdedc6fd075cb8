import argparse
import logging
import sys

from driveway_calendar import run

# --- Logging Setup ---

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    """Configures logging to stderr with local time."""
    import time

    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    # Use local time instead of UTC for logging
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def _month(value: str) -> int:
    """Accepts a 1-12 month and returns it 0-based."""
    month = int(value)
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError("Month must be 1-12.")
    return month - 1


def _weekday(value: str) -> int:
    weekday = int(value)
    if not 0 <= weekday <= 6:
        raise argparse.ArgumentTypeError("Weekday must be 0 (Sunday) to 6 (Saturday).")
    return weekday


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Manage parking availability slots for a host calendar.")
    parser.add_argument("--file", type=str, help="Slots JSON file. Defaults to DRIVEWAY_SLOTS_FILE or data/slots.json.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print a month calendar with its slots.")
    show.add_argument("--year", type=int, help="Year. Defaults to the current year.")
    show.add_argument("--month", type=_month, help="Month 1-12. Defaults to the current month.")

    apply = sub.add_parser("apply", help="Create one slot on several dates, skipping conflicting ones.")
    apply.add_argument("--start", required=True, help='Start time, e.g. "9:00 AM" or "09:00".')
    apply.add_argument("--end", required=True, help='End time, e.g. "5:00 PM" or "17:00".')
    apply.add_argument("--capacity", type=int, help="Number of vehicles. Defaults to DRIVEWAY_DEFAULT_CAPACITY.")
    apply.add_argument("--title", type=str)
    apply.add_argument("--notes", type=str)
    apply.add_argument("--date", dest="dates", action="append", default=[], help="Date in YYYY-MM-DD format. Repeatable.")
    apply.add_argument("--weekday", dest="weekdays", type=_weekday, action="append", default=[],
                       help="Select every date on this weekday (0 = Sunday) in the month. Repeatable.")
    apply.add_argument("--year", type=int, help="Year used with --weekday. Defaults to the current year.")
    apply.add_argument("--month", type=_month, help="Month 1-12 used with --weekday. Defaults to the current month.")

    capacity = sub.add_parser("capacity", help="Change the capacity of a slot.")
    capacity.add_argument("date")
    capacity.add_argument("slot_id")
    capacity.add_argument("capacity", type=int)

    toggle = sub.add_parser("toggle", help="Disable an available slot or re-enable a disabled one.")
    toggle.add_argument("date")
    toggle.add_argument("slot_id")

    cancel = sub.add_parser("cancel", help="Cancel a slot for good.")
    cancel.add_argument("date")
    cancel.add_argument("slot_id")
    cancel.add_argument("--reason", required=True)

    delete = sub.add_parser("delete", help="Delete an available or cancelled slot.")
    delete.add_argument("date")
    delete.add_argument("slot_id")

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    if args.command == "show":
        run.show(path=args.file, year=args.year, month=args.month)
        return

    if args.command == "apply":
        if not args.dates and not args.weekdays:
            logger.error("Error: pass at least one --date or --weekday.")
            sys.exit(1)
        result = run.apply(
            start=args.start,
            end=args.end,
            dates=args.dates,
            weekdays=args.weekdays,
            capacity=args.capacity,
            title=args.title,
            notes=args.notes,
            path=args.file,
            year=args.year,
            month=args.month,
        )
    elif args.command == "capacity":
        result = run.change_slot("capacity", args.date, args.slot_id, path=args.file, capacity=args.capacity)
    elif args.command == "cancel":
        result = run.change_slot("cancel", args.date, args.slot_id, path=args.file, reason=args.reason)
    else:
        result = run.change_slot(args.command, args.date, args.slot_id, path=args.file)

    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
