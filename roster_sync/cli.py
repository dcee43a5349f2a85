from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from .app import RosterApp
from .commands import counts as cmd_counts
from .commands import doctor as cmd_doctor
from .commands import passes as cmd_passes
from .config import Settings, find_config

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"
WARNINGS_FILE = "roster-sync-warnings.log"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ShortPathFormatter(logging.Formatter):
    """Strips the workbook folder from messages so paths stay readable."""

    def __init__(self, fmt: str, roots: list[Path]) -> None:
        super().__init__(fmt)
        self.roots = [str(root) for root in roots if root]

    def _shorten(self, message: str) -> str:
        for root in self.roots:
            if not message:
                break
            message = message.replace(f"{root}/", "")
        return message

    def format(self, record: logging.LogRecord) -> str:
        return self._shorten(super().format(record))


class ColorFormatter(ShortPathFormatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Roster reconciliation and attendance statistics"
    )
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Compute quarters and tiers as of this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the passes but do not save the workbook",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    sync_parser = subparsers.add_parser(
        "sync-names", help="Add missing names to every target tab, then sort them"
    )
    sync_parser.add_argument(
        "--directory-only",
        action="store_true",
        help="Only take names from the Directory, not from the feeder tabs",
    )
    subparsers.add_parser("stats", help="Rewrite the Attendance Stats tab")
    subparsers.add_parser(
        "member-status", help="Mark roster rows Member/Guest from the Directory"
    )
    guests_parser = subparsers.add_parser("guests", help="Maintain the Guests tab")
    mode = guests_parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--append",
        action="store_true",
        help="Only add guests the tab does not list yet",
    )
    mode.add_argument(
        "--fill-dates",
        action="store_true",
        help="Only fill blank dates of listed guests",
    )
    subparsers.add_parser(
        "export-log", help="Copy ticked grid cells into the Attendance Log"
    )
    subparsers.add_parser(
        "import-log", help="Tick the roster tabs for Attendance Log rows not yet logged"
    )
    subparsers.add_parser("counts", help="Report name counts per tab")
    subparsers.add_parser(
        "run", help="member-status, sync-names, stats and guests in one go"
    )
    subparsers.add_parser("doctor", help="Check the workbook layout against the config")
    return parser


def configure_logging(level_name: str, roots: list[Path]) -> tuple[WarningBufferHandler, Path]:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT, roots))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(ShortPathFormatter(LOG_FORMAT, roots))
    root_logger.addHandler(warn_buffer)

    warn_log_path = Path.cwd() / WARNINGS_FILE
    file_handler = logging.FileHandler(warn_log_path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(ShortPathFormatter(LOG_FORMAT, roots))
    root_logger.addHandler(file_handler)

    logging.getLogger("openpyxl").setLevel(logging.WARNING)
    return warn_buffer, warn_log_path


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    try:
        settings = Settings.load(find_config(args.config))
    except (FileNotFoundError, ValidationError) as exc:
        raise SystemExit(f"Configuration error: {exc}")

    warn_buffer, warn_log_path = configure_logging(
        args.log_level, [settings.workbook.parent.resolve()]
    )

    if args.command == "doctor":
        report = cmd_doctor.run(settings)
        for line in report.checks:
            print(line)
        if not report.ok:
            raise SystemExit(1)
        return

    if not settings.workbook.exists():
        raise SystemExit(f"Workbook not found: {settings.workbook}")
    app = RosterApp.create(settings, today=args.today)
    succeeded = True
    try:
        match args.command:
            case "sync-names":
                succeeded = cmd_passes.sync_names(
                    app, union=not getattr(args, "directory_only", False)
                )
            case "stats":
                succeeded = cmd_passes.stats(app)
            case "member-status":
                succeeded = cmd_passes.member_status(app)
            case "guests":
                succeeded = cmd_passes.guests(
                    app,
                    append=getattr(args, "append", False),
                    fill_dates=getattr(args, "fill_dates", False),
                )
            case "export-log":
                succeeded = cmd_passes.export_log(app)
            case "import-log":
                succeeded = cmd_passes.import_log(app)
            case "counts":
                cmd_counts.run(app)
            case "run":
                succeeded = cmd_passes.run_all(app)
            case _:
                parser.error("Unknown command")
        if args.dry_run:
            print("Dry run: workbook not saved.")
        elif app.save():
            print(f"Saved {settings.workbook.name}")
    finally:
        app.close()
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")
            print(f"\nFull warning log: {warn_log_path}")
    if not succeeded:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
