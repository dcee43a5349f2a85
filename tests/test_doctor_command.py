import contextlib
import io
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from openpyxl import Workbook

from roster_sync.commands.doctor import DoctorReport, run
from roster_sync.commands.output import CheckLine, Status, emit
from roster_sync.config import DirectorySettings, Settings, TabSettings


def _save_workbook(path: Path, tabs: dict) -> Path:
    wb = Workbook()
    wb.remove(wb.active)
    for title, cells in tabs.items():
        ws = wb.create_sheet(title)
        for coordinate, value in cells.items():
            ws[coordinate] = value
    wb.save(path)
    return path


def _directory(tmp: Path) -> Path:
    return _save_workbook(
        tmp / "directory.xlsx",
        {"Directory": {"A1": "Directory", "C3": "Last", "D3": "First", "C4": "Smith", "D4": "John"}},
    )


class TestDoctorCommand(unittest.TestCase):
    def test_reports_tabs_and_event_columns(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            workbook = _save_workbook(
                tmp / "book.xlsx",
                {
                    "Sunday Service": {"I2": datetime(2024, 1, 7), "J2": datetime(2024, 1, 14)},
                    "Event Attendance": {"I3": "Post event name here"},
                    "Guests": {"B1": "Guests"},
                },
            )
            settings = Settings(
                workbook=workbook,
                directory=DirectorySettings(reference=_directory(tmp)),
            )

            report = run(settings)

            self.assertTrue(report.ok)
            joined = "\n".join(report.checks)
            self.assertIn("Directory: OK (1 names)", joined)
            self.assertIn("Sunday Service: OK (2 dated event columns)", joined)
            self.assertIn("Event Attendance: WARNING (no dated event columns)", joined)
            self.assertIn("Appsheet Sunserv: WARNING", joined)
            self.assertIn("Attendance Log: WARNING", joined)
            self.assertIn("Guests: OK", joined)
            self.assertIn("Registry order: OK (Directory > Event Attendance > Sunday Service)", joined)

    def test_reports_error_for_missing_required_tab(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            workbook = _save_workbook(tmp / "book.xlsx", {"Sunday Service": {"A1": "x"}})
            settings = Settings(
                workbook=workbook,
                directory=DirectorySettings(reference=_directory(tmp)),
                tabs=[TabSettings(name="Youth Night", required=True)],
                registry_order=[],
            )

            report = run(settings)

            self.assertFalse(report.ok)
            joined = "\n".join(report.checks)
            self.assertIn("Youth Night: ERROR (required tab missing)", joined)
            self.assertIn("Registry order: SKIPPED", joined)

    def test_reports_error_when_directory_is_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            workbook = _save_workbook(tmp / "book.xlsx", {"Sunday Service": {"A1": "x"}})
            settings = Settings(
                workbook=workbook,
                directory=DirectorySettings(reference=tmp / "nowhere.xlsx"),
            )

            report = run(settings)

            self.assertFalse(report.ok)
            self.assertIn("Directory: ERROR", "\n".join(report.checks))

    def test_reports_error_when_workbook_is_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = Settings(workbook=Path(tmpdir) / "book.xlsx")

            report = run(settings)

            self.assertFalse(report.ok)
            self.assertEqual(len(report.checks), 1)
            self.assertIn("Workbook: ERROR", report.checks[0])


class TestCheckLines(unittest.TestCase):
    def test_line_rendering(self) -> None:
        self.assertEqual(str(CheckLine("Guests", Status.OK)), "Guests: OK")
        self.assertEqual(
            str(CheckLine("Guests", Status.SKIPPED, "tab missing")), "Guests: SKIPPED (tab missing)"
        )
        with contextlib.redirect_stdout(io.StringIO()) as out:
            emit("Sync names", Status.FAILED, "see log")
        self.assertEqual(out.getvalue(), "Sync names: FAILED (see log)\n")

    def test_report_fails_only_on_errors(self) -> None:
        report = DoctorReport()
        report.add("Workbook")
        report.add("Guests", Status.WARNING, "tab missing")
        report.add("Registry order", Status.SKIPPED)
        self.assertTrue(report.ok)

        report.add("Directory", Status.ERROR, "not found")
        self.assertFalse(report.ok)
        self.assertEqual(report.checks[-1], "Directory: ERROR (not found)")


if __name__ == "__main__":
    unittest.main()
