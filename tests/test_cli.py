"""
Tests for CLI entry points.

These tests focus on:
- slug resolution and "not found" handling (non-zero exit, no crash)
- creating recurring events through the add command
- the full import -> show path, using a temporary store
  (to avoid touching real data during tests)
"""

import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from gsomtimetable.cli import main
from gsomtimetable.storage import list_groups, load_events


def _run(argv: list[str]) -> tuple[int, str]:
    # main() always exits via SystemExit with the command's return code
    out = io.StringIO()
    with redirect_stdout(out):
        try:
            main(argv)
        except SystemExit as exc:
            return exc.code, out.getvalue()
    raise AssertionError("main() did not exit")


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.store = str(self.dir / "events.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_resolve_known_slug(self) -> None:
        code, out = _run(["resolve", "bak-men-24-b01"])
        self.assertEqual(code, 0)
        self.assertIn("24.B01-vshm", out)
        self.assertIn("Bachelor's in Management - 2024 - Group B01", out)

    def test_resolve_unknown_slug(self) -> None:
        code, out = _run(["resolve", "bak-xyz-24-b01"])
        self.assertNotEqual(code, 0)
        self.assertIn("Timetable not found", out)

    def test_slug_command(self) -> None:
        code, out = _run(["slug", "--degree", "master", "--program", "Corporate Finance", "--year", "2023", "--group", "M02"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "mag-cfin-23-m02")

    def test_slug_unknown_program_fails(self) -> None:
        code, out = _run(["slug", "--degree", "bachelor", "--program", "Physics", "--year", "2024", "--group", "B01"])
        self.assertEqual(code, 1)
        self.assertIn("Unknown program", out)

    def _add(self, *extra: str) -> tuple[int, str]:
        return _run([
            "--store", self.store, "add", "bak-men-24-b01",
            "--title-en", "Microeconomics", "--title-ru", "Микроэкономика",
            "--type-en", "Lecture", "--type-ru", "Лекция",
            "--start", "09:30", "--end", "11:05",
            *extra,
        ])

    def test_add_weekly(self) -> None:
        code, out = self._add("--date", "2024-01-01", "--repeat", "weekly", "--until", "2024-01-22")
        self.assertEqual(code, 0)
        self.assertIn("Created 4 events", out)
        self.assertEqual(len(load_events("24.B01-vshm", path=self.store)), 4)

    def test_add_custom_requires_days(self) -> None:
        code, out = self._add("--date", "2024-01-01", "--repeat", "custom", "--until", "2024-01-22")
        self.assertEqual(code, 1)
        self.assertIn("Select at least one day", out)
        self.assertEqual(load_events("24.B01-vshm", path=self.store), [])

    def test_add_end_before_start_rejected(self) -> None:
        code, _ = self._add("--date", "2024-02-01", "--repeat", "weekly", "--until", "2024-01-01")
        self.assertEqual(code, 1)

    def test_add_missing_title(self) -> None:
        code, out = _run(["--store", self.store, "add", "bak-men-24-b01", "--date", "2024-01-01"])
        self.assertEqual(code, 1)
        self.assertIn("Required fields are missing", out)

    def test_delete(self) -> None:
        self._add("--date", "2024-01-01")
        event_id = load_events("24.B01-vshm", path=self.store)[0].id
        code, _ = _run(["--store", self.store, "delete", str(event_id)])
        self.assertEqual(code, 0)
        code, _ = _run(["--store", self.store, "delete", str(event_id)])
        self.assertEqual(code, 1)

    def test_import_and_show(self) -> None:
        en = self.dir / "schedule-24-b01.txt"
        en.write_text(
            "24.B01-vshm\t02.09.2024\t09:30\t11:05\t\tMicroeconomics\tLecture\t\t301\tIvanov I.I.\n",
            encoding="utf-8",
        )
        code, out = _run(["--store", self.store, "import", str(en)])
        self.assertEqual(code, 0)
        self.assertIn("/bak-men-24-b01", out)

        code, out = _run(["--store", self.store, "show", "bak-men-24-b01", "--week", "2024-09-04"])
        self.assertEqual(code, 0)
        self.assertIn("Microeconomics", out)
        self.assertIn("Sep 2 - 7, 2024", out)

    def test_import_stores_lowercase_group_under_full_code(self) -> None:
        en = self.dir / "schedule-24-b01.txt"
        en.write_text(
            "24.b01-vshm\t02.09.2024\t09:30\t11:05\t\tMicroeconomics\tLecture\t\t301\tIvanov I.I.\n"
            "24.B01-VSHM\t03.09.2024\t09:30\t11:05\t\tStatistics\tSeminar\t\t302\tPetrov P.P.\n",
            encoding="utf-8",
        )
        code, out = _run(["--store", self.store, "import", str(en)])
        self.assertEqual(code, 0)
        self.assertIn("Imported 2 events for 24.B01-vshm", out)
        self.assertEqual(list_groups(path=self.store), ["24.B01-vshm"])
        self.assertEqual(len(load_events("24.B01-vshm", path=self.store)), 2)

    def test_import_skips_unknown_group(self) -> None:
        en = self.dir / "schedule-24-b01.txt"
        en.write_text(
            "B01\t02.09.2024\t09:30\t11:05\t\tMicroeconomics\tLecture\t\t301\tIvanov I.I.\n",
            encoding="utf-8",
        )
        code, out = _run(["--store", self.store, "import", str(en)])
        self.assertEqual(code, 0)
        self.assertIn("unknown group 'B01'", out)
        self.assertEqual(list_groups(path=self.store), [])

    def test_import_twice_replaces_group(self) -> None:
        en = self.dir / "schedule-24-b01.txt"
        en.write_text(
            "24.B01-vshm\t02.09.2024\t09:30\t11:05\t\tMicroeconomics\tLecture\t\t301\tIvanov I.I.\n",
            encoding="utf-8",
        )
        for _ in range(2):
            code, _out = _run(["--store", self.store, "import", str(en)])
            self.assertEqual(code, 0)
        self.assertEqual(len(load_events("24.B01-vshm", path=self.store)), 1)


if __name__ == "__main__":
    unittest.main()
