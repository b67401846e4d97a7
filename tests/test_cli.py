from __future__ import annotations

import json
from pathlib import Path
from tempfile import TemporaryDirectory
import unittest
from unittest.mock import patch

from todobot.config import load_config
from todobot.records import load_records

from tests.helpers import run_cli


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.config_path = self.root / "home" / "config.toml"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_listing_shows_tasks_in_creation_order(self) -> None:
        self.assertEqual(0, run_cli(self.config_path, "task", "new", "Buy milk").code)
        self.assertEqual(0, run_cli(self.config_path, "task", "new", "Pay rent").code)

        listing = run_cli(self.config_path)
        self.assertEqual(0, listing.code)
        self.assertIn("0: Buy milk\n1: Pay rent", listing.stdout)

    def test_removed_index_is_not_reused(self) -> None:
        run_cli(self.config_path, "task", "new", "Buy milk")
        run_cli(self.config_path, "task", "new", "Pay rent")
        run_cli(self.config_path, "task", "remove", "0")

        listing = run_cli(self.config_path).stdout
        self.assertNotIn("Buy milk", listing)
        self.assertIn("1: Pay rent", listing)

        created = run_cli(self.config_path, "task", "new", "X")
        self.assertIn("task 2 created: X", created.stdout)
        self.assertIn("2: X", run_cli(self.config_path).stdout)

    def test_tally_max_read_and_write(self) -> None:
        run_cli(self.config_path, "goal", "new", "Read")
        run_cli(self.config_path, "goal", "tally", "0", "max", "10")

        shown = run_cli(self.config_path, "goal", "tally", "0", "max")
        self.assertEqual(0, shown.code)
        self.assertIn("10", shown.stdout)

        run_cli(self.config_path, "goal", "tally", "0", "max", "20")
        records = load_records(self.config_path.parent / "data" / "records.toml")
        self.assertEqual(20, records.find_goal(0).tally.max)

    def test_command_errors_are_reported_without_mutation(self) -> None:
        run_cli(self.config_path, "task", "new", "Keep")
        before = (self.config_path.parent / "data" / "records.toml").read_text(encoding="utf-8")

        for words in (["task", "remove", "9"], ["task", "remove", "nine"], ["tasks"], ["config", "debug", "yes"]):
            with self.subTest(words=words):
                result = run_cli(self.config_path, *words)
                self.assertEqual(1, result.code)
                self.assertTrue(result.stderr.startswith("error: "))

        after = (self.config_path.parent / "data" / "records.toml").read_text(encoding="utf-8")
        self.assertEqual(before, after)
        self.assertFalse(load_config(self.config_path).debug)

    def test_config_is_created_and_rewritten(self) -> None:
        run_cli(self.config_path)
        self.assertTrue(self.config_path.exists())

        data_dir = self.root / "elsewhere"
        run_cli(self.config_path, "config", "data_path", str(data_dir))
        run_cli(self.config_path, "task", "new", "Moved")
        self.assertEqual(str(data_dir), load_config(self.config_path).data_path)
        self.assertTrue((data_dir / "records.toml").exists())

    def test_debug_on_writes_event_log(self) -> None:
        run_cli(self.config_path, "config", "debug", "on")
        run_cli(self.config_path, "task", "new", "Logged")

        log_path = self.config_path.parent / "logs" / "events.jsonl"
        types = [json.loads(line)["event"] for line in log_path.read_text(encoding="utf-8").splitlines()]
        self.assertIn("command.dispatched", types)
        self.assertIn("records.saved", types)

    def test_malformed_records_are_fatal(self) -> None:
        records_path = self.config_path.parent / "data" / "records.toml"
        records_path.parent.mkdir(parents=True)
        records_path.write_text("[[tasks]\n", encoding="utf-8")

        result = run_cli(self.config_path, "task", "new", "X")
        self.assertEqual(1, result.code)
        self.assertTrue(result.stderr.startswith("fatal: "))
        self.assertEqual("[[tasks]\n", records_path.read_text(encoding="utf-8"))

    def test_tui_flag_runs_terminal_app(self) -> None:
        with patch("todobot.cli._run_terminal_app_entry", return_value=7) as app_mock:
            result = run_cli(self.config_path, "--tui")
        self.assertEqual(7, result.code)
        app_mock.assert_called_once()

    def test_tui_flag_reports_missing_textual(self) -> None:
        missing = ModuleNotFoundError("No module named 'textual'")
        missing.name = "textual"
        with patch("todobot.cli._run_terminal_app_entry", side_effect=missing):
            result = run_cli(self.config_path, "--tui")
        self.assertEqual(1, result.code)
        self.assertIn("textual", result.stderr)


if __name__ == "__main__":
    unittest.main()
