from __future__ import annotations

import json
from pathlib import Path
from tempfile import TemporaryDirectory
import unittest

from todobot.events import RECENT_EVENTS, DebugLog, EventKind


class TestDebugLog(unittest.TestCase):
    def test_disabled_log_keeps_recent_events_in_memory_only(self) -> None:
        log = DebugLog()
        self.assertFalse(log.enabled)
        self.assertIsNone(log.last())

        event = log.record(EventKind.COMMAND, "dispatched", "task 0 created: Buy", path=["task", "new"])
        self.assertEqual("command.dispatched", event.name)
        self.assertTrue(event.ok)
        self.assertEqual({"path": ["task", "new"]}, event.detail)
        self.assertIs(event, log.last())

    def test_recent_events_are_bounded(self) -> None:
        log = DebugLog()
        for number in range(RECENT_EVENTS + 5):
            log.record(EventKind.FORM, "committed", str(number))
        self.assertEqual(RECENT_EVENTS, len(log.recent))
        self.assertEqual("5", log.recent[0].message)

    def test_enabled_log_appends_json_lines(self) -> None:
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "events.jsonl"
            log = DebugLog(path)
            log.record(EventKind.SYNC, "pull", "Already up to date.", changed=False)
            log.record(EventKind.FORM, "rejected", "missing argument: name", ok=False, page="goal.new")
            lines = path.read_text(encoding="utf-8").splitlines()

        first, second = (json.loads(line) for line in lines)
        self.assertEqual("sync.pull", first["event"])
        self.assertEqual({"changed": False}, first["detail"])
        self.assertEqual("form.rejected", second["event"])
        self.assertFalse(second["ok"])
        self.assertEqual("goal.new", second["detail"]["page"])
        self.assertIn("T", second["at"])


if __name__ == "__main__":
    unittest.main()
