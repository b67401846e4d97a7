from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory
import unittest

from todobot.motions import InputMode, MotionEngine, build_motion_tree
from todobot.records import RecordSet

from tests.helpers import make_state, sample_records


class TestMotionEngine(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.state = make_state(Path(self._tmp.name), records=sample_records())
        self.engine = MotionEngine(build_motion_tree(), self.state)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def press(self, *keys: str) -> None:
        for key in keys:
            self.engine.handle_key(key)

    def test_starts_at_root_in_navigation(self) -> None:
        self.assertEqual(1, len(self.engine.log))
        self.assertEqual("home", self.engine.page)
        self.assertIs(InputMode.NAVIGATION, self.engine.mode)

    def test_back_at_root_is_a_no_op(self) -> None:
        self.assertFalse(self.engine.handle_key("backspace"))
        self.assertEqual(1, len(self.engine.log))

    def test_back_pops_exactly_one(self) -> None:
        self.press("g", "0")
        self.assertEqual(3, len(self.engine.log))
        self.assertTrue(self.engine.handle_key("backspace"))
        self.assertEqual(2, len(self.engine.log))
        self.assertEqual("goals", self.engine.page)

    def test_unmatched_mnemonic_is_silently_dropped(self) -> None:
        self.assertFalse(self.engine.handle_key("z"))
        self.assertEqual(["home"], self.engine.log.labels())
        self.assertEqual("", self.engine.message)

    def test_digit_without_numeric_child_is_dropped(self) -> None:
        self.assertFalse(self.engine.handle_key("0"))
        self.assertEqual(1, len(self.engine.log))

    def test_numeric_motion_is_bounded_by_live_size(self) -> None:
        self.press("g")
        self.assertFalse(self.engine.handle_key("2"))
        self.assertEqual(2, len(self.engine.log))
        self.assertTrue(self.engine.handle_key("1"))
        self.assertEqual(["home", "goals", "goal 1"], self.engine.log.labels())
        self.assertEqual("Garden", self.engine.selected_goal().name)

    def test_numeric_motion_rejected_on_empty_collection(self) -> None:
        self.state.records = RecordSet()
        self.press("t")
        for digit in "0123456789":
            self.assertFalse(self.engine.handle_key(digit))
        self.assertEqual(2, len(self.engine.log))

    def test_selection_is_resolved_against_live_records(self) -> None:
        self.press("g", "1")
        self.state.records.remove_goal(0)
        self.assertIsNone(self.engine.selected_goal())
        self.state.records.add_goal("Swim")
        self.assertEqual("Swim", self.engine.selected_goal().name)

    def test_confirm_without_form_does_nothing(self) -> None:
        self.press("g")
        self.assertFalse(self.engine.handle_key("enter"))
        self.assertIs(InputMode.NAVIGATION, self.engine.mode)

    def test_new_goal_form_end_to_end(self) -> None:
        self.press("g")
        depth = len(self.engine.log)
        self.press("+")
        self.assertEqual("goal.new", self.engine.page)

        self.press("enter")
        self.assertIs(InputMode.FIELD_ENTRY, self.engine.mode)
        self.assertEqual(0, self.engine.editor.focused)

        self.press("A", "l", "e", "x")
        self.assertEqual("Alex", self.engine.editor.field.value)

        self.press("enter", "enter", "enter")
        self.assertIs(InputMode.NAVIGATION, self.engine.mode)
        self.assertEqual("goals", self.engine.page)
        self.assertEqual(depth, len(self.engine.log))
        self.assertEqual("Alex", self.state.records.goals[-1].name)
        self.assertEqual(2, self.state.records.goals[-1].index)
        self.assertTrue(self.state.dirty)
        self.assertEqual("", self.engine.forms["goal.new"].fields[0].value)

    def test_cancel_leaves_form_without_commit(self) -> None:
        self.press("t", "+", "enter", "H", "i", "escape")
        self.assertIs(InputMode.NAVIGATION, self.engine.mode)
        self.assertEqual("tasks", self.engine.page)
        self.assertEqual(2, len(self.state.records.tasks))
        self.assertFalse(self.state.dirty)

    def test_up_on_first_field_leaves_form(self) -> None:
        self.press("t", "+", "enter", "up")
        self.assertIs(InputMode.NAVIGATION, self.engine.mode)
        self.assertEqual(2, len(self.engine.log))

    def test_rejected_commit_is_reported_and_abandoned(self) -> None:
        self.press("g", "+", "enter", "enter", "enter", "enter")
        self.assertIs(InputMode.NAVIGATION, self.engine.mode)
        self.assertTrue(self.engine.message.startswith("error:"))
        self.assertEqual(2, len(self.state.records.goals))
        self.assertFalse(self.state.dirty)
        self.assertEqual(["form.rejected"], [event.name for event in self.state.debug_log.recent])

    def test_progress_form_on_selected_goal(self) -> None:
        self.press("g", "0", "p", "enter", "7", "enter")
        self.assertEqual(7, self.state.records.goals[0].tally.progress)
        self.assertEqual(["home", "goals", "goal 0"], self.engine.log.labels())

    def test_remove_task_through_form(self) -> None:
        self.press("t", "1", "x", "enter", "1", "enter")
        self.assertEqual([0], [task.index for task in self.state.records.tasks])
        self.assertIsNone(self.engine.selected_task())
        self.assertEqual(["home", "tasks"], self.engine.log.labels())

    def test_removal_never_selects_the_next_record(self) -> None:
        self.press("g", "0", "x", "enter", "1", "enter")
        self.assertEqual(["Garden"], [goal.name for goal in self.state.records.goals])
        self.assertEqual(["home", "goals"], self.engine.log.labels())
        self.assertIsNone(self.engine.selected_goal())

        self.press("x", "enter", "1", "enter")
        self.assertEqual(["Garden"], [goal.name for goal in self.state.records.goals])

    def test_kept_record_stays_selected(self) -> None:
        self.press("t", "0", "x", "enter", "enter")
        self.assertEqual(2, len(self.state.records.tasks))
        self.assertEqual(["home", "tasks", "task 0"], self.engine.log.labels())


if __name__ == "__main__":
    unittest.main()
