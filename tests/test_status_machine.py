import itertools
import unittest

from app.services.request_service import STATUS_TRANSITIONS, can_transition, created_at_key

STATUSES = ["open", "in_review", "assigned", "completed"]
RANK = {s: i for i, s in enumerate(STATUSES)}


class StatusMachineTests(unittest.TestCase):
    def test_allowed_paths(self):
        self.assertTrue(can_transition("open", "in_review"))
        self.assertTrue(can_transition("open", "completed"))
        self.assertTrue(can_transition("in_review", "assigned"))
        self.assertTrue(can_transition("in_review", "completed"))
        self.assertTrue(can_transition("assigned", "completed"))

    def test_never_regresses(self):
        for current, new in itertools.product(STATUSES, STATUSES):
            if can_transition(current, new):
                self.assertGreater(RANK[new], RANK[current], (current, new))

    def test_nothing_returns_to_open_and_completed_is_terminal(self):
        for current in STATUSES:
            self.assertFalse(can_transition(current, "open"))
        self.assertEqual(STATUS_TRANSITIONS["completed"], set())
        self.assertFalse(can_transition("open", "assigned"))
        self.assertFalse(can_transition("unknown", "completed"))

    def test_created_at_key_treats_missing_as_epoch(self):
        from datetime import datetime, timezone

        self.assertEqual(created_at_key(None), 0.0)
        naive = datetime(2024, 1, 1, 12, 0)
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(created_at_key(naive), created_at_key(aware))


if __name__ == "__main__":
    unittest.main()
