import unittest
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

from tests._test_path import SRC  # noqa: F401  (ensures src on path)

from petid.core.models import (
    REGISTER_MEDIA_TYPES,
    MatchRecord,
    RegistrationResult,
    SearchResult,
    WorkflowKind,
)


class TestWorkflowKind(unittest.TestCase):
    def test_endpoints(self):
        self.assertEqual(WorkflowKind.REGISTER.endpoint, "/register")
        self.assertEqual(WorkflowKind.SEARCH.endpoint, "/search")

    def test_from_value(self):
        self.assertIs(WorkflowKind("search"), WorkflowKind.SEARCH)

    def test_register_allow_list(self):
        self.assertEqual(set(REGISTER_MEDIA_TYPES), {"image/jpeg", "image/png"})


class TestResults(unittest.TestCase):
    def test_registration_frozen(self):
        r = RegistrationResult(animal_id="7f3a")
        with self.assertRaises(FrozenInstanceError):
            r.animal_id = "x"  # type: ignore[misc]

    def test_search_result_empty_by_default(self):
        r = SearchResult()
        self.assertTrue(r.is_empty)
        self.assertEqual(len(r), 0)

    def test_search_result_keeps_order(self):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        low = MatchRecord("b", 0.2, ts)
        high = MatchRecord("a", 0.9, ts)
        r = SearchResult(matches=(low, high))
        self.assertEqual([m.animal_id for m in r.matches], ["b", "a"])
        self.assertFalse(r.is_empty)
        self.assertIsNone(low.image_url)
