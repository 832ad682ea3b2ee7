import unittest
from datetime import datetime, timezone

from tests._test_path import SRC  # noqa: F401

from petid.app.projector import project
from petid.core.errors import Err, ErrorKind, Ok
from petid.core.models import RegistrationResult, SearchResult, WorkflowKind

REG = WorkflowKind.REGISTER
SEARCH = WorkflowKind.SEARCH


class TestProjectRegistration(unittest.TestCase):
    def test_extracts_animal_id(self):
        out = project({"animal_id": "7f3a"}, REG)
        self.assertEqual(out, Ok(RegistrationResult("7f3a")))

    def test_missing_id_is_invalid_response(self):
        for body in ({}, {"animal_id": None}, {"animal_id": 12}, {"animal_id": ""}, [], "ok"):
            with self.subTest(body=body):
                out = project(body, REG)
                self.assertIsInstance(out, Err)
                self.assertIs(out.error.kind, ErrorKind.INVALID_RESPONSE)
                self.assertTrue(out.error.message.startswith("Error registering animal:"))


class TestProjectSearch(unittest.TestCase):
    def test_empty_matches(self):
        self.assertEqual(project({"matches": []}, SEARCH), Ok(SearchResult()))

    def test_missing_matches_is_empty_not_error(self):
        self.assertEqual(project({}, SEARCH), Ok(SearchResult()))
        self.assertEqual(project({"matches": None}, SEARCH), Ok(SearchResult()))

    def test_projects_records_in_server_order(self):
        body = {
            "matches": [
                {"animal_id": "low", "similarity": 0.1, "registered_at": "2024-01-02T03:04:05Z"},
                {
                    "animal_id": "high",
                    "similarity": 1,
                    "registered_at": "2024-01-01T00:00:00+00:00",
                    "image_url": "https://cdn.example/high.png",
                },
            ]
        }
        out = project(body, SEARCH)
        self.assertIsInstance(out, Ok)
        matches = out.value.matches
        self.assertEqual([m.animal_id for m in matches], ["low", "high"])
        self.assertAlmostEqual(matches[0].similarity, 0.1)
        self.assertIsInstance(matches[1].similarity, float)
        self.assertEqual(matches[0].registered_at, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assertIsNone(matches[0].image_url)
        self.assertEqual(matches[1].image_url, "https://cdn.example/high.png")

    def test_malformed_records(self):
        good = {"animal_id": "a", "similarity": 0.5, "registered_at": "2024-01-01T00:00:00Z"}
        bad_bodies = [
            {"matches": "none"},
            {"matches": [None]},
            {"matches": [dict(good, animal_id=None)]},
            {"matches": [dict(good, similarity="high")]},
            {"matches": [dict(good, similarity=True)]},
            {"matches": [dict(good, registered_at="yesterday")]},
            {"matches": [{k: v for k, v in good.items() if k != "registered_at"}]},
            {"matches": [dict(good, image_url=5)]},
        ]
        for body in bad_bodies:
            with self.subTest(body=body):
                out = project(body, SEARCH)
                self.assertIsInstance(out, Err)
                self.assertIs(out.error.kind, ErrorKind.INVALID_RESPONSE)
                self.assertTrue(out.error.message.startswith("Error searching for animal:"))

    def test_non_object_body(self):
        out = project(["not", "an", "object"], SEARCH)
        self.assertIs(out.error.kind, ErrorKind.INVALID_RESPONSE)
