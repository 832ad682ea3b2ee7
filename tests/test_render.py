import unittest
from datetime import datetime, timezone

from tests._test_path import SRC  # noqa: F401
from tests._fakes import image_file

from petid.app import render
from petid.app.state import SessionState, UploadSession
from petid.core import errors
from petid.core.errors import Err, Ok
from petid.core.models import MatchRecord, RegistrationResult, SearchResult, WorkflowKind
from petid.validation.validator import validate_image

TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestText(unittest.TestCase):
    def test_registration_text(self):
        self.assertEqual(render.registration_text(RegistrationResult("7f3a")), "Registered Animal ID: 7f3a")

    def test_similarity_text(self):
        self.assertEqual(render.similarity_text(0.93), "93.00%")
        self.assertEqual(render.similarity_text(1), "100.00%")
        self.assertEqual(render.similarity_text(0.0), "0.00%")

    def test_card_includes_image_only_when_present(self):
        without = render.match_card_lines(MatchRecord("a", 0.5, TS))
        with_url = render.match_card_lines(MatchRecord("a", 0.5, TS, image_url="https://x/a.png"))
        self.assertEqual(len(without), 3)
        self.assertEqual(with_url[-1], "Image: https://x/a.png")

    def test_naive_timestamp_is_shown_as_given(self):
        line = render.timestamp_text(MatchRecord("a", 0.5, datetime(2024, 5, 6, 7, 8, 9)))
        self.assertEqual(line, "2024-05-06 07:08:09")

    def test_format_search_text(self):
        txt = render.format_search_text(SearchResult((MatchRecord("7f3a", 0.93, TS),)))
        self.assertIn("Search Results", txt)
        self.assertIn("Animal ID: 7f3a", txt)
        self.assertIn("Similarity: 93.00%", txt)

    def test_format_search_text_empty(self):
        self.assertIn("No matching results found.", render.format_search_text(SearchResult()))


class TestRenderSession(unittest.TestCase):
    def test_empty_session(self):
        view = render.render_session(UploadSession(WorkflowKind.SEARCH))
        self.assertIs(view.state, SessionState.EMPTY)
        self.assertIsNone(view.error)
        self.assertIsNone(view.headline)
        self.assertEqual(view.cards, ())
        self.assertFalse(view.can_submit)

    def test_pending_session(self):
        s = UploadSession(WorkflowKind.REGISTER)
        s.select(validate_image(image_file("cat.png"), WorkflowKind.REGISTER))
        s.begin()
        view = render.render_session(s)
        self.assertTrue(view.busy)
        self.assertEqual(view.busy_text, "Registering...")
        self.assertEqual(view.file_name, "cat.png")
        self.assertIsNotNone(view.preview)

    def test_failed_session_shows_error_only(self):
        s = UploadSession(WorkflowKind.SEARCH)
        s.select(validate_image(image_file("cat2.jpg"), WorkflowKind.SEARCH))
        gen = s.begin()
        s.resolve(gen, Err(errors.network_error()))
        view = render.render_session(s)
        self.assertEqual(view.error, "No response from the server. Please check your connection.")
        self.assertIsNone(view.headline)

    def test_search_cards_keep_order(self):
        s = UploadSession(WorkflowKind.SEARCH)
        s.select(validate_image(image_file("cat2.jpg"), WorkflowKind.SEARCH))
        gen = s.begin()
        s.resolve(gen, Ok(SearchResult((MatchRecord("b", 0.2, TS), MatchRecord("a", 0.9, TS)))))
        view = render.render_session(s)
        self.assertEqual([card[0] for card in view.cards], ["Animal ID: b", "Animal ID: a"])
        self.assertEqual([m.animal_id for m in view.matches], ["b", "a"])

    def test_matches_empty_outside_search_results(self):
        s = UploadSession(WorkflowKind.SEARCH)
        s.select(validate_image(image_file("cat2.jpg"), WorkflowKind.SEARCH))
        gen = s.begin()
        s.resolve(gen, Ok(SearchResult(())))
        self.assertEqual(render.render_session(s).matches, ())
