import unittest
from dataclasses import FrozenInstanceError

from tests._test_path import SRC  # noqa: F401

from petid.core import errors
from petid.core.errors import ErrorKind, ValidationError
from petid.core.models import WorkflowKind


class TestErrorTaxonomy(unittest.TestCase):
    def test_validation_kinds(self):
        self.assertTrue(ErrorKind.INVALID_FILE_TYPE.is_validation)
        self.assertTrue(ErrorKind.MISSING_INPUT.is_validation)
        self.assertFalse(ErrorKind.NETWORK.is_validation)

    def test_invalid_response_is_server_variant(self):
        self.assertTrue(ErrorKind.INVALID_RESPONSE.is_server)
        self.assertTrue(ErrorKind.SERVER.is_server)
        self.assertFalse(ErrorKind.CLIENT.is_server)

    def test_messages(self):
        self.assertEqual(errors.invalid_file_type().message, "Invalid file type. Only JPEG and PNG are allowed.")
        self.assertEqual(errors.missing_input(WorkflowKind.SEARCH).message, "Please select an image to search.")
        self.assertEqual(
            errors.server_error(WorkflowKind.REGISTER, "face not found").message,
            "Error registering animal: face not found",
        )
        self.assertEqual(
            errors.server_error(WorkflowKind.SEARCH, None).message,
            "Error searching for animal: Unknown error",
        )
        self.assertIn("check your connection", errors.network_error().message)
        self.assertEqual(errors.client_error(RuntimeError("boom")).message, "Error: boom")

    def test_validation_errors_are_frozen(self):
        e = errors.invalid_file_type()
        self.assertIsInstance(e, ValidationError)
        with self.assertRaises(FrozenInstanceError):
            e.message = "changed"  # type: ignore[misc]
