import importlib.util
import io
import os
import unittest
from contextlib import redirect_stderr
from unittest.mock import patch

from tests._test_path import SRC  # noqa: F401

import run_gui
from petid.core.config import ServiceConfig


class TestRunGui(unittest.TestCase):
    def test_bad_timeout_exits_2_without_traceback(self):
        err = io.StringIO()
        with patch.dict(os.environ, {"PETID_TIMEOUT": "soon"}, clear=True), \
                patch.object(run_gui.sys, "argv", ["run_gui.py"]), redirect_stderr(err):
            code = run_gui.main()

        self.assertEqual(code, 2)
        self.assertIn("ERROR: PETID_TIMEOUT must be a number of seconds", err.getvalue())
        self.assertNotIn("Traceback", err.getvalue())

    @unittest.skipUnless(importlib.util.find_spec("tkinter"), "tkinter not available")
    def test_env_config_reaches_window(self):
        with patch.dict(os.environ, {"PETID_SERVICE_URL": "http://pets.local", "PETID_TIMEOUT": "5"}, clear=True), \
                patch.object(run_gui.sys, "argv", ["run_gui.py"]), \
                patch("petid.ui.main_window.run") as run:
            code = run_gui.main()

        self.assertEqual(code, 0)
        run.assert_called_once_with(ServiceConfig(base_url="http://pets.local", timeout=5.0))
