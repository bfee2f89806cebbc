"""
Taskboard Test Suite — Config, Logging and CLI
================================================

Usage:
    python -m pytest tests/test_config_cli.py -v
"""
import sys
import os
import io
import logging
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from taskboard import __version__
from taskboard.cli import build_config, build_parser, main
from taskboard.config import ServerConfig
from taskboard.witness import TaskWitness, setup_logging


# ─────────────────────────────────────────────
#  ServerConfig Tests
# ─────────────────────────────────────────────

class TestServerConfig(unittest.TestCase):

    def test_defaults_from_empty_env(self):
        config = ServerConfig.from_env({})
        self.assertEqual(config, ServerConfig())
        self.assertEqual(config.cors_origins, ["*"])
        self.assertTrue(config.legacy_routes)

    def test_reads_env(self):
        config = ServerConfig.from_env({
            "TASKBOARD_HOST": "0.0.0.0",
            "TASKBOARD_PORT": "9000",
            "TASKBOARD_LOG_LEVEL": "debug",
            "TASKBOARD_MAX_TITLE_LENGTH": "50",
            "TASKBOARD_CORS_ORIGINS": "http://a.test, http://b.test",
            "TASKBOARD_LEGACY_ROUTES": "no",
        })
        self.assertEqual(config.host, "0.0.0.0")
        self.assertEqual(config.port, 9000)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.max_title_length, 50)
        self.assertEqual(config.cors_origins, ["http://a.test", "http://b.test"])
        self.assertFalse(config.legacy_routes)

    def test_malformed_numbers_fall_back(self):
        config = ServerConfig.from_env({"TASKBOARD_PORT": "eighty"})
        self.assertEqual(config.port, 8080)


# ─────────────────────────────────────────────
#  Witness / Logging Tests
# ─────────────────────────────────────────────

class TestWitness(unittest.TestCase):

    def test_log_action(self):
        witness = TaskWitness()
        with self.assertLogs("taskboard.witness", level="INFO") as logs:
            witness.log_action("add", {"id": 1, "title": "x"})
        self.assertIn('add {"id": 1, "title": "x"}', logs.output[0])

    def test_log_error(self):
        witness = TaskWitness()
        with self.assertLogs("taskboard.witness", level="WARNING") as logs:
            witness.log_error(404, "Task 1 not found", "/tasks/1/toggle")
        self.assertIn("404 /tasks/1/toggle Task 1 not found", logs.output[0])

    def test_never_raises(self):
        class BrokenLogger:
            def info(self, *args):
                raise IOError("disk full")

            def warning(self, *args):
                raise IOError("disk full")

        witness = TaskWitness(logger=BrokenLogger())
        witness.log_action("add", {"id": 1})
        witness.log_error(400, "bad")

    def test_setup_logging_replaces_handlers(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging("debug")
            setup_logging("debug")
            self.assertEqual(len(root.handlers), 1)
            self.assertEqual(root.level, logging.DEBUG)
            setup_logging("nonsense")
            self.assertEqual(root.level, logging.INFO)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            logging.captureWarnings(False)


# ─────────────────────────────────────────────
#  CLI Tests
# ─────────────────────────────────────────────

class TestCli(unittest.TestCase):

    def test_version(self):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["version"])
        self.assertEqual(code, 0)
        self.assertIn(__version__, out.getvalue())

    def test_no_command_prints_help(self):
        out = io.StringIO()
        with redirect_stdout(out):
            main([])
        self.assertIn("taskboard", out.getvalue())

    def test_flags_override_env(self):
        args = build_parser().parse_args(
            ["start", "--port", "9100", "--log-level", "warning", "--no-legacy"]
        )
        with patch.dict(os.environ, {"TASKBOARD_PORT": "7000", "TASKBOARD_HOST": "10.0.0.1"}):
            config = build_config(args)
        self.assertEqual(config.port, 9100)
        self.assertEqual(config.host, "10.0.0.1")
        self.assertEqual(config.log_level, "WARNING")
        self.assertFalse(config.legacy_routes)

    def test_start_runs_server(self):
        with patch("taskboard.server.run_server") as run_server, \
             patch("taskboard.cli.setup_logging") as setup:
            code = main(["start", "--port", "9200"])
        self.assertEqual(code, 0)
        setup.assert_called_once()
        config = run_server.call_args[0][0]
        self.assertEqual(config.port, 9200)


if __name__ == "__main__":
    unittest.main()
