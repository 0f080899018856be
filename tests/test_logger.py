import sys
import os
import io
import json
import logging
import tempfile
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pid_loop.logger import JSONFormatter, setup_logging, get_logger
from pid_loop.core.control.pid import Controller
from pid_loop.core.quantities import J, M, S


class TestJSONFormatter(unittest.TestCase):
    def test_event_and_data(self):
        record = logging.LogRecord("Controller", logging.DEBUG, __file__, 1,
                                   "ControllerUpdate", ({"output": M * 2.0, "elapsed": 0.1},), None)
        entry = json.loads(JSONFormatter().format(record))
        self.assertEqual(entry["event"], "ControllerUpdate")
        self.assertEqual(entry["component"], "Controller")
        self.assertEqual(entry["level"], "DEBUG")
        self.assertEqual(entry["data"], {"output": "2.0 m", "elapsed": 0.1})

    def test_plain_message_has_empty_data(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "Started", None, None)
        self.assertEqual(json.loads(JSONFormatter().format(record))["data"], {})


class TestSetupLogging(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        root = logging.getLogger()
        self.saved = (root.level, root.handlers[:])

    def tearDown(self):
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        level, handlers = self.saved
        root.setLevel(level)
        for handler in handlers:
            root.addHandler(handler)
        self.tmp.cleanup()

    def read_events(self, log_file):
        with open(log_file) as f:
            return [json.loads(line) for line in f if line.strip()]

    def test_verbose_session_records_controller_updates(self):
        log_file = os.path.join(self.tmp.name, "logs", "run.jsonl")
        handler = setup_logging(log_file=log_file, verbose=True, stream=io.StringIO())
        self.assertEqual(handler.baseFilename, os.path.abspath(log_file))
        controller = Controller(1.0 * J / M, 0.0 * J / (M * S), 0.0 * J / (M / S), 0.0 * J, 0.0 * M, 0.0 * M * S)
        controller.update(1.0 * M, 0.5 * S)

        events = self.read_events(log_file)
        names = [e["event"] for e in events]
        self.assertEqual(names[0], "LoggingInitialized")
        self.assertIn("ControllerCreated", names)
        update = [e for e in events if e["event"] == "ControllerUpdate"][-1]
        self.assertEqual(update["component"], "Controller")
        self.assertEqual(update["data"]["output"], "1.0 kg*m^2*s^-2")
        self.assertEqual(update["data"]["elapsed"], "0.5 s")

    def test_quiet_session_skips_debug_events(self):
        log_file = os.path.join(self.tmp.name, "run.jsonl")
        setup_logging(log_file=log_file, stream=io.StringIO())
        controller = Controller(1.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        controller.update(1.0, 1.0)
        get_logger("Application").info("LoopFinished", {"steps": 1})

        names = [e["event"] for e in self.read_events(log_file)]
        self.assertEqual(names, ["LoggingInitialized", "LoopFinished"])

    def test_without_log_file_events_go_to_console_only(self):
        console = io.StringIO()
        handler = setup_logging(verbose=True, stream=console)
        self.assertIsNone(handler)
        root = logging.getLogger()
        self.assertFalse(any(isinstance(h, logging.FileHandler) for h in root.handlers))

        controller = Controller(2.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        controller.update(1.5, 1.0)

        lines = console.getvalue().splitlines()
        self.assertIn("LoggingInitialized", lines[0])
        update = [line for line in lines if "ControllerUpdate" in line][-1]
        self.assertIn("[DEBUG] [Controller]", update)
        self.assertIn("output=3.0", update)
        self.assertEqual(os.listdir(self.tmp.name), [])

    def test_quiet_console_shows_warnings_only(self):
        console = io.StringIO()
        setup_logging(stream=console)
        get_logger("Application").info("LoopStarted", {"steps": 1})
        get_logger("Application").warning("LoopOverrun", {"elapsed": 0.2})
        self.assertEqual(len(console.getvalue().splitlines()), 1)
        self.assertIn("LoopOverrun elapsed=0.2", console.getvalue())


if __name__ == "__main__":
    unittest.main()
