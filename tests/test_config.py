import io
import json
import logging
import os
import tempfile
import unittest
from unittest.mock import patch

from tourism_mcp.config import Config, setup_logging
from tourism_mcp.main import build_mastercard_client


class TestConfig(unittest.TestCase):
    def test_inline_key_unescapes_newlines(self):
        with patch.object(Config, "MASTERCARD_PRIVATE_KEY", "-----BEGIN-----\\nabc\\n-----END-----"):
            self.assertEqual(Config.mastercard_private_key(), "-----BEGIN-----\nabc\n-----END-----")

    def test_key_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".pem", delete=False) as f:
            f.write("PEM")
        try:
            with patch.object(Config, "MASTERCARD_PRIVATE_KEY", None), \
                    patch.object(Config, "MASTERCARD_PRIVATE_KEY_PATH", f.name):
                self.assertEqual(Config.mastercard_private_key(), "PEM")
        finally:
            os.unlink(f.name)

    def test_missing_credentials_disable_atm_client(self):
        with patch.object(Config, "MASTERCARD_CONSUMER_KEY", None), \
                patch.object(Config, "MASTERCARD_PRIVATE_KEY", None), \
                patch.object(Config, "MASTERCARD_PRIVATE_KEY_PATH", None):
            with self.assertLogs("tourism_mcp.config", level="WARNING"):
                self.assertFalse(Config.validate())
            self.assertFalse(Config.status()["configured"])
            with self.assertLogs("tourism_mcp.config", level="WARNING"):
                self.assertIsNone(build_mastercard_client())

    def test_status_hides_secrets(self):
        with patch.object(Config, "MASTERCARD_CONSUMER_KEY", "ck"), \
                patch.object(Config, "MASTERCARD_PRIVATE_KEY", "secret"):
            status = Config.status()
        self.assertTrue(status["configured"])
        self.assertNotIn("secret", json.dumps(status))
        self.assertNotIn("ck", status.values())


class TestSetupLogging(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self.saved = (root.level, list(root.handlers))

    def tearDown(self):
        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)
        level, handlers = self.saved
        root.setLevel(level)
        for h in handlers:
            root.addHandler(h)

    def test_json_lines(self):
        stream = io.StringIO()
        setup_logging("INFO", stream=stream)
        logging.getLogger("tourism_mcp.test").info("hello", extra={"request_id": 5})
        record = json.loads(stream.getvalue().splitlines()[-1])
        self.assertEqual(record["message"], "hello")
        self.assertEqual(record["level"], "INFO")
        self.assertEqual(record["request_id"], 5)


if __name__ == "__main__":
    unittest.main()
