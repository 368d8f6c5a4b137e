import os
import sys
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file in project root
_project_root = Path(__file__).resolve().parent.parent
load_dotenv(_project_root / ".env")

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "catalog.json"


class Config:
    """Configuration management for the Tourism MCP server."""

    # Mastercard ATM Locator (OAuth 1.0a, RSA-SHA256)
    MASTERCARD_CONSUMER_KEY = os.getenv("MASTERCARD_CONSUMER_KEY")
    MASTERCARD_PRIVATE_KEY = os.getenv("MASTERCARD_PRIVATE_KEY")
    MASTERCARD_PRIVATE_KEY_PATH = os.getenv("MASTERCARD_PRIVATE_KEY_PATH")
    MASTERCARD_API_URL = os.getenv(
        "MASTERCARD_API_URL",
        "https://sandbox.api.mastercard.com/location-intelligence/atm-locations",
    )
    MASTERCARD_TIMEOUT = float(os.getenv("MASTERCARD_TIMEOUT", "30"))

    # Pending-state lifetimes
    BOOKING_TTL_SECONDS = int(os.getenv("BOOKING_TTL_SECONDS", "7200"))
    RESERVATION_TTL_SECONDS = int(os.getenv("RESERVATION_TTL_SECONDS", "7200"))
    USER_PROFILE_TTL_SECONDS = int(os.getenv("USER_PROFILE_TTL_SECONDS", "7200"))

    # Store backend: "memory" or "redis"
    CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory").lower()
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    CATALOG_PATH = Path(os.getenv("CATALOG_PATH") or DEFAULT_CATALOG_PATH)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def mastercard_private_key(cls) -> Optional[str]:
        """Resolve the PEM text, from the env variable or the key file."""
        if cls.MASTERCARD_PRIVATE_KEY:
            # .env files usually carry the PEM on one line with literal \n
            return cls.MASTERCARD_PRIVATE_KEY.replace("\\n", "\n")
        if cls.MASTERCARD_PRIVATE_KEY_PATH:
            return Path(cls.MASTERCARD_PRIVATE_KEY_PATH).read_text()
        return None

    @classmethod
    def mastercard_configured(cls) -> bool:
        has_key = bool(cls.MASTERCARD_PRIVATE_KEY or cls.MASTERCARD_PRIVATE_KEY_PATH)
        return bool(cls.MASTERCARD_CONSUMER_KEY and has_key and cls.MASTERCARD_API_URL)

    @classmethod
    def status(cls) -> Dict[str, Any]:
        """Report which Mastercard settings are present, without the secrets."""
        return {
            "configured": cls.mastercard_configured(),
            "consumer_key_set": bool(cls.MASTERCARD_CONSUMER_KEY),
            "private_key_set": bool(cls.MASTERCARD_PRIVATE_KEY or cls.MASTERCARD_PRIVATE_KEY_PATH),
            "api_url_set": bool(cls.MASTERCARD_API_URL),
            "api_url": cls.MASTERCARD_API_URL,
            "cache_backend": cls.CACHE_BACKEND,
        }

    @classmethod
    def validate(cls):
        """Check for missing optional keys. The catalog tools work without them."""
        missing = []
        if not cls.MASTERCARD_CONSUMER_KEY:
            missing.append("MASTERCARD_CONSUMER_KEY")
        if not (cls.MASTERCARD_PRIVATE_KEY or cls.MASTERCARD_PRIVATE_KEY_PATH):
            missing.append("MASTERCARD_PRIVATE_KEY or MASTERCARD_PRIVATE_KEY_PATH")

        if missing:
            logger.warning(f"Missing keys: {', '.join(missing)}. ATM lookups are disabled.")
            return False
        return True


def setup_logging(level="INFO", stream=None):
    """Configure structured JSON logging."""
    # Create a handler that writes to stdout unless told otherwise
    handler = logging.StreamHandler(stream or sys.stdout)

    # Use a custom formatter for JSON output
    class JsonFormatter(logging.Formatter):
        def format(self, record):
            log_record = {
                "timestamp": self.formatTime(record, self.datefmt),
                "level": record.levelname,
                "message": record.getMessage(),
                "module": record.module,
                "function": record.funcName,
            }
            if hasattr(record, "request_id"):
                log_record["request_id"] = record.request_id
            if record.exc_info:
                log_record["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_record)

    handler.setFormatter(JsonFormatter())

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplication
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
