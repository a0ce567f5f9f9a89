"""
Configuration management via environment variables.
All config flows through here; CLI flags only override these defaults.
"""

import os
from dotenv import load_dotenv

# Load .env file if present (local dev); deployments inject env vars directly
load_dotenv()


def _get_env(key: str, default: str) -> str:
    """Get environment variable with a default."""
    return os.getenv(key, default)


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    return float(os.getenv(key, str(default)))


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int."""
    return int(os.getenv(key, str(default)))


# Hyperion endpoint and query
HYPERION_ENDPOINT = _get_env("HYPERION_ENDPOINT", "https://wax.greymass.com")
HYPERION_FILTER = _get_env("HYPERION_FILTER", "")  # e.g. "account=eosio&act.name=buyrambytes"
PAGE_LIMIT = _get_env_int("PAGE_LIMIT", 1000)

# Resume cursor
STATE_FILE = _get_env("STATE_FILE", ".state")

# Polling (seconds)
SLEEP_TIME_BASE_SECONDS = _get_env_float("SLEEP_TIME_BASE_SECONDS", 30.0)
RATE_LIMIT_WAIT_SECONDS = _get_env_float("RATE_LIMIT_WAIT_SECONDS", 20.0)
REQUEST_TIMEOUT_SECONDS = _get_env_float("REQUEST_TIMEOUT_SECONDS", 30.0)

# Log the head block once it has moved this far since the last report
PROGRESS_LOG_BLOCKS = _get_env_int("PROGRESS_LOG_BLOCKS", 500)

# Logging
LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
LOG_FILE_PATH = _get_env("LOG_FILE_PATH", "")  # empty: stderr only
