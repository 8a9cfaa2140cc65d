"""
Confluence MCP Configuration — Settings for the MCP server

Load order: env vars > ~/.confluence-mcp/config.env > defaults
"""

import os
from pathlib import Path
from typing import List


def _load_config_env():
    """Load key=value pairs from ~/.confluence-mcp/config.env if it exists."""
    config_file = Path.home() / ".confluence-mcp" / "config.env"
    if not config_file.exists():
        return
    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


# Load config.env before reading env vars
_load_config_env()


class ConfigError(Exception):
    """Raised when required startup settings are missing."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(
            "Missing required Confluence configuration in environment variables: "
            + ", ".join(missing)
        )


class Config:
    # Server identity
    SERVER_NAME = "confluence-mcp"
    SERVER_VERSION = "1.0.0"
    PROTOCOL_VERSION = "2024-11-05"

    # Confluence connection (required)
    BASE_URL = os.environ.get("CONFLUENCE_BASE_URL", "")
    EMAIL = os.environ.get("CONFLUENCE_EMAIL", "")
    API_TOKEN = os.environ.get("CONFLUENCE_API_TOKEN", "")

    # Request shaping
    DEFAULT_LIMIT = int(os.environ.get("CONFLUENCE_DEFAULT_LIMIT", "50"))
    TIMEOUT = float(os.environ.get("CONFLUENCE_TIMEOUT", "30"))

    # Paths
    DATA_DIR = Path(os.environ.get(
        "CONFLUENCE_MCP_DATA_DIR", str(Path.home() / ".confluence-mcp")
    ))
    LOG_DIR = DATA_DIR / "logs"

    # Logging (NEVER to stdout — would corrupt MCP protocol)
    LOG_LEVEL = os.environ.get("CONFLUENCE_MCP_LOG_LEVEL", "INFO")
    LOG_FILE = LOG_DIR / "confluence-mcp.log"
    ERROR_LOG = LOG_DIR / "confluence-mcp-errors.log"

    REQUIRED = {
        "CONFLUENCE_BASE_URL": "BASE_URL",
        "CONFLUENCE_EMAIL": "EMAIL",
        "CONFLUENCE_API_TOKEN": "API_TOKEN",
    }

    @classmethod
    def ensure_dirs(cls):
        """Create required directories."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def missing(cls) -> List[str]:
        """Names of required environment variables that are unset."""
        return [env for env, attr in cls.REQUIRED.items() if not getattr(cls, attr)]

    @classmethod
    def validate(cls):
        missing = cls.missing()
        if missing:
            raise ConfigError(missing)
