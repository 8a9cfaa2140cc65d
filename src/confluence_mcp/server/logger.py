"""
Side-channel logger — NEVER writes to stdout (would corrupt MCP protocol)

Log records go to the log files and to stderr.
"""

import logging
import sys

from confluence_mcp.config import Config

_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Get a logger that writes to file and stderr only."""
    Config.ensure_dirs()

    logger = logging.getLogger(f"confluence_mcp.{name}")
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))

    fh = logging.FileHandler(Config.LOG_FILE, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(fh)

    eh = logging.FileHandler(Config.ERROR_LOG, encoding="utf-8")
    eh.setLevel(logging.ERROR)
    eh.setFormatter(logging.Formatter(_FORMAT + "\n%(exc_info)s", datefmt=_DATEFMT))
    logger.addHandler(eh)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.INFO)
    sh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(sh)

    logger.propagate = False
    return logger
