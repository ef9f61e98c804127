"""Root logger setup for the vulcan-prd CLI.

What each level shows here:
- ERROR: a publish that stopped after its branch was created (branch name included)
- WARNING: registry.json content that was replaced or entries that were dropped
- INFO: each remote mutation (branch, file write, PR) and dry-run summaries
- DEBUG: git remote detection and full tracebacks of failed publishes

User-facing results go to stdout/stderr from main.py, not through logging,
so the WARNING default keeps a normal run quiet. --verbose lowers it to INFO.
Settings come from the logging section of vulcan-prd.yaml or LOGGING_LEVEL /
LOGGING_FORMAT.
"""

import logging

from vulcan_prd.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "WARNING"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Level constant for a config name; unrecognised names mean INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


class PrdLogging:
    """Applies LoggingConfig to the root logger, optionally forced to INFO by --verbose."""

    def __init__(self, config: LoggingConfig, verbose: bool = False) -> None:
        level = _resolve_level(config.level)
        self._level = min(level, logging.INFO) if verbose else level
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)
