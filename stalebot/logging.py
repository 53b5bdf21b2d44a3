"""Root logger setup for one stalebot run.

The run logs in two phases. Before the config is read, ``bootstrap``
installs a plain INFO handler so configuration errors still reach stderr.
Once ``LoggingConfig`` is known, ``setup`` replaces it with the configured
level and format (config.yaml ``logging`` section or LOGGING_LEVEL /
LOGGING_FORMAT).

DEBUG shows every item decision, INFO the mutations and the run summary,
WARNING budget exhaustion, ERROR fatal failures.
"""

import logging

from stalebot.config import LoggingConfig

BOOTSTRAP_FORMAT = "%(levelname)s %(name)s: %(message)s"

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR")


def level_from_name(name: str | None) -> int:
    """Logging constant for DEBUG/INFO/WARNING/ERROR (any case); INFO otherwise."""
    key = (name or "").strip().upper()
    return getattr(logging, key) if key in _LEVEL_NAMES else logging.INFO


class StaleBotLogging:
    """Applies a LoggingConfig to the root logger."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = level_from_name(config.level)
        self._format = config.format or LoggingConfig.model_fields["format"].default

    @staticmethod
    def bootstrap() -> None:
        """Plain stderr logging until the config has been loaded."""
        logging.basicConfig(level=logging.INFO, format=BOOTSTRAP_FORMAT, force=True)

    def setup(self) -> None:
        logging.basicConfig(level=self._level, format=self._format, force=True)
        # urllib3 logs every request at DEBUG; only show it when asked for
        logging.getLogger("urllib3").setLevel(logging.DEBUG if self._level <= logging.DEBUG else logging.WARNING)
