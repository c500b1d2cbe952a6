"""
Contains the default logging sink. It forwards everything to the `pvtree` logger of the standard logging module.
"""
import logging
from typing import Any, Optional

_logger = logging.getLogger("pvtree")


class StdLoggingSink:
    """
    Forwards log items to a `logging.Logger`. Records of non-verbose validators are demoted to DEBUG (errors excluded).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger if logger is not None else _logger

    def _emit(self, level: int, source_id: str, *items: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, "%s: %s", source_id, " ".join(str(item) for item in items))

    def info(self, source_id: str, verbose: bool, *items: Any) -> None:
        self._emit(logging.INFO if verbose else logging.DEBUG, source_id, *items)

    def warn(self, source_id: str, verbose: bool, *items: Any) -> None:
        self._emit(logging.WARNING if verbose else logging.DEBUG, source_id, *items)

    def error(self, source_id: str, verbose: bool, *items: Any) -> None:  # pylint: disable=unused-argument
        self._emit(logging.ERROR, source_id, *items)


default_sink = StdLoggingSink()
