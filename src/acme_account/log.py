"""Logging utilities for acme-account.

All modules log through ``logging.getLogger(__name__)``. `setup_logging`
attaches a single terminal handler to the root logger once the command
line has been parsed. The default verbosity is WARNING, so protocol
traffic (logged at DEBUG) only shows up with ``-vv``.

"""
import logging
import sys
from typing import IO
from typing import Optional

from acme_account import constants
from acme_account.configuration import NamespaceConfig

# Logging format
CLI_FMT = "%(message)s"
DEBUG_FMT = "%(asctime)s:%(levelname)s:%(name)s:%(message)s"

logger = logging.getLogger(__name__)


def setup_logging(config: NamespaceConfig, stream: Optional[IO] = None) -> logging.Handler:
    """Setup terminal logging.

    :param acme_account.configuration.NamespaceConfig config: Configuration object
    :param stream: Stream to log to, `sys.stderr` by default.

    :returns: the installed handler
    :rtype: logging.Handler

    """
    level = logging_level(config)

    handler = ColoredStreamHandler(stream)
    handler.setFormatter(logging.Formatter(CLI_FMT if level > logging.DEBUG else DEBUG_FMT))
    handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # send all records to handlers
    for existing in list(root_logger.handlers):
        if isinstance(existing, ColoredStreamHandler):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logger.debug('Root logging level set at %d', level)
    return handler


def logging_level(config: NamespaceConfig) -> int:
    """Terminal logging level requested by the user."""
    if config.quiet:
        return constants.QUIET_LOGGING_LEVEL
    return max(constants.DEFAULT_LOGGING_LEVEL - config.verbose_count * 10, logging.DEBUG)


class ColoredStreamHandler(logging.StreamHandler):
    """Sends colored logging output to a stream.

    If the specified stream is not a tty, the class works like the
    standard `logging.StreamHandler`. Default red_level is
    `logging.WARNING`.

    :ivar bool colored: True if output should be colored
    :ivar bool red_level: The level at which to output

    """
    RED = '\033[31m'
    RESET = '\033[0m'

    def __init__(self, stream: Optional[IO] = None) -> None:
        super().__init__(stream)
        self.colored = (sys.stderr.isatty() if stream is None else
                        stream.isatty())
        self.red_level = logging.WARNING

    def format(self, record: logging.LogRecord) -> str:
        """Formats the string representation of record.

        :param logging.LogRecord record: Record to be formatted

        :returns: Formatted, string representation of record
        :rtype: str

        """
        output = super().format(record)
        if self.colored and record.levelno >= self.red_level:
            return ''.join((self.RED, output, self.RESET))
        return output
