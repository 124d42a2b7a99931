"""Tests for acme_account.log."""
import io
import logging
import sys
import unittest
from unittest import mock

import pytest

from acme_account import constants


class SetupLoggingTest(unittest.TestCase):
    """Tests for acme_account.log.setup_logging."""

    def setUp(self):
        self.root_logger = logging.getLogger()
        self.saved_handlers = list(self.root_logger.handlers)
        self.saved_level = self.root_logger.level
        self.stream = io.StringIO()

    def tearDown(self):
        self.root_logger.handlers = self.saved_handlers
        self.root_logger.setLevel(self.saved_level)

    @classmethod
    def _config(cls, verbose_count=0, quiet=False):
        return mock.MagicMock(verbose_count=verbose_count, quiet=quiet)

    def _call(self, config):
        from acme_account.log import setup_logging
        return setup_logging(config, self.stream)

    def test_default_level(self):
        handler = self._call(self._config())
        assert handler.level == constants.DEFAULT_LOGGING_LEVEL
        assert handler in self.root_logger.handlers

        logging.getLogger('acme_account.test').info('hidden')
        logging.getLogger('acme_account.test').warning('shown')
        assert self.stream.getvalue() == 'shown\n'

    def test_verbose(self):
        assert self._call(self._config(verbose_count=1)).level == logging.INFO
        assert self._call(self._config(verbose_count=5)).level == logging.DEBUG

    def test_debug_format(self):
        self._call(self._config(verbose_count=2))
        logging.getLogger('acme_account.test').debug('traffic')
        assert ':DEBUG:acme_account.test:traffic' in self.stream.getvalue()

    def test_quiet(self):
        handler = self._call(self._config(verbose_count=3, quiet=True))
        assert handler.level == constants.QUIET_LOGGING_LEVEL

    def test_replaces_previous_handler(self):
        first = self._call(self._config())
        second = self._call(self._config())
        assert first not in self.root_logger.handlers
        assert second in self.root_logger.handlers


class ColoredStreamHandlerTest(unittest.TestCase):
    """Tests for acme_account.log.ColoredStreamHandler"""

    def setUp(self):
        from acme_account.log import ColoredStreamHandler
        self.stream = io.StringIO()
        self.stream.isatty = lambda: True
        self.handler = ColoredStreamHandler(self.stream)

        self.logger = logging.getLogger('acme_account.colored_test')
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self.logger.addHandler(self.handler)

    def tearDown(self):
        self.handler.close()
        self.logger.removeHandler(self.handler)
        self.logger.propagate = True

    def test_format(self):
        msg = 'I did a thing'
        self.logger.debug(msg)
        assert self.stream.getvalue() == '{0}\n'.format(msg)

    def test_format_and_red_level(self):
        msg = 'I did another thing'
        self.handler.red_level = logging.DEBUG
        self.logger.debug(msg)

        assert self.stream.getvalue() == '{0}{1}{2}\n'.format(
            self.handler.RED, msg, self.handler.RESET)


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
