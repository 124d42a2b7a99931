"""User-supplied configuration."""
import argparse
import logging
import os
from typing import Any
from urllib import parse

from acme_account import constants
from acme_account import errors

logger = logging.getLogger(__name__)


class NamespaceConfig:
    """Configuration wrapper around :class:`argparse.Namespace`.

    Attributes not defined here are read from the wrapped namespace.
    `server` and `output` are resolved: `server` falls back to the staging
    or production Let's Encrypt directory, `output` is made absolute.

    :ivar namespace: Namespace typically produced by
        :meth:`argparse.ArgumentParser.parse_args`.
    :type namespace: :class:`argparse.Namespace`

    """

    def __init__(self, namespace: argparse.Namespace) -> None:
        self.namespace: argparse.Namespace
        # Avoid recursion loop because of the delegation defined in __setattr__
        object.__setattr__(self, 'namespace', namespace)

        # Check command line parameters sanity, and error out in case of problem.
        _check_config_sanity(self)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.namespace, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self.namespace, name, value)

    @property
    def server(self) -> str:
        """ACME directory URL."""
        if self.namespace.server:
            return self.namespace.server
        if self.namespace.staging:
            return constants.LE_STAGING_URI
        return constants.LE_PRODUCTION_URI

    @property
    def output(self) -> str:
        """Absolute path of the credentials file."""
        return os.path.abspath(os.path.expanduser(self.namespace.output))


def _check_config_sanity(config: NamespaceConfig) -> None:
    """Validate command line options and display error message if
    requirements are not met.

    :param config: NamespaceConfig instance holding user configuration
    :type args: :class:`acme_account.configuration.NamespaceConfig`

    """
    if config.namespace.server:
        url = parse.urlparse(config.namespace.server)
        if url.scheme not in ('http', 'https') or not url.netloc:
            raise errors.InputError(
                "The ACME server URL is invalid.", config.namespace.server)
        if config.namespace.staging and config.namespace.server != constants.LE_STAGING_URI:
            raise errors.InputError(
                "--server value conflicts with --staging", config.namespace.server)
    if config.namespace.timeout is not None and config.namespace.timeout <= 0:
        raise errors.InputError("The timeout must be positive.", config.namespace.timeout)
    if config.namespace.key_curve not in constants.SUPPORTED_KEY_CURVES:
        raise errors.InputError("Unsupported key curve.", config.namespace.key_curve)
