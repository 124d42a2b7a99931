"""acme-account constants."""
import logging
import os
from typing import Any
from typing import Dict

LE_PRODUCTION_URI = "https://acme-v02.api.letsencrypt.org/directory"
"""Let's Encrypt production directory."""

LE_STAGING_URI = "https://acme-staging-v02.api.letsencrypt.org/directory"
"""Let's Encrypt staging directory."""

DEFAULT_KEY_CURVE = "secp256r1"
"""Curve of freshly generated account keys."""

SUPPORTED_KEY_CURVES = ("secp256r1", "secp384r1", "secp521r1")

DEFAULT_NETWORK_TIMEOUT = 45
"""Seconds before an HTTP request to the CA is abandoned."""

CREDENTIALS_FILE_MODE = 0o600

ENV_VAR_PREFIX = "ACME_ACCOUNT_"

CLI_DEFAULTS: Dict[str, Any] = dict(  # noqa
    config_files=[
        os.path.join(os.environ.get("XDG_CONFIG_HOME", "~/.config"),
                     "acme-account", "cli.ini"),
    ],
    email=None,
    output="account_credentials.json",
    staging=False,
    server=None,
    key_only=False,
    tos=False,
    key_curve=DEFAULT_KEY_CURVE,
    eab_kid=None,
    eab_hmac_key=None,
    no_verify_ssl=False,
    user_agent=None,
    timeout=DEFAULT_NETWORK_TIMEOUT,
    verbose_count=0,
    quiet=False,
)
"""Defaults for CLI flags and `.NamespaceConfig` attributes."""

QUIET_LOGGING_LEVEL = logging.ERROR
"""Logging level to use in quiet mode."""

DEFAULT_LOGGING_LEVEL = logging.WARNING
"""Default logging level to use when not in quiet mode."""
