"""acme-account command line argument parser"""
import argparse
from typing import Any
from typing import List

import configargparse

import acme_account
from acme_account import constants

SHORT_USAGE = """
  %(prog)s --email EMAIL --agree-tos [options]

Generates an ACME account key, registers it with the CA and writes the account
credentials (account URI and PEM key) to a file.
"""


def flag_default(name: str) -> Any:
    """Default value for CLI flag."""
    return constants.CLI_DEFAULTS[name]


def prepare_parser() -> configargparse.ArgParser:
    """Build the argument parser.

    Every option may also be given in a config file or through an
    ``ACME_ACCOUNT_<OPTION>`` environment variable.

    """
    parser = configargparse.ArgParser(
        prog="acme-account",
        usage=SHORT_USAGE,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        args_for_setting_config_path=["-c", "--config"],
        default_config_files=flag_default("config_files"),
        config_arg_help_message="path to config file (default: {0})".format(
            " and ".join(flag_default("config_files"))),
        auto_env_var_prefix=constants.ENV_VAR_PREFIX)

    parser.add_argument(
        "--version", action="version",
        version="%(prog)s {0}".format(acme_account.__version__))
    parser.add_argument(
        "-v", "--verbose", dest="verbose_count", action="count",
        default=flag_default("verbose_count"),
        help="This flag can be used multiple times to incrementally increase "
             "the verbosity of output, e.g. -vvv.")
    parser.add_argument(
        "-q", "--quiet", dest="quiet", action="store_true",
        default=flag_default("quiet"),
        help="Silence all output except errors.")

    account_group = parser.add_argument_group("account")
    account_group.add_argument(
        "-m", "--email", dest="email", default=flag_default("email"),
        help="The email address to be used for contact.")
    account_group.add_argument(
        "--agree-tos", dest="tos", action="store_true", default=flag_default("tos"),
        help="Agree to the ACME server's Subscriber Agreement.")
    account_group.add_argument(
        "--key-curve", dest="key_curve", default=flag_default("key_curve"),
        choices=constants.SUPPORTED_KEY_CURVES,
        help="Elliptic curve of the generated account key.")
    account_group.add_argument(
        "--eab-kid", dest="eab_kid", metavar="EAB_KID", default=flag_default("eab_kid"),
        help="Key Identifier for External Account Binding")
    account_group.add_argument(
        "--eab-hmac-key", dest="eab_hmac_key", metavar="EAB_HMAC_KEY",
        default=flag_default("eab_hmac_key"),
        help="HMAC key for External Account Binding")

    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "-o", "--output", dest="output", default=flag_default("output"),
        help="The path where the account credentials file is to be written.")
    output_group.add_argument(
        "--key-only", dest="key_only", action="store_true",
        default=flag_default("key_only"),
        help="Write only the PEM encoded account key instead of the JSON "
             "account credentials.")

    server_group = parser.add_argument_group("server")
    server_group.add_argument(
        "--staging", "--test-cert", dest="staging", action="store_true",
        default=flag_default("staging"),
        help="Use the Let's Encrypt staging server.")
    server_group.add_argument(
        "--server", dest="server", default=flag_default("server"),
        help="ACME Directory Resource URI (default: the Let's Encrypt "
             "production directory).")
    server_group.add_argument(
        "--no-verify-ssl", dest="no_verify_ssl", action="store_true",
        default=flag_default("no_verify_ssl"),
        help="Disable verification of the ACME server's certificate.")
    server_group.add_argument(
        "--user-agent", dest="user_agent", default=flag_default("user_agent"),
        help="Set a custom user agent string for the client.")
    server_group.add_argument(
        "--timeout", dest="timeout", type=int, default=flag_default("timeout"),
        help="Seconds to wait for each response from the ACME server.")

    return parser


def prepare_and_parse_args(args: List[str]) -> argparse.Namespace:
    """Returns parsed command line arguments.

    :param list args: command line arguments with the program name removed

    :returns: parsed command line arguments
    :rtype: argparse.Namespace

    """
    return prepare_parser().parse_args(args)
