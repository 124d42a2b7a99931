"""acme-account main entry point."""
import logging
import sys
from typing import List
from typing import Optional

import josepy as jose

import acme_account
from acme_account import cli
from acme_account import configuration
from acme_account import crypto_util
from acme_account import errors
from acme_account import log
from acme_account import messages
from acme_account import storage
from acme_account import util
from acme_account.account import AccountRegistrar
from acme_account.client import ClientNetwork
from acme_account.client import DirectoryClient

logger = logging.getLogger(__name__)


def _user_agent(config: configuration.NamespaceConfig) -> str:
    if config.user_agent is None:
        return 'acme-account/{0}'.format(acme_account.__version__)
    return config.user_agent


def _credentials_storage(config: configuration.NamespaceConfig) -> storage.CredentialsStorage:
    if config.key_only:
        return storage.KeyOnlyStorage()
    return storage.JSONCredentialsStorage()


def register(config: configuration.NamespaceConfig) -> storage.AccountCredentials:
    """Generate an account key, register it and persist the credentials.

    Inputs are checked before the key is generated and before anything is
    sent to the CA. The credentials file is only written once the CA has
    confirmed the account.

    :param config: Configuration object
    :type config: configuration.NamespaceConfig

    :returns: the persisted credentials
    :rtype: `.storage.AccountCredentials`

    """
    email = util.validate_email(config.email)
    if not config.tos:
        raise errors.TermsNotAcceptedError(
            "The CA Terms of Service must be accepted to register an account "
            "(use --agree-tos).")
    credentials_storage = _credentials_storage(config)
    output = config.output
    credentials_storage.check_path(output)

    key = crypto_util.generate_key(config.key_curve)

    with ClientNetwork(verify_ssl=not config.no_verify_ssl,
                       user_agent=_user_agent(config),
                       timeout=config.timeout) as net:
        directory_client = DirectoryClient(net)
        directory = directory_client.fetch_directory(config.server)
        account = AccountRegistrar(directory_client).register(
            key, directory, email, accept_tos=config.tos,
            eab_kid=config.eab_kid, eab_hmac_key=config.eab_hmac_key)

    credentials = storage.AccountCredentials.from_account(account, key)
    credentials_storage.save(credentials, output)
    _report(account, key, output)
    return credentials


def _report(account: messages.Account, key: jose.JWK, output: str) -> None:
    if account.created:
        logger.warning('Account registered: %s', account.uri)
    else:
        logger.warning('Account already registered: %s', account.uri)
    logger.info('Account key thumbprint: %s',
                jose.b64encode(key.thumbprint()).decode())
    logger.warning('Account credentials saved to %s', output)


def main(cli_args: Optional[List[str]] = None) -> Optional[str]:
    """Run acme-account.

    :param cli_args: command line to acme-account, defaults to ``sys.argv[1:]``
    :type cli_args: `list` of `str`

    :returns: value for `sys.exit` about the exit status of acme-account
    :rtype: `str` or `None`

    """
    if cli_args is None:
        cli_args = sys.argv[1:]

    # note: arg parser internally handles --help (and exits afterwards)
    args = cli.prepare_and_parse_args(cli_args)
    try:
        config = configuration.NamespaceConfig(args)
    except errors.InputError as error:
        return str(error)

    log.setup_logging(config)
    logger.debug("acme-account version: %s", acme_account.__version__)
    logger.debug("Directory: %s", config.server)

    try:
        register(config)
    except errors.Error as error:
        logger.debug('Exiting abnormally:', exc_info=True)
        return str(error)
    return None
