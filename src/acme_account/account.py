"""Registers ACME accounts."""
import enum
import http.client as http_client
import logging
from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple

import josepy as jose
import requests

from acme_account import errors
from acme_account import jws
from acme_account import messages
from acme_account import util
from acme_account.client import DirectoryClient
from acme_account.client import replay_nonce

logger = logging.getLogger(__name__)


class RegistrationState(enum.Enum):
    """Progress of a single registration attempt."""
    UNREGISTERED = enum.auto()
    NONCE_ACQUIRED = enum.auto()
    REQUEST_SIGNED = enum.auto()
    SUBMITTED = enum.auto()
    REGISTERED = enum.auto()
    FAILED = enum.auto()


class AccountRegistrar:
    """Runs the ``newAccount`` exchange with an ACME CA.

    A registrar keeps no per-registration state: the key, directory and
    nonces of an attempt are passed explicitly, so one instance can serve
    concurrent registrations against different CAs.

    :ivar .DirectoryClient directory_client: Used to fetch nonces.
    :ivar .ClientNetwork net: Client network.

    """

    def __init__(self, directory_client: DirectoryClient) -> None:
        self.directory_client = directory_client
        self.net = directory_client.net

    def register(self, key: jose.JWK, directory: messages.Directory, email: str,
                 accept_tos: bool, eab_kid: Optional[str] = None,
                 eab_hmac_key: Optional[str] = None) -> messages.Account:
        """Register a new account, or recover the one already bound to `key`.

        :param josepy.JWK key: Account private key.
        :param .messages.Directory directory: Directory of the CA.
        :param str email: Contact email address.
        :param bool accept_tos: Whether the caller agrees to the CA Terms of
            Service. Registration is refused without agreement.
        :param str eab_kid: External Account Binding key identifier.
        :param str eab_hmac_key: External Account Binding HMAC key,
            base64url encoded.

        :raises .InputError: if the email address or the External Account
            Binding credentials are unusable.
        :raises .TermsNotAcceptedError: if `accept_tos` is false. Nothing is
            sent to the CA in that case.
        :raises .DirectoryError: if the directory lacks required URLs.
        :raises .NonceError: if no nonce could be obtained.
        :raises .RegistrationError: if the CA rejects the request or
            cannot be reached.
        :raises .InvariantError: if the CA answers with success but no
            account URI.

        :returns: The account; ``created`` tells a new registration apart
            from an existing one.
        :rtype: `.messages.Account`

        """
        address = util.validate_email(email)
        if not accept_tos:
            raise errors.TermsNotAcceptedError(
                "The CA Terms of Service must be accepted to register an account.")
        _resource_url(directory, 'newNonce')
        _resource_url(directory, 'newAccount')
        eab =_external_account_binding(key, directory, eab_kid, eab_hmac_key)

        if directory.meta.terms_of_service:
            logger.info('Agreeing to the Terms of Service at %s',
                        directory.meta.terms_of_service)

        nonce = self.directory_client.fetch_nonce(directory)
        registration = messages.Registration.from_data(
            email=address, terms_of_service_agreed=True, external_account_binding=eab)
        account, _ = self.new_account(key, directory, registration, nonce)
        return account

    def find_account(self, key: jose.JWK, directory: messages.Directory) -> messages.Account:
        """Look up the account already registered for `key`.

        The CA is asked not to create an account (``onlyReturnExisting``).

        :raises .RegistrationError: if the CA knows no account for `key`.

        :rtype: `.messages.Account`

        """
        nonce = self.directory_client.fetch_nonce(directory)
        account, _ = self.new_account(
            key, directory, messages.Registration(only_return_existing=True), nonce)
        return account

    def new_account(self, key: jose.JWK, directory: messages.Directory,
                    registration: messages.Registration,
                    nonce: bytes) -> Tuple[messages.Account, Optional[bytes]]:
        """POST a registration to ``newAccount`` using a caller supplied nonce.

        :param bytes nonce: Unused nonce; it is consumed by this request.

        :returns: The account and the nonce to use for the next request,
            or ``None`` if the response did not provide one.
        :rtype: tuple

        """
        url = _resource_url(directory, 'newAccount')
        state = RegistrationState.NONCE_ACQUIRED
        logger.debug('Registration state: %s', state.name)
        try:
            envelope = jws.sign(key, url, nonce, registration)
            state = _transition(RegistrationState.REQUEST_SIGNED)
            response = self._post(url, envelope)
            state = _transition(RegistrationState.SUBMITTED)
            account = self._account_from_response(response)
        except errors.Error:
            logger.debug('Registration failed after reaching state %s', state.name)
            _transition(RegistrationState.FAILED)
            raise
        _transition(RegistrationState.REGISTERED)
        if account.created:
            logger.info('Registered new account %s', account.uri)
        else:
            logger.info('Account key is already registered as %s', account.uri)
        return account, _next_nonce(response)

    def _post(self, url: str, envelope: jws.JWS) -> requests.Response:
        try:
            return self.net.post(url, envelope)
        except messages.Error as error:
            raise errors.RegistrationError(
                'The CA rejected the account registration', error) from error
        except errors.ClientError as error:
            raise errors.RegistrationError(
                'An error occurred when registering the account: {0}'.format(error)) from error

    @classmethod
    def _account_from_response(cls, response: requests.Response) -> messages.Account:
        if response.status_code == http_client.CREATED:
            created = True
        elif response.status_code == http_client.OK:
            # the CA already knows this key
            created = False
        else:
            raise errors.RegistrationError(
                'Unexpected HTTP status {0} in response to the account registration'.format(
                    response.status_code))

        uri = response.headers.get('Location')
        if not uri:
            raise errors.InvariantError('The account URI is empty.')

        try:
            jobj = response.json()
        except ValueError:
            jobj = None
        try:
            body = messages.Registration.from_json(jobj) if jobj else messages.Registration()
        except jose.DeserializationError as error:
            raise errors.RegistrationError(
                'The CA returned an unreadable account object: {0}'.format(error)) from error

        terms_of_service = None
        if 'terms-of-service' in response.links:
            terms_of_service = response.links['terms-of-service']['url']

        return messages.Account(body=body, uri=uri, terms_of_service=terms_of_service,
                                created=created)


def _transition(state: RegistrationState) -> RegistrationState:
    logger.debug('Registration state: %s', state.name)
    return state


def _resource_url(directory: messages.Directory, name: str) -> str:
    try:
        url = directory[name]
    except KeyError as error:
        raise errors.DirectoryError(str(error)) from error
    if not url:
        raise errors.DirectoryError('Directory field "{0}" is empty'.format(name))
    return url


def _next_nonce(response: requests.Response) -> Optional[bytes]:
    try:
        return replay_nonce(response)
    except errors.NonceError as error:
        # the next request will have to fetch a fresh nonce
        logger.debug('No usable nonce in registration response: %s', error)
        return None


def _external_account_binding(key: jose.JWK, directory: messages.Directory,
                              eab_kid: Optional[str],
                              eab_hmac_key: Optional[str]) -> Optional[Dict[str, Any]]:
    if bool(eab_kid) != bool(eab_hmac_key):
        raise errors.InputError(
            "Both an External Account Binding key id and HMAC key are required.")
    if not eab_kid:
        if directory.meta.external_account_required:
            raise errors.InputError("Server requires external account binding.")
        return None
    try:
        return messages.ExternalAccountBinding.from_data(
            account_public_key=key.public_key(), kid=eab_kid, hmac_key=eab_hmac_key,
            directory=directory)
    except (TypeError, ValueError) as error:
        raise errors.InputError(
            "The External Account Binding HMAC key is invalid.", eab_hmac_key) from error
