"""Persists registered account credentials."""
from abc import ABCMeta
from abc import abstractmethod
import logging
import os

import josepy as jose

from acme_account import constants
from acme_account import crypto_util
from acme_account import errors
from acme_account import messages
from acme_account import util

logger = logging.getLogger(__name__)


class AccountCredentials(jose.JSONObjectWithFields):
    """Durable result of a registration.

    Serializes to ``{"uri": "<account URI>", "key": "<PEM EC private key>"}``.

    :ivar str uri: Account URI assigned by the CA.
    :ivar str key: PEM encoded account private key.

    """
    uri: str = jose.field('uri')
    key: str = jose.field('key')

    @classmethod
    def from_account(cls, account: messages.Account, key: jose.JWK) -> 'AccountCredentials':
        """Build credentials from a registered account and its key.

        :raises .InvariantError: if the account has no URI.
        :raises .CryptoError: if the key cannot be encoded.

        """
        if account is None or not account.uri:
            raise errors.InvariantError('The account URI is empty.')
        return cls(uri=account.uri, key=crypto_util.encode_key(key).decode())

    def load_key(self) -> jose.JWKEC:
        """Decode the stored account key."""
        return crypto_util.load_key(self.key)


class CredentialsStorage(metaclass=ABCMeta):
    """Writes `AccountCredentials` in one particular file format."""

    @abstractmethod
    def serialize(self, credentials: AccountCredentials) -> bytes:  # pragma: no cover
        """Render credentials in this storage's format."""
        raise NotImplementedError()

    def check_path(self, path: str) -> None:
        """Make sure credentials could be written to `path`.

        Meant to be called before any key is generated.

        :raises .InputError: if `path` is a directory or its parent
            directory does not exist.

        """
        if not path:
            raise errors.InputError("The output path is empty.", path)
        if os.path.isdir(path):
            raise errors.InputError("The output path is a directory.", path)
        parent = os.path.dirname(os.path.abspath(path))
        if not os.path.isdir(parent):
            raise errors.InputError(
                "The directory of the output path does not exist.", path)

    def save(self, credentials: AccountCredentials, path: str) -> None:
        """Atomically write credentials to `path` with owner-only permissions.

        :raises .PersistenceError: if the file could not be written.

        """
        data = self.serialize(credentials)
        try:
            util.atomic_write(path, data, chmod=constants.CREDENTIALS_FILE_MODE)
        except OSError as error:
            raise errors.PersistenceError(
                "An error occurred when writing the account credentials to {0}: {1}".format(
                    path, error)) from error
        logger.debug('Saved account credentials for %s to %s', credentials.uri, path)


class JSONCredentialsStorage(CredentialsStorage):
    """Stores the account URI and key together as a JSON object."""

    def serialize(self, credentials: AccountCredentials) -> bytes:
        return credentials.json_dumps().encode()

    def load(self, path: str) -> AccountCredentials:
        """Read credentials written by `save`.

        :raises .PersistenceError: if the file is unreadable or malformed.

        """
        try:
            with open(path) as credentials_file:
                return AccountCredentials.json_loads(credentials_file.read())
        except OSError as error:
            raise errors.PersistenceError(error) from error
        except (ValueError, jose.DeserializationError) as error:
            raise errors.PersistenceError(
                "Invalid account credentials in {0}: {1}".format(path, error)) from error


class KeyOnlyStorage(CredentialsStorage):
    """Stores only the PEM encoded account key."""

    def serialize(self, credentials: AccountCredentials) -> bytes:
        return credentials.key.encode()
