"""ACME account provisioning errors."""
import typing
from typing import Any
from typing import Optional

import requests

# We import acme_account.messages only during type check to avoid circular
# dependencies. Type references to messages.* must be quoted.
if typing.TYPE_CHECKING:
    from acme_account import messages  # pragma: no cover


class Error(Exception):
    """Generic acme-account error."""


class InputError(Error):
    """Invalid caller-supplied input (email address, output path, ...).

    :ivar input: The offending value, if any.

    """
    def __init__(self, message: str, input: Any = None) -> None:  # pylint: disable=redefined-builtin
        super().__init__(message)
        self.input = input


class CryptoError(Error):
    """Account key generation, encoding or decoding error."""


class SigningError(Error):
    """Invalid inputs for building a signed request."""


class ClientError(Error):
    """Network error."""


class DirectoryError(ClientError):
    """ACME directory could not be fetched or is incomplete."""


class NonceError(ClientError):
    """Server response nonce error."""


class BadNonce(NonceError):
    """Bad nonce error."""
    def __init__(self, nonce: str, error: Exception, *args: Any) -> None:
        super().__init__(*args)
        self.nonce = nonce
        self.error = error

    def __str__(self) -> str:
        return 'Invalid nonce ({0!r}): {1}'.format(self.nonce, self.error)


class MissingNonce(NonceError):
    """Missing nonce error.

    According to RFC 8555 an "ACME server MUST include an
    Replay-Nonce header field in each successful response to a POST it
    provides to a client (...)".

    :ivar requests.Response response: HTTP Response

    """
    def __init__(self, response: requests.Response, *args: Any) -> None:
        super().__init__(*args)
        self.response = response

    def __str__(self) -> str:
        return ('Server {0} response did not include a replay '
                'nonce, headers: {1} (This may be a service outage)'.format(
                    self.response.request.method, self.response.headers))


class RegistrationError(Error):
    """The CA rejected the new-account request.

    :ivar error: Problem document returned by the CA, if any.
    :vartype error: `.messages.Error` or ``None``

    """
    def __init__(self, message: str, error: Optional['messages.Error'] = None) -> None:
        super().__init__(message)
        self.error = error

    def __str__(self) -> str:
        message = super().__str__()
        if self.error is None:
            return message
        return '{0}: {1}'.format(message, self.error)


class TermsNotAcceptedError(Error):
    """The CA Terms of Service were not accepted by the caller."""


class InvariantError(Error):
    """A successful response is missing data it is required to carry."""


class PersistenceError(Error):
    """Account credentials could not be written or read."""
