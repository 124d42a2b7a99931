"""ACME transport and directory discovery."""
import logging
import re
from typing import Any
from typing import Optional

import josepy as jose
import requests
from requests.adapters import HTTPAdapter

from acme_account import constants
from acme_account import errors
from acme_account import jws
from acme_account import messages

logger = logging.getLogger(__name__)

REPLAY_NONCE_HEADER = 'Replay-Nonce'


def replay_nonce(response: requests.Response) -> bytes:
    """Extract the replay nonce carried by a CA response.

    :raises .MissingNonce: if the response has no ``Replay-Nonce`` header.
    :raises .BadNonce: if the header is not valid base64url.

    :returns: Decoded nonce, ready to be passed to `.jws.sign`.
    :rtype: bytes

    """
    if REPLAY_NONCE_HEADER not in response.headers:
        raise errors.MissingNonce(response)
    nonce = response.headers[REPLAY_NONCE_HEADER]
    try:
        decoded_nonce = jws.Header._fields['nonce'].decode(nonce)  # pylint: disable=protected-access
    except jose.DeserializationError as error:
        raise errors.BadNonce(nonce, error)
    if not decoded_nonce:
        raise errors.BadNonce(nonce, ValueError('empty nonce'))
    logger.debug('Received nonce: %s', nonce)
    return decoded_nonce


class ClientNetwork:
    """Wrapper around requests for talking to an ACME CA.

    Adds user agent, handles Content-Type and turns server problem
    documents into exceptions. It holds no protocol state, so a single
    instance may serve several registrations at once.

    :param bool verify_ssl: Whether to verify certificates on SSL connections.
    :param str user_agent: String to send as User-Agent header.
    :param int timeout: Timeout for requests.
    """
    JSON_CONTENT_TYPE = 'application/json'
    JOSE_CONTENT_TYPE = 'application/jose+json'
    JSON_ERROR_CONTENT_TYPE = 'application/problem+json'

    def __init__(self, verify_ssl: bool = True, user_agent: str = 'acme-account',
                 timeout: int = constants.DEFAULT_NETWORK_TIMEOUT) -> None:
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent
        self.session = requests.Session()
        self._default_timeout = timeout
        adapter = HTTPAdapter()

        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> 'ClientNetwork':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @classmethod
    def _check_response(cls, response: requests.Response,
                        content_type: Optional[str] = None) -> requests.Response:
        """Check response content and its type.

        .. note::
           Checking is not strict: wrong server response ``Content-Type``
           HTTP header is ignored if response is an expected JSON object.

        :param str content_type: Expected Content-Type response header.
            If JSON is expected and not present in server response, this
            function will raise an error. Otherwise, wrong Content-Type
            is ignored, but logged.

        :raises .messages.Error: If server response body
            carries HTTP Problem (https://datatracker.ietf.org/doc/html/rfc7807).
        :raises .ClientError: In case of other networking errors.

        """
        response_ct = response.headers.get('Content-Type')
        # Strip parameters from the media-type (rfc2616#section-3.7)
        if response_ct:
            response_ct = response_ct.split(';')[0].strip()
        try:
            jobj = response.json()
        except ValueError:
            jobj = None

        if not response.ok:
            if jobj is not None:
                if response_ct != cls.JSON_ERROR_CONTENT_TYPE:
                    logger.debug(
                        'Ignoring wrong Content-Type (%r) for JSON Error',
                        response_ct)
                try:
                    raise messages.Error.from_json(jobj)
                except jose.DeserializationError as error:
                    # Couldn't deserialize JSON object
                    raise errors.ClientError(
                        'HTTP {0} with an unparsable error body: {1}'.format(
                            response.status_code, error))
            else:
                # response is not JSON object
                raise errors.ClientError('HTTP {0} {1}'.format(
                    response.status_code, response.reason))
        else:
            if jobj is not None and response_ct != cls.JSON_CONTENT_TYPE:
                logger.debug(
                    'Ignoring wrong Content-Type (%r) for JSON decodable '
                    'response', response_ct)

            if content_type == cls.JSON_CONTENT_TYPE and jobj is None:
                raise errors.ClientError(f'Unexpected response Content-Type: {response_ct}')

        return response

    def _send_request(self, method: str, url: str, *args: Any, **kwargs: Any) -> requests.Response:
        """Send HTTP request.

        Makes sure that `verify_ssl` is respected. Logs request and
        response (with headers). For allowed parameters please see
        `requests.request`.

        :param str method: method for the new `requests.Request` object
        :param str url: URL for the new `requests.Request` object

        :raises .ClientError: in case of any problems reaching the server

        :returns: HTTP Response
        :rtype: `requests.Response`

        """
        if method == "POST":
            logger.debug('Sending POST request to %s:\n%s',
                          url, kwargs['data'])
        else:
            logger.debug('Sending %s request to %s.', method, url)
        kwargs['verify'] = self.verify_ssl
        kwargs.setdefault('headers', {})
        kwargs['headers'].setdefault('User-Agent', self.user_agent)
        kwargs.setdefault('timeout', self._default_timeout)
        try:
            response = self.session.request(method, url, *args, **kwargs)
        except requests.exceptions.RequestException as e:
            # The requests library emits exceptions with a lot of extra text,
            # e.g. "HTTPSConnectionPool(host='acme-v02.api.letsencrypt.org',
            # port=443): Max retries exceeded with url: /directory (Caused by
            # NewConnectionError(...: [Errno 65] No route to host'))".
            err_regex = r".*host='(\S*)'.*Max retries exceeded with url\: (\/\w*).*(\[Errno \d+\])([A-Za-z ]*)"  # pylint: disable=line-too-long
            m = re.match(err_regex, str(e))
            if m is None:
                raise errors.ClientError(
                    'Requesting {0}: {1}'.format(url, e)) from e
            host, path, _err_no, err_msg = m.groups()
            raise errors.ClientError(f"Requesting {host}{path}:{err_msg}") from e

        # We set response.encoding so response.text knows the response is
        # UTF-8 encoded instead of trying to guess the encoding that was
        # used which is error prone.
        response.encoding = "utf-8"
        logger.debug('Received response:\nHTTP %d\n%s\n\n%s',
                     response.status_code,
                     "\n".join("{0}: {1}".format(k, v)
                                for k, v in response.headers.items()),
                     response.text)
        return response

    def head(self, *args: Any, **kwargs: Any) -> requests.Response:
        """Send HEAD request without checking the response.

        Note, that `_check_response` is not called, as it is expected
        that status code other than successfully 2xx will be returned, or
        messages.Error will be raised by the server.

        """
        return self._send_request('HEAD', *args, **kwargs)

    def get(self, url: str, content_type: Optional[str] = JSON_CONTENT_TYPE,
            **kwargs: Any) -> requests.Response:
        """Send GET request and check response."""
        return self._check_response(
            self._send_request('GET', url, **kwargs), content_type=content_type)

    def post(self, url: str, envelope: jws.JWS, content_type: str = JOSE_CONTENT_TYPE,
             **kwargs: Any) -> requests.Response:
        """POST a signed envelope and check response.

        The request is sent exactly once; a ``badNonce`` answer surfaces
        as `.messages.Error` like any other problem document.

        """
        data = envelope.json_dumps(indent=2)
        kwargs.setdefault('headers', {'Content-Type': content_type})
        response = self._send_request('POST', url, data=data, **kwargs)
        return self._check_response(response, content_type=None)


class DirectoryClient:
    """Discovers CA endpoints and fetches fresh replay nonces.

    :ivar .ClientNetwork net: Client network.
    """

    def __init__(self, net: ClientNetwork) -> None:
        self.net = net

    def fetch_directory(self, url: str) -> messages.Directory:
        """Retrieve the ACME directory (RFC 8555 section 7.1.1).

        :param str url: the URL where the ACME directory is available

        :raises .DirectoryError: if the server is unreachable, answers with
            an error, or the directory is malformed or incomplete.

        :rtype: `.messages.Directory`

        """
        try:
            response = self.net.get(url, content_type=ClientNetwork.JSON_CONTENT_TYPE)
        except errors.Error as error:
            raise errors.DirectoryError(
                'Unable to fetch the ACME directory from {0}: {1}'.format(url, error)) from error
        try:
            directory = messages.Directory.from_json(response.json())
        except (ValueError, jose.DeserializationError) as error:
            raise errors.DirectoryError(
                'Invalid ACME directory at {0}: {1}'.format(url, error)) from error
        logger.debug('Fetched directory from %s', url)
        return directory

    def fetch_nonce(self, directory: messages.Directory) -> bytes:
        """Request a fresh nonce from the ``newNonce`` endpoint.

        :raises .DirectoryError: if the directory has no ``newNonce`` URL.
        :raises .NonceError: if the request fails or carries no valid nonce.

        :rtype: bytes

        """
        try:
            url = directory['newNonce']
        except KeyError as error:
            raise errors.DirectoryError(str(error)) from error
        logger.debug('Requesting fresh nonce')
        try:
            response = self.net._check_response(  # pylint: disable=protected-access
                self.net.head(url), content_type=None)
        except errors.Error as error:
            raise errors.NonceError(
                'Unable to fetch a nonce from {0}: {1}'.format(url, error)) from error
        return replay_nonce(response)
