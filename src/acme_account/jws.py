"""ACME-specific JWS.

The JWS implementation in josepy only implements the base JOSE standard. In
order to support the new header fields defined in ACME, this module defines some
ACME-specific classes that layer on top of josepy, and `sign`, which builds the
envelope posted to the CA.
"""
import json
import logging
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Union

import josepy as jose

from acme_account import crypto_util
from acme_account import errors

logger = logging.getLogger(__name__)

Payload = Union[jose.JSONDeSerializable, Mapping[str, Any], None]


class Header(jose.Header):
    """ACME-specific JOSE Header. Implements nonce, kid, and url.
    """
    nonce: Optional[bytes] = jose.field('nonce', omitempty=True, encoder=jose.encode_b64jose)
    kid: Optional[str] = jose.field('kid', omitempty=True)  # type: ignore[assignment]
    url: Optional[str] = jose.field('url', omitempty=True)

    # Mypy does not understand the josepy magic happening here, and falsely claims
    # that nonce is redefined. Let's ignore the type check here.
    @nonce.decoder  # type: ignore[no-redef,attr-defined,union-attr]
    def nonce(value: str) -> bytes:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        try:
            return jose.decode_b64jose(value)
        except jose.DeserializationError as error:
            raise jose.DeserializationError("Invalid nonce: {0}".format(error))


class Signature(jose.Signature):
    """ACME-specific Signature. Uses ACME-specific Header for customer fields."""
    __slots__ = jose.Signature._orig_slots  # type: ignore[attr-defined]  # pylint: disable=protected-access,no-member

    header_cls = Header
    header: Header = jose.field(
        'header', omitempty=True, default=header_cls(),
        decoder=header_cls.from_json)


class JWS(jose.JWS):
    """ACME-specific JWS. Includes nonce, url, and kid in protected header."""
    signature_cls = Signature
    __slots__ = jose.JWS._orig_slots  # type: ignore[attr-defined]  # pylint: disable=protected-access

    @classmethod
    # type: ignore[override]  # pylint: disable=arguments-differ
    def sign(cls, payload: bytes, key: jose.JWK, alg: jose.JWASignature, nonce: Optional[bytes],
             url: Optional[str] = None, kid: Optional[str] = None) -> jose.JWS:
        # Per RFC 8555, jwk and kid are mutually exclusive, so only include a
        # jwk field if kid is not provided.
        include_jwk = kid is None
        return super().sign(payload, key=key, alg=alg,
                            protect=frozenset(['nonce', 'url', 'kid', 'jwk', 'alg']),
                            nonce=nonce, url=url, kid=kid,
                            include_jwk=include_jwk)


def encode_payload(payload: Payload) -> bytes:
    """Serialize a request payload.

    ``None`` becomes the empty payload used by POST-as-GET requests.

    """
    if payload is None:
        return b''
    if isinstance(payload, jose.JSONDeSerializable):
        return payload.json_dumps(indent=2).encode()
    return json.dumps(payload, indent=2).encode()


def sign(key: jose.JWK, url: str, nonce: bytes, payload: Payload,
         kid: Optional[str] = None) -> JWS:
    """Build a signed ACME request.

    :param josepy.JWK key: Account private key.
    :param str url: Request target; must equal the URL the envelope is
        POSTed to.
    :param bytes nonce: Fresh replay nonce, consumed by this request.
    :param payload: Request body, or ``None`` for POST-as-GET.
    :param str kid: Account URI. When ``None`` the public JWK is embedded
        in the protected header instead.

    :raises .SigningError: if any of the inputs cannot be used.

    :returns: Signed envelope; serialize with ``json_dumps()``.
    :rtype: `JWS`

    """
    if key is None:
        raise errors.SigningError("No account key was provided")
    if not nonce:
        raise errors.SigningError("A fresh nonce is required to sign a request")
    if not url:
        raise errors.SigningError("The request URL is empty")
    if kid is not None and not kid:
        raise errors.SigningError("The account key identifier is empty")
    try:
        alg = crypto_util.signature_algorithm(key)
    except errors.CryptoError as error:
        raise errors.SigningError(str(error)) from error
    if not hasattr(key.key, 'private_bytes'):
        raise errors.SigningError("A private key is required to sign a request")

    jobj = encode_payload(payload)
    logger.debug('JWS payload:\n%s', jobj)
    return JWS.sign(jobj, key=key, alg=alg, nonce=nonce, url=url, kid=kid)
