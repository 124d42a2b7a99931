"""Account key generation and encoding."""
import logging
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
import josepy as jose
from josepy.util import ComparableECKey

from acme_account import constants
from acme_account import errors

logger = logging.getLogger(__name__)

_CURVES = {
    'secp256r1': ec.SECP256R1,
    'secp384r1': ec.SECP384R1,
    'secp521r1': ec.SECP521R1,
}

_ALGORITHMS = {
    256: jose.ES256,
    384: jose.ES384,
    521: jose.ES512,
}


def generate_key(curve: str = constants.DEFAULT_KEY_CURVE) -> jose.JWKEC:
    """Generate a fresh elliptic curve account key.

    :param str curve: Name of the curve, one of
        `.constants.SUPPORTED_KEY_CURVES`.

    :raises .CryptoError: if the curve is unsupported or the key
        could not be generated.

    :returns: New private key.
    :rtype: `josepy.JWKEC`

    """
    try:
        curve_cls = _CURVES[curve.lower()]
    except (KeyError, AttributeError):
        raise errors.CryptoError("Unsupported elliptic curve: {}".format(curve))
    try:
        key = ec.generate_private_key(curve=curve_cls())
    except (UnsupportedAlgorithm, ValueError) as error:
        raise errors.CryptoError(
            "An error occurred when generating an account key: {}".format(error)) from error
    logger.debug('Generated %s account key', curve)
    return jose.JWKEC(key=ComparableECKey(key))


def encode_key(key: jose.JWKEC) -> bytes:
    """Serialize a private account key as PEM.

    The traditional OpenSSL container (``EC PRIVATE KEY``) is used and the
    key is not encrypted.

    :raises .CryptoError: if `key` is not an EC private key.

    :rtype: bytes

    """
    private_key = _private_key(key)
    try:
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption())
    except (TypeError, ValueError) as error:
        raise errors.CryptoError(
            "An error occurred when marshalling the account key data: {}".format(error)
        ) from error


def load_key(key_pem: Union[str, bytes]) -> jose.JWKEC:
    """Load a PEM encoded EC private key.

    :param key_pem: Key in PEM form, as produced by `encode_key`.

    :raises .CryptoError: if the data is not a PEM EC private key.

    :rtype: `josepy.JWKEC`

    """
    if isinstance(key_pem, str):
        key_pem = key_pem.encode()
    try:
        key = serialization.load_pem_private_key(key_pem, password=None)
    except (TypeError, ValueError, UnsupportedAlgorithm) as error:
        raise errors.CryptoError("Unable to load account key: {}".format(error)) from error
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise errors.CryptoError(
            "Unsupported account key type: {}".format(type(key).__name__))
    return jose.JWKEC(key=ComparableECKey(key))


def signature_algorithm(key: jose.JWK) -> jose.JWASignature:
    """Find the JWS algorithm matching the curve of an EC key.

    :raises .CryptoError: if no matching algorithm exists.

    """
    if not isinstance(key, jose.JWKEC):
        raise errors.CryptoError(
            "No matching signing algorithm can be found for the key")
    try:
        return _ALGORITHMS[key.key.curve.key_size]
    except (AttributeError, KeyError):
        raise errors.CryptoError(
            "No matching signing algorithm can be found for the key")


def _private_key(key: jose.JWK) -> ec.EllipticCurvePrivateKey:
    if not isinstance(key, jose.JWKEC):
        raise errors.CryptoError("Account key is not an EC key")
    # ComparableECKey proxies the wrapped cryptography key
    if not hasattr(key.key, 'private_bytes'):
        raise errors.CryptoError("Account key is not a private key")
    return key.key
