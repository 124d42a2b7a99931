"""ACME protocol messages used for account registration."""
from collections.abc import Hashable
import json
from typing import Any
from typing import Dict
from typing import Iterator
from typing import List
from typing import Mapping
from typing import Optional
from typing import Tuple

import josepy as jose

from acme_account import errors
from acme_account import jws

ERROR_PREFIX = "urn:ietf:params:acme:error:"

ERROR_CODES = {
    'accountDoesNotExist': 'The request specified an account that does not exist',
    'badNonce': 'The client sent an unacceptable anti-replay nonce',
    'badPublicKey': 'The JWS was signed by a public key the server does not support',
    'badSignatureAlgorithm': 'The JWS was signed with an algorithm the server does not support',
    'externalAccountRequired': 'The server requires external account binding',
    'invalidContact': 'The provided contact URI was invalid',
    # deprecated in favor of invalidContact
    'invalidEmail': 'The provided email for a registration was invalid',
    'malformed': 'The request message was malformed',
    'rateLimited': 'There were too many requests of a given type',
    'serverInternal': 'The server experienced an internal error',
    'unauthorized': 'The client lacks sufficient authorization',
    'unsupportedContact': 'A contact URL for an account used an unsupported protocol scheme',
    'userActionRequired': 'Visit the "instance" URL and take actions specified there',
}

ERROR_TYPE_DESCRIPTIONS = dict(
    (ERROR_PREFIX + name, desc) for name, desc in ERROR_CODES.items())


class Error(jose.JSONObjectWithFields, errors.Error):
    """ACME error, carried as an HTTP problem document.

    https://datatracker.ietf.org/doc/html/rfc7807

    :ivar str typ:
    :ivar str title:
    :ivar str detail:
    :ivar int status: HTTP status code echoed by the server.

    """
    typ: str = jose.field('type', omitempty=True, default='about:blank')
    title: str = jose.field('title', omitempty=True)
    detail: str = jose.field('detail', omitempty=True)
    status: int = jose.field('status', omitempty=True)

    @classmethod
    def with_code(cls, code: str, **kwargs: Any) -> 'Error':
        """Create an Error instance with an ACME Error code.

        :str code: An ACME error code, like 'badNonce'.
        :kwargs: kwargs to pass to Error.

        """
        if code not in ERROR_CODES:
            raise ValueError("The supplied code: %s is not a known ACME error"
                             " code" % code)
        typ = ERROR_PREFIX + code
        return cls(typ=typ, **kwargs)

    @property
    def description(self) -> Optional[str]:
        """Hardcoded error description based on its type.

        :returns: Description if standard ACME error or ``None``.
        :rtype: str

        """
        return ERROR_TYPE_DESCRIPTIONS.get(self.typ)

    @property
    def code(self) -> Optional[str]:
        """ACME error code.

        Basically self.typ without the ERROR_PREFIX.

        :returns: error code if standard ACME code or ``None``.
        :rtype: str

        """
        code = str(self.typ).rsplit(':', maxsplit=1)[-1]
        if code in ERROR_CODES:
            return code
        return None

    def __str__(self) -> str:
        return b' :: '.join(
            part.encode('ascii', 'backslashreplace') for part in
            (self.typ, self.description, self.detail, self.title)
            if part is not None).decode()


class _Constant(jose.JSONDeSerializable, Hashable):
    """ACME constant."""
    __slots__ = ('name',)
    POSSIBLE_NAMES: Dict[str, '_Constant'] = NotImplemented

    def __init__(self, name: str) -> None:
        super().__init__()
        self.POSSIBLE_NAMES[name] = self  # pylint: disable=unsupported-assignment-operation
        self.name = name

    def to_partial_json(self) -> str:
        return self.name

    @classmethod
    def from_json(cls, jobj: str) -> '_Constant':
        if jobj not in cls.POSSIBLE_NAMES:  # pylint: disable=unsupported-membership-test
            raise jose.DeserializationError(
                '{0} not recognized'.format(cls.__name__))
        return cls.POSSIBLE_NAMES[jobj]

    def __repr__(self) -> str:
        return '{0}({1})'.format(self.__class__.__name__, self.name)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, type(self)) and other.name == self.name

    def __hash__(self) -> int:
        return hash((self.__class__, self.name))


class Status(_Constant):
    """ACME account "status" field."""
    POSSIBLE_NAMES: Dict[str, _Constant] = {}


STATUS_VALID = Status('valid')
STATUS_DEACTIVATED = Status('deactivated')
STATUS_REVOKED = Status('revoked')


class Directory(jose.JSONDeSerializable):
    """Directory.

    Maps operation names (``newNonce``, ``newAccount``, ...) to URLs.
    Fields can be read as items (``directory['newAccount']``) or
    attributes (``directory.newAccount``).

    """

    REQUIRED_FIELDS = ('newNonce', 'newAccount')

    class Meta(jose.JSONObjectWithFields):
        """Directory Meta."""
        terms_of_service: str = jose.field('termsOfService', omitempty=True)
        website: str = jose.field('website', omitempty=True)
        caa_identities: List[str] = jose.field('caaIdentities', omitempty=True)
        external_account_required: bool = jose.field('externalAccountRequired', omitempty=True)

    def __init__(self, jobj: Mapping[str, Any]) -> None:
        self._jobj = dict(jobj)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError as error:
            raise AttributeError(str(error))

    def __getitem__(self, name: str) -> Any:
        try:
            return self._jobj[name]
        except KeyError:
            raise KeyError('Directory field "' + name + '" not found')

    def __contains__(self, name: object) -> bool:
        return name in self._jobj

    def __iter__(self) -> Iterator[str]:
        return iter(self._jobj)

    @property
    def meta(self) -> 'Directory.Meta':
        """Directory metadata, empty if the server sent none."""
        return self._jobj.get('meta', self.Meta())

    def to_partial_json(self) -> Dict[str, Any]:
        return self._jobj

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'Directory':
        if not isinstance(jobj, Mapping):
            raise jose.DeserializationError(
                'Directory must be a JSON object, got {0}'.format(type(jobj).__name__))
        missing = [name for name in cls.REQUIRED_FIELDS
                   if not isinstance(jobj.get(name), str) or not jobj[name]]
        if missing:
            raise jose.DeserializationError(
                'Directory is missing required URL field(s): {0}'.format(', '.join(missing)))
        jobj = dict(jobj)
        jobj['meta'] = cls.Meta.from_json(jobj.pop('meta', {}))
        return cls(jobj)


class ExternalAccountBinding:
    """ACME External Account Binding"""

    @classmethod
    def from_data(cls, account_public_key: jose.JWK, kid: str, hmac_key: str,
                  directory: Directory) -> Dict[str, Any]:
        """Create External Account Binding Resource from contact details, kid and hmac."""

        key_json = json.dumps(account_public_key.to_partial_json()).encode()
        decoded_hmac_key = jose.b64.b64decode(hmac_key)
        url = directory["newAccount"]

        eab = jws.JWS.sign(key_json, jose.jwk.JWKOct(key=decoded_hmac_key),
                           jose.jwa.HS256, None,
                           url, kid)

        return eab.to_partial_json()


class Registration(jose.JSONObjectWithFields):
    """Account object, as sent to and returned by the ``newAccount`` resource.

    :ivar jose.JWK key: Public key.
    :ivar tuple contact: Contact URIs, `tuple` of `str`.
    :ivar Status status:
    :ivar bool terms_of_service_agreed:
    :ivar bool only_return_existing:
    :ivar dict external_account_binding:
    :ivar str orders: URL of the account's orders list.

    """
    # on newAccount the server ignores 'key' and populates it based on
    # JWS.signature.combined.jwk
    key: jose.JWK = jose.field('key', omitempty=True, decoder=jose.JWK.from_json)
    # Contact field implements special behavior to allow messages that clear existing
    # contacts while not expecting the `contact` field when loading from json.
    # This is implemented in the constructor and *_json methods.
    contact: Tuple[str, ...] = jose.field('contact', omitempty=True, default=())
    status: Status = jose.field('status', omitempty=True, decoder=Status.from_json)
    terms_of_service_agreed: bool = jose.field('termsOfServiceAgreed', omitempty=True)
    only_return_existing: bool = jose.field('onlyReturnExisting', omitempty=True)
    external_account_binding: Dict[str, Any] = jose.field('externalAccountBinding',
                                                          omitempty=True)
    orders: str = jose.field('orders', omitempty=True)

    email_prefix = 'mailto:'

    @classmethod
    def from_data(cls, email: Optional[str] = None,
                  external_account_binding: Optional[Dict[str, Any]] = None,
                  **kwargs: Any) -> 'Registration':
        """Create registration resource from contact details.

        The `contact` keyword being passed to a Registration object is meaningful, so
        this function represents empty iterables in its kwargs by passing on an empty
        `tuple`.
        """
        contact_provided = 'contact' in kwargs

        details = list(kwargs.pop('contact', ()))
        if email is not None:
            details.extend([cls.email_prefix + mail for mail in email.split(',')])

        if details or contact_provided:
            kwargs['contact'] = tuple(details)

        if external_account_binding:
            kwargs['external_account_binding'] = external_account_binding

        return cls(**kwargs)

    def __init__(self, **kwargs: Any) -> None:
        """Note if the user provides a value for the `contact` member."""
        if 'contact' in kwargs and kwargs['contact'] is not None:
            # Avoid the __setattr__ used by jose.TypedJSONObjectWithFields
            object.__setattr__(self, '_add_contact', True)
        super().__init__(**kwargs)

    def _add_contact_if_appropriate(self, jobj: Dict[str, Any]) -> Dict[str, Any]:
        """Include `contact` in serializations whenever it was provided,
        even if it is empty (which clears the contacts on the server).
        """
        if getattr(self, '_add_contact', False):
            jobj['contact'] = self.encode('contact')

        return jobj

    def to_partial_json(self) -> Dict[str, Any]:
        """Modify josepy.JSONDeserializable.to_partial_json()"""
        jobj = super().to_partial_json()
        return self._add_contact_if_appropriate(jobj)

    def fields_to_partial_json(self) -> Dict[str, Any]:
        """Modify josepy.JSONObjectWithFields.fields_to_partial_json()"""
        jobj = super().fields_to_partial_json()
        return self._add_contact_if_appropriate(jobj)

    @property
    def emails(self) -> Tuple[str, ...]:
        """All emails found in the ``contact`` field."""
        return tuple(
            detail[len(self.email_prefix):] for detail in self.contact  # pylint: disable=not-an-iterable
            if detail.startswith(self.email_prefix))


class Account(jose.JSONObjectWithFields):
    """Account as registered with the CA.

    :ivar Registration body: Account object returned by the CA.
    :ivar str uri: Account URI, taken from the ``Location`` header. It is
        the ``kid`` of every later authenticated request.
    :ivar str terms_of_service: URL for the CA TOS, if the CA linked it.
    :ivar bool created: ``True`` if the CA created the account (HTTP 201),
        ``False`` if the key was already registered (HTTP 200).

    """
    body: Registration = jose.field('body', decoder=Registration.from_json)
    uri: str = jose.field('uri')
    terms_of_service: str = jose.field('terms_of_service', omitempty=True)
    created: bool = jose.field('created', omitempty=True, default=False)
