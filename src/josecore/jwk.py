"""JSON Web Key."""
import abc
import json
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Type

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import rsa

from josecore import b64
from josecore import errors
from josecore import key_util


class JWK(metaclass=abc.ABCMeta):
    """JSON Web Key.

    :ivar key: Native key: a `cryptography` key for asymmetric keys,
        `bytes` for symmetric ones.
    :ivar dict params: Optional JWK members (``alg``, ``kid``, ``use``,
        ``key_ops``, ``x5c``, ``x5t``, ``x5t#S256``) carried along with the
        key.

    """
    type_field_name = 'kty'
    TYPES: Dict[str, Type['JWK']] = {}
    typ: str = NotImplemented
    cryptography_key_types: Tuple[type, ...] = ()
    """Subclasses should override."""

    required: Tuple[str, ...] = NotImplemented
    """Required members of public key's representation as defined by JWK/JWA."""

    METADATA = ('alg', 'kid', 'use', 'key_ops', 'x5c', 'x5t', 'x5t#S256')

    _thumbprint_json_dumps_params: Dict[str, Any] = {
        # "no whitespace or line breaks before or after any syntactic
        # elements"
        'indent': None,
        'separators': (',', ':'),
        # "members ordered lexicographically by the Unicode [UNICODE]
        # code points of the member names"
        'sort_keys': True,
    }

    def __init__(self, key: Any, **params: Any) -> None:
        if self.cryptography_key_types and not isinstance(
                key, self.cryptography_key_types):
            raise TypeError(f'{self.__class__.__name__} cannot hold '
                            f'{key.__class__.__name__}')
        unknown = set(params) - set(self.METADATA)
        if unknown:
            raise TypeError(f'unexpected JWK parameters: {sorted(unknown)}')
        self.key = key
        self.params = params

    @classmethod
    def register(cls, jwk_cls: Type['JWK']) -> Type['JWK']:
        """Register class for JSON deserialization."""
        cls.TYPES[jwk_cls.typ] = jwk_cls
        return jwk_cls

    @property
    @abc.abstractmethod
    def type(self) -> str:  # pragma: no cover
        """Either ``'private'``, ``'public'`` or ``'secret'``."""
        raise NotImplementedError()

    @abc.abstractmethod
    def public_key(self) -> 'JWK':  # pragma: no cover
        """Generate JWK with public key.

        For symmetric cryptosystems, this would return ``self``.

        """
        raise NotImplementedError()

    @abc.abstractmethod
    def fields_to_partial_json(self, private: bool) -> Dict[str, Any]:  # pragma: no cover
        """Key-specific JWK members, without ``kty``."""
        raise NotImplementedError()

    @classmethod
    @abc.abstractmethod
    def key_from_json(cls, jobj: Mapping[str, Any]) -> Any:  # pragma: no cover
        """Native key described by JWK members ``jobj``."""
        raise NotImplementedError()

    def to_json(self, private: Optional[bool] = None) -> Dict[str, Any]:
        """Serialize to JWK members.

        :param bool private: Include private members. Keys export only
            their public members by default, which for symmetric keys
            leaves out ``k``.

        :raises TypeError: if ``private`` is requested for a public key

        """
        if private and self.type == 'public':
            raise TypeError('public key cannot be exported as private')
        jobj = dict(self.params)
        jobj.update(self.fields_to_partial_json(bool(private)))
        jobj[self.type_field_name] = self.typ
        return jobj

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JWK':
        """Deserialize JWK members.

        :raises .NotSupportedError: for unknown ``kty`` values
        :raises .Error: if ``jobj`` describes a different key type than
            the subclass it is deserialized with

        """
        typ = jobj.get(cls.type_field_name)
        try:
            jwk_cls = cls.TYPES[typ]
        except (KeyError, TypeError):
            raise errors.NotSupportedError(f'unsupported key type: {typ}')
        if cls is not JWK and jwk_cls is not cls:
            raise errors.Error(f'Unable to deserialize {typ} key into {cls.__name__}')
        params = {name: jobj[name] for name in cls.METADATA if name in jobj}
        return jwk_cls(key=jwk_cls.key_from_json(jobj), **params)

    def thumbprint(self, hash_function: Type[hashes.HashAlgorithm] = hashes.SHA256) -> bytes:
        """Compute JWK Thumbprint.

        https://tools.ietf.org/html/rfc7638

        :returns bytes:

        """
        digest = hashes.Hash(hash_function())
        digest.update(json.dumps(
            {k: v for k, v in self.to_json(private=self.type != 'public').items()
             if k in self.required},
            **self._thumbprint_json_dumps_params).encode())
        return digest.finalize()

    def _identity(self) -> str:
        return json.dumps(self.to_json(private=self.type != 'public'), sort_keys=True)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, JWK):
            return NotImplemented
        return type(self) is type(other) and self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((self.__class__, self._identity()))

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.type}>'


class _AsymmetricJWK(JWK):
    """Common part of RSA, EC and OKP keys."""
    private_key_types: Tuple[type, ...] = ()
    private_members: Tuple[str, ...] = ('d',)
    private_formats: Dict[str, serialization.PrivateFormat] = {
        'pkcs8': serialization.PrivateFormat.PKCS8,
    }
    public_formats: Dict[str, serialization.PublicFormat] = {
        'spki': serialization.PublicFormat.SubjectPublicKeyInfo,
    }

    @property
    def type(self) -> str:
        if isinstance(self.key, self.private_key_types):
            return 'private'
        return 'public'

    def public_key(self) -> 'JWK':
        if self.type == 'public':
            return self
        return type(self)(key=self.key.public_key(), **self.params)

    @classmethod
    def key_from_json(cls, jobj: Mapping[str, Any]) -> Any:
        return key_util.jwk_to_key(jobj)

    def fields_to_partial_json(self, private: bool) -> Dict[str, Any]:
        jobj = key_util.key_to_jwk(self.key)
        del jobj[self.type_field_name]
        if not private:
            for name in self.private_members:
                jobj.pop(name, None)
        return jobj

    def to_pem(self, private: bool = False, fmt: Optional[str] = None,
               passphrase: Optional[bytes] = None) -> str:
        """Export as PEM.

        :param bool private: Export the private key.
        :param str fmt: Container format. Private keys: ``'pkcs8'``
            (default), ``'pkcs1'`` (RSA) or ``'sec1'`` (EC). Public keys:
            ``'spki'`` (default) or ``'pkcs1'`` (RSA).
        :param bytes passphrase: Encrypt the exported private key.

        :raises TypeError: if a private export is requested for a public
            key, or a passphrase is given for a public export
        :raises .NotSupportedError: if ``fmt`` is not available for the key

        """
        if not private:
            if passphrase is not None:
                raise TypeError(
                    'passphrase can only be applied when exporting private keys')
            public_format = self._format(self.public_formats, fmt or 'spki')
            return self.public_key().key.public_bytes(
                serialization.Encoding.PEM, public_format).decode('ascii')

        if self.type == 'public':
            raise TypeError('public key cannot be exported as private')
        private_format = self._format(self.private_formats, fmt or 'pkcs8')
        if passphrase is None:
            encryption: serialization.KeySerializationEncryption = \
                serialization.NoEncryption()
        else:
            encryption = serialization.BestAvailableEncryption(passphrase)
        return self.key.private_bytes(
            serialization.Encoding.PEM, private_format, encryption).decode('ascii')

    def _format(self, formats: Mapping[str, Any], fmt: str) -> Any:
        try:
            return formats[fmt]
        except KeyError:
            raise errors.NotSupportedError(
                f'{self.typ} keys cannot be exported as {fmt}')


@JWK.register
class JWKOct(JWK):
    """Symmetric JWK."""
    typ = 'oct'
    cryptography_key_types = (bytes,)
    required = ('k', JWK.type_field_name)

    @property
    def type(self) -> str:
        return 'secret'

    def fields_to_partial_json(self, private: bool) -> Dict[str, Any]:
        if not private:
            return {}
        return {'k': b64.encode_b64jose(self.key)}

    @classmethod
    def key_from_json(cls, jobj: Mapping[str, Any]) -> bytes:
        if 'k' not in jobj:
            raise errors.FormatError('JWK is missing the "k" member')
        return b64.decode_b64jose(jobj['k'])

    def public_key(self) -> 'JWKOct':
        return self

    def to_pem(self, *args: Any, **kwargs: Any) -> str:
        """Symmetric keys have no PEM form."""
        raise TypeError('symmetric keys cannot be exported as PEM')


@JWK.register
class JWKRSA(_AsymmetricJWK):
    """RSA JWK.

    :ivar key: :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPrivateKey`
        or :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicKey`

    """
    typ = 'RSA'
    cryptography_key_types = (rsa.RSAPublicKey, rsa.RSAPrivateKey)
    private_key_types = (rsa.RSAPrivateKey,)
    required = ('e', JWK.type_field_name, 'n')
    private_members = ('d', 'p', 'q', 'dp', 'dq', 'qi')
    private_formats = {
        'pkcs8': serialization.PrivateFormat.PKCS8,
        'pkcs1': serialization.PrivateFormat.TraditionalOpenSSL,
    }
    public_formats = {
        'spki': serialization.PublicFormat.SubjectPublicKeyInfo,
        'pkcs1': serialization.PublicFormat.PKCS1,
    }


@JWK.register
class JWKEC(_AsymmetricJWK):
    """EC JWK.

    :ivar key: :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePrivateKey`
        or :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePublicKey`

    """
    typ = 'EC'
    cryptography_key_types = (ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey)
    private_key_types = (ec.EllipticCurvePrivateKey,)
    required = ('crv', JWK.type_field_name, 'x', 'y')
    private_formats = {
        'pkcs8': serialization.PrivateFormat.PKCS8,
        'sec1': serialization.PrivateFormat.TraditionalOpenSSL,
    }


@JWK.register
class JWKOKP(_AsymmetricJWK):
    """Octet key pair JWK (RFC 8037): Ed25519, Ed448, X25519 and X448."""
    typ = 'OKP'
    cryptography_key_types = key_util.OKP_PRIVATE_KEY_TYPES + key_util.OKP_PUBLIC_KEY_TYPES
    private_key_types = key_util.OKP_PRIVATE_KEY_TYPES
    required = ('crv', JWK.type_field_name, 'x')
