"""JSON Web Algorithms: digital signatures.

https://datatracker.ietf.org/doc/html/rfc7518#section-3

Every algorithm instance below is registered in `josecore.registry` at
import time.

"""
import abc
from collections.abc import Hashable
import logging
from typing import Any
from typing import Dict

import cryptography.exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import ed448
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric import rsa

from josecore import curves
from josecore import ecdsa_sig
from josecore import errors
from josecore import jwk
from josecore import registry

logger = logging.getLogger(__name__)


def _native(key: Any) -> Any:
    """Unwrap `.JWK` into the key it holds."""
    if isinstance(key, jwk.JWK):
        return key.key
    return key


class JWASignature(Hashable):
    """Base class for JSON Web Signature Algorithms."""
    SIGNATURES: Dict[str, 'JWASignature'] = {}

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, JWASignature):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((self.__class__, self.name))

    @classmethod
    def register(cls, signature: 'JWASignature') -> 'JWASignature':
        """Register signature algorithm by name."""
        assert signature.name not in cls.SIGNATURES, \
            f'signature algorithm {signature.name} already registered'
        registry.register_signature(signature.name, signature.sign, signature.verify)
        cls.SIGNATURES[signature.name] = signature
        return signature

    def to_json(self) -> str:
        return self.name

    @classmethod
    def from_json(cls, jobj: str) -> 'JWASignature':
        try:
            return cls.SIGNATURES[jobj]
        except KeyError:
            raise errors.NotSupportedError(f'unsupported algorithm: {jobj}')

    @abc.abstractmethod
    def sign(self, key: Any, msg: bytes) -> bytes:  # pragma: no cover
        """Sign the ``msg`` using ``key``."""
        raise NotImplementedError()

    @abc.abstractmethod
    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:  # pragma: no cover
        """Verify the ``msg`` and ``sig`` using ``key``."""
        raise NotImplementedError()

    def __repr__(self) -> str:
        return self.name


class _JWAHS(JWASignature):

    kty = jwk.JWKOct

    def __init__(self, name: str, hash_: type) -> None:
        super().__init__(name)
        self.hash = hash_()

    def sign(self, key: Any, msg: bytes) -> bytes:
        signer = hmac.HMAC(_native(key), self.hash)
        signer.update(msg)
        return signer.finalize()

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        verifier = hmac.HMAC(_native(key), self.hash)
        verifier.update(msg)
        try:
            verifier.verify(sig)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


class _JWARSA:

    kty = jwk.JWKRSA
    padding: Any = NotImplemented
    hash: Any = NotImplemented

    def sign(self, key: Any, msg: bytes) -> bytes:
        """Sign the ``msg`` using ``key``."""
        key = _native(key)
        if not isinstance(key, rsa.RSAPrivateKey):
            raise errors.Error("Public key cannot be used for signing")
        try:
            return key.sign(msg, self.padding, self.hash)
        except ValueError as error:  # digest too large
            logger.debug(error, exc_info=True)
            raise errors.Error(str(error))

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        """Verify the ``msg`` and ``sig`` using ``key``."""
        key = _native(key)
        if isinstance(key, rsa.RSAPrivateKey):
            key = key.public_key()
        if not isinstance(key, rsa.RSAPublicKey):
            logger.debug('Cannot verify %s with %s', self, key.__class__.__name__)
            return False
        try:
            key.verify(sig, msg, self.padding, self.hash)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


class _JWARS(_JWARSA, JWASignature):

    def __init__(self, name: str, hash_: type) -> None:
        super().__init__(name)
        self.padding = padding.PKCS1v15()
        self.hash = hash_()


class _JWAPS(_JWARSA, JWASignature):

    def __init__(self, name: str, hash_: type) -> None:
        super().__init__(name)
        self.padding = padding.PSS(
            mgf=padding.MGF1(hash_()),
            salt_length=padding.PSS.DIGEST_LENGTH)
        self.hash = hash_()


class _JWAES(JWASignature):

    kty = jwk.JWKEC

    def __init__(self, name: str, hash_: type, crv: str) -> None:
        super().__init__(name)
        self.hash = hash_()
        self.curve = curves.ec_curve(crv)

    def _on_curve(self, key: Any) -> bool:
        return isinstance(key.curve, self.curve.ec_curve)

    def sign(self, key: Any, msg: bytes) -> bytes:
        """Sign the ``msg`` using ``key``, returning ``r || s``."""
        key = _native(key)
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise errors.Error(f'{self.name} signing requires an EC private key')
        if not self._on_curve(key):
            raise errors.Error(f'{self.name} requires a {self.curve.name} key')
        der = key.sign(msg, ec.ECDSA(self.hash))
        return ecdsa_sig.der_to_jose(der, self.curve.name)

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        """Verify the ``r || s`` signature ``sig`` over ``msg``."""
        key = _native(key)
        if isinstance(key, ec.EllipticCurvePrivateKey):
            key = key.public_key()
        if not isinstance(key, ec.EllipticCurvePublicKey) or not self._on_curve(key):
            logger.debug('Cannot verify %s with %s', self, key.__class__.__name__)
            return False
        try:
            key.verify(ecdsa_sig.jose_to_der(sig, self.curve.name), msg,
                       ec.ECDSA(self.hash))
        except (errors.FormatError, cryptography.exceptions.InvalidSignature) as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


class _JWAEdDSA(JWASignature):

    kty = jwk.JWKOKP
    private_key_types = (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)
    public_key_types = (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)

    def sign(self, key: Any, msg: bytes) -> bytes:
        key = _native(key)
        if not isinstance(key, self.private_key_types):
            raise errors.Error('EdDSA signing requires an Ed25519 or Ed448 private key')
        return key.sign(msg)

    def verify(self, key: Any, msg: bytes, sig: bytes) -> bool:
        key = _native(key)
        if isinstance(key, self.private_key_types):
            key = key.public_key()
        if not isinstance(key, self.public_key_types):
            logger.debug('Cannot verify %s with %s', self, key.__class__.__name__)
            return False
        try:
            key.verify(sig, msg)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        else:
            return True


#: HMAC using SHA-256
HS256 = JWASignature.register(_JWAHS('HS256', hashes.SHA256))
#: HMAC using SHA-384
HS384 = JWASignature.register(_JWAHS('HS384', hashes.SHA384))
#: HMAC using SHA-512
HS512 = JWASignature.register(_JWAHS('HS512', hashes.SHA512))

#: RSASSA-PKCS-v1_5 using SHA-256
RS256 = JWASignature.register(_JWARS('RS256', hashes.SHA256))
#: RSASSA-PKCS-v1_5 using SHA-384
RS384 = JWASignature.register(_JWARS('RS384', hashes.SHA384))
#: RSASSA-PKCS-v1_5 using SHA-512
RS512 = JWASignature.register(_JWARS('RS512', hashes.SHA512))

#: RSASSA-PSS using SHA-256 and MGF1 with SHA-256
PS256 = JWASignature.register(_JWAPS('PS256', hashes.SHA256))
#: RSASSA-PSS using SHA-384 and MGF1 with SHA-384
PS384 = JWASignature.register(_JWAPS('PS384', hashes.SHA384))
#: RSASSA-PSS using SHA-512 and MGF1 with SHA-512
PS512 = JWASignature.register(_JWAPS('PS512', hashes.SHA512))

#: ECDSA using P-256 and SHA-256
ES256 = JWASignature.register(_JWAES('ES256', hashes.SHA256, 'P-256'))
#: ECDSA using P-384 and SHA-384
ES384 = JWASignature.register(_JWAES('ES384', hashes.SHA384, 'P-384'))
#: ECDSA using P-521 and SHA-512
ES512 = JWASignature.register(_JWAES('ES512', hashes.SHA512, 'P-521'))

#: Edwards-curve Digital Signature Algorithm (RFC 8037)
EdDSA = JWASignature.register(_JWAEdDSA('EdDSA'))
