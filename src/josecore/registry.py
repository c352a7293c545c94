"""Algorithm registry.

Four write-once maps from JWA algorithm name to implementation. They are
filled while `josecore.jwa` and `josecore.aes_cbc_hmac` are imported,
which the package ``__init__`` does once, and are only read afterwards.

"""
from typing import Any
from typing import Callable
from typing import Dict

from josecore import errors

SIGN: Dict[str, Callable[..., bytes]] = {}
VERIFY: Dict[str, Callable[..., bool]] = {}
ENCRYPT: Dict[str, Callable[..., Any]] = {}
DECRYPT: Dict[str, Callable[..., bytes]] = {}


def register_signature(name: str, sign: Callable[..., bytes],
                       verify: Callable[..., bool]) -> None:
    """Register sign and verify implementations under ``name``."""
    assert name not in SIGN, f'sign alg {name} already registered'
    assert name not in VERIFY, f'verify alg {name} already registered'
    SIGN[name] = sign
    VERIFY[name] = verify


def register_encryption(name: str, encrypt: Callable[..., Any],
                        decrypt: Callable[..., bytes]) -> None:
    """Register encrypt and decrypt implementations under ``name``."""
    assert name not in ENCRYPT, f'encrypt alg {name} already registered'
    assert name not in DECRYPT, f'decrypt alg {name} already registered'
    ENCRYPT[name] = encrypt
    DECRYPT[name] = decrypt


def _lookup(table: Dict[str, Callable[..., Any]], name: str) -> Callable[..., Any]:
    try:
        return table[name]
    except KeyError:
        raise errors.NotSupportedError(f'unsupported algorithm: {name}')


def sign(alg: str, key: Any, msg: bytes) -> bytes:
    """Sign ``msg`` with ``key`` using algorithm ``alg``."""
    return _lookup(SIGN, alg)(key, msg)


def verify(alg: str, key: Any, msg: bytes, sig: bytes) -> bool:
    """Verify ``sig`` over ``msg`` with ``key`` using algorithm ``alg``."""
    return _lookup(VERIFY, alg)(key, msg, sig)


def encrypt(alg: str, key: bytes, cleartext: bytes, iv: bytes,
            aad: bytes = b'') -> Any:
    """Encrypt ``cleartext`` using content encryption algorithm ``alg``.

    :returns: ``(ciphertext, tag)``

    """
    return _lookup(ENCRYPT, alg)(key, cleartext, iv, aad)


def decrypt(alg: str, key: bytes, ciphertext: bytes, iv: bytes, tag: bytes,
            aad: bytes = b'') -> bytes:
    """Decrypt ``ciphertext`` using content encryption algorithm ``alg``."""
    return _lookup(DECRYPT, alg)(key, ciphertext, iv, tag, aad)
