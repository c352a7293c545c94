"""AES_CBC_HMAC_SHA2 content encryption.

https://datatracker.ietf.org/doc/html/rfc7518#section-5.2

Authenticated encryption composed of AES in CBC mode (PKCS #7 padding)
and a truncated HMAC tag. The content encryption key is split in two
halves: the first is the MAC key, the second the AES key.

"""
import logging
from typing import Any
from typing import Tuple

from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers import modes

from josecore import errors
from josecore import jwa
from josecore import jwk
from josecore import registry

logger = logging.getLogger(__name__)

IV_SIZE = 16


class AESCBCHMAC:
    """``A{size}CBC-HS{2 * size}`` content encryption.

    :ivar str name: JWA ``enc`` name.
    :ivar int size: AES key size in bits; the tag and the MAC key have
        the same length as the AES key.

    """

    def __init__(self, name: str, size: int) -> None:
        self.name = name
        self.size = size
        self.key_size = size // 8
        self.mac = jwa.JWASignature.from_json(f'HS{2 * size}')

    def __repr__(self) -> str:
        return self.name

    def _split_key(self, key: Any) -> Tuple[bytes, bytes]:
        if isinstance(key, jwk.JWKOct):
            key = key.key
        if len(key) != 2 * self.key_size:
            raise errors.FormatError(
                f'{self.name} requires a {2 * self.key_size} byte key')
        return key[:self.key_size], key[self.key_size:]

    def _tag(self, mac_key: bytes, aad: bytes, iv: bytes, ciphertext: bytes) -> bytes:
        al = (len(aad) * 8).to_bytes(8, 'big')
        return self.mac.sign(mac_key, aad + iv + ciphertext + al)[:self.key_size]

    def encrypt(self, key: Any, cleartext: bytes, iv: bytes,
                aad: bytes = b'') -> Tuple[bytes, bytes]:
        """Encrypt and authenticate.

        :param key: Content encryption key, ``2 * size / 8`` bytes.
        :param bytes cleartext: Plaintext.
        :param bytes iv: 16 byte initialization vector.
        :param bytes aad: Additional authenticated data.

        :returns: ``(ciphertext, tag)``

        :raises .FormatError: on wrong ``iv`` or ``key`` length

        """
        if len(iv) != IV_SIZE:
            raise errors.FormatError('invalid iv')
        mac_key, enc_key = self._split_key(key)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(cleartext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return ciphertext, self._tag(mac_key, aad, iv, ciphertext)

    def decrypt(self, key: Any, ciphertext: bytes, iv: bytes, tag: bytes,
                aad: bytes = b'') -> bytes:
        """Verify and decrypt.

        The tag comparison and the CBC decryption both always run; a
        failure of either surfaces as the same `.DecryptionFailedError`.

        :raises .FormatError: on wrong ``iv``, ``tag`` or ``key`` length
        :raises .DecryptionFailedError: if the tag does not match or the
            ciphertext does not decrypt

        """
        if len(iv) != IV_SIZE:
            raise errors.FormatError('invalid iv')
        if len(tag) != self.key_size:
            raise errors.FormatError('invalid tag')
        mac_key, enc_key = self._split_key(key)

        expected_tag = self._tag(mac_key, aad, iv, ciphertext)
        mac_check_passed = constant_time.bytes_eq(tag, expected_tag)

        cleartext = None
        try:
            decryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            cleartext = unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            cleartext = None

        if cleartext is None or not mac_check_passed:
            logger.debug('%s decryption failed', self.name)
            raise errors.DecryptionFailedError()
        return cleartext


def _register(enc: AESCBCHMAC) -> AESCBCHMAC:
    registry.register_encryption(enc.name, enc.encrypt, enc.decrypt)
    return enc


#: AES_128_CBC_HMAC_SHA_256
A128CBC_HS256 = _register(AESCBCHMAC('A128CBC-HS256', 128))
#: AES_192_CBC_HMAC_SHA_384
A192CBC_HS384 = _register(AESCBCHMAC('A192CBC-HS384', 192))
#: AES_256_CBC_HMAC_SHA_512
A256CBC_HS512 = _register(AESCBCHMAC('A256CBC-HS512', 256))
