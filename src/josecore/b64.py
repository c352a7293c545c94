"""JOSE Base64.

`JOSE Base64`_ is defined as:

  - URL-safe Base64
  - padding stripped

JWK members holding big integers (``n``, ``e``, ``d``, ``p``, ``q``,
``dp``, ``dq``, ``qi``) use the `Base64urlUInt`_ encoding on top of it:
the unsigned big-endian magnitude in the minimum number of octets.


.. _`JOSE Base64`:
    https://datatracker.ietf.org/doc/html/rfc7515#appendix-C

.. _`Base64urlUInt`:
    https://datatracker.ietf.org/doc/html/rfc7518#section-2

.. Do NOT try to call this module "base64", as it will "shadow" the
   standard library.

"""
import base64
import binascii
from typing import Optional
from typing import Union

from josecore import errors


def b64encode(data: bytes) -> bytes:
    """JOSE Base64 encode.

    :param data: Data to be encoded.
    :type data: bytes

    :returns: JOSE Base64 string.
    :rtype: bytes

    :raises TypeError: if ``data`` is of incorrect type

    """
    if not isinstance(data, bytes):
        raise TypeError('argument should be bytes')
    return base64.urlsafe_b64encode(data).rstrip(b'=')


def b64decode(data: Union[bytes, str]) -> bytes:
    """JOSE Base64 decode.

    :param data: Base64 string to be decoded. If it's unicode, then
                 only ASCII characters are allowed.
    :type data: bytes or str

    :returns: Decoded data.
    :rtype: bytes

    :raises TypeError: if input is of incorrect type
    :raises ValueError: if input is unicode with non-ASCII characters

    """
    if isinstance(data, str):
        try:
            data = data.encode('ascii')
        except UnicodeEncodeError:
            raise ValueError(
                'unicode argument should contain only ASCII characters')
    elif not isinstance(data, bytes):
        raise TypeError('argument should be a str or bytes')

    return base64.urlsafe_b64decode(data + b'=' * (-len(data) % 4))


def encode_b64jose(data: bytes) -> str:
    """Encode JOSE Base-64 field.

    :param bytes data:
    :rtype: str

    """
    # b64encode produces ASCII characters only
    return b64encode(data).decode('ascii')


def decode_b64jose(data: str, size: Optional[int] = None) -> bytes:
    """Decode JOSE Base-64 field.

    :param str data:
    :param int size: Required length (after decoding).

    :rtype: bytes

    :raises .FormatError: if ``data`` is not valid JOSE Base64 or does
        not decode to exactly ``size`` octets

    """
    try:
        decoded = b64decode(data)
    except (binascii.Error, TypeError, ValueError) as error:
        raise errors.FormatError(f'invalid base64url value: {error}') from error

    if size is not None and len(decoded) != size:
        raise errors.FormatError(
            f'expected exactly {size} bytes, got {len(decoded)}')

    return decoded


def encode_uint(value: int) -> str:
    """Encode Base64urlUInt.

    Zero encodes as a single zero octet, every other value without
    leading zero octets.

    :param int value: Non-negative integer.
    :rtype: str

    """
    if value < 0:
        raise ValueError('Base64urlUInt cannot encode negative values')
    return encode_b64jose(value.to_bytes(max(1, (value.bit_length() + 7) // 8), 'big'))


def decode_uint(data: str) -> int:
    """Decode Base64urlUInt.

    :param str data:
    :rtype: int

    :raises .FormatError: if ``data`` is not valid JOSE Base64 or empty

    """
    decoded = decode_b64jose(data)
    if not decoded:
        raise errors.FormatError('empty Base64urlUInt value')
    return int.from_bytes(decoded, 'big')
