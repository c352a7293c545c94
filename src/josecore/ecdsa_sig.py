"""ECDSA signature encodings.

The primitive library produces and consumes DER ``Ecdsa-Sig-Value``
structures (a SEQUENCE of the two INTEGERs ``r`` and ``s``). JWS uses the
fixed-width concatenation ``r || s`` instead, each half left-padded to
the coordinate length of the curve (RFC 7518, section 3.4).

"""
from cryptography.hazmat.primitives.asymmetric import utils

from josecore import curves
from josecore import errors


def der_to_jose(signature: bytes, crv: str) -> bytes:
    """Convert DER signature to JOSE form.

    :param bytes signature: DER encoded signature.
    :param str crv: JOSE curve name, e.g. ``'P-256'``.

    :returns: ``r || s``, ``2 * curve.size`` bytes long.
    :rtype: bytes

    :raises .FormatError: if the DER is malformed or ``r`` or ``s`` do
        not fit the coordinate length

    """
    size = curves.ec_curve(crv).size
    try:
        r, s = utils.decode_dss_signature(signature)
    except ValueError as error:
        raise errors.FormatError(f'invalid DER signature: {error}') from error
    try:
        return r.to_bytes(size, 'big') + s.to_bytes(size, 'big')
    except OverflowError as error:
        raise errors.FormatError(
            f'signature component does not fit {crv}') from error


def jose_to_der(signature: bytes, crv: str) -> bytes:
    """Convert JOSE signature to DER form.

    :param bytes signature: ``r || s``.
    :param str crv: JOSE curve name.

    :rtype: bytes

    :raises .FormatError: if ``signature`` has the wrong length for ``crv``

    """
    size = curves.ec_curve(crv).size
    if len(signature) != 2 * size:
        raise errors.FormatError(
            f'{crv} signatures must be {2 * size} bytes, got {len(signature)}')
    r = int.from_bytes(signature[:size], 'big')
    s = int.from_bytes(signature[size:], 'big')
    return utils.encode_dss_signature(r, s)
