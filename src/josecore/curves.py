"""Curve table.

Static mapping between JOSE curve names, their object identifiers (both
in dotted form and as complete DER ``OBJECT IDENTIFIER`` encodings, as
they appear in ``AlgorithmIdentifier.parameters``) and the byte length of
a single coordinate or raw key.

"""
from typing import Dict
from typing import NamedTuple
from typing import Optional
from typing import Type

from cryptography.hazmat.primitives.asymmetric import ec

from josecore import errors

#: id-ecPublicKey, the algorithm OID of every EC SubjectPublicKeyInfo.
EC_PUBLIC_KEY_OID = '1.2.840.10045.2.1'
#: rsaEncryption
RSA_ENCRYPTION_OID = '1.2.840.113549.1.1.1'


class Curve(NamedTuple):
    """Curve descriptor.

    :ivar str name: JOSE ``crv`` name.
    :ivar str oid: Dotted object identifier. For EC curves this is the
        named curve, for OKP curves the key algorithm itself.
    :ivar bytes der: DER encoding of ``oid``.
    :ivar int size: Coordinate length (EC) or raw key length (OKP) in bytes.
    :ivar ec_curve: `cryptography` curve class (EC curves only).

    """
    name: str
    oid: str
    der: bytes
    size: int
    ec_curve: Optional[Type[ec.EllipticCurve]] = None


P256 = Curve('P-256', '1.2.840.10045.3.1.7',
             bytes.fromhex('06082a8648ce3d030107'), 32, ec.SECP256R1)
P384 = Curve('P-384', '1.3.132.0.34', bytes.fromhex('06052b81040022'), 48, ec.SECP384R1)
P521 = Curve('P-521', '1.3.132.0.35', bytes.fromhex('06052b81040023'), 66, ec.SECP521R1)

X25519 = Curve('X25519', '1.3.101.110', bytes.fromhex('06032b656e'), 32)
X448 = Curve('X448', '1.3.101.111', bytes.fromhex('06032b656f'), 56)
ED25519 = Curve('Ed25519', '1.3.101.112', bytes.fromhex('06032b6570'), 32)
ED448 = Curve('Ed448', '1.3.101.113', bytes.fromhex('06032b6571'), 57)

EC_CURVES: Dict[str, Curve] = {curve.name: curve for curve in (P256, P384, P521)}
OKP_CURVES: Dict[str, Curve] = {
    curve.name: curve for curve in (ED25519, ED448, X25519, X448)}

_EC_BY_DER: Dict[bytes, Curve] = {curve.der: curve for curve in EC_CURVES.values()}
_OKP_BY_OID: Dict[str, Curve] = {curve.oid: curve for curve in OKP_CURVES.values()}


def ec_curve(name: str) -> Curve:
    """Look up EC curve by JOSE name.

    :raises .NotSupportedError: if the curve is not supported

    """
    try:
        return EC_CURVES[name]
    except (KeyError, TypeError):
        raise errors.NotSupportedError(f'unsupported EC key curve: {name}')


def okp_curve(name: str) -> Curve:
    """Look up OKP curve by JOSE name.

    :raises .NotSupportedError: if the curve is not supported

    """
    try:
        return OKP_CURVES[name]
    except (KeyError, TypeError):
        raise errors.NotSupportedError(f'unsupported OKP key curve: {name}')


def ec_curve_from_der(der: bytes) -> Curve:
    """Look up EC curve by the DER encoding of its OID.

    :raises .FormatError: if the OID is not a recognized named curve

    """
    try:
        return _EC_BY_DER[der]
    except KeyError:
        raise errors.FormatError(f'unrecognized EC curve OID: {der.hex()}')


def okp_curve_from_oid(oid: str) -> Curve:
    """Look up OKP curve by its key algorithm OID.

    :raises .FormatError: if the OID is not a recognized OKP algorithm

    """
    try:
        return _OKP_BY_OID[oid]
    except KeyError:
        raise errors.FormatError(f'unrecognized OKP key algorithm OID: {oid}')
