"""Key codec.

Converts native `cryptography` key handles to JWK and JWK to PEM, going
through the DER structures in `josecore.asn1`.

"""
import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import Mapping
from typing import Tuple

import cryptography.exceptions
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import ed448
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric import x448
from cryptography.hazmat.primitives.asymmetric import x25519

from josecore import asn1
from josecore import b64
from josecore import curves
from josecore import errors
from josecore import rsa_primes

logger = logging.getLogger(__name__)

CRT_PARAMS = ('p', 'q', 'dp', 'dq', 'qi')

OKP_PRIVATE_KEY_TYPES = (
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
    x25519.X25519PrivateKey,
    x448.X448PrivateKey,
)
OKP_PUBLIC_KEY_TYPES = (
    ed25519.Ed25519PublicKey,
    ed448.Ed448PublicKey,
    x25519.X25519PublicKey,
    x448.X448PublicKey,
)


def _pkcs8(key: Any) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption())


def _spki(key: Any) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo)


def _member(jwk: Mapping[str, Any], name: str) -> Any:
    try:
        return jwk[name]
    except KeyError:
        raise errors.FormatError(f'JWK is missing the "{name}" member')


def _split_ec_point(point: bytes, curve: curves.Curve) -> Tuple[bytes, bytes]:
    """Split uncompressed EC point into its coordinates."""
    if not point:
        raise errors.FormatError('empty EC point')
    if point[0] in (0x02, 0x03):
        raise errors.NotSupportedError('compressed EC points are not supported')
    if point[0] != 0x04 or len(point) != 1 + 2 * curve.size:
        raise errors.FormatError(f'invalid {curve.name} point encoding')
    return point[1:1 + curve.size], point[1 + curve.size:]


def _ec_curve_of(algorithm: Mapping[str, Any]) -> curves.Curve:
    if 'parameters' not in algorithm:
        raise errors.FormatError('EC key without named curve parameters')
    return curves.ec_curve_from_der(algorithm['parameters'])


def _rsa_public_to_jwk(key: rsa.RSAPublicKey) -> Dict[str, str]:
    spki = asn1.decode(_spki(key), asn1.get('PublicKeyInfo'))
    public = asn1.decode(spki['publicKey'], asn1.get('RSAPublicKey'))
    return {
        'kty': 'RSA',
        'n': b64.encode_uint(public['n']),
        'e': b64.encode_uint(public['e']),
    }


def _rsa_private_to_jwk(key: rsa.RSAPrivateKey) -> Dict[str, str]:
    pki = asn1.decode(_pkcs8(key), asn1.get('PrivateKeyInfo'))
    private = asn1.decode(pki['privateKey'], asn1.get('RSAPrivateKey'))
    if private['version'] != asn1.TWO_PRIME:
        raise errors.NotSupportedError(
            'Private RSA keys with more than two primes are not supported')
    jwk = {'kty': 'RSA'}
    for name in ('n', 'e', 'd') + CRT_PARAMS:
        jwk[name] = b64.encode_uint(private[name])
    return jwk


def _ec_public_to_jwk(key: ec.EllipticCurvePublicKey) -> Dict[str, str]:
    spki = asn1.decode(_spki(key), asn1.get('PublicKeyInfo'))
    curve = _ec_curve_of(spki['algorithm'])
    x, y = _split_ec_point(spki['publicKey'], curve)
    return {
        'kty': 'EC',
        'crv': curve.name,
        'x': b64.encode_b64jose(x),
        'y': b64.encode_b64jose(y),
    }


def _ec_private_to_jwk(key: ec.EllipticCurvePrivateKey) -> Dict[str, str]:
    pki = asn1.decode(_pkcs8(key), asn1.get('PrivateKeyInfo'))
    curve = _ec_curve_of(pki['algorithm'])
    private = asn1.decode(pki['privateKey'], asn1.get('ECPrivateKey'))
    d = private['privateKey']
    if len(d) > curve.size:
        raise errors.FormatError(f'{curve.name} private key is too long')

    if 'publicKey' in private:
        x, y = _split_ec_point(private['publicKey'], curve)
        jwk = {
            'kty': 'EC',
            'crv': curve.name,
            'x': b64.encode_b64jose(x),
            'y': b64.encode_b64jose(y),
        }
    else:
        logger.debug('ECPrivateKey without public point, deriving it')
        jwk = _ec_public_to_jwk(key.public_key())
    jwk['d'] = b64.encode_b64jose(d.rjust(curve.size, b'\x00'))
    return jwk


def _okp_public_to_jwk(key: Any) -> Dict[str, str]:
    spki = asn1.decode(_spki(key), asn1.get('PublicKeyInfo'))
    curve = curves.okp_curve_from_oid(spki['algorithm']['algorithm'])
    return {
        'kty': 'OKP',
        'crv': curve.name,
        'x': b64.encode_b64jose(spki['publicKey']),
    }


def _okp_private_to_jwk(key: Any) -> Dict[str, str]:
    private = asn1.decode(_pkcs8(key), asn1.get('OneAsymmetricKey'))
    d = asn1.decode(private['privateKey'], asn1.get('CurvePrivateKey'))
    jwk = _okp_public_to_jwk(key.public_key())
    jwk['d'] = b64.encode_b64jose(d)
    return jwk


def key_to_jwk(key: Any) -> Dict[str, str]:
    """Export native key as JWK.

    :param key: `cryptography` RSA, EC, Ed25519, Ed448, X25519 or X448
        private or public key.

    :returns: JWK members; private keys include their private members.
    :rtype: dict

    :raises .NotSupportedError: for other key types, multi-prime RSA keys
        and compressed EC points
    :raises .FormatError: if the key serializes to unexpected DER

    """
    if isinstance(key, rsa.RSAPrivateKey):
        return _rsa_private_to_jwk(key)
    elif isinstance(key, rsa.RSAPublicKey):
        return _rsa_public_to_jwk(key)
    elif isinstance(key, ec.EllipticCurvePrivateKey):
        return _ec_private_to_jwk(key)
    elif isinstance(key, ec.EllipticCurvePublicKey):
        return _ec_public_to_jwk(key)
    elif isinstance(key, OKP_PRIVATE_KEY_TYPES):
        return _okp_private_to_jwk(key)
    elif isinstance(key, OKP_PUBLIC_KEY_TYPES):
        return _okp_public_to_jwk(key)
    raise errors.NotSupportedError(
        'only RSA, EC and OKP asymmetric keys are supported')


def _ec_point(jwk: Mapping[str, Any], curve: curves.Curve) -> bytes:
    x = b64.decode_b64jose(_member(jwk, 'x'), size=curve.size)
    y = b64.decode_b64jose(_member(jwk, 'y'), size=curve.size)
    return b'\x04' + x + y


def _rsa_private_to_pem(jwk: Mapping[str, Any]) -> str:
    if 'oth' in jwk:
        raise errors.NotSupportedError(
            'Private RSA keys with more than two primes are not supported')

    present = [name for name in CRT_PARAMS if jwk.get(name)]
    if present and len(present) != len(CRT_PARAMS):
        raise errors.ImportFailedError(
            'all other private key parameters must be present when '
            'any one of them is present')
    if not present:
        jwk = rsa_primes.compute_primes({
            name: _member(jwk, name) for name in ('n', 'e', 'd')})

    value = {'version': asn1.TWO_PRIME}
    for name in ('n', 'e', 'd') + CRT_PARAMS:
        value[name] = b64.decode_uint(_member(jwk, name))
    return asn1.encode(value, asn1.get('RSAPrivateKey'), 'pem', label='RSA PRIVATE KEY')


def _rsa_public_to_pem(jwk: Mapping[str, Any]) -> str:
    value = {
        'n': b64.decode_uint(_member(jwk, 'n')),
        'e': b64.decode_uint(_member(jwk, 'e')),
    }
    return asn1.encode(value, asn1.get('RSAPublicKey'), 'pem', label='RSA PUBLIC KEY')


def _ec_private_to_pem(jwk: Mapping[str, Any]) -> str:
    curve = curves.ec_curve(jwk['crv'])
    value = {
        'version': 1,
        'privateKey': b64.decode_b64jose(jwk['d'], size=curve.size),
        'parameters': {'type': 'namedCurve', 'value': curve.oid},
        'publicKey': _ec_point(jwk, curve),
    }
    return asn1.encode(value, asn1.get('ECPrivateKey'), 'pem', label='EC PRIVATE KEY')


def _ec_public_to_pem(jwk: Mapping[str, Any]) -> str:
    curve = curves.ec_curve(jwk['crv'])
    value = {
        'algorithm': {
            'algorithm': curves.EC_PUBLIC_KEY_OID,
            'parameters': curve.der,
        },
        'publicKey': _ec_point(jwk, curve),
    }
    return asn1.encode(value, asn1.get('PublicKeyInfo'), 'pem', label='PUBLIC KEY')


def _okp_private_to_pem(jwk: Mapping[str, Any]) -> str:
    curve = curves.okp_curve(jwk['crv'])
    d = b64.decode_b64jose(jwk['d'], size=curve.size)
    value = {
        'version': 0,
        'algorithm': {'algorithm': curve.oid},
        'privateKey': asn1.encode(d, asn1.get('CurvePrivateKey')),
    }
    return asn1.encode(value, asn1.get('OneAsymmetricKey'), 'pem', label='PRIVATE KEY')


def _okp_public_to_pem(jwk: Mapping[str, Any]) -> str:
    curve = curves.okp_curve(jwk['crv'])
    value = {
        'algorithm': {'algorithm': curve.oid},
        'publicKey': b64.decode_b64jose(_member(jwk, 'x'), size=curve.size),
    }
    return asn1.encode(value, asn1.get('PublicKeyInfo'), 'pem', label='PUBLIC KEY')


_PEM_ENCODERS: Dict[Tuple[str, bool], Callable[[Mapping[str, Any]], str]] = {
    ('RSA', True): _rsa_private_to_pem,
    ('RSA', False): _rsa_public_to_pem,
    ('EC', True): _ec_private_to_pem,
    ('EC', False): _ec_public_to_pem,
    ('OKP', True): _okp_private_to_pem,
    ('OKP', False): _okp_public_to_pem,
}


def jwk_to_pem(jwk: Mapping[str, Any]) -> str:
    """Convert asymmetric JWK to PEM.

    Private JWKs (those with a ``d`` member) become ``RSA PRIVATE KEY``,
    ``EC PRIVATE KEY`` or PKCS #8 ``PRIVATE KEY`` blocks, public ones
    ``RSA PUBLIC KEY`` or ``PUBLIC KEY`` blocks.

    :param dict jwk: JWK members.
    :rtype: str

    :raises .NotSupportedError: for unsupported key types and curves, and
        for multi-prime RSA keys
    :raises .ImportFailedError: for partial RSA CRT parameters
    :raises .FormatError: for missing or malformed members

    """
    kty = jwk.get('kty')
    if kty == 'EC':
        curves.ec_curve(jwk.get('crv'))
    elif kty == 'OKP':
        curves.okp_curve(jwk.get('crv'))
    elif kty != 'RSA':
        raise errors.NotSupportedError(f'unsupported key type: {kty}')

    return _PEM_ENCODERS[(kty, bool(jwk.get('d')))](jwk)


def jwk_to_key(jwk: Mapping[str, Any]) -> Any:
    """Import asymmetric JWK as native key.

    :raises .ImportFailedError: if the primitive library rejects the key
        material

    """
    pem = jwk_to_pem(jwk).encode('ascii')
    try:
        if jwk.get('d'):
            return serialization.load_pem_private_key(pem, password=None)
        return serialization.load_pem_public_key(pem)
    except (ValueError, TypeError, cryptography.exceptions.UnsupportedAlgorithm) as error:
        logger.debug(error, exc_info=True)
        raise errors.ImportFailedError(f'invalid {jwk["kty"]} key material') from error
