"""ASN.1 schema registry.

DER structures needed to move RSA, EC and OKP keys between native key
handles and JWK, declared with `pyasn1`_ and exposed through a small
name-based registry::

  >>> schema = get('RSAPublicKey')
  >>> der = encode({'n': 3233, 'e': 17}, schema)
  >>> decode(der, schema)
  {'n': 3233, 'e': 17}

Value trees are plain Python values: ``SEQUENCE`` is a `dict` of the
components that are present, ``CHOICE`` is ``{'type': name, 'value':
value}``, ``INTEGER`` is `int`, ``OCTET STRING``, ``BIT STRING`` and
``ANY`` are `bytes`, ``OBJECT IDENTIFIER`` is the dotted `str`,
``SEQUENCE OF`` is a `list`.

.. _pyasn1: https://pyasn1.readthedocs.io/

"""
import base64
import binascii
import re
from typing import Any
from typing import Dict
from typing import Type
from typing import Union

from pyasn1 import error as pyasn1_error
from pyasn1.codec.der import decoder as der_decoder
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import base
from pyasn1.type import namedtype
from pyasn1.type import namedval
from pyasn1.type import tag
from pyasn1.type import univ

from josecore import errors

_PEM_RE = re.compile(
    r'-----BEGIN (?P<label>[A-Z0-9 ]+)-----\s*(?P<body>[A-Za-z0-9+/=\s]*?)\s*'
    r'-----END (?P=label)-----')

#: RSAPrivateKey.version
TWO_PRIME = 0
MULTI_PRIME = 1


class AlgorithmIdentifier(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('algorithm', univ.ObjectIdentifier()),
        namedtype.OptionalNamedType('parameters', univ.Any()),
    )


class PrivateKeyInfo(univ.Sequence):
    """PKCS #8 ``PrivateKeyInfo`` (RFC 5208)."""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('version', univ.Integer()),
        namedtype.NamedType('algorithm', AlgorithmIdentifier()),
        namedtype.NamedType('privateKey', univ.OctetString()),
    )


class PublicKeyInfo(univ.Sequence):
    """X.509 ``SubjectPublicKeyInfo`` (RFC 5280)."""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('algorithm', AlgorithmIdentifier()),
        namedtype.NamedType('publicKey', univ.BitString()),
    )


class OtherPrimeInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('prime', univ.Integer()),
        namedtype.NamedType('exponent', univ.Integer()),
        namedtype.NamedType('coefficient', univ.Integer()),
    )


class OtherPrimeInfos(univ.SequenceOf):
    componentType = OtherPrimeInfo()


class RSAPrivateKey(univ.Sequence):
    """PKCS #1 ``RSAPrivateKey`` (RFC 8017).

    ``otherPrimeInfos`` is only ever decoded, so that multi-prime keys
    can be recognized and rejected.

    """
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('version', univ.Integer(namedValues=namedval.NamedValues(
            ('two-prime', TWO_PRIME), ('multi', MULTI_PRIME)))),
        namedtype.NamedType('n', univ.Integer()),
        namedtype.NamedType('e', univ.Integer()),
        namedtype.NamedType('d', univ.Integer()),
        namedtype.NamedType('p', univ.Integer()),
        namedtype.NamedType('q', univ.Integer()),
        namedtype.NamedType('dp', univ.Integer()),
        namedtype.NamedType('dq', univ.Integer()),
        namedtype.NamedType('qi', univ.Integer()),
        namedtype.OptionalNamedType('otherPrimeInfos', OtherPrimeInfos()),
    )


class RSAPublicKey(univ.Sequence):
    """PKCS #1 ``RSAPublicKey`` (RFC 8017)."""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('n', univ.Integer()),
        namedtype.NamedType('e', univ.Integer()),
    )


class ECParameters(univ.Choice):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('namedCurve', univ.ObjectIdentifier()),
    )


class ECPrivateKey(univ.Sequence):
    """SEC 1 ``ECPrivateKey`` (RFC 5915)."""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('version', univ.Integer(namedValues=namedval.NamedValues(
            ('ecPrivkeyVer1', 1)))),
        namedtype.NamedType('privateKey', univ.OctetString()),
        namedtype.OptionalNamedType('parameters', ECParameters().subtype(
            explicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 0))),
        namedtype.OptionalNamedType('publicKey', univ.BitString().subtype(
            explicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 1))),
    )


class CurvePrivateKey(univ.OctetString):
    """Raw OKP private key, wrapped in ``OneAsymmetricKey.privateKey``."""


class OneAsymmetricKey(univ.Sequence):
    """``OneAsymmetricKey`` (RFC 5958) as used for OKP keys (RFC 8410)."""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('version', univ.Integer()),
        namedtype.NamedType('algorithm', AlgorithmIdentifier()),
        namedtype.NamedType('privateKey', univ.OctetString()),
        namedtype.OptionalNamedType('publicKey', univ.BitString().subtype(
            implicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 1))),
    )


SCHEMAS: Dict[str, Type[base.Asn1Item]] = {
    schema.__name__: schema for schema in (
        AlgorithmIdentifier,
        PrivateKeyInfo,
        PublicKeyInfo,
        RSAPrivateKey,
        RSAPublicKey,
        ECParameters,
        ECPrivateKey,
        CurvePrivateKey,
        OneAsymmetricKey,
    )
}


def get(name: str) -> Type[base.Asn1Item]:
    """Get schema by structure name.

    The table is fixed; asking for anything else is a programming error.

    """
    assert name in SCHEMAS, f'unknown ASN.1 structure: {name}'
    return SCHEMAS[name]


def format_pem(der: bytes, label: str) -> str:
    """Wrap DER in PEM armor.

    :param bytes der: DER encoded structure.
    :param str label: Armor label, e.g. ``'RSA PRIVATE KEY'``.

    :returns: ``-----BEGIN {label}-----`` block with the base64 body
        wrapped at 64 characters per line.
    :rtype: str

    """
    body = base64.b64encode(der).decode('ascii')
    lines = [body[i:i + 64] for i in range(0, len(body), 64)]
    return '-----BEGIN {0}-----\n{1}\n-----END {0}-----\n'.format(label, '\n'.join(lines))


def pem_to_der(pem: Union[str, bytes]) -> bytes:
    """Strip PEM armor and decode the body.

    :raises .FormatError: if ``pem`` holds no PEM block

    """
    if isinstance(pem, bytes):
        pem = pem.decode('ascii', errors='replace')
    match = _PEM_RE.search(pem)
    if match is None:
        raise errors.FormatError('no PEM block found')
    try:
        return base64.b64decode(''.join(match.group('body').split()), validate=True)
    except binascii.Error as error:
        raise errors.FormatError(f'invalid PEM body: {error}') from error


def encode(value: Any, schema: Type[base.Asn1Item], form: str = 'der',
           label: str = '') -> Union[bytes, str]:
    """Encode value tree.

    :param value: Value tree matching ``schema``.
    :param schema: Schema class from `SCHEMAS`.
    :param str form: ``'der'`` for DER `bytes`, ``'pem'`` for PEM `str`.
    :param str label: PEM armor label, required with ``form='pem'``.

    :raises .FormatError: if ``value`` does not fit ``schema``

    """
    try:
        der = der_encoder.encode(_from_python(schema(), value))
    except (pyasn1_error.PyAsn1Error, KeyError, TypeError, ValueError) as error:
        raise errors.FormatError(
            f'cannot encode {schema.__name__}: {error}') from error
    if form == 'der':
        return der
    assert form == 'pem' and label, 'PEM output requires a label'
    return format_pem(der, label)


def decode(data: Union[bytes, str], schema: Type[base.Asn1Item]) -> Any:
    """Decode DER (or PEM) into a value tree.

    :raises .FormatError: on structurally invalid or truncated input, or
        trailing bytes after the outermost structure

    """
    if isinstance(data, str) or data.lstrip().startswith(b'-----BEGIN'):
        data = pem_to_der(data)
    try:
        asn1_value, rest = der_decoder.decode(data, asn1Spec=schema())
    except pyasn1_error.PyAsn1Error as error:
        raise errors.FormatError(
            f'invalid {schema.__name__} structure: {error}') from error
    if rest:
        raise errors.FormatError(
            f'{len(rest)} trailing bytes after {schema.__name__}')
    return _to_python(asn1_value)


def _to_python(asn1_value: base.Asn1Item) -> Any:
    if isinstance(asn1_value, univ.Choice):
        return {'type': asn1_value.getName(),
                'value': _to_python(asn1_value.getComponent())}
    if isinstance(asn1_value, univ.SequenceOf):
        return [_to_python(item) for item in asn1_value]
    if isinstance(asn1_value, univ.Sequence):
        tree = {}
        for named_type in asn1_value.componentType.namedTypes:
            component = asn1_value.getComponentByName(
                named_type.name, instantiate=False)
            if component is base.noValue or not component.isValue:
                continue
            tree[named_type.name] = _to_python(component)
        return tree
    if isinstance(asn1_value, univ.BitString):
        if len(asn1_value) % 8:
            raise errors.FormatError('BIT STRING is not octet aligned')
        return asn1_value.asOctets()
    if isinstance(asn1_value, univ.OctetString):
        return asn1_value.asOctets()
    if isinstance(asn1_value, univ.ObjectIdentifier):
        return str(asn1_value)
    if isinstance(asn1_value, univ.Integer):
        return int(asn1_value)
    if isinstance(asn1_value, univ.Null):
        return None
    raise errors.FormatError(f'unexpected ASN.1 type: {asn1_value.__class__.__name__}')


def _from_python(spec: base.Asn1Item, value: Any) -> base.Asn1Item:
    if isinstance(spec, univ.Choice):
        asn1_value = spec.clone()
        name = value['type']
        asn1_value.setComponentByName(
            name, _from_python(spec.componentType[name].asn1Object, value['value']))
        return asn1_value
    if isinstance(spec, univ.SequenceOf):
        asn1_value = spec.clone()
        for position, item in enumerate(value):
            asn1_value.setComponentByPosition(
                position, _from_python(spec.componentType, item))
        return asn1_value
    if isinstance(spec, univ.Sequence):
        unknown = set(value) - set(spec.componentType.keys())
        if unknown:
            raise KeyError(f'unknown components: {sorted(unknown)}')
        asn1_value = spec.clone()
        for named_type in spec.componentType.namedTypes:
            if named_type.name in value:
                asn1_value.setComponentByName(
                    named_type.name,
                    _from_python(named_type.asn1Object, value[named_type.name]))
        return asn1_value
    if isinstance(spec, univ.BitString):
        return spec.clone(hexValue=value.hex())
    return spec.clone(value)
