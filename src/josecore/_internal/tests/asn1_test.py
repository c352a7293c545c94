"""Tests for josecore.asn1."""
import sys
import unittest

import pytest

from josecore import errors
from josecore._internal.tests import test_util


class GetTest(unittest.TestCase):
    """Tests for josecore.asn1.get."""

    def test_known(self):
        from josecore import asn1
        assert asn1.get('RSAPublicKey') is asn1.RSAPublicKey
        assert asn1.get('OneAsymmetricKey') is asn1.OneAsymmetricKey

    def test_unknown(self):
        from josecore import asn1
        with pytest.raises(AssertionError):
            asn1.get('Certificate')


class RSAPublicKeyTest(unittest.TestCase):
    """Tests for RSAPublicKey encoding."""

    # SEQUENCE { INTEGER 3233, INTEGER 17 }
    DER = bytes.fromhex('300702020ca1020111')

    def setUp(self):
        from josecore import asn1
        self.schema = asn1.get('RSAPublicKey')

    def test_encode(self):
        from josecore import asn1
        assert asn1.encode({'n': 3233, 'e': 17}, self.schema) == self.DER

    def test_decode(self):
        from josecore import asn1
        assert asn1.decode(self.DER, self.schema) == {'n': 3233, 'e': 17}

    def test_decode_trailing_bytes(self):
        from josecore import asn1
        with pytest.raises(errors.FormatError):
            asn1.decode(self.DER + b'\x00', self.schema)

    def test_decode_truncated(self):
        from josecore import asn1
        with pytest.raises(errors.FormatError):
            asn1.decode(self.DER[:-1], self.schema)

    def test_decode_garbage(self):
        from josecore import asn1
        with pytest.raises(errors.FormatError):
            asn1.decode(b'\x04\x01\x00', self.schema)

    def test_encode_unknown_component(self):
        from josecore import asn1
        with pytest.raises(errors.FormatError):
            asn1.encode({'n': 3233, 'e': 17, 'd': 2753}, self.schema)

    def test_encode_wrong_type(self):
        from josecore import asn1
        with pytest.raises(errors.FormatError):
            asn1.encode({'n': 'foo', 'e': 17}, self.schema)

    def test_encode_pem(self):
        from josecore import asn1
        pem = asn1.encode({'n': 3233, 'e': 17}, self.schema, 'pem', label='RSA PUBLIC KEY')
        assert pem == ('-----BEGIN RSA PUBLIC KEY-----\n'
                       'MAcCAgyhAgER\n'
                       '-----END RSA PUBLIC KEY-----\n')
        assert asn1.decode(pem, self.schema) == {'n': 3233, 'e': 17}

    def test_encode_pem_requires_label(self):
        from josecore import asn1
        with pytest.raises(AssertionError):
            asn1.encode({'n': 3233, 'e': 17}, self.schema, 'pem')


class PEMTest(unittest.TestCase):
    """Tests for josecore.asn1.format_pem and josecore.asn1.pem_to_der."""

    def test_line_wrapping(self):
        from josecore import asn1
        pem = asn1.format_pem(b'\xff' * 100, 'TEST')
        lines = pem.splitlines()
        assert lines[0] == '-----BEGIN TEST-----'
        assert lines[-1] == '-----END TEST-----'
        assert [len(line) for line in lines[1:-1]] == [64, 64, 8]
        assert pem.endswith('\n')

    def test_roundtrip(self):
        from josecore import asn1
        assert asn1.pem_to_der(asn1.format_pem(b'\x00' * 200, 'TEST')) == b'\x00' * 200

    def test_bytes_input(self):
        from josecore import asn1
        der = asn1.pem_to_der(test_util.load_vector('ed25519_key.pem'))
        assert der[:2] == b'\x30\x2e'

    def test_no_block(self):
        from josecore import asn1
        with pytest.raises(errors.FormatError):
            asn1.pem_to_der('not a PEM file')

    def test_invalid_body(self):
        from josecore import asn1
        with pytest.raises(errors.FormatError):
            asn1.pem_to_der('-----BEGIN TEST-----\nAAA\n-----END TEST-----\n')


class PrivateKeyInfoTest(unittest.TestCase):
    """Tests for decoding PKCS #8 containers produced by OpenSSL."""

    def test_rsa(self):
        from josecore import asn1
        pki = asn1.decode(test_util.load_vector('rsa2048_key.pem'),
                          asn1.get('PrivateKeyInfo'))
        assert pki['version'] == 0
        assert pki['algorithm'] == {
            'algorithm': '1.2.840.113549.1.1.1',
            'parameters': b'\x05\x00',
        }
        private = asn1.decode(pki['privateKey'], asn1.get('RSAPrivateKey'))
        assert private['version'] == asn1.TWO_PRIME
        assert private['p'] * private['q'] == private['n']
        assert 'otherPrimeInfos' not in private

    def test_pem_bytes_str_and_der_agree(self):
        from josecore import asn1
        pem = test_util.load_vector('ec_p384_key.pem')
        assert isinstance(pem, bytes)
        schema = asn1.get('PrivateKeyInfo')
        expected = asn1.decode(asn1.pem_to_der(pem), schema)
        assert asn1.decode(pem, schema) == expected
        assert asn1.decode(pem.decode('ascii'), schema) == expected
        assert asn1.decode(b'\n' + pem, schema) == expected

    def test_rsa_multi_prime(self):
        from josecore import asn1
        pki = asn1.decode(test_util.load_vector('rsa2048_3prime_key.pem'),
                          asn1.get('PrivateKeyInfo'))
        private = asn1.decode(pki['privateKey'], asn1.get('RSAPrivateKey'))
        assert private['version'] == asn1.MULTI_PRIME
        assert len(private['otherPrimeInfos']) == 1
        (other,) = private['otherPrimeInfos']
        assert private['p'] * private['q'] * other['prime'] == private['n']

    def test_ec(self):
        from josecore import asn1
        from josecore import curves
        pki = asn1.decode(test_util.load_vector('ec_p256_key.pem'),
                          asn1.get('PrivateKeyInfo'))
        assert pki['algorithm'] == {
            'algorithm': curves.EC_PUBLIC_KEY_OID,
            'parameters': curves.P256.der,
        }
        private = asn1.decode(pki['privateKey'], asn1.get('ECPrivateKey'))
        assert private['version'] == 1
        assert len(private['privateKey']) == 32
        assert len(private['publicKey']) == 65
        assert private['publicKey'][0] == 0x04

    def test_okp(self):
        from josecore import asn1
        from josecore import curves
        key = asn1.decode(test_util.load_vector('ed448_key.pem'),
                          asn1.get('OneAsymmetricKey'))
        assert key['version'] == 0
        assert key['algorithm'] == {'algorithm': curves.ED448.oid}
        d = asn1.decode(key['privateKey'], asn1.get('CurvePrivateKey'))
        assert len(d) == 57


class ECPrivateKeyTest(unittest.TestCase):
    """Tests for ECPrivateKey, including the tagged CHOICE parameters."""

    def setUp(self):
        from josecore import asn1
        from josecore import curves
        self.schema = asn1.get('ECPrivateKey')
        self.value = {
            'version': 1,
            'privateKey': b'\x01' * 32,
            'parameters': {'type': 'namedCurve', 'value': curves.P256.oid},
            'publicKey': b'\x04' + b'\x02' * 64,
        }

    def test_roundtrip(self):
        from josecore import asn1
        der = asn1.encode(self.value, self.schema)
        assert asn1.decode(der, self.schema) == self.value

    def test_parameters_explicitly_tagged(self):
        from josecore import asn1
        from josecore import curves
        der = asn1.encode(self.value, self.schema)
        assert b'\xa0' + bytes([len(curves.P256.der)]) + curves.P256.der in der

    def test_optional_members_omitted(self):
        from josecore import asn1
        del self.value['parameters']
        del self.value['publicKey']
        der = asn1.encode(self.value, self.schema)
        assert asn1.decode(der, self.schema) == self.value

    def test_choice_alone(self):
        from josecore import asn1
        from josecore import curves
        value = {'type': 'namedCurve', 'value': curves.P384.oid}
        der = asn1.encode(value, asn1.get('ECParameters'))
        assert der == curves.P384.der
        assert asn1.decode(der, asn1.get('ECParameters')) == value


class BitStringTest(unittest.TestCase):
    """Tests for BIT STRING handling."""

    def test_octets(self):
        from josecore import asn1
        value = {'algorithm': {'algorithm': '1.3.101.112'}, 'publicKey': b'\xab' * 32}
        der = asn1.encode(value, asn1.get('PublicKeyInfo'))
        # unused bits octet is zero
        assert der[-33:] == b'\x00' + b'\xab' * 32
        assert asn1.decode(der, asn1.get('PublicKeyInfo')) == value

    def test_unaligned(self):
        from josecore import asn1
        # SEQUENCE { SEQUENCE { OID 1.3.101.112 }, BIT STRING (4 unused bits) }
        der = bytes.fromhex('300b300506032b6570030204f0')
        with pytest.raises(errors.FormatError):
            asn1.decode(der, asn1.get('PublicKeyInfo'))


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
