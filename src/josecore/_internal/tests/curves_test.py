"""Tests for josecore.curves."""
import sys
import unittest

import pytest

from josecore import errors


class CurveTableTest(unittest.TestCase):
    """Tests for the curve lookups."""

    def test_ec_curve(self):
        from cryptography.hazmat.primitives.asymmetric import ec
        from josecore import curves
        assert curves.ec_curve('P-256').size == 32
        assert curves.ec_curve('P-384').size == 48
        assert curves.ec_curve('P-521').size == 66
        assert curves.ec_curve('P-521').ec_curve is ec.SECP521R1

    def test_ec_curve_unsupported(self):
        from josecore import curves
        for name in ('P-192', 'secp256k1', 'Ed25519', None):
            with pytest.raises(errors.NotSupportedError):
                curves.ec_curve(name)

    def test_okp_curve(self):
        from josecore import curves
        assert curves.okp_curve('Ed25519').size == 32
        assert curves.okp_curve('Ed448').size == 57
        assert curves.okp_curve('X25519').size == 32
        assert curves.okp_curve('X448').size == 56

    def test_okp_curve_unsupported(self):
        from josecore import curves
        with pytest.raises(errors.NotSupportedError):
            curves.okp_curve('P-256')

    def test_ec_curve_from_der(self):
        from josecore import curves
        assert curves.ec_curve_from_der(bytes.fromhex('06082a8648ce3d030107')) is curves.P256
        # secp256k1
        with pytest.raises(errors.FormatError):
            curves.ec_curve_from_der(bytes.fromhex('06052b8104000a'))

    def test_okp_curve_from_oid(self):
        from josecore import curves
        assert curves.okp_curve_from_oid('1.3.101.113') is curves.ED448
        with pytest.raises(errors.FormatError):
            curves.okp_curve_from_oid('1.2.840.10045.2.1')

    def test_der_matches_oid(self):
        from pyasn1.codec.der import encoder
        from pyasn1.type import univ
        from josecore import curves
        for curve in list(curves.EC_CURVES.values()) + list(curves.OKP_CURVES.values()):
            assert encoder.encode(univ.ObjectIdentifier(curve.oid)) == curve.der


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
