"""Tests for josecore.registry."""
import sys
import unittest
from unittest import mock

import pytest

import josecore
from josecore import errors
from josecore._internal.tests import test_util


class RegisterTest(unittest.TestCase):
    """Tests for josecore.registry.register_signature/register_encryption."""

    def setUp(self):
        from josecore import registry
        self.tables = (registry.SIGN, registry.VERIFY, registry.ENCRYPT, registry.DECRYPT)
        self.snapshot = [dict(table) for table in self.tables]

    def tearDown(self):
        for table, saved in zip(self.tables, self.snapshot):
            table.clear()
            table.update(saved)

    def test_populated_on_import(self):
        from josecore import registry
        assert josecore.ES256.name in registry.SIGN
        assert set(registry.SIGN) == set(registry.VERIFY)
        assert set(registry.ENCRYPT) == {'A128CBC-HS256', 'A192CBC-HS384', 'A256CBC-HS512'}
        assert set(registry.DECRYPT) == set(registry.ENCRYPT)

    def test_register_signature(self):
        from josecore import registry
        sign, verify = mock.MagicMock(), mock.MagicMock()
        registry.register_signature('XS1', sign, verify)
        assert registry.SIGN['XS1'] is sign
        assert registry.VERIFY['XS1'] is verify

    def test_register_signature_twice(self):
        from josecore import registry
        registry.register_signature('XS1', mock.MagicMock(), mock.MagicMock())
        with pytest.raises(AssertionError):
            registry.register_signature('XS1', mock.MagicMock(), mock.MagicMock())

    def test_register_builtin_twice(self):
        from josecore import registry
        with pytest.raises(AssertionError):
            registry.register_signature('ES256', mock.MagicMock(), mock.MagicMock())
        with pytest.raises(AssertionError):
            registry.register_encryption('A128CBC-HS256', mock.MagicMock(), mock.MagicMock())


class DispatchTest(unittest.TestCase):
    """Tests for the josecore.registry dispatch helpers."""

    def test_unknown_algorithm(self):
        from josecore import registry
        with pytest.raises(errors.NotSupportedError):
            registry.sign('ES256K', None, b'foo')
        with pytest.raises(errors.NotSupportedError):
            registry.verify('none', None, b'foo', b'')
        with pytest.raises(errors.NotSupportedError):
            registry.encrypt('A128GCM', b'', b'foo', b'')
        with pytest.raises(errors.NotSupportedError):
            registry.decrypt('A128GCM', b'', b'foo', b'', b'')

    def test_sign_and_verify(self):
        from josecore import registry
        key = test_util.load_private_key('ec_p256_key.pem')
        sig = registry.sign('ES256', key, b'foo')
        assert len(sig) == 64
        assert registry.verify('ES256', key.public_key(), b'foo', sig) is True
        assert registry.verify('ES256', key.public_key(), b'bar', sig) is False

    def test_encrypt_and_decrypt(self):
        from josecore import registry
        key = b'\x01' * 48
        iv = b'\x02' * 16
        ciphertext, tag = registry.encrypt('A192CBC-HS384', key, b'foo', iv, b'aad')
        assert len(tag) == 24
        assert registry.decrypt('A192CBC-HS384', key, ciphertext, iv, tag, b'aad') == b'foo'
        with pytest.raises(errors.DecryptionFailedError):
            registry.decrypt('A192CBC-HS384', key, ciphertext, iv, tag)


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
