"""Tests for josecore.rsa_primes."""
import sys
import unittest

import pytest

from josecore import errors
from josecore._internal.tests import test_util


class RecoverPrimeFactorsTest(unittest.TestCase):
    """Tests for josecore.rsa_primes.recover_prime_factors."""

    def setUp(self):
        self.numbers = test_util.load_private_key('rsa2048_key.pem').private_numbers()

    @classmethod
    def _call(cls, n, e, d):
        from josecore.rsa_primes import recover_prime_factors
        return recover_prime_factors(n, e, d)

    def test_recovers_key_primes(self):
        public = self.numbers.public_numbers
        p, q = self._call(public.n, public.e, self.numbers.d)
        assert p * q == public.n
        assert p > q
        assert {p, q} == {self.numbers.p, self.numbers.q}

    def test_toy_key(self):
        # p = 61, q = 53
        assert self._call(3233, 17, 2753) == (61, 53)

    def test_odd_exponent_product(self):
        with pytest.raises(errors.Error):
            self._call(3233, 17, 2754)

    def test_no_factor_found(self):
        # 3233 is 61 * 53, but 16 is not a multiple of the group order.
        with pytest.raises(errors.Error):
            self._call(3233, 17, 1)


class ComputePrimesTest(unittest.TestCase):
    """Tests for josecore.rsa_primes.compute_primes."""

    def test_crt_parameters(self):
        from josecore import b64
        from josecore.rsa_primes import compute_primes
        numbers = test_util.load_private_key('rsa2048_key.pem').private_numbers()
        n, e, d = numbers.public_numbers.n, numbers.public_numbers.e, numbers.d
        jwk = {
            'kty': 'RSA',
            'n': b64.encode_uint(n),
            'e': b64.encode_uint(e),
            'd': b64.encode_uint(d),
        }

        full = compute_primes(jwk)

        assert 'p' not in jwk
        assert {k: full[k] for k in jwk} == jwk
        p, q, dp, dq, qi = (b64.decode_uint(full[name])
                            for name in ('p', 'q', 'dp', 'dq', 'qi'))
        assert p * q == n
        assert dp == d % (p - 1)
        assert dq == d % (q - 1)
        assert (q * qi) % p == 1


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
