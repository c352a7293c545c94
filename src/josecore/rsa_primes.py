"""RSA prime recovery.

Private RSA JWKs may carry only ``n``, ``e`` and ``d``. The CRT
parameters are recovered by factoring ``n`` with the usual probabilistic
method (see NIST SP 800-56B, Appendix C): ``d * e - 1`` is a multiple of
the group order, so for a base ``g`` the sequence ``g^r, g^2r, ...``
(with ``d * e - 1 = 2^s * r``, ``r`` odd) ends in ``1 mod n`` and the
element before it is very likely a nontrivial square root of one, which
shares exactly one prime with ``n``.

"""
import logging
import math
from typing import Dict
from typing import Tuple

from cryptography.hazmat.primitives.asymmetric import rsa

from josecore import b64
from josecore import errors

logger = logging.getLogger(__name__)

#: Number of bases tried before giving up.
MAX_ATTEMPTS = 100


def recover_prime_factors(n: int, e: int, d: int) -> Tuple[int, int]:
    """Factor RSA modulus.

    :returns: ``(p, q)`` with ``p > q`` and ``p * q == n``.

    :raises .Error: if no factor was found after `MAX_ATTEMPTS` bases,
        which does not happen for validly generated keys

    """
    t = d * e - 1
    if t <= 0 or t % 2:
        raise errors.Error('d * e - 1 must be a positive even number')
    s = (t & -t).bit_length() - 1
    r = t >> s

    # Deterministic bases 2, 3, 4, ...; most keys factor on the
    # first one.
    for g in range(2, 2 + MAX_ATTEMPTS):
        y = pow(g, r, n)
        if y in (1, n - 1):
            continue
        for _ in range(s):
            x = pow(y, 2, n)
            if x == 1:
                p = math.gcd(y - 1, n)
                if 1 < p < n:
                    q = n // p
                    return (p, q) if p > q else (q, p)
                break
            if x == n - 1:
                break
            y = x
    raise errors.Error('unable to compute prime factors of the RSA modulus')


def compute_primes(jwk: Dict[str, str]) -> Dict[str, str]:
    """Extend private RSA JWK with the CRT parameters.

    :param dict jwk: JWK with ``n``, ``e`` and ``d``.

    :returns: Copy of ``jwk`` with ``p``, ``q``, ``dp``, ``dq`` and
        ``qi`` added.
    :rtype: dict

    """
    n, e, d = (b64.decode_uint(jwk[name]) for name in ('n', 'e', 'd'))
    p, q = recover_prime_factors(n, e, d)
    logger.debug('Recovered RSA CRT parameters for a %d-bit modulus', n.bit_length())
    params = {
        'p': p,
        'q': q,
        'dp': rsa.rsa_crt_dmp1(d, p),
        'dq': rsa.rsa_crt_dmq1(d, q),
        'qi': rsa.rsa_crt_iqmp(p, q),
    }
    return dict(jwk, **{name: b64.encode_uint(value) for name, value in params.items()})
