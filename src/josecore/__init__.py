"""JOSE key material core.

Conversion of RSA, EC and OKP keys between native `cryptography` key
handles, DER/PEM and `JSON Web Key (JWK)`_, plus the algorithm layer of
`JSON Web Algorithms (JWA)`_ that sits right above the primitives: JWS
signatures (including fixed-width ECDSA signatures) and the
AES_CBC_HMAC_SHA2 content encryption.

.. _`JSON Web Key (JWK)`:
  https://datatracker.ietf.org/doc/html/rfc7517

.. _`JSON Web Algorithms (JWA)`:
  https://datatracker.ietf.org/doc/html/rfc7518

"""
from josecore.b64 import (
    b64decode,
    b64encode,
)

from josecore.errors import (
    DecryptionFailedError,
    Error,
    FormatError,
    ImportFailedError,
    NotSupportedError,
)

from josecore.key_util import (
    jwk_to_key,
    jwk_to_pem,
    key_to_jwk,
)

from josecore.jwk import (
    JWK,
    JWKEC,
    JWKOct,
    JWKOKP,
    JWKRSA,
)

# Importing the algorithm modules fills josecore.registry.
from josecore.jwa import (
    EdDSA,
    ES256,
    ES384,
    ES512,
    HS256,
    HS384,
    HS512,
    JWASignature,
    PS256,
    PS384,
    PS512,
    RS256,
    RS384,
    RS512,
)

from josecore.aes_cbc_hmac import (
    A128CBC_HS256,
    A192CBC_HS384,
    A256CBC_HS512,
    AESCBCHMAC,
)

from josecore.ecdsa_sig import (
    der_to_jose,
    jose_to_der,
)
