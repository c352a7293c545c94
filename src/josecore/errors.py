"""JOSE key material errors."""


class Error(Exception):
    """Generic JOSE error."""


class FormatError(Error):
    """Malformed input: invalid DER, bad iv or tag length, unknown curve OID."""


class NotSupportedError(Error):
    """Unsupported key type, curve or key structure."""


class ImportFailedError(Error):
    """JWK could not be imported.

    Raised when a JWK carries an inconsistent set of private key
    parameters.

    """


class DecryptionFailedError(Error):
    """Content decryption failed.

    The message never says *why* decryption failed: a bad authentication
    tag and a bad CBC padding are indistinguishable to the caller.

    """

    def __init__(self) -> None:
        super().__init__('decryption operation failed')
