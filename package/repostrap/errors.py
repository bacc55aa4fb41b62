"""
Repostrap error types.

Every error here is fatal to a bootstrap run. Library exceptions are
wrapped into one of these so the CLI only has to catch BootstrapError.
"""


class BootstrapError(RuntimeError):
    """Base class for all repostrap failures."""


class ConfigurationError(BootstrapError):
    """Missing or malformed input (token, names, flags)."""


class TransportError(BootstrapError):
    """The HTTP request never produced a response (network, timeout)."""


class DecodingError(BootstrapError):
    """A response body or key material could not be decoded."""


class RemoteRejection(BootstrapError):
    """The API answered with a status code we do not accept."""

    def __init__(self, status_code: int, message: str = "", url: str = ""):
        self.status_code = status_code
        self.message = message
        self.url = url
        detail = f"HTTP {status_code}"
        if url:
            detail += f" from {url}"
        if message:
            detail += f": {message}"
        super().__init__(detail)


class CryptoError(BootstrapError):
    """Key generation or sealing failed."""


class InvalidKeyLength(CryptoError):
    """Recipient public key is not exactly 32 bytes."""

    def __init__(self, length: int):
        self.length = length
        super().__init__(f"wrong length of public key: expected 32 bytes, got {length}")
