"""
REPOSTRAP - One-shot GitHub repository bootstrap.

Creates a private repository and its public twin, generates an SSH
deploy key, registers it on the private repository and stores the
private half as a sealed Actions secret.
"""

__version__ = "0.1.0"

from .errors import (
    BootstrapError,
    ConfigurationError,
    TransportError,
    DecodingError,
    RemoteRejection,
    CryptoError,
    InvalidKeyLength,
)
from .config import Config
from .sshkeys import KeyPair, generate_keypair
from .sealing import seal_secret
from .api import GitHubAPI, verify_token
from .pipeline import (
    ProvisioningPipeline,
    ProvisioningReport,
    derive_public_name,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "BootstrapError",
    "ConfigurationError",
    "TransportError",
    "DecodingError",
    "RemoteRejection",
    "CryptoError",
    "InvalidKeyLength",
    # Config
    "Config",
    # Crypto
    "KeyPair",
    "generate_keypair",
    "seal_secret",
    # API
    "GitHubAPI",
    "verify_token",
    # Pipeline
    "ProvisioningPipeline",
    "ProvisioningReport",
    "derive_public_name",
]
