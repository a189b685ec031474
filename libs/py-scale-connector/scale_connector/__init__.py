"""Scale Connector - Renpho body-composition cloud client."""

from .client import RenphoClient
from .crypto import encrypt_password
from .exceptions import (
    AuthError,
    ConnectorError,
    EncryptionError,
    FetchError,
    VendorAPIError,
)
from .normalize import normalize_measurements
from .vendor_types import (
    AuthStrategy,
    Credential,
    Measurement,
    Session,
    VendorConfig,
    VendorType,
)

__version__ = "0.1.0"

__all__ = [
    "RenphoClient",
    "ConnectorError",
    "AuthError",
    "FetchError",
    "EncryptionError",
    "VendorAPIError",
    "AuthStrategy",
    "Credential",
    "Measurement",
    "Session",
    "VendorConfig",
    "VendorType",
    "encrypt_password",
    "normalize_measurements",
]
