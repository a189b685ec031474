"""RSA password encryption for the vendor's secure sign-in."""

import base64
import binascii

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .exceptions import EncryptionError


def load_public_key(public_key: str) -> rsa.RSAPublicKey:
    """
    Load the vendor public key.

    Accepts a PEM block or the bare base64 body of an X.509
    SubjectPublicKeyInfo (line breaks and indentation are ignored).

    Raises:
        EncryptionError: If the key is empty, malformed, or not RSA
    """
    if not public_key or not public_key.strip():
        raise EncryptionError("Public key must not be empty")

    try:
        if "-----BEGIN" in public_key:
            key = serialization.load_pem_public_key(public_key.strip().encode("ascii"))
        else:
            der = base64.b64decode("".join(public_key.split()), validate=True)
            key = serialization.load_der_public_key(der)
    except (ValueError, TypeError, binascii.Error, UnsupportedAlgorithm) as e:
        raise EncryptionError(f"Invalid public key: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise EncryptionError(f"Unsupported public key type: {type(key).__name__}")

    return key


def encrypt_password(password: str, public_key: str) -> str:
    """
    Encrypt a password with RSA PKCS#1 v1.5 padding.

    Args:
        password: Plaintext password
        public_key: Vendor public key (see load_public_key)

    Returns:
        Base64-encoded ciphertext, no line wrapping

    Raises:
        EncryptionError: If the key cannot be used or encryption fails
    """
    key = load_public_key(public_key)

    try:
        ciphertext = key.encrypt(password.encode("utf-8"), padding.PKCS1v15())
    except ValueError as e:
        # Raised when the message is too long for the key size
        raise EncryptionError(f"Failed to encrypt password: {e}") from e

    return base64.b64encode(ciphertext).decode("ascii")
