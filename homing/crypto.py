"""
Password-based AES-256-GCM for evidence payloads.

The key is SHA-256 of the password.  Ciphertexts are self-describing:

    [ 12 bytes: nonce ][ N bytes: ciphertext ][ 16 bytes: GCM tag ]
"""

import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .config import NONCE_SIZE
from .errors import DecryptionError


def _cipher(password: str | bytes) -> AESGCM:
    if isinstance(password, str):
        password = password.encode("utf-8")
    return AESGCM(hashlib.sha256(password).digest())


def encrypt(password: str | bytes, data: bytes) -> bytes:
    """Encrypt *data*; a fresh random nonce is prepended to the result."""
    nonce = os.urandom(NONCE_SIZE)
    return nonce + _cipher(password).encrypt(nonce, data, None)


def decrypt(password: str | bytes, data: bytes) -> bytes:
    """
    Reverse encrypt().

    Raises DecryptionError for a wrong password, tampered or truncated data;
    corrupted plaintext is never returned.
    """
    if len(data) < NONCE_SIZE:
        raise DecryptionError(f"ciphertext too short: {len(data)} bytes")
    nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        return _cipher(password).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise DecryptionError("authentication failed", e)
