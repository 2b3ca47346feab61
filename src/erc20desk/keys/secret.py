"""
Credential encryption helper.

Encrypts short strings (passwords, API keys) under a caller-supplied
secret. There is no process-wide default secret: every call must pass one.

Token layout (base64url, no padding): ``salt(16) | nonce(12) | ciphertext``.
The key is derived with Argon2id from the secret and the salt; the payload
is sealed with AES-256-GCM.
"""

from __future__ import annotations

import binascii
import os
from dataclasses import dataclass
from typing import Optional

from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..utils import base64url_decode, base64url_encode

SALT_SIZE = 16
NONCE_SIZE = 12


class CryptoError(ValueError):
    pass


@dataclass(frozen=True)
class Argon2Params:
    mem_kib: int = 65536
    iterations: int = 3
    parallelism: int = 1
    hash_len: int = 32


def derive_key(secret: str, salt: bytes, params: Optional[Argon2Params] = None) -> bytes:
    params = params or Argon2Params()
    if not secret:
        raise CryptoError("A secret is required; none was supplied.")
    if len(salt) < SALT_SIZE:
        raise CryptoError(f"Salt must be at least {SALT_SIZE} bytes.")
    if params.hash_len != 32:
        raise CryptoError("Argon2id hash_len must be 32 bytes for AES-256.")
    return hash_secret_raw(
        secret=secret.encode("utf-8"),
        salt=salt,
        time_cost=params.iterations,
        memory_cost=params.mem_kib,
        parallelism=params.parallelism,
        hash_len=params.hash_len,
        type=Type.ID,
    )


def encrypt_password(password: str, secret: str, params: Optional[Argon2Params] = None) -> str:
    """
    Encrypt ``password`` under ``secret``.

    Args:
        password: Plaintext to protect
        secret: Encryption secret (required, non-empty)
        params: Argon2id cost parameters; decryption must use the same ones

    Returns:
        base64url token
    """
    salt = os.urandom(SALT_SIZE)
    key = derive_key(secret, salt, params)
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = AESGCM(key).encrypt(nonce, password.encode("utf-8"), None)
    return base64url_encode(salt + nonce + ciphertext)


def decrypt_password(token: str, secret: str, params: Optional[Argon2Params] = None) -> str:
    """
    Decrypt a token produced by ``encrypt_password``.

    Raises:
        CryptoError: Wrong secret, corrupted or truncated token
    """
    try:
        blob = base64url_decode(token.strip())
    except (binascii.Error, ValueError) as exc:
        raise CryptoError("Token is not valid base64url.") from exc

    # GCM tag is 16 bytes; anything shorter cannot be a token
    if len(blob) < SALT_SIZE + NONCE_SIZE + 16:
        raise CryptoError("Token is too short.")

    salt = blob[:SALT_SIZE]
    nonce = blob[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
    ciphertext = blob[SALT_SIZE + NONCE_SIZE:]
    key = derive_key(secret, salt, params)
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as exc:
        raise CryptoError("Decryption failed: wrong secret or corrupted token") from exc
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CryptoError("Decrypted payload is not UTF-8 text.") from exc
