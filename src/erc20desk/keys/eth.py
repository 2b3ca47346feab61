"""
ECDSA / secp256k1 signing identities.

A signing identity is a private key plus the checksummed address derived
from it. Keys are never written anywhere by this module; callers hold them
only as long as a transfer needs them.

Dependencies: eth-account (lightweight, no full web3.py needed)
"""

from __future__ import annotations

import secrets

from eth_account import Account
from eth_account.signers.local import LocalAccount


def normalize_private_key(private_key: str) -> str:
    """Strip whitespace and ensure the 0x prefix."""
    private_key = (private_key or "").strip()
    if private_key and not private_key.startswith(("0x", "0X")):
        private_key = "0x" + private_key
    return private_key


def generate_eoa() -> tuple[str, str]:
    """
    Generate a new ECDSA/secp256k1 keypair (EOA).

    Returns:
        Tuple of (private_key_hex, address)
        - private_key_hex: 0x-prefixed hex private key (66 chars)
        - address: 0x-prefixed checksummed Ethereum address (42 chars)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def get_account(private_key: str) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Args:
        private_key: hex private key, with or without 0x prefix

    Raises:
        ValueError: If the key is empty or not a valid secp256k1 key
    """
    private_key = normalize_private_key(private_key)
    if not private_key:
        raise ValueError("Private key is empty.")
    return Account.from_key(private_key)


def get_address(private_key: str) -> str:
    """Checksummed address controlled by ``private_key``."""
    return get_account(private_key).address
