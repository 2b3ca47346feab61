"""
Chain errors - failures raised by the JSON-RPC client adapter.

Each class carries an ``exit_code`` so CLI commands can exit with a
distinct status per failure kind.
"""

from __future__ import annotations

from typing import Any


class ChainError(RuntimeError):
    exit_code: int = 1


class InvalidEndpoint(ChainError):
    """The RPC endpoint URL cannot be used to build a client."""

    exit_code = 2


class QueryError(ChainError):
    """A read-only call (balance, gas price, nonce) failed."""

    exit_code = 3


class SigningError(ChainError):
    """The private key or the transaction payload is malformed."""

    exit_code = 4


class BroadcastError(ChainError):
    """The network rejected the signed transaction, or it reverted."""

    exit_code = 5


class ReceiptTimeout(BroadcastError):
    exit_code = 6


class RpcError(ChainError):
    """JSON-RPC transport failure or an ``error`` member in the response."""

    @classmethod
    def from_response(cls, error: Any) -> "RpcError":
        if isinstance(error, dict):
            return cls(f"RPC error: {error.get('message', error)}")
        return cls(f"RPC error: {error}")
