"""
Transaction Builder - Build, sign, and broadcast ERC-20 transfers.

Uses eth-account for signing and the httpx-based ``ChainClient`` for
sending. Submission is two-stage: ``broadcast`` hands back a
``PendingTransaction`` whose hash is known immediately, and the receipt is
awaited separately with ``PendingTransaction.wait``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_hex

from ..keys.eth import get_account
from .abi import encode_transfer
from .errors import BroadcastError, ChainError, SigningError
from .rpc import ChainClient

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200_000


@dataclass(frozen=True)
class SignedTransfer:
    raw_transaction: str  # 0x-prefixed
    tx_hash: str
    sender: str


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    block_number: Optional[int]
    status: int
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: dict[str, Any]) -> "TransactionReceipt":
        block = receipt.get("blockNumber")
        status = receipt.get("status", "0x0")
        return cls(
            tx_hash=receipt.get("transactionHash", ""),
            block_number=int(block, 16) if isinstance(block, str) else block,
            status=int(status, 16) if isinstance(status, str) else int(status),
            raw=receipt,
        )


@dataclass
class PendingTransaction:
    """A broadcast transaction whose hash is known but not yet mined."""

    tx_hash: str
    client: ChainClient = field(repr=False)

    def wait(self, timeout: float = 120, poll_interval: float = 2.0) -> TransactionReceipt:
        receipt = self.client.wait_for_receipt(
            self.tx_hash, timeout=timeout, poll_interval=poll_interval
        )
        return TransactionReceipt.from_rpc(receipt)


def build_transfer_tx(
    token_contract: str,
    destination: str,
    amount: int,
    nonce: int,
    gas_price: int,
    chain_id: int,
    gas_limit: int = DEFAULT_GAS_LIMIT,
) -> dict:
    """
    Build an unsigned legacy ``transfer(destination, amount)`` transaction.

    Args:
        token_contract: ERC-20 contract address
        destination: Recipient address
        amount: Amount in base units
        nonce: Sender nonce
        gas_price: Gas price in wei
        chain_id: EIP-155 chain id
        gas_limit: Gas limit

    Returns:
        Unsigned transaction dict

    Raises:
        SigningError: If an address is malformed or the amount is negative
    """
    if amount < 0:
        raise SigningError("Transfer amount must not be negative.")
    try:
        data = encode_transfer(to_checksum_address(destination), amount)
        to = to_checksum_address(token_contract)
    except (ValueError, TypeError) as exc:
        raise SigningError(f"Invalid transfer payload: {exc}") from exc

    return {
        "to": to,
        "data": data,
        "value": 0,
        "nonce": nonce,
        "gas": gas_limit,
        "gasPrice": gas_price,
        "chainId": chain_id,
    }


def sign_transaction(tx: dict, account: LocalAccount) -> SignedTransfer:
    """Sign ``tx`` with ``account``; SigningError on a malformed payload."""
    try:
        signed = account.sign_transaction(tx)
    except (ValueError, TypeError) as exc:
        raise SigningError(f"Could not sign transaction: {exc}") from exc
    return SignedTransfer(
        raw_transaction=to_hex(signed.raw_transaction),
        tx_hash=to_hex(signed.hash),
        sender=account.address,
    )


def broadcast(client: ChainClient, signed: SignedTransfer) -> PendingTransaction:
    """
    Send a signed transaction without waiting for it to be mined.

    Raises:
        BroadcastError: If the node rejects the transaction
    """
    try:
        tx_hash = client.send_raw_transaction(signed.raw_transaction)
    except ChainError as exc:
        raise BroadcastError(str(exc)) from exc
    if not tx_hash:
        raise BroadcastError("Node accepted the transaction but returned no hash.")
    logger.info("broadcast %s from %s", tx_hash, signed.sender)
    return PendingTransaction(tx_hash=tx_hash, client=client)


def send_transfer(
    client: ChainClient,
    token_contract: str,
    holder: str,
    destination: str,
    amount: int,
    private_key: str,
    gas_limit: int = DEFAULT_GAS_LIMIT,
) -> PendingTransaction:
    """
    Derive the signing identity, fetch gas price / nonce / chain id, then
    build, sign and broadcast an ERC-20 transfer from ``holder``.

    Returns:
        The pending transaction; its hash is available immediately.

    Raises:
        SigningError: Malformed key, or the key does not control ``holder``
        QueryError: Gas price / nonce / chain id lookup failed
        BroadcastError: The node rejected the transaction
    """
    try:
        account = get_account(private_key)
    except (ValueError, TypeError) as exc:
        raise SigningError("Invalid private key.") from exc

    if holder and account.address.lower() != holder.strip().lower():
        raise SigningError(
            f"Private key controls {account.address}, not token holder {holder}."
        )

    gas_price = client.gas_price()
    nonce = client.transaction_count(account.address)
    chain_id = client.chain_id()

    tx = build_transfer_tx(
        token_contract=token_contract,
        destination=destination,
        amount=amount,
        nonce=nonce,
        gas_price=gas_price,
        chain_id=chain_id,
        gas_limit=gas_limit,
    )
    signed = sign_transaction(tx, account)
    return broadcast(client, signed)
