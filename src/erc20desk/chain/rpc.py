"""
JSON-RPC Client for EVM endpoints.

Lightweight alternative to web3.py: uses httpx for HTTP + eth-abi for encoding.
A ``ChainClient`` is bound to one endpoint URL for its whole lifetime; point
it somewhere else by building a new one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import to_checksum_address

from .abi import ERC20_ABI, decode_function_result, encode_function_call
from .errors import ChainError, InvalidEndpoint, QueryError, ReceiptTimeout, RpcError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _parse_quantity(value: Any, what: str) -> int:
    """Decode a JSON-RPC hex quantity (``"0x1a"``) into an int."""
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise QueryError(f"Unexpected {what} value: {value!r}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise QueryError(f"Unexpected {what} value: {value!r}") from exc


@dataclass
class ChainClient:
    """
    JSON-RPC client bound to a single endpoint.

    Attributes:
        rpc_url: http(s) endpoint URL
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (used by tests to stub the node)
    """

    rpc_url: str
    timeout: float = DEFAULT_TIMEOUT
    transport: Optional[httpx.BaseTransport] = None
    _request_id: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        url = (self.rpc_url or "").strip()
        if not url:
            raise InvalidEndpoint("RPC URL is empty.")
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise InvalidEndpoint(f"Invalid RPC URL: {url}") from exc
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise InvalidEndpoint(f"Invalid RPC URL: {url}")
        self.rpc_url = url

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _rpc_call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: If the HTTP request fails or the node returns an error
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }
        logger.debug("rpc %s -> %s", method, self.rpc_url)

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise RpcError(f"RPC request failed: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"RPC response is not valid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise RpcError(f"Malformed RPC response: {data!r}")
        if "error" in data:
            raise RpcError.from_response(data["error"])

        return data.get("result")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_contract(self, contract_address: str, function_name: str, args: Optional[list] = None) -> Any:
        """Read from an ERC-20 contract (eth_call against ``latest``)."""
        calldata = encode_function_call(ERC20_ABI, function_name, args or [])
        result = self._rpc_call(
            "eth_call",
            [{"to": to_checksum_address(contract_address), "data": calldata}, "latest"],
        )
        if result is None or result == "0x":
            raise QueryError(
                f"{function_name}() returned no data; is {contract_address} an ERC-20 contract?"
            )
        if not isinstance(result, str):
            raise QueryError(f"{function_name}() returned a non-hex result: {result!r}")
        return decode_function_result(ERC20_ABI, function_name, result)

    def read_balance(self, contract_address: str, holder_address: str) -> int:
        """
        Get the token balance of ``holder_address`` in base units.

        Raises:
            QueryError: On any network, address or ABI failure
        """
        try:
            balance = self.read_contract(
                contract_address, "balanceOf", [to_checksum_address(holder_address)]
            )
        except QueryError:
            raise
        except (ChainError, DecodingError, EncodingError, ValueError, TypeError) as exc:
            raise QueryError(str(exc)) from exc
        return int(balance)

    def gas_price(self) -> int:
        """Current gas price in wei."""
        return _parse_quantity(self._rpc_call("eth_gasPrice", []), "gas price")

    def transaction_count(self, address: str) -> int:
        """Transaction count (nonce) of ``address`` at the latest block."""
        result = self._rpc_call(
            "eth_getTransactionCount", [to_checksum_address(address), "latest"]
        )
        return _parse_quantity(result, "nonce")

    def chain_id(self) -> int:
        return _parse_quantity(self._rpc_call("eth_chainId", []), "chain id")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Args:
            raw_tx: 0x-prefixed hex encoded signed transaction

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        return self._rpc_call("eth_sendRawTransaction", [raw_tx])

    def get_receipt(self, tx_hash: str) -> Optional[dict]:
        """Receipt for ``tx_hash``, or None while it is still pending."""
        return self._rpc_call("eth_getTransactionReceipt", [tx_hash])

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict:
        """
        Wait for a transaction receipt.

        Args:
            tx_hash: Transaction hash
            timeout: Maximum wait time in seconds
            poll_interval: Polling interval in seconds

        Returns:
            Transaction receipt dict

        Raises:
            ReceiptTimeout: If receipt not found within timeout
        """
        start = time.monotonic()
        while True:
            receipt = self.get_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() - start >= timeout:
                break
            time.sleep(poll_interval)

        raise ReceiptTimeout(f"Transaction {tx_hash} not confirmed within {timeout}s")
