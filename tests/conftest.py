"""Shared fixtures: a scripted chain client and ready-made flows."""

from __future__ import annotations

from typing import Any, Callable, Optional

import pytest

from erc20desk.chain.errors import QueryError
from erc20desk.flow.controller import TokenFlow
from erc20desk.keys.eth import generate_eoa

TOKEN_CONTRACT = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
RPC_URL = "http://node.test:8545"
ONE_AND_A_HALF = 1_500_000_000_000_000_000
TX_HASH = "0x" + "ab" * 32


class FakeChainClient:
    """In-memory stand-in for ``ChainClient`` that records every call."""

    def __init__(self, rpc_url: str = RPC_URL) -> None:
        self.rpc_url = rpc_url
        self.balance = ONE_AND_A_HALF
        self.balance_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.receipt: dict[str, Any] = {
            "transactionHash": TX_HASH,
            "blockNumber": "0x2a",
            "status": "0x1",
        }
        self.on_send: Optional[Callable[[], None]] = None
        self.events: list[str] = []
        self.read_calls = 0
        self.sent: list[str] = []
        self.nonce_addresses: list[str] = []

    def read_balance(self, contract_address: str, holder_address: str) -> int:
        self.read_calls += 1
        self.events.append("read_balance")
        if self.balance_error is not None:
            raise self.balance_error
        return self.balance

    def gas_price(self) -> int:
        return 30_000_000_000

    def transaction_count(self, address: str) -> int:
        self.nonce_addresses.append(address)
        return 7

    def chain_id(self) -> int:
        return 137

    def send_raw_transaction(self, raw_tx: str) -> str:
        self.sent.append(raw_tx)
        self.events.append("send")
        if self.on_send is not None:
            self.on_send()
        if self.send_error is not None:
            raise self.send_error
        return TX_HASH

    def wait_for_receipt(self, tx_hash: str, timeout: float = 120, poll_interval: float = 2.0) -> dict:
        self.events.append("wait")
        return self.receipt


@pytest.fixture()
def wallet() -> tuple[str, str]:
    """(private_key, address) of a throwaway holder."""
    return generate_eoa()


@pytest.fixture()
def destination() -> str:
    return generate_eoa()[1]


@pytest.fixture()
def fake_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture()
def flow(fake_client: FakeChainClient, wallet: tuple[str, str]) -> TokenFlow:
    """A flow bound to the fake client, configured but not yet connected."""
    flow = TokenFlow(client_factory=lambda url: fake_client)
    flow.configure(rpc_url=RPC_URL, token_contract=TOKEN_CONTRACT, token_holder=wallet[1])
    return flow


@pytest.fixture()
def connected_flow(flow: TokenFlow) -> TokenFlow:
    assert flow.query_balance()
    return flow


def failing_query(message: str = "execution reverted") -> QueryError:
    return QueryError(message)
