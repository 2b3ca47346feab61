"""Tests for the TokenFlow controller against a scripted chain client."""

from __future__ import annotations

from eth_account import Account

from erc20desk.chain.errors import BroadcastError, InvalidEndpoint
from erc20desk.chain.rpc import ChainClient
from erc20desk.flow.controller import TokenFlow
from erc20desk.flow.state import (
    INVALID_PROVIDER_MESSAGE,
    TRANSACTION_FAILED_MESSAGE,
    FlowView,
    Phase,
)

from .conftest import (
    RPC_URL,
    TOKEN_CONTRACT,
    TX_HASH,
    FakeChainClient,
    failing_query,
)


def _compose(flow: TokenFlow, destination: str, amount: str, private_key: str) -> None:
    assert flow.open_transfer_modal()
    flow.edit_transfer(destination=destination, amount=amount, private_key=private_key)


class TestInitializeClient:
    """Client construction follows the RPC URL field."""

    def test_invalid_url_leaves_client_unset(self) -> None:
        flow = TokenFlow()
        flow.configure(rpc_url="ftp://nope")
        assert flow.client is None
        assert flow.view.error_message == INVALID_PROVIDER_MESSAGE
        assert flow.query_balance() is False

    def test_valid_url_builds_real_client(self) -> None:
        flow = TokenFlow()
        flow.configure(rpc_url="https://polygon-rpc.example/v1")
        assert isinstance(flow.client, ChainClient)

    def test_rebuilt_only_when_url_changes(self) -> None:
        built: list[str] = []

        def factory(url: str) -> FakeChainClient:
            built.append(url)
            return FakeChainClient(url)

        flow = TokenFlow(client_factory=factory)
        flow.configure(rpc_url=RPC_URL)
        flow.configure(token_contract=TOKEN_CONTRACT)
        flow.configure(rpc_url=RPC_URL)
        flow.configure(rpc_url="http://other.test")
        assert built == [RPC_URL, "http://other.test"]

    def test_factory_failure_is_reported(self) -> None:
        def factory(url: str) -> FakeChainClient:
            raise InvalidEndpoint("bad")

        flow = TokenFlow(client_factory=factory)
        flow.configure(rpc_url="http://x.test")
        assert flow.client is None
        assert flow.view.error_message == INVALID_PROVIDER_MESSAGE

    def test_empty_url_unsets_client(self, flow: TokenFlow) -> None:
        flow.configure(rpc_url="")
        assert flow.client is None
        assert flow.view.error_message == ""


class TestQueryBalance:
    def test_success(self, flow: TokenFlow, fake_client: FakeChainClient) -> None:
        assert flow.query_balance()
        assert flow.view.balance_display == "1.5000"
        assert flow.state.phase is Phase.CONNECTED
        assert fake_client.read_calls == 1

    def test_no_client_is_noop(self) -> None:
        flow = TokenFlow(client_factory=FakeChainClient)
        assert flow.query_balance() is False
        assert flow.state.phase is Phase.IDLE

    def test_failure_then_success(self, flow: TokenFlow, fake_client: FakeChainClient) -> None:
        fake_client.balance_error = failing_query("execution reverted")
        assert not flow.query_balance()
        assert flow.state.balance.raw == 0
        assert flow.view.error_message == "Failed to fetch balance. execution reverted"

        fake_client.balance_error = None
        assert flow.query_balance()
        assert flow.view.error_message == ""
        assert flow.view.balance_display == "1.5000"

    def test_unexpected_error_releases_query(self, flow: TokenFlow, fake_client: FakeChainClient) -> None:
        fake_client.balance_error = AttributeError("'int' object has no attribute 'startswith'")
        assert flow.query_balance() is False
        assert not flow.state.querying
        assert flow.state.phase is Phase.QUERY_FAILED
        assert flow.view.error_message.startswith("Failed to fetch balance.")

        fake_client.balance_error = None
        assert flow.query_balance()
        assert flow.view.balance_display == "1.5000"


class TestSubmitTransfer:
    def test_success(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        _compose(connected_flow, destination, "1.25", wallet[0])
        hashes: list[tuple[str, str]] = []

        def on_hash(tx_hash: str, tx_url: str) -> None:
            fake_client.events.append("hash")
            hashes.append((tx_hash, tx_url))

        reads_before = fake_client.read_calls
        outcome = connected_flow.submit_transfer(on_hash=on_hash)

        assert outcome is not None and outcome.success
        assert outcome.block_number == 42
        assert outcome.message == "Transaction successful! Mined in block 42"
        assert hashes == [(TX_HASH, f"https://polygonscan.com/tx/{TX_HASH}")]
        # hash is surfaced before the receipt is awaited
        assert fake_client.events[-4:] == ["send", "hash", "wait", "read_balance"]
        assert fake_client.read_calls == reads_before + 1

        state = connected_flow.state
        assert not state.modal_open
        assert not state.busy
        assert state.transfer.private_key == ""
        assert state.transfer.destination == ""
        assert state.transfer.amount == ""
        assert connected_flow.view.success_message == outcome.message
        assert connected_flow.view.transaction_url.endswith(TX_HASH)
        assert state.phase is Phase.CONNECTED

    def test_signed_payload(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        _compose(connected_flow, destination, "1", wallet[0])
        connected_flow.submit_transfer()

        raw = fake_client.sent[0]
        assert Account.recover_transaction(raw) == wallet[1]
        assert fake_client.nonce_addresses == [wallet[1]]
        # transfer(address,uint256) selector and destination in calldata
        assert "a9059cbb" in raw
        assert destination[2:].lower() in raw.lower()

    def test_broadcast_failure(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        fake_client.send_error = BroadcastError("nonce too low")
        _compose(connected_flow, destination, "1", wallet[0])
        reads_before = fake_client.read_calls

        outcome = connected_flow.submit_transfer()

        assert outcome is not None and not outcome.success
        assert outcome.message == TRANSACTION_FAILED_MESSAGE
        state = connected_flow.state
        assert state.transfer.private_key == ""
        assert state.modal_open
        assert not state.busy
        assert connected_flow.view.error_message == TRANSACTION_FAILED_MESSAGE
        assert fake_client.read_calls == reads_before + 1

    def test_failure_message_survives_refresh_until_next_connect(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        fake_client.send_error = BroadcastError("nonce too low")
        _compose(connected_flow, destination, "1", wallet[0])
        connected_flow.submit_transfer()

        assert connected_flow.view.balance_display == "1.5000"
        assert connected_flow.view.error_message == TRANSACTION_FAILED_MESSAGE

        connected_flow.cancel_transfer()
        assert connected_flow.query_balance()
        assert connected_flow.view.error_message == ""

    def test_reverted_receipt_is_failure(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        fake_client.receipt = {"transactionHash": TX_HASH, "blockNumber": "0x2b", "status": "0x0"}
        _compose(connected_flow, destination, "1", wallet[0])

        outcome = connected_flow.submit_transfer()

        assert outcome is not None and not outcome.success
        assert outcome.tx_hash == TX_HASH
        assert connected_flow.state.transfer.private_key == ""

    def test_invalid_key_never_broadcasts(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        destination: str,
    ) -> None:
        _compose(connected_flow, destination, "1", "not-a-key")
        reads_before = fake_client.read_calls

        outcome = connected_flow.submit_transfer()

        assert outcome is not None and not outcome.success
        assert fake_client.sent == []
        assert connected_flow.state.transfer.private_key == ""
        assert fake_client.read_calls == reads_before + 1

    def test_key_for_other_address_is_rejected(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        destination: str,
    ) -> None:
        other_key = Account.create().key.hex()
        _compose(connected_flow, destination, "1", other_key)

        outcome = connected_flow.submit_transfer()

        assert outcome is not None and not outcome.success
        assert fake_client.sent == []

    def test_reentrant_submit_broadcasts_once(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        _compose(connected_flow, destination, "1", wallet[0])
        nested: list[object] = []
        fake_client.on_send = lambda: nested.append(connected_flow.submit_transfer())

        first = connected_flow.submit_transfer()
        second = connected_flow.submit_transfer()

        assert first is not None and first.success
        assert nested == [None]
        assert second is None
        assert len(fake_client.sent) == 1

    def test_invalid_amount_is_noop(
        self,
        connected_flow: TokenFlow,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        _compose(connected_flow, destination, "2", wallet[0])
        assert connected_flow.view.validation_message
        assert connected_flow.submit_transfer() is None
        assert fake_client.sent == []

    def test_no_wait_reports_submission(
        self,
        fake_client: FakeChainClient,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        flow = TokenFlow(client_factory=lambda url: fake_client, wait_for_receipt=False)
        flow.configure(rpc_url=RPC_URL, token_contract=TOKEN_CONTRACT, token_holder=wallet[1])
        flow.query_balance()
        _compose(flow, destination, "1", wallet[0])

        outcome = flow.submit_transfer()

        assert outcome is not None and outcome.success
        assert outcome.block_number is None
        assert "wait" not in fake_client.events
        assert outcome.message == f"Transaction submitted: {TX_HASH}"

    def test_listeners_see_busy_phase(
        self,
        connected_flow: TokenFlow,
        wallet: tuple[str, str],
        destination: str,
    ) -> None:
        views: list[FlowView] = []
        unsubscribe = connected_flow.subscribe(views.append)
        _compose(connected_flow, destination, "1", wallet[0])
        connected_flow.submit_transfer()
        unsubscribe()

        labels = [view.button_label for view in views]
        assert "Mining..." in labels
        assert labels[-1] == "Connect"
        assert any(view.transaction_url and view.busy for view in views)

        count = len(views)
        connected_flow.query_balance()
        assert len(views) == count


class TestCancelAndWallet:
    def test_cancel_keeps_balance(self, connected_flow: TokenFlow, wallet: tuple[str, str]) -> None:
        _compose(connected_flow, "0xabc", "1", wallet[0])
        connected_flow.cancel_transfer()
        assert not connected_flow.state.modal_open
        assert connected_flow.state.transfer.private_key == ""
        assert connected_flow.view.balance_display == "1.5000"

    def test_create_wallet_sets_holder(self, flow: TokenFlow) -> None:
        private_key, address = flow.create_wallet()
        assert flow.state.config.token_holder == address
        assert Account.from_key(private_key).address == address
        assert flow.state.transfer.private_key == ""
