"""
Token flow controller - the side-effect boundary around ``reduce``.

``TokenFlow`` owns the current ``FlowState`` and the ``ChainClient`` bound
to the configured endpoint. Every public method turns into one or more
events; listeners registered with ``subscribe`` receive a freshly derived
``FlowView`` after each of them.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..chain.errors import BroadcastError, ChainError, InvalidEndpoint
from ..chain.rpc import ChainClient
from ..chain.tx import DEFAULT_GAS_LIMIT, send_transfer
from ..keys.eth import generate_eoa
from .state import (
    TRANSACTION_FAILED_MESSAGE,
    BalanceFailed,
    BalanceLoaded,
    ClientFailed,
    Configured,
    Event,
    FlowState,
    FlowView,
    HashAvailable,
    ModalOpened,
    QueryStarted,
    SubmissionOutcome,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    TransferCancelled,
    TransferEdited,
    can_submit,
    derive_view,
    reduce,
)
from .units import to_base_units

logger = logging.getLogger(__name__)

DEFAULT_EXPLORER_TX_URL = "https://polygonscan.com/tx/{tx_hash}"

ClientFactory = Callable[[str], ChainClient]
Listener = Callable[[FlowView], None]
HashCallback = Callable[[str, str], None]


class TokenFlow:
    """Connect / query / transfer flow for one ERC-20 token."""

    def __init__(
        self,
        client_factory: ClientFactory = ChainClient,
        explorer_tx_url: str = DEFAULT_EXPLORER_TX_URL,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        receipt_timeout: float = 120,
        poll_interval: float = 2.0,
        wait_for_receipt: bool = True,
    ) -> None:
        self.client_factory = client_factory
        self.explorer_tx_url = explorer_tx_url
        self.gas_limit = gas_limit
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.wait_for_receipt = wait_for_receipt
        self._state = FlowState()
        self._client: Optional[ChainClient] = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def view(self) -> FlowView:
        return derive_view(self._state)

    @property
    def client(self) -> Optional[ChainClient]:
        return self._client

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, event: Event) -> None:
        self._state = reduce(self._state, event)
        if self._listeners:
            view = derive_view(self._state)
            for listener in list(self._listeners):
                listener(view)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def configure(
        self,
        rpc_url: Optional[str] = None,
        token_contract: Optional[str] = None,
        token_holder: Optional[str] = None,
    ) -> None:
        """Update connection fields; a changed RPC URL rebuilds the client."""
        previous_url = self._state.config.rpc_url
        self._dispatch(
            Configured(rpc_url=rpc_url, token_contract=token_contract, token_holder=token_holder)
        )
        if rpc_url is not None and rpc_url != previous_url:
            self.initialize_client()

    def initialize_client(self) -> bool:
        """(Re)build the chain client for the configured RPC URL."""
        self._client = None
        rpc_url = self._state.config.rpc_url
        if not rpc_url.strip():
            return False
        try:
            self._client = self.client_factory(rpc_url)
        except InvalidEndpoint as exc:
            logger.error("Failed to initialize chain client: %s", exc)
            self._dispatch(ClientFailed())
            return False
        return True

    def query_balance(self, reset_messages: bool = True) -> bool:
        """
        Read the holder's token balance.

        Args:
            reset_messages: Clear the previous balance and success / error
                messages first (user-initiated connect). The refresh after a
                transfer passes False so the outcome stays visible.

        Returns:
            True if a new balance was loaded
        """
        state = self._state
        if self._client is None or state.querying or state.busy:
            return False

        self._dispatch(QueryStarted(reset_messages=reset_messages))
        config = self._state.config
        try:
            raw = self._client.read_balance(config.token_contract, config.token_holder)
        except ChainError as exc:
            logger.warning("Balance query failed: %s", exc)
            self._dispatch(BalanceFailed(f"Failed to fetch balance. {exc}"))
            return False
        except Exception as exc:
            logger.exception("Unexpected error during balance query")
            self._dispatch(BalanceFailed(f"Failed to fetch balance. {exc}"))
            return False

        self._dispatch(BalanceLoaded(raw, clear_error=reset_messages))
        return True

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------

    def open_transfer_modal(self) -> bool:
        self._dispatch(ModalOpened())
        return self._state.modal_open

    def edit_transfer(
        self,
        destination: Optional[str] = None,
        amount: Optional[str] = None,
        private_key: Optional[str] = None,
    ) -> FlowView:
        self._dispatch(
            TransferEdited(destination=destination, amount=amount, private_key=private_key)
        )
        return self.view

    def cancel_transfer(self) -> None:
        self._dispatch(TransferCancelled())

    def submit_transfer(self, on_hash: Optional[HashCallback] = None) -> Optional[SubmissionOutcome]:
        """
        Sign and broadcast the open transfer request.

        Ignored (returns None) while another submission is in flight, when
        no client is configured, or when the amount is invalid. Otherwise
        the outcome is returned after a silent balance refresh.

        Args:
            on_hash: Called with ``(tx_hash, tx_url)`` as soon as the node
                accepts the transaction, before it is mined.
        """
        if self._client is None or not can_submit(self._state):
            return None

        client = self._client
        config = self._state.config
        request = self._state.transfer
        self._dispatch(SubmitStarted())

        receipt = None
        try:
            amount = to_base_units(request.amount)
            pending = send_transfer(
                client,
                token_contract=config.token_contract,
                holder=config.token_holder,
                destination=request.destination,
                amount=amount,
                private_key=request.private_key,
                gas_limit=self.gas_limit,
            )
            tx_url = self.explorer_tx_url.format(tx_hash=pending.tx_hash)
            logger.info("Mining transaction %s", tx_url)
            self._dispatch(HashAvailable(tx_hash=pending.tx_hash, tx_url=tx_url))
            if on_hash is not None:
                on_hash(pending.tx_hash, tx_url)

            if self.wait_for_receipt:
                receipt = pending.wait(timeout=self.receipt_timeout, poll_interval=self.poll_interval)
                if not receipt.succeeded:
                    raise BroadcastError(
                        f"Transaction {pending.tx_hash} reverted in block {receipt.block_number}"
                    )
        except Exception as exc:
            logger.error("Transaction failed: %s", exc)
            outcome = SubmissionOutcome(
                success=False,
                message=TRANSACTION_FAILED_MESSAGE,
                tx_hash=self._state.tx_hash,
                tx_url=self._state.tx_url,
                block_number=receipt.block_number if receipt is not None else None,
            )
            self._dispatch(SubmitFailed(outcome))
        else:
            if receipt is not None:
                logger.info("Mined in block %s", receipt.block_number)
                message = f"Transaction successful! Mined in block {receipt.block_number}"
            else:
                message = f"Transaction submitted: {self._state.tx_hash}"
            outcome = SubmissionOutcome(
                success=True,
                message=message,
                tx_hash=self._state.tx_hash,
                tx_url=self._state.tx_url,
                block_number=receipt.block_number if receipt is not None else None,
            )
            self._dispatch(SubmitSucceeded(outcome))

        self.query_balance(reset_messages=False)
        return outcome

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    def create_wallet(self) -> tuple[str, str]:
        """
        Generate a new key pair and make its address the token holder.

        The private key is returned to the caller for display and is not
        kept in flow state.

        Returns:
            Tuple of (private_key_hex, address)
        """
        private_key, address = generate_eoa()
        self._dispatch(Configured(token_holder=address))
        logger.info("Created wallet %s", address)
        return private_key, address
