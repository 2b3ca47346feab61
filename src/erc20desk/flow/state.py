"""
Token flow state - the single state record, its events, and the pure
transition function.

``reduce(state, event)`` never performs I/O; the ``TokenFlow`` controller
calls the chain client and feeds the results back in as events.
``derive_view(state)`` produces the view-model the CLI renders.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from .units import TOKEN_DECIMALS, format_display, from_base_units, validate_amount

AMOUNT_INVALID_MESSAGE = (
    "Amount must be greater than 0 and less than or equal to your balance."
)
INVALID_PROVIDER_MESSAGE = "Invalid provider URL."
TRANSACTION_FAILED_MESSAGE = "Transaction failed. Please check the logs for more details."


class Phase(str, Enum):
    IDLE = "idle"
    QUERYING = "querying"
    CONNECTED = "connected"
    QUERY_FAILED = "query_failed"
    COMPOSING = "composing"
    SUBMITTING = "submitting"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    SUBMIT_FAILED = "submit_failed"


# ============ Entities ============


@dataclass(frozen=True)
class ConnectionConfig:
    rpc_url: str = ""
    token_contract: str = ""
    token_holder: str = ""


@dataclass(frozen=True)
class BalanceReading:
    """Balance in base units; the decimal and display forms are derived."""

    raw: int = 0
    decimals: int = TOKEN_DECIMALS

    @property
    def amount(self) -> Decimal:
        return from_base_units(self.raw, self.decimals)

    @property
    def display(self) -> str:
        return format_display(self.amount)


@dataclass(frozen=True)
class TransferRequest:
    destination: str = ""
    amount: str = ""
    private_key: str = field(default="", repr=False)


@dataclass(frozen=True)
class SubmissionOutcome:
    success: bool
    message: str
    tx_hash: str = ""
    tx_url: str = ""
    block_number: Optional[int] = None


@dataclass(frozen=True)
class FlowState:
    config: ConnectionConfig = field(default_factory=ConnectionConfig)
    phase: Phase = Phase.IDLE
    balance: BalanceReading = field(default_factory=BalanceReading)
    has_connected: bool = False
    querying: bool = False
    busy: bool = False
    modal_open: bool = False
    transfer: TransferRequest = field(default_factory=TransferRequest)
    error_message: str = ""
    success_message: str = ""
    tx_hash: str = ""
    tx_url: str = ""
    outcome: Optional[SubmissionOutcome] = None


# ============ Events ============


@dataclass(frozen=True)
class Configured:
    rpc_url: Optional[str] = None
    token_contract: Optional[str] = None
    token_holder: Optional[str] = None


@dataclass(frozen=True)
class ClientFailed:
    message: str = INVALID_PROVIDER_MESSAGE


@dataclass(frozen=True)
class QueryStarted:
    reset_messages: bool = True


@dataclass(frozen=True)
class BalanceLoaded:
    raw: int
    # False for the silent refresh after a transfer, which keeps its outcome message
    clear_error: bool = True


@dataclass(frozen=True)
class BalanceFailed:
    message: str


@dataclass(frozen=True)
class ModalOpened:
    pass


@dataclass(frozen=True)
class TransferEdited:
    destination: Optional[str] = None
    amount: Optional[str] = None
    private_key: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class TransferCancelled:
    pass


@dataclass(frozen=True)
class SubmitStarted:
    pass


@dataclass(frozen=True)
class HashAvailable:
    tx_hash: str
    tx_url: str


@dataclass(frozen=True)
class SubmitSucceeded:
    outcome: SubmissionOutcome


@dataclass(frozen=True)
class SubmitFailed:
    outcome: SubmissionOutcome


Event = Union[
    Configured,
    ClientFailed,
    QueryStarted,
    BalanceLoaded,
    BalanceFailed,
    ModalOpened,
    TransferEdited,
    TransferCancelled,
    SubmitStarted,
    HashAvailable,
    SubmitSucceeded,
    SubmitFailed,
]


# ============ Guards ============


def is_amount_valid(state: FlowState) -> bool:
    return validate_amount(state.transfer.amount, state.balance.amount)


def can_open_modal(state: FlowState) -> bool:
    return (
        state.has_connected
        and state.balance.raw > 0
        and not state.busy
        and not state.querying
        and not state.modal_open
    )


def can_submit(state: FlowState) -> bool:
    return state.modal_open and not state.busy and not state.querying and is_amount_valid(state)


def _resting_phase(state: FlowState) -> Phase:
    if state.modal_open:
        return Phase.COMPOSING
    if state.has_connected:
        return Phase.CONNECTED
    return Phase.IDLE


# ============ Transitions ============


def reduce(state: FlowState, event: Event) -> FlowState:
    """Apply ``event`` to ``state``; events whose guard fails are ignored."""
    if isinstance(event, Configured):
        config = state.config
        return replace(
            state,
            config=ConnectionConfig(
                rpc_url=config.rpc_url if event.rpc_url is None else event.rpc_url,
                token_contract=(
                    config.token_contract if event.token_contract is None else event.token_contract
                ),
                token_holder=(
                    config.token_holder if event.token_holder is None else event.token_holder
                ),
            ),
        )

    if isinstance(event, ClientFailed):
        return replace(state, error_message=event.message)

    if isinstance(event, QueryStarted):
        if state.querying or state.busy:
            return state
        state = replace(state, querying=True, phase=Phase.QUERYING)
        if event.reset_messages:
            state = replace(
                state,
                balance=BalanceReading(),
                error_message="",
                success_message="",
                tx_hash="",
                tx_url="",
                outcome=None,
            )
        return state

    if isinstance(event, BalanceLoaded):
        state = replace(
            state,
            querying=False,
            balance=BalanceReading(raw=event.raw),
            error_message="" if event.clear_error else state.error_message,
            has_connected=True,
        )
        return replace(state, phase=_resting_phase(state))

    if isinstance(event, BalanceFailed):
        return replace(
            state,
            querying=False,
            balance=BalanceReading(),
            error_message=event.message,
            phase=Phase.QUERY_FAILED,
        )

    if isinstance(event, ModalOpened):
        if not can_open_modal(state):
            return state
        return replace(state, modal_open=True, transfer=TransferRequest(), phase=Phase.COMPOSING)

    if isinstance(event, TransferEdited):
        if not state.modal_open or state.busy:
            return state
        transfer = state.transfer
        return replace(
            state,
            transfer=TransferRequest(
                destination=transfer.destination if event.destination is None else event.destination,
                amount=transfer.amount if event.amount is None else event.amount,
                private_key=transfer.private_key if event.private_key is None else event.private_key,
            ),
        )

    if isinstance(event, TransferCancelled):
        # A dispatched submission cannot be aborted
        if state.busy:
            return state
        state = replace(state, modal_open=False, transfer=TransferRequest())
        return replace(state, phase=_resting_phase(state))

    if isinstance(event, SubmitStarted):
        if not can_submit(state):
            return state
        return replace(
            state,
            busy=True,
            phase=Phase.SUBMITTING,
            error_message="",
            success_message="",
            tx_hash="",
            tx_url="",
        )

    if isinstance(event, HashAvailable):
        return replace(state, tx_hash=event.tx_hash, tx_url=event.tx_url)

    if isinstance(event, SubmitSucceeded):
        return replace(
            state,
            busy=False,
            phase=Phase.SUBMIT_SUCCEEDED,
            modal_open=False,
            transfer=TransferRequest(),
            success_message=event.outcome.message,
            outcome=event.outcome,
        )

    if isinstance(event, SubmitFailed):
        return replace(
            state,
            busy=False,
            phase=Phase.SUBMIT_FAILED,
            transfer=replace(state.transfer, private_key=""),
            error_message=event.outcome.message,
            outcome=event.outcome,
        )

    raise TypeError(f"Unknown flow event: {event!r}")


# ============ View-model ============


@dataclass(frozen=True)
class FlowView:
    config: ConnectionConfig
    phase: Phase
    balance_display: str
    is_connected: bool
    can_open_modal: bool
    modal_open: bool
    destination: str
    amount: str
    amount_valid: bool
    validation_message: str
    submit_enabled: bool
    busy: bool
    button_label: str
    error_message: str
    success_message: str
    transaction_url: str


def derive_view(state: FlowState) -> FlowView:
    """Re-derive the presentation surface; amount validity is always fresh."""
    amount_valid = is_amount_valid(state)
    show_validation = state.modal_open and bool(state.transfer.amount) and not amount_valid
    return FlowView(
        config=state.config,
        phase=state.phase,
        balance_display=state.balance.display,
        is_connected=state.has_connected,
        can_open_modal=can_open_modal(state),
        modal_open=state.modal_open,
        destination=state.transfer.destination,
        amount=state.transfer.amount,
        amount_valid=amount_valid,
        validation_message=AMOUNT_INVALID_MESSAGE if show_validation else "",
        submit_enabled=can_submit(state),
        busy=state.busy,
        button_label="Mining..." if state.busy else "Connect",
        error_message=state.error_message,
        success_message=state.success_message,
        transaction_url=state.tx_url,
    )
