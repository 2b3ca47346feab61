__all__ = [
    # Flow
    "TokenFlow",
    "FlowState",
    "FlowView",
    "Phase",
    "ConnectionConfig",
    "BalanceReading",
    "TransferRequest",
    "SubmissionOutcome",
    "reduce",
    "derive_view",
    # Units
    "to_base_units",
    "from_base_units",
    "format_display",
    "validate_amount",
    # Chain client
    "ChainClient",
    "PendingTransaction",
    "TransactionReceipt",
    "send_transfer",
    # Chain errors
    "ChainError",
    "InvalidEndpoint",
    "QueryError",
    "SigningError",
    "BroadcastError",
    "ReceiptTimeout",
    "RpcError",
    # Keys
    "generate_eoa",
    "get_address",
    "CryptoError",
    "encrypt_password",
    "decrypt_password",
    # Config
    "Settings",
]

from .chain.errors import (
    BroadcastError,
    ChainError,
    InvalidEndpoint,
    QueryError,
    ReceiptTimeout,
    RpcError,
    SigningError,
)
from .chain.rpc import ChainClient
from .chain.tx import PendingTransaction, TransactionReceipt, send_transfer
from .keys.eth import generate_eoa, get_address
from .keys.secret import CryptoError, decrypt_password, encrypt_password
from .flow.units import format_display, from_base_units, to_base_units, validate_amount
from .flow.state import (
    BalanceReading,
    ConnectionConfig,
    FlowState,
    FlowView,
    Phase,
    SubmissionOutcome,
    TransferRequest,
    derive_view,
    reduce,
)
from .flow.controller import TokenFlow
from .config import Settings
