"""
Configuration - environment variables and the optional ``.env`` file.

Values come from ``~/.erc20desk/.env`` (loaded once at CLI start, never
overriding variables already set in the process) and then from the
environment. CLI options read the same variable names via ``envvar=``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .chain.tx import DEFAULT_GAS_LIMIT
from .flow.controller import DEFAULT_EXPLORER_TX_URL, TokenFlow

# Default config directory
APP_DIR = Path.home() / ".erc20desk"
APP_ENV = APP_DIR / ".env"

ENV_RPC_URL = "ERC20DESK_RPC_URL"
ENV_TOKEN = "ERC20DESK_TOKEN"
ENV_HOLDER = "ERC20DESK_HOLDER"
ENV_EXPLORER_TX_URL = "ERC20DESK_EXPLORER_TX_URL"
ENV_GAS_LIMIT = "ERC20DESK_GAS_LIMIT"
ENV_RECEIPT_TIMEOUT = "ERC20DESK_RECEIPT_TIMEOUT"
ENV_POLL_INTERVAL = "ERC20DESK_POLL_INTERVAL"
ENV_PRIVATE_KEY = "ERC20DESK_PRIVATE_KEY"
ENV_SECRET = "ERC20DESK_SECRET"

DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_POLL_INTERVAL = 2.0


def load_env(env_path: Optional[Path] = None) -> Optional[Path]:
    """
    Load a ``.env`` file into the process environment if it exists.

    Returns:
        The path that was loaded, or None
    """
    env_path = env_path or APP_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)
        return env_path
    return None


@dataclass(frozen=True)
class Settings:
    rpc_url: str = ""
    token_contract: str = ""
    token_holder: str = ""
    explorer_tx_url: str = DEFAULT_EXPLORER_TX_URL
    gas_limit: int = DEFAULT_GAS_LIMIT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    wait_for_receipt: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        try:
            return cls(
                rpc_url=env.get(ENV_RPC_URL, ""),
                token_contract=env.get(ENV_TOKEN, ""),
                token_holder=env.get(ENV_HOLDER, ""),
                explorer_tx_url=env.get(ENV_EXPLORER_TX_URL) or DEFAULT_EXPLORER_TX_URL,
                gas_limit=int(env.get(ENV_GAS_LIMIT, DEFAULT_GAS_LIMIT)),
                receipt_timeout=float(env.get(ENV_RECEIPT_TIMEOUT, DEFAULT_RECEIPT_TIMEOUT)),
                poll_interval=float(env.get(ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)),
            )
        except ValueError as exc:
            raise ValueError(f"Invalid numeric setting in environment: {exc}") from exc

    def build_flow(self, client_factory=None) -> TokenFlow:
        """A ``TokenFlow`` configured with these settings (client included)."""
        kwargs = {} if client_factory is None else {"client_factory": client_factory}
        flow = TokenFlow(
            explorer_tx_url=self.explorer_tx_url,
            gas_limit=self.gas_limit,
            receipt_timeout=self.receipt_timeout,
            poll_interval=self.poll_interval,
            wait_for_receipt=self.wait_for_receipt,
            **kwargs,
        )
        flow.configure(
            rpc_url=self.rpc_url,
            token_contract=self.token_contract,
            token_holder=self.token_holder,
        )
        return flow
