"""
Chain - JSON-RPC client adapter for ERC-20 tokens.

Provides the JSON-RPC client, the ERC-20 ABI, and transaction utilities
for querying balances and submitting transfers.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
