"""
Commands - click command implementations for the erc20desk CLI.

- token:   balance, send
- session: interactive connect / send loop
- wallet:  create-wallet
- secret:  encrypt, decrypt
"""
