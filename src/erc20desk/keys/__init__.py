"""
Keys - signing identities and the credential encryption helper.
"""
