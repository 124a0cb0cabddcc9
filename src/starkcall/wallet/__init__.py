"""
Wallet - Account construction from configured key material.
"""
