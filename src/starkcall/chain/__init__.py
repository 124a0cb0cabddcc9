"""
Chain - Starknet interaction layer for starkcall.

Provides a JSON-RPC read client (httpx) and the invoke transaction
executor built on starknet-py's account and signer.
"""
