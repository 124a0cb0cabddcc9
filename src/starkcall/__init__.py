__all__ = [
    # Configuration
    "ConfigError",
    "StarknetSettings",
    "load_settings",
    # Accounts
    "StarknetContext",
    "resolve_chain_id",
    "starknet_account",
    "starknet_call_context",
    # Transactions
    "TransactionError",
    "build_call",
    "load_calls_file",
    "send_invoke",
    "starknet_call",
    # JSON-RPC
    "RpcError",
    "call_contract",
    "get_chain_id",
    "get_nonce",
    "get_transaction_receipt",
    "wait_for_receipt",
]

from .config import ConfigError, StarknetSettings, load_settings
from .wallet.account import (
    StarknetContext,
    resolve_chain_id,
    starknet_account,
    starknet_call_context,
)
from .chain.tx import (
    TransactionError,
    build_call,
    load_calls_file,
    send_invoke,
    starknet_call,
)
from .chain.rpc import (
    RpcError,
    call_contract,
    get_chain_id,
    get_nonce,
    get_transaction_receipt,
    wait_for_receipt,
)
