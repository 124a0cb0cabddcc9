"""
JSON-RPC Client for Starknet nodes.

Lightweight read-only client: uses httpx for HTTP and speaks the Starknet
JSON-RPC API directly. Covers chain id, nonce and block queries, view calls
(starknet_call), and transaction receipt polling. Anything that needs a
signature goes through the SDK in tx.py instead.
"""

from __future__ import annotations

import time
from typing import Any, Optional, Sequence

import httpx
from loguru import logger

from ..config import load_settings
from ..utils import from_rpc_hex, selector_from_name, to_rpc_hex

# Starknet JSON-RPC error code for an unknown transaction hash.
TXN_HASH_NOT_FOUND = 29

DEFAULT_TIMEOUT = 30.0


class RpcError(RuntimeError):
    exit_code: int = 3

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


def get_rpc_url() -> str:
    """Get the RPC URL from the environment, .env or .config.toml."""
    return load_settings().require_rpc_url()


def _rpc_call(
    method: str,
    params: Any,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        method: RPC method name (e.g., "starknet_chainId")
        params: RPC parameters (list or named dict)
        rpc_url: RPC endpoint URL (default: configured STARKNET_RPC_URL)
        client: Optional pre-built httpx client (tests inject a MockTransport)

    Returns:
        Result field from the RPC response

    Raises:
        RpcError: If the HTTP request or the RPC call fails
        ConfigError: If rpc_url is omitted and none is configured
    """
    url = rpc_url or get_rpc_url()
    payload = {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": 1,
    }
    logger.debug("rpc {} -> {}", method, url)

    try:
        if client is None:
            with httpx.Client(timeout=DEFAULT_TIMEOUT) as owned:
                response = owned.post(url, json=payload)
        else:
            response = client.post(url, json=payload)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        raise RpcError(f"RPC request {method} failed: {exc}") from exc
    except ValueError as exc:
        raise RpcError(f"RPC response for {method} is not JSON") from exc

    if "error" in data:
        error = data["error"] or {}
        raise RpcError(
            f"RPC error: {error.get('message', error)}",
            code=error.get("code"),
            data=error.get("data"),
        )

    return data.get("result")


def get_chain_id(rpc_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> int:
    """Get the chain id reported by the node."""
    return from_rpc_hex(_rpc_call("starknet_chainId", [], rpc_url=rpc_url, client=client))


def get_spec_version(rpc_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> str:
    """Get the JSON-RPC spec version the node implements."""
    return _rpc_call("starknet_specVersion", [], rpc_url=rpc_url, client=client)


def get_block_number(rpc_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> int:
    return int(_rpc_call("starknet_blockNumber", [], rpc_url=rpc_url, client=client))


def get_nonce(
    address: int,
    block_id: str = "latest",
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> int:
    """
    Get the nonce of an account contract.

    Args:
        address: Account address
        block_id: Block tag to query at
        rpc_url: RPC endpoint URL

    Returns:
        Current nonce
    """
    result = _rpc_call(
        "starknet_getNonce",
        {"block_id": block_id, "contract_address": to_rpc_hex(address)},
        rpc_url=rpc_url,
        client=client,
    )
    return from_rpc_hex(result)


def call_contract(
    contract_address: int,
    function_name: str,
    calldata: Sequence[int] = (),
    block_id: str = "latest",
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> list[int]:
    """
    Call a view function on a contract (starknet_call).

    Args:
        contract_address: Contract address
        function_name: Entry point name; the selector is derived from it
        calldata: Already encoded calldata felts
        block_id: Block tag to query at
        rpc_url: RPC endpoint URL

    Returns:
        Returned felts
    """
    selector = selector_from_name(function_name)
    logger.debug("call {} selector={}", function_name, hex(selector))
    request = {
        "contract_address": to_rpc_hex(contract_address),
        "entry_point_selector": to_rpc_hex(selector),
        "calldata": [to_rpc_hex(x) for x in calldata],
    }
    result = _rpc_call(
        "starknet_call",
        {"request": request, "block_id": block_id},
        rpc_url=rpc_url,
        client=client,
    )
    return [from_rpc_hex(x) for x in result or []]


def get_transaction_receipt(
    tx_hash: int,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> Optional[dict]:
    """
    Get a transaction receipt.

    Returns:
        Receipt dict, or None if the node does not know the hash yet
    """
    try:
        return _rpc_call(
            "starknet_getTransactionReceipt",
            {"transaction_hash": to_rpc_hex(tx_hash)},
            rpc_url=rpc_url,
            client=client,
        )
    except RpcError as exc:
        if exc.code == TXN_HASH_NOT_FOUND:
            return None
        raise


def wait_for_receipt(
    tx_hash: int,
    timeout: int = 120,
    poll_interval: float = 2.0,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> dict:
    """
    Wait for a transaction receipt.

    Args:
        tx_hash: Transaction hash
        timeout: Maximum wait time in seconds
        poll_interval: Polling interval in seconds
        rpc_url: RPC endpoint URL

    Returns:
        Transaction receipt dict

    Raises:
        TimeoutError: If receipt not found within timeout
    """
    start = time.monotonic()
    while time.monotonic() - start < timeout:
        receipt = get_transaction_receipt(tx_hash, rpc_url=rpc_url, client=client)
        if receipt is not None:
            logger.debug(
                "receipt {} {} {}",
                hex(tx_hash),
                receipt.get("finality_status"),
                receipt.get("execution_status"),
            )
            return receipt
        time.sleep(poll_interval)

    raise TimeoutError(f"Transaction {hex(tx_hash)} not confirmed within {timeout}s")


def receipt_succeeded(receipt: dict) -> bool:
    return receipt.get("execution_status") == "SUCCEEDED"
