"""
Invoke Transactions - Build, sign, and send Starknet contract calls.

Uses starknet-py's Account for nonce lookup, fee estimation, signing and
submission (v3 invoke). Receipt polling uses the httpx client in rpc.py.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import aiohttp
from loguru import logger
from starknet_py.net.account.account import Account
from starknet_py.net.client_errors import ClientError
from starknet_py.net.client_models import Call

from ..config import StarknetSettings, load_settings
from ..utils import encode_calldata, format_tx_hash, parse_felt, selector_from_name
from ..wallet.account import account_from_context, starknet_call_context
from .rpc import RpcError, receipt_succeeded, wait_for_receipt

DEFAULT_FUNCTION = "mint_lords"


class TransactionError(RuntimeError):
    exit_code: int = 4


def build_call(
    contract_address: int,
    function_name: str,
    calldata: Sequence[int] = (),
) -> Call:
    """
    Build a contract Call.

    Args:
        contract_address: Target contract address
        function_name: Entry point name; the selector is derived from it
        calldata: Encoded calldata felts

    Returns:
        SDK Call object
    """
    selector = selector_from_name(function_name)
    logger.debug("call {} on {} selector={}", function_name, hex(contract_address), hex(selector))
    return Call(to_addr=contract_address, selector=selector, calldata=list(calldata))


def load_calls_file(path: Path) -> list[Call]:
    """
    Load a multicall from a JSON file.

    The file holds a list of {"to": ..., "function": ..., "calldata": [...]}
    objects; calldata items follow encode_calldata().
    """
    try:
        entries = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(entries, list) or not entries:
        raise ValueError(f"{path} must contain a non-empty JSON array of calls")

    calls = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or "to" not in entry or "function" not in entry:
            raise ValueError(f"Call #{i} in {path} needs 'to' and 'function'")
        try:
            calldata = entry.get("calldata", [])
            if not isinstance(calldata, list):
                raise ValueError("'calldata' must be a JSON array")
            calls.append(
                build_call(
                    parse_felt(entry["to"], "'to'"),
                    entry["function"],
                    encode_calldata(calldata),
                )
            )
        except ValueError as exc:
            raise ValueError(f"Call #{i} in {path}: {exc}") from exc
    return calls


async def starknet_call(
    account: Account,
    calls: Iterable[Call],
    nonce: Optional[int] = None,
) -> Any:
    """
    Execute calls as a single v3 invoke transaction.

    Args:
        account: Account that signs and pays for the transaction
        calls: Calls to execute, in order
        nonce: Explicit nonce (default: fetched by the SDK)

    Returns:
        SDK response; .transaction_hash holds the hash

    Raises:
        TransactionError: If the node rejects the transaction or fee estimation fails
        RpcError: If the node cannot be reached
    """
    calls = list(calls)
    if not calls:
        raise TransactionError("No calls to execute")

    try:
        result = await account.execute_v3(calls=calls, nonce=nonce, auto_estimate=True)
    except ClientError as exc:
        raise TransactionError(f"Transaction rejected: {exc.message}") from exc
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise RpcError(f"RPC request failed: {exc!r}") from exc

    logger.info("submitted {}", format_tx_hash(result.transaction_hash))
    return result


def send_invoke(
    calls: Sequence[Call],
    settings: Optional[StarknetSettings] = None,
    nonce: Optional[int] = None,
    wait: bool = True,
    timeout: int = 120,
) -> dict:
    """
    Build the account, send the calls, and optionally wait for the receipt.

    Convenience function combining context + account + execute.

    Args:
        calls: Calls to execute in one transaction
        settings: Loaded settings (default: load_settings())
        nonce: Explicit nonce
        wait: Whether to wait for receipt
        timeout: Receipt wait timeout

    Returns:
        Dict with tx_hash and, when waiting, receipt and status
        (1 succeeded, 0 reverted)

    Raises:
        TimeoutError: If waiting and no receipt shows up within timeout;
            the message names the transaction hash
    """
    settings = settings or load_settings()
    context = starknet_call_context(settings)
    account = account_from_context(context)

    response = asyncio.run(starknet_call(account, calls, nonce=nonce))
    result: dict[str, Any] = {"tx_hash": response.transaction_hash}

    if wait:
        receipt = wait_for_receipt(response.transaction_hash, timeout=timeout, rpc_url=context.rpc_url)
        result["receipt"] = receipt
        result["status"] = 1 if receipt_succeeded(receipt) else 0
        if result["status"]:
            logger.info("confirmed {}", format_tx_hash(response.transaction_hash))
        else:
            logger.warning(
                "reverted {}: {}",
                format_tx_hash(response.transaction_hash),
                receipt.get("revert_reason"),
            )

    return result
