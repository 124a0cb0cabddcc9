"""
Invoke - Sign and send a contract call.

Without options this reproduces the classic flow: load the context from
the environment, build the account, call mint_lords() on
STARKNET_CONTRACT_ADDRESS and print the transaction hash.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from ..chain.rpc import RpcError
from ..chain.tx import DEFAULT_FUNCTION, TransactionError, build_call, load_calls_file, send_invoke
from ..config import ConfigError
from ..utils import encode_calldata, format_tx_hash, parse_felt
from . import fail, get_settings


def parse_calldata_option(calldata_json: str) -> list[int]:
    """Parse a --calldata JSON array into felts."""
    try:
        items = json.loads(calldata_json)
        if not isinstance(items, list):
            raise ValueError("Calldata must be a JSON array")
        return encode_calldata(items)
    except (json.JSONDecodeError, ValueError) as exc:
        raise click.BadParameter(str(exc), param_hint="--calldata") from exc


@click.command()
@click.option("--contract", default=None, help="Target contract (default: STARKNET_CONTRACT_ADDRESS)")
@click.option("--function", "func_name", default=DEFAULT_FUNCTION, show_default=True, help="Entry point name")
@click.option("--calldata", "calldata_json", default="[]", help="Calldata as JSON array")
@click.option(
    "--calls-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with a list of calls to send in one transaction",
)
@click.option("--nonce", default=None, type=int, help="Explicit nonce (default: from node)")
@click.option("--wait/--no-wait", default=False, help="Wait for the receipt")
@click.option("--timeout", default=120, type=int, show_default=True, help="Receipt wait timeout (s)")
@click.pass_context
def invoke(
    ctx: click.Context,
    contract: Optional[str],
    func_name: str,
    calldata_json: str,
    calls_file: Optional[Path],
    nonce: Optional[int],
    wait: bool,
    timeout: int,
) -> None:
    """
    Sign and send a contract call.

    The account pays the fee; resource bounds are estimated by the node.
    """
    settings = get_settings(ctx)

    try:
        if calls_file is not None:
            calls = load_calls_file(calls_file)
        else:
            if contract is not None:
                target = parse_felt(contract, "--contract")
            else:
                target = settings.require_felt("contract_address")
            calls = [build_call(target, func_name, parse_calldata_option(calldata_json))]
    except ConfigError as exc:
        fail(exc)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    for call in calls:
        click.echo(f"  Target:   {call.to_addr:#066x}")
        click.echo(f"  Selector: {call.selector:#066x}")
        click.echo(f"  Calldata: {[hex(x) for x in call.calldata]}")
    click.echo("")

    try:
        result = send_invoke(calls, settings=settings, nonce=nonce, wait=wait, timeout=timeout)
    except (ConfigError, RpcError, TransactionError) as exc:
        fail(exc)
    except TimeoutError as exc:
        click.secho(f"WARNING: {exc}", fg="yellow", err=True)
        sys.exit(1)

    click.echo(f"Transaction hash: {format_tx_hash(result['tx_hash'])}")

    if wait:
        if result["status"] == 1:
            click.secho("SUCCESS: Transaction confirmed!", fg="green")
        else:
            reason = result["receipt"].get("revert_reason", "unknown")
            click.secho(f"FAILED: Transaction reverted: {reason}", fg="red")
            sys.exit(1)
