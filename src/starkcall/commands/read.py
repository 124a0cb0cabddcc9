"""
Read - Call a view function without sending a transaction.
"""

from __future__ import annotations

from typing import Optional

import click

from ..chain.rpc import RpcError, call_contract
from ..config import ConfigError
from ..utils import parse_felt, selector_from_name
from . import fail, get_settings
from .invoke import parse_calldata_option


@click.command()
@click.option("--contract", default=None, help="Contract address (default: STARKNET_CONTRACT_ADDRESS)")
@click.option("--function", "func_name", required=True, help="Entry point name")
@click.option("--calldata", "calldata_json", default="[]", help="Calldata as JSON array")
@click.option("--block", "block_id", default="latest", show_default=True, help="Block tag")
@click.pass_context
def read(
    ctx: click.Context,
    contract: Optional[str],
    func_name: str,
    calldata_json: str,
    block_id: str,
) -> None:
    """Call a view function and print the returned felts."""
    settings = get_settings(ctx)
    calldata = parse_calldata_option(calldata_json)
    try:
        selector_from_name(func_name)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--function") from exc

    try:
        if contract is not None:
            target = parse_felt(contract, "--contract")
        else:
            target = settings.require_felt("contract_address")
        rpc_url = settings.require_rpc_url()
    except ConfigError as exc:
        fail(exc)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--contract") from exc

    try:
        result = call_contract(target, func_name, calldata, block_id=block_id, rpc_url=rpc_url)
    except RpcError as exc:
        fail(exc)

    if not result:
        click.echo("(no return value)")
        return
    for i, value in enumerate(result):
        click.echo(f"  [{i}] {hex(value)} ({value})")
