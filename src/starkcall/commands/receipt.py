"""
Receipt - Show or wait for a transaction receipt.
"""

from __future__ import annotations

import sys

import click

from ..chain.rpc import RpcError, get_transaction_receipt, receipt_succeeded, wait_for_receipt
from ..config import ConfigError
from ..utils import format_tx_hash, parse_felt
from . import fail, get_settings


@click.command()
@click.argument("tx_hash")
@click.option("--wait", is_flag=True, help="Poll until the receipt is available")
@click.option("--timeout", default=120, type=int, show_default=True, help="Wait timeout (s)")
@click.pass_context
def receipt(ctx: click.Context, tx_hash: str, wait: bool, timeout: int) -> None:
    """Show the receipt of TX_HASH."""
    settings = get_settings(ctx)
    try:
        tx = parse_felt(tx_hash, "TX_HASH")
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TX_HASH") from exc

    try:
        rpc_url = settings.require_rpc_url()
        if wait:
            data = wait_for_receipt(tx, timeout=timeout, rpc_url=rpc_url)
        else:
            data = get_transaction_receipt(tx, rpc_url=rpc_url)
    except (ConfigError, RpcError) as exc:
        fail(exc)
    except TimeoutError as exc:
        click.secho(f"WARNING: {exc}", fg="yellow", err=True)
        sys.exit(1)

    if data is None:
        click.secho(f"Transaction {format_tx_hash(tx)} not found (yet)", fg="yellow")
        sys.exit(1)

    click.echo(f"  Transaction: {format_tx_hash(tx)}")
    click.echo(f"  Finality:    {data.get('finality_status', 'unknown')}")
    click.echo(f"  Execution:   {data.get('execution_status', 'unknown')}")
    if "block_number" in data:
        click.echo(f"  Block:       {data['block_number']}")
    fee = data.get("actual_fee")
    if isinstance(fee, dict):
        click.echo(f"  Fee:         {int(fee.get('amount', '0x0'), 16)} {fee.get('unit', '')}".rstrip())

    if not receipt_succeeded(data):
        click.secho(f"  Reverted:    {data.get('revert_reason', 'unknown')}", fg="red")
        sys.exit(1)
