"""
starkcall CLI

Command-line interface for sending Starknet contract calls from a
single-owner account.

Connection parameters come from STARKNET_* environment variables, a .env
file, or a .config.toml file (see config.py).

Commands:
  invoke   - Sign and send a contract call (default: mint_lords)
  read     - Call a view function, no transaction
  receipt  - Show or wait for a transaction receipt
  whoami   - Show the configured account and its nonce
  info     - Show effective configuration and node status
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from .chain.rpc import RpcError, get_block_number, get_chain_id, get_nonce, get_spec_version
from .commands import fail, get_settings
from .config import ConfigError, ENV_VARS
from .wallet.account import resolve_chain_id


# ============ Constants ============

VERSION = "0.1.0"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG" if verbose else "WARNING")


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="starkcall")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to .env file (default: ./.env)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to TOML config (default: ./.config.toml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    env_file: Optional[Path],
    config_file: Optional[Path],
    verbose: bool,
) -> None:
    """starkcall - send Starknet contract calls from a single-owner account."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["config_file"] = config_file


# ============ Top-level Commands ============

from .commands.invoke import invoke
from .commands.read import read
from .commands.receipt import receipt

cli.add_command(invoke)
cli.add_command(read)
cli.add_command(receipt)


# ============ Identity ============


@cli.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the configured account and its nonce."""
    settings = get_settings(ctx)
    try:
        address = settings.require_felt("account_address")
        rpc_url = settings.require_rpc_url()
    except ConfigError as exc:
        fail(exc)

    click.echo(f"Address: {address:#066x}")
    try:
        nonce = get_nonce(address, rpc_url=rpc_url)
        click.echo(f"Nonce:   {nonce}")
    except RpcError as exc:
        fail(exc)


# ============ Info ============


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show effective configuration and node status."""
    settings = get_settings(ctx)

    click.secho("  Configuration ──────────────────────────", fg="cyan")
    click.echo()
    shown = settings.describe()
    for name, env_var in ENV_VARS.items():
        source = settings.sources.get(name)
        suffix = click.style(f"  ({source})", dim=True) if source else ""
        click.echo(click.style(f"  {env_var:<26} ", dim=True) + shown[env_var] + suffix)
    click.echo()

    click.secho("  Node ───────────────────────────────────", fg="cyan")
    click.echo()
    try:
        rpc_url = settings.require_rpc_url()
    except ConfigError as exc:
        click.echo(click.style("  Status:      ", dim=True) + click.style(str(exc), fg="yellow"))
        click.echo()
        return

    try:
        node_chain = get_chain_id(rpc_url=rpc_url)
        spec_version = get_spec_version(rpc_url=rpc_url)
        block = get_block_number(rpc_url=rpc_url)
    except RpcError as exc:
        click.echo(click.style("  Status:      ", dim=True) + click.style(f"unreachable ({exc})", fg="red"))
        click.echo()
        return

    click.echo(click.style("  Chain id:    ", dim=True) + hex(node_chain))
    click.echo(click.style("  RPC spec:    ", dim=True) + str(spec_version))
    click.echo(click.style("  Block:       ", dim=True) + str(block))

    try:
        configured = resolve_chain_id(settings.chain, rpc_url=rpc_url)
    except ConfigError as exc:
        click.echo(click.style("  Chain check: ", dim=True) + click.style(str(exc), fg="yellow"))
    else:
        if configured != node_chain:
            click.echo(
                click.style("  Chain check: ", dim=True)
                + click.style(f"mismatch (configured {hex(configured)})", fg="yellow")
            )
        else:
            click.echo(click.style("  Chain check: ", dim=True) + click.style("ok", fg="green"))
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """starkcall CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
