"""
Commands - CLI command implementations for starkcall.

- invoke:  Sign and send a contract call
- read:    Call a view function
- receipt: Show or wait for a transaction receipt

Shared helpers load settings once per invocation and turn errors into
exit codes.
"""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from ..config import ConfigError, StarknetSettings, load_settings


def get_settings(ctx: click.Context) -> StarknetSettings:
    """Load settings once per invocation, using the group's file options."""
    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        try:
            obj["settings"] = load_settings(obj.get("env_file"), obj.get("config_file"))
        except ConfigError as exc:
            fail(exc)
    return obj["settings"]


def fail(exc: Exception) -> NoReturn:
    """Print an error and exit with the exception's exit code."""
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(getattr(exc, "exit_code", 1))
