"""
Configuration loading for starkcall.

Connection parameters come from three sources, highest precedence first:

1. Process environment (STARKNET_RPC_URL, STARKNET_PRIVATE_KEY, ...)
2. A .env file (default: ./.env)
3. A .config.toml file (default: ./.config.toml), either with top-level
   environment-style keys or a [starknet] table of lowercase keys.

Missing files are ignored. Validation of individual values happens when
they are read through the accessor methods, so commands that do not need
e.g. a contract address never fail on it.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
from dotenv import dotenv_values
from loguru import logger

from .utils import mask_secret, parse_felt

DEFAULT_ENV_FILE = Path(".env")
DEFAULT_CONFIG_FILE = Path(".config.toml")
DEFAULT_CHAIN = "SN_SEPOLIA"

# setting name -> environment variable
ENV_VARS: dict[str, str] = {
    "rpc_url": "STARKNET_RPC_URL",
    "private_key": "STARKNET_PRIVATE_KEY",
    "account_address": "STARKNET_ACCOUNT_ADDRESS",
    "contract_address": "STARKNET_CONTRACT_ADDRESS",
    "chain_id": "STARKNET_CHAIN_ID",
}


class ConfigError(RuntimeError):
    exit_code: int = 2


@dataclass(frozen=True)
class StarknetSettings:
    """Raw connection settings plus where each value came from."""

    rpc_url: Optional[str] = None
    private_key: Optional[str] = None
    account_address: Optional[str] = None
    contract_address: Optional[str] = None
    chain_id: Optional[str] = None
    sources: dict[str, str] = field(default_factory=dict, compare=False)

    def require(self, name: str) -> str:
        value = getattr(self, name)
        if not value:
            raise ConfigError(f"cannot find {ENV_VARS[name]} env")
        return value

    def require_rpc_url(self) -> str:
        url = self.require("rpc_url")
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise ConfigError(f"{ENV_VARS['rpc_url']} is not a valid URL: {exc}") from exc
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ConfigError(
                f"{ENV_VARS['rpc_url']} must be an http(s) URL, got {url!r}"
            )
        return url

    def require_felt(self, name: str) -> int:
        raw = self.require(name)
        try:
            return parse_felt(raw, ENV_VARS[name])
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    @property
    def chain(self) -> str:
        return self.chain_id or DEFAULT_CHAIN

    def describe(self) -> dict[str, str]:
        """Settings for display; the private key is masked."""
        shown: dict[str, str] = {}
        for name, env_var in ENV_VARS.items():
            value = getattr(self, name)
            if not value:
                shown[env_var] = "(not set)"
            elif name == "private_key":
                shown[env_var] = mask_secret(value)
            else:
                shown[env_var] = value
        return shown


def _clean(value: Any) -> str:
    """Normalize a raw setting; blank values count as missing."""
    if value is None:
        return ""
    return str(value).strip()


def _read_toml(path: Path) -> dict[str, str]:
    """Read settings from a .config.toml file."""
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    values: dict[str, str] = {}
    table: Any = data.get("starknet", {})
    if not isinstance(table, dict):
        raise ConfigError(f"[starknet] in {path} must be a table")

    for name, env_var in ENV_VARS.items():
        value = _clean(data.get(env_var)) or _clean(table.get(name))
        if value:
            values[name] = value
    return values


def _read_env_file(path: Path) -> dict[str, str]:
    raw = dotenv_values(path)
    values: dict[str, str] = {}
    for name, env_var in ENV_VARS.items():
        value = _clean(raw.get(env_var))
        if value:
            values[name] = value
    return values


def load_settings(
    env_path: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> StarknetSettings:
    """
    Load Starknet settings from the environment, .env and .config.toml.

    Args:
        env_path: Path to .env file (default: ./.env)
        config_path: Path to TOML config file (default: ./.config.toml)

    Returns:
        StarknetSettings with every value found (unvalidated)

    Raises:
        ConfigError: If the TOML file exists but cannot be parsed
    """
    env_path = env_path or DEFAULT_ENV_FILE
    config_path = config_path or DEFAULT_CONFIG_FILE

    merged: dict[str, str] = {}
    sources: dict[str, str] = {}

    layers: list[tuple[str, dict[str, str]]] = []
    if config_path.is_file():
        layers.append((str(config_path), _read_toml(config_path)))
    if env_path.is_file():
        layers.append((str(env_path), _read_env_file(env_path)))
    layers.append(
        (
            "environment",
            {
                name: _clean(os.environ.get(env_var))
                for name, env_var in ENV_VARS.items()
                if _clean(os.environ.get(env_var))
            },
        )
    )

    # Later layers win.
    for source, values in layers:
        for name, value in values.items():
            merged[name] = value
            sources[name] = source

    for name, source in sources.items():
        logger.debug("{} loaded from {}", ENV_VARS[name], source)

    return StarknetSettings(**merged, sources=sources)
