"""
Single-owner Starknet accounts.

Turns configured key material into an SDK Account:

- StarknetContext groups the JSON-RPC provider, the signing key pair and
  the account address.
- starknet_account() wraps a context into a starknet-py Account bound to a
  chain id. Signing, nonce lookup and fee estimation stay in the SDK.

Keys are read from STARKNET_PRIVATE_KEY (see config.py) and never logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger
from starknet_py.net.account.account import Account
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.models.chains import StarknetChainId
from starknet_py.net.signer.stark_curve_signer import KeyPair

from ..chain.rpc import get_chain_id
from ..config import ConfigError, ENV_VARS, StarknetSettings, load_settings
from ..utils import parse_felt

CHAIN_NAMES: dict[str, StarknetChainId] = {
    "SN_MAIN": StarknetChainId.MAINNET,
    "MAINNET": StarknetChainId.MAINNET,
    "SN_SEPOLIA": StarknetChainId.SEPOLIA,
    "SEPOLIA": StarknetChainId.SEPOLIA,
}

AUTO_CHAIN = "auto"

KNOWN_CHAIN_IDS = {int(chain) for chain in StarknetChainId}


@dataclass
class StarknetContext:
    """Connection context needed to build an account."""

    provider: FullNodeClient
    key_pair: KeyPair
    address: int
    rpc_url: str
    chain: str


def resolve_chain_id(value: Union[str, int], rpc_url: Optional[str] = None) -> int:
    """
    Resolve a chain id setting to its integer value.

    Args:
        value: Chain name (SN_SEPOLIA, SN_MAIN), numeric felt, or "auto"
        rpc_url: RPC endpoint, queried when value is "auto"

    Returns:
        Chain id as int

    Raises:
        ConfigError: If the value is not a known name or a valid felt
    """
    if isinstance(value, int):
        return value

    text = value.strip()
    if text.lower() == AUTO_CHAIN:
        if rpc_url is None:
            raise ConfigError("STARKNET_CHAIN_ID=auto needs an RPC URL")
        chain_id = get_chain_id(rpc_url=rpc_url)
        logger.debug("chain id from node: {}", hex(chain_id))
        return chain_id

    named = CHAIN_NAMES.get(text.upper())
    if named is not None:
        return int(named)

    try:
        return parse_felt(text, ENV_VARS["chain_id"])
    except ValueError as exc:
        raise ConfigError(
            f"Unknown chain id {value!r}. Use SN_SEPOLIA, SN_MAIN, a number or 'auto'."
        ) from exc


def starknet_call_context(settings: Optional[StarknetSettings] = None) -> StarknetContext:
    """
    Create a StarknetContext from configuration.

    Reads STARKNET_RPC_URL, STARKNET_PRIVATE_KEY and STARKNET_ACCOUNT_ADDRESS.

    Raises:
        ConfigError: If any value is missing or cannot be parsed
    """
    settings = settings or load_settings()

    rpc_url = settings.require_rpc_url()
    private_key = settings.require_felt("private_key")
    address = settings.require_felt("account_address")

    provider = FullNodeClient(node_url=rpc_url)
    key_pair = KeyPair.from_private_key(private_key)

    return StarknetContext(
        provider=provider,
        key_pair=key_pair,
        address=address,
        rpc_url=rpc_url,
        chain=settings.chain,
    )


def starknet_account(
    provider: FullNodeClient,
    key_pair: KeyPair,
    address: int,
    chain_id: Union[str, int],
    rpc_url: Optional[str] = None,
) -> Account:
    """
    Create a single-owner Account from the provided components.

    Args:
        provider: JSON-RPC client for node communication
        key_pair: Stark curve key pair used for signing
        address: Account contract address
        chain_id: Chain id (name, number or "auto")
        rpc_url: Needed only to resolve chain_id="auto"

    Returns:
        The initialized Account
    """
    resolved = resolve_chain_id(chain_id, rpc_url=rpc_url)
    logger.debug("account {} on chain {}", hex(address), hex(resolved))
    chain: Union[StarknetChainId, int] = resolved
    if resolved in KNOWN_CHAIN_IDS:
        chain = StarknetChainId(resolved)
    return Account(
        client=provider,
        address=address,
        key_pair=key_pair,
        chain=chain,
    )


def account_from_context(context: StarknetContext) -> Account:
    return starknet_account(
        context.provider,
        context.key_pair,
        context.address,
        context.chain,
        rpc_url=context.rpc_url,
    )
