"""Tests for context loading and single-owner account construction."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from starknet_py.net.account.account import Account
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.models.chains import StarknetChainId
from starknet_py.net.signer.stark_curve_signer import KeyPair

from starkcall.config import ConfigError, StarknetSettings
from starkcall.wallet.account import (
    account_from_context,
    resolve_chain_id,
    starknet_account,
    starknet_call_context,
)

RPC_URL = "http://127.0.0.1:5050"


@pytest.fixture()
def settings() -> StarknetSettings:
    return StarknetSettings(
        rpc_url=RPC_URL,
        private_key="0x5ce311283aa15aa3dc58d99fe122cdaa389615e7d800f98fab238c5a7c8d624",
        account_address="0x54b9b1b06e7110f1ef0b0c3467610438311da4680d3c75d557b52788591741",
        contract_address="0x163d45d352d9563b810fc820cd52d1282c5f8c8e0b4d66ecc88853b3da1f34d",
    )


class TestResolveChainId:
    """Tests for resolve_chain_id function."""

    def test_default_names(self) -> None:
        assert resolve_chain_id("SN_SEPOLIA") == StarknetChainId.SEPOLIA
        assert resolve_chain_id("sn_main") == StarknetChainId.MAINNET

    def test_numeric(self) -> None:
        # Katana devnet chain id ("KATANA")
        assert resolve_chain_id("0x4b4154414e41") == 0x4B4154414E41

    def test_int_passthrough(self) -> None:
        assert resolve_chain_id(42) == 42

    def test_unknown_name(self) -> None:
        with pytest.raises(ConfigError, match="Unknown chain id"):
            resolve_chain_id("SN_GOERLI")

    def test_auto_queries_node(self) -> None:
        with patch("starkcall.wallet.account.get_chain_id", return_value=0x1234) as mock_chain:
            assert resolve_chain_id("auto", rpc_url=RPC_URL) == 0x1234
        mock_chain.assert_called_once_with(rpc_url=RPC_URL)

    def test_auto_without_url(self) -> None:
        with pytest.raises(ConfigError, match="needs an RPC URL"):
            resolve_chain_id("auto")


class TestStarknetCallContext:
    """Tests for starknet_call_context function."""

    def test_builds_context(self, settings: StarknetSettings) -> None:
        context = starknet_call_context(settings)
        assert isinstance(context.provider, FullNodeClient)
        assert isinstance(context.key_pair, KeyPair)
        assert context.key_pair.private_key == int(settings.private_key, 16)
        assert context.address == int(settings.account_address, 16)
        assert context.rpc_url == RPC_URL
        assert context.chain == "SN_SEPOLIA"

    @pytest.mark.parametrize(
        "missing, env_var",
        [
            ("rpc_url", "STARKNET_RPC_URL"),
            ("private_key", "STARKNET_PRIVATE_KEY"),
            ("account_address", "STARKNET_ACCOUNT_ADDRESS"),
        ],
    )
    def test_missing_values(self, settings: StarknetSettings, missing: str, env_var: str) -> None:
        values = {
            "rpc_url": settings.rpc_url,
            "private_key": settings.private_key,
            "account_address": settings.account_address,
        }
        values[missing] = None
        with pytest.raises(ConfigError, match=f"cannot find {env_var} env"):
            starknet_call_context(StarknetSettings(**values))

    def test_contract_address_not_required(self, settings: StarknetSettings) -> None:
        partial = StarknetSettings(
            rpc_url=settings.rpc_url,
            private_key=settings.private_key,
            account_address=settings.account_address,
        )
        assert starknet_call_context(partial).address == int(settings.account_address, 16)

    def test_bad_private_key(self, settings: StarknetSettings) -> None:
        bad = StarknetSettings(
            rpc_url=settings.rpc_url,
            private_key="0xnothex",
            account_address=settings.account_address,
        )
        with pytest.raises(ConfigError, match="STARKNET_PRIVATE_KEY"):
            starknet_call_context(bad)


class TestStarknetAccount:
    """Tests for starknet_account function."""

    def test_builds_account(self, settings: StarknetSettings) -> None:
        context = starknet_call_context(settings)
        account = starknet_account(
            context.provider, context.key_pair, context.address, "SN_SEPOLIA"
        )
        assert isinstance(account, Account)
        assert account.address == context.address
        assert account.client is context.provider

    def test_from_context_uses_configured_chain(self, settings: StarknetSettings) -> None:
        context = starknet_call_context(settings)
        with patch("starkcall.wallet.account.Account") as mock_account:
            account_from_context(context)
        kwargs = mock_account.call_args.kwargs
        assert kwargs["chain"] == StarknetChainId.SEPOLIA
        assert kwargs["address"] == context.address
        assert kwargs["key_pair"] is context.key_pair

    def test_custom_chain_passed_as_int(self, settings: StarknetSettings) -> None:
        context = starknet_call_context(settings)
        with patch("starkcall.wallet.account.Account") as mock_account:
            starknet_account(context.provider, context.key_pair, context.address, "0x4b4154414e41")
        assert mock_account.call_args.kwargs["chain"] == 0x4B4154414E41
