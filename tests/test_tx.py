"""Tests for invoke transaction building and submission."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest
from starknet_py.hash.selector import get_selector_from_name
from starknet_py.net.client_errors import ClientError

from starkcall.chain.tx import (
    DEFAULT_FUNCTION,
    TransactionError,
    build_call,
    load_calls_file,
    send_invoke,
    starknet_call,
)
from starkcall.chain.rpc import RpcError
from starkcall.config import StarknetSettings

CONTRACT = 0x163D45D352D9563B810FC820CD52D1282C5F8C8E0B4D66ECC88853B3DA1F34D


def fake_account(tx_hash: int = 0xABC) -> MagicMock:
    account = MagicMock()
    account.execute_v3 = AsyncMock(return_value=SimpleNamespace(transaction_hash=tx_hash))
    return account


class TestBuildCall:
    """Tests for build_call function."""

    def test_default_entry_point(self) -> None:
        call = build_call(CONTRACT, DEFAULT_FUNCTION)
        assert DEFAULT_FUNCTION == "mint_lords"
        assert call.to_addr == CONTRACT
        assert call.selector == get_selector_from_name("mint_lords")
        assert call.calldata == []

    def test_calldata_kept_in_order(self) -> None:
        call = build_call(CONTRACT, "transfer", (3, 2, 1))
        assert call.calldata == [3, 2, 1]


class TestLoadCallsFile:
    """Tests for multicall files."""

    def test_loads_calls(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text(
            json.dumps(
                [
                    {"to": hex(CONTRACT), "function": "mint_lords"},
                    {"to": "0x1", "function": "set_name", "calldata": ["lords", 5]},
                ]
            ),
            encoding="utf-8",
        )
        calls = load_calls_file(path)
        assert len(calls) == 2
        assert calls[0].to_addr == CONTRACT
        assert calls[1].selector == get_selector_from_name("set_name")
        assert calls[1].calldata == [int.from_bytes(b"lords", "big"), 5]

    def test_rejects_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="non-empty"):
            load_calls_file(path)

    def test_rejects_missing_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text('[{"to": "0x1"}]', encoding="utf-8")
        with pytest.raises(ValueError, match="'to' and 'function'"):
            load_calls_file(path)

    def test_rejects_string_calldata(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text('[{"to": "0x1", "function": "f", "calldata": "12"}]', encoding="utf-8")
        with pytest.raises(ValueError, match=r"Call #0 .*'calldata' must be a JSON array"):
            load_calls_file(path)

    def test_rejects_non_string_function(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text(
            '[{"to": "0x1", "function": "f"}, {"to": "0x2", "function": 5}]', encoding="utf-8"
        )
        with pytest.raises(ValueError, match=r"Call #1 .*non-empty string"):
            load_calls_file(path)

    def test_rejects_non_ascii_function(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text('[{"to": "0x1", "function": "caf\u00e9"}]', encoding="utf-8")
        with pytest.raises(ValueError, match=r"Call #0 .*ASCII"):
            load_calls_file(path)

    def test_bad_address_names_call(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text('[{"to": "nope", "function": "f"}]', encoding="utf-8")
        with pytest.raises(ValueError, match=r"Call #0 .*'to'"):
            load_calls_file(path)

    def test_rejects_bad_json(self, tmp_path: Path) -> None:
        path = tmp_path / "calls.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_calls_file(path)


class TestStarknetCall:
    """Tests for the async executor."""

    def test_executes_v3_with_estimation(self) -> None:
        account = fake_account(0x123)
        calls = [build_call(CONTRACT, "mint_lords")]

        result = asyncio.run(starknet_call(account, calls))

        assert result.transaction_hash == 0x123
        account.execute_v3.assert_awaited_once_with(calls=calls, nonce=None, auto_estimate=True)

    def test_explicit_nonce(self) -> None:
        account = fake_account()
        asyncio.run(starknet_call(account, [build_call(CONTRACT, "mint_lords")], nonce=7))
        assert account.execute_v3.await_args.kwargs["nonce"] == 7

    def test_no_calls(self) -> None:
        with pytest.raises(TransactionError, match="No calls"):
            asyncio.run(starknet_call(fake_account(), []))

    def test_client_error_wrapped(self) -> None:
        account = fake_account()
        account.execute_v3.side_effect = ClientError(message="Account validation failed", code=55)

        with pytest.raises(TransactionError, match="Account validation failed") as excinfo:
            asyncio.run(starknet_call(account, [build_call(CONTRACT, "mint_lords")]))

        assert isinstance(excinfo.value.__cause__, ClientError)
        assert excinfo.value.exit_code == 4

    def test_unreachable_node_is_rpc_error(self) -> None:
        account = fake_account()
        account.execute_v3.side_effect = aiohttp.ClientConnectionError("Connection refused")

        with pytest.raises(RpcError, match="Connection refused") as excinfo:
            asyncio.run(starknet_call(account, [build_call(CONTRACT, "mint_lords")]))

        assert isinstance(excinfo.value.__cause__, aiohttp.ClientConnectionError)
        assert excinfo.value.exit_code == 3

    def test_node_timeout_is_rpc_error(self) -> None:
        account = fake_account()
        account.execute_v3.side_effect = asyncio.TimeoutError()

        with pytest.raises(RpcError):
            asyncio.run(starknet_call(account, [build_call(CONTRACT, "mint_lords")]))


class TestSendInvoke:
    """Tests for the synchronous convenience wrapper."""

    @pytest.fixture()
    def settings(self) -> StarknetSettings:
        return StarknetSettings(
            rpc_url="http://127.0.0.1:5050",
            private_key="0x1",
            account_address="0x2",
        )

    def test_without_wait(self, settings: StarknetSettings) -> None:
        account = fake_account(0xFEED)
        with patch("starkcall.chain.tx.account_from_context", return_value=account), patch(
            "starkcall.chain.tx.wait_for_receipt"
        ) as mock_wait:
            result = send_invoke([build_call(CONTRACT, "mint_lords")], settings=settings, wait=False)

        assert result == {"tx_hash": 0xFEED}
        mock_wait.assert_not_called()

    def test_wait_succeeded(self, settings: StarknetSettings) -> None:
        receipt = {"execution_status": "SUCCEEDED", "finality_status": "ACCEPTED_ON_L2"}
        with patch("starkcall.chain.tx.account_from_context", return_value=fake_account(0xFEED)), patch(
            "starkcall.chain.tx.wait_for_receipt", return_value=receipt
        ) as mock_wait:
            result = send_invoke([build_call(CONTRACT, "mint_lords")], settings=settings, timeout=30)

        mock_wait.assert_called_once_with(0xFEED, timeout=30, rpc_url="http://127.0.0.1:5050")
        assert result["status"] == 1
        assert result["receipt"] is receipt

    def test_wait_reverted(self, settings: StarknetSettings) -> None:
        receipt = {"execution_status": "REVERTED", "revert_reason": "insufficient balance"}
        with patch("starkcall.chain.tx.account_from_context", return_value=fake_account()), patch(
            "starkcall.chain.tx.wait_for_receipt", return_value=receipt
        ):
            result = send_invoke([build_call(CONTRACT, "mint_lords")], settings=settings)

        assert result["status"] == 0

    def test_wait_timeout_names_hash(self, settings: StarknetSettings) -> None:
        with patch("starkcall.chain.tx.account_from_context", return_value=fake_account(0xFEED)), patch(
            "starkcall.chain.tx.wait_for_receipt",
            side_effect=TimeoutError("Transaction 0xfeed not confirmed within 1s"),
        ):
            with pytest.raises(TimeoutError, match="0xfeed"):
                send_invoke([build_call(CONTRACT, "mint_lords")], settings=settings, timeout=1)
