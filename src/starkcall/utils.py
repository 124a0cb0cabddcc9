from __future__ import annotations

from typing import Any, Union

from starknet_py.cairo.felt import encode_shortstring
from starknet_py.hash.selector import get_selector_from_name

# Stark field prime: every felt must be strictly below it.
FIELD_PRIME = 2**251 + 17 * 2**192 + 1

SHORT_STRING_MAX_LEN = 31


def parse_felt(value: Union[str, int], name: str = "value") -> int:
    """Parse a hex (0x-prefixed) or decimal felt."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a felt, got bool")
    if isinstance(value, int):
        felt = value
    else:
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                felt = int(text, 16)
            else:
                felt = int(text, 10)
        except ValueError:
            raise ValueError(f"{name} is not a valid felt: {value!r}") from None
    if felt < 0 or felt >= FIELD_PRIME:
        raise ValueError(f"{name} is out of the felt range: {value!r}")
    return felt


def encode_calldata_item(item: Any) -> int:
    """Encode one calldata item.

    Integers and numeric strings are taken as felts; any other string is
    encoded as a Cairo short string.
    """
    if isinstance(item, int) and not isinstance(item, bool):
        return parse_felt(item, "calldata item")
    if not isinstance(item, str):
        raise ValueError(f"Unsupported calldata item: {item!r}")

    text = item.strip()
    if text.lower().startswith("0x") or text.isdigit():
        return parse_felt(text, "calldata item")
    if len(text) > SHORT_STRING_MAX_LEN or not text.isascii():
        raise ValueError(
            f"Short string must be ASCII and at most {SHORT_STRING_MAX_LEN} chars: {item!r}"
        )
    return encode_shortstring(text)


def selector_from_name(function_name: Any) -> int:
    """Entry point selector; the name must be a non-empty ASCII string."""
    if not isinstance(function_name, str) or not function_name:
        raise ValueError(f"Entry point name must be a non-empty string, got {function_name!r}")
    if not function_name.isascii():
        raise ValueError(f"Entry point name must be ASCII: {function_name!r}")
    return get_selector_from_name(function_name)


def encode_calldata(items: list) -> list[int]:
    if not isinstance(items, list):
        raise ValueError(f"Calldata must be a list, got {type(items).__name__}")
    return [encode_calldata_item(item) for item in items]


def format_tx_hash(tx_hash: int) -> str:
    """Format a transaction hash as 0x-prefixed, zero-padded to width 64."""
    return f"{tx_hash:#064x}"


def to_rpc_hex(value: int) -> str:
    """Felts go over JSON-RPC as 0x-prefixed lowercase hex without padding."""
    return hex(value)


def from_rpc_hex(value: str) -> int:
    return int(value, 16)


def mask_secret(secret: str, visible: int = 4) -> str:
    if len(secret) <= visible * 2:
        return "*" * len(secret)
    return f"{secret[:visible + 2]}...{secret[-visible:]}"
