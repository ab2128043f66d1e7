from __future__ import annotations

import base58

# Base58 alphabet without 0, O, I, l
_B58_CHARS = set("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")


def to_base58check(address: str) -> str:
    """
    TronGrid reports owner_address as 21-byte hex (0x41 prefix + 20 bytes).
    Wallets show the Base58Check form (T...). Display only: matching compares
    the raw strings.
    """
    if address.startswith("T") and set(address) <= _B58_CHARS:
        return address

    try:
        raw = bytes.fromhex(address)
    except ValueError as e:
        raise ValueError(f"Not a hex or base58 TRON address: {address!r}") from e
    if len(raw) != 21:
        raise ValueError(f"TRON hex address must be 21 bytes, got {len(raw)}")
    return base58.b58encode_check(raw).decode("ascii")


def display_address(address: str) -> str:
    try:
        return to_base58check(address)
    except ValueError:
        return address
