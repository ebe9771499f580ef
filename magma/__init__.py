"""Magma 64-bit block cipher in independent-block (ECB) mode."""

from __future__ import annotations

from .magma_cipher import (
    BLOCK_SIZE,
    SBOX,
    decrypt,
    encrypt,
    parse_key,
    process,
    random_key,
    round_keys,
)

__all__ = [
    "BLOCK_SIZE",
    "SBOX",
    "decrypt",
    "encrypt",
    "parse_key",
    "process",
    "random_key",
    "round_keys",
]
