"""Textbook RSA built on hand-written modular arithmetic."""

from __future__ import annotations

from .rsa_from_scratch import (
    KeyPair,
    RsaPrivateKey,
    RsaPublicKey,
    bytes_to_int,
    egcd,
    gen_prime,
    generate_key,
    int_to_bytes,
    miller_rabin,
    mod_exp,
    mod_inverse,
)
from .rsa_blocks import block_size, decrypt, decrypt_block, encrypt, encrypt_block

__all__ = [
    "KeyPair",
    "RsaPrivateKey",
    "RsaPublicKey",
    "block_size",
    "bytes_to_int",
    "decrypt",
    "decrypt_block",
    "egcd",
    "encrypt",
    "encrypt_block",
    "gen_prime",
    "generate_key",
    "int_to_bytes",
    "miller_rabin",
    "mod_exp",
    "mod_inverse",
]
