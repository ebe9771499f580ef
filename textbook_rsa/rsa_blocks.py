"""Block-wise textbook RSA over arbitrary byte buffers.

Plaintext is cut into ``block_size(n) - 1`` byte chunks so every chunk is
guaranteed to be smaller than ``n``.  Each ciphertext block is written at the
full ``block_size(n)`` width, which lets :func:`decrypt` walk the stream with a
fixed stride.  No padding scheme is applied to the plaintext (no OAEP, no
PKCS#1 v1.5).
"""

from __future__ import annotations

import logging

from textbook_rsa.rsa_from_scratch import (
    DEFAULT_EXPONENT,
    KEY_BITS_RANGE,
    bytes_to_int,
    generate_key,
    int_to_bytes,
    mod_exp,
)
from utils.errors import BlockOperationError, ValidationError

logger = logging.getLogger(__name__)

KEY_ATTEMPTS = 10


def block_size(n: int) -> int:
    """Byte length of the modulus."""

    if n <= 1:
        raise ValidationError("Modulus must be greater than 1")
    return (n.bit_length() + 7) // 8


def _apply(block: bytes, exponent: int, n: int, width: int | None, what: str) -> bytes:
    if not block:
        raise ValidationError("Block cannot be empty")
    if n <= 1:
        raise ValidationError("Modulus must be greater than 1")

    value = bytes_to_int(block)
    if value >= n:
        raise ValidationError(f"{what} representative is too large for modulus N")
    return int_to_bytes(mod_exp(value, exponent, n), width)


def encrypt_block(block: bytes, exponent: int, n: int, *, width: int | None = None) -> bytes:
    """Return ``block**exponent mod n`` as big-endian bytes.

    The result is minimal-length unless ``width`` asks for left padding.
    """

    return _apply(block, exponent, n, width, "Message")


def decrypt_block(block: bytes, exponent: int, n: int, *, width: int | None = None) -> bytes:
    return _apply(block, exponent, n, width, "Ciphertext")


def encrypt(data: bytes, e: int, n: int) -> bytes:
    """Encrypt ``data`` block by block with the public exponent."""

    if data is None:
        raise ValidationError("Data cannot be None")
    if not data:
        return b""

    k = block_size(n)
    chunk = k - 1
    if chunk <= 0:
        raise ValidationError("Modulus is too small to hold a plaintext block")

    out = bytearray()
    for index, offset in enumerate(range(0, len(data), chunk)):
        try:
            out += encrypt_block(data[offset : offset + chunk], e, n, width=k)
        except (ValidationError, ArithmeticError) as exc:
            raise BlockOperationError("encrypt", index, exc) from exc

    logger.debug("Encrypted %d bytes into %d blocks of %d bytes", len(data), len(out) // k, k)
    return bytes(out)


def decrypt(data: bytes, d: int, n: int) -> bytes:
    """Decrypt a stream produced by :func:`encrypt` under the same modulus.

    Every block but the last is restored to the full plaintext chunk width.
    Leading zero bytes of the final chunk cannot be recovered.
    """

    if data is None:
        raise ValidationError("Data cannot be None")
    if not data:
        return b""

    k = block_size(n)
    offsets = range(0, len(data), k)
    last = len(offsets) - 1

    out = bytearray()
    for index, offset in enumerate(offsets):
        width = None if index == last else k - 1
        try:
            out += decrypt_block(data[offset : offset + k], d, n, width=width)
        except (ValidationError, ArithmeticError) as exc:
            raise BlockOperationError("decrypt", index, exc) from exc

    logger.debug("Decrypted %d blocks into %d bytes", len(offsets), len(out))
    return bytes(out)


def rsa_roundtrip(
    bits: int = 128,
    *,
    rng=None,
    msg: bytes = b"textbook RSA spans several blocks",
    attempts: int = KEY_ATTEMPTS,
) -> dict:
    """Generate a key and push ``msg`` through encrypt/decrypt.

    Key generation is retried up to ``attempts`` times when the default
    exponent is not coprime with phi(N); after that the last error is
    re-raised.  The returned dictionary carries the key, the ciphertext and an
    ``ok`` flag so tests can assert on it without parsing output.
    """

    low, high = KEY_BITS_RANGE
    if not low <= bits <= high:
        raise ValidationError(f"Bit size must be between {low} and {high}")

    for attempt in range(1, attempts + 1):
        try:
            key = generate_key(bits, DEFAULT_EXPONENT, rng=rng)
            break
        except ValidationError:
            logger.debug("Key generation attempt %d rejected the exponent", attempt)
            if attempt == attempts:
                raise

    ct = encrypt(msg, key.e, key.n)
    pt = decrypt(ct, key.d, key.n)
    return {
        "key": key,
        "plaintext": msg,
        "ciphertext": ct,
        "block_size": block_size(key.n),
        "blocks": len(ct) // block_size(key.n),
        "ok": pt == msg,
    }


if __name__ == "__main__":
    print("== Textbook RSA blocks ==")
    res = rsa_roundtrip(256)
    assert res["ok"], "Roundtrip failed"
    print(f"n bits: {res['key'].n.bit_length()}, blocks: {res['blocks']}, ok = {res['ok']}")
