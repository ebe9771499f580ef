"""Exception types shared by the Magma and textbook RSA engines."""

from __future__ import annotations


class CryptoError(Exception):
    """Base exception for every failure raised by the engines."""


class ValidationError(CryptoError, ValueError):
    """Malformed key, out-of-range integer or otherwise unusable input."""


class NoInverseError(CryptoError, ArithmeticError):
    """Raised when a modular inverse does not exist."""


class PrimeGenerationError(CryptoError):
    """The prime search ran out of attempts."""


class BlockOperationError(CryptoError):
    """A single RSA block failed to encrypt or decrypt.

    The underlying exception is kept on ``cause`` (and chained as
    ``__cause__``), so callers can branch on its type::

        try:
            decrypt(data, d, n)
        except BlockOperationError as err:
            if isinstance(err.cause, ValidationError):
                ...
    """

    def __init__(self, direction: str, index: int, cause: Exception):
        self.direction = direction
        self.index = index
        self.cause = cause
        super().__init__(f"Block {direction} failed at block {index}: {cause}")


__all__ = [
    "CryptoError",
    "ValidationError",
    "NoInverseError",
    "PrimeGenerationError",
    "BlockOperationError",
]
