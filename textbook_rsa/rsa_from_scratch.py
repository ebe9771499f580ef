"""Number theory for textbook RSA: codec, modular arithmetic, primes, keys.

Every routine that needs randomness takes an ``rng`` keyword.  Anything that
implements ``getrandbits`` and ``randrange`` works (``random.Random`` in tests);
when omitted the module-wide pycryptodome ``StrongRandom`` is used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from Crypto.Random.random import StrongRandom

from utils.errors import NoInverseError, PrimeGenerationError, ValidationError

logger = logging.getLogger(__name__)

SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29)
PRIME_ATTEMPTS = 1000
PRIME_CERTAINTY = 5
MIN_PRIME_BITS = 32
KEY_BITS_RANGE = (128, 4096)
DEFAULT_EXPONENT = 65537

_default_rng = StrongRandom()


def bytes_to_int(data: bytes) -> int:
    """Convert a byte-string into its non-negative big-endian integer."""

    return int.from_bytes(data, "big", signed=False)


def int_to_bytes(value: int, length: int | None = None) -> bytes:
    """Convert a non-negative integer into big-endian bytes.

    Without ``length`` the encoding is minimal, so zero becomes ``b""``.
    """

    if value < 0:
        raise ValidationError("Cannot convert negative integers")

    if length is None:
        length = (value.bit_length() + 7) // 8

    if value.bit_length() > length * 8:
        raise ValidationError("Integer too large for the requested length")

    return value.to_bytes(length, "big") if length > 0 else b""


def mod_exp(base: int, exponent: int, modulus: int) -> int:
    """Right-to-left square-and-multiply ``base**exponent % modulus``."""

    if modulus <= 1:
        raise ValidationError("Modulus must be greater than 1")
    if exponent < 0:
        raise ValidationError("Exponent must be non-negative")

    result = 1
    base %= modulus
    while exponent:
        if exponent & 1:
            result = result * base % modulus
        base = base * base % modulus
        exponent >>= 1
    return result


def egcd(a: int, b: int):
    """Iterative extended Euclid, returns ``(g, x, y)`` with ``a*x + b*y == g``."""

    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1

    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t

    return old_r, old_s, old_t


def mod_inverse(a: int, m: int) -> int:
    """Return ``x`` in ``[0, m)`` such that ``a * x % m == 1``."""

    if m <= 0:
        raise ValidationError("Modulus must be positive")
    if a == 0:
        raise NoInverseError("Zero has no modular inverse")
    if m == 1:
        return 0

    g, x, _ = egcd(a, m)
    if g != 1:
        raise NoInverseError(f"No modular inverse: gcd({a}, {m}) = {g}")
    return x % m


def miller_rabin(n: int, certainty: int = PRIME_CERTAINTY, *, rng=None) -> bool:
    """Return ``True`` when ``n`` is probably prime.

    A composite survives ``certainty`` rounds with probability at most
    ``4**-certainty``.
    """

    if certainty < 1:
        raise ValidationError("Certainty must be at least 1")
    if n in (2, 3):
        return True
    if n < 2 or n % 2 == 0:
        return False

    rng = rng or _default_rng

    # Write n-1 as (2**s) * d with d odd.
    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(certainty):
        a = rng.randrange(2, n - 1)  # 2 <= a <= n-2
        x = mod_exp(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(s - 1):
            x = mod_exp(x, 2, n)
            if x == 1:
                return False
            if x == n - 1:
                break
        else:
            return False
    return True


def gen_prime(
    bits: int,
    *,
    rng=None,
    attempts: int = PRIME_ATTEMPTS,
    certainty: int = PRIME_CERTAINTY,
) -> int:
    """Generate a random probable prime of exactly ``bits`` bits."""

    if bits < MIN_PRIME_BITS:
        raise ValidationError(f"Prime size must be at least {MIN_PRIME_BITS} bits")

    rng = rng or _default_rng

    for attempt in range(1, attempts + 1):
        cand = rng.getrandbits(bits)
        # Ensure the number has the requested size and is odd.
        cand |= (1 << (bits - 1)) | 1

        if any(cand != p and cand % p == 0 for p in SMALL_PRIMES):
            continue

        if miller_rabin(cand, certainty, rng=rng):
            logger.debug("Found %d-bit prime after %d attempts", bits, attempt)
            return cand

    raise PrimeGenerationError(f"Failed to generate prime number after {attempts} attempts")


@dataclass(frozen=True)
class RsaPublicKey:
    n: int
    e: int


@dataclass(frozen=True)
class RsaPrivateKey:
    n: int
    d: int


@dataclass(frozen=True)
class KeyPair:
    """Modulus with its public and private exponents."""

    n: int
    e: int
    d: int

    @property
    def public(self) -> RsaPublicKey:
        return RsaPublicKey(n=self.n, e=self.e)

    @property
    def private(self) -> RsaPrivateKey:
        return RsaPrivateKey(n=self.n, d=self.d)


def generate_key(bits: int, e: int = DEFAULT_EXPONENT, *, rng=None) -> KeyPair:
    """Generate a key pair from two distinct ``bits``-bit primes.

    ``e`` is validated against φ(N) but never re-chosen: an exponent that
    shares a factor with φ(N) raises :class:`ValidationError` and the caller
    decides whether to retry.
    """

    low, high = KEY_BITS_RANGE
    if not low <= bits <= high:
        raise ValidationError(f"Bit size must be between {low} and {high}")
    if e < 3:
        raise ValidationError("Public exponent must be at least 3")

    rng = rng or _default_rng

    p = gen_prime(bits, rng=rng)
    q = gen_prime(bits, rng=rng)
    while q == p:
        q = gen_prime(bits, rng=rng)

    n = p * q
    phi = (p - 1) * (q - 1)

    if not 1 < e < phi:
        raise ValidationError("Public exponent e must be less than phi(N)")
    if egcd(e, phi)[0] != 1:
        raise ValidationError("Public exponent e must be coprime with phi(N)")

    d = mod_inverse(e, phi)
    logger.debug("Generated RSA key pair with %d-bit modulus", n.bit_length())
    return KeyPair(n=n, e=e, d=d)
