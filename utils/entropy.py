import math
from collections import Counter


def shannon_entropy(data: bytes) -> float:
    """Return bits/byte Shannon entropy of data."""
    if not data:
        return 0.0
    counts = Counter(data)
    n = len(data)
    if n < 2:
        return 0.0
    entropy = -sum((count / n) * math.log2(count / n) for count in counts.values())
    if n < 256:
        entropy *= math.log2(256) / math.log2(n)
    return max(0.0, min(entropy, 8.0))


def block_repeats(data: bytes, block: int) -> dict[bytes, int]:
    """Count how often each ``block``-sized slice occurs in data."""
    if block <= 0:
        raise ValueError("Block size must be positive")
    return dict(Counter(data[i : i + block] for i in range(0, len(data), block)))
