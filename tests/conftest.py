import pathlib
import random
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(scope="session")
def rsa_key():
    """A 128-bit-prime key pair from a seeded generator."""
    from textbook_rsa.rsa_from_scratch import generate_key
    from utils.errors import ValidationError

    rng = random.Random(2024)
    while True:
        try:
            return generate_key(128, rng=rng)
        except ValidationError:
            continue


@pytest.fixture
def textbook_key():
    # p=61, q=53
    return {"n": 3233, "e": 17, "d": 2753, "phi": 3120}
