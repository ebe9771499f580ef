import pytest

from magma import magma_cipher
from magma.magma_cipher import (
    KAT_KEY,
    decrypt,
    encrypt,
    parse_key,
    process,
    process_block,
    round_function,
    round_keys,
    substitute,
)
from utils.errors import ValidationError

SCENARIO_KEY = "FFEEDDCCBBAA99887766554433221100F0F1F2F3F4F5F6F7F8F9FAFBFCFDFEFF"


def _sample(length: int) -> bytes:
    # Aligned samples of length 8 and 64 end in 14 and 38, outside the pad range.
    return bytes((i * 37 + 11) % 256 for i in range(length))


@pytest.mark.parametrize(
    "pt_hex, ct_hex",
    [
        ("fedcba9876543210", "4ee901e5c2d8ca3d"),
        ("92def06b3c130a59", "2b073f0494f372a0"),
    ],
)
def test_known_answer_vectors(pt_hex, ct_hex):
    words = parse_key(KAT_KEY)
    assert process_block(int(pt_hex, 16), round_keys(words)) == int(ct_hex, 16)
    assert process_block(int(ct_hex, 16), round_keys(words, decrypt=True)) == int(pt_hex, 16)


@pytest.mark.parametrize(
    "pt_hex, ct_hex",
    [
        ("1032547698badcfe", "3dcad8c2e501e94e"),
        ("590a133c6bf0de92", "a072f394043f072b"),
    ],
)
def test_blocks_are_little_endian_on_the_wire(pt_hex, ct_hex):
    # Same vectors as above, each 64-bit block stored least significant byte first.
    assert encrypt(bytes.fromhex(pt_hex), KAT_KEY).hex() == ct_hex
    assert decrypt(bytes.fromhex(ct_hex), KAT_KEY).hex() == pt_hex


def test_scenario_ciphertext_bytes():
    assert encrypt(bytes([0x01, 0x02, 0x03, 0x04]), SCENARIO_KEY).hex() == "f8626fa497a0ec24"


def test_known_answer_check_reports_ok():
    assert magma_cipher.known_answer_check()["ok"]


def test_substitution_layer():
    assert substitute(0xFDB97531) == 0x2A196F34
    assert substitute(0x2A196F34) == 0xEBD9F03A


def test_round_function():
    assert round_function(0xFEDCBA98, 0x87654321) == 0xFDCBC20C


def test_sbox_rows_are_permutations():
    assert len(magma_cipher.SBOX) == 8
    for row in magma_cipher.SBOX:
        assert sorted(row) == list(range(16))


def test_parse_key_words_and_case():
    words = parse_key(SCENARIO_KEY)
    assert len(words) == 8
    assert words[0] == 0xFFEEDDCC
    assert words[7] == 0xFCFDFEFF
    assert parse_key(SCENARIO_KEY.lower()) == words


@pytest.mark.parametrize(
    "key",
    [
        "",
        "ff" * 31,
        "ff" * 33,
        "g" + "f" * 63,
        " " + "f" * 63,
        "+" + "f" * 63,
        "0x" + "f" * 62,
    ],
)
def test_parse_key_rejects_malformed(key):
    with pytest.raises(ValidationError):
        parse_key(key)


def test_invalid_key_is_a_value_error():
    with pytest.raises(ValueError):
        encrypt(b"data", "not a key")


def test_round_key_schedule():
    words = parse_key(SCENARIO_KEY)
    schedule = round_keys(words)
    assert len(schedule) == 32
    assert schedule[:8] == schedule[8:16] == schedule[16:24] == words
    assert schedule[24:] == words[::-1]
    assert round_keys(words, decrypt=True) == schedule[::-1]


def test_scenario_four_bytes():
    data = bytes([0x01, 0x02, 0x03, 0x04])
    ct = encrypt(data, SCENARIO_KEY)
    assert len(ct) == 8
    assert decrypt(ct, SCENARIO_KEY) == data


@pytest.mark.parametrize("length", [0, 1, 7, 8, 9, 64])
def test_roundtrip_lengths(length):
    data = _sample(length)
    ct = process(data, SCENARIO_KEY)
    assert len(ct) % 8 == 0
    assert process(ct, SCENARIO_KEY, decrypt=True) == data


def test_empty_input_gives_empty_output():
    assert encrypt(b"", SCENARIO_KEY) == b""
    assert decrypt(b"", SCENARIO_KEY) == b""


def test_none_input_rejected():
    with pytest.raises(ValidationError):
        encrypt(None, SCENARIO_KEY)


def test_aligned_input_gets_no_padding_block():
    assert len(encrypt(_sample(8), SCENARIO_KEY)) == 8
    assert len(encrypt(_sample(9), SCENARIO_KEY)) == 16
    assert encrypt(b"abc", SCENARIO_KEY) == encrypt(b"abc" + b"\x05" * 5, SCENARIO_KEY)


def test_aligned_plaintext_ending_in_pad_byte_is_truncated():
    data = b"ABCDEFG\x03"
    assert decrypt(encrypt(data, SCENARIO_KEY), SCENARIO_KEY) == b"ABCDE"


def test_blocks_are_independent():
    block = b"12345678"
    ct = encrypt(block * 3, SCENARIO_KEY)
    assert ct[:8] == ct[8:16] == ct[16:24] == encrypt(block, SCENARIO_KEY)


def test_wrong_key_does_not_decrypt():
    data = _sample(16)
    ct = encrypt(data, SCENARIO_KEY)
    other = "00" * 32
    assert decrypt(ct, other) != data


def test_random_key_is_valid_and_fresh():
    k1 = magma_cipher.random_key()
    k2 = magma_cipher.random_key()
    assert len(k1) == 64 and len(parse_key(k1)) == 8
    assert k1 != k2


def test_random_key_uses_injected_source():
    assert magma_cipher.random_key(lambda n: bytes(range(n))) == bytes(range(32)).hex()
    with pytest.raises(ValidationError):
        magma_cipher.random_key(lambda n: bytes(n - 1))


def test_ecb_pattern_leakage_demo():
    info = magma_cipher.demo_ecb_pattern_leakage()
    assert info["total_blocks"] == 8
    assert info["unique_blocks"] == 2
    assert info["max_repeats"] == 7


def test_roundtrip_demo():
    res = magma_cipher.roundtrip_demo()
    assert res["ok"]
    assert res["results"][0]["ciphertext_len"] == 0
    assert res["results"][9]["ciphertext_len"] == 16
