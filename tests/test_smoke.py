import pytest


def test_magma_demo_cli(capsys):
    from crypto_cli import main

    assert main(["--run", "magma", "--plain"]) == 0
    out = capsys.readouterr().out
    assert "4ee901e5c2d8ca3d" in out
    assert "All checks passed." in out


def test_rsa_demo_cli(capsys):
    from crypto_cli import main

    assert main(["--run", "rsa", "--plain", "--bits", "128"]) == 0
    out = capsys.readouterr().out
    assert "Encrypt 65: 2790" in out
    assert "e*d mod phi: 1" in out


def test_entropy_demo_cli(capsys):
    from crypto_cli import main

    assert main(["--run", "entropy", "--plain"]) == 0
    assert "Magma ECB ciphertext" in capsys.readouterr().out


def test_cli_reports_crypto_errors(capsys):
    from crypto_cli import main

    assert main(["--run", "rsa", "--plain", "--bits", "16"]) == 1
    assert "Demo failed" in capsys.readouterr().out


def test_cli_log_level_from_environment(monkeypatch):
    from crypto_cli import LOG_LEVEL_ENV, parse_args

    monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")
    assert parse_args([]).log_level == "DEBUG"
    assert parse_args([]).run == "all"


def test_cli_rejects_unknown_demo():
    from crypto_cli import parse_args

    with pytest.raises(SystemExit):
        parse_args(["--run", "aes"])


def test_entropy_helpers():
    from utils.entropy import block_repeats, shannon_entropy

    assert shannon_entropy(b"") == 0.0
    assert shannon_entropy(bytes(64)) == 0.0
    assert shannon_entropy(bytes(range(256))) == pytest.approx(8.0)
    assert block_repeats(b"AAAABBBBAAAA", 4) == {b"AAAA": 2, b"BBBB": 1}
