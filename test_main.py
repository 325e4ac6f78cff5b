"""
Command line tests
"""

import pytest

from main import main


def test_default_run(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "All derivations agree (32 bytes)" in out


@pytest.mark.parametrize("argv", [
    ["--kdf", "hmac", "--hash", "SHA384", "--curve", "P-384", "--hmac-key", "000102"],
    ["--kdf", "hash", "--prepend", "0a0b", "--append", "0c"],
    ["--kdf", "tls", "--curve", "P-521"],
])
def test_modes(argv):
    assert main(argv) == 0


def test_tls_length(capsys):
    assert main(["--kdf", "tls", "--seed", "00112233", "--length", "50"]) == 0
    assert "(50 bytes)" in capsys.readouterr().out


def test_keystore_reused(tmp_path):
    assert main(["--keystore", str(tmp_path)]) == 0
    assert (tmp_path / "alice.pem").exists()
    assert (tmp_path / "bob.pem").exists()

    before = (tmp_path / "alice.pem").read_bytes()
    assert main(["--keystore", str(tmp_path)]) == 0
    assert (tmp_path / "alice.pem").read_bytes() == before

    assert main(["--keystore", str(tmp_path), "--new-keys"]) == 0
    assert (tmp_path / "alice.pem").read_bytes() != before


@pytest.mark.parametrize("argv", [
    ["--curve", "P-192"],
    ["--hash", "MD5"],
    ["--kdf", "tls", "--seed", "00", "--length", "0"],
])
def test_errors(argv, capsys):
    assert main(argv) == 2
    assert "Error" in capsys.readouterr().err


def test_bad_hex():
    with pytest.raises(SystemExit):
        main(["--prepend", "zz"])
