"""
Derivation configuration tests
"""

import dataclasses

import pytest

from ecdh import (
    DerivationConfig,
    DerivationMode,
    HashAlgorithm,
    InvalidConfigError,
    UnsupportedAlgorithmError,
)
from session import DerivationState


@pytest.mark.parametrize("name, expected", [
    ("SHA256", HashAlgorithm.SHA256),
    ("sha-384", HashAlgorithm.SHA384),
    ("Sha1", HashAlgorithm.SHA1),
    (HashAlgorithm.SHA512, HashAlgorithm.SHA512),
])
def test_hash_algorithm_parse(name, expected):
    assert HashAlgorithm.parse(name) is expected


@pytest.mark.parametrize("name", ["MD5", "SHA3-256", "", None, 256])
def test_hash_algorithm_parse_unsupported(name):
    with pytest.raises(UnsupportedAlgorithmError):
        HashAlgorithm.parse(name)


@pytest.mark.parametrize("name, expected", [
    ("hash", DerivationMode.HASH),
    ("HMAC", DerivationMode.HMAC),
    ("tls", DerivationMode.TLS_PRF),
    ("tls-prf", DerivationMode.TLS_PRF),
    (DerivationMode.HMAC, DerivationMode.HMAC),
])
def test_mode_parse(name, expected):
    assert DerivationMode.parse(name) is expected


def test_mode_parse_unknown():
    with pytest.raises(InvalidConfigError):
        DerivationMode.parse("pbkdf2")


def test_defaults():
    config = DerivationConfig()
    assert config.mode is DerivationMode.HASH
    assert config.hash_algorithm is HashAlgorithm.SHA256
    assert config.length == 48
    assert config.prepend is None and config.hmac_key is None


def test_normalizes_inputs():
    config = DerivationConfig(mode="hmac", hash_algorithm="sha-512", prepend=bytearray(b"ab"))
    assert config.mode is DerivationMode.HMAC
    assert config.hash_algorithm is HashAlgorithm.SHA512
    assert config.prepend == b"ab"
    assert type(config.prepend) is bytes


def test_rejects_non_bytes():
    with pytest.raises(TypeError):
        DerivationConfig(prepend="text")
    with pytest.raises(TypeError):
        DerivationConfig(length=True)


def test_immutable():
    config = DerivationConfig.for_hash()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.prepend = b"x"


def test_replace():
    config = DerivationConfig.for_hmac("SHA256", hmac_key=b"k")
    changed = config.replace(hash_algorithm="SHA384")
    assert changed.hash_algorithm is HashAlgorithm.SHA384
    assert changed.hmac_key == b"k"
    assert config.hash_algorithm is HashAlgorithm.SHA256


def test_validate_tls():
    config = DerivationConfig.for_tls_prf(b"master secret", b"seed")
    assert config.validate() is config

    with pytest.raises(InvalidConfigError):
        config.replace(label=None).validate()
    with pytest.raises(InvalidConfigError):
        config.replace(seed=None).validate()
    with pytest.raises(InvalidConfigError):
        config.replace(seed=b"").validate()
    with pytest.raises(InvalidConfigError):
        config.replace(length=0).validate()


def test_validate_ignores_unused_fields():
    # TLS fields are irrelevant to the hash mode
    DerivationConfig(mode="hash", seed=b"").validate()


def test_repr_hides_hmac_key():
    config = DerivationConfig.for_hmac(hmac_key=b"top-secret-key")
    assert "top-secret-key" not in repr(config)


def test_state_snapshot_is_independent():
    state = DerivationState()
    state.mode = DerivationMode.TLS_PRF
    state.label = b"label"
    state.seed = b"seed"

    snapshot = state.snapshot()
    state.label = b"other"

    assert snapshot.label == b"label"
    assert snapshot.mode is DerivationMode.TLS_PRF


def test_state_load():
    state = DerivationState()
    config = DerivationConfig.for_tls_prf(b"l", b"s", length=20, hash_algorithm="SHA384")
    state.load(config)
    assert state.snapshot() == config
