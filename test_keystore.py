"""
Key store tests
"""

import os
import stat

import pytest

from ecdh import KeyStoreError
from ecdh.crypto import KeyHandle
from keystore import KeyStore


@pytest.fixture()
def store(tmp_path):
    yield KeyStore(str(tmp_path))


def test_create_and_open(store):
    handle = store.create_key_pair("P-384", name="server")
    assert handle.name == "server"
    assert handle.curve_name == "P-384"
    assert store.has_key("server")

    reopened = store.open_key("server")
    assert reopened is not handle
    assert store.get_public_key(reopened) == store.get_public_key(handle)


def test_persistence(tmp_path, store):
    handle = store.create_key_pair(name="alice")
    path = tmp_path / "alice.pem"
    assert path.exists()

    reloaded = KeyStore(str(tmp_path))
    assert reloaded.has_key("alice")
    assert reloaded.open_key("alice").public_key() == handle.public_key()


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_key_file_mode(tmp_path, store):
    store.create_key_pair(name="alice")
    mode = stat.S_IMODE(os.stat(tmp_path / "alice.pem").st_mode)
    assert mode == 0o600


def test_duplicate_name(store):
    first = store.create_key_pair(name="dup")
    with pytest.raises(KeyStoreError):
        store.create_key_pair(name="dup")

    second = store.create_key_pair(name="dup", overwrite=True)
    assert second.public_key() != first.public_key()
    assert store.open_key("dup").public_key() == second.public_key()


@pytest.mark.parametrize("name", ["", "../escape", ".hidden", "with space", "a/b", 7])
def test_invalid_names(store, name):
    with pytest.raises(KeyStoreError):
        store.create_key_pair(name=name)


def test_ephemeral_key_not_stored(store):
    handle = store.create_key_pair("P-256")
    assert isinstance(handle, KeyHandle)
    assert handle.name is None
    assert store.keys == {}

    store.delete_key(handle)
    assert handle.closed


def test_delete(tmp_path, store):
    handle = store.create_key_pair(name="gone")
    store.delete_key(handle)

    assert handle.closed
    assert not store.has_key("gone")
    assert not (tmp_path / "gone.pem").exists()
    with pytest.raises(KeyStoreError):
        store.open_key("gone")


def test_delete_missing(store):
    with pytest.raises(KeyStoreError):
        store.delete_key("missing")


def test_unreadable_key_file(tmp_path):
    (tmp_path / "broken.pem").write_bytes(b"not a key")
    with pytest.raises(KeyStoreError):
        KeyStore(str(tmp_path))


def test_memory_only_store():
    store = KeyStore()
    store.create_key_pair(name="volatile")
    assert store.has_key("volatile")
    assert "memory" in repr(store)


def test_failed_save_leaves_store_unchanged(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_bytes(b"")
    store = KeyStore(str(blocker))

    with pytest.raises(KeyStoreError):
        store.create_key_pair(name="alice")
    assert not store.has_key("alice")


def test_failed_overwrite_keeps_previous_key(tmp_path, store):
    original = store.create_key_pair(name="alice").public_key()

    blocker = tmp_path / "not-a-directory"
    blocker.write_bytes(b"")
    store.directory = str(blocker)

    with pytest.raises(KeyStoreError):
        store.create_key_pair(name="alice", overwrite=True)
    assert store.open_key("alice").public_key() == original
