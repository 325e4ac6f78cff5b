"""
Named EC key pair storage

Keys live in memory and, when a directory is configured, are persisted as
unencrypted PKCS#8 PEM files named <key name>.pem and loaded on startup.
"""

import os
import re
from typing import Dict, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ecdh.constants import DEFAULT_CURVE
from ecdh.crypto.keys import KeyHandle, PublicKeyHandle, resolve_curve, curve_name
from ecdh.errors import KeyStoreError

KEY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
KEY_FILE_SUFFIX = ".pem"


class KeyStore:
    """
    Store for named EC key pairs, supporting persistence and lookup.

    Creating a key on a hardware-backed provider can take several seconds;
    calls block until the key exists and apply no timeout.
    """

    def __init__(self, directory: str = None, debug: bool = False):
        self.keys: Dict[str, ec.EllipticCurvePrivateKey] = {}
        self.directory = directory
        self.debug = debug
        if directory:
            self.load()

    @staticmethod
    def _check_name(name: str):
        if not isinstance(name, str) or not KEY_NAME_PATTERN.match(name):
            raise KeyStoreError(f"Invalid key name: {name!r}")

    def _path(self, name: str) -> str:
        return os.path.join(self.directory, name + KEY_FILE_SUFFIX)

    def has_key(self, name: str) -> bool:
        return name in self.keys

    def create_key_pair(self, curve=DEFAULT_CURVE, name: Optional[str] = None,
                        overwrite: bool = False) -> KeyHandle:
        """
        Generate a key pair, storing it under `name` if one is given.

        Args:
            curve: Curve name or instance
            name: Key name, or None for an ephemeral key that is not stored
            overwrite: Replace an existing key with the same name

        Returns:
            KeyHandle: Open handle to the new key

        Raises:
            KeyStoreError: If the name is invalid, taken and overwrite is False,
                or the key file cannot be written
        """
        ec_curve = resolve_curve(curve)

        if name is None:
            return KeyHandle(ec.generate_private_key(ec_curve))

        self._check_name(name)
        if name in self.keys and not overwrite:
            raise KeyStoreError(f"Key already exists: {name}")

        private_key = ec.generate_private_key(ec_curve)
        previous = self.keys.get(name)
        self.keys[name] = private_key
        try:
            self.save(name)
        except OSError as e:
            # Keep memory in step with the directory
            if previous is None:
                del self.keys[name]
            else:
                self.keys[name] = previous
            raise KeyStoreError(f"Could not save key {name}: {e}") from e

        if self.debug:
            print(f"    ✓ Created {curve_name(ec_curve)} key '{name}'")

        return KeyHandle(private_key, name=name)

    def open_key(self, name: str) -> KeyHandle:
        """
        Open a new handle to a stored key.

        Raises:
            KeyStoreError: If no key with that name exists
        """
        self._check_name(name)
        if name not in self.keys:
            raise KeyStoreError(f"Key not found: {name}")
        return KeyHandle(self.keys[name], name=name)

    def get_public_key(self, handle: KeyHandle) -> PublicKeyHandle:
        """Public half of a key handle."""
        return handle.public_key()

    def delete_key(self, key) -> None:
        """
        Delete a stored key and close the handle if one was passed.

        Args:
            key: KeyHandle or key name

        Raises:
            KeyStoreError: If the key is not in the store
        """
        if isinstance(key, KeyHandle):
            name = key.name
            key.close()
        else:
            name = key

        if name is None:
            # Ephemeral key; nothing stored
            return

        self._check_name(name)
        if name not in self.keys:
            raise KeyStoreError(f"Key not found: {name}")

        del self.keys[name]
        if self.directory and os.path.exists(self._path(name)):
            os.remove(self._path(name))

        if self.debug:
            print(f"    ✓ Deleted key '{name}'")

    def save(self, name: str):
        """Save one key to its file."""
        if not self.directory:
            return

        os.makedirs(self.directory, exist_ok=True)
        pem = self.keys[name].private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

        # Owner read/write only
        fd = os.open(self._path(name), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(pem)

    def load(self):
        """Load all keys from the directory."""
        if not self.directory or not os.path.isdir(self.directory):
            return

        for filename in sorted(os.listdir(self.directory)):
            if not filename.endswith(KEY_FILE_SUFFIX):
                continue
            name = filename[:-len(KEY_FILE_SUFFIX)]
            if not KEY_NAME_PATTERN.match(name):
                continue

            with open(os.path.join(self.directory, filename), "rb") as f:
                try:
                    private_key = serialization.load_pem_private_key(f.read(), password=None)
                except ValueError as e:
                    raise KeyStoreError(f"Unreadable key file {filename}: {e}") from e

            if not isinstance(private_key, ec.EllipticCurvePrivateKey):
                raise KeyStoreError(f"Key file {filename} does not hold an EC key")
            self.keys[name] = private_key

        if self.debug:
            print(f"    ✓ Loaded {len(self.keys)} key(s) from {self.directory}")

    def __repr__(self):
        location = self.directory or "memory"
        return f"KeyStore({location}, keys={len(self.keys)})"
