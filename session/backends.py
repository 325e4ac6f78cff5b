"""
Key Agreement Backends

A backend is anything exposing:
- name: str
- create_key(curve) -> KeyHandle
- release(handle) -> None

The session picks one at construction time.
"""

from ecdh.crypto.keys import KeyHandle, resolve_curve, curve_name
from ecdh.errors import CurveMismatchError
from keystore.store import KeyStore


class SoftwareBackend:
    """Ephemeral in-process keys generated by the EC engine."""

    name = "software"

    def create_key(self, curve) -> KeyHandle:
        return KeyHandle.generate(curve)

    def release(self, handle: KeyHandle):
        handle.close()


class KeyStoreBackend:
    """
    Keys held in a KeyStore under a fixed name.

    The named key is opened if it exists (unless overwrite is set) and
    created otherwise. Releasing the handle leaves the stored key in place;
    use KeyStore.delete_key to remove it.
    """

    name = "keystore"

    def __init__(self, store: KeyStore, key_name: str = None, overwrite: bool = False):
        self.store = store
        self.key_name = key_name
        self.overwrite = overwrite

    def create_key(self, curve) -> KeyHandle:
        if self.key_name and self.store.has_key(self.key_name) and not self.overwrite:
            handle = self.store.open_key(self.key_name)
            if handle.curve.name != resolve_curve(curve).name:
                handle.close()
                raise CurveMismatchError(
                    f"Stored key '{self.key_name}' is {handle.curve_name}, "
                    f"not {curve_name(resolve_curve(curve))}"
                )
            return handle
        return self.store.create_key_pair(curve, name=self.key_name, overwrite=self.overwrite)

    def release(self, handle: KeyHandle):
        handle.close()
