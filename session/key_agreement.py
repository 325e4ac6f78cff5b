"""
ECDH Key Agreement Session

Pairs a local key with the key derivation functions behind two call shapes:
- explicit: every derivation parameter is passed per call
- stateful: parameters are set as session fields, then derive_key_material()

Both shapes snapshot into the same DerivationConfig and run the same code,
so equivalent inputs give byte-identical output.
"""

import threading
from typing import Optional, Tuple

from ecdh.config import DerivationConfig, DerivationMode, as_optional_bytes
from ecdh.constants import HashAlgorithm, DEFAULT_CURVE, TLS_MASTER_SECRET_LENGTH
from ecdh.crypto import agree, derive_key, resolve_curve, curve_name
from ecdh.crypto.keys import KeyHandle, PublicKeyHandle
from ecdh.errors import InvalidKeyError

from .backends import SoftwareBackend
from .state import DerivationState


class KeyAgreementSession:
    """
    ECDH key agreement over one local key pair.

    The private key is created by the backend on first use (or imported),
    and released when the session is closed. The public key handle is
    created lazily and the same object is returned until the key changes.

    Thread safety: field writes, snapshots and key replacement hold an
    internal lock, but callers sharing a session across threads must still
    serialize "configure then derive" sequences themselves.
    """

    def __init__(self, curve=DEFAULT_CURVE, backend=None, key=None, debug: bool = False):
        """
        Args:
            curve: Curve name or instance (ignored when `key` is given)
            backend: SoftwareBackend (default) or KeyStoreBackend
            key: Existing KeyHandle or EC private key to use instead of creating one
            debug: Print progress lines
        """
        self.debug = debug
        self.backend = backend or SoftwareBackend()

        self._lock = threading.RLock()
        self._state = DerivationState()
        self._key: Optional[KeyHandle] = None
        self._owns_key = False
        self._generation = 0
        self._public_key_cache: Optional[Tuple[int, PublicKeyHandle]] = None
        self._closed = False

        if key is not None:
            self.import_key(key)
        else:
            self._curve = resolve_curve(curve)

    # =========================================================================
    # Key Management
    # =========================================================================

    def _check_open(self):
        if self._closed:
            raise InvalidKeyError("Key agreement session is closed")

    @property
    def key(self) -> KeyHandle:
        """Private key handle; created by the backend on first access."""
        with self._lock:
            self._check_open()
            if self._key is None:
                self._replace_key(self.backend.create_key(self._curve), owned=True)
            return self._key

    def generate_key(self) -> KeyHandle:
        """Replace the session key with a fresh one from the backend."""
        with self._lock:
            self._check_open()
            self._replace_key(self.backend.create_key(self._curve), owned=True)
            return self._key

    def import_key(self, key) -> KeyHandle:
        """
        Use an existing key. The caller keeps ownership of an imported handle.

        Args:
            key: KeyHandle or ec.EllipticCurvePrivateKey
        """
        if not isinstance(key, KeyHandle):
            key = KeyHandle(key)
        if key.closed:
            raise InvalidKeyError("Cannot import a closed key handle")

        with self._lock:
            self._check_open()
            self._curve = key.curve
            self._replace_key(key, owned=False)
            return self._key

    def _replace_key(self, key: KeyHandle, owned: bool):
        self._release_key()
        self._key = key
        self._owns_key = owned
        self._generation += 1

        if self.debug:
            source = self.backend.name if owned else "imported"
            print(f"    ✓ {self.curve_name} key ready ({source}, generation {self._generation})")

    def _release_key(self):
        if self._public_key_cache is not None:
            self._public_key_cache[1].close()
            self._public_key_cache = None
        if self._key is not None and self._owns_key:
            self.backend.release(self._key)
        self._key = None

    @property
    def public_key(self) -> PublicKeyHandle:
        """
        Cached public key handle.

        Returns the identical object on every access until the key is
        replaced or the handle is closed.
        """
        with self._lock:
            key = self.key
            cached = self._public_key_cache
            if cached is None or cached[0] != self._generation or cached[1].closed:
                cached = (self._generation, key.public_key())
                self._public_key_cache = cached
            return cached[1]

    @property
    def key_size(self) -> int:
        return self._curve.key_size

    @property
    def curve_name(self) -> str:
        return curve_name(self._curve)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Release the key and the cached public key handle."""
        with self._lock:
            if self._closed:
                return
            self._release_key()
            self._closed = True

        if self.debug:
            print(f"    ✓ Session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # =========================================================================
    # Stateful Derivation Fields
    # =========================================================================

    @property
    def key_derivation_function(self) -> DerivationMode:
        return self._state.mode

    @key_derivation_function.setter
    def key_derivation_function(self, value):
        mode = DerivationMode.parse(value)
        with self._lock:
            self._state.mode = mode

    @property
    def hash_algorithm(self) -> HashAlgorithm:
        return self._state.hash_algorithm

    @hash_algorithm.setter
    def hash_algorithm(self, value):
        algorithm = HashAlgorithm.parse(value)
        with self._lock:
            self._state.hash_algorithm = algorithm

    @property
    def secret_prepend(self) -> Optional[bytes]:
        return self._state.prepend

    @secret_prepend.setter
    def secret_prepend(self, value):
        value = as_optional_bytes("secret_prepend", value)
        with self._lock:
            self._state.prepend = value

    @property
    def secret_append(self) -> Optional[bytes]:
        return self._state.append

    @secret_append.setter
    def secret_append(self, value):
        value = as_optional_bytes("secret_append", value)
        with self._lock:
            self._state.append = value

    @property
    def hmac_key(self) -> Optional[bytes]:
        return self._state.hmac_key

    @hmac_key.setter
    def hmac_key(self, value):
        value = as_optional_bytes("hmac_key", value)
        with self._lock:
            self._state.hmac_key = value

    @property
    def label(self) -> Optional[bytes]:
        return self._state.label

    @label.setter
    def label(self, value):
        value = as_optional_bytes("label", value)
        with self._lock:
            self._state.label = value

    @property
    def seed(self) -> Optional[bytes]:
        return self._state.seed

    @seed.setter
    def seed(self, value):
        value = as_optional_bytes("seed", value)
        with self._lock:
            self._state.seed = value

    @property
    def tls_length(self) -> int:
        return self._state.length

    @tls_length.setter
    def tls_length(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"tls_length must be an int, got {type(value).__name__}")
        with self._lock:
            self._state.length = value

    @property
    def derivation_config(self) -> DerivationConfig:
        """Snapshot of the current stateful fields."""
        with self._lock:
            return self._state.snapshot()

    def configure(self, config: DerivationConfig):
        """Set every stateful field from a DerivationConfig."""
        with self._lock:
            self._state.load(config)

    # =========================================================================
    # Derivation
    # =========================================================================

    def _derive(self, peer_public_key, config: DerivationConfig) -> bytes:
        # Fail on configuration before paying for the point multiplication
        config.validate()

        if isinstance(peer_public_key, KeyAgreementSession):
            peer_public_key = peer_public_key.public_key

        key = self.key
        with agree(key, peer_public_key) as secret:
            derived = derive_key(secret, config)

        if self.debug:
            print(f"    ✓ Derived {len(derived)} bytes "
                  f"({config.mode.value}, {config.hash_algorithm.value})")

        return derived

    def derive_key(self, peer_public_key, config: DerivationConfig) -> bytes:
        """Derive key material with a prebuilt DerivationConfig."""
        return self._derive(peer_public_key, config)

    def derive_key_from_hash(self, peer_public_key, hash_algorithm,
                             prepend: bytes = None, append: bytes = None) -> bytes:
        """
        Hash(prepend || Z || append) over the shared secret Z with the peer.

        Args:
            peer_public_key: PublicKeyHandle, KeyHandle, EC public key or another session
            hash_algorithm: HashAlgorithm member or name
            prepend: Bytes hashed before Z (None = empty)
            append: Bytes hashed after Z (None = empty)

        Returns:
            bytes: Derived key, one digest long
        """
        config = DerivationConfig.for_hash(hash_algorithm, prepend=prepend, append=append)
        return self._derive(peer_public_key, config)

    def derive_key_from_hmac(self, peer_public_key, hash_algorithm, hmac_key: bytes = None,
                             prepend: bytes = None, append: bytes = None) -> bytes:
        """
        HMAC(K, prepend || Z || append), where K = hmac_key or Z itself.

        Args:
            peer_public_key: PublicKeyHandle, KeyHandle, EC public key or another session
            hash_algorithm: HashAlgorithm member or name
            hmac_key: HMAC key; None keys the HMAC with the shared secret
            prepend: Bytes authenticated before Z (None = empty)
            append: Bytes authenticated after Z (None = empty)

        Returns:
            bytes: Derived key, one digest long
        """
        config = DerivationConfig.for_hmac(
            hash_algorithm, hmac_key=hmac_key, prepend=prepend, append=append
        )
        return self._derive(peer_public_key, config)

    def derive_key_tls(self, peer_public_key, label: bytes, seed: bytes,
                       length: int = TLS_MASTER_SECRET_LENGTH,
                       hash_algorithm=HashAlgorithm.SHA256) -> bytes:
        """
        TLS 1.2 PRF(Z, label, seed) truncated to `length` bytes.

        Args:
            peer_public_key: PublicKeyHandle, KeyHandle, EC public key or another session
            label: PRF label (may be empty)
            seed: PRF seed (must not be empty)
            length: Output length (default 48, the TLS master secret size)
            hash_algorithm: P_hash hash (default SHA-256)

        Returns:
            bytes: `length` bytes of key material
        """
        config = DerivationConfig.for_tls_prf(
            label, seed, length=length, hash_algorithm=hash_algorithm
        )
        return self._derive(peer_public_key, config)

    def derive_key_material(self, peer_public_key) -> bytes:
        """
        Derive with the session's current stateful fields.

        Raises:
            InvalidConfigError: If the active mode is missing a required field
        """
        with self._lock:
            config = self._state.snapshot()
        return self._derive(peer_public_key, config)

    def __repr__(self):
        state = "closed" if self._closed else f"generation {self._generation}"
        return f"KeyAgreementSession({self.curve_name}, {self.backend.name}, {state})"
