"""
Key Derivation Functions over an ECDH Shared Secret

- Hash:    Hash(prepend || Z || append)
- HMAC:    HMAC(K, prepend || Z || append), K = hmac_key or Z
- TLS PRF: P_hash(Z, label || seed) truncated to length (RFC 5246 Section 5)
"""

from utils.zeroize import wipe

from ..config import DerivationConfig, DerivationMode
from ..constants import DEFAULT_HASH_ALGORITHM, TLS_MASTER_SECRET_LENGTH
from ..errors import InvalidConfigError
from .agreement import SharedSecret
from .primitives import hash_digest, hmac_digest


def _secret_buffer(secret):
    """Bytes-like view of the shared secret; rejects empty or wiped secrets."""
    if isinstance(secret, SharedSecret):
        buffer = secret.view()
    elif isinstance(secret, (bytes, bytearray, memoryview)):
        buffer = secret
    elif secret is None:
        raise InvalidConfigError("No shared secret available")
    else:
        raise TypeError(f"secret must be a SharedSecret or bytes-like, got {type(secret).__name__}")

    if len(buffer) == 0:
        raise InvalidConfigError("Shared secret is empty")
    return buffer


def _bytes_or_empty(name: str, value) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like or None, got {type(value).__name__}")
    return value


def derive_key_from_hash(secret, hash_algorithm=DEFAULT_HASH_ALGORITHM,
                         prepend: bytes = None, append: bytes = None) -> bytes:
    """
    Hash KDF: a single hash over prepend || secret || append.

    Args:
        secret: SharedSecret or raw secret bytes
        hash_algorithm: HashAlgorithm member or name
        prepend: Bytes hashed before the secret (None = empty)
        append: Bytes hashed after the secret (None = empty)

    Returns:
        bytes: Derived key, one digest long
    """
    z = _secret_buffer(secret)
    return hash_digest(
        hash_algorithm,
        _bytes_or_empty("prepend", prepend),
        z,
        _bytes_or_empty("append", append),
    )


def derive_key_from_hmac(secret, hash_algorithm=DEFAULT_HASH_ALGORITHM, hmac_key: bytes = None,
                         prepend: bytes = None, append: bytes = None) -> bytes:
    """
    HMAC KDF: HMAC over prepend || secret || append.

    With no hmac_key the secret itself keys the HMAC, so it serves as both
    key and data.

    Args:
        secret: SharedSecret or raw secret bytes
        hash_algorithm: HashAlgorithm member or name
        hmac_key: HMAC key, or None to key with the secret
        prepend: Bytes authenticated before the secret (None = empty)
        append: Bytes authenticated after the secret (None = empty)

    Returns:
        bytes: Derived key, one digest long
    """
    z = _secret_buffer(secret)
    key = z if hmac_key is None else _bytes_or_empty("hmac_key", hmac_key)
    return hmac_digest(
        hash_algorithm,
        key,
        _bytes_or_empty("prepend", prepend),
        z,
        _bytes_or_empty("append", append),
    )


def tls_prf(secret, label: bytes, seed: bytes, length: int = TLS_MASTER_SECRET_LENGTH,
            hash_algorithm=DEFAULT_HASH_ALGORITHM) -> bytes:
    """
    TLS 1.2 PRF keyed with the shared secret (RFC 5246 Section 5).

    PRF(secret, label, seed) = P_hash(secret, label || seed)

    P_hash(secret, s) = HMAC(secret, A(1) || s) ||
                        HMAC(secret, A(2) || s) || ...
        A(0) = s
        A(i) = HMAC(secret, A(i-1))

    Blocks are generated until at least `length` bytes exist, then the
    output is truncated to exactly `length`.

    Args:
        secret: SharedSecret or raw secret bytes
        label: ASCII label (may be empty)
        seed: Seed (must not be empty)
        length: Output length in bytes, independent of the digest size
        hash_algorithm: Hash used by P_hash (SHA-256 for the TLS 1.2 default PRF)

    Returns:
        bytes: `length` bytes of key material
    """
    z = _secret_buffer(secret)
    if label is None:
        raise InvalidConfigError("TLS PRF derivation requires a label")
    if seed is None:
        raise InvalidConfigError("TLS PRF derivation requires a seed")
    if not seed:
        raise InvalidConfigError("TLS PRF seed must not be empty")
    if isinstance(length, bool) or not isinstance(length, int):
        raise TypeError(f"length must be an int, got {type(length).__name__}")
    if length <= 0:
        raise InvalidConfigError(f"TLS PRF output length must be positive, got {length}")

    label_seed = bytes(_bytes_or_empty("label", label)) + bytes(_bytes_or_empty("seed", seed))

    output = bytearray()
    a = label_seed
    while len(output) < length:
        a = hmac_digest(hash_algorithm, z, a)
        output += hmac_digest(hash_algorithm, z, a, label_seed)

    result = bytes(output[:length])
    wipe(output)
    return result


def derive_key(secret, config: DerivationConfig) -> bytes:
    """
    Derive key material from a shared secret according to a configuration.

    Args:
        secret: SharedSecret or raw secret bytes
        config: Derivation parameters; validated before use

    Returns:
        bytes: Derived key material

    Raises:
        InvalidConfigError: If the config is missing fields its mode requires
        UnsupportedAlgorithmError: If the hash algorithm is not available
    """
    config.validate()

    if config.mode is DerivationMode.HASH:
        return derive_key_from_hash(secret, config.hash_algorithm, config.prepend, config.append)
    if config.mode is DerivationMode.HMAC:
        return derive_key_from_hmac(
            secret, config.hash_algorithm, config.hmac_key, config.prepend, config.append
        )
    if config.mode is DerivationMode.TLS_PRF:
        return tls_prf(secret, config.label, config.seed, config.length, config.hash_algorithm)

    raise InvalidConfigError(f"Unknown key derivation function: {config.mode!r}")
