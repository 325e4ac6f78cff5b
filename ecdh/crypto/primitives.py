"""
Hash and HMAC primitives backing the key derivation functions
"""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac

from ..constants import HashAlgorithm, HASH_DIGEST_SIZES
from ..errors import UnsupportedAlgorithmError


_HASH_CLASSES = {
    HashAlgorithm.SHA1: hashes.SHA1,
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA384: hashes.SHA384,
    HashAlgorithm.SHA512: hashes.SHA512,
}


def hash_for(algorithm) -> hashes.HashAlgorithm:
    """
    Map a hash algorithm id to a `cryptography` hash instance.

    Args:
        algorithm: HashAlgorithm member or name

    Returns:
        hashes.HashAlgorithm: Fresh hash algorithm instance
    """
    return _HASH_CLASSES[HashAlgorithm.parse(algorithm)]()


def digest_size(algorithm) -> int:
    """Digest length in bytes for the given hash algorithm."""
    return HASH_DIGEST_SIZES[HashAlgorithm.parse(algorithm)]


def hash_digest(algorithm, *parts) -> bytes:
    """
    Hash the concatenation of parts.

    Args:
        algorithm: HashAlgorithm member or name
        *parts: Bytes-like chunks, hashed in order

    Returns:
        bytes: Digest
    """
    try:
        ctx = hashes.Hash(hash_for(algorithm))
    except UnsupportedAlgorithm as e:
        raise UnsupportedAlgorithmError(str(e)) from e

    for part in parts:
        ctx.update(part)
    return ctx.finalize()


def hmac_digest(algorithm, key, *parts) -> bytes:
    """
    HMAC over the concatenation of parts (RFC 2104).

    Args:
        algorithm: HashAlgorithm member or name
        key: HMAC key (any length; hashed or zero-padded per RFC 2104)
        *parts: Bytes-like chunks, authenticated in order

    Returns:
        bytes: MAC, one digest long
    """
    try:
        ctx = hmac.HMAC(key, hash_for(algorithm))
    except UnsupportedAlgorithm as e:
        raise UnsupportedAlgorithmError(str(e)) from e

    for part in parts:
        ctx.update(part)
    return ctx.finalize()
