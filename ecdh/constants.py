"""
ECDH Key Agreement Constants
"""

from enum import Enum

from .errors import UnsupportedAlgorithmError


class HashAlgorithm(Enum):
    """Hash algorithms usable by the Hash, HMAC and TLS PRF derivations"""
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"

    @classmethod
    def parse(cls, value) -> 'HashAlgorithm':
        """
        Resolve a hash algorithm from an enum member or a name.

        Names are matched case-insensitively with or without the dash,
        so "SHA256", "sha-256" and "Sha256" are all accepted.

        Raises:
            UnsupportedAlgorithmError: If the name is not a supported hash
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper().replace("-", "")
            for member in cls:
                if member.value == normalized:
                    return member
        raise UnsupportedAlgorithmError(f"Unsupported hash algorithm: {value!r}")


DEFAULT_HASH_ALGORITHM = HashAlgorithm.SHA256

# Digest sizes in bytes
HASH_DIGEST_SIZES = {
    HashAlgorithm.SHA1: 20,
    HashAlgorithm.SHA256: 32,
    HashAlgorithm.SHA384: 48,
    HashAlgorithm.SHA512: 64,
}

# TLS 1.2 master secret length (RFC 5246 Section 8.1)
TLS_MASTER_SECRET_LENGTH = 48

# Named curves
CURVE_P256 = "P-256"
CURVE_P384 = "P-384"
CURVE_P521 = "P-521"

DEFAULT_CURVE = CURVE_P256

CURVE_KEY_SIZES = {
    CURVE_P256: 256,
    CURVE_P384: 384,
    CURVE_P521: 521,
}

# Accepted spellings -> canonical name (keys are lowercase)
CURVE_ALIASES = {
    "p-256": CURVE_P256,
    "p256": CURVE_P256,
    "nistp256": CURVE_P256,
    "secp256r1": CURVE_P256,
    "prime256v1": CURVE_P256,
    "p-384": CURVE_P384,
    "p384": CURVE_P384,
    "nistp384": CURVE_P384,
    "secp384r1": CURVE_P384,
    "p-521": CURVE_P521,
    "p521": CURVE_P521,
    "nistp521": CURVE_P521,
    "secp521r1": CURVE_P521,
}

# EC engine curve name -> canonical name
ENGINE_CURVE_NAMES = {
    "secp256r1": CURVE_P256,
    "secp384r1": CURVE_P384,
    "secp521r1": CURVE_P521,
}
