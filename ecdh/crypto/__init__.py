"""
ECDH Cryptographic Operations

Provides:
- Hash / HMAC primitives
- EC key handles and curve resolution
- ECDH secret agreement with fixed-width x-coordinate encoding
- Hash, HMAC and TLS PRF key derivation
"""

from .primitives import hash_digest, hmac_digest, digest_size
from .keys import (
    KeyHandle,
    PublicKeyHandle,
    resolve_curve,
    curve_name,
    private_key_of,
    public_key_of,
)
from .agreement import SharedSecret, agree, encode_x_coordinate, coordinate_size
from .kdf import (
    derive_key,
    derive_key_from_hash,
    derive_key_from_hmac,
    tls_prf,
)
