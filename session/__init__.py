"""
ECDH Key Agreement Session

Architecture:
=============
- KeyAgreementSession: orchestrates secret agreement and key derivation
- DerivationState: mutable "configure then derive" fields, snapshotted per call
- SoftwareBackend / KeyStoreBackend: where the session's private key comes from

Usage:
======
    from session import KeyAgreementSession

    with KeyAgreementSession("P-256") as alice, KeyAgreementSession("P-256") as bob:
        key = alice.derive_key_from_hash(bob.public_key, "SHA256")

        bob.key_derivation_function = "hmac"
        bob.hmac_key = b"authentication key"
        key = bob.derive_key_material(alice.public_key)
"""

from .backends import SoftwareBackend, KeyStoreBackend
from .state import DerivationState
from .key_agreement import KeyAgreementSession

__all__ = [
    "KeyAgreementSession",
    "DerivationState",
    "SoftwareBackend",
    "KeyStoreBackend",
]
