"""
Key Derivation Configuration
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .constants import HashAlgorithm, DEFAULT_HASH_ALGORITHM, TLS_MASTER_SECRET_LENGTH
from .errors import InvalidConfigError


class DerivationMode(Enum):
    """Key derivation function applied to the shared secret"""
    HASH = "hash"        # Hash(prepend || secret || append)
    HMAC = "hmac"        # HMAC(key, prepend || secret || append)
    TLS_PRF = "tls_prf"  # TLS 1.2 PRF(secret, label, seed)

    @classmethod
    def parse(cls, value) -> 'DerivationMode':
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_")
            if normalized == "tls":
                return cls.TLS_PRF
            for member in cls:
                if member.value == normalized:
                    return member
        raise InvalidConfigError(f"Unknown key derivation function: {value!r}")


def as_optional_bytes(name: str, value) -> Optional[bytes]:
    if value is None:
        return None
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like or None, got {type(value).__name__}")
    return bytes(value)


@dataclass(frozen=True)
class DerivationConfig:
    """
    Immutable set of derivation parameters.

    Fields not used by the active mode are carried but ignored:
    - HASH:    prepend, append
    - HMAC:    hmac_key (None -> the shared secret is the key), prepend, append
    - TLS_PRF: label, seed, length
    """
    mode: DerivationMode = DerivationMode.HASH
    hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM
    prepend: Optional[bytes] = None
    append: Optional[bytes] = None
    hmac_key: Optional[bytes] = None
    label: Optional[bytes] = None
    seed: Optional[bytes] = None
    length: int = TLS_MASTER_SECRET_LENGTH

    def __post_init__(self):
        # Normalize in place; frozen dataclasses need object.__setattr__
        object.__setattr__(self, "mode", DerivationMode.parse(self.mode))
        object.__setattr__(self, "hash_algorithm", HashAlgorithm.parse(self.hash_algorithm))
        for name in ("prepend", "append", "hmac_key", "label", "seed"):
            object.__setattr__(self, name, as_optional_bytes(name, getattr(self, name)))
        if isinstance(self.length, bool) or not isinstance(self.length, int):
            raise TypeError(f"length must be an int, got {type(self.length).__name__}")

    @classmethod
    def for_hash(cls, hash_algorithm=DEFAULT_HASH_ALGORITHM, prepend=None, append=None) -> 'DerivationConfig':
        return cls(DerivationMode.HASH, hash_algorithm, prepend=prepend, append=append)

    @classmethod
    def for_hmac(cls, hash_algorithm=DEFAULT_HASH_ALGORITHM, hmac_key=None,
                 prepend=None, append=None) -> 'DerivationConfig':
        return cls(DerivationMode.HMAC, hash_algorithm, prepend=prepend, append=append,
                   hmac_key=hmac_key)

    @classmethod
    def for_tls_prf(cls, label, seed, length: int = TLS_MASTER_SECRET_LENGTH,
                    hash_algorithm=DEFAULT_HASH_ALGORITHM) -> 'DerivationConfig':
        return cls(DerivationMode.TLS_PRF, hash_algorithm, label=label, seed=seed, length=length)

    def validate(self) -> 'DerivationConfig':
        """
        Check that the fields required by the active mode are set.

        Returns:
            DerivationConfig: self, for chaining

        Raises:
            InvalidConfigError: If a required field is missing or unusable
        """
        if self.mode is DerivationMode.TLS_PRF:
            if self.label is None:
                raise InvalidConfigError("TLS PRF derivation requires a label")
            if self.seed is None:
                raise InvalidConfigError("TLS PRF derivation requires a seed")
            if not self.seed:
                raise InvalidConfigError("TLS PRF seed must not be empty")
            if self.length <= 0:
                raise InvalidConfigError(f"TLS PRF output length must be positive, got {self.length}")
        return self

    def replace(self, **changes) -> 'DerivationConfig':
        """Copy with some fields changed."""
        return replace(self, **changes)

    def __repr__(self):
        # hmac_key is secret material; report presence only
        fields = [f"mode={self.mode.value}", f"hash={self.hash_algorithm.value}"]
        if self.mode is DerivationMode.TLS_PRF:
            fields.append(f"label={self.label!r}")
            fields.append(f"seed_len={len(self.seed) if self.seed is not None else None}")
            fields.append(f"length={self.length}")
        else:
            fields.append(f"prepend={self.prepend!r}")
            fields.append(f"append={self.append!r}")
            if self.mode is DerivationMode.HMAC:
                fields.append(f"hmac_key={'set' if self.hmac_key is not None else 'secret'}")
        return f"DerivationConfig({', '.join(fields)})"
