"""
Stateful Derivation Configuration
"""

from dataclasses import dataclass
from typing import Optional

from ecdh.config import DerivationConfig, DerivationMode
from ecdh.constants import HashAlgorithm, DEFAULT_HASH_ALGORITHM, TLS_MASTER_SECRET_LENGTH


@dataclass
class DerivationState:
    """
    Mutable derivation fields of a session.

    Fields are set one at a time ("configure, then derive"); `snapshot()`
    freezes the current values into a DerivationConfig so a derivation
    never sees a half-updated configuration.
    """
    mode: DerivationMode = DerivationMode.HASH
    hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM
    prepend: Optional[bytes] = None
    append: Optional[bytes] = None
    hmac_key: Optional[bytes] = None
    label: Optional[bytes] = None
    seed: Optional[bytes] = None
    length: int = TLS_MASTER_SECRET_LENGTH

    def snapshot(self) -> DerivationConfig:
        return DerivationConfig(
            mode=self.mode,
            hash_algorithm=self.hash_algorithm,
            prepend=self.prepend,
            append=self.append,
            hmac_key=self.hmac_key,
            label=self.label,
            seed=self.seed,
            length=self.length,
        )

    def load(self, config: DerivationConfig):
        """Copy every field of a config into this state."""
        self.mode = config.mode
        self.hash_algorithm = config.hash_algorithm
        self.prepend = config.prepend
        self.append = config.append
        self.hmac_key = config.hmac_key
        self.label = config.label
        self.seed = config.seed
        self.length = config.length
