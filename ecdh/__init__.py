"""
ECDH Key Agreement Core

This package provides the derivation core:
- Curve and hash algorithm constants
- Error taxonomy
- Immutable derivation configuration
- Secret agreement and the Hash / HMAC / TLS PRF key derivation functions
"""

from .constants import *
from .errors import (
    KeyAgreementError,
    InvalidKeyError,
    CurveMismatchError,
    InvalidConfigError,
    UnsupportedAlgorithmError,
    KeyStoreError,
)
from .config import DerivationConfig, DerivationMode
