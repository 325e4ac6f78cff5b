"""
EC Key Store

Provides:
- Named key pair creation with overwrite control
- Opening, public key lookup and deletion of stored keys
- Optional PEM persistence to a directory
"""

from .store import KeyStore, KEY_NAME_PATTERN
