"""Key agreement exception classes."""


class KeyAgreementError(Exception):
    """Generic exception class which other key agreement errors inherit from."""

    error_code = None

    def __init__(self, *args, error_code: str = None, **kwargs):
        """Initialize a KeyAgreementError instance."""
        super().__init__(*args, **kwargs)
        if error_code:
            self.error_code = error_code


class InvalidKeyError(KeyAgreementError):
    """A key handle is invalid, closed, or was rejected by the EC engine."""

    error_code = "invalid_key"


class CurveMismatchError(InvalidKeyError):
    """The local and peer keys are on different curves."""

    error_code = "curve_mismatch"


class InvalidConfigError(KeyAgreementError):
    """A derivation field required by the active mode is missing or unusable."""

    error_code = "invalid_config"


class UnsupportedAlgorithmError(KeyAgreementError):
    """A hash algorithm or curve is not supported by the primitives."""

    error_code = "unsupported_algorithm"


class KeyStoreError(KeyAgreementError):
    """A stored key is missing, duplicated, or has an unusable name."""

    error_code = "key_store"
