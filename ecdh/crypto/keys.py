"""
EC Key Handles

Wraps the EC engine's key objects in handles with explicit disposal, so a
closed key can never take part in an agreement.
"""

from typing import Optional

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ..constants import CURVE_ALIASES, ENGINE_CURVE_NAMES
from ..errors import InvalidKeyError, UnsupportedAlgorithmError


_ENGINE_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


def resolve_curve(curve) -> ec.EllipticCurve:
    """
    Resolve a curve name or instance to an EC engine curve.

    Args:
        curve: "P-256" / "nistP384" / "secp521r1" ... or an ec.EllipticCurve

    Returns:
        ec.EllipticCurve: Curve instance

    Raises:
        UnsupportedAlgorithmError: If the curve name is unknown
    """
    if isinstance(curve, ec.EllipticCurve):
        return curve
    if isinstance(curve, str):
        canonical = CURVE_ALIASES.get(curve.strip().lower())
        if canonical:
            return _ENGINE_CURVES[canonical]()
    raise UnsupportedAlgorithmError(f"Unsupported curve: {curve!r}")


def curve_name(curve: ec.EllipticCurve) -> str:
    """Canonical name of a curve ("P-256"), or the engine's name if not a NIST curve."""
    return ENGINE_CURVE_NAMES.get(curve.name, curve.name)


class PublicKeyHandle:
    """
    Handle to an EC public key.

    Equality compares curve and point; identity is what the session cache
    preserves.
    """

    def __init__(self, public_key: ec.EllipticCurvePublicKey):
        if not isinstance(public_key, ec.EllipticCurvePublicKey):
            raise InvalidKeyError(f"Not an EC public key: {type(public_key).__name__}")
        self._public_key = public_key
        self._closed = False

    @classmethod
    def from_encoded(cls, curve, data: bytes) -> 'PublicKeyHandle':
        """
        Build a handle from an X9.62 encoded point (compressed or uncompressed).

        Raises:
            InvalidKeyError: If the point is not valid on the curve
        """
        try:
            public_key = ec.EllipticCurvePublicKey.from_encoded_point(
                resolve_curve(curve), bytes(data)
            )
        except ValueError as e:
            raise InvalidKeyError(f"Invalid public point: {e}") from e
        return cls(public_key)

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey:
        if self._closed:
            raise InvalidKeyError("Public key handle is closed")
        return self._public_key

    @property
    def curve(self) -> ec.EllipticCurve:
        return self._public_key.curve

    @property
    def curve_name(self) -> str:
        return curve_name(self._public_key.curve)

    @property
    def key_size(self) -> int:
        return self._public_key.curve.key_size

    @property
    def closed(self) -> bool:
        return self._closed

    def encode(self) -> bytes:
        """X9.62 uncompressed point encoding (0x04 || X || Y)."""
        return self.public_key.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)

    def close(self):
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __eq__(self, other):
        if not isinstance(other, PublicKeyHandle):
            return NotImplemented
        return self._public_key.public_numbers() == other._public_key.public_numbers()

    def __hash__(self):
        numbers = self._public_key.public_numbers()
        return hash((self.curve_name, numbers.x, numbers.y))

    def __repr__(self):
        state = "closed" if self._closed else "open"
        return f"PublicKeyHandle({self.curve_name}, {state})"


class KeyHandle:
    """
    Handle to an EC private key.

    Attributes:
        name: Key store name, or None for an ephemeral key
    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey, name: Optional[str] = None):
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise InvalidKeyError(f"Not an EC private key: {type(private_key).__name__}")
        self._private_key = private_key
        self.name = name
        self._closed = False

    @classmethod
    def generate(cls, curve, name: Optional[str] = None) -> 'KeyHandle':
        """Generate a fresh key pair on the given curve."""
        return cls(ec.generate_private_key(resolve_curve(curve)), name=name)

    @property
    def private_key(self) -> ec.EllipticCurvePrivateKey:
        if self._closed:
            raise InvalidKeyError("Key handle is closed")
        return self._private_key

    @property
    def curve(self) -> ec.EllipticCurve:
        return self._private_key.curve

    @property
    def curve_name(self) -> str:
        return curve_name(self._private_key.curve)

    @property
    def key_size(self) -> int:
        return self._private_key.curve.key_size

    @property
    def closed(self) -> bool:
        return self._closed

    def public_key(self) -> PublicKeyHandle:
        """Create a new handle to the public half of this key."""
        return PublicKeyHandle(self.private_key.public_key())

    def close(self):
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        state = "closed" if self._closed else "open"
        label = f"{self.name!r}, " if self.name else ""
        return f"KeyHandle({label}{self.curve_name}, {state})"


def private_key_of(key) -> ec.EllipticCurvePrivateKey:
    """
    Unwrap a local key argument.

    Args:
        key: KeyHandle or ec.EllipticCurvePrivateKey

    Raises:
        InvalidKeyError: If the argument is not a usable private key
    """
    if isinstance(key, KeyHandle):
        return key.private_key
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return key
    raise InvalidKeyError(f"Not an EC private key: {type(key).__name__}")


def public_key_of(key) -> ec.EllipticCurvePublicKey:
    """
    Unwrap a peer key argument.

    Args:
        key: PublicKeyHandle, KeyHandle (its public half),
             ec.EllipticCurvePublicKey or ec.EllipticCurvePrivateKey

    Raises:
        InvalidKeyError: If the argument is not a usable public key
    """
    if isinstance(key, PublicKeyHandle):
        return key.public_key
    if isinstance(key, KeyHandle):
        return key.private_key.public_key()
    if isinstance(key, ec.EllipticCurvePublicKey):
        return key
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return key.public_key()
    raise InvalidKeyError(f"Not an EC public key: {type(key).__name__}")
