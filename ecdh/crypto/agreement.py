"""
ECDH Secret Agreement (SEC 1 Section 3.3.1, NIST SP 800-56A Section 5.7.1.2)
"""

from cryptography.hazmat.primitives.asymmetric import ec

from utils.zeroize import wipe

from ..errors import CurveMismatchError, InvalidConfigError, InvalidKeyError
from .keys import curve_name, private_key_of, public_key_of


class SharedSecret:
    """
    Raw ECDH shared secret: the x-coordinate of the shared point.

    Owns a mutable buffer that is zeroed by `wipe()`, or automatically
    when used as a context manager:

        with agree(key, peer_public_key) as secret:
            derived = derive_key(secret, config)
    """

    __slots__ = ("_buffer", "_wiped", "curve_name")

    def __init__(self, data, curve_name: str = ""):
        self._buffer = data if isinstance(data, bytearray) else bytearray(data)
        self._wiped = False
        self.curve_name = curve_name

    def view(self) -> memoryview:
        """
        Read-only view of the secret bytes, valid until the secret is wiped.

        Raises:
            InvalidConfigError: If the secret has already been wiped
        """
        if self._wiped:
            raise InvalidConfigError("Shared secret has been wiped")
        return memoryview(self._buffer).toreadonly()

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self):
        wipe(self._buffer)
        self._wiped = True

    def __len__(self):
        return len(self._buffer)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()

    def __repr__(self):
        # Never show the secret bytes
        state = "wiped" if self._wiped else f"{len(self._buffer)} bytes"
        return f"SharedSecret({self.curve_name}, {state})"


def coordinate_size(curve: ec.EllipticCurve) -> int:
    """Field element width in bytes: ceil(bit length / 8)."""
    return (curve.key_size + 7) // 8


def encode_x_coordinate(x, curve: ec.EllipticCurve) -> bytearray:
    """
    Encode an affine x-coordinate as a fixed-width big-endian string.

    Args:
        x: Coordinate as int or big-endian bytes (possibly with leading zeros stripped)
        curve: Curve defining the width

    Returns:
        bytearray: Coordinate left-padded with zeros to coordinate_size(curve)
    """
    size = coordinate_size(curve)

    if isinstance(x, int):
        if x < 0 or x.bit_length() > size * 8:
            raise InvalidKeyError("x-coordinate out of range for curve")
        return bytearray(x.to_bytes(size, "big"))

    if len(x) > size:
        raise InvalidKeyError(f"x-coordinate is {len(x)} bytes, curve width is {size}")
    encoded = bytearray(size - len(x))
    encoded += x
    return encoded


def agree(local_private_key, peer_public_key) -> SharedSecret:
    """
    Compute the ECDH shared secret between a local private key and a peer public key.

    Args:
        local_private_key: KeyHandle or ec.EllipticCurvePrivateKey
        peer_public_key: PublicKeyHandle, KeyHandle or ec.EllipticCurvePublicKey

    Returns:
        SharedSecret: Fixed-width x-coordinate; the caller wipes it

    Raises:
        InvalidKeyError: If either key is invalid or closed
        CurveMismatchError: If the keys are on different curves
    """
    private_key = private_key_of(local_private_key)
    public_key = public_key_of(peer_public_key)

    if private_key.curve.name != public_key.curve.name:
        raise CurveMismatchError(
            f"Curve mismatch: local key is {curve_name(private_key.curve)}, "
            f"peer key is {curve_name(public_key.curve)}"
        )

    # raw is immutable bytes from the engine and cannot be wiped; only the padded copy is
    try:
        raw = private_key.exchange(ec.ECDH(), public_key)
    except ValueError as e:
        raise InvalidKeyError(f"ECDH exchange rejected: {e}") from e

    return SharedSecret(encode_x_coordinate(raw, private_key.curve), curve_name(private_key.curve))
