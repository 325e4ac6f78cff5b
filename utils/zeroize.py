"""
Best-effort zeroization of sensitive buffers.

Python bytes objects are immutable and cannot be wiped; only mutable buffers
(bytearray, writable memoryview) are overwritten in place.
"""


def wipe(buffer) -> bool:
    """
    Overwrite a mutable buffer with zeros in place.

    Args:
        buffer: bytearray or writable memoryview

    Returns:
        bool: True if the buffer was wiped, False if it is immutable
    """
    if isinstance(buffer, bytearray):
        buffer[:] = b"\x00" * len(buffer)
        return True

    if isinstance(buffer, memoryview) and not buffer.readonly:
        # Byte view so non-byte formats ("I", "d", ...) wipe too
        view = buffer.cast("B")
        view[:] = bytes(view.nbytes)
        return True

    return False
