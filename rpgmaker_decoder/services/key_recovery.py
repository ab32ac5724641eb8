"""
Known-plaintext key recovery.

XOR is self-inverse: encrypted = plain ^ key  =>  key = encrypted ^ plain.
PNG files all start with the same 16 bytes (signature + IHDR chunk length
and type), so one encrypted image is enough to get the project key back.
"""

from rpgmaker_decoder.core.errors import LengthMismatch
from rpgmaker_decoder.core.scheme import DEFAULT_HEADER_LENGTH


PNG_HEADER = bytes([
    0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A,
    0x00, 0x00, 0x00, 0x0D, 0x49, 0x48, 0x44, 0x52,
])


def recover_key(
    encrypted_header: bytes,
    reference_header: bytes,
    header_length: int = DEFAULT_HEADER_LENGTH,
) -> bytes:
    """
    Derive the project key from an encrypted header and its known plaintext.

    Args:
        encrypted_header: header bytes as stored after the fake signature
        reference_header: cleartext header for the asset type (e.g. PNG_HEADER)
        header_length: expected length of both inputs

    Returns:
        The key, ``header_length`` bytes long

    Raises:
        LengthMismatch: if either input is not exactly ``header_length`` bytes
    """
    if len(encrypted_header) != header_length:
        raise LengthMismatch(
            f"Encrypted header is {len(encrypted_header)} bytes, expected {header_length}"
        )
    if len(reference_header) != header_length:
        raise LengthMismatch(
            f"Reference header is {len(reference_header)} bytes, expected {header_length}"
        )

    return bytes(e ^ p for e, p in zip(encrypted_header, reference_header))
