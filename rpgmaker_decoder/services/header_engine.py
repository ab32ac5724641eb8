"""
Header transform engine.

Encrypted asset layout:

    [ fake signature ][ header XOR key ][ payload (plain) ... ]
      prefix_length     header_length

Only the header is obfuscated. Decrypting means dropping the signature and
XORing the header back; the payload is copied through untouched.

The engine holds nothing but an immutable HeaderScheme, so one instance can
be shared across threads as long as each caller owns its buffer.
"""

import logging
from functools import lru_cache
from typing import Union

from rpgmaker_decoder.config import get_settings
from rpgmaker_decoder.core.crypto.xor_cipher import parse_key, xor_transform
from rpgmaker_decoder.core.errors import (
    InvalidArgument,
    LengthMismatch,
    SignatureMismatch,
    TooShort,
)
from rpgmaker_decoder.core.scheme import DEFAULT_SCHEME, HeaderScheme
from rpgmaker_decoder.services.key_recovery import PNG_HEADER, recover_key


logger = logging.getLogger(__name__)

KeyLike = Union[str, bytes, bytearray]


class HeaderTransformEngine:
    """Validates, decrypts, restores and re-obfuscates asset headers."""

    def __init__(self, scheme: HeaderScheme = DEFAULT_SCHEME):
        self._scheme = scheme

    @property
    def scheme(self) -> HeaderScheme:
        return self._scheme

    # -------------------------------------------------
    # Header-level operations
    # -------------------------------------------------

    def validate_and_strip(self, file_bytes: Union[bytes, bytearray]) -> bytes:
        """
        Check the fake signature and return the encrypted header.

        Raises:
            TooShort: buffer cannot hold signature + header
            SignatureMismatch: prefix is not the expected signature
                (only when signature checking is enabled)
        """
        scheme = self._scheme
        if file_bytes is None:
            raise InvalidArgument("File content must not be None")

        if len(file_bytes) < scheme.minimum_length:
            raise TooShort(
                f"File content must be at least {scheme.minimum_length} bytes long, "
                f"got {len(file_bytes)}"
            )

        prefix = bytes(file_bytes[:scheme.prefix_length])
        if scheme.verify_signature and not scheme.signature.matches(prefix):
            raise SignatureMismatch(
                f"Unexpected signature {prefix.hex()}, "
                f"expected {scheme.signature.to_hex()}"
            )

        return bytes(file_bytes[scheme.prefix_length:scheme.minimum_length])

    def decrypt_header(self, header: bytes, key: KeyLike) -> bytes:
        """XOR an encrypted header back to cleartext (or the reverse)."""
        return xor_transform(header, parse_key(key))

    def decrypt_header_in_place(self, buffer: bytearray, key: KeyLike) -> None:
        """
        Decrypt the header region of *buffer* without moving anything.

        The signature stays where it is; only bytes
        ``prefix_length .. prefix_length + header_length`` change. Nothing is
        written if validation fails.
        """
        header = self.validate_and_strip(buffer)
        cleartext = self.decrypt_header(header, key)
        start = self._scheme.prefix_length
        buffer[start:start + len(cleartext)] = cleartext

    def restore_known_header(
        self,
        buffer: bytearray,
        reference_header: bytes = PNG_HEADER,
    ) -> None:
        """
        Overwrite the header region of *buffer* with a known cleartext header.

        Used for images when the key is unknown: every PNG starts with the
        same 16 bytes, so there is nothing to decrypt.

        Raises:
            LengthMismatch: reference is not exactly one header long
        """
        self._check_reference(reference_header)
        self.validate_and_strip(buffer)
        start = self._scheme.prefix_length
        buffer[start:start + self._scheme.header_length] = reference_header

    # -------------------------------------------------
    # Whole-file operations
    # -------------------------------------------------

    def decrypt_file(self, file_bytes: bytes, key: KeyLike) -> bytes:
        """Return the original asset: cleartext header followed by the payload."""
        header = self.validate_and_strip(file_bytes)
        cleartext = self.decrypt_header(header, key)
        return cleartext + bytes(file_bytes[self._scheme.minimum_length:])

    def restore_file(
        self,
        file_bytes: bytes,
        reference_header: bytes = PNG_HEADER,
    ) -> bytes:
        """Return the original asset with its header replaced by *reference_header*."""
        self._check_reference(reference_header)
        self.validate_and_strip(file_bytes)
        return bytes(reference_header) + bytes(file_bytes[self._scheme.minimum_length:])

    def encrypt_file(self, plain_bytes: bytes, key: KeyLike) -> bytes:
        """
        Re-obfuscate a plain asset.

        Raises:
            TooShort: asset is shorter than one header
        """
        header_length = self._scheme.header_length
        if plain_bytes is None or len(plain_bytes) < header_length:
            raise TooShort(
                f"Asset must be at least {header_length} bytes long to encrypt"
            )

        encrypted = xor_transform(plain_bytes[:header_length], parse_key(key))
        return (
            self._scheme.signature.to_bytes()
            + encrypted
            + bytes(plain_bytes[header_length:])
        )

    def recover_key(
        self,
        file_bytes: bytes,
        reference_header: bytes = PNG_HEADER,
    ) -> bytes:
        """Derive the project key from an encrypted asset of known type."""
        header = self.validate_and_strip(file_bytes)
        key = recover_key(header, reference_header, self._scheme.header_length)
        logger.debug("Recovered key %s", key.hex())
        return key

    def _check_reference(self, reference_header: bytes) -> None:
        if len(reference_header) != self._scheme.header_length:
            raise LengthMismatch(
                f"Reference header is {len(reference_header)} bytes, "
                f"expected {self._scheme.header_length}"
            )


@lru_cache
def get_header_engine() -> HeaderTransformEngine:
    """Engine configured from application settings (cached)."""
    return HeaderTransformEngine(HeaderScheme.from_settings(get_settings()))
