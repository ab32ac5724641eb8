"""
Header Scheme

Immutable description of one obfuscation variant: which fake signature to
expect, how long the encrypted header is, and whether the signature is
checked at all. Passed into the engine at construction time.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rpgmaker_decoder.core.crypto.header_signature import (
    DEFAULT_HEADER_SIGNATURE,
    HeaderSignature,
)
from rpgmaker_decoder.core.errors import InvalidArgument

if TYPE_CHECKING:
    from rpgmaker_decoder.config import Settings


DEFAULT_HEADER_LENGTH = 16


@dataclass(frozen=True)
class HeaderScheme:
    """
    Attributes:
        signature: expected fake signature
        header_length: number of encrypted bytes after the signature
        verify_signature: reject buffers whose prefix is not the signature
    """
    signature: HeaderSignature = field(default=DEFAULT_HEADER_SIGNATURE)
    header_length: int = DEFAULT_HEADER_LENGTH
    verify_signature: bool = True

    def __post_init__(self):
        if self.header_length <= 0:
            raise InvalidArgument("header_length must be positive")
        if len(self.signature) != self.header_length:
            raise InvalidArgument(
                f"Signature is {len(self.signature)} bytes, "
                f"expected {self.header_length}"
            )

    @property
    def prefix_length(self) -> int:
        """Bytes taken by the fake signature."""
        return len(self.signature)

    @property
    def minimum_length(self) -> int:
        """Smallest buffer that holds the signature and one full header."""
        return self.prefix_length + self.header_length

    @classmethod
    def from_settings(cls, settings: "Settings") -> "HeaderScheme":
        return cls(
            signature=HeaderSignature.from_hex(
                settings.signature,
                settings.signature_version,
                settings.signature_remain,
            ),
            header_length=settings.header_length,
            verify_signature=settings.verify_signature,
        )


DEFAULT_SCHEME = HeaderScheme()
