"""
Fake signature that prefixes every encrypted RPG Maker asset.

Layout (16 bytes by default):
    magic     "RPGMV\\0\\0\\0"   5250474d56000000
    version   0.3.1            000301
    reserved  zero padding     0000000000
"""

from dataclasses import dataclass

from rpgmaker_decoder.core.crypto.hex_codec import from_hex, is_hex, to_hex


DEFAULT_SIGNATURE = "5250474d56000000"
DEFAULT_VERSION = "000301"
DEFAULT_REMAIN = "0000000000"


@dataclass(frozen=True)
class HeaderSignature:
    """
    Immutable reference bytes identifying an encrypted asset.

    Scheme variants (different version or reserved fields) are separate
    instances; nothing mutates a shared signature.
    """
    magic: bytes
    version: bytes
    reserved: bytes

    @classmethod
    def from_hex(
        cls,
        magic: str = DEFAULT_SIGNATURE,
        version: str = DEFAULT_VERSION,
        reserved: str = DEFAULT_REMAIN,
    ) -> "HeaderSignature":
        return cls(
            magic=from_hex(magic),
            version=from_hex(version),
            reserved=from_hex(reserved),
        )

    def to_bytes(self) -> bytes:
        return self.magic + self.version + self.reserved

    def to_hex(self) -> str:
        return to_hex(self.to_bytes())

    def __len__(self) -> int:
        return len(self.magic) + len(self.version) + len(self.reserved)

    def matches(self, candidate: bytes) -> bool:
        """Byte-for-byte comparison; any difference (length included) fails."""
        return bytes(candidate) == self.to_bytes()

    def matches_hex(self, candidate_hex: str) -> bool:
        """Compare a hex rendering of a candidate header, ignoring case."""
        candidate_hex = (candidate_hex or "").strip()
        if not is_hex(candidate_hex):
            return False
        return candidate_hex.lower() == self.to_hex()


# Signature written by RPG Maker MV 1.x and MZ
DEFAULT_HEADER_SIGNATURE = HeaderSignature.from_hex()
