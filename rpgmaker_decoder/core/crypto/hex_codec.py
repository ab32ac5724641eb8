"""
Hex text <-> bytes conversion.

Keys live in System.json as hex strings and derived keys are reported back
the same way, so both directions go through here.
"""

import re
from typing import Union

from rpgmaker_decoder.core.errors import InvalidArgument


_HEX_PATTERN = re.compile(r"(?:[0-9A-Fa-f]{2})+")


def is_hex(text: str) -> bool:
    """True if *text* is a non-empty, even-length run of hex digits."""
    return bool(text) and bool(_HEX_PATTERN.fullmatch(text))


def to_hex(data: Union[bytes, bytearray]) -> str:
    """Lowercase hex representation of *data*."""
    return bytes(data).hex()


def from_hex(text: str) -> bytes:
    """
    Decode hex text into bytes.

    Surrounding whitespace is ignored; case is not significant.

    Raises:
        InvalidArgument: if *text* is empty or not valid hex
    """
    text = (text or "").strip()
    if not is_hex(text):
        raise InvalidArgument(f"Not a valid hex string: {text!r}")
    return bytes.fromhex(text)
