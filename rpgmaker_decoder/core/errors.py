"""
Decoder error hierarchy.

Every failure in the header transform pipeline is a locally detectable
precondition violation. Each one gets its own type so callers (API, CLI,
batch decoder) can map it without parsing messages.
"""


class DecoderError(Exception):
    """Base class for all decoder errors."""


class InvalidArgument(DecoderError, ValueError):
    """Raised for empty keys, empty data, or malformed key text."""


class TooShort(DecoderError):
    """Raised when a buffer cannot hold the fake signature plus a header."""


class SignatureMismatch(DecoderError):
    """Raised when the leading bytes are not the expected fake signature."""


class UnknownExtension(DecoderError):
    """Raised for an extension outside the closed disguised-extension table."""


class LengthMismatch(DecoderError):
    """Raised when a header or reference header has the wrong length."""


class NotAProject(DecoderError):
    """Raised when a path does not look like an RPG Maker project layout."""
