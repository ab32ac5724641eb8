"""
XOR Cipher Utility

Purpose:
- Repeating-key XOR used by RPG Maker MV/MZ on asset headers
- NOT cryptographic security
- Reversible using the same key (applying it twice is a no-op)

Definition:
    output[i] = data[i] ^ key[i % len(key)]

This is endianness-free and defined for any non-empty key. For a key at
least as long as the data it is numerically the same as XORing the whole
buffer as one big integer against the key truncated to the data length.
"""

from typing import Union

from rpgmaker_decoder.core.crypto.hex_codec import from_hex
from rpgmaker_decoder.core.errors import InvalidArgument


def parse_key(key: Union[str, bytes, bytearray]) -> bytes:
    """
    Normalize a project key.

    Strings are hex text (the ``encryptionKey`` form from System.json);
    bytes are used as-is.

    Raises:
        InvalidArgument: if the key is empty or not valid hex
    """
    if key is None:
        raise InvalidArgument("XOR key must not be None")

    if isinstance(key, str):
        return from_hex(key)

    if not isinstance(key, (bytes, bytearray)):
        raise InvalidArgument(f"Unsupported key type: {type(key).__name__}")

    if not key:
        raise InvalidArgument("XOR key must not be empty")

    return bytes(key)


def xor_transform(data: Union[bytes, bytearray], key: Union[bytes, bytearray]) -> bytes:
    """
    Apply the repeating-key XOR to *data*.

    Raises:
        InvalidArgument: if *data* or *key* is empty
    """
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidArgument("xor_transform expects bytes-like data")
    if not data:
        raise InvalidArgument("XOR data must not be empty")
    if not key:
        raise InvalidArgument("XOR key must not be empty")

    key_len = len(key)
    result = bytearray(len(data))

    for i, byte in enumerate(data):
        result[i] = byte ^ key[i % key_len]

    return bytes(result)


class XORCipher:
    """
    Stateless XOR cipher bound to one project key.
    """

    def __init__(self, key: Union[str, bytes]):
        self._key = parse_key(key)

    @property
    def key(self) -> bytes:
        return self._key

    def apply(self, data: bytes) -> bytes:
        """
        Apply XOR cipher to input bytes.

        The same method is used for encryption and decryption.

        Args:
            data: raw bytes (encrypted or plain)

        Returns:
            XOR-processed bytes, same length as *data*
        """
        return xor_transform(data, self._key)
