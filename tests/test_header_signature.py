import unittest

from rpgmaker_decoder.config import Settings
from rpgmaker_decoder.core.crypto.header_signature import (
    DEFAULT_HEADER_SIGNATURE,
    HeaderSignature,
)
from rpgmaker_decoder.core.errors import InvalidArgument
from rpgmaker_decoder.core.scheme import DEFAULT_SCHEME, HeaderScheme


SIGNATURE_BYTES = bytes.fromhex("5250474d56000000" "000301" "0000000000")


class HeaderSignatureTests(unittest.TestCase):
    def test_default_layout(self) -> None:
        self.assertEqual(DEFAULT_HEADER_SIGNATURE.to_bytes(), SIGNATURE_BYTES)
        self.assertEqual(len(DEFAULT_HEADER_SIGNATURE), 16)
        self.assertTrue(SIGNATURE_BYTES.startswith(b"RPGMV"))

    def test_matches_exact_bytes(self) -> None:
        self.assertTrue(DEFAULT_HEADER_SIGNATURE.matches(SIGNATURE_BYTES))
        self.assertTrue(DEFAULT_HEADER_SIGNATURE.matches(bytearray(SIGNATURE_BYTES)))

    def test_any_flipped_byte_fails(self) -> None:
        for i in range(len(SIGNATURE_BYTES)):
            corrupted = bytearray(SIGNATURE_BYTES)
            corrupted[i] ^= 0x01
            self.assertFalse(DEFAULT_HEADER_SIGNATURE.matches(bytes(corrupted)), i)

    def test_length_difference_fails(self) -> None:
        self.assertFalse(DEFAULT_HEADER_SIGNATURE.matches(SIGNATURE_BYTES[:15]))
        self.assertFalse(DEFAULT_HEADER_SIGNATURE.matches(SIGNATURE_BYTES + b"\x00"))

    def test_hex_comparison_ignores_case(self) -> None:
        self.assertTrue(DEFAULT_HEADER_SIGNATURE.matches_hex(SIGNATURE_BYTES.hex().upper()))
        self.assertFalse(DEFAULT_HEADER_SIGNATURE.matches_hex("not hex"))

    def test_variant_with_other_version(self) -> None:
        variant = HeaderSignature.from_hex(version="000302")
        self.assertNotEqual(variant, DEFAULT_HEADER_SIGNATURE)
        self.assertFalse(variant.matches(SIGNATURE_BYTES))
        self.assertEqual(variant.to_bytes()[8:11], b"\x00\x03\x02")

    def test_is_immutable(self) -> None:
        with self.assertRaises(Exception):
            DEFAULT_HEADER_SIGNATURE.version = b"\x00\x00\x00"


class HeaderSchemeTests(unittest.TestCase):
    def test_default_lengths(self) -> None:
        self.assertEqual(DEFAULT_SCHEME.header_length, 16)
        self.assertEqual(DEFAULT_SCHEME.prefix_length, 16)
        self.assertEqual(DEFAULT_SCHEME.minimum_length, 32)
        self.assertTrue(DEFAULT_SCHEME.verify_signature)

    def test_from_settings(self) -> None:
        settings = Settings(signature_version="000302", verify_signature=False)
        scheme = HeaderScheme.from_settings(settings)
        self.assertFalse(scheme.verify_signature)
        self.assertEqual(scheme.signature, HeaderSignature.from_hex(version="000302"))

    def test_signature_must_fill_header_length(self) -> None:
        with self.assertRaises(InvalidArgument):
            HeaderScheme(header_length=8)
        with self.assertRaises(InvalidArgument):
            HeaderScheme(header_length=0)


if __name__ == "__main__":
    unittest.main()
