import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from rpgmaker_decoder.cli import build_engine, main
from rpgmaker_decoder.services.header_engine import HeaderTransformEngine
from rpgmaker_decoder.services.key_recovery import PNG_HEADER


KEY_HEX = "d41d8cd98f00b204e9800998ecf8427e"
KEY = bytes.fromhex(KEY_HEX)
PNG_FILE = PNG_HEADER + b"\x00\x00\x00\x10" * 8

ENGINE = HeaderTransformEngine()


def run(argv) -> tuple:
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        code = main(argv)
    return code, out.getvalue().strip()


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp = tempfile.TemporaryDirectory()
        self.base = Path(self._temp.name).resolve()

    def tearDown(self) -> None:
        self._temp.cleanup()

    def test_extension(self) -> None:
        self.assertEqual(run(["extension", "rpgmvm"]), (0, "m4a"))
        self.assertEqual(run(["extension", "txt"])[0], 1)

    def test_recover_key(self) -> None:
        path = self.base / "Window.rpgmvp"
        path.write_bytes(ENGINE.encrypt_file(PNG_FILE, KEY))
        self.assertEqual(run(["recover-key", str(path)]), (0, KEY_HEX))

    def test_recover_key_from_short_file(self) -> None:
        path = self.base / "Window.rpgmvp"
        path.write_bytes(b"tiny")
        self.assertEqual(run(["recover-key", str(path)])[0], 1)

    def test_recover_key_from_directory(self) -> None:
        self.assertEqual(run(["recover-key", str(self.base)])[0], 1)

    def test_decrypt_single_file(self) -> None:
        path = self.base / "Title.rpgmvp"
        path.write_bytes(ENGINE.encrypt_file(PNG_FILE, KEY))
        code, _ = run(["decrypt", str(path), "--key", KEY_HEX])
        self.assertEqual(code, 0)
        self.assertEqual((self.base / "Title.png").read_bytes(), PNG_FILE)

    def test_decrypt_directory_discovers_key(self) -> None:
        source = self.base / "www" / "img" / "pictures"
        source.mkdir(parents=True)
        (source / "Title.rpgmvp").write_bytes(ENGINE.encrypt_file(PNG_FILE, KEY))
        output = self.base / "out"

        code, _ = run(["decrypt", str(self.base / "www"), "--output", str(output), "--workers", "1"])

        self.assertEqual(code, 0)
        self.assertEqual((output / "img" / "pictures" / "Title.png").read_bytes(), PNG_FILE)

    def test_decrypt_directory_without_any_key(self) -> None:
        source = self.base / "audio" / "se"
        source.mkdir(parents=True)
        (source / "Cursor.rpgmvo").write_bytes(ENGINE.encrypt_file(b"OggS" + bytes(40), KEY))
        output = self.base / "out"

        code, _ = run(["decrypt", str(self.base / "audio"), "--output", str(output)])

        self.assertEqual(code, 1)
        self.assertFalse(output.exists())

    def test_encrypt_directory_defaults_to_encrypted_folder(self) -> None:
        source = self.base / "decrypted" / "img"
        source.mkdir(parents=True)
        (source / "a.png").write_bytes(PNG_FILE)

        code, _ = run(["encrypt", str(source), "--key", KEY_HEX, "--workers", "1"])

        self.assertEqual(code, 0)
        self.assertEqual(
            (self.base / "decrypted" / "encrypted" / "a.rpgmvp").read_bytes(),
            ENGINE.encrypt_file(PNG_FILE, KEY),
        )
        self.assertFalse((self.base / "decrypted" / "decrypted").exists())

    def test_failed_files_give_exit_code_1(self) -> None:
        source = self.base / "img"
        source.mkdir()
        (source / "Bad.rpgmvp").write_bytes(b"Z" * 40)
        code, _ = run(["decrypt", str(source), "--key", KEY_HEX, "--output", str(self.base / "out")])
        self.assertEqual(code, 1)

    def test_no_verify_accepts_foreign_signature(self) -> None:
        path = self.base / "Title.rpgmvp"
        path.write_bytes(b"F" * 16 + ENGINE.encrypt_file(PNG_FILE, KEY)[16:])
        code, _ = run(["--no-verify", "restore", str(path)])
        self.assertEqual(code, 0)
        self.assertEqual((self.base / "Title.png").read_bytes(), PNG_FILE)
        self.assertFalse(build_engine(True).scheme.verify_signature)

    def test_project(self) -> None:
        www = self.base / "Game" / "www"
        (www / "img" / "faces").mkdir(parents=True)
        (www / "img" / "faces" / "Actor1.png_").write_bytes(ENGINE.encrypt_file(PNG_FILE, KEY))

        code, _ = run(["project", str(www), "--workers", "1"])

        self.assertEqual(code, 0)
        self.assertEqual(
            (self.base / "decrypted" / "img" / "faces" / "Actor1.png").read_bytes(), PNG_FILE
        )

    def test_project_requires_layout(self) -> None:
        self.assertEqual(run(["project", str(self.base)])[0], 1)


if __name__ == "__main__":
    unittest.main()
