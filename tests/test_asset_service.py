import json
import tempfile
import unittest
from pathlib import Path

from rpgmaker_decoder.core.errors import InvalidArgument, NotAProject, UnknownExtension
from rpgmaker_decoder.models.asset import AssetFile, DecodeMode
from rpgmaker_decoder.services.asset_classifier import EngineFlavor
from rpgmaker_decoder.services.asset_service import AssetService
from rpgmaker_decoder.services.header_engine import HeaderTransformEngine
from rpgmaker_decoder.services.key_recovery import PNG_HEADER


KEY_HEX = "d41d8cd98f00b204e9800998ecf8427e"
KEY = bytes.fromhex(KEY_HEX)

PNG_FILE = PNG_HEADER + b"\x00\x00\x01\x00" * 20
OGG_FILE = b"OggS\x00\x02\x00\x00\x00\x00\x00\x00\x00\x00\x11\x22" + b"vorbis" * 10


class AssetServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = HeaderTransformEngine()
        self.service = AssetService(engine=self.engine)
        self._temp = tempfile.TemporaryDirectory()
        self.base = Path(self._temp.name).resolve()

    def tearDown(self) -> None:
        self._temp.cleanup()

    def write(self, relative: str, data: bytes) -> Path:
        path = self.base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def build_game(self, flavor: EngineFlavor = EngineFlavor.MV) -> Path:
        """Game/www with one image, one sound and a plain data file."""
        www = self.base / "Game" / "www"
        image_ext = "rpgmvp" if flavor is EngineFlavor.MV else "png_"
        audio_ext = "rpgmvo" if flavor is EngineFlavor.MV else "ogg_"
        self.write(f"Game/www/img/pictures/Title.{image_ext}", self.engine.encrypt_file(PNG_FILE, KEY))
        self.write(f"Game/www/audio/bgm/Theme.{audio_ext}", self.engine.encrypt_file(OGG_FILE, KEY))
        self.write("Game/www/data/Map001.json", b"{}")
        return www


class DecodeBytesTests(AssetServiceTestCase):
    def test_decrypt(self) -> None:
        data, ext = self.service.decode_bytes(
            self.engine.encrypt_file(OGG_FILE, KEY), "rpgmvo", DecodeMode.DECRYPT, KEY_HEX
        )
        self.assertEqual((data, ext), (OGG_FILE, "ogg"))

    def test_restore_image_without_key(self) -> None:
        data, ext = self.service.decode_bytes(
            self.engine.encrypt_file(PNG_FILE, KEY), "png_", DecodeMode.RESTORE
        )
        self.assertEqual((data, ext), (PNG_FILE, "png"))

    def test_restore_audio_needs_key(self) -> None:
        encrypted = self.engine.encrypt_file(OGG_FILE, KEY)
        with self.assertRaises(InvalidArgument):
            self.service.decode_bytes(encrypted, "ogg_", DecodeMode.RESTORE)
        data, ext = self.service.decode_bytes(encrypted, "ogg_", DecodeMode.RESTORE, KEY)
        self.assertEqual((data, ext), (OGG_FILE, "ogg"))

    def test_encrypt_uses_flavor_extension(self) -> None:
        data, ext = self.service.decode_bytes(PNG_FILE, "png", DecodeMode.ENCRYPT, KEY, EngineFlavor.MZ)
        self.assertEqual(ext, "png_")
        self.assertEqual(self.engine.decrypt_file(data, KEY), PNG_FILE)

    def test_unknown_extension(self) -> None:
        with self.assertRaises(UnknownExtension):
            self.service.decode_bytes(PNG_FILE, "txt", DecodeMode.DECRYPT, KEY)

    def test_decrypt_without_key(self) -> None:
        with self.assertRaises(InvalidArgument):
            self.service.decode_bytes(self.engine.encrypt_file(PNG_FILE, KEY), "rpgmvp", "decrypt")


class DecodeFileTests(AssetServiceTestCase):
    def test_asset_file_load(self) -> None:
        path = self.write("img/Actor1.rpgmvp", b"abc")
        asset = AssetFile.load(path)
        self.assertEqual(asset.name, "Actor1")
        self.assertEqual(asset.extension, "rpgmvp")
        self.assertEqual(asset.content, b"abc")

    def test_asset_file_missing(self) -> None:
        with self.assertRaises(FileNotFoundError):
            AssetFile.load(self.base / "missing.rpgmvp")

    def test_writes_next_to_source_by_default(self) -> None:
        source = self.write("img/Actor1.rpgmvp", self.engine.encrypt_file(PNG_FILE, KEY))
        target = self.service.decode_file(source, key=KEY_HEX)
        self.assertEqual(target, self.base / "img" / "Actor1.png")
        self.assertEqual(target.read_bytes(), PNG_FILE)

    def test_explicit_output_path(self) -> None:
        source = self.write("Actor1.png", PNG_FILE)
        target = self.service.decode_file(
            source, DecodeMode.ENCRYPT, KEY, output_path=self.base / "out" / "x.rpgmvp"
        )
        self.assertEqual(target.read_bytes(), self.engine.encrypt_file(PNG_FILE, KEY))


class DecodeDirectoryTests(AssetServiceTestCase):
    def test_decrypt_tree(self) -> None:
        www = self.build_game()
        output = self.base / "out"
        summary = self.service.decode_directory(www, output, key=KEY_HEX, workers=1)

        self.assertEqual(summary.processed, 2)
        self.assertEqual(summary.skipped, 1)
        self.assertTrue(summary.ok)
        self.assertEqual((output / "img" / "pictures" / "Title.png").read_bytes(), PNG_FILE)
        self.assertEqual((output / "audio" / "bgm" / "Theme.ogg").read_bytes(), OGG_FILE)
        self.assertFalse((output / "data").exists())

    def test_thread_pool_gives_same_result(self) -> None:
        www = self.build_game(EngineFlavor.MZ)
        output = self.base / "out"
        summary = self.service.decode_directory(www, output, key=KEY, workers=4, copy_others=True)

        self.assertEqual((summary.processed, summary.copied, summary.failed), (2, 1, 0))
        self.assertEqual((output / "img" / "pictures" / "Title.png").read_bytes(), PNG_FILE)
        self.assertEqual((output / "data" / "Map001.json").read_bytes(), b"{}")

    def test_restore_without_key_skips_audio(self) -> None:
        www = self.build_game()
        output = self.base / "out"
        summary = self.service.decode_directory(www, output, mode=DecodeMode.RESTORE, workers=1)

        self.assertEqual(summary.processed, 1)
        self.assertEqual(summary.skipped, 2)
        self.assertEqual((output / "img" / "pictures" / "Title.png").read_bytes(), PNG_FILE)
        self.assertFalse((output / "audio" / "bgm" / "Theme.ogg").exists())

    def test_bad_files_are_reported(self) -> None:
        www = self.build_game()
        self.write("Game/www/img/pictures/Broken.rpgmvp", b"RPGMV but far too short")
        self.write("Game/www/img/pictures/Forged.rpgmvp", b"X" * 64)
        summary = self.service.decode_directory(www, self.base / "out", key=KEY, workers=1)

        self.assertEqual(summary.processed, 2)
        self.assertEqual(summary.failed, 2)
        self.assertFalse(summary.ok)
        self.assertTrue(any("Broken.rpgmvp" in failure for failure in summary.failures))
        self.assertTrue(any("Forged.rpgmvp" in failure for failure in summary.failures))

    def test_encrypt_tree_round_trips(self) -> None:
        www = self.build_game()
        decrypted = self.base / "decrypted"
        encrypted = self.base / "encrypted"
        self.service.decode_directory(www, decrypted, key=KEY, workers=1)
        summary = self.service.decode_directory(
            decrypted, encrypted, mode=DecodeMode.ENCRYPT, key=KEY, flavor=EngineFlavor.MZ, workers=1
        )

        self.assertEqual(summary.processed, 2)
        self.assertEqual(
            (encrypted / "img" / "pictures" / "Title.png_").read_bytes(),
            self.engine.encrypt_file(PNG_FILE, KEY),
        )

    def test_copy_failure_is_recorded(self) -> None:
        www = self.build_game()
        output = self.base / "out"
        output.mkdir()
        (output / "data").write_bytes(b"a file where a folder should be")

        summary = self.service.decode_directory(www, output, key=KEY, workers=2, copy_others=True)

        self.assertEqual((summary.processed, summary.copied, summary.failed), (2, 0, 1))
        self.assertTrue(any("Map001.json" in failure for failure in summary.failures))

    def test_missing_source(self) -> None:
        with self.assertRaises(FileNotFoundError):
            self.service.decode_directory(self.base / "nope", self.base / "out", key=KEY)

    def test_bad_key_fails_before_walking(self) -> None:
        www = self.build_game()
        with self.assertRaises(InvalidArgument):
            self.service.decode_directory(www, self.base / "out", key="not hex")


class DecodeProjectTests(AssetServiceTestCase):
    def test_uses_system_json_key(self) -> None:
        www = self.build_game()
        self.write("Game/www/data/System.json", json.dumps({"encryptionKey": KEY_HEX}).encode())

        result = self.service.decode_project(www, workers=1)

        self.assertEqual(result.root, self.base)
        self.assertEqual(result.key, KEY_HEX)
        self.assertEqual(result.output_dir, self.base / "decrypted")
        self.assertEqual(result.summary.processed, 2)
        self.assertEqual(
            (self.base / "decrypted" / "audio" / "bgm" / "Theme.ogg").read_bytes(), OGG_FILE
        )

    def test_recovers_key_from_image(self) -> None:
        www = self.build_game()
        result = self.service.decode_project(www, output_dir=self.base / "out", workers=1)
        self.assertEqual(result.key, KEY_HEX)
        self.assertEqual((self.base / "out" / "audio" / "bgm" / "Theme.ogg").read_bytes(), OGG_FILE)

    def test_unreadable_system_json_falls_back_to_image(self) -> None:
        www = self.build_game()
        for content in (b'{"gameTitle": "\xff\xfe"}', b"[1, 2]"):
            self.write("Game/www/data/System.json", content)
            result = self.service.decode_project(www, output_dir=self.base / "out", workers=1)
            self.assertEqual(result.key, KEY_HEX)
            self.assertEqual(result.summary.processed, 2)

    def test_game_folder_with_www(self) -> None:
        self.build_game()
        game = self.base / "Game"
        result = self.service.decode_project(game, key=KEY_HEX, workers=1)
        self.assertEqual(result.root, self.base)
        self.assertEqual(
            (self.base / "decrypted" / "www" / "img" / "pictures" / "Title.png").read_bytes(),
            PNG_FILE,
        )

    def test_no_key_anywhere(self) -> None:
        self.write("Game/www/audio/bgm/Theme.rpgmvo", self.engine.encrypt_file(OGG_FILE, KEY))
        (self.base / "Game" / "www" / "img").mkdir()
        with self.assertRaises(InvalidArgument):
            self.service.decode_project(self.base / "Game" / "www")

    def test_not_a_project(self) -> None:
        with self.assertRaises(NotAProject):
            self.service.decode_project(self.base, key=KEY)


if __name__ == "__main__":
    unittest.main()
