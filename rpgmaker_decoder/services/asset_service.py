"""
Asset service for single-file and batch decoding.

Thin I/O shell around HeaderTransformEngine: reads files, picks the output
extension, writes results, and walks asset trees. Each file is decoded from
its own buffer, so the batch path can fan out to a thread pool.
"""
import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Tuple, Union

from rpgmaker_decoder.config import get_settings
from rpgmaker_decoder.core.crypto.xor_cipher import parse_key
from rpgmaker_decoder.core.errors import DecoderError, InvalidArgument
from rpgmaker_decoder.models.asset import (
    AssetFile,
    DecodeMode,
    DecodeSummary,
    FileOutcome,
    FileResult,
    ProjectDecodeResult,
)
from rpgmaker_decoder.services.asset_classifier import (
    ASSET_KINDS,
    AssetKind,
    EngineFlavor,
    asset_kind,
    extension_of,
    fake_extension,
    is_encrypted_extension,
    real_extension,
)
from rpgmaker_decoder.services.header_engine import HeaderTransformEngine, get_header_engine
from rpgmaker_decoder.services.project_locator import resolve_root
from rpgmaker_decoder.services.project_service import discover_key


logger = logging.getLogger(__name__)

KeyLike = Union[str, bytes, bytearray]


class AssetService:
    """Service for decrypting, restoring and encrypting RPG Maker assets."""

    def __init__(self, engine: Optional[HeaderTransformEngine] = None):
        self.settings = get_settings()
        self.engine = engine or get_header_engine()

    # -------------------------------------------------
    # In-memory
    # -------------------------------------------------

    def decode_bytes(
        self,
        content: bytes,
        extension: str,
        mode: DecodeMode,
        key: Optional[KeyLike] = None,
        flavor: EngineFlavor = EngineFlavor.MV,
    ) -> Tuple[bytes, str]:
        """
        Decode one asset held in memory.

        Args:
            content: raw file bytes
            extension: file extension without the dot (disguised for
                decrypt/restore, real for encrypt)
            mode: what to do with the header
            key: project key; required except when restoring images
            flavor: which disguised extensions to emit when encrypting

        Returns:
            Tuple of (output bytes, output extension)
        """
        mode = DecodeMode(mode)

        if mode is DecodeMode.ENCRYPT:
            out_ext = fake_extension(extension, flavor)
            return self.engine.encrypt_file(content, self._require_key(key)), out_ext

        out_ext = real_extension(extension)

        if mode is DecodeMode.RESTORE and asset_kind(out_ext) is AssetKind.IMAGE:
            return self.engine.restore_file(content), out_ext

        return self.engine.decrypt_file(content, self._require_key(key)), out_ext

    # -------------------------------------------------
    # Single file
    # -------------------------------------------------

    def decode_file(
        self,
        source: Union[str, Path],
        mode: DecodeMode = DecodeMode.DECRYPT,
        key: Optional[KeyLike] = None,
        output_path: Optional[Union[str, Path]] = None,
        flavor: EngineFlavor = EngineFlavor.MV,
    ) -> Path:
        """
        Decode *source* and write the result.

        Without *output_path* the file lands next to the source with the
        new extension.

        Returns:
            Path that was written
        """
        asset = AssetFile.load(source)
        data, out_ext = self.decode_bytes(asset.content, asset.extension, mode, key, flavor)

        target = Path(output_path) if output_path else asset.path.with_name(f"{asset.name}.{out_ext}")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)

        logger.debug("%s %s -> %s", DecodeMode(mode).value, asset.path, target)
        return target

    # -------------------------------------------------
    # Directory tree
    # -------------------------------------------------

    def decode_directory(
        self,
        source_dir: Union[str, Path],
        output_dir: Union[str, Path],
        mode: DecodeMode = DecodeMode.DECRYPT,
        key: Optional[KeyLike] = None,
        flavor: EngineFlavor = EngineFlavor.MV,
        workers: Optional[int] = None,
        copy_others: bool = False,
    ) -> DecodeSummary:
        """
        Decode every matching asset under *source_dir* into *output_dir*.

        The relative layout is preserved. Per-file failures are logged and
        collected in the summary; they do not stop the batch.
        """
        source_dir = Path(source_dir)
        output_dir = Path(output_dir)
        mode = DecodeMode(mode)

        if not source_dir.is_dir():
            raise FileNotFoundError(f"Source path not found: {source_dir}")

        # Validate once up front instead of once per file
        key_bytes = parse_key(key) if key is not None else None

        # List before writing so outputs inside source_dir are never revisited
        sources = self._collect_sources(source_dir)
        workers = max(1, workers or self.settings.decode_workers)
        logger.info("Found %d file(s) under %s, using %d worker(s)", len(sources), source_dir, workers)

        jobs = [
            dict(
                source=path,
                target_dir=output_dir / path.parent.relative_to(source_dir),
                mode=mode,
                key=key_bytes,
                flavor=flavor,
                copy_others=copy_others,
            )
            for path in sources
        ]

        summary = DecodeSummary()
        if workers <= 1:
            for job in jobs:
                summary.record(self._decode_one(**job))
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(self._decode_one, **job) for job in jobs]
                for future in as_completed(futures):
                    summary.record(future.result())

        logger.info(
            "Done: %d processed, %d copied, %d skipped, %d failed",
            summary.processed, summary.copied, summary.skipped, summary.failed,
        )
        return summary

    def decode_project(
        self,
        candidate_path: Union[str, Path],
        mode: DecodeMode = DecodeMode.DECRYPT,
        key: Optional[KeyLike] = None,
        output_dir: Optional[Union[str, Path]] = None,
        flavor: EngineFlavor = EngineFlavor.MV,
        workers: Optional[int] = None,
    ) -> ProjectDecodeResult:
        """
        Locate the project root, find the key if none was given, and decode
        the asset tree under *candidate_path*.

        Output defaults to ``<root>/<output_dir_name>`` (``<root>/encrypted``
        when encrypting).
        """
        mode = DecodeMode(mode)
        source_dir = Path(candidate_path).resolve()
        root = resolve_root(source_dir)

        if key is None and mode is not DecodeMode.ENCRYPT:
            key = discover_key(source_dir, self.engine)
        if key is None and mode is not DecodeMode.RESTORE:
            raise InvalidArgument(f"No encryption key given or found for {source_dir}")

        if output_dir:
            output = Path(output_dir)
        elif mode is DecodeMode.ENCRYPT:
            output = root / "encrypted"
        else:
            output = root / self.settings.output_dir_name
        summary = self.decode_directory(
            source_dir,
            output,
            mode=mode,
            key=key,
            flavor=flavor,
            workers=workers,
        )

        key_hex = parse_key(key).hex() if key is not None else None
        return ProjectDecodeResult(
            root=root,
            source_dir=source_dir,
            output_dir=output,
            key=key_hex,
            summary=summary,
        )

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------

    def _collect_sources(self, source_dir: Path) -> List[Path]:
        sources = []
        for root, dirs, files in os.walk(source_dir):
            dirs.sort()
            for name in sorted(files):
                sources.append(Path(root) / name)
        return sources

    @staticmethod
    def _is_candidate(extension: str, mode: DecodeMode) -> bool:
        if mode is DecodeMode.ENCRYPT:
            return extension in ASSET_KINDS
        return is_encrypted_extension(extension)

    def _decode_one(
        self,
        source: Path,
        target_dir: Path,
        mode: DecodeMode,
        key: Optional[bytes],
        flavor: EngineFlavor,
        copy_others: bool,
    ) -> FileResult:
        extension = extension_of(source)

        if not self._is_candidate(extension, mode):
            if not copy_others:
                return FileResult(source, FileOutcome.SKIPPED)
            target = target_dir / source.name
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
            except OSError as e:
                logger.warning("Failed to copy %s: %s", source, e)
                return FileResult(source, FileOutcome.FAILED, message=str(e))
            return FileResult(source, FileOutcome.COPIED, target)

        if key is None and mode is DecodeMode.RESTORE \
                and asset_kind(real_extension(extension)) is not AssetKind.IMAGE:
            logger.warning("Skipping %s: audio cannot be restored without a key", source)
            return FileResult(source, FileOutcome.SKIPPED, message="key required")

        try:
            asset = AssetFile.load(source)
            data, out_ext = self.decode_bytes(asset.content, extension, mode, key, flavor)
            target = target_dir / f"{asset.name}.{out_ext}"
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                f.write(data)
        except (DecoderError, OSError) as e:
            logger.warning("Failed to %s %s: %s", mode.value, source, e)
            return FileResult(source, FileOutcome.FAILED, message=str(e))

        logger.debug("%s %s -> %s", mode.value, source, target)
        return FileResult(source, FileOutcome.PROCESSED, target)

    @staticmethod
    def _require_key(key: Optional[KeyLike]) -> KeyLike:
        if key is None:
            raise InvalidArgument("An encryption key is required for this operation")
        return key


# Global instance
asset_service = AssetService()
