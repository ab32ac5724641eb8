"""
Project key discovery.

A deployed game normally keeps its key in ``System.json`` (``encryptionKey``)
alongside the ``hasEncryptedImages`` / ``hasEncryptedAudio`` flags. When that
file is missing or stripped, the key is recovered from the first encrypted
image in the asset tree using the PNG known-plaintext header.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from rpgmaker_decoder.core.crypto.hex_codec import is_hex, to_hex
from rpgmaker_decoder.core.errors import DecoderError
from rpgmaker_decoder.services.asset_classifier import (
    AssetKind,
    asset_kind,
    extension_of,
    is_encrypted_extension,
    real_extension,
)
from rpgmaker_decoder.services.header_engine import HeaderTransformEngine
from rpgmaker_decoder.services.key_recovery import PNG_HEADER


logger = logging.getLogger(__name__)

SYSTEM_JSON_LOCATIONS = (
    Path("www") / "data" / "System.json",   # MV
    Path("data") / "System.json",           # MZ, or MV when pointed at www/
)


@dataclass(frozen=True)
class EncryptionFlags:
    has_encrypted_images: bool
    has_encrypted_audio: bool


def find_system_json(base_dir: Union[str, Path]) -> Optional[Path]:
    """Locate System.json under *base_dir*, MV layout first."""
    base = Path(base_dir)
    for relative in SYSTEM_JSON_LOCATIONS:
        candidate = base / relative
        if candidate.is_file():
            return candidate
    return None


def _load_system_json(base_dir: Union[str, Path]) -> Optional[dict]:
    path = find_system_json(base_dir)
    if path is None:
        return None

    # Some builds prepend a UTF-8 BOM
    with open(path, "r", encoding="utf-8-sig") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Could not parse %s: %s", path, e)
            return None

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level is not an object", path)
        return None
    return data


def read_project_key(base_dir: Union[str, Path]) -> Optional[str]:
    """``encryptionKey`` from System.json, or None if absent or not hex."""
    data = _load_system_json(base_dir)
    if not data:
        return None

    key = data.get("encryptionKey")
    if isinstance(key, str) and is_hex(key):
        return key.lower()
    return None


def read_encryption_flags(base_dir: Union[str, Path]) -> Optional[EncryptionFlags]:
    data = _load_system_json(base_dir)
    if data is None:
        return None
    return EncryptionFlags(
        has_encrypted_images=bool(data.get("hasEncryptedImages", False)),
        has_encrypted_audio=bool(data.get("hasEncryptedAudio", False)),
    )


def iter_encrypted_assets(source_dir: Union[str, Path]) -> Iterator[Path]:
    """Every file under *source_dir* with a disguised extension, sorted per folder."""
    for root, dirs, files in os.walk(source_dir):
        dirs.sort()
        for name in sorted(files):
            if is_encrypted_extension(extension_of(name)):
                yield Path(root) / name


def discover_key(
    base_dir: Union[str, Path],
    engine: HeaderTransformEngine,
) -> Optional[str]:
    """
    Find the project key as hex.

    System.json wins; otherwise the first encrypted image that passes
    signature validation donates its header for known-plaintext recovery.
    """
    key = read_project_key(base_dir)
    if key:
        logger.info("Using encryptionKey from System.json")
        return key

    for path in iter_encrypted_assets(base_dir):
        if asset_kind(real_extension(extension_of(path))) is not AssetKind.IMAGE:
            continue
        with open(path, "rb") as f:
            head = f.read(engine.scheme.minimum_length)
        try:
            recovered = engine.recover_key(head)
        except DecoderError as e:
            logger.debug("Skipping %s for key recovery: %s", path, e)
            continue
        logger.info("Recovered key from %s", path)
        return to_hex(recovered)

    logger.warning("No key source found under %s", base_dir)
    return None
