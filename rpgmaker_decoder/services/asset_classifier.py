"""
Disguised extension <-> real media type.

MV ships assets as .rpgmvp / .rpgmvo / .rpgmvm, MZ as .png_ / .ogg_ / .m4a_.
The table is closed: anything else is an error, never passed through.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Union

from rpgmaker_decoder.core.errors import UnknownExtension


class EngineFlavor(str, Enum):
    MV = "mv"
    MZ = "mz"


class AssetKind(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"


REAL_EXTENSIONS: Dict[str, str] = {
    "rpgmvp": "png",
    "png_": "png",
    "rpgmvm": "m4a",
    "m4a_": "m4a",
    "rpgmvo": "ogg",
    "ogg_": "ogg",
}

FAKE_EXTENSIONS: Dict[EngineFlavor, Dict[str, str]] = {
    EngineFlavor.MV: {"png": "rpgmvp", "ogg": "rpgmvo", "m4a": "rpgmvm"},
    EngineFlavor.MZ: {"png": "png_", "ogg": "ogg_", "m4a": "m4a_"},
}

ASSET_KINDS: Dict[str, AssetKind] = {
    "png": AssetKind.IMAGE,
    "ogg": AssetKind.AUDIO,
    "m4a": AssetKind.AUDIO,
}

MEDIA_TYPES: Dict[str, str] = {
    "png": "image/png",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
}

OCTET_STREAM = "application/octet-stream"


def real_extension(fake_extension: str) -> str:
    """
    Map a disguised extension to the real one.

    Lookup is exact: no case folding, no leading dot.

    Raises:
        UnknownExtension: for anything outside the table
    """
    try:
        return REAL_EXTENSIONS[fake_extension]
    except KeyError:
        raise UnknownExtension(f"Unknown extension: {fake_extension!r}") from None


def fake_extension(real_ext: str, flavor: EngineFlavor = EngineFlavor.MV) -> str:
    """Disguised extension used by *flavor* for a real extension."""
    try:
        return FAKE_EXTENSIONS[EngineFlavor(flavor)][real_ext]
    except (KeyError, ValueError):
        raise UnknownExtension(f"No {flavor} extension for {real_ext!r}") from None


def is_encrypted_extension(ext: str) -> bool:
    return ext in REAL_EXTENSIONS


def asset_kind(real_ext: str) -> AssetKind:
    try:
        return ASSET_KINDS[real_ext]
    except KeyError:
        raise UnknownExtension(f"Unknown asset type: {real_ext!r}") from None


def media_type(real_ext: str) -> str:
    return MEDIA_TYPES.get(real_ext, OCTET_STREAM)


def extension_of(path: Union[str, Path]) -> str:
    """File extension without the leading dot, case preserved."""
    return Path(path).suffix[1:]
