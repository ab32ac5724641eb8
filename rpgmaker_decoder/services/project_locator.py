"""
Project root locator.

Follows the layout fingerprint the original decoder used: a candidate path
holding an ``img`` folder sits two levels below the root, one holding a
``www`` folder sits one level below it. The folder names are an external
convention of deployed games and are matched literally.
"""

import logging
from pathlib import Path
from typing import Union

from rpgmaker_decoder.core.errors import NotAProject


logger = logging.getLogger(__name__)

IMAGE_ASSET_DIR = "img"
WEB_ASSET_DIR = "www"


def resolve_root(candidate_path: Union[str, Path]) -> Path:
    """
    Resolve the project root for *candidate_path*.

    Raises:
        NotAProject: neither marker folder exists under *candidate_path*
    """
    candidate = Path(candidate_path).resolve()

    if (candidate / IMAGE_ASSET_DIR).is_dir():
        logger.info("Found '%s' in %s, using grandparent directory", IMAGE_ASSET_DIR, candidate)
        return candidate.parent.parent

    if (candidate / WEB_ASSET_DIR).is_dir():
        logger.info("Found '%s' in %s, using parent directory", WEB_ASSET_DIR, candidate)
        return candidate.parent

    raise NotAProject(
        f"Source path is invalid (does not contain an RPG Maker project): {candidate}"
    )
