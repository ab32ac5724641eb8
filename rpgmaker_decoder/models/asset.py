from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from rpgmaker_decoder.services.asset_classifier import extension_of


# ---------------------------------------------------------
# Enums
# ---------------------------------------------------------

class DecodeMode(str, Enum):
    DECRYPT = "decrypt"     # XOR the header with the project key
    RESTORE = "restore"     # Write the known PNG header, no key needed for images
    ENCRYPT = "encrypt"     # Re-obfuscate plain assets


class FileOutcome(str, Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"
    COPIED = "copied"
    FAILED = "failed"


# ---------------------------------------------------------
# Asset on disk
# ---------------------------------------------------------

@dataclass
class AssetFile:
    """
    An asset loaded from disk.

    ``extension`` is stored without the leading dot so it can go straight
    into the extension table.
    """
    path: Path
    name: str
    extension: str
    content: bytes

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AssetFile":
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File does not exist: {path}")

        with open(path, "rb") as f:
            content = f.read()

        return cls(
            path=path,
            name=path.stem,
            extension=extension_of(path),
            content=content,
        )


# ---------------------------------------------------------
# Batch results
# ---------------------------------------------------------

@dataclass(frozen=True)
class FileResult:
    source: Path
    outcome: FileOutcome
    target: Optional[Path] = None
    message: Optional[str] = None


@dataclass
class DecodeSummary:
    processed: int = 0
    skipped: int = 0
    copied: int = 0
    failed: int = 0
    failures: List[str] = field(default_factory=list)

    def record(self, result: FileResult) -> None:
        if result.outcome is FileOutcome.PROCESSED:
            self.processed += 1
        elif result.outcome is FileOutcome.SKIPPED:
            self.skipped += 1
        elif result.outcome is FileOutcome.COPIED:
            self.copied += 1
        else:
            self.failed += 1
            self.failures.append(f"{result.source}: {result.message}")

    @property
    def ok(self) -> bool:
        return self.failed == 0


@dataclass(frozen=True)
class ProjectDecodeResult:
    root: Path
    source_dir: Path
    output_dir: Path
    key: Optional[str]
    summary: DecodeSummary
