from typing import Optional, List
from pydantic import BaseModel, Field

from rpgmaker_decoder.models.asset import DecodeMode
from rpgmaker_decoder.services.asset_classifier import AssetKind, EngineFlavor


class SchemeConfigResponse(BaseModel):
    """Header scheme currently in effect."""
    header_length: int = Field(..., description="Number of obfuscated header bytes")
    signature: str = Field(..., description="Expected fake signature, hex")
    verify_signature: bool = Field(..., description="Whether the signature is checked")
    supported_extensions: List[str] = Field(
        ...,
        description="Disguised extensions the decoder accepts"
    )


class ExtensionResponse(BaseModel):
    """Real media type behind a disguised extension."""
    fake_extension: str
    real_extension: str
    kind: AssetKind
    media_type: str


class KeyRecoveryResponse(BaseModel):
    """Key derived from an encrypted image header."""
    key: str = Field(..., description="Recovered key, lowercase hex")
    key_length: int
    source_filename: Optional[str] = None


class ProjectRequest(BaseModel):
    """Locate a project on the server's filesystem."""
    path: str = Field(..., description="Folder holding img/ (or www/) of a deployed game")


class ProjectResolveResponse(BaseModel):
    """Project root and key discovery result."""
    path: str
    root: str
    key: Optional[str] = Field(None, description="Key from System.json or recovered from an image")
    has_encrypted_images: Optional[bool] = None
    has_encrypted_audio: Optional[bool] = None


class ProjectDecodeRequest(BaseModel):
    """Batch-decode the asset tree of a project."""
    path: str = Field(..., description="Folder holding img/ (or www/) of a deployed game")
    mode: DecodeMode = DecodeMode.DECRYPT
    key: Optional[str] = Field(
        default=None,
        description="Hex key; discovered from the project when omitted"
    )
    output_dir: Optional[str] = Field(
        default=None,
        description="Defaults to <root>/decrypted"
    )
    flavor: EngineFlavor = EngineFlavor.MV
    workers: Optional[int] = Field(default=None, ge=1)


class ProjectDecodeResponse(BaseModel):
    """Outcome of a batch decode."""
    success: bool
    root: str
    output_dir: str
    key: Optional[str] = None
    processed: int
    copied: int
    skipped: int
    failed: int
    failures: List[str] = Field(default_factory=list)
