"""
Asset API endpoints.

Provides endpoints for:
- Scheme configuration
- Disguised extension lookup
- Header decryption with a known key
- PNG header restoration without a key
- Re-encryption of plain assets
- Key recovery from an encrypted image
"""
from typing import Optional

from fastapi import APIRouter, Depends, UploadFile, File, Form, HTTPException, Response, status

from rpgmaker_decoder.api.errors import to_http_exception
from rpgmaker_decoder.config import Settings
from rpgmaker_decoder.core.dependencies import get_app_settings, get_asset_service, get_engine
from rpgmaker_decoder.core.errors import DecoderError, UnknownExtension
from rpgmaker_decoder.models.asset import DecodeMode
from rpgmaker_decoder.models.schemas import (
    SchemeConfigResponse,
    ExtensionResponse,
    KeyRecoveryResponse,
)
from rpgmaker_decoder.services.asset_classifier import (
    REAL_EXTENSIONS,
    AssetKind,
    EngineFlavor,
    asset_kind,
    extension_of,
    is_encrypted_extension,
    media_type,
    real_extension,
)
from rpgmaker_decoder.services.asset_service import AssetService
from rpgmaker_decoder.services.header_engine import HeaderTransformEngine


router = APIRouter(prefix="/assets", tags=["Assets"])


# Helper for reading uploads
async def read_upload(upload: UploadFile, settings: Settings) -> bytes:
    """
    Read an uploaded asset, rejecting empty and oversized files.
    """
    content = await upload.read()

    if len(content) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty file provided"
        )

    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_bytes} bytes"
        )

    return content


def file_response(content: bytes, stem: str, extension: str) -> Response:
    return Response(
        content=content,
        media_type=media_type(extension),
        headers={"Content-Disposition": f'attachment; filename="{stem}.{extension}"'},
    )


def _stem(filename: Optional[str]) -> str:
    name = filename or "asset"
    return name.rsplit(".", 1)[0] if "." in name else name


async def _decode_upload(
    asset: UploadFile,
    mode: DecodeMode,
    key: Optional[str],
    flavor: EngineFlavor,
    extension: Optional[str],
    service: AssetService,
    settings: Settings,
) -> Response:
    content = await read_upload(asset, settings)
    ext = extension or extension_of(asset.filename or "")

    try:
        data, out_ext = service.decode_bytes(content, ext, mode, key=key, flavor=flavor)
    except DecoderError as e:
        raise to_http_exception(e)

    return file_response(data, _stem(asset.filename), out_ext)


# ===========================================================
# Configuration
# ===========================================================

@router.get(
    "/config",
    response_model=SchemeConfigResponse,
    summary="Get header scheme",
    description="Get the fake signature and header length the decoder expects."
)
async def get_config(engine: HeaderTransformEngine = Depends(get_engine)):
    scheme = engine.scheme
    return SchemeConfigResponse(
        header_length=scheme.header_length,
        signature=scheme.signature.to_hex(),
        verify_signature=scheme.verify_signature,
        supported_extensions=sorted(REAL_EXTENSIONS),
    )


@router.get(
    "/extensions/{fake_extension}",
    response_model=ExtensionResponse,
    summary="Resolve a disguised extension",
)
async def get_extension(fake_extension: str):
    """
    Map a disguised extension (rpgmvp, png_, ...) to its real media type.
    """
    try:
        real_ext = real_extension(fake_extension)
    except UnknownExtension as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return ExtensionResponse(
        fake_extension=fake_extension,
        real_extension=real_ext,
        kind=asset_kind(real_ext),
        media_type=media_type(real_ext),
    )


# ===========================================================
# Header Transforms
# ===========================================================

@router.post(
    "/decrypt",
    summary="Decrypt an asset",
    description="Strip the fake signature and XOR the header back with the project key.",
    response_class=Response,
)
async def decrypt_asset(
    asset: UploadFile = File(..., description="Encrypted asset (.rpgmvp, .ogg_, ...)"),
    key: str = Form(..., description="Project key, hex"),
    extension: Optional[str] = Form(None, description="Override the disguised extension"),
    service: AssetService = Depends(get_asset_service),
    settings: Settings = Depends(get_app_settings),
):
    return await _decode_upload(asset, DecodeMode.DECRYPT, key, EngineFlavor.MV, extension, service, settings)


@router.post(
    "/restore",
    summary="Restore an image header",
    description="Replace the header of an encrypted image with the PNG signature. "
                "Audio assets need a key and are decrypted instead.",
    response_class=Response,
)
async def restore_asset(
    asset: UploadFile = File(..., description="Encrypted asset (.rpgmvp, .png_)"),
    key: Optional[str] = Form(None, description="Project key, hex (audio only)"),
    extension: Optional[str] = Form(None, description="Override the disguised extension"),
    service: AssetService = Depends(get_asset_service),
    settings: Settings = Depends(get_app_settings),
):
    return await _decode_upload(asset, DecodeMode.RESTORE, key, EngineFlavor.MV, extension, service, settings)


@router.post(
    "/encrypt",
    summary="Encrypt an asset",
    description="Prefix the fake signature and XOR the header with the project key.",
    response_class=Response,
)
async def encrypt_asset(
    asset: UploadFile = File(..., description="Plain asset (.png, .ogg, .m4a)"),
    key: str = Form(..., description="Project key, hex"),
    flavor: EngineFlavor = Form(EngineFlavor.MV, description="mv (rpgmvp) or mz (png_)"),
    extension: Optional[str] = Form(None, description="Override the real extension"),
    service: AssetService = Depends(get_asset_service),
    settings: Settings = Depends(get_app_settings),
):
    return await _decode_upload(asset, DecodeMode.ENCRYPT, key, flavor, extension, service, settings)


@router.post(
    "/recover-key",
    response_model=KeyRecoveryResponse,
    summary="Recover the project key",
    description="Derive the key from an encrypted PNG using its known header."
)
async def recover_key(
    asset: UploadFile = File(..., description="Encrypted image (.rpgmvp, .png_)"),
    engine: HeaderTransformEngine = Depends(get_engine),
    settings: Settings = Depends(get_app_settings),
):
    """
    Only images work here: PNG is the one asset type with a fixed header.
    """
    content = await read_upload(asset, settings)

    ext = extension_of(asset.filename or "")
    if is_encrypted_extension(ext) and asset_kind(real_extension(ext)) is not AssetKind.IMAGE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Key recovery needs an encrypted image, got .{ext}"
        )

    try:
        key = engine.recover_key(content)
    except DecoderError as e:
        raise to_http_exception(e)

    return KeyRecoveryResponse(
        key=key.hex(),
        key_length=len(key),
        source_filename=asset.filename,
    )
