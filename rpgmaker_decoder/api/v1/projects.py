"""
Project API endpoints.

Operate on a deployed game folder on the server's filesystem:
- Resolve the project root and discover its key
- Batch-decode the whole asset tree
"""
from fastapi import APIRouter, Depends, HTTPException, status

from rpgmaker_decoder.api.errors import to_http_exception
from rpgmaker_decoder.core.dependencies import get_asset_service, get_engine
from rpgmaker_decoder.core.errors import DecoderError
from rpgmaker_decoder.models.schemas import (
    ProjectRequest,
    ProjectResolveResponse,
    ProjectDecodeRequest,
    ProjectDecodeResponse,
)
from rpgmaker_decoder.services.asset_service import AssetService
from rpgmaker_decoder.services.header_engine import HeaderTransformEngine
from rpgmaker_decoder.services.project_locator import resolve_root
from rpgmaker_decoder.services.project_service import discover_key, read_encryption_flags


router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post(
    "/resolve",
    response_model=ProjectResolveResponse,
    summary="Resolve a project",
    description="Find the project root for a game folder and discover its key."
)
async def resolve_project(
    request: ProjectRequest,
    engine: HeaderTransformEngine = Depends(get_engine),
):
    try:
        root = resolve_root(request.path)
        key = discover_key(request.path, engine)
    except DecoderError as e:
        raise to_http_exception(e)

    flags = read_encryption_flags(request.path)

    return ProjectResolveResponse(
        path=request.path,
        root=str(root),
        key=key,
        has_encrypted_images=flags.has_encrypted_images if flags else None,
        has_encrypted_audio=flags.has_encrypted_audio if flags else None,
    )


@router.post(
    "/decode",
    response_model=ProjectDecodeResponse,
    summary="Decode a project",
    description="Decrypt, restore or encrypt every asset under a game folder."
)
async def decode_project(
    request: ProjectDecodeRequest,
    service: AssetService = Depends(get_asset_service),
):
    """
    Per-file failures are reported in the response; only errors that stop
    the whole batch (bad path, no key) turn into HTTP errors.
    """
    try:
        result = service.decode_project(
            request.path,
            mode=request.mode,
            key=request.key,
            output_dir=request.output_dir,
            flavor=request.flavor,
            workers=request.workers,
        )
    except DecoderError as e:
        raise to_http_exception(e)
    except FileNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    summary = result.summary
    return ProjectDecodeResponse(
        success=summary.ok,
        root=str(result.root),
        output_dir=str(result.output_dir),
        key=result.key,
        processed=summary.processed,
        copied=summary.copied,
        skipped=summary.skipped,
        failed=summary.failed,
        failures=summary.failures,
    )
