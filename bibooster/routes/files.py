"""
B.I Booster Backend — Stored File Route
=========================================

What:  Serves templates, lesson videos and materials from STORAGE_ROOT.
How:   FileService.resolve_stored_file() maps the URL path to a file inside
       the storage root; FileResponse streams it with a guessed media type.
Who:   Members downloading delivered templates (order template_path) and
       the LMS player loading lesson video_url / materials_url.
When:  Every URL FileService.public_url() hands out points here.

Templates are sent as attachments (Content-Disposition with the file
name); lesson media is sent inline so browsers can play or preview it.
"""

import mimetypes

from fastapi import APIRouter
from fastapi.responses import FileResponse

from bibooster.schemas.common import ErrorResponse
from bibooster.services.file_service import file_service

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files/{file_path:path}",
    summary="Serve a stored file",
    responses={
        200: {"description": "The stored file"},
        400: {"description": "Path escapes the storage root", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    """
    Security:
        - The resolved path must stay inside STORAGE_ROOT (no ../ escapes)
        - Only regular files are served
    """
    full_path = file_service.resolve_stored_file(file_path)
    media_type, _ = mimetypes.guess_type(full_path.name)
    return FileResponse(
        path=str(full_path),
        media_type=media_type or "application/octet-stream",
        filename=full_path.name if file_path.startswith("templates/") else None,
        headers={"Cache-Control": "private, max-age=86400"},
    )
