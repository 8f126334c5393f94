"""
Upload API:

multipart (audio + optional cover + metadata) → UploadCommand → UploadPipeline

Formuläret läses först när get_current_user har godkänt anropet, så en
request utan giltig bearer-token får 401 även om kroppen är trasig.
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from superhitz.core.auth import Identity
from superhitz.core.pipeline import FilePayload, UploadCommand, UploadPipeline
from superhitz.dependencies import get_current_user, get_pipeline
from superhitz.errors import ValidationError
from superhitz.schemas.track import UploadResponse

router = APIRouter()
log    = structlog.get_logger()

UPLOAD_FORM_SCHEMA = {
    "type": "object",
    "properties": {
        "audio": {"type": "string", "format": "binary"},
        "cover": {"type": "string", "format": "binary"},
        "title": {"type": "string"},
        "artist": {"type": "string"},
        "tags": {"type": "string", "description": "Kommaseparerade taggar"},
        "visibility": {"type": "string", "enum": ["public", "private"]},
    },
}


async def _payload(file) -> Optional[FilePayload]:
    # Formulärfält utan fil kommer in som sträng eller saknas helt
    if not isinstance(file, UploadFile):
        return None
    data = await file.read()
    # Tomt <input type="file"> skickas som del utan filnamn och utan innehåll
    if not file.filename and not data:
        return None
    return FilePayload(
        filename=file.filename or "",
        data=data,
        content_type=file.content_type or None,
    )


def _text(form, name: str) -> str:
    value = form.get(name)
    return value if isinstance(value, str) else ""


@router.post(
    "/upload",
    response_model=UploadResponse,
    openapi_extra={"requestBody": {"content": {"multipart/form-data": {"schema": UPLOAD_FORM_SCHEMA}}}},
)
async def upload_track(
    request: Request,
    user: Identity = Depends(get_current_user),
    pipeline: UploadPipeline = Depends(get_pipeline),
):
    try:
        async with request.form() as form:
            command = UploadCommand(
                audio=await _payload(form.get("audio")),
                cover=await _payload(form.get("cover")),
                title=_text(form, "title"),
                artist=_text(form, "artist"),
                tags=_text(form, "tags"),
                visibility=_text(form, "visibility"),
            )
    except StarletteHTTPException as exc:
        # Starlette rapporterar trasig multipart som HTTPException(400)
        raise ValidationError(str(exc.detail)) from exc

    result = await pipeline.run(user, command)
    log.info("upload_complete", id=result.id, uid=user.uid, objects=len(result.stored_paths))
    return UploadResponse(id=result.id, doc=result.doc)
