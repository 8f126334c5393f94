"""
Generate API: låttexter (OpenAI) och musik (MusicGen).

JSON-kroppen valideras i handlern, efter get_current_user, så att auth
alltid avgörs före kroppens form.
"""
from typing import Optional, Type, TypeVar

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from superhitz.core.auth import Identity
from superhitz.core.lyrics import LyricsClient
from superhitz.core.musicgen import MusicGenClient
from superhitz.core.pipeline import UploadPipeline
from superhitz.dependencies import get_current_user, get_lyrics_client, get_musicgen_client, get_pipeline
from superhitz.errors import ValidationError
from superhitz.schemas.track import LyricsRequest, LyricsResponse, MusicRequest, MusicResponse

router = APIRouter()
log = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


def _json_body(model: Type[BaseModel]) -> dict:
    return {"requestBody": {"content": {"application/json": {"schema": model.model_json_schema(by_alias=True)}}}}


async def read_body(request: Request, model: Type[M]) -> Optional[M]:
    """Tom kropp ger None. Trasig JSON eller fel form ger 400 via RequestValidationError."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return model.model_validate_json(raw)
    except SchemaError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


@router.post(
    "/generate-lyrics",
    response_model=LyricsResponse,
    response_model_exclude_none=True,
    summary="Generera låttext",
    openapi_extra=_json_body(LyricsRequest),
)
async def generate_lyrics(
    request: Request,
    user: Identity = Depends(get_current_user),
    client: LyricsClient = Depends(get_lyrics_client),
):
    body = await read_body(request, LyricsRequest)
    prompt = body.prompt if body else ""
    if not prompt:
        raise ValidationError("Missing prompt")

    result = await client.generate(prompt)
    log.info("lyrics_complete", uid=user.uid, demo=result.note is not None)
    return LyricsResponse(lyrics=result.lyrics, raw=result.raw, note=result.note)


@router.post(
    "/generate-music",
    response_model=MusicResponse,
    summary="Generera musik med MusicGen",
    openapi_extra=_json_body(MusicRequest),
)
async def generate_music(
    request: Request,
    user: Identity = Depends(get_current_user),
    client: MusicGenClient = Depends(get_musicgen_client),
    pipeline: UploadPipeline = Depends(get_pipeline),
):
    """
    Anropar MusicGen, sparar resultatet i MinIO och skapar ett publikt
    track-dokument taggat ai-generated.
    """
    body = await read_body(request, MusicRequest)
    if body is None or not body.prompt:
        raise ValidationError("Missing prompt")
    client.ensure_configured()

    audio = await client.generate(body.prompt, body.duration_seconds)
    result = await pipeline.store_generated(user, audio, body.prompt, body.style)
    return MusicResponse(id=result.id, audio_url=result.doc.audio_url, doc=result.doc)
