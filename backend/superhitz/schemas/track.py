"""Pydantic-scheman för request/response. Fältnamn på wire-nivå är camelCase."""
import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Visibility = Literal["public", "private"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrackRecord(CamelModel):
    """Ett fullt ifyllt track-dokument, innan det sparas."""
    title: str
    artist: str
    tags: List[str] = Field(default_factory=list)
    cover_url: str = ""
    audio_url: str = Field(..., min_length=1)
    uploader_uid: str
    uploader_name: str
    visibility: Visibility = "public"
    plays: int = 0


class TrackDoc(TrackRecord):
    created_at: Optional[datetime] = None

    @classmethod
    def from_track(cls, track) -> "TrackDoc":
        return cls(
            title=track.title,
            artist=track.artist,
            tags=list(track.tags or []),
            cover_url=track.cover_url or "",
            audio_url=track.audio_url,
            uploader_uid=track.uploader_uid,
            uploader_name=track.uploader_name,
            visibility=track.visibility,
            plays=track.plays,
            created_at=track.created_at,
        )


class UploadResponse(CamelModel):
    ok: bool = True
    id: uuid.UUID
    doc: TrackDoc


class LyricsRequest(CamelModel):
    prompt: str = ""


class LyricsResponse(CamelModel):
    ok: bool = True
    lyrics: str
    raw: Optional[Any] = None
    note: Optional[str] = None


class MusicRequest(CamelModel):
    prompt: str = ""
    style: str = "afropop"
    # Negativt och litet klampas i token_budget, inf/nan avvisas
    duration_seconds: float = Field(default=30, allow_inf_nan=False, examples=[30])


class MusicResponse(CamelModel):
    ok: bool = True
    id: uuid.UUID
    audio_url: str
    doc: TrackDoc
