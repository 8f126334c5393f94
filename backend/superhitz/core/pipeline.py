"""
Upload pipeline:

verified identity → validate → store audio → store cover (optional)
→ append track document → respond

Steps run strictly in order. The first failure aborts the run; objects that
already landed in storage are not rolled back, they are logged as orphans.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import structlog

from superhitz.core.auth import Identity
from superhitz.core.storage import object_path
from superhitz.errors import AppError, ValidationError
from superhitz.schemas.track import TrackDoc, TrackRecord

log = structlog.get_logger()

DEFAULT_AUDIO_TYPE = "audio/mpeg"
DEFAULT_COVER_TYPE = "image/jpeg"
AI_ARTIST = "SUPERHITZ AI"
AI_TAG = "ai-generated"


class Stage(str, Enum):
    VALIDATING = "validating"
    STORING_AUDIO = "storing_audio"
    STORING_COVER = "storing_cover"
    PERSISTING_METADATA = "persisting_metadata"
    DONE = "done"


@dataclass
class FilePayload:
    filename: str
    data: bytes
    content_type: Optional[str] = None


@dataclass
class UploadCommand:
    audio: Optional[FilePayload]
    cover: Optional[FilePayload] = None
    title: str = ""
    artist: str = ""
    tags: str = ""
    visibility: str = ""


@dataclass
class UploadResult:
    id: str
    doc: TrackDoc
    stored_paths: List[str] = field(default_factory=list)


# ── Field normalisation ────────────────────────────────────────────────────

def normalize_title(title: Optional[str]) -> str:
    return (title or "").strip() or "Untitled"


def normalize_artist(artist: Optional[str], identity: Identity) -> str:
    return (artist or "").strip() or identity.display_name


def normalize_tags(tags: Optional[str]) -> List[str]:
    return [t.strip() for t in (tags or "").split(",") if t.strip()]


def normalize_visibility(visibility: Optional[str]) -> str:
    return "private" if visibility == "private" else "public"


# ── Pipeline ───────────────────────────────────────────────────────────────

class UploadPipeline:

    def __init__(self, storage, track_store):
        self.storage = storage
        self.track_store = track_store

    async def run(self, identity: Identity, command: UploadCommand) -> UploadResult:
        stored: List[str] = []
        stage = Stage.VALIDATING
        bound = log.bind(uid=identity.uid)

        try:
            audio = command.audio
            if audio is None:
                raise ValidationError("No audio file uploaded")

            stage = Stage.STORING_AUDIO
            bound.info("upload_stage", stage=stage.value, filename=audio.filename)
            audio_path = object_path("tracks", identity.uid, audio.filename or "audio")
            audio_url = await self.storage.store(
                audio.data, audio_path, audio.content_type or DEFAULT_AUDIO_TYPE
            )
            stored.append(audio_path)

            cover_url = ""
            cover = command.cover
            if cover is not None:
                stage = Stage.STORING_COVER
                bound.info("upload_stage", stage=stage.value, filename=cover.filename)
                cover_path = object_path("covers", identity.uid, cover.filename or "cover")
                cover_url = await self.storage.store(
                    cover.data, cover_path, cover.content_type or DEFAULT_COVER_TYPE
                )
                stored.append(cover_path)

            stage = Stage.PERSISTING_METADATA
            bound.info("upload_stage", stage=stage.value)
            record = TrackRecord(
                title=normalize_title(command.title),
                artist=normalize_artist(command.artist, identity),
                tags=normalize_tags(command.tags),
                cover_url=cover_url,
                audio_url=audio_url,
                uploader_uid=identity.uid,
                uploader_name=identity.display_name,
                visibility=normalize_visibility(command.visibility),
                plays=0,
            )
            track = await self.track_store.append(record)

        except AppError as e:
            bound.warning("upload_failed", stage=stage.value, kind=e.kind.value, error=e.message)
            if stored:
                bound.warning("orphaned_objects", stage=stage.value, paths=stored)
            raise
        except Exception as e:
            bound.error("upload_failed", stage=stage.value, error=str(e))
            if stored:
                bound.warning("orphaned_objects", stage=stage.value, paths=stored)
            raise

        bound.info("upload_stage", stage=Stage.DONE.value, id=str(track.id))
        return UploadResult(id=str(track.id), doc=TrackDoc.from_track(track), stored_paths=stored)

    async def store_generated(self, identity: Identity, audio: bytes, prompt: str, style: str) -> UploadResult:
        """Spara AI-genererad audio och skapa ett publikt track-dokument."""
        bound = log.bind(uid=identity.uid)
        path = object_path("ai-generated", identity.uid, suffix=".mp3")
        audio_url = await self.storage.store(audio, path, DEFAULT_AUDIO_TYPE)

        record = TrackRecord(
            title=f"AI: {prompt[:80]}",
            artist=AI_ARTIST,
            tags=[AI_TAG, style],
            cover_url="",
            audio_url=audio_url,
            uploader_uid=identity.uid,
            uploader_name=identity.display_name,
            visibility="public",
            plays=0,
        )
        try:
            track = await self.track_store.append(record)
        except Exception:
            bound.warning("orphaned_objects", stage=Stage.PERSISTING_METADATA.value, paths=[path])
            raise

        bound.info("generated_track_saved", id=str(track.id), path=path)
        return UploadResult(id=str(track.id), doc=TrackDoc.from_track(track), stored_paths=[path])
