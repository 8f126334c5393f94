from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from superhitz.errors import MetadataWriteError
from superhitz.models.track import Track
from superhitz.schemas.track import TrackRecord

log = structlog.get_logger()


class TrackStore:
    """Append-only skrivning av track-dokument, en transaktion per dokument."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    def _get_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            from superhitz.db import get_session_factory
            self._session_factory = get_session_factory()
        return self._session_factory

    async def append(self, record: TrackRecord) -> Track:
        # created_at lämnas åt databasen (server_default)
        track = Track(
            title=record.title,
            artist=record.artist,
            tags=list(record.tags),
            cover_url=record.cover_url,
            audio_url=record.audio_url,
            uploader_uid=record.uploader_uid,
            uploader_name=record.uploader_name,
            visibility=record.visibility,
            plays=record.plays,
        )
        try:
            async with self._get_factory()() as session:
                async with session.begin():
                    session.add(track)
                    await session.flush()
                await session.refresh(track)
        except (SQLAlchemyError, RuntimeError) as e:
            log.error("metadata_write_failed", uid=record.uploader_uid, error=str(e))
            raise MetadataWriteError(f"Metadata write failed: {e}") from e

        log.info("track_saved", id=str(track.id), uid=track.uploader_uid)
        return track
