"""
ORM-modell för Track-dokumentet.
Skrivs en gång, fullt ifylld, och uppdateras aldrig av backend.
"""
import uuid
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, JSON, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from superhitz.db import Base


class Track(Base):
    __tablename__ = "tracks"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    title: Mapped[str] = mapped_column(String(500))
    artist: Mapped[str] = mapped_column(String(500))
    tags: Mapped[list] = mapped_column(JSON, default=list)

    # Publika URL:er till MinIO-objekten
    cover_url: Mapped[str] = mapped_column(Text, default="")
    audio_url: Mapped[str] = mapped_column(Text, nullable=False)

    uploader_uid: Mapped[str] = mapped_column(String(128), index=True)
    uploader_name: Mapped[str] = mapped_column(String(500))

    # Sätts av databasen, aldrig av klienten
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    visibility: Mapped[str] = mapped_column(String(10), default="public")  # public | private
    plays: Mapped[int] = mapped_column(Integer, default=0)
