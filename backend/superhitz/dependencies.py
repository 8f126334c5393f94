"""
FastAPI-dependencies. Klienterna skapas en gång i lifespan och läggs på
app.state; handlers får dem härifrån så att testerna kan byta ut dem via
app.dependency_overrides.
"""
from typing import Optional

import httpx
from fastapi import Depends, Header, Request

from superhitz.config import Settings
from superhitz.core.auth import FirebaseVerifier, Identity, parse_bearer
from superhitz.core.lyrics import LyricsClient
from superhitz.core.musicgen import MusicGenClient
from superhitz.core.pipeline import UploadPipeline
from superhitz.core.storage import StorageClient
from superhitz.core.track_store import TrackStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_verifier(request: Request) -> FirebaseVerifier:
    return request.app.state.verifier


def get_storage(request: Request) -> StorageClient:
    return request.app.state.storage


def get_track_store(request: Request) -> TrackStore:
    return request.app.state.track_store


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


async def get_current_user(
    authorization: Optional[str] = Header(None),
    verifier: FirebaseVerifier = Depends(get_verifier),
) -> Identity:
    token = parse_bearer(authorization)
    return await verifier.verify(token)


def get_pipeline(
    storage: StorageClient = Depends(get_storage),
    track_store: TrackStore = Depends(get_track_store),
) -> UploadPipeline:
    return UploadPipeline(storage, track_store)


def get_lyrics_client(
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> LyricsClient:
    return LyricsClient(settings, http)


def get_musicgen_client(
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> MusicGenClient:
    return MusicGenClient(settings, http)
