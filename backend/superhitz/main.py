from contextlib import asynccontextmanager
import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from superhitz.api import upload, generate
from superhitz.config import settings
from superhitz.core.auth import FirebaseVerifier
from superhitz.core.storage import StorageClient, init_storage
from superhitz.core.track_store import TrackStore
from superhitz.errors import install_error_handlers
from superhitz.logging_config import configure_logging

VERSION = "1.0.0"

configure_logging(settings)
log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("startup", env=settings.APP_ENV, version=VERSION)
    from superhitz.db import close_db, init_db

    app.state.settings = settings
    app.state.verifier = FirebaseVerifier(settings)
    app.state.storage = StorageClient(settings)
    app.state.track_store = TrackStore()
    app.state.http = httpx.AsyncClient(timeout=httpx.Timeout(120.0, connect=10.0))

    try:
        await init_db()
        log.info("database_ready")
    except Exception as e:
        log.warning("database_not_available", error=str(e))
    await init_storage(app.state.storage)
    log.info("startup_complete")
    yield
    await app.state.http.aclose()
    await close_db()
    log.info("shutdown")


app = FastAPI(
    title="SUPERHITZ Backend",
    description="Uppladdning av låtar och omslag, AI-genererade låttexter och musik",
    version=VERSION,
    lifespan=lifespan,
)

# CORS_ORIGINS kan komma som kommaseparerad sträng från miljön
cors_origins = settings.CORS_ORIGINS
if isinstance(cors_origins, str):
    cors_origins = [o.strip() for o in cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

app.include_router(upload.router, tags=["Upload"])
app.include_router(generate.router, tags=["Generate"])


@app.get("/health", tags=["System"])
async def health():
    return {"status": "ok", "version": VERSION, "env": settings.APP_ENV}


@app.get("/", tags=["System"])
async def root():
    return {"name": "SUPERHITZ Backend API", "docs": "/docs", "health": "/health"}
