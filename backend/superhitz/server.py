"""Startar API:t med uvicorn: `superhitz` (console script) eller `python -m superhitz.server`."""
import uvicorn

from superhitz.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "superhitz.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.APP_ENV == "development",
    )


if __name__ == "__main__":
    main()
