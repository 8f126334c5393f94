"""Tester för uvicorn-startpunkten."""
import uvicorn

from superhitz import server
from superhitz.config import Settings


def test_main_runs_uvicorn_with_configured_address(monkeypatch):
    calls = []
    settings = Settings(_env_file=None, APP_ENV="production", API_HOST="127.0.0.1", API_PORT=9100, LOG_LEVEL="WARNING")
    monkeypatch.setattr(server, "get_settings", lambda: settings)
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    server.main()

    assert calls == [(
        "superhitz.main:app",
        {"host": "127.0.0.1", "port": 9100, "log_level": "warning", "reload": False},
    )]
