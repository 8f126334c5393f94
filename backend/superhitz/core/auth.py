"""Firebase ID-token verification."""
from dataclasses import dataclass
from typing import Optional

import structlog

from superhitz.config import Settings
from superhitz.errors import Unauthenticated

log = structlog.get_logger()

FALLBACK_NAME = "Artist"


@dataclass(frozen=True)
class Identity:
    uid: str
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or FALLBACK_NAME


class FirebaseVerifier:
    APP_NAME = "superhitz-auth"

    def __init__(self, settings: Settings):
        self._settings = settings
        self._app = None

    def _get_app(self):
        if self._app is None:
            import firebase_admin
            from firebase_admin import credentials

            try:
                self._app = firebase_admin.get_app(self.APP_NAME)
            except ValueError:
                cred = (
                    credentials.Certificate(self._settings.FIREBASE_CREDENTIALS_FILE)
                    if self._settings.FIREBASE_CREDENTIALS_FILE
                    else credentials.ApplicationDefault()
                )
                options = {}
                if self._settings.FIREBASE_PROJECT_ID:
                    options["projectId"] = self._settings.FIREBASE_PROJECT_ID
                self._app = firebase_admin.initialize_app(cred, options, name=self.APP_NAME)
        return self._app

    async def verify(self, token: str) -> Identity:
        from firebase_admin import auth
        from firebase_admin.exceptions import FirebaseError

        if not token:
            raise Unauthenticated("Missing Authorization header")
        try:
            decoded = auth.verify_id_token(token, app=self._get_app())
        except (ValueError, FirebaseError) as e:
            log.warning("verify_token_failed", error=str(e))
            raise Unauthenticated("Invalid token") from e

        return Identity(
            uid=decoded["uid"],
            name=decoded.get("name") or None,
            email=decoded.get("email") or None,
        )


def parse_bearer(authorization: Optional[str]) -> str:
    """Plocka ut token ur 'Authorization: Bearer <token>'."""
    auth = authorization or ""
    if not auth.startswith("Bearer "):
        raise Unauthenticated("Missing Authorization header")
    token = auth[len("Bearer "):].strip()
    if not token:
        raise Unauthenticated("Missing Authorization header")
    return token
