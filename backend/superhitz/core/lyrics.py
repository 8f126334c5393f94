"""Låttexter via OpenAI chat completions, med demo-text om nyckel saknas."""
import json
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog

from superhitz.config import Settings

log = structlog.get_logger()

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
SYSTEM_PROMPT = (
    "You are a professional songwriter. "
    "Output structured lyrics: verse and chorus and a 1-line promo."
)
MAX_TOKENS = 700
TEMPERATURE = 0.8

DEMO_LYRICS = (
    "(Verse)\nSunrise over Monrovia, rhythm in our feet...\n"
    "(Chorus)\nSUPERHITZ, feel the beat..."
)
NOT_CONFIGURED_NOTE = "OPENAI key not configured."


@dataclass
class LyricsResult:
    lyrics: str
    raw: Optional[Any] = None
    note: Optional[str] = None


class LyricsClient:

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.api_key = settings.OPENAI_API_KEY
        self.model = settings.OPENAI_MODEL
        self.http = http

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    async def generate(self, prompt: str) -> LyricsResult:
        if not self.configured:
            log.info("lyrics_demo_fallback")
            return LyricsResult(lyrics=DEMO_LYRICS, note=NOT_CONFIGURED_NOTE)

        response = await self.http.post(
            OPENAI_CHAT_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=self.build_payload(prompt),
        )
        data = response.json()
        log.info("lyrics_generated", status=response.status_code, model=self.model)

        try:
            lyrics = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            lyrics = None
        if not lyrics:
            lyrics = json.dumps(data)
        return LyricsResult(lyrics=lyrics, raw=data)
