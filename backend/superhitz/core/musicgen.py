"""MusicGen via Hugging Face Inference API, returnerar råa audio-bytes."""
import math

import httpx
import structlog

from superhitz.config import Settings
from superhitz.errors import ProviderNotConfigured, UpstreamProviderError

log = structlog.get_logger()

HF_INFERENCE_URL = "https://api-inference.huggingface.co/models/{model}"
TOKENS_PER_SECOND = 50
MIN_NEW_TOKENS = 200
MAX_NEW_TOKENS = 2000


def token_budget(duration_seconds: float) -> int:
    """clamp(floor(sekunder * 50), 200, 2000)"""
    tokens = duration_seconds * TOKENS_PER_SECOND
    # Jämför före floor: stora värden blir inf och floor(inf) kastar
    if tokens >= MAX_NEW_TOKENS:
        return MAX_NEW_TOKENS
    if math.isnan(tokens) or tokens <= MIN_NEW_TOKENS:
        return MIN_NEW_TOKENS
    return math.floor(tokens)


class MusicGenClient:

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.api_key = settings.HUGGINGFACE_API_KEY
        self.model = settings.MUSICGEN_MODEL
        self.http = http

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self):
        if not self.configured:
            raise ProviderNotConfigured("Hugging Face key not configured")

    async def generate(self, prompt: str, duration_seconds: float) -> bytes:
        self.ensure_configured()
        payload = {
            "inputs": prompt,
            "parameters": {"max_new_tokens": token_budget(duration_seconds)},
        }
        response = await self.http.post(
            HF_INFERENCE_URL.format(model=self.model),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/octet-stream",
            },
            json=payload,
        )
        if not response.is_success:
            log.error("musicgen_provider_error", status=response.status_code, body=response.text[:500])
            raise UpstreamProviderError("Music provider error", details=response.text)

        log.info("music_generated", model=self.model, size=len(response.content))
        return response.content
