from __future__ import annotations
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel

from ..cache import ResponseCache
from ..deps import ClientFactory, get_client_factory, get_tts_cache
from ..errors import InvalidInput
from ..settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tts"])


class TTSRequest(BaseModel):
	text: str = ""


def _audio_response(audio: bytes, cache_state: str) -> Response:
	return Response(
		content=audio,
		media_type="audio/mpeg",
		headers={"X-TTS-Cache": cache_state, "Cache-Control": "no-store"},
	)


@router.post("/tts")
async def tts(
	req: TTSRequest,
	cache: ResponseCache[bytes] = Depends(get_tts_cache),
	client_factory: ClientFactory = Depends(get_client_factory),
):
	text = req.text.strip()
	if not text:
		raise InvalidInput("Missing text")
	if len(text) > settings.tts_max_chars:
		raise InvalidInput(f"Text too long (max {settings.tts_max_chars} chars)")

	key = f"{settings.tts_voice}:{text}"
	cached = cache.get(key)
	if cached is not None:
		return _audio_response(cached, "HIT")

	# UpstreamFailure propagates: there is no spoken fallback
	client = client_factory()
	try:
		audio = await client.synthesize(text, voice=settings.tts_voice)
	finally:
		await client.aclose()
	cache.set(key, audio)
	logger.debug("Synthesized %d bytes for %d chars", len(audio), len(text))
	return _audio_response(audio, "MISS")
