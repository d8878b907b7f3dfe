from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, List, Optional
from .errors import ConfigurationError, UpstreamFailure
from .settings import settings

logger = logging.getLogger(__name__)

# Upstream error bodies are echoed to the caller, clipped to this length
_DETAIL_LIMIT = 800


def extract_output_text(data: Dict[str, Any]) -> str:
	"""Pull plain text out of a Responses API payload.

	Prefers the ``output_text`` convenience field and falls back to joining
	every text segment found under ``output[].content[]``.
	"""
	if not isinstance(data, dict):
		return ""
	output_text = data.get("output_text")
	if isinstance(output_text, str) and output_text.strip():
		return output_text.strip()
	texts: List[str] = []
	for item in data.get("output") or []:
		if not isinstance(item, dict):
			continue
		for content in item.get("content") or []:
			if isinstance(content, dict) and isinstance(content.get("text"), str):
				texts.append(content["text"])
	return "\n".join(texts).strip()


class OpenAIClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.openai_api_key
		if not self.api_key:
			raise ConfigurationError("Missing OPENAI_API_KEY on server")
		self.model = model or settings.openai_model
		self.base_url = (base_url or settings.openai_base_url).rstrip("/")
		self._headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
		}
		self._client = httpx.AsyncClient(timeout=settings.openai_timeout_seconds, transport=transport)

	async def generate(
		self,
		system: str,
		user: str,
		*,
		max_output_tokens: Optional[int] = None,
		temperature: Optional[float] = None,
	) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"max_output_tokens": max_output_tokens or settings.openai_max_output_tokens,
			"temperature": settings.openai_temperature if temperature is None else temperature,
			"input": [
				{"role": "system", "content": system},
				{"role": "user", "content": user},
			],
		}
		last_error: Optional[UpstreamFailure] = None
		try:
			r = await self._client.post(f"{self.base_url}/responses", headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			last_error = UpstreamFailure(
				"OpenAI error",
				status=http_err.response.status_code,
				details=http_err.response.text[:_DETAIL_LIMIT],
			)
		except httpx.RequestError as net_err:
			last_error = UpstreamFailure("OpenAI unreachable", details=str(net_err) or type(net_err).__name__)
		if last_error is None:
			try:
				return extract_output_text(r.json())
			except ValueError:
				last_error = UpstreamFailure("Unexpected OpenAI response", details=r.text[:_DETAIL_LIMIT])
		logger.warning("OpenAI generation failed: %s (status=%s)", last_error.message, last_error.status)
		raise last_error

	async def synthesize(self, text: str, *, voice: Optional[str] = None, model: Optional[str] = None) -> bytes:
		payload = {
			"model": model or settings.tts_model,
			"voice": voice or settings.tts_voice,
			"input": text,
			"response_format": "mp3",
		}
		try:
			r = await self._client.post(f"{self.base_url}/audio/speech", headers=self._headers, json=payload)
		except httpx.RequestError as net_err:
			raise UpstreamFailure("TTS upstream error", details=str(net_err) or type(net_err).__name__) from net_err
		if r.is_error:
			raise UpstreamFailure("TTS upstream error", status=r.status_code, details=r.text[:_DETAIL_LIMIT])
		if not r.content:
			raise UpstreamFailure("TTS upstream error", status=r.status_code, details="empty audio")
		return r.content

	async def aclose(self) -> None:
		await self._client.aclose()
