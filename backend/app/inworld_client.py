from __future__ import annotations
import base64
import binascii
import logging
import httpx
from typing import Any, Dict, List, Optional
from .errors import ProviderError, ServiceUnavailable
from .schemas import Voice
from .settings import settings

logger = logging.getLogger(__name__)


class InworldClient:
	"""Inworld text-to-speech: synthesis and voice catalogue."""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.inworld_api_key
		if not self.api_key:
			raise ServiceUnavailable("INWORLD_API_KEY is not configured")
		self.base_url = (base_url or settings.inworld_base_url).rstrip("/")
		self.model = model or settings.inworld_model
		# Inworld issues pre-encoded Basic credentials
		self._client = httpx.AsyncClient(
			timeout=timeout or settings.provider_timeout_seconds,
			headers={"Authorization": f"Basic {self.api_key}"},
			transport=transport,
		)

	async def synthesize(
		self,
		text: str,
		voice_id: str,
		*,
		speed: float,
		temperature: float,
		encoding: str,
		sample_rate: int,
	) -> bytes:
		payload: Dict[str, Any] = {
			"text": text,
			"voice_id": voice_id,
			"model_id": self.model,
			"temperature": temperature,
			"audio_config": {
				"audio_encoding": encoding,
				"sample_rate_hertz": sample_rate,
				"speaking_rate": speed,
			},
		}
		r = await self._send("text-to-speech", "POST", "/voice", json=payload)
		try:
			audio_b64 = r.json()["audioContent"]
			return base64.b64decode(audio_b64, validate=True)
		except (ValueError, KeyError, TypeError, binascii.Error):
			logger.error("Inworld TTS response without usable audioContent: %s", r.text[:500])
			raise ProviderError("Text-to-speech failed")

	async def list_voices(self, language: str) -> List[Voice]:
		r = await self._send("voices", "GET", "/voices", params={"filter": f"language={language}"})
		try:
			records = r.json().get("voices") or []
		except (ValueError, AttributeError):
			logger.error("Unexpected Inworld voices response: %s", r.text[:500])
			raise ProviderError("Failed to fetch voices")
		voices: List[Voice] = []
		for rec in records:
			voice_id = str(rec.get("voiceId") or "")
			if not voice_id:
				continue
			voices.append(
				Voice(
					voice_id=voice_id,
					name=voice_id,
					languages=list(rec.get("languages") or []),
					description=rec.get("description") or "",
				)
			)
		return voices

	async def _send(self, what: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
		try:
			r = await self._client.request(method, f"{self.base_url}{path}", **kwargs)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			logger.error("Inworld %s error (%s): %s", what, http_err.response.status_code, http_err.response.text)
			raise ProviderError(f"Inworld {what} failed") from http_err
		except httpx.RequestError as net_err:
			logger.error("Inworld %s transport error: %r", what, net_err)
			raise ProviderError(f"Inworld {what} failed") from net_err
		return r

	async def aclose(self) -> None:
		await self._client.aclose()
