from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from .errors import MalformedResponse, ProviderError, ServiceUnavailable
from .settings import settings

logger = logging.getLogger(__name__)


class GroqClient:
	"""Chat completions and Whisper transcription over Groq's OpenAI-compatible API."""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		chat_model: Optional[str] = None,
		transcription_model: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.groq_api_key
		if not self.api_key:
			raise ServiceUnavailable("GROQ_API_KEY is not configured")
		self.base_url = (base_url or settings.groq_base_url).rstrip("/")
		self.chat_model = chat_model or settings.groq_chat_model
		self.transcription_model = transcription_model or settings.groq_transcription_model
		self._client = httpx.AsyncClient(
			timeout=timeout or settings.provider_timeout_seconds,
			headers={"Authorization": f"Bearer {self.api_key}"},
			transport=transport,
		)

	async def complete(self, system_prompt: str, user_prompt: str, *, temperature: float) -> str:
		"""Return the raw text of a JSON-mode chat completion; parsing is up to the caller."""
		payload: Dict[str, Any] = {
			"model": self.chat_model,
			"messages": [
				{"role": "system", "content": system_prompt},
				{"role": "user", "content": user_prompt},
			],
			"temperature": temperature,
			"response_format": {"type": "json_object"},
		}
		r = await self._send("chat completion", "POST", "/chat/completions", json=payload)
		try:
			content = r.json()["choices"][0]["message"]["content"]
		except (ValueError, KeyError, IndexError, TypeError):
			logger.error("Unexpected Groq completion envelope: %s", r.text)
			raise MalformedResponse("Invalid response format from LLM")
		if not isinstance(content, str):
			logger.error("Groq completion content is not text: %r", content)
			raise MalformedResponse("Invalid response format from LLM")
		return content

	async def transcribe(
		self,
		audio: bytes,
		mime_type: str,
		*,
		language: str,
		response_format: str = "json",
		filename: str = "audio.webm",
	) -> str:
		files = {"file": (filename, audio, mime_type or "application/octet-stream")}
		data = {
			"model": self.transcription_model,
			"language": language,
			"response_format": response_format,
		}
		r = await self._send("transcription", "POST", "/audio/transcriptions", files=files, data=data)
		try:
			transcript = r.json()["text"]
		except (ValueError, KeyError, TypeError):
			logger.error("Unexpected Groq transcription envelope: %s", r.text)
			raise ProviderError("Transcription failed")
		return transcript or ""

	async def _send(self, what: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
		try:
			r = await self._client.request(method, f"{self.base_url}{path}", **kwargs)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			logger.error("Groq %s error (%s): %s", what, http_err.response.status_code, http_err.response.text)
			raise ProviderError(f"Groq {what} failed") from http_err
		except httpx.RequestError as net_err:
			logger.error("Groq %s transport error: %r", what, net_err)
			raise ProviderError(f"Groq {what} failed") from net_err
		return r

	async def aclose(self) -> None:
		await self._client.aclose()
