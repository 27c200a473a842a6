import asyncio
import base64
import json

import httpx
import pytest

from backend.app import groq_client, inworld_client
from backend.app.errors import MalformedResponse, ProviderError, ServiceUnavailable
from backend.app.groq_client import GroqClient
from backend.app.inworld_client import InworldClient


def _run(coro):
	return asyncio.run(coro)


def _groq(handler) -> GroqClient:
	return GroqClient("gsk-test", base_url="https://groq.test/v1", transport=httpx.MockTransport(handler))


def _inworld(handler) -> InworldClient:
	return InworldClient("inworld-test", base_url="https://inworld.test/tts/v1", transport=httpx.MockTransport(handler))


def test_complete_requests_json_mode_and_returns_content() -> None:
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["url"] = str(request.url)
		seen["auth"] = request.headers["Authorization"]
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json={"choices": [{"message": {"content": '{"verdict": "correct"}'}}]})

	async def call():
		client = _groq(handler)
		try:
			return await client.complete("system", "user", temperature=0.2)
		finally:
			await client.aclose()

	assert _run(call()) == '{"verdict": "correct"}'
	assert seen["url"] == "https://groq.test/v1/chat/completions"
	assert seen["auth"] == "Bearer gsk-test"
	assert seen["body"]["response_format"] == {"type": "json_object"}
	assert seen["body"]["temperature"] == 0.2
	assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]


def test_complete_maps_http_failure_to_provider_error(caplog) -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(429, text="rate limit exceeded")

	with pytest.raises(ProviderError) as excinfo:
		_run(_groq(handler).complete("s", "u", temperature=0.3))
	assert "rate limit" not in excinfo.value.message
	assert "rate limit exceeded" in caplog.text


def test_complete_maps_transport_failure_to_provider_error() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("connection refused", request=request)

	with pytest.raises(ProviderError):
		_run(_groq(handler).complete("s", "u", temperature=0.3))


def test_complete_rejects_envelope_without_content() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(200, json={"choices": []})

	with pytest.raises(MalformedResponse):
		_run(_groq(handler).complete("s", "u", temperature=0.3))


def test_transcribe_uploads_multipart_with_fixed_parameters() -> None:
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["url"] = str(request.url)
		seen["content_type"] = request.headers["Content-Type"]
		seen["body"] = request.content
		return httpx.Response(200, json={"text": "Hola, me llamo Ana."})

	transcript = _run(_groq(handler).transcribe(b"\x1aE\xdf\xa3", "audio/webm", language="es"))

	assert transcript == "Hola, me llamo Ana."
	assert seen["url"] == "https://groq.test/v1/audio/transcriptions"
	assert seen["content_type"].startswith("multipart/form-data")
	assert b'name="language"' in seen["body"]
	assert b'name="model"' in seen["body"]
	assert b"whisper-large-v3-turbo" in seen["body"]
	assert b'filename="audio.webm"' in seen["body"]


def test_transcribe_maps_http_failure_to_provider_error() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(500, text="boom")

	with pytest.raises(ProviderError):
		_run(_groq(handler).transcribe(b"audio", "audio/webm", language="es"))


def test_groq_client_requires_credential(monkeypatch) -> None:
	monkeypatch.setattr(groq_client.settings, "groq_api_key", None)
	with pytest.raises(ServiceUnavailable):
		GroqClient()


def test_synthesize_decodes_base64_audio() -> None:
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["url"] = str(request.url)
		seen["auth"] = request.headers["Authorization"]
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json={"audioContent": base64.b64encode(b"mp3 data").decode()})

	audio = _run(
		_inworld(handler).synthesize("Hola", "Rafael", speed=0.7, temperature=0.9, encoding="MP3", sample_rate=48000)
	)

	assert audio == b"mp3 data"
	assert seen["url"] == "https://inworld.test/tts/v1/voice"
	assert seen["auth"] == "Basic inworld-test"
	assert seen["body"]["voice_id"] == "Rafael"
	assert seen["body"]["model_id"] == "inworld-tts-1-max"
	assert seen["body"]["audio_config"] == {
		"audio_encoding": "MP3",
		"sample_rate_hertz": 48000,
		"speaking_rate": 0.7,
	}


@pytest.mark.parametrize("payload", [{}, {"audioContent": "%%% not base64 %%%"}, {"audioContent": None}])
def test_synthesize_rejects_envelope_without_audio(payload) -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(200, json=payload)

	with pytest.raises(ProviderError):
		_run(_inworld(handler).synthesize("Hola", "Rafael", speed=0.7, temperature=0.9, encoding="MP3", sample_rate=48000))


def test_synthesize_maps_http_failure_to_provider_error() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(401, json={"error": "bad key"})

	with pytest.raises(ProviderError):
		_run(_inworld(handler).synthesize("Hola", "Rafael", speed=0.7, temperature=0.9, encoding="MP3", sample_rate=48000))


def test_list_voices_normalizes_records() -> None:
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["filter"] = request.url.params.get("filter")
		return httpx.Response(
			200,
			json={
				"voices": [
					{"voiceId": "Rafael", "languages": ["es"], "description": "Warm male voice"},
					{"voiceId": "Lupita", "displayName": "Lupita (MX)", "languages": ["es"]},
					{"languages": ["es"]},
				]
			},
		)

	voices = _run(_inworld(handler).list_voices("es"))

	assert seen["filter"] == "language=es"
	assert [v.model_dump() for v in voices] == [
		{"voice_id": "Rafael", "name": "Rafael", "languages": ["es"], "description": "Warm male voice"},
		{"voice_id": "Lupita", "name": "Lupita", "languages": ["es"], "description": ""},
	]


def test_inworld_client_requires_credential(monkeypatch) -> None:
	monkeypatch.setattr(inworld_client.settings, "inworld_api_key", None)
	with pytest.raises(ServiceUnavailable):
		InworldClient()
