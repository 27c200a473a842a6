import json
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from backend.app.main import create_app
from backend.app.schemas import Voice
from backend.app.session_store import SqlSessionStore
from backend.app.settings import Settings


def make_settings(**overrides: Any) -> Settings:
	values: Dict[str, Any] = {"GROQ_API_KEY": None, "INWORLD_API_KEY": None, "DATABASE_URL": None}
	values.update(overrides)
	return Settings(_env_file=None, **values)


def question_payload(**overrides: Any) -> Dict[str, Any]:
	item = {
		"id": "1",
		"question": "¿Cómo se dice dog en español?",
		"expectedAnswer": "perro",
		"acceptableVariations": ["el perro"],
		"topic": "vocabulary",
		"hint": "Es un animal.",
	}
	item.update(overrides)
	return item


class FakeGroq:
	def __init__(self, completions: Optional[List[Any]] = None, transcript: str = "hola") -> None:
		self.completions = list(completions or [])
		self.transcript = transcript
		self.calls: List[Dict[str, Any]] = []
		self.closed = False

	async def complete(self, system_prompt: str, user_prompt: str, *, temperature: float) -> str:
		self.calls.append({"system": system_prompt, "user": user_prompt, "temperature": temperature})
		result = self.completions.pop(0)
		if isinstance(result, Exception):
			raise result
		return result if isinstance(result, str) else json.dumps(result)

	async def transcribe(self, audio: bytes, mime_type: str, *, language: str, response_format: str = "json", filename: str = "audio.webm") -> str:
		self.calls.append({"audio": audio, "mime_type": mime_type, "language": language, "response_format": response_format, "filename": filename})
		return self.transcript

	async def aclose(self) -> None:
		self.closed = True


class FakeInworld:
	def __init__(self, audio: bytes = b"ID3fake-mp3", voices: Optional[List[Voice]] = None) -> None:
		self.audio = audio
		self.voices = voices or []
		self.calls: List[Dict[str, Any]] = []

	async def synthesize(self, text: str, voice_id: str, *, speed: float, temperature: float, encoding: str, sample_rate: int) -> bytes:
		self.calls.append({
			"text": text,
			"voice_id": voice_id,
			"speed": speed,
			"temperature": temperature,
			"encoding": encoding,
			"sample_rate": sample_rate,
		})
		return self.audio

	async def list_voices(self, language: str) -> List[Voice]:
		self.calls.append({"language": language})
		return self.voices

	async def aclose(self) -> None:
		pass


@pytest.fixture
def store():
	s = SqlSessionStore("sqlite://")
	assert s.connect()
	yield s
	s.close()


@pytest.fixture
def fake_groq() -> FakeGroq:
	return FakeGroq()


@pytest.fixture
def fake_inworld() -> FakeInworld:
	return FakeInworld()


@pytest.fixture
def client(store, fake_groq, fake_inworld):
	app = create_app(make_settings(INWORLD_VOICE_ID="Rafael"), store=store, groq=fake_groq, inworld=fake_inworld)
	with TestClient(app) as c:
		yield c
