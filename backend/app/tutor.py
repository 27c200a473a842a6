"""
Spanish Oral Exam Tutor
=======================

Orchestration for the study endpoints: question extraction, answer grading,
transcription and speech synthesis. Each operation validates its input, calls
one provider, then validates and reshapes what comes back. Provider JSON is
checked against the pydantic schemas before anything leaves this module, so a
caller only ever sees well-formed questions and verdicts.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError as SchemaError

from .errors import MalformedResponse, ServiceUnavailable, ValidationError
from .groq_client import GroqClient
from .inworld_client import InworldClient
from .schemas import GradeResult, Question, Voice

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

TARGET_LANGUAGE = "es"
TRANSCRIPT_FORMAT = "json"

EXTRACT_TEMPERATURE = 0.3
GRADE_TEMPERATURE = 0.2

DEFAULT_SPEED = 0.7  # slower pace suits language learners
MIN_SPEED = 0.5
MAX_SPEED = 1.5
TTS_ENCODING = "MP3"
TTS_CONTENT_TYPE = "audio/mpeg"
TTS_SAMPLE_RATE = 48_000
TTS_TEMPERATURE = 0.9


# ============================================================================
# PROMPTS
# ============================================================================

EXTRACT_QA_PROMPT = """
You are a Spanish oral exam coach. The student pastes study material (vocabulary
lists, conjugation tables, example dialogues, notes in English or Spanish). Turn
it into questions an examiner would ask out loud.

Rules:
- Write every question and every answer in Spanish only.
- Produce between 10 and 30 questions, covering the material evenly.
- Tag each question with exactly one topic: "vocabulary", "conjugation",
  "translation" or "conversation".
- expectedAnswer is the most natural short spoken answer.
- acceptableVariations lists other answers an examiner would accept (may be empty).
- hint is optional; keep it short.

Return STRICT JSON only, no markdown, following exactly this schema:
{
  "questions": [
    {
      "id": "1",
      "question": string,
      "expectedAnswer": string,
      "acceptableVariations": [string],
      "topic": "vocabulary" | "conjugation" | "translation" | "conversation",
      "hint": string
    }
  ]
}
""".strip()

GRADE_PROMPT = """
You are a lenient Spanish oral exam grader. Your job is to evaluate if the student's spoken answer is acceptable.

Grading rules:
1. Focus on MEANING, not exact wording
2. Accept synonyms and paraphrases
3. Minor grammar mistakes that don't change meaning = still correct
4. Accent marks missing in transcription = ignore
5. Slight word order differences = usually acceptable
6. Be encouraging but honest

Return a JSON object:
{
  "verdict": "correct" | "partial" | "incorrect",
  "feedback": "Brief encouraging feedback in English",
  "correction": "If wrong/partial, show the correct answer",
  "explanation": "Why this grade was given"
}
""".strip()


def _build_extract_user_prompt(raw_text: str) -> str:
	return f"Here is my study material:\n\n{raw_text}"


def _build_grade_user_prompt(
	question: str,
	expected_answer: str,
	student_answer: str,
	acceptable_variations: Sequence[str],
) -> str:
	lines = [
		f'Question asked: "{question}"',
		f'Expected answer: "{expected_answer}"',
	]
	if acceptable_variations:
		lines.append(f"Also acceptable: {', '.join(acceptable_variations)}")
	lines.append("")
	lines.append(f'Student said: "{student_answer}"')
	lines.append("")
	lines.append("Grade this response:")
	return "\n".join(lines)


# ============================================================================
# PARSING
# ============================================================================

def _parse_json_object(text: str, *, what: str) -> Dict[str, Any]:
	try:
		data = json.loads(text)
	except (TypeError, ValueError):
		logger.error("Failed to parse %s response as JSON: %s", what, text)
		raise MalformedResponse(f"Invalid {what} response from LLM")
	if not isinstance(data, dict):
		logger.error("%s response is not a JSON object: %s", what, text)
		raise MalformedResponse(f"Invalid {what} response from LLM")
	return data


def _question_id(item: Any) -> Optional[str]:
	if not isinstance(item, dict) or item.get("id") in (None, ""):
		return None
	return str(item["id"]).strip() or None


def _assign_question_ids(items: List[Any]) -> List[Any]:
	"""Keep model-provided ids when they are present and unique, else number 1..n."""
	ids = [_question_id(item) for item in items]
	if all(ids) and len(set(ids)) == len(ids):
		return items
	renumbered = []
	for index, item in enumerate(items, start=1):
		if isinstance(item, dict):
			item = {**item, "id": str(index)}
		renumbered.append(item)
	return renumbered


def parse_questions(text: str) -> List[Question]:
	data = _parse_json_object(text, what="extraction")
	items = data.get("questions")
	if not isinstance(items, list) or not items:
		logger.error("Extraction response has no questions: %s", text)
		raise MalformedResponse("LLM returned no questions")
	try:
		return [Question.model_validate(item) for item in _assign_question_ids(items)]
	except SchemaError as e:
		logger.error("Extraction response failed validation: %s", e)
		raise MalformedResponse("Invalid question format from LLM")


def parse_grade(text: str) -> GradeResult:
	data = _parse_json_object(text, what="grading")
	try:
		return GradeResult.model_validate(data)
	except SchemaError as e:
		logger.error("Grading response failed validation: %s (%s)", e, text)
		raise MalformedResponse("Invalid grading response")


def clamp_speed(speed: Optional[float]) -> float:
	if speed is None:
		return DEFAULT_SPEED
	return min(MAX_SPEED, max(MIN_SPEED, float(speed)))


def _require_client(client: Any, name: str) -> Any:
	if client is None:
		raise ServiceUnavailable(f"{name} API key not configured")
	return client


def _require(value: Optional[str], field: str) -> str:
	value = (value or "").strip()
	if not value:
		raise ValidationError(f"{field} is required")
	return value


# ============================================================================
# OPERATIONS
# ============================================================================

async def extract_questions(client: Optional[GroqClient], raw_text: Optional[str]) -> List[Question]:
	raw_text = _require(raw_text, "rawText")
	content = await _require_client(client, "Groq").complete(
		EXTRACT_QA_PROMPT,
		_build_extract_user_prompt(raw_text),
		temperature=EXTRACT_TEMPERATURE,
	)
	questions = parse_questions(content)
	logger.info("Extracted %d questions from %d characters", len(questions), len(raw_text))
	return questions


async def transcribe_audio(
	client: Optional[GroqClient],
	audio: Optional[bytes],
	mime_type: Optional[str],
	*,
	filename: Optional[str] = None,
) -> str:
	if not audio:
		raise ValidationError("audio is required")
	return await _require_client(client, "Groq").transcribe(
		audio,
		mime_type or "audio/webm",
		language=TARGET_LANGUAGE,
		response_format=TRANSCRIPT_FORMAT,
		filename=filename or "audio.webm",
	)


async def grade_answer(
	client: Optional[GroqClient],
	question: Optional[str],
	expected_answer: Optional[str],
	student_answer: Optional[str],
	acceptable_variations: Optional[Sequence[str]] = None,
) -> GradeResult:
	question = _require(question, "question")
	expected_answer = _require(expected_answer, "expectedAnswer")
	student_answer = _require(student_answer, "studentAnswer")
	variations = [v.strip() for v in (acceptable_variations or []) if v and v.strip()]
	content = await _require_client(client, "Groq").complete(
		GRADE_PROMPT,
		_build_grade_user_prompt(question, expected_answer, student_answer, variations),
		temperature=GRADE_TEMPERATURE,
	)
	return parse_grade(content)


async def synthesize_speech(
	client: Optional[InworldClient],
	text: Optional[str],
	*,
	voice_id: Optional[str],
	default_voice_id: str,
	speed: Optional[float] = None,
) -> Tuple[bytes, str]:
	text = _require(text, "text")
	audio = await _require_client(client, "Inworld").synthesize(
		text,
		(voice_id or "").strip() or default_voice_id,
		speed=clamp_speed(speed),
		temperature=TTS_TEMPERATURE,
		encoding=TTS_ENCODING,
		sample_rate=TTS_SAMPLE_RATE,
	)
	return audio, TTS_CONTENT_TYPE


async def list_spanish_voices(client: Optional[InworldClient]) -> List[Voice]:
	return await _require_client(client, "Inworld").list_voices(TARGET_LANGUAGE)
