from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _CamelModel(BaseModel):
	# Python attributes are snake_case; the wire format is camelCase
	model_config = ConfigDict(populate_by_name=True)


class Question(_CamelModel):
	"""One oral-exam prompt with its reference answer."""
	id: NonEmptyStr
	question: NonEmptyStr
	expected_answer: NonEmptyStr = Field(alias="expectedAnswer")
	acceptable_variations: List[NonEmptyStr] = Field(default_factory=list, alias="acceptableVariations")
	topic: Literal["vocabulary", "conjugation", "translation", "conversation"]
	hint: Optional[str] = None

	@field_validator("id", mode="before")
	@classmethod
	def _id_as_text(cls, v: Any) -> Any:
		if isinstance(v, int) and not isinstance(v, bool):
			return str(v)
		return v

	@field_validator("topic", mode="before")
	@classmethod
	def _lower_topic(cls, v: Any) -> Any:
		if isinstance(v, str):
			return v.strip().lower()
		return v

	@field_validator("acceptable_variations", mode="before")
	@classmethod
	def _null_variations(cls, v: Any) -> Any:
		return [] if v is None else v

	@field_validator("hint", mode="before")
	@classmethod
	def _blank_hint(cls, v: Any) -> Any:
		if isinstance(v, str) and not v.strip():
			return None
		return v


class SavedQuestion(_CamelModel):
	"""A question as the client saves it.

	Checks the same required fields as `Question` but never rewrites them, and
	keeps unknown keys, so a saved session reads back exactly as it was sent.
	"""
	model_config = ConfigDict(populate_by_name=True, extra="allow")

	id: Union[str, int]
	question: str
	expected_answer: str = Field(alias="expectedAnswer")
	acceptable_variations: List[str] = Field(default_factory=list, alias="acceptableVariations")
	topic: Literal["vocabulary", "conjugation", "translation", "conversation"]
	hint: Optional[str] = None

	@field_validator("id", "question", "expected_answer")
	@classmethod
	def _not_blank(cls, v: Any) -> Any:
		if isinstance(v, str) and not v.strip():
			raise ValueError("must not be blank")
		return v

	@field_validator("acceptable_variations")
	@classmethod
	def _no_blank_variations(cls, v: List[str]) -> List[str]:
		if any(not item.strip() for item in v):
			raise ValueError("variations must not be blank")
		return v

	def to_json(self) -> Dict[str, Any]:
		data = self.model_dump(by_alias=True, exclude_unset=True)
		data.update(self.model_extra or {})
		return data


class Stats(BaseModel):
	correct: int = Field(default=0, ge=0)
	partial: int = Field(default=0, ge=0)
	incorrect: int = Field(default=0, ge=0)


class GradeResult(BaseModel):
	verdict: Literal["correct", "partial", "incorrect"]
	feedback: str = ""
	correction: str = ""
	explanation: str = ""

	@field_validator("verdict", mode="before")
	@classmethod
	def _normalize_verdict(cls, v: Any) -> Any:
		if isinstance(v, str):
			return v.strip().lower()
		return v

	@field_validator("feedback", "correction", "explanation", mode="before")
	@classmethod
	def _null_text(cls, v: Any) -> Any:
		return "" if v is None else v


class Voice(BaseModel):
	voice_id: str
	name: str
	languages: List[str] = Field(default_factory=list)
	description: str = ""


class SessionRecord(_CamelModel):
	id: str
	name: str
	# Stored exactly as the client sent them
	questions: List[Dict[str, Any]]
	stats: Stats
	raw_text: str = Field(alias="rawText")
	created_at: datetime = Field(alias="createdAt")
	updated_at: datetime = Field(alias="updatedAt")


class SessionSummary(_CamelModel):
	id: str
	name: str
	stats: Stats
	created_at: datetime = Field(alias="createdAt")
	question_count: int = Field(alias="questionCount")
