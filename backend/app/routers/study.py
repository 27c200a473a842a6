from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from .. import tutor
from ..deps import get_groq
from ..groq_client import GroqClient

router = APIRouter(tags=["study"])


class ExtractRequest(BaseModel):
	rawText: Optional[str] = None


class GradeRequest(BaseModel):
	question: Optional[str] = None
	expectedAnswer: Optional[str] = None
	studentAnswer: Optional[str] = None
	acceptableVariations: Optional[List[str]] = None


@router.post("/extract-qa")
async def extract_qa(req: ExtractRequest, client: Optional[GroqClient] = Depends(get_groq)):
	questions = await tutor.extract_questions(client, req.rawText)
	return {"questions": [q.model_dump(by_alias=True) for q in questions]}


@router.post("/grade")
async def grade(req: GradeRequest, client: Optional[GroqClient] = Depends(get_groq)):
	result = await tutor.grade_answer(
		client,
		req.question,
		req.expectedAnswer,
		req.studentAnswer,
		req.acceptableVariations,
	)
	return result.model_dump()
