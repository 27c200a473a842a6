from __future__ import annotations
from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel
from .. import tutor
from ..deps import get_groq, get_inworld, get_settings
from ..groq_client import GroqClient
from ..inworld_client import InworldClient
from ..settings import Settings

router = APIRouter(tags=["speech"])


class TTSRequest(BaseModel):
	text: Optional[str] = None
	voiceId: Optional[str] = None
	speed: Optional[float] = None


@router.post("/transcribe")
async def transcribe(
	audio: Optional[UploadFile] = File(default=None),
	client: Optional[GroqClient] = Depends(get_groq),
):
	content = await audio.read() if audio is not None else None
	transcript = await tutor.transcribe_audio(
		client,
		content,
		audio.content_type if audio is not None else None,
		filename=audio.filename if audio is not None else None,
	)
	return {"transcript": transcript}


@router.post("/tts")
async def tts(
	req: TTSRequest,
	client: Optional[InworldClient] = Depends(get_inworld),
	settings: Settings = Depends(get_settings),
):
	audio, content_type = await tutor.synthesize_speech(
		client,
		req.text,
		voice_id=req.voiceId,
		default_voice_id=settings.inworld_voice_id,
		speed=req.speed,
	)
	# Response fills in Content-Length from the body
	return Response(content=audio, media_type=content_type)


@router.get("/voices")
async def voices(client: Optional[InworldClient] = Depends(get_inworld)):
	found = await tutor.list_spanish_voices(client)
	return {"voices": [v.model_dump() for v in found]}
