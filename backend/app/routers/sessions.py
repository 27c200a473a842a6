from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from ..deps import get_connected_store
from ..schemas import SavedQuestion, Stats
from ..session_store import SessionStore

router = APIRouter(prefix="/sessions", tags=["sessions"])


class CreateSessionRequest(BaseModel):
	name: Optional[str] = None
	questions: Optional[List[SavedQuestion]] = None
	stats: Optional[Stats] = None
	rawText: Optional[str] = None


class PatchSessionRequest(BaseModel):
	stats: Optional[Stats] = None
	name: Optional[str] = None


# Plain `def` handlers: SQLAlchemy calls are blocking and run on the threadpool

@router.post("")
def create_session(req: CreateSessionRequest, store: SessionStore = Depends(get_connected_store)):
	record = store.create(
		questions=req.questions,
		name=req.name,
		stats=req.stats,
		raw_text=req.rawText,
	)
	return {
		"success": True,
		"sessionId": record.id,
		"session": record.model_dump(mode="json", by_alias=True),
	}


@router.get("")
def list_sessions(store: SessionStore = Depends(get_connected_store)):
	return {"sessions": [s.model_dump(mode="json", by_alias=True) for s in store.list()]}


@router.get("/{session_id}")
def get_session(session_id: str, store: SessionStore = Depends(get_connected_store)):
	record = store.get(session_id)
	return {"session": record.model_dump(mode="json", by_alias=True)}


@router.patch("/{session_id}")
def patch_session(session_id: str, req: PatchSessionRequest, store: SessionStore = Depends(get_connected_store)):
	store.patch(session_id, stats=req.stats, name=req.name)
	return {"success": True}


@router.delete("/{session_id}")
def delete_session(session_id: str, store: SessionStore = Depends(get_connected_store)):
	store.delete(session_id)
	return {"success": True}
