from fastapi import APIRouter, Depends
from ..deps import get_store
from ..session_store import SessionStore

router = APIRouter(tags=["health"])


@router.get("/health")
def health(store: SessionStore = Depends(get_store)):
	return {
		"status": "ok",
		"database": {"connected": store.connected, "error": store.error},
	}
