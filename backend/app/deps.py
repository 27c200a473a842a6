from __future__ import annotations
from typing import Optional
from fastapi import Request
from .groq_client import GroqClient
from .inworld_client import InworldClient
from .session_store import SessionStore
from .settings import Settings


# Handles are built once in the app lifespan and parked on app.state

def get_settings(request: Request) -> Settings:
	return request.app.state.settings


def get_store(request: Request) -> SessionStore:
	return request.app.state.store


def get_connected_store(request: Request) -> SessionStore:
	store: SessionStore = request.app.state.store
	store.ensure_connected()
	return store


def get_groq(request: Request) -> Optional[GroqClient]:
	return getattr(request.app.state, "groq", None)


def get_inworld(request: Request) -> Optional[InworldClient]:
	return getattr(request.app.state, "inworld", None)
