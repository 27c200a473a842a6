import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import TutorError
from .groq_client import GroqClient
from .inworld_client import InworldClient
from .session_store import SessionStore, SqlSessionStore
from .settings import Settings, settings as default_settings
from .routers import health, study, speech, sessions

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
	root = logging.getLogger()
	if not root.handlers:
		handler = logging.StreamHandler()
		handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
		root.addHandler(handler)
	root.setLevel(level.upper())


def _build_groq(settings: Settings) -> Optional[GroqClient]:
	if not settings.groq_api_key:
		logger.warning("GROQ_API_KEY not configured - extraction, grading and transcription disabled")
		return None
	return GroqClient(
		settings.groq_api_key,
		base_url=settings.groq_base_url,
		chat_model=settings.groq_chat_model,
		transcription_model=settings.groq_transcription_model,
		timeout=settings.provider_timeout_seconds,
	)


def _build_inworld(settings: Settings) -> Optional[InworldClient]:
	if not settings.inworld_api_key:
		logger.warning("INWORLD_API_KEY not configured - text-to-speech disabled")
		return None
	return InworldClient(
		settings.inworld_api_key,
		base_url=settings.inworld_base_url,
		model=settings.inworld_model,
		timeout=settings.provider_timeout_seconds,
	)


def _field_name(loc) -> str:
	# Drop the "body"/"query" prefix FastAPI puts in front of the field path
	parts = [str(p) for p in loc if p not in ("body", "query", "path")]
	return ".".join(parts) or "body"


def create_app(
	settings: Optional[Settings] = None,
	*,
	store: Optional[SessionStore] = None,
	groq: Optional[GroqClient] = None,
	inworld: Optional[InworldClient] = None,
) -> FastAPI:
	settings = settings or default_settings

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		app.state.settings = settings
		app.state.store = store or SqlSessionStore(settings.database_url)
		if not app.state.store.connected:
			app.state.store.connect()
		app.state.groq = groq or _build_groq(settings)
		app.state.inworld = inworld or _build_inworld(settings)
		yield
		for client in (app.state.groq, app.state.inworld):
			if client is not None:
				await client.aclose()
		app.state.store.close()

	app = FastAPI(title="Spanish Oral Exam Tutor API", lifespan=lifespan)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origin_list,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(health.router)
	app.include_router(study.router)
	app.include_router(speech.router)
	app.include_router(sessions.router)

	@app.exception_handler(TutorError)
	async def tutor_error_handler(request: Request, exc: TutorError):
		if exc.status_code >= 500:
			logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
		return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

	@app.exception_handler(RequestValidationError)
	async def request_validation_handler(request: Request, exc: RequestValidationError):
		errors = exc.errors()
		if not errors:
			return JSONResponse(status_code=400, content={"error": "Invalid request"})
		first = errors[0]
		return JSONResponse(
			status_code=400,
			content={"error": f"Invalid {_field_name(first.get('loc', ()))}: {first.get('msg', 'invalid value')}"},
		)

	@app.exception_handler(Exception)
	async def unhandled_error_handler(request: Request, exc: Exception):
		logger.exception("Unhandled error on %s %s", request.method, request.url.path)
		return JSONResponse(status_code=500, content={"error": "Internal server error"})

	@app.get("/", include_in_schema=False)
	async def info():
		return {
			"status": "ok",
			"groq_configured": bool(settings.groq_api_key),
			"inworld_configured": bool(settings.inworld_api_key),
		}

	return app


configure_logging(default_settings.log_level)
app = create_app()


def run() -> None:
	import uvicorn

	uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
	run()
