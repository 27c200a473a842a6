"""Persistence for saved practice sessions.

`SessionStore` is the contract the routers depend on. `SqlSessionStore` is the
SQLAlchemy implementation used for both PostgreSQL and SQLite. Every method is
a single transaction touching at most one session row.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from .db import Base, build_engine, build_sessionmaker
from .errors import InvalidId, NotFound, ServiceUnavailable, ValidationError
from .models import StudySession, utcnow
from .schemas import SavedQuestion, SessionRecord, SessionSummary, Stats

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[0-9]{1,18}$")


def default_session_name(now: Optional[datetime] = None) -> str:
	now = now or utcnow()
	return f"Session {now.date().isoformat()}"


def parse_session_id(session_id: str) -> int:
	"""Session ids are decimal integers on the wire; anything else is InvalidId."""
	value = (session_id or "").strip()
	if not _ID_PATTERN.match(value):
		raise InvalidId()
	return int(value)


def _as_utc(value: datetime) -> datetime:
	# SQLite hands back naive datetimes even for timezone-aware columns
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value


class SessionStore(ABC):
	@property
	@abstractmethod
	def connected(self) -> bool: ...

	@property
	@abstractmethod
	def error(self) -> Optional[str]: ...

	@abstractmethod
	def connect(self) -> bool: ...

	@abstractmethod
	def create(
		self,
		*,
		questions: Optional[Sequence[SavedQuestion]],
		name: Optional[str] = None,
		stats: Optional[Stats] = None,
		raw_text: Optional[str] = None,
	) -> SessionRecord: ...

	@abstractmethod
	def list(self) -> List[SessionSummary]: ...

	@abstractmethod
	def get(self, session_id: str) -> SessionRecord: ...

	@abstractmethod
	def patch(self, session_id: str, *, stats: Optional[Stats] = None, name: Optional[str] = None) -> None: ...

	@abstractmethod
	def delete(self, session_id: str) -> None: ...

	def close(self) -> None:
		pass

	def ensure_connected(self) -> None:
		if not self.connected:
			raise ServiceUnavailable("Database not connected")


class SqlSessionStore(SessionStore):
	def __init__(self, database_url: Optional[str]) -> None:
		self.database_url = database_url
		self._engine = None
		self._sessionmaker = None
		self._connected = False
		self._error: Optional[str] = None

	@property
	def connected(self) -> bool:
		return self._connected

	@property
	def error(self) -> Optional[str]:
		return self._error

	def connect(self) -> bool:
		if not self.database_url:
			self._error = "DATABASE_URL not configured"
			logger.warning("DATABASE_URL not configured - sessions will not be saved")
			return False
		try:
			self._engine = build_engine(self.database_url)
			with self._engine.connect() as conn:
				conn.execute(text("SELECT 1"))
			Base.metadata.create_all(bind=self._engine)
		except Exception as e:
			self._error = str(e)
			logger.error("Database connection failed: %s", e)
			if self._engine is not None:
				self._engine.dispose()
				self._engine = None
			return False
		self._sessionmaker = build_sessionmaker(self._engine)
		self._connected = True
		self._error = None
		logger.info("Connected to database, sessions table ready")
		return True

	def close(self) -> None:
		if self._engine is not None:
			self._engine.dispose()
		self._engine = None
		self._sessionmaker = None
		self._connected = False

	@contextmanager
	def _transaction(self) -> Iterator[Session]:
		self.ensure_connected()
		try:
			with self._sessionmaker.begin() as db:
				yield db
		except OperationalError as e:
			logger.error("Database unreachable: %s", e)
			raise ServiceUnavailable("Database unavailable") from e

	def create(self, *, questions, name=None, stats=None, raw_text=None) -> SessionRecord:
		if not questions:
			raise ValidationError("No questions to save")
		now = utcnow()
		row = StudySession(
			name=(name or "").strip() or default_session_name(now),
			questions=[q.to_json() for q in questions],
			question_count=len(questions),
			stats=(stats or Stats()).model_dump(),
			raw_text=raw_text or "",
			created_at=now,
			updated_at=now,
		)
		with self._transaction() as db:
			db.add(row)
			db.flush()
			record = self._to_record(row)
		return record

	def list(self) -> List[SessionSummary]:
		query = select(
			StudySession.id,
			StudySession.name,
			StudySession.stats,
			StudySession.created_at,
			StudySession.question_count,
		).order_by(StudySession.created_at.desc(), StudySession.id.desc())
		with self._transaction() as db:
			rows = db.execute(query).all()
		return [
			SessionSummary(
				id=str(r.id),
				name=r.name,
				stats=Stats.model_validate(r.stats or {}),
				created_at=_as_utc(r.created_at),
				question_count=r.question_count,
			)
			for r in rows
		]

	def get(self, session_id: str) -> SessionRecord:
		pk = parse_session_id(session_id)
		with self._transaction() as db:
			row = db.get(StudySession, pk)
			if row is None:
				raise NotFound()
			return self._to_record(row)

	def patch(self, session_id: str, *, stats=None, name=None) -> None:
		pk = parse_session_id(session_id)
		name = (name or "").strip() or None
		if stats is None and name is None:
			raise ValidationError("Provide stats or name to update")
		with self._transaction() as db:
			row = db.get(StudySession, pk)
			if row is None:
				raise NotFound()
			if stats is not None:
				row.stats = stats.model_dump()
			if name is not None:
				row.name = name
			# Keep updated_at strictly increasing even when the clock has not moved
			previous = _as_utc(row.updated_at)
			now = utcnow()
			row.updated_at = now if now > previous else previous + timedelta(microseconds=1)

	def delete(self, session_id: str) -> None:
		pk = parse_session_id(session_id)
		with self._transaction() as db:
			row = db.get(StudySession, pk)
			if row is None:
				raise NotFound()
			db.delete(row)

	@staticmethod
	def _to_record(row: StudySession) -> SessionRecord:
		return SessionRecord(
			id=str(row.id),
			name=row.name,
			questions=list(row.questions),
			stats=Stats.model_validate(row.stats or {}),
			raw_text=row.raw_text or "",
			created_at=_as_utc(row.created_at),
			updated_at=_as_utc(row.updated_at),
		)

