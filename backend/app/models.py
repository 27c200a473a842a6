from __future__ import annotations
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, Text, JSON, Index
from .db import Base


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


class StudySession(Base):
	__tablename__ = "sessions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	name = Column(String(255), nullable=False)
	# Ordered list of question objects, fixed at creation
	questions = Column(JSON, nullable=False)
	# Denormalized so listing never loads the question payload
	question_count = Column(Integer, nullable=False, default=0)
	stats = Column(JSON, nullable=False)
	raw_text = Column(Text, nullable=False, default="")
	created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
	updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

	__table_args__ = (Index("idx_sessions_created_at", created_at.desc()),)
