from __future__ import annotations
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool


Base = declarative_base()

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def normalize_database_url(url: str) -> str:
	# Hosted Postgres providers hand out libpq-style URLs; route them to psycopg 3
	if url.startswith("postgres://"):
		return "postgresql+psycopg://" + url[len("postgres://"):]
	if url.startswith("postgresql://"):
		return "postgresql+psycopg://" + url[len("postgresql://"):]
	return url


def build_engine(database_url: str) -> Engine:
	url = normalize_database_url(database_url)
	if url in _MEMORY_URLS:
		# One shared connection, otherwise every checkout sees an empty database
		return create_engine(
			url,
			connect_args={"check_same_thread": False},
			poolclass=StaticPool,
			future=True,
		)
	if url.startswith("sqlite"):
		return create_engine(url, connect_args={"check_same_thread": False}, future=True)
	return create_engine(
		url,
		connect_args={"connect_timeout": 10},
		pool_size=10,
		pool_recycle=30 * 60,
		pool_pre_ping=True,
		future=True,
	)


def build_sessionmaker(engine: Engine) -> sessionmaker:
	return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True, expire_on_commit=False)
