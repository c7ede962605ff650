"""DB models, engine and session helpers for the Ledger API."""

from collections.abc import Iterator

from sqlalchemy import Column, Date, DateTime, Float, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ledger.core.utils import utcnow

Base = declarative_base()


class User(Base):
    """An account; the ledger core only ever looks at its id."""

    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Transaction(Base):
    """A single income or expense entry owned by one user."""

    __tablename__ = "transactions"
    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    kind = Column(String, nullable=False)
    category = Column(String, nullable=True)
    occurred_at = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        """Return a short debugging representation."""
        sign = "+" if self.kind == "income" else "-"
        return f"Transaction({self.id}, {self.occurred_at}, {self.title!r}, {sign}{self.amount})"


SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)


def get_engine(url: str) -> Engine:
    """Create a SQLAlchemy engine for the given database URL."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Create the tables if needed and bind the session factory to the engine."""
    Base.metadata.create_all(engine)
    SessionLocal.configure(bind=engine)


def get_session() -> Iterator[Session]:
    """Yield a session for one request and close it afterwards."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
