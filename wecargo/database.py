# wecargo/database.py
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from wecargo.core.config import Settings

# Import models so SQLModel metadata is populated before create_all()
from wecargo.models import delivery as _delivery_models  # noqa: F401
from wecargo.models import order as _order_models  # noqa: F401
from wecargo.models import user as _user_models  # noqa: F401


class Database:
    """
    Persistence client: owns one SQLAlchemy engine.

    Lifecycle:
      - constructed once at process start (`create_app` / tests)
      - stored on `app.state.db` and handed to request handlers through
        the `get_session` dependency
      - `dispose()` on shutdown

    ---------------------------------------------------------
    Postgres URLs (e.g. through a hosted connection pooler) get:
      - pool_pre_ping=True: validate connections before using them
      - pool_size / max_overflow kept small so a few backend
        processes do not exhaust the pooler's client limit

    SQLite URLs get check_same_thread=False; in-memory SQLite uses a
    StaticPool so every session sees the same database.
    ---------------------------------------------------------
    """

    def __init__(self, url: str, echo: bool = False, engine: Engine | None = None):
        self.url = url
        self.engine = engine or self._build_engine(url, echo)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

    @staticmethod
    def _build_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            kwargs: dict = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                kwargs["poolclass"] = StaticPool
            return create_engine(url, echo=echo, **kwargs)

        # Enforce SSL for hosted Postgres unless the URL says otherwise
        if url.startswith("postgresql") and "sslmode=" not in url:
            url += ("&" if "?" in url else "?") + "sslmode=require"

        return create_engine(
            url,
            echo=echo,  # set to True if you want to debug SQL queries
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=2,
        )

    def create_all(self) -> None:
        """
        Create all tables defined in SQLModel metadata if they do not exist.

        This is called once on application startup.
        """
        SQLModel.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        SQLModel.metadata.drop_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    def dispose(self) -> None:
        self.engine.dispose()


def get_session(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency that yields a SQLModel Session from the app's Database.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    db: Database = request.app.state.db
    with db.session() as session:
        yield session
