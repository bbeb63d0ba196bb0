from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


class Database:
    """Process-wide handle on the credential store.

    The engine is created on first use and then shared by every request.
    """

    def __init__(self, url: str):
        self.url = url
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            is_sqlite = self.url.startswith("sqlite")
            engine_kwargs = {}
            connect_args = {}
            if is_sqlite:
                connect_args["check_same_thread"] = False
                if ":memory:" in self.url:
                    engine_kwargs["poolclass"] = StaticPool
            self._engine = create_engine(
                self.url,
                pool_pre_ping=True,
                connect_args=connect_args,
                **engine_kwargs,
            )
            logger.info("Database engine created for dialect=%s", self._engine.dialect.name)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._sessionmaker is None:
            self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self._sessionmaker

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def sessions(self) -> Generator[Session, None, None]:
        db = self.session()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
