"""Database configuration and the record store."""
import logging
from contextlib import contextmanager
from typing import List

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, select

from errors import NotFound, StorageError
from models import ImageRecord

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    """Create the engine whose pool is shared by every request and the backfill."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    try:
        SQLModel.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise StorageError(f"Could not initialize database: {e}") from e


class RecordStore:
    """The `images` table: source of truth for which images exist."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def session(self):
        try:
            with Session(self.engine) as s:
                yield s
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def insert(self, tags: str) -> int:
        with self.session() as s:
            record = ImageRecord(tags=tags)
            s.add(record)
            s.commit()
            s.refresh(record)
            return record.id

    def get(self, image_id: int) -> ImageRecord:
        with self.session() as s:
            record = s.get(ImageRecord, image_id)
        if record is None:
            raise NotFound(f"No image with id {image_id}")
        return record

    def list_all(self) -> List[ImageRecord]:
        with self.session() as s:
            return list(s.exec(select(ImageRecord).order_by(ImageRecord.id)).all())

    def search(self, substring: str) -> List[ImageRecord]:
        """Records whose tags contain `substring`, matched case-sensitively."""
        stmt = select(ImageRecord).where(
            ImageRecord.tags.contains(substring, autoescape=True)
        )
        if self.engine.dialect.name == "sqlite":
            # sqlite LIKE ignores ASCII case
            stmt = stmt.where(func.instr(ImageRecord.tags, substring) > 0)
        with self.session() as s:
            return list(s.exec(stmt.order_by(ImageRecord.id)).all())

    def all_ids(self) -> List[int]:
        with self.session() as s:
            return list(s.exec(select(ImageRecord.id).order_by(ImageRecord.id)).all())
