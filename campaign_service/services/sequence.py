"""
Atomic sequence generation for human-readable identifiers.

Every backend advances the counter with a single server-side operation, so
concurrent callers (threads, workers or separate instances) never receive
the same value.
"""
import logging
from typing import Protocol

import redis
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from campaign_service.core.exceptions import StoreUnavailableException
from campaign_service.models.counter import Counter

logger = logging.getLogger(__name__)


class SequenceGenerator(Protocol):
    def next(self, name: str) -> int:
        ...


class SqlSequence:
    """Counter rows advanced by ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING``.

    The increment joins the caller's transaction; the row stays locked until
    the caller commits, which serialises concurrent creates.
    """

    _dialects = {
        "sqlite": sqlite.insert,
        "postgresql": postgresql.insert,
    }

    def __init__(self, session: Session):
        self.session = session

    def next(self, name: str) -> int:
        dialect = self.session.get_bind().dialect.name
        insert = self._dialects.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Atomic sequences are not supported on {dialect}")

        table = Counter.__table__
        stmt = (
            insert(table)
            .values(name=name, seq=1)
            .on_conflict_do_update(index_elements=[table.c.name], set_={"seq": table.c.seq + 1})
            .returning(table.c.seq)
        )
        try:
            return int(self.session.connection().execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            logger.error(f"Sequence '{name}' increment failed: {e}")
            raise StoreUnavailableException("Sequence store unavailable") from e


class RedisSequence:
    """Counters kept in Redis and advanced with ``INCR``."""

    def __init__(self, client, prefix: str = "sequence:"):
        self.client = client
        self.prefix = prefix

    def next(self, name: str) -> int:
        try:
            return int(self.client.incr(f"{self.prefix}{name}"))
        except redis.RedisError as e:
            logger.error(f"Sequence '{name}' increment failed: {e}")
            raise StoreUnavailableException("Sequence store unavailable") from e


def format_campaign_id(seq: int, prefix: str = "CAMP", width: int = 3) -> str:
    """``format_campaign_id(7) == "CAMP007"``; values wider than ``width`` are kept whole."""
    return f"{prefix}{seq:0{width}d}"
