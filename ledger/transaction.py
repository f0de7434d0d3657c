"""Transaction contexts and the ledgers that commit them."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from .database import connect, initialize_database
from .world_state import InMemoryWorldState, SqliteWorldState, WorldState

logger = logging.getLogger(__name__)


def _new_tx_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TransactionContext:
    """Handle passed explicitly into every contract operation."""

    stub: WorldState
    tx_id: str = field(default_factory=_new_tx_id)
    read_only: bool = False


class Ledger(ABC):
    """Host ledger: runs each transaction all-or-nothing."""

    @abstractmethod
    def transaction(self, read_only: bool = False) -> AbstractContextManager[TransactionContext]:
        """Context manager yielding a TransactionContext.

        Writes are committed when the block exits normally and discarded when
        it raises. Read-only transactions never commit.
        """


class InMemoryLedger(Ledger):
    """Ledger over a plain dict; each transaction works on a staged copy."""

    def __init__(self, data: Mapping[str, bytes] | None = None) -> None:
        self._state: dict[str, bytes] = dict(data) if data is not None else {}

    @property
    def state(self) -> dict[str, bytes]:
        return dict(self._state)

    @contextmanager
    def transaction(self, read_only: bool = False) -> Iterator[TransactionContext]:
        staged = InMemoryWorldState(self._state)
        ctx = TransactionContext(stub=staged, read_only=read_only)
        yield ctx
        if read_only:
            return
        self._state = staged.snapshot()
        logger.debug(f"Committed transaction {ctx.tx_id}")


class SqliteLedger(Ledger):
    """Ledger persisted to a SQLite file, one connection per transaction."""

    db_path: str
    page_size: int

    def __init__(self, db_path: str | Path, page_size: int = 100) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.db_path = str(db_path)
        self.page_size = page_size
        initialize_database(self.db_path)

    @contextmanager
    def transaction(self, read_only: bool = False) -> Iterator[TransactionContext]:
        connection = connect(self.db_path)
        ctx = TransactionContext(
            stub=SqliteWorldState(connection, page_size=self.page_size),
            read_only=read_only,
        )
        try:
            yield ctx
            if read_only:
                connection.rollback()
            else:
                connection.commit()
                logger.debug(f"Committed transaction {ctx.tx_id}")
        except BaseException:
            connection.rollback()
            logger.debug(f"Rolled back transaction {ctx.tx_id}")
            raise
        finally:
            connection.close()
