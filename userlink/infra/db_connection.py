import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

from userlink.common.datetime import UtcDatetime
from userlink.settings import DBSettings

sqlite3.register_adapter(UtcDatetime, str)

# ids of the connections that are inside of an explicit transaction
_open_transactions: set[int] = set()
_transaction_lock = RLock()


def get_default_db(*, shared: bool = False) -> sqlite3.Connection:
    """
    Open the database from `DB_URL`. A shared connection can be used from any
    thread; writes from different threads are serialised by `transaction()`.
    """

    if shared:
        return sqlite3.connect(DBSettings().db_url, check_same_thread=False)

    return sqlite3.connect(DBSettings().db_url)


class DbConnection:
    conn: sqlite3.Connection

    def __init__(self, db: sqlite3.Connection | None = None) -> None:
        self.conn = get_default_db() if db is None else db

        self.conn.row_factory = sqlite3.Row

    def commit(self) -> None:
        """
        Commit the current changes, unless an explicit transaction is open on
        this connection, in which case the transaction will commit them.
        """

        if id(self.conn) not in _open_transactions:
            self.conn.commit()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run a block of statements in a single write transaction. The database
        is locked for writing when the transaction starts, so concurrent
        transactions (from other threads or other processes) are serialised.
        Nested transactions are merged into the outer most transaction.
        """

        with _transaction_lock:
            if id(self.conn) in _open_transactions:
                yield
                return

            if self.conn.in_transaction:
                self.conn.commit()

            self.conn.execute("BEGIN IMMEDIATE;")
            _open_transactions.add(id(self.conn))

            try:
                yield

            except BaseException:
                _open_transactions.discard(id(self.conn))
                self.conn.rollback()
                raise

            _open_transactions.discard(id(self.conn))
            self.conn.commit()
