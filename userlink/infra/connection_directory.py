import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from userlink.domain.connection import Connection, ProviderId
from userlink.domain.repo.connection_directory import IConnectionDirectory, IConnectionSignUp
from userlink.domain.user import UserId
from userlink.infra.connection_repo import ConnectionRepo
from userlink.infra.db_connection import DbConnection
from userlink.infra.encryption import Encryptor, PlaintextEncryptor


class ConnectionDirectory(IConnectionDirectory, DbConnection):
    """
    Connection directory backed by the `user_connections` table. Sign ins run
    inside of a write transaction, so a provider account signing in from two
    places at once can only ever create one user.
    """

    encryptor: Encryptor

    def __init__(
        self,
        db: sqlite3.Connection | None = None,
        *,
        encryptor: Encryptor | None = None,
        connection_sign_up: IConnectionSignUp | None = None,
        auto_provision: bool = False,
    ) -> None:
        super().__init__(db)

        self.encryptor = encryptor or PlaintextEncryptor()

        self.set_connection_sign_up(connection_sign_up, auto_provision=auto_provision)

    def find_user_ids_with_connection(self, connection: Connection) -> list[UserId]:
        rows = self.conn.execute(
            """
            SELECT user_id
            FROM user_connections
            WHERE provider_id=? AND provider_user_id=?
            ORDER BY user_id;
            """,
            [connection.provider_id, connection.provider_user_id],
        ).fetchall()

        return [UserId(row["user_id"]) for row in rows]

    def find_user_ids_connected_to(
        self, provider_id: ProviderId, provider_user_ids: set[str]
    ) -> set[UserId]:
        if not provider_user_ids:
            return set()

        placeholders = ", ".join("?" for _ in provider_user_ids)

        rows = self.conn.execute(
            f"""
            SELECT DISTINCT user_id
            FROM user_connections
            WHERE provider_id=? AND provider_user_id IN ({placeholders});
            """,  # noqa: S608
            [provider_id, *provider_user_ids],
        ).fetchall()

        return {UserId(row["user_id"]) for row in rows}

    def create_connection_repository(self, user_id: UserId) -> ConnectionRepo:
        if not user_id:
            raise ValueError("User id cannot be empty")

        return ConnectionRepo(user_id, self.conn, self.encryptor)

    @contextmanager
    def lock(self) -> Iterator[None]:
        with self.transaction():
            yield
