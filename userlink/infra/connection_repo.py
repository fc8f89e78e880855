import sqlite3
from collections import defaultdict

from userlink.application.exceptions import DuplicateConnection, NoSuchConnection
from userlink.common.datetime import UtcDatetime
from userlink.domain.connection import (
    Connection,
    ConnectionKey,
    Credentials,
    ProviderId,
    ProviderUserId,
)
from userlink.domain.repo.connection_repo import IConnectionRepo
from userlink.domain.user import UserId
from userlink.infra.db_connection import DbConnection
from userlink.infra.encryption import Encryptor, PlaintextEncryptor

SELECT_CONNECTIONS = """
SELECT
    provider_id,
    provider_user_id,
    display_name,
    profile_url,
    image_url,
    access_token,
    secret,
    refresh_token,
    expires_at
FROM user_connections
"""


class ConnectionRepo(IConnectionRepo, DbConnection):
    encryptor: Encryptor

    def __init__(
        self,
        user_id: UserId,
        db: sqlite3.Connection | None = None,
        encryptor: Encryptor | None = None,
    ) -> None:
        super().__init__(db)

        self.user_id = user_id
        self.encryptor = encryptor or PlaintextEncryptor()

    def find_all_connections(self) -> dict[ProviderId, list[Connection]]:
        rows = self.conn.execute(
            f"""
            {SELECT_CONNECTIONS}
            WHERE user_id=?
            ORDER BY provider_id, rank;
            """,
            [self.user_id],
        ).fetchall()

        connections: defaultdict[ProviderId, list[Connection]] = defaultdict(list)

        for row in rows:
            connection = self._convert(row)

            connections[connection.provider_id].append(connection)

        return dict(connections)

    def find_connections(self, provider_id: ProviderId) -> list[Connection]:
        rows = self.conn.execute(
            f"""
            {SELECT_CONNECTIONS}
            WHERE user_id=? AND provider_id=?
            ORDER BY rank;
            """,
            [self.user_id, provider_id],
        ).fetchall()

        return [self._convert(row) for row in rows]

    def get_connection(self, key: ConnectionKey) -> Connection:
        row = self.conn.execute(
            f"""
            {SELECT_CONNECTIONS}
            WHERE user_id=? AND provider_id=? AND provider_user_id=?;
            """,
            [self.user_id, key.provider_id, key.provider_user_id],
        ).fetchone()

        if not row:
            raise NoSuchConnection(f'User "{self.user_id}" has no connection to {key}')

        return self._convert(row)

    def add_connection(self, connection: Connection) -> None:
        credentials = connection.credentials

        with self.transaction():
            try:
                self.conn.execute(
                    """
                    INSERT INTO user_connections (
                        user_id,
                        provider_id,
                        provider_user_id,
                        rank,
                        display_name,
                        profile_url,
                        image_url,
                        access_token,
                        secret,
                        refresh_token,
                        expires_at
                    )
                    VALUES (
                        ?,
                        ?,
                        ?,
                        (
                            SELECT coalesce(max(rank) + 1, 1)
                            FROM user_connections
                            WHERE user_id=? AND provider_id=?
                        ),
                        ?, ?, ?, ?, ?, ?, ?
                    );
                    """,
                    [
                        self.user_id,
                        connection.provider_id,
                        connection.provider_user_id,
                        self.user_id,
                        connection.provider_id,
                        connection.display_name,
                        connection.profile_url,
                        connection.image_url,
                        self._encrypt(credentials.access_token),
                        self._encrypt(credentials.secret),
                        self._encrypt(credentials.refresh_token),
                        credentials.expires_at,
                    ],
                )

            except sqlite3.IntegrityError as ex:
                raise DuplicateConnection(
                    f'User "{self.user_id}" is already connected to {connection.key}'
                ) from ex

    def update_connection(self, connection: Connection) -> None:
        credentials = connection.credentials

        cursor = self.conn.execute(
            """
            UPDATE user_connections
            SET
                display_name=?,
                profile_url=?,
                image_url=?,
                access_token=?,
                secret=?,
                refresh_token=?,
                expires_at=?
            WHERE user_id=? AND provider_id=? AND provider_user_id=?;
            """,
            [
                connection.display_name,
                connection.profile_url,
                connection.image_url,
                self._encrypt(credentials.access_token),
                self._encrypt(credentials.secret),
                self._encrypt(credentials.refresh_token),
                credentials.expires_at,
                self.user_id,
                connection.provider_id,
                connection.provider_user_id,
            ],
        )

        self.commit()

        if cursor.rowcount == 0:
            raise NoSuchConnection(f'User "{self.user_id}" has no connection to {connection.key}')

    def remove_connections(self, provider_id: ProviderId) -> None:
        self.conn.execute(
            "DELETE FROM user_connections WHERE user_id=? AND provider_id=?;",
            [self.user_id, provider_id],
        )

        self.commit()

    def remove_connection(self, key: ConnectionKey) -> None:
        self.conn.execute(
            """
            DELETE FROM user_connections
            WHERE user_id=? AND provider_id=? AND provider_user_id=?;
            """,
            [self.user_id, key.provider_id, key.provider_user_id],
        )

        self.commit()

    def _encrypt(self, value: str | None) -> str | None:
        return self.encryptor.encrypt(value) if value else None

    def _decrypt(self, value: str | None) -> str | None:
        return self.encryptor.decrypt(value) if value else None

    def _convert(self, row: sqlite3.Row) -> Connection:
        return Connection(
            provider_id=ProviderId(row["provider_id"]),
            provider_user_id=ProviderUserId(row["provider_user_id"]),
            display_name=row["display_name"],
            profile_url=row["profile_url"],
            image_url=row["image_url"],
            credentials=Credentials(
                access_token=self._decrypt(row["access_token"]),
                secret=self._decrypt(row["secret"]),
                refresh_token=self._decrypt(row["refresh_token"]),
                expires_at=(
                    UtcDatetime.fromisoformat(row["expires_at"]) if row["expires_at"] else None
                ),
            ),
        )
