import sqlite3

from userlink.common.datetime import UtcDatetime
from userlink.domain.repo.user_repo import IUserRepo
from userlink.domain.user import User, UserId
from userlink.infra.db_connection import DbConnection


class UserRepo(IUserRepo, DbConnection):
    def get_user_by_id(self, id: UserId) -> User | None:
        row = self.conn.execute(
            """
            SELECT id, username, created_at, last_login
            FROM users
            WHERE id=?;
            """,
            [id],
        ).fetchone()

        return self._convert(row) if row else None

    def create_or_update_user(self, user: User) -> UserId:
        user_id = self.conn.execute(
            """
            INSERT INTO users (id, username, created_at)
            VALUES (?, ?, ?)
            ON CONFLICT DO UPDATE SET username=excluded.username
            RETURNING id;
            """,
            [user.id, user.username, user.created_at],
        ).fetchone()[0]

        self.commit()

        return UserId(user_id)

    def update_last_login(self, user: User) -> None:
        user.last_login = UtcDatetime.now()

        self.conn.execute(
            "UPDATE users SET last_login=? WHERE id=?;",
            [user.last_login, user.id],
        )

        self.commit()

    @staticmethod
    def _convert(row: sqlite3.Row) -> User:
        return User(
            id=UserId(row["id"]),
            username=row["username"],
            created_at=UtcDatetime.fromisoformat(row["created_at"]),
            last_login=(
                UtcDatetime.fromisoformat(row["last_login"]) if row["last_login"] else None
            ),
        )
