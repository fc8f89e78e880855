import logging
import sqlite3
from collections.abc import Callable
from functools import wraps

from userlink.settings import DBSettings

logger = logging.getLogger("userlink")

Migration = Callable[[sqlite3.Connection], None]

migration_queue: list[tuple[int, Migration]] = []


def auto_migrate(version: int) -> Callable[[Migration], Migration]:
    def outer(migration: Migration) -> Migration:
        @wraps(migration)
        def inner(db: sqlite3.Connection) -> None:
            migration(db)
            db.commit()

            if get_version(db) == 0:
                db.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS _migration_version (
                        version INTEGER NOT NULL
                    );

                    DELETE FROM _migration_version;
                    """
                )
                db.execute("INSERT INTO _migration_version VALUES (?);", [version])

            else:
                db.execute(
                    "UPDATE _migration_version SET version = (?);",
                    [version],
                )

            db.commit()

            logger.debug(f"Migrated database to version {version}")

        migration_queue.append((version, inner))

        return inner

    return outer


@auto_migrate(version=1)
def migrate_v1(db: sqlite3.Connection) -> None:
    db.executescript(
        """
        CREATE TABLE users (
            id TEXT PRIMARY KEY NOT NULL,
            username TEXT NOT NULL,
            created_at TEXT NOT NULL,
            last_login TEXT
        );
        """
    )


@auto_migrate(version=2)
def migrate_v2(db: sqlite3.Connection) -> None:
    # user_id is not a foreign key: users can be managed by the application
    # embedding this library instead of living in the users table.
    db.executescript(
        """
        CREATE TABLE user_connections (
            user_id TEXT NOT NULL,
            provider_id TEXT NOT NULL,
            provider_user_id TEXT NOT NULL,
            rank INTEGER NOT NULL,
            display_name TEXT,
            profile_url TEXT,
            image_url TEXT,
            access_token TEXT,
            secret TEXT,
            refresh_token TEXT,
            expires_at TEXT,
            PRIMARY KEY (user_id, provider_id, provider_user_id)
        );

        CREATE UNIQUE INDEX ux_user_connections_rank
        ON user_connections(user_id, provider_id, rank);
        """
    )


@auto_migrate(version=3)
def migrate_v3(db: sqlite3.Connection) -> None:
    db.executescript(
        """
        CREATE INDEX ix_user_connections_provider_user
        ON user_connections(provider_id, provider_user_id);
        """
    )


def get_version(db: sqlite3.Connection) -> int:
    try:
        cursor = db.cursor()
        cursor.execute("SELECT version FROM _migration_version;")

        row = cursor.fetchone()

        return int(row[0]) if row else 0

    except sqlite3.OperationalError:
        return 0


def migrate(db: sqlite3.Connection) -> None:
    current_version = get_version(db)

    for migration_version, migration in migration_queue:
        if current_version < migration_version:
            migration(db)


if __name__ == "__main__":
    migrate(sqlite3.connect(DBSettings().db_url))
