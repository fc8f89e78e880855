from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

from userlink.application.exceptions import DuplicateConnection, NoSuchConnection
from userlink.domain.connection import Connection, ConnectionKey, ProviderId
from userlink.domain.repo.connection_directory import IConnectionDirectory, IConnectionSignUp
from userlink.domain.repo.connection_repo import IConnectionRepo
from userlink.domain.user import UserId

# user id -> provider id -> list of connections, in rank order. Users and
# providers without any connections have no entry.
Connections = dict[UserId, dict[ProviderId, list[Connection]]]


class InMemoryConnectionRepo(IConnectionRepo):
    """
    Connection repository over the dict owned by `InMemoryConnectionDirectory`.
    Repositories created for the same user share the same dict.
    """

    users: Connections

    def __init__(self, user_id: UserId, users: Connections, lock: RLock) -> None:
        self.user_id = user_id
        self.users = users
        self._lock = lock

    def find_all_connections(self) -> dict[ProviderId, list[Connection]]:
        with self._lock:
            connections = self.users.get(self.user_id, {})

            return {
                provider_id: list(connections[provider_id])
                for provider_id in sorted(connections)
            }

    def find_connections(self, provider_id: ProviderId) -> list[Connection]:
        with self._lock:
            return list(self.users.get(self.user_id, {}).get(provider_id, []))

    def get_connection(self, key: ConnectionKey) -> Connection:
        for connection in self.find_connections(key.provider_id):
            if connection.key == key:
                return connection

        raise NoSuchConnection(f'User "{self.user_id}" has no connection to {key}')

    def add_connection(self, connection: Connection) -> None:
        with self._lock:
            existing = self.find_connections(connection.provider_id)

            if any(c.key == connection.key for c in existing):
                raise DuplicateConnection(
                    f'User "{self.user_id}" is already connected to {connection.key}'
                )

            connections = self.users.setdefault(self.user_id, {})
            connections.setdefault(connection.provider_id, []).append(connection)

    def update_connection(self, connection: Connection) -> None:
        with self._lock:
            existing = self.users.get(self.user_id, {}).get(connection.provider_id, [])

            for i, c in enumerate(existing):
                if c.key == connection.key:
                    existing[i] = connection
                    return

        raise NoSuchConnection(f'User "{self.user_id}" has no connection to {connection.key}')

    def remove_connections(self, provider_id: ProviderId) -> None:
        with self._lock:
            connections = self.users.get(self.user_id, {})
            connections.pop(provider_id, None)

            self._drop_if_empty()

    def remove_connection(self, key: ConnectionKey) -> None:
        with self._lock:
            connections = self.users.get(self.user_id, {})

            remaining = [c for c in connections.get(key.provider_id, []) if c.key != key]

            if remaining:
                connections[key.provider_id] = remaining
            else:
                connections.pop(key.provider_id, None)

            self._drop_if_empty()

    def _drop_if_empty(self) -> None:
        if self.user_id in self.users and not self.users[self.user_id]:
            del self.users[self.user_id]


class InMemoryConnectionDirectory(IConnectionDirectory):
    """
    A connection directory which keeps everything in memory. Useful for tests,
    and for applications which don't need to persist connections.
    """

    users: Connections

    def __init__(
        self,
        *,
        connection_sign_up: IConnectionSignUp | None = None,
        auto_provision: bool = False,
    ) -> None:
        self.users = {}
        self._lock = RLock()

        self.set_connection_sign_up(connection_sign_up, auto_provision=auto_provision)

    def find_user_ids_with_connection(self, connection: Connection) -> list[UserId]:
        key = connection.key

        with self._lock:
            return sorted(
                user_id
                for user_id, connections in self.users.items()
                if any(c.key == key for c in connections.get(key.provider_id, []))
            )

    def find_user_ids_connected_to(
        self, provider_id: ProviderId, provider_user_ids: set[str]
    ) -> set[UserId]:
        with self._lock:
            return {
                user_id
                for user_id, connections in self.users.items()
                if any(
                    c.provider_user_id in provider_user_ids
                    for c in connections.get(provider_id, [])
                )
            }

    def create_connection_repository(self, user_id: UserId) -> InMemoryConnectionRepo:
        if not user_id:
            raise ValueError("User id cannot be empty")

        return InMemoryConnectionRepo(user_id, self.users, self._lock)

    @contextmanager
    def lock(self) -> Iterator[None]:
        with self._lock:
            yield
