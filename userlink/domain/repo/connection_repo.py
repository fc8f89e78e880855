from abc import ABC, abstractmethod

from userlink.application.exceptions import NotConnected
from userlink.domain.connection import Connection, ConnectionKey, ProviderId
from userlink.domain.user import UserId


class IConnectionRepo(ABC):
    """
    Data access for the provider connections of a single local user. Every
    method is relative to the user the repository was created for, see
    `IConnectionDirectory.create_connection_repository()`.

    When a user has multiple connections to the same provider they are ordered
    by rank, the first (lowest ranked) connection being the "primary" one.
    """

    user_id: UserId

    @abstractmethod
    def find_all_connections(self) -> dict[ProviderId, list[Connection]]:
        """
        Get all of the user's connections grouped by provider id. Providers
        are sorted by id, and connections are sorted by rank.
        """

        ...

    @abstractmethod
    def find_connections(self, provider_id: ProviderId) -> list[Connection]:
        """
        Get the user's connections to the given provider, sorted by rank. An
        empty list is returned if the user has no such connections.
        """

        ...

    def find_connections_to_users(
        self, provider_user_ids: dict[ProviderId, list[str]]
    ) -> dict[ProviderId, list[Connection | None]]:
        """
        Given a list of provider user ids per provider, look up the user's
        connection to each of them. The resulting lists line up with the lists
        that were passed in, with `None` where the user is not connected to
        that provider user.
        """

        if not provider_user_ids:
            raise ValueError("Unable to execute find: no provider user ids provided")

        results: dict[ProviderId, list[Connection | None]] = {}

        for provider_id, ids in provider_user_ids.items():
            connections: dict[str, Connection] = {
                c.provider_user_id: c for c in self.find_connections(provider_id)
            }

            results[provider_id] = [connections.get(id) for id in ids]

        return results

    @abstractmethod
    def get_connection(self, key: ConnectionKey) -> Connection:
        """
        Get the user's connection to the given provider account. Raises
        `NoSuchConnection` if the connection doesn't exist.
        """

        ...

    def find_primary_connection(self, provider_id: ProviderId) -> Connection | None:
        connections = self.find_connections(provider_id)

        return connections[0] if connections else None

    def get_primary_connection(self, provider_id: ProviderId) -> Connection:
        """
        Like `find_primary_connection()`, but raises `NotConnected` if the user
        isn't connected to the provider.
        """

        connection = self.find_primary_connection(provider_id)

        if not connection:
            raise NotConnected(f'User "{self.user_id}" is not connected to "{provider_id}"')

        return connection

    @abstractmethod
    def add_connection(self, connection: Connection) -> None:
        """
        Add a new connection to the user, ranked after any existing connections
        to the same provider. Raises `DuplicateConnection` if the user already
        has this connection.
        """

        ...

    @abstractmethod
    def update_connection(self, connection: Connection) -> None:
        """
        Replace the profile fields and credentials of an existing connection.
        Raises `NoSuchConnection` if the connection doesn't exist.
        """

        ...

    @abstractmethod
    def remove_connections(self, provider_id: ProviderId) -> None:
        ...

    @abstractmethod
    def remove_connection(self, key: ConnectionKey) -> None:
        ...
