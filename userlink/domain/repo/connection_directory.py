import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from userlink.domain.connection import Connection, ProviderId
from userlink.domain.repo.connection_repo import IConnectionRepo
from userlink.domain.sign_in import Created, Found, NotFound, SignInResult
from userlink.domain.user import UserId

logger = logging.getLogger("userlink")


class IConnectionSignUp(ABC):
    """
    Creates a local user for a provider account that isn't connected to any
    local user yet. Used when the directory is configured to auto provision
    users on sign in.
    """

    @abstractmethod
    def execute(self, connection: Connection) -> UserId | None:
        """
        Create a new local user for the connection, returning the new user id,
        or `None` to decline creating a user.
        """

        ...


class IConnectionDirectory(ABC):
    """
    Data access across the connections of all users. Mainly used to resolve a
    provider account to a local user during a provider sign in, and as the
    factory for the per-user `IConnectionRepo`.
    """

    connection_sign_up: IConnectionSignUp | None = None
    auto_provision: bool = False

    def set_connection_sign_up(
        self,
        connection_sign_up: IConnectionSignUp | None,
        *,
        auto_provision: bool = True,
    ) -> None:
        if auto_provision and not connection_sign_up:
            raise ValueError("Auto provisioning requires a connection sign up")

        self.connection_sign_up = connection_sign_up
        self.auto_provision = auto_provision

    @abstractmethod
    def find_user_ids_with_connection(self, connection: Connection) -> list[UserId]:
        """
        Get the ids of all local users connected to the provider account of
        the given connection, sorted by id.
        """

        ...

    @abstractmethod
    def find_user_ids_connected_to(
        self, provider_id: ProviderId, provider_user_ids: set[str]
    ) -> set[UserId]:
        """
        Get the ids of the users connected to any of the given provider users.
        An empty set is returned if nobody is connected to them.
        """

        ...

    @abstractmethod
    def create_connection_repository(self, user_id: UserId) -> IConnectionRepo:
        """
        Create a connection repository for the given user. This never fails
        for unknown users, the returned repository simply has no connections.
        """

        ...

    @contextmanager
    def lock(self) -> Iterator[None]:
        """
        Serialise sign ins so that concurrent sign ins for the same provider
        account cannot create multiple users. Stores that are shared between
        threads or processes need to override this.
        """

        yield

    def sign_in(self, connection: Connection) -> SignInResult:
        """
        Resolve the local user for a provider sign in. If there is exactly one
        user connected to the provider account that user is found. If nobody
        is connected and auto provisioning is enabled a new user is created
        and connected. Otherwise there is no definitive user, which includes
        the case where multiple users share the provider account.
        """

        with self.lock():
            user_ids = self.find_user_ids_with_connection(connection)

            if len(user_ids) == 1:
                return Found(user_ids[0])

            if user_ids or not self.auto_provision:
                return NotFound(matches=len(user_ids))

            assert self.connection_sign_up

            user_id = self.connection_sign_up.execute(connection)

            if not user_id:
                logger.info(f"Sign up declined to create a user for {connection.key}")

                return NotFound()

            self.create_connection_repository(user_id).add_connection(connection)

            logger.info(f'Created user "{user_id}" for {connection.key}')

            return Created(user_id)

    def find_user_id_with_connection(self, connection: Connection) -> UserId | None:
        """
        Find the id of the single user connected to the provider account of
        the given connection. Returns `None` if there is not exactly one such
        user. When auto provisioning is enabled this will only return `None`
        if the provider account is shared by multiple users, or if the sign up
        declines to create a user.
        """

        return self.sign_in(connection).user_id
