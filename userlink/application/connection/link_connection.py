from userlink.application.exceptions import DuplicateConnection, InvalidRequest
from userlink.domain.connection import Connection
from userlink.domain.repo.connection_directory import IConnectionDirectory
from userlink.domain.user import UserId


class LinkConnection:
    """
    Connect a provider account to a local user, for example when an already
    signed in user clicks "Connect your Facebook account". By default a
    provider account can only be linked to one local user, since a shared
    provider account can no longer be used to sign in.
    """

    def __init__(self, directory: IConnectionDirectory, *, allow_shared: bool = False) -> None:
        self.directory = directory
        self.allow_shared = allow_shared

    def handle(self, user_id: UserId, connection: Connection) -> None:
        if not self.allow_shared:
            owners = set(self.directory.find_user_ids_with_connection(connection)) - {user_id}

            if owners:
                raise InvalidRequest(f"{connection.key} is already connected to another user")

        repo = self.directory.create_connection_repository(user_id)

        try:
            repo.add_connection(connection)

        except DuplicateConnection as ex:
            raise InvalidRequest(f"{connection.key} is already connected") from ex
