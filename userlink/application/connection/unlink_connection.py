from userlink.application.exceptions import NoSuchConnection, NotFound
from userlink.domain.connection import ConnectionKey
from userlink.domain.repo.connection_directory import IConnectionDirectory
from userlink.domain.user import UserId


class UnlinkConnection:
    def __init__(self, directory: IConnectionDirectory) -> None:
        self.directory = directory

    def handle(self, user_id: UserId, key: ConnectionKey) -> None:
        repo = self.directory.create_connection_repository(user_id)

        try:
            repo.get_connection(key)

        except NoSuchConnection as ex:
            raise NotFound(f"Connection {key} not found") from ex

        repo.remove_connection(key)
