from userlink.domain.connection import ProviderId
from userlink.domain.repo.connection_directory import IConnectionDirectory
from userlink.domain.user import UserId


class FindConnectedUsers:
    """
    Given a list of provider accounts (for example, a user's friends on some
    social network), find which of them also use this application.
    """

    def __init__(self, directory: IConnectionDirectory) -> None:
        self.directory = directory

    def handle(self, provider_id: ProviderId, provider_user_ids: set[str]) -> set[UserId]:
        return self.directory.find_user_ids_connected_to(provider_id, provider_user_ids)
