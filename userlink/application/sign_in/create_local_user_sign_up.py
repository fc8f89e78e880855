from uuid import uuid4

from userlink.domain.connection import Connection
from userlink.domain.repo.connection_directory import IConnectionSignUp
from userlink.domain.repo.user_repo import IUserRepo
from userlink.domain.user import User, UserId


class CreateLocalUserSignUp(IConnectionSignUp):
    """
    Create a new local user for a provider account signing in for the first
    time. The username is taken from the provider profile if there is one,
    otherwise it is derived from the provider account.
    """

    def __init__(self, user_repo: IUserRepo) -> None:
        self.user_repo = user_repo

    def execute(self, connection: Connection) -> UserId | None:
        username = (connection.display_name or "").strip()

        if not username:
            username = f"{connection.provider_id}-{connection.provider_user_id}"

        user = User(id=UserId(str(uuid4())), username=username)

        return self.user_repo.create_or_update_user(user)
