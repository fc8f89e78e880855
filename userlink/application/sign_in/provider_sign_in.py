import logging

from userlink.application.exceptions import Unauthorized
from userlink.domain.connection import Connection
from userlink.domain.repo.connection_directory import IConnectionDirectory
from userlink.domain.repo.user_repo import IUserRepo
from userlink.domain.sign_in import Created, Found, NotFound
from userlink.domain.user import User

logger = logging.getLogger("userlink")


class ProviderSignIn:
    """
    Sign a local user in via one of their provider accounts, for example after
    the OAuth callback of a "Sign in with GitHub" button. If the provider
    account cannot be resolved to exactly one local user the sign in fails,
    unless the directory auto provisions users, in which case a new user is
    created on the first sign in.
    """

    def __init__(self, directory: IConnectionDirectory, user_repo: IUserRepo) -> None:
        self.directory = directory
        self.user_repo = user_repo

    def handle(self, connection: Connection) -> User:
        match self.directory.sign_in(connection):
            case Found(user_id) | Created(user_id):
                user = self.user_repo.get_user_by_id(user_id)

            case NotFound() as result:
                if result.is_ambiguous:
                    logger.warning(
                        f"{connection.key} is connected to {result.matches} users, refusing to sign in"  # noqa: E501
                    )

                raise Unauthorized(f"No user is connected to {connection.key}")

        if not user:
            raise Unauthorized(f'User "{user_id}" does not exist')

        if connection.credentials.expired:
            logger.warning(f"Credentials for {connection.key} have already expired")

        self.directory.create_connection_repository(user.id).update_connection(connection)
        self.user_repo.update_last_login(user)

        return user
