import logging
import sqlite3
from functools import cache

from userlink.application.sign_in.create_local_user_sign_up import CreateLocalUserSignUp
from userlink.domain.repo.connection_directory import IConnectionDirectory
from userlink.domain.repo.user_repo import IUserRepo
from userlink.infra.connection_directory import ConnectionDirectory
from userlink.infra.db_connection import get_default_db
from userlink.infra.encryption import Encryptor, FernetEncryptor, PlaintextEncryptor
from userlink.infra.user_repo import UserRepo
from userlink.settings import EncryptionSettings, SignInSettings

logger = logging.getLogger("userlink")


class DiContainer:
    # All repos share a single sqlite connection: a sign in holds a write
    # transaction, and a second connection trying to write would deadlock.
    # The connection is used from whichever thread handles the request.

    @classmethod
    @cache
    def db(cls) -> sqlite3.Connection:
        return get_default_db(shared=True)

    @classmethod
    def encryptor(cls) -> Encryptor:
        try:
            EncryptionSettings()
            return FernetEncryptor()

        except ValueError:
            logger.warning(
                "USERLINK_ENCRYPTION_KEY is not set, credentials will be stored in plaintext"
            )
            return PlaintextEncryptor()

    @classmethod
    def user_repo(cls) -> IUserRepo:
        return UserRepo(cls.db())

    @classmethod
    def connection_directory(cls) -> IConnectionDirectory:
        settings = SignInSettings()

        sign_up = CreateLocalUserSignUp(cls.user_repo()) if settings.auto_provision else None

        return ConnectionDirectory(
            cls.db(),
            encryptor=cls.encryptor(),
            connection_sign_up=sign_up,
            auto_provision=settings.auto_provision,
        )
