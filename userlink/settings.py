import os
from contextlib import suppress

with suppress(ModuleNotFoundError):
    from dotenv import load_dotenv

    load_dotenv()


class DBSettings:
    db_url: str

    def __init__(self) -> None:
        self.db_url = os.getenv("DB_URL", "")

        if not self.db_url:
            raise ValueError("DB_URL must be defined")


class EncryptionSettings:
    """
    Key used to encrypt provider credentials at rest. The key must be a Fernet
    key, which can be generated with `Fernet.generate_key()`.
    """

    key: str

    def __init__(self) -> None:
        self.key = os.getenv("USERLINK_ENCRYPTION_KEY", "")

        if not self.key:
            raise ValueError("USERLINK_ENCRYPTION_KEY must be defined")


class SignInSettings:
    auto_provision: bool

    def __init__(self) -> None:
        value = os.getenv("USERLINK_AUTO_PROVISION", "false").strip().lower()

        if value not in {"true", "false"}:
            raise ValueError('USERLINK_AUTO_PROVISION must be "true" or "false"')

        self.auto_provision = value == "true"


def verify_env_vars() -> None:
    """
    Eagerly load env vars to see if they are valid. The env vars are only valid
    at the time this function is called: if the env vars change, they may be
    reloaded and potentially invalid.
    """

    DBSettings()
    SignInSettings()
