from unittest.mock import MagicMock

from userlink.application.sign_in.create_local_user_sign_up import CreateLocalUserSignUp
from userlink.domain.connection import Connection, ProviderId, ProviderUserId
from userlink.domain.user import User


def make_sign_up() -> tuple[CreateLocalUserSignUp, MagicMock]:
    user_repo = MagicMock()
    user_repo.create_or_update_user.side_effect = lambda user: user.id

    return CreateLocalUserSignUp(user_repo), user_repo


def test_username_is_taken_from_display_name() -> None:
    sign_up, user_repo = make_sign_up()

    connection = Connection(
        ProviderId("github"), ProviderUserId("1337"), display_name="  Alice  "
    )

    user_id = sign_up.execute(connection)

    user: User = user_repo.create_or_update_user.call_args[0][0]

    assert user_id == user.id
    assert user.username == "Alice"


def test_username_falls_back_to_provider_account() -> None:
    sign_up, user_repo = make_sign_up()

    sign_up.execute(Connection(ProviderId("github"), ProviderUserId("1337")))

    user: User = user_repo.create_or_update_user.call_args[0][0]

    assert user.username == "github-1337"


def test_each_sign_up_creates_a_new_user_id() -> None:
    sign_up, _ = make_sign_up()

    connection = Connection(ProviderId("github"), ProviderUserId("1337"))

    assert sign_up.execute(connection) != sign_up.execute(connection)
