import pytest

from userlink.application.exceptions import (
    DuplicateConnection,
    NoSuchConnection,
    NotConnected,
)
from userlink.common.datetime import UtcDatetime
from userlink.domain.connection import (
    Connection,
    ConnectionKey,
    Credentials,
    ProviderId,
    ProviderUserId,
)
from userlink.domain.repo.connection_repo import IConnectionRepo


def connection(provider_id: str, provider_user_id: str, **kwargs: object) -> Connection:
    return Connection(
        ProviderId(provider_id),
        ProviderUserId(provider_user_id),
        **kwargs,  # type: ignore[arg-type]
    )


class ConnectionRepoContract:
    """
    Behaviour shared by all per-user connection repositories. Subclasses must
    implement `make_repo()`, where repos made during the same test share the
    same underlying store.
    """

    def make_repo(self, user_id: str = "alice") -> IConnectionRepo:
        raise NotImplementedError

    def test_new_user_has_no_connections(self) -> None:
        repo = self.make_repo()

        assert repo.find_all_connections() == {}
        assert repo.find_connections(ProviderId("github")) == []
        assert repo.find_primary_connection(ProviderId("github")) is None

    def test_add_and_get_connection(self) -> None:
        repo = self.make_repo()

        expires_at = UtcDatetime.fromisoformat("2030-01-01T00:00:00Z")

        c = connection(
            "github",
            "1337",
            display_name="Alice",
            profile_url="https://github.com/alice",
            image_url="https://github.com/alice.png",
            credentials=Credentials(
                access_token="access",  # noqa: S106
                secret="secret",  # noqa: S106
                refresh_token="refresh",  # noqa: S106
                expires_at=expires_at,
            ),
        )

        repo.add_connection(c)

        got = repo.get_connection(c.key)

        assert got == c
        assert got.credentials.expires_at == expires_at

    def test_get_missing_connection_fails(self) -> None:
        repo = self.make_repo()

        with pytest.raises(NoSuchConnection):
            repo.get_connection(ConnectionKey(ProviderId("github"), ProviderUserId("1")))

    def test_adding_duplicate_connection_fails(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("github", "1"))

        with pytest.raises(DuplicateConnection):
            repo.add_connection(connection("github", "1", display_name="Other"))

        assert repo.find_connections(ProviderId("github")) == [connection("github", "1")]

    def test_connections_are_ranked_in_insertion_order(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("twitter", "b"))
        repo.add_connection(connection("twitter", "a"))
        repo.add_connection(connection("twitter", "c"))

        ids = [c.provider_user_id for c in repo.find_connections(ProviderId("twitter"))]

        assert ids == ["b", "a", "c"]

        primary = repo.get_primary_connection(ProviderId("twitter"))

        assert primary.provider_user_id == "b"

    def test_new_connection_is_ranked_last_after_removal(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("twitter", "a"))
        repo.add_connection(connection("twitter", "b"))

        repo.remove_connection(connection("twitter", "a").key)
        repo.add_connection(connection("twitter", "a"))

        ids = [c.provider_user_id for c in repo.find_connections(ProviderId("twitter"))]

        assert ids == ["b", "a"]

    def test_find_all_connections_is_grouped_by_provider(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("twitter", "1"))
        repo.add_connection(connection("facebook", "2"))
        repo.add_connection(connection("twitter", "3"))

        got = repo.find_all_connections()

        assert list(got) == ["facebook", "twitter"]
        assert got["facebook"] == [connection("facebook", "2")]
        assert got["twitter"] == [connection("twitter", "1"), connection("twitter", "3")]

    def test_connections_of_other_users_are_not_visible(self) -> None:
        alice = self.make_repo("alice")
        bob = self.make_repo("bob")

        alice.add_connection(connection("github", "1"))

        assert bob.find_all_connections() == {}

        with pytest.raises(NoSuchConnection):
            bob.get_connection(connection("github", "1").key)

        # Same provider account can be added to another user
        bob.add_connection(connection("github", "1"))

        assert bob.find_connections(ProviderId("github")) == [connection("github", "1")]

    def test_get_primary_connection_when_not_connected_fails(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("github", "1"))

        with pytest.raises(NotConnected, match="not connected"):
            repo.get_primary_connection(ProviderId("gitlab"))

    def test_find_connections_to_users(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("facebook", "1"))
        repo.add_connection(connection("facebook", "3"))
        repo.add_connection(connection("twitter", "9"))

        got = repo.find_connections_to_users(
            {
                ProviderId("facebook"): ["1", "2", "3"],
                ProviderId("twitter"): ["8"],
            }
        )

        assert got == {
            "facebook": [connection("facebook", "1"), None, connection("facebook", "3")],
            "twitter": [None],
        }

    def test_find_connections_to_no_users_fails(self) -> None:
        repo = self.make_repo()

        with pytest.raises(ValueError, match="no provider user ids"):
            repo.find_connections_to_users({})

    def test_update_connection(self) -> None:
        repo = self.make_repo()

        old = connection(
            "github",
            "1",
            display_name="old",
            credentials=Credentials(access_token="old"),  # noqa: S106
        )
        repo.add_connection(old)

        new = connection(
            "github",
            "1",
            display_name="new",
            credentials=Credentials(access_token="new", refresh_token="r"),  # noqa: S106
        )
        repo.update_connection(new)

        assert repo.get_connection(old.key) == new

    def test_update_missing_connection_fails(self) -> None:
        repo = self.make_repo()

        with pytest.raises(NoSuchConnection):
            repo.update_connection(connection("github", "1"))

    def test_remove_connection(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("github", "1"))
        repo.add_connection(connection("github", "2"))

        repo.remove_connection(connection("github", "1").key)

        assert repo.find_connections(ProviderId("github")) == [connection("github", "2")]

        # Removing a connection that doesn't exist is not an error
        repo.remove_connection(connection("github", "1").key)

    def test_remove_connections_for_provider(self) -> None:
        repo = self.make_repo()

        repo.add_connection(connection("github", "1"))
        repo.add_connection(connection("github", "2"))
        repo.add_connection(connection("gitlab", "3"))

        repo.remove_connections(ProviderId("github"))

        assert repo.find_all_connections() == {"gitlab": [connection("gitlab", "3")]}
