from dataclasses import dataclass, field
from typing import NewType

from userlink.common.datetime import UtcDatetime

ProviderId = NewType("ProviderId", str)
ProviderUserId = NewType("ProviderUserId", str)


@dataclass(frozen=True)
class ConnectionKey:
    """
    The identity of an account on an external provider, for example the
    Facebook account "125600" is `ConnectionKey("facebook", "125600")`.
    """

    provider_id: ProviderId
    provider_user_id: ProviderUserId

    def __post_init__(self) -> None:
        if not self.provider_id:
            raise ValueError("Provider id cannot be empty")

        if not self.provider_user_id:
            raise ValueError("Provider user id cannot be empty")

    def __str__(self) -> str:
        return f"{self.provider_id}:{self.provider_user_id}"


@dataclass(frozen=True)
class Credentials:
    """
    Provider specific credentials used to act on behalf of the user. None of
    these fields are interpreted here, they are stored and handed back as-is.
    """

    access_token: str | None = None
    secret: str | None = None
    refresh_token: str | None = None
    expires_at: UtcDatetime | None = None

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and UtcDatetime.now() >= self.expires_at

    def __repr__(self) -> str:
        # Don't leak tokens into logs
        return f"Credentials(expires_at={self.expires_at!r})"


@dataclass(frozen=True)
class Connection:
    """
    A link between a local user and one account on an external provider. The
    provider id and provider user id form the identity of the connection and
    never change, whereas the profile fields and credentials can be replaced
    via `IConnectionRepo.update_connection()`.
    """

    provider_id: ProviderId
    provider_user_id: ProviderUserId
    display_name: str | None = None
    profile_url: str | None = None
    image_url: str | None = None
    credentials: Credentials = field(default_factory=Credentials)

    def __post_init__(self) -> None:
        # Validates the provider id and provider user id
        _ = self.key

    @property
    def key(self) -> ConnectionKey:
        return ConnectionKey(self.provider_id, self.provider_user_id)
