from dataclasses import dataclass

from userlink.domain.user import UserId


@dataclass(frozen=True)
class Found:
    """Exactly one local user is connected to the provider account."""

    user_id: UserId


@dataclass(frozen=True)
class Created:
    """No local user was connected, so a new one was created and connected."""

    user_id: UserId


@dataclass(frozen=True)
class NotFound:
    """
    There is no definitive local user for the provider account. The `matches`
    field is 0 when nobody is connected, or the number of users connected when
    the provider account is shared between multiple local users.
    """

    matches: int = 0

    user_id = None

    @property
    def is_ambiguous(self) -> bool:
        return self.matches > 1


SignInResult = Found | Created | NotFound
