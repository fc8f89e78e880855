from dataclasses import dataclass, field
from typing import NewType

from userlink.common.datetime import UtcDatetime

UserId = NewType("UserId", str)


@dataclass
class User:
    """
    A local application account. Users are usually created by an application
    and only looked up here, though the sign-up flow can create one on the fly
    when a provider account signs in for the first time.
    """

    id: UserId
    username: str
    created_at: UtcDatetime = field(default_factory=UtcDatetime.now)
    last_login: UtcDatetime | None = None
