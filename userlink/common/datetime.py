from datetime import datetime, timezone, tzinfo
from typing import Self


class UtcDatetime(datetime):
    """
    A datetime which is always timezone aware and always in UTC. Stored in the
    database as an ISO 8601 string with a "Z" suffix.
    """

    @classmethod
    def fromisoformat(cls, date: str) -> Self:
        dt = datetime.fromisoformat(date.replace("Z", "+00:00"))

        if dt.tzinfo is None:
            raise ValueError(f'Datetime "{date}" is missing a timezone')

        dt = dt.astimezone(timezone.utc)

        return cls(
            dt.year,
            dt.month,
            dt.day,
            dt.hour,
            dt.minute,
            dt.second,
            dt.microsecond,
            tzinfo=timezone.utc,
        )

    @classmethod
    def now(cls, tz: tzinfo | None = timezone.utc) -> Self:
        assert tz == timezone.utc

        return super().now(tz)

    def __str__(self) -> str:
        return self.isoformat().replace("+00:00", "Z")

    __repr__ = __str__
