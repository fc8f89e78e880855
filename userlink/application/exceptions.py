class UserlinkException(Exception):
    pass


class Unauthorized(UserlinkException):
    pass


class NotFound(UserlinkException):
    pass


class InvalidRequest(UserlinkException):
    pass


class NoSuchConnection(NotFound):
    """The user has no connection with the given provider account."""


class NotConnected(NotFound):
    """The user has no connections at all to the given provider."""


class DuplicateConnection(InvalidRequest):
    """The user is already connected to the given provider account."""
