"""Errors raised while talking to the Up API."""


class UpAPIError(Exception):
    """Base error for failed Up API interactions."""


class UpstreamStatusError(UpAPIError):
    """The Up API answered with a non-200 status."""

    def __init__(self, path: str, status_code: int):
        self.path = path
        self.status_code = status_code
        super().__init__(f"GET {path} returned status {status_code}")


class PaginationError(UpAPIError):
    """A page's next cursor could not be turned into a request."""

    def __init__(self, cursor: str, reason: str):
        self.cursor = cursor
        super().__init__(f"invalid pagination cursor {cursor!r}: {reason}")


class ConfigError(Exception):
    """Required configuration is missing or unreadable."""
