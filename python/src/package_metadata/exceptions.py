"""
Package Metadata Errors

Every failure raised by the resolver derives from PackageMetadataError so the
calling command layer can tell "could not reach registry" apart from a bad
request. A package or version that does not exist is not an error: resolve()
returns None for it.
"""


class PackageMetadataError(Exception):
    """Base error for metadata resolution."""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConnectionFailedError(PackageMetadataError):
    """The registry source could not be opened (unreachable, malformed, bad service index)."""

    code = "CONNECTION_FAILED"

    def __init__(self, message: str, source_url: str | None = None) -> None:
        super().__init__(message)
        self.source_url = source_url


class FetchError(PackageMetadataError):
    """A registry query failed (timeout, protocol error, malformed response)."""

    code = "FETCH_FAILED"

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class InvalidRequestError(PackageMetadataError):
    """The caller's request was malformed; raised before any network call."""

    code = "INVALID_REQUEST"
