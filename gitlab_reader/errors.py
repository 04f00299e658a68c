"""Exceptions raised by the GitLab reader.

Every failure surfaced to callers is a GitLabError. Request failures are split
into three kinds so callers can tell a missing resource from a remote error or
a transport problem by type alone.
"""


class GitLabError(Exception):
    """Base exception for all GitLab reader errors."""


class RequestError(GitLabError):
    """A single GitLab API request failed."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class NotFoundError(RequestError):
    """The requested resource does not exist (404)."""

    def __init__(self, path: str) -> None:
        super().__init__(f"resource not found: {path}", path=path)


class RemoteError(RequestError):
    """GitLab answered with a non-success status other than 404."""

    def __init__(self, path: str, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"gitlab error {status_code} for {path}: {body}", path=path)


class TransportError(RequestError):
    """The request never produced a response (connection, protocol, timeout)."""

    cancelled = False


class RequestCancelledError(TransportError):
    """The caller's deadline expired before the operation finished."""

    cancelled = True


class DecodeError(GitLabError):
    """A response body is not valid JSON or does not match the expected shape."""


class UnsupportedEncodingError(GitLabError):
    """A file payload declares an encoding other than base64."""

    def __init__(self, encoding: str) -> None:
        self.encoding = encoding
        super().__init__(f"encoding {encoding} is not supported")


class ResolutionError(GitLabError):
    """A reference could not be resolved to any commit history."""

    def __init__(self, project: str, ref: str) -> None:
        self.project = project
        self.ref = ref
        super().__init__(
            f"could not resolve {ref!r} in {project!r} to any commit history"
        )
