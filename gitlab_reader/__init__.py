"""Read-only GitLab API client.

Provides typed access to tags, files, project metadata, repository archives
and commit histories. Commit histories can be requested for a branch, a tag or
a bare commit hash.

Example:
    >>> from gitlab_reader import GitLabApi
    >>> async with GitLabApi("https://gitlab.com/api/v4") as api:
    ...     client = api.client(token="...")
    ...     history = await client.commits("group/project", "v1.2.0")
"""

from gitlab_reader.client import ArchiveStream, GitLabApi, GitLabClient
from gitlab_reader.config import GitLabSettings
from gitlab_reader.errors import (
    DecodeError,
    GitLabError,
    NotFoundError,
    RemoteError,
    RequestCancelledError,
    RequestError,
    ResolutionError,
    TransportError,
    UnsupportedEncodingError,
)
from gitlab_reader.executor import (
    TIMEOUT,
    GitLabApiCallContext,
    Outcome,
    RequestExecutor,
)
from gitlab_reader.hooks import Hooks
from gitlab_reader.models import (
    ArchiveFormat,
    Commit,
    CommitReference,
    Project,
    RefType,
    Release,
    Tag,
    User,
)
from gitlab_reader.resolver import ReferenceResolver

__all__ = [
    "TIMEOUT",
    "ArchiveFormat",
    "ArchiveStream",
    "Commit",
    "CommitReference",
    "DecodeError",
    "GitLabApi",
    "GitLabApiCallContext",
    "GitLabClient",
    "GitLabError",
    "GitLabSettings",
    "Hooks",
    "NotFoundError",
    "Outcome",
    "Project",
    "RefType",
    "ReferenceResolver",
    "Release",
    "RemoteError",
    "RequestCancelledError",
    "RequestError",
    "RequestExecutor",
    "ResolutionError",
    "Tag",
    "TransportError",
    "UnsupportedEncodingError",
    "User",
]
