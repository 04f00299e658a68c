"""Pydantic models for GitLab API payloads.

- All models are immutable (frozen=True) and safe to share between tasks
- Fields not listed here are ignored when decoding
- Field names follow the GitLab v4 JSON keys
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class RefType(StrEnum):
    """Kind of a git reference."""

    BRANCH = "branch"
    TAG = "tag"


class Visibility(StrEnum):
    PRIVATE = "private"
    INTERNAL = "internal"
    PUBLIC = "public"


class ArchiveFormat(StrEnum):
    """Archive formats served by the repository archive endpoint."""

    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"


class CommitStats(BaseModel, frozen=True):
    """Number of added and deleted lines in a commit."""

    additions: int = 0
    deletions: int = 0
    total: int = 0


class Commit(BaseModel, frozen=True):
    """A GitLab commit.

    Attributes:
        id: Full commit hash
        short_id: Abbreviated commit hash (a prefix of id)
        parent_ids: Parent hashes, the first one is the primary lineage
    """

    id: str
    short_id: str = ""
    title: str = ""
    message: str = ""
    author_name: str = ""
    author_email: str = ""
    authored_date: datetime | None = None
    committer_name: str = ""
    committer_email: str = ""
    committed_date: datetime | None = None
    created_at: datetime | None = None
    parent_ids: list[str] = Field(default_factory=list)
    web_url: str = ""
    stats: CommitStats | None = None
    status: str | None = None


class CommitReference(BaseModel, frozen=True):
    """A branch or tag that contains a given commit."""

    type: RefType
    name: str


class Release(BaseModel, frozen=True):
    """Release notes attached to a tag."""

    tag_name: str
    description: str = ""


class Tag(BaseModel, frozen=True):
    """A GitLab tag.

    Attributes:
        name: Tag name
        message: Annotation message (empty for lightweight tags)
        target: Hash the tag points to
        commit: Commit the tag points to
        release: Release attached to the tag, if any
    """

    name: str
    message: str | None = ""
    target: str = ""
    protected: bool = False
    commit: Commit | None = None
    release: Release | None = None


class User(BaseModel, frozen=True):
    """A GitLab user as embedded in project payloads."""

    id: int
    username: str
    name: str = ""
    state: str = ""
    email: str = ""
    public_email: str | None = None
    avatar_url: str | None = None
    web_url: str = ""
    bio: str | None = None
    location: str | None = None
    organization: str | None = None
    created_at: datetime | None = None
    is_admin: bool = False


class ProjectNamespace(BaseModel, frozen=True):
    id: int
    name: str
    path: str
    kind: str = ""
    full_path: str = ""


class AccessLevel(BaseModel, frozen=True):
    access_level: int
    notification_level: int | None = None


class Permissions(BaseModel, frozen=True):
    project_access: AccessLevel | None = None
    group_access: AccessLevel | None = None


class ForkParent(BaseModel, frozen=True):
    """The project a fork was created from."""

    id: int
    name: str = ""
    name_with_namespace: str = ""
    path: str = ""
    path_with_namespace: str = ""
    http_url_to_repo: str = ""
    web_url: str = ""


class ProjectStatistics(BaseModel, frozen=True):
    commit_count: int = 0
    storage_size: int = 0
    repository_size: int = 0
    lfs_objects_size: int = 0
    job_artifacts_size: int = 0


class ProjectLinks(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    self_url: str = Field("", alias="self")
    issues: str = ""
    merge_requests: str = ""
    repo_branches: str = ""
    labels: str = ""
    events: str = ""
    members: str = ""


class Project(BaseModel):
    """A GitLab project.

    Attributes:
        id: Numeric project ID, the only identifier the archive endpoint accepts
        default_branch: Name of the default branch (None for empty repositories)
        path_with_namespace: Full project path, e.g. "group/project"
        links: Web links of the project (JSON key "_links")
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    path: str = ""
    name_with_namespace: str = ""
    path_with_namespace: str = ""
    description: str | None = None
    default_branch: str | None = None
    visibility: Visibility | None = None
    ssh_url_to_repo: str = ""
    http_url_to_repo: str = ""
    web_url: str = ""
    readme_url: str | None = None
    avatar_url: str | None = None
    topics: list[str] = Field(default_factory=list)
    tag_list: list[str] = Field(default_factory=list)
    owner: User | None = None
    namespace: ProjectNamespace | None = None
    permissions: Permissions | None = None
    forked_from_project: ForkParent | None = None
    statistics: ProjectStatistics | None = None
    links: ProjectLinks | None = Field(None, alias="_links")
    archived: bool = False
    empty_repo: bool = False
    creator_id: int | None = None
    forks_count: int = 0
    star_count: int = 0
    open_issues_count: int = 0
    created_at: datetime | None = None
    last_activity_at: datetime | None = None
    ci_config_path: str | None = None


class FileContent(BaseModel, frozen=True):
    """Raw payload of the repository files endpoint.

    The content is encoded as declared by the encoding field.
    """

    encoding: str
    content: str
    file_name: str = ""
    file_path: str = ""
    size: int = 0
    content_sha256: str = ""
    ref: str = ""
    blob_id: str = ""
    commit_id: str = ""
    last_commit_id: str = ""
