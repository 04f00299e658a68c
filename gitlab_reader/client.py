"""GitLab read-only API client.

GitLabApi is the access point to one GitLab instance: it owns the API root
URL and the pooled HTTP transport. GitLabClient binds a token to it and
exposes the read operations. Every operation takes an optional deadline in
seconds covering all requests the operation issues.
"""

from collections.abc import AsyncIterator
from types import TracebackType
from typing import Self

import httpx

from gitlab_reader.config import GitLabSettings
from gitlab_reader.decoders import decode_file_content, decode_project, decode_tags
from gitlab_reader.errors import TransportError
from gitlab_reader.executor import (
    TIMEOUT,
    RequestExecutor,
    deadline,
    escape,
    project_path,
)
from gitlab_reader.hooks import Hooks
from gitlab_reader.models import ArchiveFormat, Commit, Project, Tag
from gitlab_reader.resolver import ReferenceResolver


class ArchiveStream:
    """Live repository archive download.

    The caller owns the stream and must close it, either with aclose() or by
    using it as an async context manager.

    Example:
        >>> async with await client.archive(42, "v1.0.0") as archive:
        ...     async for chunk in archive.aiter_bytes():
        ...         out.write(chunk)
    """

    def __init__(self, response: httpx.Response, path: str = "") -> None:
        self._response = response
        self._path = path

    @property
    def content_type(self) -> str:
        return self._response.headers.get("Content-Type", "")

    @property
    def closed(self) -> bool:
        return self._response.is_closed

    async def aiter_bytes(self, chunk_size: int | None = None) -> AsyncIterator[bytes]:
        """Iterate over the archive content.

        Raises:
            TransportError: The connection broke while downloading
        """
        try:
            async for chunk in self._response.aiter_bytes(chunk_size):
                yield chunk
        except httpx.HTTPError as exc:
            raise self._interrupted(exc) from exc

    async def read(self) -> bytes:
        """Read the whole archive into memory and close the stream."""
        try:
            return await self._response.aread()
        except httpx.HTTPError as exc:
            raise self._interrupted(exc) from exc
        finally:
            await self.aclose()

    def _interrupted(self, exc: httpx.HTTPError) -> TransportError:
        return TransportError(
            f"archive download of {self._path} interrupted: {exc}", path=self._path
        )

    async def aclose(self) -> None:
        await self._response.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class GitLabClient:
    """GitLab API access for a single token.

    Args:
        executor: Request executor of the owning GitLabApi
        token: GitLab private token
    """

    def __init__(self, executor: RequestExecutor, token: str) -> None:
        self._executor = executor
        self._token = token
        self._resolver = ReferenceResolver(executor, token)

    async def tags(
        self, project: str, prefix: str = "", *, timeout: float | None = None
    ) -> list[Tag]:
        """List tags of a project.

        Without a prefix all tags are listed. A prefix is sent as a path
        segment, so GitLab answers with the matching tag which is returned as
        a one-element list.

        Example:
            >>> await client.tags("group/proj", "v1.2.0")
            [Tag(name='v1.2.0', ...)]
        """
        items = ["repository", "tags"]
        if prefix:
            items.append(escape(prefix))
        async with deadline(timeout):
            response = await self._executor.get(
                project_path(project, *items),
                self._token,
                method="tags.list",
                project=project,
            )
        return decode_tags(response.content)

    async def file(
        self, project: str, path: str, ref: str, *, timeout: float | None = None
    ) -> bytes:
        """Fetch the raw content of a file at a branch, tag or commit.

        Raises:
            UnsupportedEncodingError: GitLab declared an encoding other than base64
        """
        async with deadline(timeout):
            response = await self._executor.get(
                project_path(project, "repository", "files", escape(path)),
                self._token,
                method="files.get",
                project=project,
                params={"ref": ref},
            )
        return decode_file_content(response.content)

    async def project_info(
        self, project: str, *, timeout: float | None = None
    ) -> Project:
        async with deadline(timeout):
            response = await self._executor.get(
                project_path(project),
                self._token,
                method="projects.get",
                project=project,
            )
        return decode_project(response.content)

    async def archive(
        self,
        project_id: int,
        ref: str,
        archive_format: ArchiveFormat = ArchiveFormat.ZIP,
        *,
        timeout: float | None = None,
    ) -> ArchiveStream:
        """Open a repository archive download.

        The archive endpoint does not accept project paths, resolve the
        numeric ID with project_info() first. The deadline covers opening the
        stream only.
        """
        path = project_path(project_id, "repository", f"archive.{archive_format}")
        async with deadline(timeout):
            response = await self._executor.get(
                path,
                self._token,
                method="archive.get",
                project=str(project_id),
                params={"sha": ref},
                stream=True,
            )
        return ArchiveStream(response, path)

    async def commits(
        self, project: str, ref: str, *, timeout: float | None = None
    ) -> list[Commit]:
        """Commit history starting at a branch, tag or commit hash.

        Raises:
            ResolutionError: ref could not be resolved to any commit history
        """
        async with deadline(timeout):
            return await self._resolver.commits(project, ref)


class GitLabApi:
    """Access point to a GitLab instance.

    Args:
        url: Full path to the GitLab API root, e.g. "https://gitlab.com/api/v4"
        transport: Optional httpx transport; the default one never retries
        timeout: Per-request timeout in seconds
        hooks: Optional custom hooks merged after the built-in ones

    Example:
        >>> async with GitLabApi("https://gitlab.com/api/v4") as api:
        ...     client = api.client(token)
        ...     history = await client.commits("group/proj", "main")
    """

    def __init__(
        self,
        url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = TIMEOUT,
        hooks: Hooks | None = None,
    ) -> None:
        self._executor = RequestExecutor(
            url, transport=transport, timeout=timeout, hooks=hooks
        )

    @classmethod
    def from_settings(
        cls,
        settings: GitLabSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        hooks: Hooks | None = None,
    ) -> Self:
        return cls(
            settings.url, transport=transport, timeout=settings.timeout, hooks=hooks
        )

    @property
    def url(self) -> str:
        return self._executor.url

    def client(self, token: str) -> GitLabClient:
        return GitLabClient(self._executor, token)

    async def aclose(self) -> None:
        await self._executor.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
