"""Shared fixtures: an in-memory GitLab API served through httpx.MockTransport."""

import hashlib
from collections.abc import AsyncIterator, Callable, Generator
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
import structlog

from gitlab_reader.client import GitLabApi, GitLabClient

API_URL = "https://gitlab.example.com/api/v4"
API_PREFIX = b"/api/v4"
TOKEN = "glpat-test-token"


def sha(seed: str) -> str:
    """A realistic 40 character commit hash."""
    return hashlib.sha1(seed.encode(), usedforsecurity=False).hexdigest()


def make_commit(seed: str, parent: str | None = None) -> dict[str, Any]:
    commit_id = sha(seed)
    return {
        "id": commit_id,
        "short_id": commit_id[:8],
        "title": f"commit {seed}",
        "message": f"commit {seed}\n",
        "author_name": "Jane Doe",
        "author_email": "jane@example.com",
        "authored_date": "2024-01-01T10:00:00.000+00:00",
        "committer_name": "Jane Doe",
        "committer_email": "jane@example.com",
        "committed_date": "2024-01-01T10:00:00.000+00:00",
        "created_at": "2024-01-01T10:00:00.000+00:00",
        "parent_ids": [parent] if parent else [],
        "web_url": f"https://gitlab.example.com/group/proj/-/commit/{commit_id}",
    }


def make_history(name: str, length: int) -> list[dict[str, Any]]:
    """Reverse-chronological history of a ref, tip first."""
    history: list[dict[str, Any]] = []
    parent: str | None = None
    for i in range(length):
        commit = make_commit(f"{name}-{i}", parent)
        parent = commit["id"]
        history.append(commit)
    return list(reversed(history))


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered chunk by chunk, optionally failing at the end."""

    def __init__(
        self, chunks: list[bytes], error: Exception | None = None
    ) -> None:
        self.chunks = chunks
        self.error = error

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


@dataclass
class Route:
    path: bytes
    params: dict[str, str]
    handler: Callable[[httpx.Request], httpx.Response]


@dataclass
class FakeGitLab:
    """Canned GitLab API.

    Routes match the percent-encoded path below the API root and, if given,
    a subset of query parameters. Unknown routes answer 404.
    """

    routes: list[Route] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def add(
        self,
        path: str,
        json: Any = None,
        *,
        status_code: int = 200,
        content: bytes | None = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def handler(_request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content, headers=headers)
            return httpx.Response(status_code, json=json, headers=headers)

        self.add_handler(path, handler, params=params)

    def add_stream(
        self,
        path: str,
        chunks: list[bytes],
        *,
        error: Exception | None = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Serve a body that is only read when the client consumes it."""

        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, stream=ChunkedStream(chunks, error), headers=headers
            )

        self.add_handler(path, handler, params=params)

    def add_handler(
        self,
        path: str,
        handler: Callable[[httpx.Request], httpx.Response],
        *,
        params: dict[str, str] | None = None,
    ) -> None:
        self.routes.append(Route(path.encode(), params or {}, handler))

    def add_history(self, project: str, ref: str, history: list[dict]) -> None:
        self.add(
            f"/projects/{project}/repository/commits",
            history,
            params={"ref_name": ref},
        )

    def add_refs(self, project: str, commit: str, refs: list[tuple[str, str]]) -> None:
        self.add(
            f"/projects/{project}/repository/commits/{commit}/refs",
            [{"type": ref_type, "name": name} for ref_type, name in refs],
        )

    def paths(self) -> list[str]:
        return [request_path(r).decode() for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request_path(request)
        for route in self.routes:
            if route.path != path:
                continue
            if all(request.url.params.get(k) == v for k, v in route.params.items()):
                return route.handler(request)
        return httpx.Response(404, json={"message": "404 Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def request_path(request: httpx.Request) -> bytes:
    path = request.url.raw_path.split(b"?")[0]
    return path.removeprefix(API_PREFIX)


@pytest.fixture
def fake_gitlab() -> FakeGitLab:
    return FakeGitLab()


@pytest.fixture
def gitlab_api(fake_gitlab: FakeGitLab) -> GitLabApi:
    return GitLabApi(API_URL, transport=fake_gitlab.transport)


@pytest.fixture
def client(gitlab_api: GitLabApi) -> GitLabClient:
    return gitlab_api.client(TOKEN)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo structlog configuration done by the CLI."""
    yield
    structlog.reset_defaults()
