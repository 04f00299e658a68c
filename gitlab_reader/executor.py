"""GitLab request executor with hook system.

Issues exactly one authenticated GET per call and maps every non-success
outcome to a typed RequestError. Metrics, request logging and latency tracking
are built-in hooks; callers can add their own hooks to trace requests.
"""

import asyncio
import contextlib
import contextvars
import time
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import quote

import httpx
import structlog

from gitlab_reader.errors import (
    NotFoundError,
    RemoteError,
    RequestCancelledError,
    TransportError,
)
from gitlab_reader.hooks import Hooks, invoke_with_hooks
from gitlab_reader.metrics import gitlab_request, gitlab_request_duration

logger = structlog.get_logger(__name__)

# Local storage for latency tracking (tuple stack to support nested calls)
_latency_tracker: contextvars.ContextVar[tuple[float, ...]] = contextvars.ContextVar(
    f"{__name__}.latency_tracker", default=()
)

TIMEOUT = 30
PRIVATE_TOKEN_HEADER = "PRIVATE-TOKEN"


class Outcome(StrEnum):
    """How a request ended, one value per kind of request failure."""

    OK = "ok"
    NOT_FOUND = "not_found"
    REMOTE_ERROR = "remote_error"
    TRANSPORT_ERROR = "transport_error"
    CANCELLED = "cancelled"


@dataclass
class GitLabApiCallContext:
    """Context information passed to API call hooks.

    The executor fills in outcome and status_code before post and error hooks
    run; pre hooks see both unset.

    Attributes:
        method: Operation name (e.g., "commits.list")
        verb: HTTP verb (e.g., "GET")
        project: Project path or numeric ID as given by the caller
        path: Resolved request path below the API root
        id: GitLab API root URL
        outcome: How the request ended
        status_code: HTTP status, None when no response was received
    """

    method: str
    verb: str
    project: str
    path: str
    id: str
    outcome: Outcome | None = None
    status_code: int | None = None


def _metrics_hook(context: GitLabApiCallContext) -> None:
    """Built-in Prometheus metrics hook."""
    gitlab_request.labels(context.method, context.verb).inc()


def _latency_start_hook(_context: GitLabApiCallContext) -> None:
    """Built-in hook to start latency measurement."""
    _latency_tracker.set((*_latency_tracker.get(), time.perf_counter()))


def _latency_end_hook(context: GitLabApiCallContext) -> None:
    """Built-in hook to record latency measurement."""
    stack = _latency_tracker.get()
    start_time = stack[-1]
    _latency_tracker.set(stack[:-1])
    duration = time.perf_counter() - start_time
    gitlab_request_duration.labels(context.method, context.verb).observe(duration)


def _request_log_hook(context: GitLabApiCallContext) -> None:
    """Built-in hook for logging API requests."""
    logger.debug(
        "API request",
        method=context.method,
        verb=context.verb,
        project=context.project,
        path=context.path,
        id=context.id,
    )


def _outcome_log_hook(context: GitLabApiCallContext) -> None:
    """Built-in hook for logging how API requests ended."""
    logger.debug(
        "API request finished",
        method=context.method,
        project=context.project,
        path=context.path,
        outcome=context.outcome,
        status=context.status_code,
    )


BUILTIN_HOOKS = Hooks(
    pre_hooks=[_metrics_hook, _request_log_hook, _latency_start_hook],
    post_hooks=[_latency_end_hook, _outcome_log_hook],
)


def escape(segment: str) -> str:
    """Percent-escape a value so it forms exactly one path segment."""
    return quote(segment, safe="")


def project_path(project: str | int, *items: str) -> str:
    """Build a path below /projects/<project>.

    Project paths like "group/project" contain slashes, so the whole
    identifier is escaped as a single segment. Items are appended verbatim.

    Example:
        >>> project_path("group/proj", "repository", "tags")
        '/projects/group%2Fproj/repository/tags'
    """
    return "/".join(["", "projects", escape(str(project)), *items])


@contextlib.asynccontextmanager
async def deadline(seconds: float | None) -> AsyncIterator[None]:
    """Bound the enclosed operation by a deadline.

    Raises:
        RequestCancelledError: The deadline expired; in-flight requests are aborted
    """
    try:
        async with asyncio.timeout(seconds):
            yield
    except TimeoutError as exc:
        raise RequestCancelledError(f"deadline of {seconds}s exceeded") from exc


class RequestExecutor:
    """Stateless GitLab API request executor.

    Holds the API root URL and a pooled httpx client; the token is passed per
    request. Every request runs through the hook system.

    Args:
        url: Full path to the GitLab API root, e.g. "https://gitlab.com/api/v4"
        transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        timeout: Per-request timeout in seconds
        hooks: Optional custom hooks, appended to the built-in ones
    """

    def __init__(
        self,
        url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = TIMEOUT,
        hooks: Hooks | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self._hooks = BUILTIN_HOOKS.merge(hooks)
        self._client = httpx.AsyncClient(
            base_url=self.url,
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=0),
        )

    async def get(
        self,
        path: str,
        token: str,
        *,
        method: str,
        project: str,
        params: Mapping[str, str] | None = None,
        stream: bool = False,
    ) -> httpx.Response:
        """Issue one authenticated GET request.

        Args:
            path: Request path below the API root (already escaped)
            token: GitLab private token
            method: Operation name reported to hooks and logs
            project: Project identifier reported to hooks and logs
            params: Optional query parameters
            stream: Return the response without reading the body; the
                caller must close it

        Returns:
            The 200 response

        Raises:
            NotFoundError: GitLab answered 404
            RemoteError: GitLab answered any other non-200 status
            TransportError: No response was received
        """
        context = GitLabApiCallContext(
            method=method, verb="GET", project=project, path=path, id=self.url
        )
        log = logger.bind(method=method, project=project, path=path)
        with invoke_with_hooks(
            context,
            pre_hooks=self._hooks.pre_hooks,
            post_hooks=self._hooks.post_hooks,
            error_hooks=self._hooks.error_hooks,
        ):
            request = self._client.build_request(
                "GET", path, params=params, headers={PRIVATE_TOKEN_HEADER: token}
            )
            try:
                response = await self._client.send(request, stream=stream)
            except asyncio.CancelledError:
                context.outcome = Outcome.CANCELLED
                log.debug("API request cancelled")
                raise
            except httpx.HTTPError as exc:
                context.outcome = Outcome.TRANSPORT_ERROR
                log.error("failed to get a response", error=str(exc))
                raise TransportError(
                    f"failed to get a response for {path}: {exc}", path=path
                ) from exc

            context.status_code = response.status_code
            if response.status_code == httpx.codes.OK:
                context.outcome = Outcome.OK
                log.debug("API response", status=response.status_code)
                return response

            try:
                body = await self._read_error_body(response, path)
            except TransportError:
                context.outcome = Outcome.TRANSPORT_ERROR
                raise
            if response.status_code == httpx.codes.NOT_FOUND:
                # expected miss, e.g. a commit hash passed as ref_name
                context.outcome = Outcome.NOT_FOUND
                log.debug("resource not found", status=response.status_code)
                raise NotFoundError(path)
            context.outcome = Outcome.REMOTE_ERROR
            log.error("gitlab error", status=response.status_code, body=body)
            raise RemoteError(path, response.status_code, body)

    @staticmethod
    async def _read_error_body(response: httpx.Response, path: str) -> str:
        try:
            await response.aread()
        except httpx.HTTPError as exc:
            raise TransportError(
                f"failed to read out error response for {path}: {exc}", path=path
            ) from exc
        finally:
            await response.aclose()
        return response.text

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()
