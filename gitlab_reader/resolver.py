"""Commit history resolution for branches, tags and commit hashes.

GitLab can list the history of a branch or tag, but a bare commit hash has no
history endpoint of its own. For a hash the resolver finds the branches and
tags containing the commit, fetches their histories one at a time and returns
the part of the first history that starts at the requested commit.
"""

import structlog

from gitlab_reader.decoders import decode_commit_refs, decode_commits
from gitlab_reader.errors import (
    GitLabError,
    NotFoundError,
    RequestError,
    ResolutionError,
)
from gitlab_reader.executor import RequestExecutor, escape, project_path
from gitlab_reader.models import Commit, CommitReference

logger = structlog.get_logger(__name__)

# Single page only, GitLab defaults to 20 commits per page
COMMITS_PER_PAGE = 100


def _find_commit(history: list[Commit], ref: str) -> int | None:
    """Index of the first commit whose full or short hash equals ref."""
    for index, commit in enumerate(history):
        if ref in {commit.id, commit.short_id}:
            return index
    return None


class ReferenceResolver:
    """Resolve a branch, tag or commit hash to its commit history.

    Args:
        executor: Request executor shared with the owning client
        token: GitLab private token used for every request
    """

    def __init__(self, executor: RequestExecutor, token: str) -> None:
        self._executor = executor
        self._token = token

    async def commits(self, project: str, ref: str) -> list[Commit]:
        """Return the reverse-chronological history starting at ref.

        A branch or tag name is answered by a single request. When that request
        fails, ref is treated as a commit hash.

        Raises:
            ResolutionError: ref is neither a ref name nor a commit contained in
                any branch or tag
        """
        try:
            return await self.ref_history(project, ref)
        except RequestError as exc:
            # GitLab does not tell "no such ref" apart from "this is a hash"
            logger.info(
                "ref history unavailable, resolving as commit",
                project=project,
                ref=ref,
                error=str(exc),
            )
        return await self._commit_history(project, ref)

    async def ref_history(self, project: str, ref: str) -> list[Commit]:
        """History of a branch or tag, most recent commit first."""
        response = await self._executor.get(
            project_path(project, "repository", "commits"),
            self._token,
            method="commits.list",
            project=project,
            params={"ref_name": ref, "per_page": str(COMMITS_PER_PAGE)},
        )
        return decode_commits(response.content)

    async def containing_refs(self, project: str, sha: str) -> list[CommitReference]:
        """Branches and tags containing the commit, in GitLab's order."""
        response = await self._executor.get(
            project_path(project, "repository", "commits", escape(sha), "refs"),
            self._token,
            method="commits.refs",
            project=project,
            params={"type": "all"},
        )
        return decode_commit_refs(response.content)

    async def _commit_history(self, project: str, sha: str) -> list[Commit]:
        try:
            candidates = await self.containing_refs(project, sha)
        except NotFoundError as exc:
            raise ResolutionError(project, sha) from exc

        for candidate in candidates:
            log = logger.bind(
                project=project, ref=sha, candidate=candidate.name, type=candidate.type
            )
            try:
                history = await self.ref_history(project, candidate.name)
            except GitLabError as exc:
                log.warning("skipping candidate ref", error=str(exc))
                continue

            index = _find_commit(history, sha)
            if index is None:
                log.debug("commit not found in candidate history")
                continue
            log.debug("commit resolved", index=index, length=len(history))
            return history[index:]

        raise ResolutionError(project, sha)
