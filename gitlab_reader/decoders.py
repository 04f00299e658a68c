"""Decode GitLab response bodies into models."""

import base64
import binascii
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

from gitlab_reader.errors import DecodeError, UnsupportedEncodingError
from gitlab_reader.models import Commit, CommitReference, FileContent, Project, Tag

T = TypeVar("T")


_tags = TypeAdapter(list[Tag] | Tag)
_commits = TypeAdapter(list[Commit])
_commit_refs = TypeAdapter(list[CommitReference])
_project = TypeAdapter(Project)
_file_content = TypeAdapter(FileContent)


def _decode(adapter: TypeAdapter[T], body: bytes, what: str) -> T:
    try:
        return adapter.validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"failed to decode {what}: {exc}") from exc


def decode_tags(body: bytes) -> list[Tag]:
    """Decode a tag list.

    The single tag endpoint answers with one object instead of an array, in
    which case the tag is wrapped into a one-element list.
    """
    tags = _decode(_tags, body, "tags")
    if isinstance(tags, Tag):
        return [tags]
    return tags


def decode_commits(body: bytes) -> list[Commit]:
    return _decode(_commits, body, "commits")


def decode_commit_refs(body: bytes) -> list[CommitReference]:
    return _decode(_commit_refs, body, "commit refs")


def decode_project(body: bytes) -> Project:
    return _decode(_project, body, "project")


def decode_file_content(body: bytes) -> bytes:
    """Decode a repository file payload into the raw file bytes.

    Raises:
        DecodeError: The body is malformed or the content is not valid base64
        UnsupportedEncodingError: The payload declares an encoding other than base64
    """
    payload = _decode(_file_content, body, "file")
    if payload.encoding != "base64":
        raise UnsupportedEncodingError(payload.encoding)
    try:
        # GitLab may wrap base64 content across lines
        return base64.b64decode("".join(payload.content.splitlines()), validate=True)
    except binascii.Error as exc:
        raise DecodeError(f"failed to decode file content: {exc}") from exc
