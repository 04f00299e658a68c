import contextlib
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class Hooks:
    """Callables invoked around every API request.

    Each hook receives the call context of the request.

    Attributes:
        pre_hooks: Called before the request is sent
        post_hooks: Called after the request finished, successful or not
        error_hooks: Called when the request raised
    """

    pre_hooks: list[Callable[[Any], None]] = field(default_factory=list)
    post_hooks: list[Callable[[Any], None]] = field(default_factory=list)
    error_hooks: list[Callable[[Any], None]] = field(default_factory=list)

    def merge(self, other: "Hooks | None") -> "Hooks":
        """Return new hooks with the hooks of other appended to ours."""
        if other is None:
            return self
        return Hooks(
            pre_hooks=[*self.pre_hooks, *other.pre_hooks],
            post_hooks=[*self.post_hooks, *other.post_hooks],
            error_hooks=[*self.error_hooks, *other.error_hooks],
        )


@contextlib.contextmanager
def invoke_with_hooks(
    context: T,
    pre_hooks: list[Callable[[T], None]] | None = None,
    post_hooks: list[Callable[[T], None]] | None = None,
    error_hooks: list[Callable[[T], None]] | None = None,
) -> Generator[None, Any, None]:
    for hook in pre_hooks or []:
        hook(context)
    try:
        yield
    except BaseException:
        for hook in error_hooks or []:
            hook(context)
        raise
    finally:
        for hook in post_hooks or []:
            hook(context)
