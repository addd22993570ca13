from __future__ import annotations

import enum
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Annotated, Any, Iterator, Protocol, Self, TypeVar

from typing_extensions import Doc  # type: ignore[attr-defined]

from .bases import Group, new_group

logger = logging.getLogger(__name__)


class Carrier(Protocol):
    """Immutable and chainable store of values.

    Anything implementing these two methods can carry a group of tags.
    """

    def value(self, key: Any) -> Any | None:
        ...

    def derive(self, key: Any, value: Any) -> Self:
        ...


@dataclass(frozen=True, slots=True, eq=False)
class Context:
    """Immutable chain of key/value pairs.

    Each call to `derive` returns a new context pointing to its parent,
    the chain itself is never mutated.

    ```python
    root = Context.background()
    child = root.derive("user", "billy")
    assert child.value("user") == "billy"
    assert root.value("user") is None
    ```
    """

    parent: Context | None = None
    key: Any = None
    val: Any = None

    @classmethod
    def background(cls) -> Context:
        """Returns the empty root context."""
        return BACKGROUND

    def value(self, key: Any) -> Any | None:
        current: Context | None = self
        while current is not None and current.parent is not None:
            if current.key == key:
                return current.val
            current = current.parent
        return None

    def derive(self, key: Any, value: Any) -> Context:
        return Context(parent=self, key=key, val=value)


BACKGROUND = Context()

C = TypeVar("C", bound=Carrier)


class Propagation(enum.Enum):
    """Tell how a group already bound to a context is updated."""

    SHARED = enum.auto()
    """Mutate the bound group in place and bind it again.

    Every context sharing this group observes the new tags, siblings included.
    """
    COPY = enum.auto()
    """Copy the bound group, mutate the copy and bind it on the derived context.

    Sibling contexts are isolated from each other.
    """


class _GroupKey:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<tagline.group>"


_GROUP_KEY = _GroupKey()


def _bound_group(ctx: Carrier) -> Group | None:
    return ctx.value(_GROUP_KEY)


def _bind(ctx: C, group: Group) -> C:
    return ctx.derive(_GROUP_KEY, group)


@dataclass(kw_only=True, slots=True)
class Tagline:
    propagation: Annotated[
        Propagation,
        Doc(
            """
            How `with_tag` and `with_group` update a group already bound to the context.
            """
        ),
    ] = Propagation.SHARED

    def from_context(self, ctx: Carrier) -> Group:
        """Returns the group stored on the context.

        When there is no group, returns a new, empty one, so callers never
        have to check for `None`.
        """
        group = _bound_group(ctx)
        if group is None:
            return new_group()
        return group

    def with_tag(self, ctx: C, key: str, value: str) -> C:
        """Returns a copy of the context with a new tag added to its group.

        When the context has no group yet, a new group is bound holding only this tag.

        ```python
        ctx = with_tag(Context.background(), "env", "prod")
        assert from_context(ctx).slice() == ["env", "prod"]
        ```
        """
        group = _bound_group(ctx)
        if group is None:
            logger.debug("Binding new tag group on %r", ctx)
            return _bind(ctx, new_group({key: value}))

        group = self._writable(group)
        group.add(key, value)
        return _bind(ctx, group)

    def with_group(self, ctx: C, group: Group) -> C:
        """Returns a copy of the context with the tags of `group` added.

        When the context has no group yet, `group` is bound as-is, by reference.
        Otherwise tags of `group` are merged into the bound one, overwriting
        values of tags having the same key.
        """
        current = _bound_group(ctx)
        if current is None:
            logger.debug("Binding tag group on %r", ctx)
            return _bind(ctx, group)

        current = self._writable(current)
        current.merge(group)
        return _bind(ctx, current)

    def current_group(self) -> Group:
        """Returns the group of the current context."""
        return self.from_context(current_context())

    @contextmanager
    def tag(self, key: str, value: str) -> Iterator[Context]:
        """Add a tag to the current context for the duration of the block.

        ```python
        with tag("env", "prod"):
            assert current_group().get("env") == "prod"
        ```
        """
        with use_context(self.with_tag(current_context(), key, value)) as ctx:
            yield ctx

    def _writable(self, group: Group) -> Group:
        if self.propagation is Propagation.COPY:
            return group.copy()
        return group


_CURRENT: ContextVar[Context] = ContextVar("tagline_context", default=BACKGROUND)


def current_context() -> Context:
    """Returns the context bound to the running thread or task."""
    return _CURRENT.get()


@contextmanager
def use_context(ctx: Context) -> Iterator[Context]:
    """Bind `ctx` as the current context, restore the previous one on exit."""
    token = _CURRENT.set(ctx)
    try:
        yield ctx
    finally:
        _CURRENT.reset(token)
