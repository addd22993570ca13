from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any

from typing_extensions import Doc  # type: ignore[attr-defined]

from .types import Tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Tag:
    key: str
    value: str


class Group:
    """Container for tags.

    Groups are additive: a tag can be added or overwritten, never removed.
    When your application has more complicated state changes than an
    append-only list, build the group at the end of your pipeline once the
    state has settled.

    ```python
    group = Group({"env": "prod"})
    group.add("service", "database")
    assert group.slice() == ["env", "prod", "service", "database"]
    ```

    A group may be shared between threads, every access to its tags is
    serialized by an internal lock.
    """

    __slots__ = ("_tags", "_lock")

    def __init__(self, tags: Tags | None = None) -> None:
        self._tags: dict[str, Tag] = {}
        self._lock = threading.RLock()
        for key, value in (tags or {}).items():
            self._tags[key] = Tag(key, value)

    def add(self, key: str, value: str) -> None:
        """Add a tag to the group.

        Passing a key that already exists overwrites the existing value.
        """
        with self._lock:
            self._tags[key] = Tag(key, value)

    def addf(
        self,
        key: str,
        format: Annotated[
            str,
            Doc(
                """
                printf-style format, combined with `args` using the `%` operator.
                A single mapping argument feeds named specifiers like `%(code)d`.
                """
            ),
        ],
        *args: Any,
    ) -> None:
        """Like `add`, but the value is formatted from `format` and `args`.

        Helpful to tag with non-string values like a status code:

        ```python
        group.addf("status", "%d", 500)
        ```

        A malformed format never raises, the error is rendered into the value
        instead, for example `"%d%!(TypeError: ...)"`.
        """
        self.add(key, _sprintf(format, args))

    def get(self, key: str) -> str:
        """Value of the tag with given key, or an empty string when absent."""
        with self._lock:
            tag = self._tags.get(key)
        if tag is None:
            return ""
        return tag.value

    def lookup(self, key: str) -> tuple[str, bool]:
        """Value of the tag with given key and whether it was found.

        Use it instead of `get` when tags may have empty values and you need
        to tell them apart from missing ones.

        ```python
        group = Group({"user_id": ""})
        assert group.lookup("user_id") == ("", True)
        assert group.lookup("missing") == ("", False)
        ```
        """
        with self._lock:
            tag = self._tags.get(key)
        if tag is None:
            return "", False
        return tag.value, True

    def map(self) -> dict[str, str]:
        """Flatten tags into a new dict, owned by the caller."""
        with self._lock:
            return {tag.key: tag.value for tag in self._tags.values()}

    def merge(self, other: Group) -> None:
        """Add tags of `other` to this group.

        Tags with keys already in this group are overwritten. `other` is left untouched.
        """
        if other is self:
            return
        with other._lock:
            incoming = list(other._tags.values())
        with self._lock:
            for tag in incoming:
                self._tags[tag.key] = tag

    def slice(self) -> list[str]:
        """Flatten tags into a list where keys at even indices are followed by their values.

        ```
        [key1, value1, key2, value2, ...]
        ```

        Keys are sorted, so the output is deterministic.
        """
        with self._lock:
            tags = sorted(self._tags.values(), key=lambda tag: tag.key)
        result: list[str] = []
        for tag in tags:
            result += [tag.key, tag.value]
        return result

    def copy(self) -> Group:
        return Group(self.map())

    def __len__(self) -> int:
        with self._lock:
            return len(self._tags)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._tags

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Group):
            return NotImplemented
        return self.map() == other.map()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        pairs = self.slice()
        body = ", ".join(f"{key}={value!r}" for key, value in zip(pairs[::2], pairs[1::2]))
        return f"Group({body})"


def new_group(tags: Tags | None = None) -> Group:
    """Returns a group of tags, seeded with `tags` when given."""
    return Group(tags)


def _sprintf(format: str, args: tuple[Any, ...]) -> str:
    values: tuple[Any, ...] | Mapping[str, Any] = args
    if len(args) == 1 and isinstance(args[0], Mapping):
        values = args[0]
    try:
        return format % values
    except (TypeError, ValueError, KeyError, OverflowError) as error:
        logger.debug("Malformed tag format %r: %s", format, error)
        rendered = f"{format}%!({type(error).__name__}: {error})"
        if args:
            rendered += f"%!(ARGS {', '.join(repr(arg) for arg in args)})"
        return rendered
