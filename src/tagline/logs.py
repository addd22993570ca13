from __future__ import annotations

import logging

from .contexts import Tagline

__all__ = ["TagFilter"]


class TagFilter(logging.Filter):
    """Expose tags of the current context on log records.

    Two attributes are set on every record:

    - `tags`: dict of the tags, renamed with `attr`
    - `tag_pairs`: sorted `key=value` pairs joined by spaces, renamed with `pairs_attr`

    ```python
    handler = logging.StreamHandler()
    handler.addFilter(TagFilter())
    handler.setFormatter(logging.Formatter("%(message)s %(tag_pairs)s"))
    ```

    The filter never drops a record.
    """

    def __init__(
        self,
        name: str = "",
        *,
        attr: str = "tags",
        pairs_attr: str = "tag_pairs",
        tagline: Tagline | None = None,
    ) -> None:
        super().__init__(name)
        self.attr = attr
        self.pairs_attr = pairs_attr
        self.tagline = tagline or Tagline()

    def filter(self, record: logging.LogRecord) -> bool:
        group = self.tagline.current_group()
        pairs = group.slice()
        setattr(record, self.attr, group.map())
        setattr(record, self.pairs_attr, " ".join(f"{k}={v}" for k, v in zip(pairs[::2], pairs[1::2])))
        return True
