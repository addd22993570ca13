from .bases import Group, Tag, new_group
from .contexts import (
    Carrier,
    Context,
    Propagation,
    Tagline,
    current_context,
    use_context,
)
from .logs import TagFilter
from .types import Tags

__all__ = [
    "current_context",
    "current_group",
    "from_context",
    "new_group",
    "tag",
    "use_context",
    "with_group",
    "with_tag",
    "Carrier",
    "Context",
    "Group",
    "Propagation",
    "Tag",
    "TagFilter",
    "Tagline",
    "Tags",
]

_0: Tagline = Tagline()

from_context = _0.from_context
with_tag = _0.with_tag
with_group = _0.with_group
current_group = _0.current_group
tag = _0.tag

del _0
