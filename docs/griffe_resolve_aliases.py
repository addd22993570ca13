from typing import Any

from griffe import Extension, Module, get_logger
from griffe.dataclasses import Alias, Attribute
from griffe.expressions import ExprAttribute, ExprName

logger = get_logger(__name__)


class ResolveTaglineAliases(Extension):
    """Document `tagline.with_tag` and friends as the `Tagline` methods they are bound to.

    `tagline/__init__.py` binds the methods of a default `Tagline` instance as module
    attributes. Only attributes naming an existing `Tagline` member are replaced.
    """

    def __init__(self, package: str = "tagline", owner: str = "contexts.Tagline") -> None:
        super().__init__()
        self.package = package
        self.owner = owner

    def on_package_loaded(self, *, pkg: Module, **kwargs: Any) -> None:
        if pkg.path != self.package:
            return

        owner = pkg[self.owner]
        for name, member in list(pkg.members.items()):
            method = self._bound_method(member)
            if method is None:
                continue
            if method not in owner.members:
                logger.debug(f"{pkg.path}.{name} is bound to unknown member {method!r}")
                continue
            pkg.members[name] = Alias(
                name=name,
                target=f"{owner.path}.{method}",
                lineno=member.lineno,
                endlineno=member.endlineno,
                parent=pkg,
            )

    @staticmethod
    def _bound_method(member: Any) -> str | None:
        if not isinstance(member, Attribute):
            return None
        value = member.value
        if not isinstance(value, ExprAttribute) or len(value.values) != 2:
            return None
        instance, method = value.values
        if not isinstance(instance, ExprName) or instance.name != "_0":
            return None
        return str(method)
