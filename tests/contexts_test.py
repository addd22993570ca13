from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from pytest_subtests import SubTests

from tagline.bases import Group, new_group
from tagline.contexts import Context, Tagline, current_context, use_context


def test_context_chain() -> None:
    root = Context.background()
    child = root.derive("user", "billy")
    grandchild = child.derive("user", "pangolin")

    assert root.value("user") is None
    assert child.value("user") == "billy"
    assert grandchild.value("user") == "pangolin"
    assert grandchild.parent is child


def test_from_context_on_empty_context(shared: Tagline) -> None:
    group = shared.from_context(Context.background())
    assert group.map() == {}
    assert group.slice() == []


def test_from_context_returns_a_fresh_group(shared: Tagline) -> None:
    ctx = Context.background()
    shared.from_context(ctx).add("env", "prod")
    assert shared.from_context(ctx).map() == {}


def test_with_tag_creates_a_group(shared: Tagline) -> None:
    ctx = shared.with_tag(Context.background(), "env", "prod")
    assert shared.from_context(ctx).slice() == ["env", "prod"]
    assert len(shared.from_context(ctx).map()) == 1


def test_with_tag_appends(shared: Tagline) -> None:
    ctx = shared.with_tag(Context.background(), "env", "prod")
    ctx = shared.with_tag(ctx, "service", "database")
    assert shared.from_context(ctx).slice() == ["env", "prod", "service", "database"]


def test_with_tag_overwrites(shared: Tagline) -> None:
    ctx = shared.with_tag(Context.background(), "status", "200")
    ctx = shared.with_tag(ctx, "status", "500")
    assert shared.from_context(ctx).slice() == ["status", "500"]


def test_with_tag_keeps_original_context(shared: Tagline) -> None:
    root = Context.background()
    ctx = shared.with_tag(root, "env", "prod")
    assert ctx is not root
    assert shared.from_context(root).map() == {}


def test_with_group_binds_by_reference(shared: Tagline) -> None:
    group = new_group({"env": "prod"})
    ctx = shared.with_group(Context.background(), group)
    assert shared.from_context(ctx) is group
    assert shared.from_context(ctx).slice() == ["env", "prod"]


def test_with_group_merges(shared: Tagline) -> None:
    ctx = shared.with_group(Context.background(), new_group({"env": "prod", "status": "200"}))
    ctx = shared.with_group(ctx, new_group({"status": "500", "service": "database"}))
    assert shared.from_context(ctx).slice() == ["env", "prod", "service", "database", "status", "500"]


def test_shared_propagation(shared: Tagline, subtests: SubTests) -> None:
    root = shared.with_tag(Context.background(), "env", "prod")
    left = shared.with_tag(root, "branch", "left")
    right = shared.with_group(root, new_group({"worker": "right"}))

    with subtests.test("same group everywhere"):
        assert shared.from_context(left) is shared.from_context(root)
        assert shared.from_context(right) is shared.from_context(root)

    with subtests.test("siblings observe each other"):
        expected = ["branch", "left", "env", "prod", "worker", "right"]
        assert shared.from_context(root).slice() == expected
        assert shared.from_context(left).slice() == expected
        assert shared.from_context(right).slice() == expected


def test_copy_propagation(copied: Tagline, subtests: SubTests) -> None:
    seed = new_group({"env": "prod"})
    root = copied.with_group(Context.background(), seed)
    left = copied.with_tag(root, "branch", "left")
    right = copied.with_group(root, new_group({"worker": "right"}))

    with subtests.test("first binding is by reference"):
        assert copied.from_context(root) is seed

    with subtests.test("siblings are isolated"):
        assert copied.from_context(root).slice() == ["env", "prod"]
        assert copied.from_context(left).slice() == ["branch", "left", "env", "prod"]
        assert copied.from_context(right).slice() == ["env", "prod", "worker", "right"]

    with subtests.test("later values still win"):
        ctx = copied.with_tag(left, "branch", "other")
        assert copied.from_context(ctx).get("branch") == "other"
        assert copied.from_context(left).get("branch") == "left"


@dataclass(frozen=True)
class DictCarrier:
    values: dict[Any, Any] = field(default_factory=dict)

    def value(self, key: Any) -> Any | None:
        return self.values.get(key)

    def derive(self, key: Any, value: Any) -> DictCarrier:
        return DictCarrier({**self.values, key: value})


def test_custom_carrier(shared: Tagline) -> None:
    root = DictCarrier()
    ctx = shared.with_tag(root, "env", "prod")
    ctx = shared.with_group(ctx, new_group({"status": "500"}))

    assert isinstance(ctx, DictCarrier)
    assert root.values == {}
    assert shared.from_context(ctx).slice() == ["env", "prod", "status", "500"]


def test_use_context(shared: Tagline) -> None:
    before = current_context()
    ctx = shared.with_tag(before, "env", "prod")

    with use_context(ctx) as bound:
        assert bound is ctx
        assert current_context() is ctx
        assert shared.current_group().get("env") == "prod"

    assert current_context() is before
    assert shared.current_group().map() == {}


def test_tag(shared: Tagline) -> None:
    with shared.tag("env", "prod") as outer:
        with shared.tag("service", "database"):
            assert shared.current_group().slice() == ["env", "prod", "service", "database"]
        assert current_context() is outer
    assert shared.current_group().map() == {}


def test_tag_with_copy(copied: Tagline) -> None:
    with copied.tag("env", "prod"):
        with copied.tag("service", "database"):
            assert copied.current_group().slice() == ["env", "prod", "service", "database"]
        assert copied.current_group().slice() == ["env", "prod"]


def test_tasks_are_isolated(shared: Tagline) -> None:
    async def handle(request_id: str) -> Group:
        with shared.tag("request_id", request_id):
            await asyncio.sleep(0)
            return shared.current_group()

    async def main() -> list[Group]:
        return await asyncio.gather(handle("a"), handle("b"))

    first, second = asyncio.run(main())
    assert first.slice() == ["request_id", "a"]
    assert second.slice() == ["request_id", "b"]


def test_carrier_type_is_kept(shared: Tagline, subtests: SubTests) -> None:
    with subtests.test("bundled context"):
        ctx = shared.with_group(shared.with_tag(Context.background(), "env", "prod"), new_group())
        assert isinstance(ctx, Context)

    with subtests.test("custom carrier"):
        carrier = shared.with_group(shared.with_tag(DictCarrier(), "env", "prod"), new_group())
        assert isinstance(carrier, DictCarrier)
        assert shared.from_context(carrier).slice() == ["env", "prod"]
