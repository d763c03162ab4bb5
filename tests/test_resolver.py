"""Tests for resolving dotted type names to local or imported references."""

from __future__ import annotations

import pytest

from triple_stub_generator.index import DescriptorIndex
from triple_stub_generator.resolver import ImportedType, LocalType, TypeResolver
from triple_stub_generator.schema_types import SchemaFile

from conftest import COMMON_MODULE


@pytest.fixture
def resolver(shop_index) -> TypeResolver:
    return TypeResolver(shop_index)


class TestLocalTypes:
    """Types that live in the current file's package."""

    def test_own_package(self, resolver, orders_file):
        assert resolver.resolve(".shop.orders.CreateReq", orders_file) == LocalType("CreateReq")

    def test_without_leading_separator(self, resolver, orders_file):
        assert resolver.resolve("shop.orders.CreateReq", orders_file) == LocalType("CreateReq")

    def test_single_segment(self, resolver, orders_file):
        assert resolver.resolve("createReq", orders_file) == LocalType("CreateReq")

    def test_exported_casing(self, resolver, orders_file):
        assert resolver.resolve(".shop.orders.createReq", orders_file) == LocalType("CreateReq")

    def test_nested_type(self, resolver, orders_file):
        assert resolver.resolve(".shop.orders.Order.Item", orders_file) == LocalType("Order_Item")

    def test_own_package_wins_over_other_file_with_same_package(self):
        current = SchemaFile(path="mine.proto", package="shared", dependencies=("theirs.proto",))
        other = SchemaFile(path="theirs.proto", package="shared", module_hint="example.com/theirs")
        resolver = TypeResolver(DescriptorIndex.build([current, other]))

        assert resolver.resolve(".shared.Msg", current) == LocalType("Msg")

    def test_same_module_path_is_local(self):
        current = SchemaFile(
            path="shop/orders.proto",
            package="shop.orders",
            dependencies=("shop/items.proto",),
            module_hint="github.com/x/shop;shop",
        )
        sibling = SchemaFile(path="shop/items.proto", package="shop.items", module_hint="github.com/x/shop;shop")
        resolver = TypeResolver(DescriptorIndex.build([sibling, current]))

        assert resolver.resolve(".shop.items.Item", current) == LocalType("Item")


class TestImportedTypes:
    """Types that live in a dependency."""

    def test_dependency(self, resolver, orders_file):
        resolved = resolver.resolve(".shop.common.Status", orders_file)

        assert resolved == ImportedType(module_path=COMMON_MODULE, name="Status")
        assert str(resolved) == "github.com/x/common.Status"

    def test_dependency_nested_type(self, resolver, orders_file):
        resolved = resolver.resolve(".shop.common.Status.Code", orders_file)

        assert resolved == ImportedType(module_path=COMMON_MODULE, name="Status_Code")

    def test_dependency_without_hint_uses_file_path(self):
        dependency = SchemaFile(path="protos/common.proto", package="common")
        current = SchemaFile(path="protos/orders.proto", package="orders", dependencies=("protos/common.proto",))
        resolver = TypeResolver(DescriptorIndex.build([dependency, current]))

        assert resolver.resolve(".common.Status", current) == ImportedType("protos/common", "Status")

    def test_longest_prefix_wins(self):
        short = SchemaFile(path="ab.proto", package="a.b", module_hint="example.com/ab")
        long = SchemaFile(path="abc.proto", package="a.b.c", module_hint="example.com/abc")
        current = SchemaFile(path="main.proto", package="main", dependencies=("ab.proto", "abc.proto"))
        resolver = TypeResolver(DescriptorIndex.build([short, long, current]))

        assert resolver.resolve(".a.b.c.Msg", current) == ImportedType("example.com/abc", "Msg")

    def test_shorter_prefix_with_nested_type(self):
        short = SchemaFile(path="ab.proto", package="a.b", module_hint="example.com/ab")
        current = SchemaFile(path="main.proto", package="main", dependencies=("ab.proto",))
        resolver = TypeResolver(DescriptorIndex.build([short, current]))

        assert resolver.resolve(".a.b.c.Msg", current) == ImportedType("example.com/ab", "C_Msg")


class TestDependencyGating:
    """Packages that the current file does not import."""

    def test_undeclared_dependency_falls_back_to_local(self, common_file):
        current = SchemaFile(path="lonely.proto", package="lonely")
        resolver = TypeResolver(DescriptorIndex.build([common_file, current]))

        assert resolver.resolve(".shop.common.Status", current) == LocalType("Status")

    def test_undeclared_dependency_falls_through_to_shorter_prefix(self):
        short = SchemaFile(path="ab.proto", package="a.b", module_hint="example.com/ab")
        long = SchemaFile(path="abc.proto", package="a.b.c", module_hint="example.com/abc")
        current = SchemaFile(path="main.proto", package="main", dependencies=("ab.proto",))
        resolver = TypeResolver(DescriptorIndex.build([short, long, current]))

        assert resolver.resolve(".a.b.c.Msg", current) == ImportedType("example.com/ab", "C_Msg")

    def test_shared_package_resolves_through_last_file_only(self):
        first = SchemaFile(path="first.proto", package="shared", module_hint="example.com/first")
        second = SchemaFile(path="second.proto", package="shared", module_hint="example.com/second")
        current = SchemaFile(path="main.proto", package="main", dependencies=("first.proto",))
        resolver = TypeResolver(DescriptorIndex.build([first, second, current]))

        # The index only knows `second.proto` for "shared", which `main.proto` does not import.
        assert resolver.resolve(".shared.Msg", current) == LocalType("Msg")


class TestFallback:
    """Unresolvable names degrade to local names instead of failing."""

    def test_unknown_package(self, resolver, orders_file):
        assert resolver.resolve(".nowhere.to.be.Found", orders_file) == LocalType("Found")

    def test_empty_name(self, resolver, orders_file):
        assert resolver.resolve("", orders_file) == LocalType("")

    def test_is_deterministic(self, resolver, orders_file):
        results = {resolver.resolve(".shop.common.Status", orders_file) for _ in range(5)}

        assert results == {ImportedType(COMMON_MODULE, "Status")}
