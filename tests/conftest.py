"""Pytest configuration and fixtures for triple stub generator tests."""

from __future__ import annotations

import pytest
from google.protobuf import descriptor_pb2

from triple_stub_generator.index import DescriptorIndex
from triple_stub_generator.schema_types import Method, SchemaFile, Service

COMMON_PATH = "shop/common.proto"
ORDERS_PATH = "shop/orders.proto"
COMMON_MODULE = "github.com/x/common"


def unary(name: str, input_type: str, output_type: str) -> Method:
    """Shorthand for a method without streaming."""
    return Method(name=name, input_type=input_type, output_type=output_type)


def file_proto(
    name: str,
    package: str = "",
    dependencies: tuple[str, ...] = (),
    go_package: str | None = None,
    services: dict[str, list[tuple[str, str, str]]] | None = None,
) -> descriptor_pb2.FileDescriptorProto:
    """Build a file descriptor.

    Args:
        name: The file path.
        package: The declared package.
        dependencies: The imported file paths.
        go_package: The `go_package` option, if any.
        services: Service name to a list of (method name, input type, output type).

    Returns:
        The file descriptor.
    """
    proto = descriptor_pb2.FileDescriptorProto(name=name, package=package)
    proto.dependency.extend(dependencies)

    if go_package is not None:
        proto.options.go_package = go_package

    for service_name, methods in (services or {}).items():
        service = proto.service.add(name=service_name)
        for method_name, input_type, output_type in methods:
            service.method.add(name=method_name, input_type=input_type, output_type=output_type)

    return proto


@pytest.fixture
def common_file() -> SchemaFile:
    """A dependency-only file with an explicit module hint."""
    return SchemaFile(path=COMMON_PATH, package="shop.common", module_hint=f"{COMMON_MODULE};common")


@pytest.fixture
def orders_file() -> SchemaFile:
    """A file with one service that references a local and an imported type."""
    return SchemaFile(
        path=ORDERS_PATH,
        package="shop.orders",
        dependencies=(COMMON_PATH,),
        services=(
            Service(
                name="Orders",
                methods=(unary("Create", ".shop.orders.CreateReq", ".shop.common.Status"),),
            ),
        ),
    )


@pytest.fixture
def shop_unit(common_file: SchemaFile, orders_file: SchemaFile) -> list[SchemaFile]:
    """The compilation unit of the shop example."""
    return [common_file, orders_file]


@pytest.fixture
def shop_index(shop_unit: list[SchemaFile]) -> DescriptorIndex:
    """The index of the shop example."""
    return DescriptorIndex.build(shop_unit)
