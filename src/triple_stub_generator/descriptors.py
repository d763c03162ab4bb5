"""Conversion of protobuf descriptors into schema files."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from triple_stub_generator.schema_types import Method, SchemaFile, Service

logger = logging.getLogger(__name__)


def method_from_proto(method_proto: descriptor_pb2.MethodDescriptorProto) -> Method:
    return Method(
        name=method_proto.name,
        input_type=method_proto.input_type,
        output_type=method_proto.output_type,
        client_streaming=method_proto.client_streaming,
        server_streaming=method_proto.server_streaming,
    )


def service_from_proto(service_proto: descriptor_pb2.ServiceDescriptorProto) -> Service:
    return Service(
        name=service_proto.name,
        methods=tuple(method_from_proto(method_proto) for method_proto in service_proto.method),
    )


def schema_file_from_proto(file_proto: descriptor_pb2.FileDescriptorProto) -> SchemaFile:
    """Convert a file descriptor into a schema file.

    The module hint is taken from the `go_package` file option.

    Args:
        file_proto (descriptor_pb2.FileDescriptorProto): The file descriptor.

    Returns:
        SchemaFile: The schema file.
    """
    return SchemaFile(
        path=file_proto.name,
        package=file_proto.package,
        dependencies=tuple(file_proto.dependency),
        services=tuple(service_from_proto(service_proto) for service_proto in file_proto.service),
        module_hint=file_proto.options.go_package or None,
    )


def compilation_unit_from_protos(file_protos: Iterable[descriptor_pb2.FileDescriptorProto]) -> list[SchemaFile]:
    """Convert file descriptors into a compilation unit, keeping their order."""
    files = [schema_file_from_proto(file_proto) for file_proto in file_protos]
    logger.debug("Loaded %d schema file(s).", len(files))
    return files


def parse_request(data: bytes) -> plugin_pb2.CodeGeneratorRequest:
    """Parse a serialized code generator request, as sent by the schema compiler to its plugins."""
    request = plugin_pb2.CodeGeneratorRequest()
    request.ParseFromString(data)
    return request


def parse_descriptor_set(data: bytes) -> descriptor_pb2.FileDescriptorSet:
    """Parse a serialized file descriptor set, e.g. written by `protoc --include_imports --descriptor_set_out`."""
    descriptor_set = descriptor_pb2.FileDescriptorSet()
    descriptor_set.ParseFromString(data)
    return descriptor_set
