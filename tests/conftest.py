"""Pytest configuration and fixtures for gRPC Swift generator tests."""

from __future__ import annotations

import pytest
from google.protobuf import descriptor_pb2

from grpc_swift_stub_generator.request import MethodDescriptor, Name, ServiceDescriptor

AVAILABILITY = "@available(macOS 13.0, iOS 16.0, watchOS 9.0, tvOS 16.0, *)"


def _name(base: str, upper: str | None = None, lower: str | None = None) -> Name:
    upper = base if upper is None else upper
    lower = (upper[:1].lower() + upper[1:]) if lower is None else lower
    return Name(base, upper, lower)


@pytest.fixture
def make_method():
    """Factory for method descriptors.

    Names default to the base name, lower cased for the lower case variant.
    """

    def factory(
        base: str,
        input_streaming: bool = False,
        output_streaming: bool = False,
        upper: str | None = None,
        lower: str | None = None,
        input_type: str = "NamespaceA_ServiceARequest",
        output_type: str = "NamespaceA_ServiceAResponse",
        documentation: str = "",
    ) -> MethodDescriptor:
        return MethodDescriptor(
            documentation=documentation,
            name=_name(base, upper, lower),
            is_input_streaming=input_streaming,
            is_output_streaming=output_streaming,
            input_type=input_type,
            output_type=output_type,
        )

    return factory


@pytest.fixture
def make_service():
    """Factory for service descriptors. An empty namespace means no namespace."""

    def factory(
        base: str,
        namespace: str = "",
        methods=(),
        upper: str | None = None,
        namespace_upper: str | None = None,
        documentation: str = "",
    ) -> ServiceDescriptor:
        if namespace:
            namespace_name = _name(namespace, namespace_upper or namespace[:1].upper() + namespace[1:])
        else:
            namespace_name = Name.empty()

        return ServiceDescriptor(
            documentation=documentation,
            name=_name(base, upper),
            namespace=namespace_name,
            methods=tuple(methods),
        )

    return factory


def _helloworld_file() -> descriptor_pb2.FileDescriptorProto:
    file = descriptor_pb2.FileDescriptorProto(
        name="helloworld.proto",
        package="hello.world",
        syntax="proto3",
        dependency=["same-module.proto", "different-module.proto"],
    )
    file.message_type.add(name="HelloRequest")
    file.message_type.add(name="HelloReply")

    service = file.service.add(name="Greeter")
    service.method.add(
        name="SayHello",
        input_type=".hello.world.HelloRequest",
        output_type=".hello.world.HelloReply",
    )

    locations = file.source_code_info.location
    locations.add(
        path=[12],
        leading_detached_comments=[" Copyright 2015 gRPC authors.\n\n Licensed under the Apache License.\n"],
    )
    locations.add(path=[6, 0], leading_comments=" The greeting service definition.\n")
    locations.add(path=[6, 0, 2, 0], leading_comments=" Sends a greeting.\n")
    return file


@pytest.fixture
def helloworld_files() -> list[descriptor_pb2.FileDescriptorProto]:
    """The helloworld example with two dependencies, the proto files protoc would pass to a plugin."""
    return [
        descriptor_pb2.FileDescriptorProto(name="same-module.proto", package="same-package", syntax="proto3"),
        descriptor_pb2.FileDescriptorProto(
            name="different-module.proto", package="different-package", syntax="proto3"
        ),
        _helloworld_file(),
    ]


@pytest.fixture
def helloworld_file(helloworld_files) -> descriptor_pb2.FileDescriptorProto:
    return helloworld_files[-1]
