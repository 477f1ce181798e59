"""Tests for naming helpers and the derived names of the request model."""

from __future__ import annotations

import pytest

from grpc_swift_stub_generator.helper import (
    method_path,
    method_type,
    new_generic,
    strip_extension,
    to_lower_camel_case,
    to_upper_camel_case,
)
from grpc_swift_stub_generator.request import (
    Name,
    PreconcurrencyKind,
    PreconcurrencyRequirement,
    StreamingShape,
    make_request,
    protobuf_deserializer,
    protobuf_serializer,
)


class TestCamelCase:
    """Test conversion of schema names to Swift casing."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("say_hello", "SayHello"),
            ("SayHello", "SayHello"),
            ("sayHello", "SayHello"),
            ("hello", "Hello"),
            ("get_URL", "GetURL"),
            ("", ""),
        ],
    )
    def test_upper_camel_case(self, name, expected):
        assert to_upper_camel_case(name) == expected

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("SayHello", "sayHello"),
            ("say_hello", "sayHello"),
            ("URLFetch", "urlFetch"),
            ("get_URL", "getURL"),
            ("ABC", "abc"),
            ("", ""),
        ],
    )
    def test_lower_camel_case(self, name, expected):
        assert to_lower_camel_case(name) == expected


class TestTypeHelpers:
    """Test helpers building Swift type strings."""

    def test_new_generic(self):
        assert new_generic("ServerRequest.Single", ["Foo"]) == "ServerRequest.Single<Foo>"
        assert new_generic("Dictionary", ["Key", "Value"]) == "Dictionary<Key, Value>"

    def test_method_type_with_namespace(self, make_service, make_method):
        method = make_method("SayHello")
        service = make_service("Greeter", namespace="hello.world", namespace_upper="Hello_World", methods=[method])

        assert method_path(service, method) == "Hello_World.Greeter.Method.SayHello"
        assert method_type(service, method, "Input") == "Hello_World.Greeter.Method.SayHello.Input"

    def test_method_type_without_namespace(self, make_service, make_method):
        method = make_method("SayHello")
        service = make_service("Greeter", methods=[method])

        assert method_type(service, method, "Output") == "Greeter.Method.SayHello.Output"

    def test_strip_extension(self):
        assert strip_extension("helloworld.proto") == "helloworld"
        assert strip_extension("foo/bar/helloworld.proto") == "foo/bar/helloworld"
        assert strip_extension("test") == "test"


class TestRequestModel:
    """Test the derived properties of the request model."""

    def test_service_names_with_namespace(self, make_service):
        service = make_service("Greeter", namespace="hello.world", namespace_upper="Hello_World")

        assert service.fully_qualified_name == "hello.world.Greeter"
        assert service.namespaced_generated_name == "Hello_World_Greeter"
        assert service.namespaced_typealias_generated_name == "Hello_World.Greeter"

    def test_service_names_without_namespace(self, make_service):
        service = make_service("Greeter")

        assert service.namespace == Name.empty()
        assert service.fully_qualified_name == "Greeter"
        assert service.namespaced_generated_name == "Greeter"
        assert service.namespaced_typealias_generated_name == "Greeter"

    def test_methods_are_stored_as_tuple(self, make_service, make_method):
        service = make_service("Greeter", methods=[make_method("A"), make_method("B")])
        assert isinstance(service.methods, tuple)
        assert [m.name.base for m in service.methods] == ["A", "B"]

    @pytest.mark.parametrize(
        ("input_streaming", "output_streaming", "shape"),
        [
            (False, False, StreamingShape.UNARY),
            (True, False, StreamingShape.CLIENT_STREAMING),
            (False, True, StreamingShape.SERVER_STREAMING),
            (True, True, StreamingShape.BIDIRECTIONAL_STREAMING),
        ],
    )
    def test_streaming_shape(self, make_method, input_streaming, output_streaming, shape):
        assert make_method("M", input_streaming, output_streaming).shape is shape

    def test_preconcurrency_requirements(self):
        assert PreconcurrencyRequirement().kind is PreconcurrencyKind.NOT_REQUIRED
        assert PreconcurrencyRequirement.required().kind is PreconcurrencyKind.REQUIRED

        on_os = PreconcurrencyRequirement.required_on_os("Linux", "Android")
        assert on_os.kind is PreconcurrencyKind.REQUIRED_ON_OS
        assert on_os.operating_systems == ("Linux", "Android")

    def test_make_request_defaults(self, make_service):
        request = make_request([make_service("Greeter")])

        assert request.file_name == "test.grpc"
        assert request.leading_trivia == ""
        assert request.dependencies == ()
        assert request.lookup_serializer("Foo") == protobuf_serializer("Foo") == "ProtobufSerializer<Foo>()"
        assert request.lookup_deserializer("Foo") == protobuf_deserializer("Foo") == "ProtobufDeserializer<Foo>()"
