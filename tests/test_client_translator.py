"""Tests for the generated client protocols and concrete clients."""

from __future__ import annotations

import pytest
from conftest import AVAILABILITY

from grpc_swift_stub_generator import ir
from grpc_swift_stub_generator.client_translator import ClientCodeTranslator
from grpc_swift_stub_generator.renderer import TextBasedRenderer
from grpc_swift_stub_generator.request import make_request

PLATFORMS = ir.Availability(("macOS 13.0", "iOS 16.0", "watchOS 9.0", "tvOS 16.0"))


def translate(services, access=ir.AccessModifier.PUBLIC, availability=PLATFORMS) -> str:
    translator = ClientCodeTranslator(access, availability)
    renderer = TextBasedRenderer(4)
    renderer.render_code_blocks(translator.translate(make_request(services)))
    return renderer.rendered_contents()


class TestClientCodeTranslator:
    """Test the three client blocks generated per service."""

    def test_service_without_methods(self, make_service):
        expected = "\n".join(
            [
                AVAILABILITY,
                "public protocol NamespaceA_ServiceAClientProtocol: Sendable {}",
                AVAILABILITY,
                "extension NamespaceA.ServiceA.ClientProtocol {",
                "}",
                AVAILABILITY,
                "public struct NamespaceA_ServiceAClient: NamespaceA.ServiceA.ClientProtocol {",
                "    private let client: GRPCCore.GRPCClient",
                "    ",
                "    public init(client: GRPCCore.GRPCClient) {",
                "        self.client = client",
                "    }",
                "}",
            ]
        )
        assert translate([make_service("ServiceA", namespace="namespaceA")]) == expected

    def test_client_streaming_method(self, make_service, make_method):
        method = make_method("ClientStreaming", input_streaming=True, documentation="Documentation for method")
        service = make_service("ServiceA", methods=[method], documentation="Documentation for ServiceA")

        expected = "\n".join(
            [
                "/// Documentation for ServiceA",
                AVAILABILITY,
                "public protocol ServiceAClientProtocol: Sendable {",
                "    /// Documentation for method",
                "    func clientStreaming<R>(",
                "        request: ClientRequest.Stream<ServiceA.Method.ClientStreaming.Input>,",
                "        serializer: some MessageSerializer<ServiceA.Method.ClientStreaming.Input>,",
                "        deserializer: some MessageDeserializer<ServiceA.Method.ClientStreaming.Output>,",
                "        _ body: @Sendable @escaping (ClientResponse.Single<ServiceA.Method.ClientStreaming.Output>) "
                "async throws -> R",
                "    ) async throws -> R where R: Sendable",
                "}",
                AVAILABILITY,
                "extension ServiceA.ClientProtocol {",
                "    public func clientStreaming<R>(",
                "        request: ClientRequest.Stream<ServiceA.Method.ClientStreaming.Input>,",
                "        _ body: @Sendable @escaping (ClientResponse.Single<ServiceA.Method.ClientStreaming.Output>) "
                "async throws -> R",
                "    ) async throws -> R where R: Sendable {",
                "        try await self.clientStreaming(",
                "            request: request,",
                "            serializer: ProtobufSerializer<ServiceA.Method.ClientStreaming.Input>(),",
                "            deserializer: ProtobufDeserializer<ServiceA.Method.ClientStreaming.Output>(),",
                "            body",
                "        )",
                "    }",
                "}",
                "/// Documentation for ServiceA",
                AVAILABILITY,
                "public struct ServiceAClient: ServiceA.ClientProtocol {",
                "    private let client: GRPCCore.GRPCClient",
                "    ",
                "    public init(client: GRPCCore.GRPCClient) {",
                "        self.client = client",
                "    }",
                "    ",
                "    /// Documentation for method",
                "    public func clientStreaming<R>(",
                "        request: ClientRequest.Stream<ServiceA.Method.ClientStreaming.Input>,",
                "        serializer: some MessageSerializer<ServiceA.Method.ClientStreaming.Input>,",
                "        deserializer: some MessageDeserializer<ServiceA.Method.ClientStreaming.Output>,",
                "        _ body: @Sendable @escaping (ClientResponse.Single<ServiceA.Method.ClientStreaming.Output>) "
                "async throws -> R",
                "    ) async throws -> R where R: Sendable {",
                "        try await self.client.clientStreaming(",
                "            request: request,",
                "            descriptor: ServiceA.Method.ClientStreaming.descriptor,",
                "            serializer: serializer,",
                "            deserializer: deserializer,",
                "            handler: body",
                "        )",
                "    }",
                "}",
            ]
        )
        assert translate([service]) == expected

    @pytest.mark.parametrize(
        ("input_streaming", "output_streaming", "call", "request_type", "response_type"),
        [
            (False, False, "unary", "ClientRequest.Single", "ClientResponse.Single"),
            (True, False, "clientStreaming", "ClientRequest.Stream", "ClientResponse.Single"),
            (False, True, "serverStreaming", "ClientRequest.Single", "ClientResponse.Stream"),
            (True, True, "bidirectionalStreaming", "ClientRequest.Stream", "ClientResponse.Stream"),
        ],
    )
    def test_streaming_shapes(
        self, make_service, make_method, input_streaming, output_streaming, call, request_type, response_type
    ):
        """Every shape forwards to the matching `GRPCClient` call."""
        service = make_service("ServiceA", methods=[make_method("MethodA", input_streaming, output_streaming)])
        output = translate([service])

        assert f"try await self.client.{call}(" in output
        assert f"request: {request_type}<ServiceA.Method.MethodA.Input>," in output
        assert f"_ body: @Sendable @escaping ({response_type}<ServiceA.Method.MethodA.Output>)" in output

    def test_struct_members_separated_by_indented_blank_lines(self, make_service, make_method):
        service = make_service("ServiceA", methods=[make_method("MethodA"), make_method("MethodB")])
        output = translate([service], availability=None)

        assert output.count("\n    \n") == 3
        assert "\n\n" not in output
        assert "@available" not in output

    def test_access_level_applies_to_implementations_only(self, make_service, make_method):
        service = make_service("ServiceA", methods=[make_method("MethodA")])
        output = translate([service], access=ir.AccessModifier.FILEPRIVATE)

        assert "fileprivate protocol ServiceAClientProtocol: Sendable {" in output
        assert "    func methodA<R>(" in output
        assert "    fileprivate func methodA<R>(" in output
        assert "    fileprivate init(client: GRPCCore.GRPCClient) {" in output
        assert "    private let client: GRPCCore.GRPCClient" in output
        assert "fileprivate extension" not in output
