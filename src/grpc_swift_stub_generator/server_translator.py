"""Translate services into server protocols and their default implementations."""

from __future__ import annotations

from grpc_swift_stub_generator import ir
from grpc_swift_stub_generator.helper import INPUT_NAME, OUTPUT_NAME, method_path, method_type, new_generic
from grpc_swift_stub_generator.request import (
    CodeGenerationRequest,
    MethodDescriptor,
    ServiceDescriptor,
    StreamingShape,
)

REGISTRABLE_RPC_SERVICE = "GRPCCore.RegistrableRPCService"


class ServerCodeTranslator:
    """Creates the server side code of every service.

    Per service, four blocks are generated:

    1. `<Service>StreamingServiceProtocol`, where every method streams in both directions.
    2. An extension registering the methods of the streaming protocol with an `RPCRouter`.
    3. `<Service>ServiceProtocol`, where every method has its natural shape.
    4. An extension implementing the streaming methods on top of the natural ones.

    Bidirectional methods already have the streaming shape and are not redeclared in 3 and 4.
    """

    def __init__(self, access_modifier: ir.AccessModifier, availability: ir.Availability | None = None):
        self.access_modifier = access_modifier
        self.availability = availability

    def translate(self, request: CodeGenerationRequest) -> list[ir.CodeBlock]:
        code_blocks: list[ir.CodeBlock] = []

        for service in request.services:
            code_blocks.append(ir.CodeBlock(self.make_streaming_protocol(service)))
            code_blocks.append(ir.CodeBlock(self.make_registration_extension(service, request)))
            code_blocks.append(ir.CodeBlock(self.make_service_protocol(service)))
            code_blocks.append(ir.CodeBlock(self.make_adapter_extension(service)))

        return code_blocks

    # ===== Streaming protocol =====

    def make_streaming_protocol(self, service: ServiceDescriptor) -> ir.Declaration:
        members = tuple(
            ir.commented(method.documentation, ir.FunctionDescription(self.streaming_signature(service, method)))
            for method in service.methods
        )
        protocol = ir.ProtocolDescription(
            self.access_modifier,
            f"{service.namespaced_generated_name}StreamingServiceProtocol",
            (REGISTRABLE_RPC_SERVICE,),
            members,
        )
        return self._annotate(service.documentation, protocol)

    def streaming_signature(
        self,
        service: ServiceDescriptor,
        method: MethodDescriptor,
        access_modifier: ir.AccessModifier | None = None,
    ) -> ir.FunctionSignatureDescription:
        return self._signature(service, method, True, True, access_modifier)

    # ===== Registration =====

    def make_registration_extension(self, service: ServiceDescriptor, request: CodeGenerationRequest) -> ir.Declaration:
        body = tuple(ir.CodeBlock(self.make_register_handler(service, method, request)) for method in service.methods)

        signature = ir.FunctionSignatureDescription(
            self.access_modifier,
            "registerMethods",
            parameters=(ir.ParameterDescription("with", "inout GRPCCore.RPCRouter", name="router"),),
        )
        register_methods = ir.guarded(self.availability, ir.FunctionDescription(signature, body))

        extension = ir.ExtensionDescription(
            None,
            f"{service.namespaced_typealias_generated_name}.StreamingServiceProtocol",
            members=(register_methods,),
        )
        return self._annotate(f"Conformance to `{REGISTRABLE_RPC_SERVICE}`.", extension)

    def make_register_handler(
        self,
        service: ServiceDescriptor,
        method: MethodDescriptor,
        request: CodeGenerationRequest,
    ) -> ir.Expression:
        """`router.registerHandler(...)` for a single method."""
        forward = ir.KeywordExpression(
            ir.KeywordKind.TRY,
            ir.KeywordExpression(
                ir.KeywordKind.AWAIT,
                ir.FunctionCallExpression(
                    ir.IdentifierExpression(f"self.{method.name.generated_lower_case}"),
                    (ir.FunctionArgument("request", ir.IdentifierExpression("request")),),
                ),
            ),
        )

        return ir.FunctionCallExpression(
            ir.IdentifierExpression("router.registerHandler"),
            (
                ir.FunctionArgument("forMethod", ir.IdentifierExpression(f"{method_path(service, method)}.descriptor")),
                ir.FunctionArgument(
                    "deserializer",
                    ir.IdentifierExpression(request.lookup_deserializer(method_type(service, method, INPUT_NAME))),
                ),
                ir.FunctionArgument(
                    "serializer",
                    ir.IdentifierExpression(request.lookup_serializer(method_type(service, method, OUTPUT_NAME))),
                ),
                ir.FunctionArgument("handler", ir.ClosureExpression(("request",), (ir.CodeBlock(forward),))),
            ),
        )

    # ===== Service protocol =====

    def make_service_protocol(self, service: ServiceDescriptor) -> ir.Declaration:
        members = tuple(
            ir.commented(
                method.documentation,
                ir.FunctionDescription(
                    self._signature(service, method, method.is_input_streaming, method.is_output_streaming)
                ),
            )
            for method in service.methods
            if method.shape is not StreamingShape.BIDIRECTIONAL_STREAMING
        )
        protocol = ir.ProtocolDescription(
            self.access_modifier,
            f"{service.namespaced_generated_name}ServiceProtocol",
            (f"{service.namespaced_typealias_generated_name}.StreamingServiceProtocol",),
            members,
        )
        return self._annotate(service.documentation, protocol)

    # ===== Adapter =====

    def make_adapter_extension(self, service: ServiceDescriptor) -> ir.Declaration:
        members = tuple(
            self.make_adapter_method(service, method)
            for method in service.methods
            if method.shape is not StreamingShape.BIDIRECTIONAL_STREAMING
        )
        extension = ir.ExtensionDescription(
            None,
            f"{service.namespaced_typealias_generated_name}.ServiceProtocol",
            members=members,
        )
        return self._annotate(
            f"Partial conformance to `{service.namespaced_generated_name}StreamingServiceProtocol`.", extension
        )

    def make_adapter_method(self, service: ServiceDescriptor, method: MethodDescriptor) -> ir.FunctionDescription:
        """Implement the streaming method by calling the method with its natural shape.

        Single inputs are unwrapped from the request stream, single outputs are wrapped into a response stream.
        """
        request_argument: ir.Expression = ir.IdentifierExpression("request")
        if not method.is_input_streaming:
            request_argument = ir.FunctionCallExpression(
                ir.IdentifierExpression("ServerRequest.Single"),
                (ir.FunctionArgument("stream", request_argument),),
            )

        call = ir.KeywordExpression(
            ir.KeywordKind.TRY,
            ir.KeywordExpression(
                ir.KeywordKind.AWAIT,
                ir.FunctionCallExpression(
                    ir.IdentifierExpression(f"self.{method.name.generated_lower_case}"),
                    (ir.FunctionArgument("request", request_argument),),
                ),
            ),
        )

        response: ir.Expression = ir.IdentifierExpression("response")
        if not method.is_output_streaming:
            response = ir.FunctionCallExpression(
                ir.IdentifierExpression("ServerResponse.Stream"),
                (ir.FunctionArgument("single", response),),
            )

        body = (
            ir.CodeBlock(ir.VariableDescription(None, ir.BindingKind.LET, "response", right=call)),
            ir.CodeBlock(ir.KeywordExpression(ir.KeywordKind.RETURN, response)),
        )
        return ir.FunctionDescription(self.streaming_signature(service, method, self.access_modifier), body)

    # ===== Helpers =====

    def _signature(
        self,
        service: ServiceDescriptor,
        method: MethodDescriptor,
        input_streaming: bool,
        output_streaming: bool,
        access_modifier: ir.AccessModifier | None = None,
    ) -> ir.FunctionSignatureDescription:
        request_type = new_generic(
            "ServerRequest.Stream" if input_streaming else "ServerRequest.Single",
            [method_type(service, method, INPUT_NAME)],
        )
        response_type = new_generic(
            "ServerResponse.Stream" if output_streaming else "ServerResponse.Single",
            [method_type(service, method, OUTPUT_NAME)],
        )
        return ir.FunctionSignatureDescription(
            access_modifier,
            method.name.generated_lower_case,
            parameters=(ir.ParameterDescription("request", request_type),),
            is_async=True,
            is_throwing=True,
            return_type=response_type,
        )

    def _annotate(self, comment: str, declaration: ir.Declaration) -> ir.Declaration:
        return ir.commented(comment, ir.guarded(self.availability, declaration))
